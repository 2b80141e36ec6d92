"""Undo/redo command history and snapshot caretaking."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from patternkit.domain.exceptions import SnapshotNotFoundError


class Command(ABC):
    """Reversible operation."""

    @abstractmethod
    def execute(self) -> None:
        pass

    @abstractmethod
    def undo(self) -> None:
        pass


class CommandHistory:
    """
    Executes commands and keeps undo/redo stacks.

    Executing a new command clears the redo stack. ``undo`` and ``redo``
    return the command they moved, or None when there is nothing to move.
    A command whose ``execute`` or ``undo`` raises stays where it was.
    """

    def __init__(self, limit: Optional[int] = None):
        if limit is not None and limit < 1:
            raise ValueError("History limit must be positive")
        self._limit = limit
        self._done: List[Command] = []
        self._undone: List[Command] = []

    def execute(self, command: Command) -> None:
        command.execute()
        self._done.append(command)
        self._undone.clear()
        if self._limit is not None and len(self._done) > self._limit:
            del self._done[0]

    def undo(self) -> Optional[Command]:
        if not self._done:
            return None
        command = self._done[-1]
        command.undo()
        self._done.pop()
        self._undone.append(command)
        return command

    def redo(self) -> Optional[Command]:
        if not self._undone:
            return None
        command = self._undone[-1]
        command.execute()
        self._undone.pop()
        self._done.append(command)
        return command

    @property
    def can_undo(self) -> bool:
        return bool(self._done)

    @property
    def can_redo(self) -> bool:
        return bool(self._undone)

    def __len__(self) -> int:
        return len(self._done)


@dataclass(frozen=True)
class Snapshot:
    """Captured state of an originator."""
    state: Any
    label: Optional[str] = None
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Originator(ABC):
    """Object whose state can be captured and restored."""

    @abstractmethod
    def save(self) -> Snapshot:
        pass

    @abstractmethod
    def restore(self, snapshot: Snapshot) -> None:
        pass


class Caretaker:
    """Stores snapshots without inspecting them."""

    def __init__(self):
        self._snapshots: List[Snapshot] = []

    def save(self, originator: Originator, label: Optional[str] = None) -> Snapshot:
        snapshot = originator.save()
        if label is not None:
            snapshot = Snapshot(state=snapshot.state, label=label, taken_at=snapshot.taken_at)
        self._snapshots.append(snapshot)
        return snapshot

    def get(self, index: int) -> Snapshot:
        if not 0 <= index < len(self._snapshots):
            raise SnapshotNotFoundError(index, len(self._snapshots))
        return self._snapshots[index]

    def restore(self, originator: Originator, index: int) -> Snapshot:
        snapshot = self.get(index)
        originator.restore(snapshot)
        return snapshot

    @property
    def snapshots(self) -> List[Snapshot]:
        return list(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)
