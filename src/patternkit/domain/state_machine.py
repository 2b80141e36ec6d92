"""State machine - strict transition tables with an explicit current state.

A :class:`StateMachine` is an immutable table of ``(state, event) -> target``
rows. ``transition`` is a pure lookup: the same pair always yields the same
target, and any pair missing from the table raises
:class:`IllegalTransitionError` instead of silently keeping or advancing the
state.

A :class:`StateContext` holds exactly one current state for a machine and
moves it forward with ``fire``.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Tuple

from patternkit.domain.events import StateChangedEvent
from patternkit.domain.exceptions import IllegalTransitionError

if TYPE_CHECKING:
    from patternkit.infrastructure.events.dispatcher import Dispatcher, PublishReport


@dataclass(frozen=True)
class Transition:
    """One row of a transition table."""
    source: str
    event: str
    target: str

    def __str__(self) -> str:
        return f"{self.source} --{self.event}--> {self.target}"


class StateMachine:
    """Immutable transition table."""

    def __init__(self, transitions: Iterable[Transition], initial: str, name: str = "machine"):
        table: Dict[Tuple[str, str], str] = {}
        states: List[str] = []

        for row in transitions:
            pair = (row.source, row.event)
            if pair in table and table[pair] != row.target:
                raise ValueError(
                    f"Conflicting transitions for ({row.source}, {row.event}): "
                    f"'{table[pair]}' and '{row.target}'"
                )
            table[pair] = row.target
            for state in (row.source, row.target):
                if state not in states:
                    states.append(state)

        if initial not in states:
            if table:
                raise ValueError(f"Initial state '{initial}' does not appear in the transition table")
            states.append(initial)

        self.name = name
        self.initial = initial
        self._table: Mapping[Tuple[str, str], str] = MappingProxyType(table)
        self._states = tuple(states)

    @classmethod
    def from_triples(cls, triples: Iterable[Tuple[str, str, str]], initial: str,
                     name: str = "machine") -> StateMachine:
        """Build a machine from ``(source, event, target)`` tuples."""
        return cls((Transition(*triple) for triple in triples), initial=initial, name=name)

    @property
    def states(self) -> Tuple[str, ...]:
        return self._states

    @property
    def transitions(self) -> List[Transition]:
        return [Transition(source, event, target) for (source, event), target in self._table.items()]

    def transition(self, state: str, event: str) -> str:
        """
        Compute the state reached from ``state`` on ``event``.

        Raises:
            IllegalTransitionError: If the pair is not declared
        """
        try:
            return self._table[(state, event)]
        except KeyError:
            raise IllegalTransitionError(state, event) from None

    def allowed_events(self, state: str) -> List[str]:
        """Events declared for a state, in table order."""
        return [event for (source, event) in self._table if source == state]

    def is_allowed(self, state: str, event: str) -> bool:
        return (state, event) in self._table

    def __repr__(self) -> str:
        return f"StateMachine(name='{self.name}', states={len(self._states)}, transitions={len(self._table)})"


class StateContext:
    """
    Holds the current state of one machine.

    If a dispatcher is given, every successful ``fire`` publishes a
    :class:`StateChangedEvent` to it; the publish report of the last move
    is kept on ``last_report``.
    """

    def __init__(self, machine: StateMachine, state: Optional[str] = None,
                 dispatcher: Optional["Dispatcher"] = None):
        self.machine = machine
        self._state = machine.initial if state is None else state
        if self._state not in machine.states:
            raise ValueError(f"Unknown state '{self._state}' for machine '{machine.name}'")
        self._dispatcher = dispatcher
        self._history: List[Transition] = []
        self.last_report: Optional["PublishReport"] = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def history(self) -> List[Transition]:
        return list(self._history)

    def can_fire(self, event: str) -> bool:
        return self.machine.is_allowed(self._state, event)

    def allowed_events(self) -> List[str]:
        return self.machine.allowed_events(self._state)

    def fire(self, event: str) -> str:
        """Apply an event to the current state and return the new state."""
        old_state = self._state
        new_state = self.machine.transition(old_state, event)
        self._state = new_state
        self._history.append(Transition(old_state, event, new_state))

        if self._dispatcher is not None:
            self.last_report = self._dispatcher.publish(
                StateChangedEvent(
                    machine=self.machine.name,
                    old_state=old_state,
                    new_state=new_state,
                    trigger=event,
                )
            )
        return new_state

    def reset(self) -> None:
        self._state = self.machine.initial
        self._history.clear()
