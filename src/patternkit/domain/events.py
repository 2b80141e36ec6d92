# src/patternkit/domain/events.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StateChangedEvent:
    """Event raised when a state context moves to a new state."""
    machine: str
    old_state: str
    new_state: str
    trigger: str
    details: Optional[Dict[str, Any]] = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__
