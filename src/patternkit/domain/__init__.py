"""Domain layer - error taxonomy, copy contract, state machines and history."""

from .exceptions import (
    ConfigurationError,
    DeliveryError,
    DuplicateKeyError,
    DuplicateSubscriberError,
    EmptyChainResultError,
    IllegalTransitionError,
    NotCloneableError,
    PatternKitError,
    SnapshotNotFoundError,
    UnknownKeyError,
)
from .events import StateChangedEvent
from .history import Caretaker, Command, CommandHistory, Originator, Snapshot
from .prototype import Cloneable, clone_instance, is_cloneable
from .state_machine import StateContext, StateMachine, Transition

__all__ = [
    # Errors
    "PatternKitError",
    "UnknownKeyError",
    "DuplicateKeyError",
    "NotCloneableError",
    "DuplicateSubscriberError",
    "IllegalTransitionError",
    "EmptyChainResultError",
    "DeliveryError",
    "SnapshotNotFoundError",
    "ConfigurationError",
    # Prototype
    "Cloneable",
    "clone_instance",
    "is_cloneable",
    # State
    "Transition",
    "StateMachine",
    "StateContext",
    "StateChangedEvent",
    # History
    "Command",
    "CommandHistory",
    "Snapshot",
    "Originator",
    "Caretaker",
]
