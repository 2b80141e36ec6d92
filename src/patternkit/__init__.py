"""patternkit - Root Package.

A small toolkit of composable behaviors distilled from the classic
object-oriented design patterns:

Key Components:
    - infrastructure.registry: keyed creation with flyweight caching and prototype cloning
    - infrastructure.chain: chain-of-handlers pipelines with explicit outcomes
    - infrastructure.layers: decorator stacks with onion semantics
    - infrastructure.events: synchronous publish/subscribe dispatcher
    - domain: error taxonomy, state machines, command history and snapshots
    - bootstrap: the application context passed explicitly to callers
"""

from ._package import PACKAGE_NAME, __version__
from .bootstrap import Application, create_application
from .domain import (
    Caretaker,
    Cloneable,
    Command,
    CommandHistory,
    ConfigurationError,
    DeliveryError,
    DuplicateKeyError,
    DuplicateSubscriberError,
    EmptyChainResultError,
    IllegalTransitionError,
    NotCloneableError,
    Originator,
    PatternKitError,
    Snapshot,
    SnapshotNotFoundError,
    StateChangedEvent,
    StateContext,
    StateMachine,
    Transition,
    UnknownKeyError,
)
from .infrastructure.chain import Chain, ChainResult, Outcome, guard, handled, rejected, responder, transform
from .infrastructure.events import Dispatcher, PublishReport
from .infrastructure.layers import (
    Call,
    FunctionLayer,
    Layer,
    LoggingLayer,
    TerminalLayer,
    compose,
    invoke,
    wrap,
)
from .infrastructure.registry import Registry

__package_name__ = PACKAGE_NAME

__all__ = [
    "__version__",
    "Application",
    "create_application",
    # Registry
    "Registry",
    "Cloneable",
    # Chain
    "Chain",
    "ChainResult",
    "Outcome",
    "handled",
    "rejected",
    "transform",
    "guard",
    "responder",
    # Layers
    "Call",
    "Layer",
    "TerminalLayer",
    "FunctionLayer",
    "LoggingLayer",
    "wrap",
    "compose",
    "invoke",
    # Dispatch
    "Dispatcher",
    "PublishReport",
    # State
    "StateMachine",
    "StateContext",
    "Transition",
    "StateChangedEvent",
    # History
    "Command",
    "CommandHistory",
    "Originator",
    "Snapshot",
    "Caretaker",
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
]
