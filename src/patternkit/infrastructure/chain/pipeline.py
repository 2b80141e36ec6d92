"""Chain of handlers.

Every handler is called as ``handler(value, forward)`` and must return a
:class:`ChainResult`. It either:

- transforms and forwards: ``return forward(new_value)``
- forwards unchanged: ``return forward(value)``
- short-circuits: ``return handled(result)`` or ``return rejected(reason)``
  without calling ``forward``; later handlers never run.

Running off the end of the chain yields a ``completed`` result carrying the
last value, or an ``unhandled`` result for chains built with
``require_handler=True``. A chain never returns None.

``forward`` does not run the rest of the chain itself; it returns a marker
that hands control back to ``Chain.run``, which moves on to the successor.
Chains of any length therefore run without growing the call stack, and a
handler must return the result of ``forward`` as is.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, List, Optional

from patternkit.domain.exceptions import EmptyChainResultError


class Outcome(str, Enum):
    """How a chain run ended."""
    COMPLETED = "completed"
    HANDLED = "handled"
    REJECTED = "rejected"
    UNHANDLED = "unhandled"


@dataclass(frozen=True)
class ChainResult:
    """Explicit outcome of running a chain."""
    value: Any
    outcome: Outcome
    handled_by: Optional[str] = None
    reason: Optional[str] = None

    @property
    def has_value(self) -> bool:
        return self.outcome in (Outcome.COMPLETED, Outcome.HANDLED)

    def unwrap(self) -> Any:
        """
        Return the value of a completed or handled run.

        Raises:
            EmptyChainResultError: For rejected and unhandled runs
        """
        if not self.has_value:
            raise EmptyChainResultError(self.outcome.value, self.reason)
        return self.value


@dataclass(frozen=True)
class _Forwarded(ChainResult):
    """Marker returned by ``forward``; ``origin`` is the node that forwarded."""
    origin: Any = field(default=None, compare=False, repr=False)


Forward = Callable[[Any], ChainResult]
Handler = Callable[[Any, Forward], ChainResult]


def handled(value: Any) -> ChainResult:
    """Short-circuit with a result."""
    return ChainResult(value=value, outcome=Outcome.HANDLED)


def rejected(reason: str, value: Any = None) -> ChainResult:
    """Short-circuit with an explicit rejection."""
    return ChainResult(value=value, outcome=Outcome.REJECTED, reason=reason)


def transform(fn: Callable[[Any], Any]) -> Handler:
    """Handler that always forwards ``fn(value)``."""
    def handler(value: Any, forward: Forward) -> ChainResult:
        return forward(fn(value))
    handler.__name__ = getattr(fn, "__name__", "transform")
    return handler


def guard(predicate: Callable[[Any], bool], reason: str) -> Handler:
    """Handler that rejects values failing ``predicate`` and forwards the rest."""
    def handler(value: Any, forward: Forward) -> ChainResult:
        if not predicate(value):
            return rejected(reason, value)
        return forward(value)
    handler.__name__ = getattr(predicate, "__name__", "guard")
    return handler


def responder(predicate: Callable[[Any], bool], fn: Callable[[Any], Any]) -> Handler:
    """Handler that answers when ``predicate`` holds and forwards otherwise."""
    def handler(value: Any, forward: Forward) -> ChainResult:
        if predicate(value):
            return handled(fn(value))
        return forward(value)
    handler.__name__ = getattr(fn, "__name__", "responder")
    return handler


@dataclass
class HandlerNode:
    """One link of a chain."""
    handler: Handler
    name: str
    successor: Optional["HandlerNode"] = None


class Chain:
    """Ordered, singly linked sequence of handlers."""

    def __init__(self, require_handler: bool = False):
        self.require_handler = require_handler
        self._head: Optional[HandlerNode] = None
        self._tail: Optional[HandlerNode] = None
        self._size = 0

    @classmethod
    def of(cls, *handlers: Handler, require_handler: bool = False) -> "Chain":
        chain = cls(require_handler=require_handler)
        return chain.extend(handlers)

    def append(self, handler: Handler, name: Optional[str] = None) -> "Chain":
        """Add a handler at the tail."""
        if not callable(handler):
            raise TypeError("Chain handlers must be callable")
        node = HandlerNode(
            handler=handler,
            name=name or getattr(handler, "__name__", f"handler-{self._size}"),
        )
        if self._tail is None:
            self._head = node
        else:
            self._tail.successor = node
        self._tail = node
        self._size += 1
        return self

    def extend(self, handlers: Iterable[Handler]) -> "Chain":
        for handler in handlers:
            self.append(handler)
        return self

    def run(self, value: Any) -> ChainResult:
        """Pass a value through the chain from the head."""
        node = self._head
        while node is not None:
            result = node.handler(value, self._forwarder(node))
            if isinstance(result, _Forwarded) and result.origin is node:
                value = result.value
                node = node.successor
                continue
            return self._finish(node, result)

        outcome = Outcome.UNHANDLED if self.require_handler else Outcome.COMPLETED
        return ChainResult(value=value, outcome=outcome)

    def __call__(self, value: Any) -> ChainResult:
        return self.run(value)

    @property
    def names(self) -> List[str]:
        return [node.name for node in self]

    def __iter__(self) -> Iterator[HandlerNode]:
        node = self._head
        while node is not None:
            yield node
            node = node.successor

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"Chain({' -> '.join(self.names) or 'empty'})"

    @staticmethod
    def _forwarder(node: HandlerNode) -> Forward:
        def forward(next_value: Any) -> ChainResult:
            return _Forwarded(value=next_value, outcome=Outcome.COMPLETED, origin=node)
        return forward

    @staticmethod
    def _finish(node: HandlerNode, result: Any) -> ChainResult:
        if isinstance(result, _Forwarded):
            raise TypeError(
                f"Handler '{node.name}' returned a forward() result it did not create; "
                "return the value of your own forward(...) call"
            )
        if not isinstance(result, ChainResult):
            raise TypeError(
                f"Handler '{node.name}' returned {type(result).__name__}; "
                "handlers must return forward(...), handled(...) or rejected(...)"
            )
        if result.outcome in (Outcome.HANDLED, Outcome.REJECTED) and result.handled_by is None:
            result = replace(result, handled_by=node.name)
        return result
