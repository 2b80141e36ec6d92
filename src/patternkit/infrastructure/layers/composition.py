"""Decorator composition.

``wrap(base, layer)`` returns a callable that runs ``layer.before`` on the
call, delegates to ``base`` and runs ``layer.after`` on the result. Wrapping
an already composed object nests it, so the last layer applied is the
outermost one:

    invoke(wrap(wrap(base, a), b))
    # b.before, a.before, base, a.after, b.after

Layers never see the object they wrap, so they cannot skip delegation. The
only way to answer without delegating is a :class:`TerminalLayer` whose
``intercepts`` returns True for the call.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple
import functools

from patternkit.infrastructure.logging.logger import get_logger


@dataclass(frozen=True)
class Call:
    """Arguments of one invocation as seen by a layer."""
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def replace(self, *args: Any, **kwargs: Any) -> "Call":
        """Return a call with new positional args and merged keyword args."""
        return Call(args=args, kwargs={**self.kwargs, **kwargs})


class Layer(ABC):
    """Augmentation around an inner callable. Both hooks default to pass-through."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def before(self, call: Call) -> Call:
        return call

    def after(self, call: Call, result: Any) -> Any:
        return result


class TerminalLayer(Layer):
    """Layer allowed to answer a call without delegating inward."""

    @abstractmethod
    def intercepts(self, call: Call) -> bool:
        """Return True to answer this call with ``respond`` instead of delegating."""
        pass

    @abstractmethod
    def respond(self, call: Call) -> Any:
        pass


class FunctionLayer(Layer):
    """Layer built from plain callables."""

    def __init__(self,
                 before: Optional[Callable[[Call], Optional[Call]]] = None,
                 after: Optional[Callable[[Any], Any]] = None,
                 name: Optional[str] = None):
        self._before = before
        self._after = after
        self._name = name

    @property
    def name(self) -> str:
        return self._name or super().name

    def before(self, call: Call) -> Call:
        if self._before is None:
            return call
        updated = self._before(call)
        return call if updated is None else updated

    def after(self, call: Call, result: Any) -> Any:
        if self._after is None:
            return result
        return self._after(result)


class LoggingLayer(Layer):
    """Traces calls and results at debug level."""

    def __init__(self, logger: Any = None, label: str = "call"):
        self._logger = logger or get_logger(__name__)
        self._label = label

    def before(self, call: Call) -> Call:
        self._logger.debug(f"{self._label} invoked", call_args=call.args, call_kwargs=call.kwargs)
        return call

    def after(self, call: Call, result: Any) -> Any:
        self._logger.debug(f"{self._label} returned", result=result)
        return result


class Composed:
    """Callable produced by ``wrap``: one layer around an inner callable."""

    def __init__(self, inner: Callable[..., Any], layer: Layer):
        self._inner = inner
        self._layer = layer
        functools.update_wrapper(self, inner, updated=())

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        # Nested stacks are walked in a loop, so depth does not grow the call stack
        call = Call(args=args, kwargs=kwargs)
        entered: List[Tuple[Layer, Call]] = []
        current: Any = self

        while isinstance(current, Composed):
            layer = current._layer
            if isinstance(layer, TerminalLayer) and layer.intercepts(call):
                result = layer.respond(call)
                break
            call = layer.before(call)
            entered.append((layer, call))
            current = current._inner
        else:
            result = current(*call.args, **call.kwargs)

        for layer, seen in reversed(entered):
            result = layer.after(seen, result)
        return result

    @property
    def layer(self) -> Layer:
        return self._layer

    @property
    def inner(self) -> Callable[..., Any]:
        return self._inner

    @property
    def layers(self) -> List[Layer]:
        """Layers from outermost to innermost."""
        stack = []
        current: Any = self
        while isinstance(current, Composed):
            stack.append(current._layer)
            current = current._inner
        return stack

    @property
    def base(self) -> Callable[..., Any]:
        current: Any = self
        while isinstance(current, Composed):
            current = current._inner
        return current

    def __repr__(self) -> str:
        names = " > ".join(layer.name for layer in self.layers)
        return f"Composed({names} > {getattr(self.base, '__name__', repr(self.base))})"


def wrap(base: Callable[..., Any], layer: Layer) -> Composed:
    """Wrap a callable (or composed object) in one more layer."""
    if not callable(base):
        raise TypeError("Only callables can be wrapped")
    if not isinstance(layer, Layer):
        raise TypeError(f"Expected a Layer, got {type(layer).__name__}")
    return Composed(base, layer)


def compose(base: Callable[..., Any], *layers: Layer) -> Callable[..., Any]:
    """Apply layers in order; the first is innermost, the last outermost."""
    composed: Callable[..., Any] = base
    for layer in layers:
        composed = wrap(composed, layer)
    return composed


def invoke(composed: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    return composed(*args, **kwargs)
