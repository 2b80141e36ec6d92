"""
Command handlers for the CLI.

Each handler exercises one toolkit component against strings taken from
the command line (or stdin) and returns a plain dict for formatting.
Declared errors propagate as PatternKitError subclasses; main() turns
them into exit code 1.
"""
import argparse
import itertools
import string
from typing import Any, Callable, Dict, List, Optional

from patternkit.bootstrap import Application
from patternkit.domain.prototype import Cloneable
from patternkit.domain.state_machine import StateContext, StateMachine
from patternkit.infrastructure.chain import Handler, guard, transform
from patternkit.infrastructure.layers import (
    Call,
    FunctionLayer,
    Layer,
    LoggingLayer,
    TerminalLayer,
    compose,
)


class Record(Cloneable):
    """Instance produced by the registry command's factories."""

    def __init__(self, key: str, serial: int, tags: Optional[List[str]] = None):
        self.key = key
        self.serial = serial
        self.tags = list(tags or [])

    def clone(self) -> "Record":
        return Record(self.key, self.serial, self.tags)

    def __str__(self) -> str:
        return f"{self.key}#{self.serial}"


def registry_entry_spec(value: str):
    key, _, mode = value.partition(":")
    mode = mode or "fresh"
    if not key or mode not in ("cached", "fresh", "prototype"):
        raise argparse.ArgumentTypeError(
            f"Invalid entry '{value}', expected KEY[:cached|fresh|prototype]"
        )
    return key, mode


def handle_registry(args: argparse.Namespace, app: Application) -> Dict[str, Any]:
    """Register entries, resolve keys in order and report instance sharing."""
    registry = app.registry
    serials = itertools.count(1)

    for key, mode in args.entry:
        overwrite = True if args.overwrite else None
        if mode == "prototype":
            registry.register_prototype(key, Record(key, next(serials), ["prototype"]), overwrite=overwrite)
        else:
            registry.register(
                key,
                lambda key=key: Record(key, next(serials)),
                cacheable=(mode == "cached"),
                overwrite=overwrite,
            )

    seen: Dict[str, Any] = {}
    resolutions = []
    for key in args.inputs:
        instance = registry.resolve(key)
        previous = seen.get(key)
        resolutions.append({
            "key": key,
            "instance": str(instance),
            "kind": registry.get_entry(key).kind.value,
            "cacheable": registry.get_entry(key).cacheable,
            "same_as_previous": previous is instance if previous is not None else None,
        })
        seen[key] = instance

    app.logger.info("Resolved registry keys", count=len(resolutions))
    return {"registered": registry.get_registered_keys(), "resolutions": resolutions}


def _collapse_spaces(value: str) -> str:
    return " ".join(value.split())


def _strip_punctuation(value: str) -> str:
    return value.translate(str.maketrans("", "", string.punctuation))


def _not_empty(value: str) -> bool:
    return bool(value)


STEP_CATALOG: Dict[str, Callable[[], Handler]] = {
    "upper": lambda: transform(str.upper),
    "lower": lambda: transform(str.lower),
    "trim": lambda: transform(str.strip),
    "collapse-spaces": lambda: transform(_collapse_spaces),
    "strip-punctuation": lambda: transform(_strip_punctuation),
    "reject-empty": lambda: guard(_not_empty, "empty input"),
}


def handle_chain(args: argparse.Namespace, app: Application) -> Dict[str, Any]:
    """Run each input through a chain of named text steps."""
    chain = app.new_chain(require_handler=True if args.require_handler else None)
    for step in args.step:
        chain.append(STEP_CATALOG[step](), name=step)

    results = []
    for text in args.inputs:
        result = chain.run(text)
        if args.strict:
            result.unwrap()
        results.append({
            "input": text,
            "outcome": result.outcome.value,
            "value": result.value,
            "handled_by": result.handled_by,
            "reason": result.reason,
        })
    return {"chain": chain.names, "results": results}


class DenyWordLayer(TerminalLayer):
    """Refuses any text containing a word, without delegating."""

    def __init__(self, word: str):
        self.word = word.lower()

    @property
    def name(self) -> str:
        return f"deny={self.word}"

    def intercepts(self, call: Call) -> bool:
        return self.word in str(call.args[0]).lower()

    def respond(self, call: Call) -> Any:
        return f"denied: contains '{self.word}'"


LAYER_KINDS = ("prefix", "suffix", "upper", "deny", "trace")


def layer_spec(value: str) -> str:
    kind, _, argument = value.partition("=")
    if kind not in LAYER_KINDS:
        raise argparse.ArgumentTypeError(f"Unknown layer '{value}', expected one of {list(LAYER_KINDS)}")
    if kind in ("prefix", "suffix", "deny") and not argument:
        raise argparse.ArgumentTypeError(f"Layer '{kind}' needs a value, e.g. {kind}=TEXT")
    return value


def _layer_from_spec(spec: str, app: Application) -> Layer:
    kind, _, argument = spec.partition("=")
    if kind == "prefix":
        return FunctionLayer(before=lambda call: call.replace(argument + call.args[0]), name=spec)
    if kind == "suffix":
        return FunctionLayer(after=lambda result: result + argument, name=spec)
    if kind == "upper":
        return FunctionLayer(after=str.upper, name=spec)
    if kind == "deny":
        return DenyWordLayer(argument)
    if kind == "trace":
        return LoggingLayer(logger=app.logger, label=argument or "layers")
    raise argparse.ArgumentTypeError(f"Unknown layer '{spec}'")


def handle_layers(args: argparse.Namespace, app: Application) -> Dict[str, Any]:
    """Wrap an echo function in the given layers and invoke it on each input."""
    layers = [_layer_from_spec(spec, app) for spec in args.layer]

    def echo(text: str) -> str:
        return text

    composed = compose(echo, *layers)
    results = [{"input": text, "output": composed(text)} for text in args.inputs]
    return {
        "layers": [layer.name for layer in reversed(layers)],
        "results": results,
    }


def handle_dispatch(args: argparse.Namespace, app: Application) -> Dict[str, Any]:
    """Subscribe recorders, publish each input and collect delivery reports."""
    dispatcher = app.dispatcher
    received: Dict[str, List[str]] = {}
    failing = set(args.fail)

    for subscriber_id in args.subscriber:
        received.setdefault(subscriber_id, [])

        def callback(event: str, subscriber_id: str = subscriber_id) -> None:
            if subscriber_id in failing:
                raise RuntimeError(f"{subscriber_id} refused '{event}'")
            received[subscriber_id].append(event)

        dispatcher.subscribe(subscriber_id, callback)

    reports = []
    for event in args.inputs:
        report = dispatcher.publish(event, exclude=args.exclude)
        if not report.ok:
            app.logger.warning("Delivery failures", event_payload=event, failed=report.failed_ids)
        if args.strict:
            report.raise_for_failures()
        reports.append(report.to_dict())
    return {"subscribers": dispatcher.subscriber_ids(), "reports": reports, "received": received}


def transition_spec(value: str):
    parts = value.split(":")
    if len(parts) != 3 or not all(parts):
        raise argparse.ArgumentTypeError(f"Invalid transition '{value}', expected SOURCE:EVENT:TARGET")
    return tuple(parts)


def handle_state(args: argparse.Namespace, app: Application) -> Dict[str, Any]:
    """Fire each input event against a transition table."""
    initial = args.initial or args.transition[0][0]
    machine = StateMachine.from_triples(args.transition, initial=initial, name="cli")
    context = StateContext(machine, dispatcher=app.dispatcher)

    steps = []
    for event in args.inputs:
        source = context.state
        target = context.fire(event)
        steps.append({"event": event, "from": source, "to": target})
    return {"initial": initial, "steps": steps, "final": context.state}


COMMAND_HANDLERS: Dict[str, Callable[[argparse.Namespace, Application], Dict[str, Any]]] = {
    "registry": handle_registry,
    "chain": handle_chain,
    "layers": handle_layers,
    "dispatch": handle_dispatch,
    "state": handle_state,
}
