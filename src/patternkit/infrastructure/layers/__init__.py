"""Decorator layer composition."""

from .composition import (
    Call,
    Composed,
    FunctionLayer,
    Layer,
    LoggingLayer,
    TerminalLayer,
    compose,
    invoke,
    wrap,
)

__all__ = [
    'Call',
    'Composed',
    'FunctionLayer',
    'Layer',
    'LoggingLayer',
    'TerminalLayer',
    'compose',
    'invoke',
    'wrap',
]
