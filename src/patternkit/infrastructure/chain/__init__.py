"""Chain-of-handlers pipelines."""

from .pipeline import (
    Chain,
    ChainResult,
    Forward,
    Handler,
    HandlerNode,
    Outcome,
    guard,
    handled,
    rejected,
    responder,
    transform,
)

__all__ = [
    'Chain',
    'ChainResult',
    'Forward',
    'Handler',
    'HandlerNode',
    'Outcome',
    'guard',
    'handled',
    'rejected',
    'responder',
    'transform',
]
