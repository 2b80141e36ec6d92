"""Infrastructure registry patterns."""

from .object_registry import Entry, EntryKind, Registry

__all__ = [
    'Entry',
    'EntryKind',
    'Registry',
]
