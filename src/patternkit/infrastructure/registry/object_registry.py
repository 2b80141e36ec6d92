"""Object Registry - keyed creation with flyweight caching and prototype cloning.

Each key maps to an entry holding a zero-argument factory. Resolving a
cacheable entry builds its instance once and hands the same shared object to
every caller afterwards; callers must treat shared instances as read-only.
Prototype entries resolve to a fresh clone of a registered prototype.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import threading

from patternkit.domain.exceptions import (
    DuplicateKeyError,
    NotCloneableError,
    UnknownKeyError,
)
from patternkit.domain.prototype import clone_instance, is_cloneable


class EntryKind(str, Enum):
    """How an entry produces instances."""
    FACTORY = "factory"
    PROTOTYPE = "prototype"


_MISSING = object()


@dataclass
class Entry:
    """Container for registration information."""
    key: str
    factory: Callable[[], Any]
    cacheable: bool = False
    kind: EntryKind = EntryKind.FACTORY
    _cached: Any = field(default=_MISSING, repr=False)
    _fill_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def has_cached(self) -> bool:
        return self._cached is not _MISSING


class Registry:
    """
    Registry for keyed object factories.

    Key uniqueness is enforced: registering an existing key raises
    DuplicateKeyError unless overwrite is requested, either per call or
    through ``allow_overwrite`` for the whole registry.

    Thread-safe: entry mutation is guarded by a registry lock, and cache
    fill-on-miss by a per-entry lock so each cacheable key is constructed
    at most once.
    """

    def __init__(self, allow_overwrite: bool = False):
        self._entries: Dict[str, Entry] = {}
        self._registry_lock = threading.Lock()
        self.allow_overwrite = allow_overwrite

    def register(self,
                 key: str,
                 factory: Callable[[], Any],
                 cacheable: bool = False,
                 overwrite: Optional[bool] = None) -> Entry:
        """
        Register a factory under a key.

        Args:
            key: Identifier for the entry
            factory: Zero-argument callable producing an instance
            cacheable: Build once and share the instance (flyweight)
            overwrite: Replace an existing entry; defaults to ``allow_overwrite``

        Returns:
            The stored entry

        Raises:
            DuplicateKeyError: If the key exists and overwrite is not requested
        """
        if not callable(factory):
            raise TypeError(f"Factory for key '{key}' must be callable")
        entry = Entry(key=key, factory=factory, cacheable=cacheable)
        self._store(entry, overwrite)
        return entry

    def register_prototype(self, key: str, prototype: Any, overwrite: Optional[bool] = None) -> Entry:
        """
        Register a prototype; resolving the key returns a fresh clone of it.

        Raises:
            NotCloneableError: If the prototype declares no copy contract
            DuplicateKeyError: If the key exists and overwrite is not requested
        """
        if not is_cloneable(prototype):
            raise NotCloneableError(prototype)
        entry = Entry(
            key=key,
            factory=lambda: clone_instance(prototype),
            kind=EntryKind.PROTOTYPE,
        )
        self._store(entry, overwrite)
        return entry

    def resolve(self, key: str) -> Any:
        """
        Get an instance for a key.

        Raises:
            UnknownKeyError: If the key is not registered
        """
        entry = self._get_entry(key)

        if not entry.cacheable:
            return entry.factory()

        if entry.has_cached:
            return entry._cached

        with entry._fill_lock:
            if not entry.has_cached:
                entry._cached = entry.factory()
            return entry._cached

    def clone(self, instance: Any) -> Any:
        """
        Copy an instance through its declared copy contract.

        Raises:
            NotCloneableError: If the instance's type is not Cloneable
        """
        return clone_instance(instance)

    def unregister(self, key: str) -> None:
        with self._registry_lock:
            if key not in self._entries:
                raise UnknownKeyError(key, list(self._entries.keys()))
            del self._entries[key]

    def evict(self, key: str) -> bool:
        """Drop the cached instance of a key; returns whether one was held."""
        entry = self._get_entry(key)
        with entry._fill_lock:
            had_cached = entry.has_cached
            entry._cached = _MISSING
        return had_cached

    def get_registered_keys(self) -> List[str]:
        """Registered keys in registration order."""
        with self._registry_lock:
            return list(self._entries.keys())

    def is_registered(self, key: str) -> bool:
        with self._registry_lock:
            return key in self._entries

    def get_entry(self, key: str) -> Entry:
        return self._get_entry(key)

    def clear_registrations(self) -> None:
        """Clear all entries and their cached instances."""
        with self._registry_lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.is_registered(key)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)

    def _store(self, entry: Entry, overwrite: Optional[bool]) -> None:
        replace = self.allow_overwrite if overwrite is None else overwrite
        with self._registry_lock:
            if entry.key in self._entries and not replace:
                raise DuplicateKeyError(entry.key)
            # Overwriting keeps the key's original position
            self._entries[entry.key] = entry

    def _get_entry(self, key: str) -> Entry:
        with self._registry_lock:
            if key not in self._entries:
                raise UnknownKeyError(key, list(self._entries.keys()))
            return self._entries[key]
