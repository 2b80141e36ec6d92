"""Prototype copy contract.

Types opt into cloning by subclassing :class:`Cloneable` and implementing
``clone()`` as a deliberate field-by-field construction. Owned sub-objects
must be copied inside ``clone()``; nothing is copied implicitly.
"""
from abc import ABC, abstractmethod
from typing import Any, TypeVar

from patternkit.domain.exceptions import NotCloneableError

T = TypeVar("T", bound="Cloneable")


class Cloneable(ABC):
    """Capability declaring that a type knows how to copy itself."""

    @abstractmethod
    def clone(self: T) -> T:
        """Return an independent copy of this instance."""
        pass


def is_cloneable(instance: Any) -> bool:
    """Check whether an instance declares a copy contract."""
    return isinstance(instance, Cloneable)


def clone_instance(instance: Any) -> Any:
    """
    Copy an instance through its declared copy contract.

    Args:
        instance: Object to copy

    Returns:
        Independent copy produced by ``instance.clone()``

    Raises:
        NotCloneableError: If the instance's type is not Cloneable
    """
    if not is_cloneable(instance):
        raise NotCloneableError(instance)
    return instance.clone()
