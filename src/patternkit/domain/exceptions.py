# src/patternkit/domain/exceptions.py
from typing import Any, List, Optional


class PatternKitError(Exception):
    """Base exception for all patternkit errors."""

    error_kind = "PatternKit"


class UnknownKeyError(PatternKitError):
    """Raised when a registry key has never been registered."""

    error_kind = "UnknownKey"

    def __init__(self, key: str, available: Optional[List[str]] = None):
        self.key = key
        self.available = available or []
        super().__init__(
            f"Key '{key}' is not registered. Available keys: {self.available}"
        )


class DuplicateKeyError(PatternKitError):
    """Raised when registering a key that already exists without overwrite."""

    error_kind = "DuplicateKey"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key '{key}' is already registered")


class NotCloneableError(PatternKitError):
    """Raised when an instance declares no copy contract."""

    error_kind = "NotCloneable"

    def __init__(self, instance: Any):
        self.instance_type = type(instance).__name__
        super().__init__(f"Instance of type {self.instance_type} declares no copy contract")


class DuplicateSubscriberError(PatternKitError):
    """Raised when a subscriber id is already subscribed."""

    error_kind = "DuplicateSubscriber"

    def __init__(self, subscriber_id: str):
        self.subscriber_id = subscriber_id
        super().__init__(f"Subscriber '{subscriber_id}' is already subscribed")


class IllegalTransitionError(PatternKitError):
    """Raised when a (state, event) pair is not in the transition table."""

    error_kind = "IllegalTransition"

    def __init__(self, state: str, event: str):
        self.state = state
        self.event = event
        super().__init__(f"Event '{event}' is not allowed in state '{state}'")


class EmptyChainResultError(PatternKitError):
    """Raised when unwrapping a chain result that carries no value."""

    error_kind = "EmptyChainResult"

    def __init__(self, outcome: str, reason: Optional[str] = None):
        self.outcome = outcome
        self.reason = reason
        message = f"Chain produced no value (outcome: {outcome})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DeliveryError(PatternKitError):
    """Raised on request when one or more subscribers failed during publish."""

    error_kind = "DeliveryFailed"

    def __init__(self, failures: List[Any]):
        self.failures = failures
        failed = [failure.subscriber_id for failure in failures]
        super().__init__(f"Delivery failed for subscribers: {failed}")


class SnapshotNotFoundError(PatternKitError):
    """Raised when restoring a snapshot index that was never saved."""

    error_kind = "SnapshotNotFound"

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"No snapshot at index {index} ({count} saved)")


class ConfigurationError(PatternKitError):
    """Raised when there's an issue with configuration."""

    error_kind = "InvalidConfiguration"

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []
