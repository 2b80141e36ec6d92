"""Dispatcher - synchronous publish/subscribe hub.

Subscribers are delivered to in subscription order. ``publish`` works on a
snapshot of the subscriber set taken when it starts:

- a subscriber added while a publish is running does not receive that event
- a subscriber removed while a publish is running is skipped if its turn has
  not come yet

A callback that raises does not stop delivery to the remaining subscribers;
the failure is collected in the returned :class:`PublishReport`.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import threading

from patternkit.domain.exceptions import DeliveryError, DuplicateSubscriberError

Callback = Callable[[Any], Any]


@dataclass(frozen=True)
class Subscription:
    """A subscriber id paired with its callback."""
    subscriber_id: str
    callback: Callback


@dataclass(frozen=True)
class DeliveryFailure:
    """A callback that raised while receiving an event."""
    subscriber_id: str
    error: Exception


@dataclass
class PublishReport:
    """Batch result of one publish call."""
    event: Any
    delivered: List[str] = field(default_factory=list)
    failures: List[DeliveryFailure] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_ids(self) -> List[str]:
        return [failure.subscriber_id for failure in self.failures]

    def raise_for_failures(self) -> None:
        """Raise DeliveryError if any callback failed."""
        if self.failures:
            raise DeliveryError(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event,
            "delivered": list(self.delivered),
            "failures": [
                {"subscriber_id": failure.subscriber_id, "error": str(failure.error)}
                for failure in self.failures
            ],
            "skipped": list(self.skipped),
        }


class Dispatcher:
    """Publish/subscribe hub keyed by subscriber id."""

    def __init__(self):
        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def subscribe(self, subscriber_id: str, callback: Callback) -> Subscription:
        """
        Add a subscriber at the end of the delivery order.

        Raises:
            DuplicateSubscriberError: If the id is already subscribed
        """
        if not callable(callback):
            raise TypeError(f"Callback for subscriber '{subscriber_id}' must be callable")
        subscription = Subscription(subscriber_id=subscriber_id, callback=callback)
        with self._lock:
            if subscriber_id in self._subscriptions:
                raise DuplicateSubscriberError(subscriber_id)
            self._subscriptions[subscriber_id] = subscription
        return subscription

    def unsubscribe(self, subscriber_id: str) -> bool:
        """Remove a subscriber; returns False if it was not subscribed."""
        with self._lock:
            return self._subscriptions.pop(subscriber_id, None) is not None

    def publish(self, event: Any, exclude: Optional[str] = None) -> PublishReport:
        """
        Deliver an event to every current subscriber.

        Args:
            event: Payload handed to each callback
            exclude: Subscriber id to leave out, usually the sender

        Returns:
            Report of delivered, failed and skipped subscribers
        """
        with self._lock:
            snapshot = list(self._subscriptions.values())

        report = PublishReport(event=event)
        for subscription in snapshot:
            subscriber_id = subscription.subscriber_id
            if subscriber_id == exclude:
                continue
            with self._lock:
                current = self._subscriptions.get(subscriber_id)
            if current is not subscription:
                report.skipped.append(subscriber_id)
                continue
            try:
                subscription.callback(event)
            except Exception as e:
                report.failures.append(DeliveryFailure(subscriber_id=subscriber_id, error=e))
            else:
                report.delivered.append(subscriber_id)
        return report

    def subscriber_ids(self) -> List[str]:
        with self._lock:
            return list(self._subscriptions.keys())

    def clear(self) -> None:
        with self._lock:
            self._subscriptions.clear()

    def __contains__(self, subscriber_id: object) -> bool:
        with self._lock:
            return subscriber_id in self._subscriptions

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)
