"""Event dispatch infrastructure."""

from .dispatcher import DeliveryFailure, Dispatcher, PublishReport, Subscription

__all__ = ["DeliveryFailure", "Dispatcher", "PublishReport", "Subscription"]
