"""Loop remote-command push notifications."""

from __future__ import annotations

from looppush.notifications.apns import (
    ApnsProvider,
    ApnsProviderOptions,
    DeliveryRejection,
    DeliveryResult,
    Notification,
)
from looppush.notifications.dispatch import (
    CompletionGuard,
    LoopContext,
    NotificationDispatcher,
)
from looppush.notifications.errors import (
    ConfigurationError,
    EventValidationError,
    LoopNotificationError,
    ProfileError,
)

__all__ = [
    "ApnsProvider",
    "ApnsProviderOptions",
    "DeliveryRejection",
    "DeliveryResult",
    "Notification",
    "CompletionGuard",
    "LoopContext",
    "NotificationDispatcher",
    "ConfigurationError",
    "EventValidationError",
    "LoopNotificationError",
    "ProfileError",
]
