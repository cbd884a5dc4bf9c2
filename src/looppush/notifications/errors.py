"""Loop notification error types.

Every error raised while preparing a notification is caught by the
dispatcher and reported through the completion callback as ``str(error)``.
"""

from __future__ import annotations

from typing import Any


class LoopNotificationError(Exception):
    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ConfigurationError(LoopNotificationError):
    """Missing or invalid APNs deployment credentials."""

    def __init__(self, message: str, setting: str | None = None):
        super().__init__("configuration_error", message, {"setting": setting} if setting else None)
        self.setting = setting


class ProfileError(LoopNotificationError):
    """Missing profile or device registration data."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__("profile_error", message, {"field": field} if field else None)
        self.field = field


class EventValidationError(LoopNotificationError):
    """Missing or malformed event fields, or an unhandled event type."""

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        super().__init__("event_validation_error", message, {"field": field, "value": value} if field else None)
        self.field = field
        self.value = value


__all__ = [
    "LoopNotificationError",
    "ConfigurationError",
    "ProfileError",
    "EventValidationError",
]
