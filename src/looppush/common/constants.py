"""Constants and enums for Loop remote-command notifications."""

from enum import StrEnum
from typing import Final


class EventType(StrEnum):
    """Remote-command event types understood by Loop."""

    TEMPORARY_OVERRIDE_CANCEL = "Temporary Override Cancel"
    TEMPORARY_OVERRIDE = "Temporary Override"
    REMOTE_CARBS_ENTRY = "Remote Carbs Entry"
    REMOTE_BOLUS_ENTRY = "Remote Bolus Entry"


class PushServerEnvironment(StrEnum):
    """APNs deployment modes."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


# Notifications expire five minutes after they are sent
NOTIFICATION_TTL_SECONDS: Final[int] = 300

# Absorption time (hours) used when remoteAbsorption is absent or invalid
DEFAULT_ABSORPTION_HOURS: Final[float] = 3.0

DEVELOPER_TEAM_ID_LENGTH: Final[int] = 10

INTERRUPTION_LEVEL: Final[str] = "time-sensitive"

SUCCESS_MESSAGE: Final[str] = "Notification was successfully accepted by APNs."
UNKNOWN_REASON: Final[str] = "Unknown reason"
UNKNOWN_ERROR: Final[str] = "Unknown error"

APNS_PRODUCTION_HOST: Final[str] = "https://api.push.apple.com"
APNS_SANDBOX_HOST: Final[str] = "https://api.sandbox.push.apple.com"

__all__ = [
    "EventType",
    "PushServerEnvironment",
    "NOTIFICATION_TTL_SECONDS",
    "DEFAULT_ABSORPTION_HOURS",
    "DEVELOPER_TEAM_ID_LENGTH",
    "INTERRUPTION_LEVEL",
    "SUCCESS_MESSAGE",
    "UNKNOWN_REASON",
    "UNKNOWN_ERROR",
    "APNS_PRODUCTION_HOST",
    "APNS_SANDBOX_HOST",
]
