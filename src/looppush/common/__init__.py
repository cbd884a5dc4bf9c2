"""Common configuration, constants and schemas for looppush."""

from looppush.common.config import LoopPushConfig, configure_logging
from looppush.common.constants import (
    DEFAULT_ABSORPTION_HOURS,
    NOTIFICATION_TTL_SECONDS,
    EventType,
    PushServerEnvironment,
)
from looppush.common.schemas import LoopSettings, Profile

__all__ = [
    "LoopPushConfig",
    "configure_logging",
    "EventType",
    "PushServerEnvironment",
    "NOTIFICATION_TTL_SECONDS",
    "DEFAULT_ABSORPTION_HOURS",
    "LoopSettings",
    "Profile",
]
