"""Credential, device and field validation for Loop notifications.

Field helpers return a definite value or ``None``. Required fields turn
``None`` into a validation error; optional fields fall back to a default.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from pydantic import ValidationError

from looppush.common.config import LoopPushConfig
from looppush.common.constants import DEVELOPER_TEAM_ID_LENGTH
from looppush.common.schemas import Profile
from looppush.notifications.errors import ConfigurationError, ProfileError

# Leading numeric prefix, so "40g" reads as 40 and "abc" reads as nothing
_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"[+-]?\d+")


# --- Field helpers ---


def non_empty_string(value: Any) -> str | None:
    """Return ``value`` if it is a string with non-whitespace content."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def parse_float(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    match = _FLOAT_PREFIX.match(str(value).strip())
    if not match:
        return None
    return float(match.group().replace("Infinity", "inf"))


def parse_int(value: Any) -> int | None:
    """Integer parse; fractional input is truncated."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return math.trunc(value) if math.isfinite(value) else None
    match = _INT_PREFIX.match(str(value).strip())
    return int(match.group()) if match else None


def positive_float(value: Any) -> float | None:
    """Finite float greater than zero, else ``None``."""
    parsed = parse_float(value)
    if parsed is None or not math.isfinite(parsed) or parsed <= 0:
        return None
    return parsed


def positive_int(value: Any) -> int | None:
    parsed = parse_int(value)
    if parsed is None or parsed <= 0:
        return None
    return parsed


# --- Deployment credentials ---


@dataclass(frozen=True)
class DeploymentCredentials:
    """APNs token-auth credentials and deployment mode."""

    key: str
    key_id: str
    team_id: str
    production: bool = False

    @classmethod
    def from_config(cls, config: LoopPushConfig) -> DeploymentCredentials:
        return cls(
            key=config.apns_key,
            key_id=config.apns_key_id,
            team_id=config.developer_team_id,
            production=config.production,
        )


def _require_setting(value: str | None, name: str) -> None:
    if not value:
        raise ConfigurationError(f"Loop notification failed: {name} not set.", setting=name)


def validate_deployment_credentials(creds: DeploymentCredentials) -> None:
    """Raise ConfigurationError unless key, key id and a 10-char team id are set."""
    _require_setting(creds.key, "LOOP_APNS_KEY")
    _require_setting(creds.key_id, "LOOP_APNS_KEY_ID")
    _require_setting(creds.team_id, "LOOP_DEVELOPER_TEAM_ID")

    if len(creds.team_id) != DEVELOPER_TEAM_ID_LENGTH:
        raise ConfigurationError(
            "Loop notification failed: LOOP_DEVELOPER_TEAM_ID must be a 10-character string.",
            setting="LOOP_DEVELOPER_TEAM_ID",
        )


# --- Device target ---


@dataclass(frozen=True)
class DeviceTarget:
    """The single device a notification is delivered to."""

    device_token: str
    bundle_identifier: str


def validate_device_target(profiles: Sequence[Mapping[str, Any] | Profile] | None) -> DeviceTarget:
    """Read the device registration from the first profile.

    Later profiles are never consulted, even when the first one lacks
    ``loopSettings``.
    """
    missing_settings = "Loop notification failed: Could not find loopSettings in profile."
    if not profiles:
        raise ProfileError(missing_settings, field="loopSettings")

    first = profiles[0]
    if not isinstance(first, Profile):
        try:
            first = Profile.model_validate(first)
        except ValidationError as e:
            raise ProfileError(missing_settings, field="loopSettings") from e

    loop_settings = first.loop_settings
    if loop_settings is None:
        raise ProfileError(missing_settings, field="loopSettings")

    device_token = non_empty_string(loop_settings.device_token)
    if device_token is None:
        raise ProfileError(
            "Loop notification failed: Could not find deviceToken in loopSettings.",
            field="deviceToken",
        )

    bundle_identifier = non_empty_string(loop_settings.bundle_identifier)
    if bundle_identifier is None:
        raise ProfileError(
            "Loop notification failed: Could not find bundleIdentifier in loopSettings.",
            field="bundleIdentifier",
        )

    return DeviceTarget(device_token=device_token, bundle_identifier=bundle_identifier)


__all__ = [
    "DeploymentCredentials",
    "DeviceTarget",
    "non_empty_string",
    "parse_float",
    "parse_int",
    "positive_float",
    "positive_int",
    "validate_deployment_credentials",
    "validate_device_target",
]
