"""Translation of remote commands into APNs payloads and alert text.

Pure functions; the current time is passed in by the caller.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import assert_never

from looppush.common.constants import NOTIFICATION_TTL_SECONDS
from looppush.notifications.apns import Notification
from looppush.notifications.commands import (
    CancelTemporaryOverride,
    RemoteBolusEntry,
    RemoteCarbsEntry,
    RemoteCommand,
    TemporaryOverride,
)
from looppush.notifications.validation import DeviceTarget

Payload = dict[str, str | int | float]


@dataclass(frozen=True)
class TranslatedCommand:
    payload: Payload
    alert: str
    expiration: datetime


def format_number(value: float) -> int | float:
    """Integral values become ints so they render as ``40`` rather than ``40.0``."""
    if math.isfinite(value) and float(value).is_integer():
        return int(value)
    return value


def iso_timestamp(instant: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    utc = instant.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _command_fields(remote: RemoteCommand, payload: Payload) -> str:
    """Add the command's keys to ``payload`` and return its alert text."""
    command = remote.command
    match command:
        case CancelTemporaryOverride():
            payload["cancel-temporary-override"] = "true"
            return "Cancel Temporary Override"
        case TemporaryOverride():
            payload["override-name"] = command.reason
            if command.duration_minutes is not None:
                payload["override-duration-minutes"] = command.duration_minutes
            return f"{command.reason_display} Temporary Override"
        case RemoteCarbsEntry():
            carbs = format_number(command.carbs)
            absorption = format_number(command.absorption_hours)
            payload["carbs-entry"] = carbs
            payload["absorption-time"] = absorption
            if command.otp is not None:
                payload["otp"] = command.otp
            if command.start_time is not None:
                payload["start-time"] = command.start_time
            return f"Remote Carbs Entry: {carbs} grams\nAbsorption Time: {absorption} hours"
        case RemoteBolusEntry():
            bolus = format_number(command.bolus)
            payload["bolus-entry"] = bolus
            if command.otp is not None:
                payload["otp"] = command.otp
            return f"Remote Bolus Entry: {bolus} U\n"
        case _:
            assert_never(command)


def translate(remote: RemoteCommand, remote_address: str, now: datetime) -> TranslatedCommand:
    payload: Payload = {"remote-address": remote_address}
    alert = _command_fields(remote, payload)

    if remote.notes is not None:
        payload["notes"] = remote.notes
        alert += f" - {remote.notes}"
    if remote.entered_by is not None:
        payload["entered-by"] = remote.entered_by
        alert += f" - {remote.entered_by}"

    expiration = now + timedelta(seconds=NOTIFICATION_TTL_SECONDS)
    payload["sent-at"] = iso_timestamp(now)
    payload["expiration"] = iso_timestamp(expiration)
    return TranslatedCommand(payload=payload, alert=alert, expiration=expiration)


def build_notification(translated: TranslatedCommand, target: DeviceTarget) -> Notification:
    return Notification(
        alert=translated.alert,
        topic=target.bundle_identifier,
        payload=translated.payload,
        expiry=math.floor(translated.expiration.timestamp()),
    )


__all__ = [
    "Payload",
    "TranslatedCommand",
    "format_number",
    "iso_timestamp",
    "translate",
    "build_notification",
]
