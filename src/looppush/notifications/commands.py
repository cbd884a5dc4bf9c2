"""Remote commands parsed from Nightscout treatment events.

Each supported ``eventType`` maps to one frozen command class. Parsing
applies the required-field rules; optional fields that fail to parse are
treated as absent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, assert_never

from looppush.common.constants import DEFAULT_ABSORPTION_HOURS, EventType
from looppush.notifications.errors import EventValidationError
from looppush.notifications.validation import (
    non_empty_string,
    positive_float,
    positive_int,
)


# --- Command variants ---


@dataclass(frozen=True)
class CancelTemporaryOverride:
    pass


@dataclass(frozen=True)
class TemporaryOverride:
    reason: str
    reason_display: str
    duration_minutes: int | None = None


@dataclass(frozen=True)
class RemoteCarbsEntry:
    carbs: float
    absorption_hours: float = DEFAULT_ABSORPTION_HOURS
    otp: str | None = None
    start_time: str | None = None


@dataclass(frozen=True)
class RemoteBolusEntry:
    bolus: float
    otp: str | None = None


LoopCommand = CancelTemporaryOverride | TemporaryOverride | RemoteCarbsEntry | RemoteBolusEntry


@dataclass(frozen=True)
class RemoteCommand:
    """A parsed command plus the annotations appended to every alert."""

    command: LoopCommand
    notes: str | None = None
    entered_by: str | None = None


# --- Parsing ---


def _parse_temporary_override(event: Mapping[str, Any]) -> TemporaryOverride:
    reason = non_empty_string(event.get("reason"))
    if reason is None:
        raise EventValidationError(
            "Loop notification failed: 'reason' is required for Temporary Override.",
            field="reason",
            value=event.get("reason"),
        )
    reason_display = non_empty_string(event.get("reasonDisplay"))
    if reason_display is None:
        raise EventValidationError(
            "Loop notification failed: 'reasonDisplay' is required for Temporary Override.",
            field="reasonDisplay",
            value=event.get("reasonDisplay"),
        )
    return TemporaryOverride(
        reason=reason,
        reason_display=reason_display,
        duration_minutes=positive_int(event.get("duration")),
    )


def _parse_remote_carbs(event: Mapping[str, Any]) -> RemoteCarbsEntry:
    raw = event.get("remoteCarbs")
    carbs = positive_float(raw)
    if carbs is None:
        raise EventValidationError(
            f"Loop remote carbs failed. Incorrect carbs entry: {raw}",
            field="remoteCarbs",
            value=raw,
        )
    absorption = positive_float(event.get("remoteAbsorption"))
    return RemoteCarbsEntry(
        carbs=carbs,
        absorption_hours=absorption if absorption is not None else DEFAULT_ABSORPTION_HOURS,
        otp=non_empty_string(event.get("otp")),
        start_time=non_empty_string(event.get("created_at")),
    )


def _parse_remote_bolus(event: Mapping[str, Any]) -> RemoteBolusEntry:
    raw = event.get("remoteBolus")
    bolus = positive_float(raw)
    if bolus is None:
        raise EventValidationError(
            f"Loop remote bolus failed. Incorrect bolus entry: {raw}",
            field="remoteBolus",
            value=raw,
        )
    return RemoteBolusEntry(bolus=bolus, otp=non_empty_string(event.get("otp")))


def validate_event_fields(event: Mapping[str, Any]) -> RemoteCommand:
    """Parse a treatment event into a RemoteCommand.

    Raises EventValidationError for missing required fields and for
    unknown or missing event types.
    """
    event_type = event.get("eventType")
    try:
        kind = EventType(event_type)
    except (ValueError, TypeError):
        raise EventValidationError(
            f"Loop notification failed: Unhandled or missing event type: {event_type}",
            field="eventType",
            value=event_type,
        ) from None

    command: LoopCommand
    match kind:
        case EventType.TEMPORARY_OVERRIDE_CANCEL:
            command = CancelTemporaryOverride()
        case EventType.TEMPORARY_OVERRIDE:
            command = _parse_temporary_override(event)
        case EventType.REMOTE_CARBS_ENTRY:
            command = _parse_remote_carbs(event)
        case EventType.REMOTE_BOLUS_ENTRY:
            command = _parse_remote_bolus(event)
        case _:
            assert_never(kind)

    return RemoteCommand(
        command=command,
        notes=non_empty_string(event.get("notes")),
        entered_by=non_empty_string(event.get("enteredBy")),
    )


__all__ = [
    "CancelTemporaryOverride",
    "TemporaryOverride",
    "RemoteCarbsEntry",
    "RemoteBolusEntry",
    "LoopCommand",
    "RemoteCommand",
    "validate_event_fields",
]
