"""Loop remote-command notification dispatch.

Validates credentials and the device registration, translates a Nightscout
treatment event into an APNs notification, delivers it to the single Loop
device and reports the outcome exactly once through a completion callback.
No retries, batching or history: each call stands alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Callable, Mapping, Protocol, Sequence

from looppush.common.config import LoopPushConfig
from looppush.common.constants import SUCCESS_MESSAGE, UNKNOWN_ERROR, UNKNOWN_REASON
from looppush.common.schemas import Profile
from looppush.notifications.apns import (
    ApnsProvider,
    ApnsProviderOptions,
    DeliveryResult,
    PushProvider,
)
from looppush.notifications.commands import validate_event_fields
from looppush.notifications.translator import build_notification, translate
from looppush.notifications.validation import (
    DeploymentCredentials,
    validate_deployment_credentials,
    validate_device_target,
)

logger = logging.getLogger(__name__)


class Completion(Protocol):
    """``completion(error)`` on failure, ``completion(None, message)`` on success."""

    def __call__(self, error: str | None, message: str | None = None, /) -> Any: ...


ProviderFactory = Callable[[ApnsProviderOptions], PushProvider]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# --- Completion guard ---


class CompletionState(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"


class CompletionGuard:
    """Single-use wrapper around a completion callback.

    The first ``fail`` or ``succeed`` moves the guard from PENDING to
    COMPLETED and reaches the callback; later calls are no-ops.
    """

    def __init__(self, completion: Completion) -> None:
        self._completion = completion
        self._state = CompletionState.PENDING

    @property
    def state(self) -> CompletionState:
        return self._state

    @property
    def completed(self) -> bool:
        return self._state is CompletionState.COMPLETED

    def _transition(self) -> bool:
        if self._state is CompletionState.COMPLETED:
            return False
        self._state = CompletionState.COMPLETED
        return True

    def fail(self, error_message: str) -> None:
        if self._transition():
            self._completion(error_message)

    def succeed(self, message: str) -> None:
        if self._transition():
            self._completion(None, message)


# --- Context ---


@dataclass(frozen=True)
class LoopContext:
    """Profile records in upload order; only the first is consulted."""

    profiles: Sequence[Mapping[str, Any] | Profile] = ()


# --- Dispatcher ---


class NotificationDispatcher:
    """Sends Loop remote commands to the registered device through APNs."""

    def __init__(
        self,
        config: LoopPushConfig | None = None,
        context: LoopContext | None = None,
        provider_factory: ProviderFactory = ApnsProvider,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._config = config or LoopPushConfig()
        self._context = context or LoopContext()
        self._provider_factory = provider_factory
        self._clock = clock

    @property
    def config(self) -> LoopPushConfig:
        return self._config

    @property
    def context(self) -> LoopContext:
        return self._context

    def _report(self, result: DeliveryResult, device_token: str, guard: CompletionGuard) -> None:
        if result.accepted(device_token):
            logger.info("Notification accepted by APNs: %s", [s.device for s in result.sent])
            guard.succeed(SUCCESS_MESSAGE)
            return

        logger.error("Notification rejected by APNs: %s", result.failed)
        for failure in result.failed:
            logger.error(
                "Notification to device %s failed with status %s: %s",
                failure.device,
                failure.status,
                failure.reason or failure.error or UNKNOWN_REASON,
            )
        first_reason = result.failed[0].reason if result.failed else None
        guard.fail(f"APNs delivery failed: {first_reason or UNKNOWN_REASON}")

    async def send_notification(
        self,
        event: Mapping[str, Any],
        remote_address: str,
        completion: Completion,
    ) -> None:
        """Deliver one remote command; never raises, always completes once."""
        guard = CompletionGuard(completion)
        provider: PushProvider | None = None
        try:
            creds = DeploymentCredentials.from_config(self._config)
            validate_deployment_credentials(creds)
            target = validate_device_target(self._context.profiles)
            remote = validate_event_fields(event)

            translated = translate(remote, remote_address, self._clock())
            notification = build_notification(translated, target)

            provider = self._provider_factory(
                ApnsProviderOptions(
                    key=creds.key,
                    key_id=creds.key_id,
                    team_id=creds.team_id,
                    production=creds.production,
                )
            )
            result = await provider.send(notification, [target.device_token])
            self._report(result, target.device_token, guard)
        except Exception as e:
            logger.exception("Error in send_notification")
            guard.fail(str(e) or UNKNOWN_ERROR)
        finally:
            if provider is not None:
                try:
                    await provider.shutdown()
                except Exception:
                    logger.exception("APNs provider shutdown failed")


__all__ = [
    "Completion",
    "CompletionGuard",
    "CompletionState",
    "LoopContext",
    "NotificationDispatcher",
    "ProviderFactory",
    "utc_now",
]
