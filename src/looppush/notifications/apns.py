"""APNs HTTP/2 transport.

One ``ApnsProvider`` is created per notification and shut down afterwards.
Requests use token-based authentication: an ES256 JWT signed with the
developer's ``.p8`` key.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, Sequence

import httpx
import jwt

from looppush.common.constants import (
    APNS_PRODUCTION_HOST,
    APNS_SANDBOX_HOST,
    INTERRUPTION_LEVEL,
)

logger = logging.getLogger(__name__)


# --- Data Models ---


@dataclass(frozen=True)
class Notification:
    """An APNs notification for a single topic."""

    alert: str
    topic: str
    payload: dict[str, str | int | float]
    expiry: int
    content_available: bool = True
    interruption_level: str = INTERRUPTION_LEVEL
    push_type: str = "alert"
    priority: int = 10

    def to_body(self) -> dict[str, Any]:
        """Render the JSON body; custom payload keys sit beside ``aps``."""
        aps: dict[str, Any] = {"alert": self.alert}
        if self.content_available:
            aps["content-available"] = 1
        aps["interruption-level"] = self.interruption_level
        return {**self.payload, "aps": aps}

    def headers(self) -> dict[str, str]:
        return {
            "apns-topic": self.topic,
            "apns-push-type": self.push_type,
            "apns-priority": str(self.priority),
            "apns-expiration": str(self.expiry),
        }


@dataclass(frozen=True)
class SentDelivery:
    device: str


@dataclass(frozen=True)
class DeliveryRejection:
    """A device APNs did not accept.

    ``status`` and ``reason`` are absent when the request never got a
    response; ``error`` then carries the transport failure.
    """

    device: str
    status: int | None = None
    reason: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class DeliveryResult:
    """Per-device outcome of a send."""

    sent: tuple[SentDelivery, ...] = ()
    failed: tuple[DeliveryRejection, ...] = ()

    def accepted(self, device: str) -> bool:
        return any(s.device == device for s in self.sent)


# --- Provider ---


@dataclass(frozen=True)
class ApnsProviderOptions:
    """Token-auth options for an APNs provider."""

    key: str
    key_id: str
    team_id: str
    production: bool = False
    timeout_seconds: float = 30.0

    @property
    def host(self) -> str:
        return APNS_PRODUCTION_HOST if self.production else APNS_SANDBOX_HOST


class PushProvider(Protocol):
    async def send(self, notification: Notification, device_tokens: Sequence[str]) -> DeliveryResult: ...

    async def shutdown(self) -> None: ...


def load_signing_key(key: str) -> str:
    """Return PEM key material; ``key`` is either the PEM text or a path to it."""
    if "-----BEGIN" in key:
        return key
    return Path(key).expanduser().read_text()


class ApnsProvider:
    """Sends notifications to APNs over HTTP/2."""

    def __init__(
        self,
        options: ApnsProviderOptions,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._options = options
        self._signing_key = load_signing_key(options.key)
        self._token: str | None = None
        self._client = httpx.AsyncClient(
            base_url=options.host,
            http2=True,
            timeout=options.timeout_seconds,
            transport=transport,
        )
        self._closed = False

    @property
    def options(self) -> ApnsProviderOptions:
        return self._options

    def provider_token(self) -> str:
        """ES256 provider token; reused for the provider's lifetime."""
        if self._token is None:
            self._token = jwt.encode(
                {"iss": self._options.team_id, "iat": int(time.time())},
                self._signing_key,
                algorithm="ES256",
                headers={"kid": self._options.key_id},
            )
        return self._token

    async def _send_one(self, notification: Notification, device: str) -> SentDelivery | DeliveryRejection:
        headers = {"authorization": f"bearer {self.provider_token()}", **notification.headers()}
        try:
            resp = await self._client.post(f"/3/device/{device}", json=notification.to_body(), headers=headers)
        except httpx.HTTPError as e:
            logger.warning("APNs request for device %s failed: %s", device, e)
            return DeliveryRejection(device=device, error=str(e) or type(e).__name__)

        if resp.status_code == 200:
            return SentDelivery(device=device)

        reason: str | None = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("reason"), str):
            reason = body["reason"]
        return DeliveryRejection(device=device, status=resp.status_code, reason=reason)

    async def send(self, notification: Notification, device_tokens: Sequence[str]) -> DeliveryResult:
        sent: list[SentDelivery] = []
        failed: list[DeliveryRejection] = []
        for device in device_tokens:
            outcome = await self._send_one(notification, device)
            if isinstance(outcome, SentDelivery):
                sent.append(outcome)
            else:
                failed.append(outcome)
        return DeliveryResult(sent=tuple(sent), failed=tuple(failed))

    async def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()


__all__ = [
    "Notification",
    "SentDelivery",
    "DeliveryRejection",
    "DeliveryResult",
    "ApnsProviderOptions",
    "PushProvider",
    "ApnsProvider",
    "load_signing_key",
]
