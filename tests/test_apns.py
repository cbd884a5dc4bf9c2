"""Tests for the APNs HTTP/2 provider."""

from __future__ import annotations

import json

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from looppush.notifications.apns import (
    ApnsProvider,
    ApnsProviderOptions,
    DeliveryRejection,
    DeliveryResult,
    Notification,
    SentDelivery,
    load_signing_key,
)


# --- Helpers ---


@pytest.fixture(scope="module")
def signing_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="module")
def pem(signing_key) -> str:
    return signing_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()


def _options(pem: str, production: bool = False) -> ApnsProviderOptions:
    return ApnsProviderOptions(key=pem, key_id="KEYID12345", team_id="TEAM123456", production=production)


def _notification() -> Notification:
    return Notification(
        alert="Remote Bolus Entry: 2.5 U\n",
        topic="com.example.Loop",
        payload={"remote-address": "10.0.0.1", "bolus-entry": 2.5},
        expiry=1714565100,
    )


# --- Options Tests ---


def test_options_host():
    assert _options("k").host == "https://api.sandbox.push.apple.com"
    assert _options("k", production=True).host == "https://api.push.apple.com"


def test_load_signing_key_from_file(tmp_path, pem):
    path = tmp_path / "AuthKey_KEYID12345.p8"
    path.write_text(pem)
    assert load_signing_key(str(path)) == pem
    assert load_signing_key(pem) == pem


def test_delivery_result_accepted():
    result = DeliveryResult(sent=(SentDelivery(device="abc"),))
    assert result.accepted("abc") is True
    assert result.accepted("xyz") is False
    assert DeliveryResult().accepted("abc") is False


# --- Provider Tests ---


@pytest.mark.asyncio
async def test_provider_token_is_es256_jwt(pem, signing_key):
    provider = ApnsProvider(_options(pem), transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    token = provider.provider_token()
    assert provider.provider_token() == token
    header = jwt.get_unverified_header(token)
    assert header["alg"] == "ES256"
    assert header["kid"] == "KEYID12345"
    claims = jwt.decode(token, signing_key.public_key(), algorithms=["ES256"])
    assert claims["iss"] == "TEAM123456"
    await provider.shutdown()


@pytest.mark.asyncio
async def test_send_accepted(pem):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    provider = ApnsProvider(_options(pem), transport=httpx.MockTransport(handler))
    result = await provider.send(_notification(), ["device-abc"])
    await provider.shutdown()

    assert result == DeliveryResult(sent=(SentDelivery(device="device-abc"),))
    request = seen[0]
    assert request.method == "POST"
    assert request.url == "https://api.sandbox.push.apple.com/3/device/device-abc"
    assert request.headers["apns-topic"] == "com.example.Loop"
    assert request.headers["apns-push-type"] == "alert"
    assert request.headers["apns-priority"] == "10"
    assert request.headers["apns-expiration"] == "1714565100"
    assert request.headers["authorization"].startswith("bearer ")
    body = json.loads(request.content)
    assert body["bolus-entry"] == 2.5
    assert body["aps"]["interruption-level"] == "time-sensitive"


@pytest.mark.asyncio
async def test_send_rejected_with_reason(pem):
    transport = httpx.MockTransport(lambda r: httpx.Response(400, json={"reason": "BadDeviceToken"}))
    provider = ApnsProvider(_options(pem, production=True), transport=transport)
    result = await provider.send(_notification(), ["device-abc"])
    await provider.shutdown()

    assert result.sent == ()
    assert result.failed == (DeliveryRejection(device="device-abc", status=400, reason="BadDeviceToken"),)


@pytest.mark.asyncio
async def test_send_rejected_without_json_body(pem):
    transport = httpx.MockTransport(lambda r: httpx.Response(500, text="oops"))
    provider = ApnsProvider(_options(pem), transport=transport)
    result = await provider.send(_notification(), ["device-abc"])
    await provider.shutdown()

    assert result.failed == (DeliveryRejection(device="device-abc", status=500, reason=None),)


@pytest.mark.asyncio
async def test_send_transport_error(pem):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = ApnsProvider(_options(pem), transport=httpx.MockTransport(handler))
    result = await provider.send(_notification(), ["device-abc"])
    await provider.shutdown()

    failure = result.failed[0]
    assert failure.status is None
    assert failure.reason is None
    assert failure.error == "connection refused"


@pytest.mark.asyncio
async def test_shutdown_twice_is_harmless(pem):
    provider = ApnsProvider(_options(pem), transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    await provider.shutdown()
    await provider.shutdown()
