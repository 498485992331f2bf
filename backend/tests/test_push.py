from __future__ import annotations

import json

import httpx
import pytest

from lovemarket.models import Notification, PrivateUser
from lovemarket.services.push import PushDeliveryError, PushNotificationClient

PUSH_URL = "https://push.test/send"


def _notification() -> Notification:
    return Notification(
        id="n1",
        user_id="u1",
        reason="tagged_user",
        source_id="c1",
        source_type="new_match",
        source_contract_slug="will-a-and-b-date",
    )


def _client(handler, *, enabled: bool = True) -> PushNotificationClient:
    return PushNotificationClient(
        api_url=PUSH_URL, enabled=enabled, timeout=1, transport=httpx.MockTransport(handler)
    )


def test_send_posts_expo_message():
    """Verify that the push payload carries the token, title and notification ids."""
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == PUSH_URL
        captured.append(json.loads(request.content))
        return httpx.Response(200, json={"data": {"status": "ok", "id": "ticket"}})

    with _client(handler) as client:
        sent = client.send(
            _notification(),
            PrivateUser(id="u1", push_token="ExponentPushToken[abc]"),
            "You have a new potential match!",
            "Check out @bob now!",
        )

    assert sent is True
    message = captured[0]
    assert message["to"] == "ExponentPushToken[abc]"
    assert message["title"] == "You have a new potential match!"
    assert message["body"] == "Check out @bob now!"
    assert message["data"]["notificationId"] == "n1"
    assert message["data"]["sourceContractSlug"] == "will-a-and-b-date"


def test_send_skips_without_token_or_when_disabled():
    """Verify that nothing is posted for users without tokens or when push is off."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("push endpoint should not be called")

    assert _client(handler).send(_notification(), PrivateUser(id="u1"), "t", "b") is False
    disabled = _client(handler, enabled=False)
    assert disabled.send(_notification(), PrivateUser(id="u1", push_token="tok"), "t", "b") is False


def test_send_raises_on_http_error():
    """Verify that provider outages surface as PushDeliveryError."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"errors": ["unavailable"]})

    with pytest.raises(PushDeliveryError):
        _client(handler).send(_notification(), PrivateUser(id="u1", push_token="tok"), "t", "b")


def test_send_raises_on_error_ticket():
    """Verify that a rejected ticket is reported as a delivery failure."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"data": {"status": "error", "message": "DeviceNotRegistered"}}
        )

    with pytest.raises(PushDeliveryError, match="DeviceNotRegistered"):
        _client(handler).send(_notification(), PrivateUser(id="u1", push_token="tok"), "t", "b")
