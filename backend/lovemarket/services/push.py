from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from lovemarket.core.config import settings
from lovemarket.models import Notification, PrivateUser


class PushDeliveryError(RuntimeError):
    """Raised when the push provider rejects or fails a delivery."""


class PushNotificationClient:
    """Thin wrapper around an Expo-compatible push endpoint."""

    def __init__(
        self,
        *,
        api_url: str | None = None,
        enabled: bool | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url or str(settings.push_api_url)
        self.enabled = settings.push_enabled if enabled is None else enabled
        self.timeout = timeout or settings.push_timeout_seconds
        self.client = httpx.Client(timeout=self.timeout, transport=transport)

    def send(
        self,
        notification: Notification,
        private_user: PrivateUser,
        title: str,
        body: str,
    ) -> bool:
        """Deliver a push message; returns False when delivery was skipped."""

        if not self.enabled:
            logger.debug("Push disabled; skipping notification {}", notification.id)
            return False
        if not private_user.push_token:
            logger.debug("User {} has no push token; skipping push", private_user.id)
            return False

        message: dict[str, Any] = {
            "to": private_user.push_token,
            "title": title,
            "body": body,
            "sound": "default",
            "data": {
                "notificationId": notification.id,
                "sourceType": notification.source_type,
                "sourceId": notification.source_id,
                "sourceContractSlug": notification.source_contract_slug,
            },
        }
        try:
            response = self.client.post(self.api_url, json=message)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise PushDeliveryError(f"Push delivery failed for {notification.id}: {exc}") from exc

        payload = response.json()
        ticket = payload.get("data") if isinstance(payload, dict) else None
        if isinstance(ticket, dict) and ticket.get("status") == "error":
            raise PushDeliveryError(
                f"Push provider rejected {notification.id}: {ticket.get('message')}"
            )
        logger.info("Sent push notification {} to {}", notification.id, private_user.id)
        return True

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "PushNotificationClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["PushDeliveryError", "PushNotificationClient"]
