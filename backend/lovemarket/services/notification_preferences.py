"""Resolve which channels a user wants a given notification on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from lovemarket.models import PrivateUser

CHANNELS = ("browser", "email", "mobile")

# Notification reasons that share a preference toggle with another reason.
REASON_TO_PREFERENCE: Mapping[str, str] = {
    "tagged_user": "tagged_user",
    "new_match": "tagged_user",
}

DEFAULT_PREFERENCES: Mapping[str, tuple[str, ...]] = {
    "tagged_user": ("browser", "email", "mobile"),
}


@dataclass(frozen=True, slots=True)
class NotificationDestinations:
    send_to_browser: bool
    send_to_mobile: bool
    send_to_email: bool
    notification_preference: str


def get_notification_destinations(
    private_user: PrivateUser, reason: str
) -> NotificationDestinations:
    preference = REASON_TO_PREFERENCE.get(reason, reason)
    configured = (private_user.notification_preferences or {}).get(preference)
    if configured is None:
        configured = DEFAULT_PREFERENCES.get(preference, ())
    opted_out = set(private_user.opt_out_all or [])
    enabled = {channel for channel in configured if channel in CHANNELS} - opted_out
    return NotificationDestinations(
        send_to_browser="browser" in enabled,
        send_to_mobile="mobile" in enabled,
        send_to_email="email" in enabled,
        notification_preference=preference,
    )


__all__ = ["NotificationDestinations", "get_notification_destinations"]
