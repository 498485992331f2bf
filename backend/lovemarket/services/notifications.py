"""New-match notification fan-out across browser and mobile channels."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from loguru import logger
from sqlalchemy.orm import Session

from lovemarket.models import Contract, Notification, PrivateUser, User
from lovemarket.repositories import NotificationRepository, UserRepository

from .notification_preferences import get_notification_destinations
from .push import PushNotificationClient

NEW_MATCH_REASON = "tagged_user"
NEW_MATCH_SOURCE_TYPE = "new_match"
NEW_MATCH_PUSH_TITLE = "You have a new potential match!"


@dataclass(slots=True)
class ChannelResult:
    channel: str
    attempted: bool
    ok: bool = True
    error: str | None = None


@dataclass(slots=True)
class NotificationDelivery:
    recipient_id: str
    notification: Notification | None
    channels: list[ChannelResult] = field(default_factory=list)
    pending_push: PrivateUser | None = None

    @property
    def skipped(self) -> bool:
        return self.notification is None

    @property
    def failures(self) -> list[ChannelResult]:
        return [result for result in self.channels if result.attempted and not result.ok]


def build_new_match_notification(
    private_user: PrivateUser,
    creator: User,
    matched_user: User,
    contract: Contract,
) -> Notification:
    source_text = f"Check out @{matched_user.username} now!"
    return Notification(
        id=uuid4().hex,
        user_id=private_user.id,
        reason=NEW_MATCH_REASON,
        created_time=datetime.now(timezone.utc),
        is_seen=False,
        source_id=contract.id,
        source_type=NEW_MATCH_SOURCE_TYPE,
        source_update_type="created",
        source_user_name=creator.name,
        source_user_username=creator.username,
        source_user_avatar_url=creator.avatar_url,
        source_text=source_text,
        source_contract_slug=contract.slug,
        source_contract_id=contract.id,
        source_contract_title=contract.question,
        source_contract_creator_username=contract.creator_username,
        data={
            "matchUserId": matched_user.id,
            "matchUserUsername": matched_user.username,
            "matchUserAvatarUrl": matched_user.avatar_url,
            "matchUserName": matched_user.name,
        },
    )


class NotificationService:
    """Create notifications and hand them to each enabled delivery channel.

    With ``defer_push`` set, mobile sends are held on each delivery until
    :meth:`send_pending_pushes` runs, so callers can push only after their
    transaction commits.
    """

    def __init__(
        self,
        session: Session,
        push_client: PushNotificationClient | None = None,
        *,
        defer_push: bool = False,
    ) -> None:
        self._session = session
        self._users = UserRepository(session)
        self._notifications = NotificationRepository(session)
        self._push_client = push_client
        self._defer_push = defer_push

    def create_new_match_notification(
        self,
        for_user: User,
        creator: User,
        matched_user: User,
        contract: Contract,
    ) -> NotificationDelivery:
        private_user = self._users.get_private_user(for_user.id)
        if private_user is None:
            logger.warning("No private user for {}; skipping match notification", for_user.id)
            return NotificationDelivery(recipient_id=for_user.id, notification=None)

        destinations = get_notification_destinations(private_user, NEW_MATCH_REASON)
        notification = build_new_match_notification(private_user, creator, matched_user, contract)
        delivery = NotificationDelivery(recipient_id=for_user.id, notification=notification)

        delivery.channels.append(
            self._deliver_to_browser(notification, enabled=destinations.send_to_browser)
        )
        if self._defer_push and destinations.send_to_mobile and self._push_client is not None:
            delivery.pending_push = private_user
        else:
            delivery.channels.append(
                self._deliver_to_mobile(
                    notification, private_user, enabled=destinations.send_to_mobile
                )
            )
        return delivery

    def send_pending_pushes(self, deliveries: list[NotificationDelivery]) -> list[ChannelResult]:
        results: list[ChannelResult] = []
        for delivery in deliveries:
            if delivery.pending_push is None or delivery.notification is None:
                continue
            result = self._deliver_to_mobile(
                delivery.notification, delivery.pending_push, enabled=True
            )
            delivery.channels.append(result)
            delivery.pending_push = None
            results.append(result)
        return results

    def _deliver_to_browser(self, notification: Notification, *, enabled: bool) -> ChannelResult:
        if not enabled:
            return ChannelResult(channel="browser", attempted=False)
        try:
            with self._session.begin_nested():
                self._notifications.insert_notification(notification)
        except Exception as exc:
            logger.warning(
                "Failed to store notification {} for {}: {}",
                notification.id,
                notification.user_id,
                exc,
            )
            return ChannelResult(channel="browser", attempted=True, ok=False, error=str(exc))
        return ChannelResult(channel="browser", attempted=True)

    def _deliver_to_mobile(
        self,
        notification: Notification,
        private_user: PrivateUser,
        *,
        enabled: bool,
    ) -> ChannelResult:
        if not enabled or self._push_client is None:
            return ChannelResult(channel="mobile", attempted=False)
        try:
            sent = self._push_client.send(
                notification,
                private_user,
                NEW_MATCH_PUSH_TITLE,
                notification.source_text or "",
            )
        except Exception as exc:
            logger.warning(
                "Failed to push notification {} to {}: {}",
                notification.id,
                notification.user_id,
                exc,
            )
            return ChannelResult(channel="mobile", attempted=True, ok=False, error=str(exc))
        return ChannelResult(channel="mobile", attempted=sent)


__all__ = [
    "ChannelResult",
    "NotificationDelivery",
    "NotificationService",
    "build_new_match_notification",
]
