"""Notification and analytics persistence helpers."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lovemarket.models import AnalyticsEvent, Notification


class NotificationRepository:
    """Store notifications for later polling and realtime delivery."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def insert_notification(self, notification: Notification) -> Notification:
        self._session.add(notification)
        self._session.flush()
        return notification

    def list_for_user(
        self, user_id: str, *, limit: int = 50, offset: int = 0
    ) -> tuple[list[Notification], int]:
        query = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_time.desc(), Notification.id.asc())
            .limit(limit)
            .offset(offset)
        )
        total_query = select(func.count(Notification.id)).where(Notification.user_id == user_id)

        notifications = list(self._session.execute(query).scalars().all())
        total = self._session.execute(total_query).scalar_one()
        return notifications, total

    def mark_seen(self, user_id: str, notification_id: str) -> Notification | None:
        notification = self._session.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            return None
        notification.is_seen = True
        return notification


class AnalyticsRepository:
    """Append-only store of client analytics events."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def record_event(self, event: AnalyticsEvent) -> AnalyticsEvent:
        self._session.add(event)
        self._session.flush()
        return event

    def list_events(self, name: str | None = None) -> list[AnalyticsEvent]:
        query = select(AnalyticsEvent).order_by(AnalyticsEvent.created_time.asc())
        if name:
            query = query.where(AnalyticsEvent.name == name)
        return list(self._session.execute(query).scalars().all())


__all__ = ["AnalyticsRepository", "NotificationRepository"]
