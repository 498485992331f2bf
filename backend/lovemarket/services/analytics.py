from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping
from uuid import uuid4

from loguru import logger
from sqlalchemy.orm import Session

from lovemarket.models import AnalyticsEvent
from lovemarket.repositories import AnalyticsRepository


class AnalyticsTracker:
    """Record named client events such as market card clicks."""

    def __init__(self, session: Session) -> None:
        self._repo = AnalyticsRepository(session)

    def track(
        self,
        name: str,
        properties: Mapping[str, Any] | None = None,
        *,
        user_id: str | None = None,
    ) -> AnalyticsEvent:
        event = AnalyticsEvent(
            id=uuid4().hex,
            name=name,
            user_id=user_id,
            properties=dict(properties or {}),
            created_time=datetime.now(timezone.utc),
        )
        self._repo.record_event(event)
        logger.debug("Tracked {} for {}", name, user_id or "anonymous")
        return event


__all__ = ["AnalyticsTracker"]
