"""Repository abstractions for database interactions."""

from .contract_repository import ContractRepository
from .notification_repository import AnalyticsRepository, NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "AnalyticsRepository",
    "ContractRepository",
    "NotificationRepository",
    "UserRepository",
]
