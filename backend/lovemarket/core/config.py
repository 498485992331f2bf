from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any
from urllib.parse import urlparse

from pydantic import AnyUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True, slots=True)
class MatchConfig:
    """Environment-resolved constants consumed by the match creation flow."""

    love_user_id: str
    relationships_group_id: str
    site_base_url: str
    creation_fee: int
    extra_liquidity: int
    initial_probability: int
    system_bet_amount: int
    min_bet_amount: int
    close_time: datetime
    check_both_orders: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    database_url: AnyUrl | str = Field(
        default="sqlite:///./data/lovemarket.db",
        description="SQLAlchemy compatible database URL",
    )
    site_base_url: str = Field(
        default="https://manifold.love",
        description="Public site used when linking user profiles from market descriptions",
    )
    love_user_id_prod: str = Field(
        default="tRZZ6ihugZQLXPf6aPRneGpWLmz1",
        description="System account that creates and seeds match markets in production",
    )
    love_user_id_dev: str = Field(
        default="RlXR2xa4EFfAzdCbSe45wkcdarh1",
        description="System account that creates and seeds match markets outside production",
    )
    relationships_group_id_prod: str = Field(
        default="2e9a87df-94e3-458c-bc5f-81e891b13101",
        description="Group every production match market is tagged with",
    )
    relationships_group_id_dev: str = Field(
        default="77df8782-34b7-4daa-89f4-a75c8ea844d4",
        description="Group every non-production match market is tagged with",
    )
    market_ante: int = Field(
        default=50, ge=0, description="Liquidity every new market is seeded with"
    )
    match_creation_fee: int = Field(
        default=10, ge=0, description="Amount withheld from the initiator's YES wager"
    )
    match_extra_liquidity: int = Field(
        default=950, ge=0, description="Liquidity added on top of the ante for match markets"
    )
    match_initial_probability: int = Field(
        default=15, ge=1, le=99, description="Opening probability of match markets (percent)"
    )
    match_system_bet_amount: int = Field(
        default=10000, ge=0, description="Size of the system account's NO wager"
    )
    match_min_bet_amount: int = Field(
        default=20, ge=1, description="Smallest wager accepted when creating a match"
    )
    match_close_time: datetime = Field(
        default=datetime(2100, 1, 1, tzinfo=timezone.utc),
        description="Close time applied to every match market",
    )
    match_check_both_orders: bool = Field(
        default=False,
        description="Reject a match when the pair already exists in either order",
    )
    push_enabled: bool = Field(
        default=True, description="Send mobile push notifications"
    )
    push_api_url: AnyUrl | str = Field(
        default="https://exp.host/--/api/v2/push/send",
        description="Expo-compatible push delivery endpoint",
    )
    push_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for push delivery requests"
    )
    card_cache_ttl_seconds: float = Field(
        default=30.0,
        ge=0,
        description="How long a cached market card snapshot is served; 0 disables expiry",
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def _normalize_postgres_urls(cls, value: Any) -> Any:
        if value is None or not isinstance(value, str):
            return value

        if value.startswith("postgres://"):
            return "postgresql+psycopg://" + value[len("postgres://") :]
        if value.startswith("postgresql://"):
            return "postgresql+psycopg://" + value[len("postgresql://") :]
        return value

    @field_validator("site_base_url")
    @classmethod
    def _validate_site_base_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("SITE_BASE_URL must be an absolute http(s) URL")
        return value.rstrip("/")

    @field_validator("match_close_time")
    @classmethod
    def _ensure_close_time_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_prod(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def love_user_id(self) -> str:
        return self.love_user_id_prod if self.is_prod else self.love_user_id_dev

    @property
    def relationships_group_id(self) -> str:
        if self.is_prod:
            return self.relationships_group_id_prod
        return self.relationships_group_id_dev

    def match_config(self) -> MatchConfig:
        return MatchConfig(
            love_user_id=self.love_user_id,
            relationships_group_id=self.relationships_group_id,
            site_base_url=self.site_base_url,
            creation_fee=self.match_creation_fee,
            extra_liquidity=self.match_extra_liquidity,
            initial_probability=self.match_initial_probability,
            system_bet_amount=self.match_system_bet_amount,
            min_bet_amount=self.match_min_bet_amount,
            close_time=self.match_close_time,
            check_both_orders=self.match_check_both_orders,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
