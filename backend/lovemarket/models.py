from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class OutcomeType(str, Enum):
    BINARY = "BINARY"
    PSEUDO_NUMERIC = "PSEUDO_NUMERIC"
    NUMERIC = "NUMERIC"
    FREE_RESPONSE = "FREE_RESPONSE"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    BOUNTY = "BOUNTY"


class Mechanism(str, Enum):
    CPMM = "cpmm-1"
    DPM = "dpm-2"
    NONE = "none"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)
    balance: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    created_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    private_user: Mapped[PrivateUser | None] = relationship(
        "PrivateUser", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    lover: Mapped[Lover | None] = relationship(
        "Lover", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )


class PrivateUser(Base):
    __tablename__ = "private_users"

    id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), primary_key=True)
    blocked_user_ids: Mapped[list | None] = mapped_column(JSON, nullable=True)
    notification_preferences: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    opt_out_all: Mapped[list | None] = mapped_column(JSON, nullable=True)
    push_token: Mapped[str | None] = mapped_column(String, nullable=True)

    user: Mapped[User] = relationship("User", back_populates="private_user")


class Lover(Base):
    __tablename__ = "lovers"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False, unique=True)
    created_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    user: Mapped[User] = relationship("User", back_populates="lover")


class Contract(Base):
    __tablename__ = "contracts"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    creator_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    creator_username: Mapped[str] = mapped_column(String, nullable=False)
    creator_name: Mapped[str] = mapped_column(String, nullable=False)
    creator_avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)
    outcome_type: Mapped[str] = mapped_column(String, nullable=False)
    mechanism: Mapped[str] = mapped_column(String, nullable=False, default=Mechanism.CPMM.value)
    visibility: Mapped[str] = mapped_column(String, nullable=False, default="public")
    created_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    close_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution: Mapped[str | None] = mapped_column(String, nullable=True)
    resolution_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution_probability: Mapped[float | None] = mapped_column(Float, nullable=True)
    resolution_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    initial_probability: Mapped[float | None] = mapped_column(Float, nullable=True)
    p: Mapped[float | None] = mapped_column(Float, nullable=True)
    pool: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    prob: Mapped[float | None] = mapped_column(Float, nullable=True)
    total_liquidity: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    volume: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    volume_24_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    group_ids: Mapped[list | None] = mapped_column(JSON, nullable=True)
    lover_user_id1: Mapped[str | None] = mapped_column(String, nullable=True)
    lover_user_id2: Mapped[str | None] = mapped_column(String, nullable=True)
    data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    bets: Mapped[list[Bet]] = relationship(
        "Bet", back_populates="contract", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_contracts_lover_pair", "lover_user_id1", "lover_user_id2"),
    )


class Bet(Base):
    __tablename__ = "bets"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    contract_id: Mapped[str] = mapped_column(String, ForeignKey("contracts.id"), nullable=False)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    outcome: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    shares: Mapped[float] = mapped_column(Float, nullable=False)
    prob_before: Mapped[float] = mapped_column(Float, nullable=False)
    prob_after: Mapped[float] = mapped_column(Float, nullable=False)
    is_api: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    contract: Mapped[Contract] = relationship("Contract", back_populates="bets")


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(String, nullable=False)
    created_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    is_seen: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    source_id: Mapped[str] = mapped_column(String, nullable=False)
    source_type: Mapped[str] = mapped_column(String, nullable=False)
    source_update_type: Mapped[str | None] = mapped_column(String, nullable=True)
    source_user_name: Mapped[str | None] = mapped_column(String, nullable=True)
    source_user_username: Mapped[str | None] = mapped_column(String, nullable=True)
    source_user_avatar_url: Mapped[str | None] = mapped_column(String, nullable=True)
    source_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_contract_slug: Mapped[str | None] = mapped_column(String, nullable=True)
    source_contract_id: Mapped[str | None] = mapped_column(String, nullable=True)
    source_contract_title: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_contract_creator_username: Mapped[str | None] = mapped_column(String, nullable=True)
    data: Mapped[dict | None] = mapped_column(JSON, nullable=True)


class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    properties: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
