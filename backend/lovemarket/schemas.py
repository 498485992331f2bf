from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models use camelCase keys while Python code stays snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(CamelModel):
    id: str
    username: str
    name: str
    avatar_url: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Contract(CamelModel):
    id: str
    slug: str
    question: str
    description: str | None = None
    creator_id: str
    creator_username: str
    creator_name: str
    creator_avatar_url: str | None = None
    outcome_type: str
    mechanism: str
    visibility: str
    created_time: datetime
    close_time: datetime | None = None
    resolution: str | None = None
    resolution_time: datetime | None = None
    resolution_probability: float | None = None
    resolution_value: float | None = None
    initial_probability: float | None = None
    p: float | None = None
    pool: dict[str, float] | None = None
    prob: float | None = None
    total_liquidity: float = 0
    volume: float = 0
    volume_24_hours: float = 0
    group_ids: list[str] = Field(default_factory=list)
    lover_user_id1: str | None = None
    lover_user_id2: str | None = None
    data: dict[str, Any] | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @field_validator("group_ids", mode="before")
    @classmethod
    def _default_group_ids(cls, value: Any) -> list[str]:
        if value is None:
            return []
        return list(value)


class CreateMatchRequest(CamelModel):
    user_id1: str = Field(min_length=1)
    user_id2: str = Field(min_length=1)
    bet_amount: float = Field(ge=20)


class CreateMatchResponse(CamelModel):
    success: bool = True
    contract: Contract


class PlaceBetRequest(CamelModel):
    contract_id: str = Field(min_length=1)
    amount: float = Field(gt=0)
    outcome: Literal["YES", "NO"]


class Bet(CamelModel):
    id: str
    contract_id: str
    user_id: str
    outcome: str
    amount: float
    shares: float
    prob_before: float
    prob_after: float
    is_api: bool
    created_time: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Notification(CamelModel):
    id: str
    user_id: str
    reason: str
    created_time: datetime
    is_seen: bool
    source_id: str
    source_type: str
    source_update_type: str | None = None
    source_user_name: str | None = None
    source_user_username: str | None = None
    source_user_avatar_url: str | None = None
    source_text: str | None = None
    source_contract_slug: str | None = None
    source_contract_id: str | None = None
    source_contract_title: str | None = None
    source_contract_creator_username: str | None = None
    data: dict[str, Any] | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class NotificationList(BaseModel):
    total: int
    items: list[Notification]


class TrackEventRequest(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    properties: dict[str, Any] = Field(default_factory=dict)


class RenderNode(BaseModel):
    tag: str
    classes: list[str] = Field(default_factory=list)
    attrs: dict[str, str] = Field(default_factory=dict)
    text: str | None = None
    children: list["RenderNode"] = Field(default_factory=list)
