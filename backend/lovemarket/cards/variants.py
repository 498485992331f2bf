"""Closed set of market variants the card renderer understands.

Every outcome type gets its own frozen dataclass carrying only the fields it
needs. Records with an unrecognized outcome type become ``UnknownMarket`` so
rendering can show an explicit fallback instead of silently dropping them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Union

from lovemarket.domain import get_cpmm_probability
from lovemarket.models import OutcomeType


@dataclass(frozen=True, slots=True)
class Answer:
    id: str
    text: str
    prob: float


@dataclass(frozen=True, slots=True, kw_only=True)
class MarketBase:
    id: str
    slug: str
    question: str
    creator_username: str
    creator_name: str
    creator_avatar_url: str | None = None
    created_time: datetime | None = None
    close_time: datetime | None = None
    resolution: str | None = None
    resolution_time: datetime | None = None
    volume: float = 0.0
    volume_24_hours: float = 0.0
    group_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class BinaryMarket(MarketBase):
    prob: float
    resolution_probability: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PseudoNumericMarket(MarketBase):
    prob: float
    min: float
    max: float
    is_log_scale: bool = False
    resolution_value: float | None = None
    resolution_probability: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class NumericMarket(MarketBase):
    min: float
    max: float
    bucket_count: int
    bucket_probabilities: tuple[float, ...] = ()
    resolution_value: float | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class FreeResponseMarket(MarketBase):
    answers: tuple[Answer, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class MultipleChoiceMarket(MarketBase):
    answers: tuple[Answer, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class BountyMarket(MarketBase):
    prize_total: float = 0.0


@dataclass(frozen=True, slots=True, kw_only=True)
class UnknownMarket(MarketBase):
    outcome_type: str


Market = Union[
    BinaryMarket,
    PseudoNumericMarket,
    NumericMarket,
    FreeResponseMarket,
    MultipleChoiceMarket,
    BountyMarket,
    UnknownMarket,
]
AnswerMarket = Union[FreeResponseMarket, MultipleChoiceMarket]


def _get(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _as_utc(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        # Epoch milliseconds, as stored by the JavaScript clients.
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _float(value: Any, default: float | None = None) -> float | None:
    if value is None:
        return default
    return float(value)


def _probability(record: Any) -> float:
    prob = _get(record, "prob")
    if prob is not None:
        return float(prob)
    pool = _get(record, "pool")
    if pool:
        p = _float(_get(record, "p"), 0.5)
        return get_cpmm_probability(pool, p)
    return 0.5


def _answers(data: Mapping[str, Any]) -> tuple[Answer, ...]:
    return tuple(
        Answer(id=str(item["id"]), text=str(item.get("text", "")), prob=float(item.get("prob", 0.0)))
        for item in data.get("answers") or []
    )


def market_from_record(record: Any) -> Market:
    """Build the variant for an ORM contract, API schema or plain mapping."""

    data: Mapping[str, Any] = _get(record, "data") or {}
    common: dict[str, Any] = {
        "id": str(_get(record, "id")),
        "slug": _get(record, "slug") or "",
        "question": _get(record, "question") or "",
        "creator_username": _get(record, "creator_username") or "",
        "creator_name": _get(record, "creator_name") or "",
        "creator_avatar_url": _get(record, "creator_avatar_url"),
        "created_time": _as_utc(_get(record, "created_time")),
        "close_time": _as_utc(_get(record, "close_time")),
        "resolution": _get(record, "resolution"),
        "resolution_time": _as_utc(_get(record, "resolution_time")),
        "volume": _float(_get(record, "volume"), 0.0),
        "volume_24_hours": _float(_get(record, "volume_24_hours"), 0.0),
        "group_ids": tuple(_get(record, "group_ids") or ()),
    }
    outcome_type = _get(record, "outcome_type")

    if outcome_type == OutcomeType.BINARY.value:
        return BinaryMarket(
            **common,
            prob=_probability(record),
            resolution_probability=_float(_get(record, "resolution_probability")),
        )
    if outcome_type == OutcomeType.PSEUDO_NUMERIC.value:
        return PseudoNumericMarket(
            **common,
            prob=_probability(record),
            min=float(data.get("min", 0)),
            max=float(data.get("max", 1)),
            is_log_scale=bool(data.get("isLogScale", False)),
            resolution_value=_float(_get(record, "resolution_value")),
            resolution_probability=_float(_get(record, "resolution_probability")),
        )
    if outcome_type == OutcomeType.NUMERIC.value:
        return NumericMarket(
            **common,
            min=float(data.get("min", 0)),
            max=float(data.get("max", 1)),
            bucket_count=int(data.get("bucketCount", 0)),
            bucket_probabilities=tuple(float(prob) for prob in data.get("bucketProbabilities") or ()),
            resolution_value=_float(_get(record, "resolution_value")),
        )
    if outcome_type == OutcomeType.FREE_RESPONSE.value:
        return FreeResponseMarket(**common, answers=_answers(data))
    if outcome_type == OutcomeType.MULTIPLE_CHOICE.value:
        return MultipleChoiceMarket(**common, answers=_answers(data))
    if outcome_type == OutcomeType.BOUNTY.value:
        return BountyMarket(**common, prize_total=float(data.get("prizeTotal", 0)))
    return UnknownMarket(**common, outcome_type=str(outcome_type))


__all__ = [
    "Answer",
    "AnswerMarket",
    "BinaryMarket",
    "BountyMarket",
    "FreeResponseMarket",
    "Market",
    "MarketBase",
    "MultipleChoiceMarket",
    "NumericMarket",
    "PseudoNumericMarket",
    "UnknownMarket",
    "market_from_record",
]
