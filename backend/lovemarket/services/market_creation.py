"""Market creation used by the API and by system-owned flows such as matches."""

from __future__ import annotations

import re
import secrets
import string
import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from math import log10
from typing import Any
from uuid import uuid4

from loguru import logger
from sqlalchemy.orm import Session

from lovemarket.core.config import Settings, get_settings
from lovemarket.domain import get_cpmm_probability, initial_state
from lovemarket.errors import ForbiddenError, InvalidRequestError, NotFoundError
from lovemarket.models import Contract, Mechanism, OutcomeType
from lovemarket.repositories import ContractRepository, UserRepository

MAX_QUESTION_LENGTH = 480
MAX_SLUG_LENGTH = 35
SUPPORTED_OUTCOME_TYPES = {OutcomeType.BINARY.value, OutcomeType.PSEUDO_NUMERIC.value}


def slugify(text: str, separator: str = "-", max_length: int = MAX_SLUG_LENGTH) -> str:
    normalized = unicodedata.normalize("NFD", text)
    stripped = "".join(char for char in normalized if not unicodedata.combining(char))
    cleaned = re.sub(r"[^a-z0-9 ]", "", stripped.lower().strip())
    slug = re.sub(r"\s+", separator, cleaned)[:max_length]
    return slug.rstrip(separator)


def _random_suffix(length: int = 6) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class CreateMarketOptions:
    question: str
    outcome_type: str
    close_time: datetime
    description_markdown: str = ""
    initial_prob: float = 50
    extra_liquidity: float = 0
    visibility: str = "public"
    group_ids: list[str] = field(default_factory=list)
    min: float | None = None
    max: float | None = None
    is_log_scale: bool = False
    initial_value: float | None = None
    lover_user_id1: str | None = None
    lover_user_id2: str | None = None


class MarketCreationService:
    """Validate options, debit the creator and persist a new cpmm market."""

    def __init__(self, session: Session, settings: Settings | None = None) -> None:
        self._session = session
        self._settings = settings or get_settings()
        self._contracts = ContractRepository(session)
        self._users = UserRepository(session)

    def create_market(self, options: CreateMarketOptions, creator_id: str) -> Contract:
        creator = self._users.get_user_for_update(creator_id)
        if creator is None:
            raise NotFoundError(f"User {creator_id} does not exist.")

        question = options.question.strip()
        if not question or len(question) > MAX_QUESTION_LENGTH:
            raise InvalidRequestError(
                f"Question must be between 1 and {MAX_QUESTION_LENGTH} characters."
            )
        if options.outcome_type not in SUPPORTED_OUTCOME_TYPES:
            raise InvalidRequestError(
                f"Outcome type {options.outcome_type} is not supported for new markets."
            )
        close_time = _as_utc(options.close_time)
        if close_time <= datetime.now(timezone.utc):
            raise InvalidRequestError("Close time must be in the future.")

        initial_prob, data = self._resolve_initial_probability(options)

        liquidity = float(self._settings.market_ante + options.extra_liquidity)
        if float(creator.balance) < liquidity:
            raise ForbiddenError("Insufficient balance.")
        creator.balance = float(creator.balance) - liquidity

        state = initial_state(liquidity, initial_prob / 100)
        contract = Contract(
            id=uuid4().hex,
            slug=self._unique_slug(question),
            question=question,
            description=options.description_markdown,
            creator_id=creator.id,
            creator_username=creator.username,
            creator_name=creator.name,
            creator_avatar_url=creator.avatar_url,
            outcome_type=options.outcome_type,
            mechanism=Mechanism.CPMM.value,
            visibility=options.visibility,
            created_time=datetime.now(timezone.utc),
            close_time=close_time,
            initial_probability=initial_prob,
            p=state.p,
            pool=dict(state.pool),
            prob=get_cpmm_probability(state.pool, state.p),
            total_liquidity=liquidity,
            volume=0.0,
            volume_24_hours=0.0,
            group_ids=list(options.group_ids),
            lover_user_id1=options.lover_user_id1,
            lover_user_id2=options.lover_user_id2,
            data=data,
        )
        self._contracts.add_contract(contract)
        logger.info(
            "Created {} market {} ({}) for {}",
            contract.outcome_type,
            contract.id,
            contract.slug,
            creator.username,
        )
        return contract

    def _resolve_initial_probability(
        self, options: CreateMarketOptions
    ) -> tuple[float, dict[str, Any] | None]:
        if options.outcome_type == OutcomeType.BINARY.value:
            if not 1 <= options.initial_prob <= 99:
                raise InvalidRequestError("Initial probability must be between 1 and 99.")
            return float(options.initial_prob), None

        if options.min is None or options.max is None or options.min >= options.max:
            raise InvalidRequestError("Pseudo-numeric markets need min < max.")
        initial_value = options.initial_value
        if initial_value is None:
            initial_value = (options.min + options.max) / 2
        if not options.min <= initial_value <= options.max:
            raise InvalidRequestError("Initial value must be between min and max.")

        if options.is_log_scale:
            span = log10(options.max - options.min + 1)
            prob = log10(initial_value - options.min + 1) / span
        else:
            prob = (initial_value - options.min) / (options.max - options.min)
        prob = min(max(prob, 0.01), 0.99)
        data = {
            "min": options.min,
            "max": options.max,
            "isLogScale": options.is_log_scale,
        }
        return prob * 100, data

    def _unique_slug(self, question: str) -> str:
        base = slugify(question) or "market"
        slug = base
        while self._contracts.slug_exists(slug):
            slug = f"{base}-{_random_suffix()}"
        return slug


__all__ = ["CreateMarketOptions", "MarketCreationService", "slugify"]
