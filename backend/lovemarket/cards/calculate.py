"""Estimates shown on market cards."""

from __future__ import annotations

from math import log10

from .variants import Answer, AnswerMarket, BinaryMarket, NumericMarket, PseudoNumericMarket


def get_probability(market: BinaryMarket | PseudoNumericMarket) -> float:
    return market.prob


def get_top_answer(market: AnswerMarket) -> Answer | None:
    """Highest-probability answer; the earliest answer wins ties."""

    top: Answer | None = None
    for answer in market.answers:
        if top is None or answer.prob > top.prob:
            top = answer
    return top


def get_outcome_probability(market: AnswerMarket, answer_id: str) -> float:
    for answer in market.answers:
        if answer.id == answer_id:
            return answer.prob
    return 0.0


def _bucket_value(market: NumericMarket, index: int) -> float:
    return market.min + (index / market.bucket_count) * (market.max - market.min)


def get_value_from_bucket(bucket: str, market: NumericMarket) -> float:
    if market.bucket_count <= 0:
        return market.min
    try:
        index = int(bucket)
    except ValueError:
        index = 0
    return round(_bucket_value(market, index), 4)


def get_expected_value(market: NumericMarket) -> float:
    probabilities = market.bucket_probabilities
    total = sum(probabilities)
    if market.bucket_count <= 0 or total <= 0:
        return market.min
    expectation = sum(
        (prob / total) * _bucket_value(market, index) for index, prob in enumerate(probabilities)
    )
    return round(expectation, 2)


def get_mapped_value(market: PseudoNumericMarket, prob: float) -> float:
    """Map a 0..1 probability onto the market's numeric range."""

    if market.is_log_scale:
        log_value = prob * log10(market.max - market.min + 1)
        return 10**log_value + market.min - 1
    return market.min + prob * (market.max - market.min)


__all__ = [
    "get_expected_value",
    "get_mapped_value",
    "get_outcome_probability",
    "get_probability",
    "get_top_answer",
    "get_value_from_bucket",
]
