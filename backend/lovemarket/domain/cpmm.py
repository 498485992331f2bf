"""Constant-product market maker math for cpmm-1 contracts.

Pools hold YES and NO shares. The invariant ``k = y**p * n**(1 - p)`` is kept
across trades, where ``p`` is fixed at market creation so that equal pools
price the market at ``p``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


@dataclass(frozen=True, slots=True)
class CpmmState:
    pool: dict[str, float]
    p: float

    @classmethod
    def from_contract(cls, pool: Mapping[str, float] | None, p: float | None) -> CpmmState:
        pool = pool or {}
        return cls(
            pool={"YES": float(pool.get("YES", 0.0)), "NO": float(pool.get("NO", 0.0))},
            p=0.5 if p is None else float(p),
        )


@dataclass(frozen=True, slots=True)
class CpmmTrade:
    shares: float
    new_pool: dict[str, float]
    prob_before: float
    prob_after: float


def initial_state(liquidity: float, initial_probability: float) -> CpmmState:
    """Equal pools with ``p`` set to the opening probability (0..1)."""

    return CpmmState(pool={"YES": float(liquidity), "NO": float(liquidity)}, p=initial_probability)


def get_cpmm_probability(pool: Mapping[str, float], p: float) -> float:
    yes, no = float(pool["YES"]), float(pool["NO"])
    denominator = (1 - p) * yes + p * no
    if denominator <= 0:
        return p
    return p * no / denominator


def calculate_cpmm_purchase(state: CpmmState, amount: float, outcome: str) -> CpmmTrade:
    if amount <= 0:
        raise ValueError("amount must be positive")
    if outcome not in ("YES", "NO"):
        raise ValueError(f"Unknown outcome {outcome!r}")

    p = state.p
    yes, no = state.pool["YES"], state.pool["NO"]
    k = yes**p * no ** (1 - p)
    prob_before = get_cpmm_probability(state.pool, p)

    if outcome == "YES":
        new_no = no + amount
        new_yes = (k / new_no ** (1 - p)) ** (1 / p)
        shares = yes + amount - new_yes
    else:
        new_yes = yes + amount
        new_no = (k / new_yes**p) ** (1 / (1 - p))
        shares = no + amount - new_no

    new_pool = {"YES": new_yes, "NO": new_no}
    return CpmmTrade(
        shares=shares,
        new_pool=new_pool,
        prob_before=prob_before,
        prob_after=get_cpmm_probability(new_pool, p),
    )


__all__ = [
    "CpmmState",
    "CpmmTrade",
    "calculate_cpmm_purchase",
    "get_cpmm_probability",
    "initial_state",
]
