"""Pure market math shared by services and card rendering."""

from .cpmm import (
    CpmmState,
    CpmmTrade,
    calculate_cpmm_purchase,
    get_cpmm_probability,
    initial_state,
)

__all__ = [
    "CpmmState",
    "CpmmTrade",
    "calculate_cpmm_purchase",
    "get_cpmm_probability",
    "initial_state",
]
