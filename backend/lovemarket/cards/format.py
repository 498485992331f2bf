from __future__ import annotations

from decimal import Decimal
from math import floor, log10

LARGE_NUMBER_SUFFIXES = ("", "K", "M", "B", "T", "Q")


def _show_precision(value: float, sigfigs: int) -> str:
    rounded = float(f"{value:.{sigfigs}g}")
    if rounded.is_integer():
        return str(int(rounded))
    return format(Decimal(repr(rounded)), "f")


def format_money(amount: float) -> str:
    whole = 0 if round(amount) == 0 else floor(amount)
    return f"M${whole:,}"


def format_percent(zero_to_one: float) -> str:
    near_edge = 0 < zero_to_one < 0.02 or 0.98 < zero_to_one < 1
    decimals = 1 if near_edge else 0
    return f"{zero_to_one * 100:.{decimals}f}%"


def format_large_number(value: float, sigfigs: int = 2) -> str:
    absolute = abs(value)
    if absolute < 1:
        return _show_precision(value, sigfigs)
    if absolute < 100:
        return _show_precision(value, 2)
    if absolute < 1000:
        return _show_precision(value, 3)
    if absolute < 10000:
        return _show_precision(value, 4)

    index = min(int(floor(log10(absolute) / 3)), len(LARGE_NUMBER_SUFFIXES) - 1)
    scaled = _show_precision(value / 10 ** (3 * index), sigfigs)
    return f"{scaled}{LARGE_NUMBER_SUFFIXES[index]}"


__all__ = ["format_large_number", "format_money", "format_percent"]
