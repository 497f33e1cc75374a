"""Numeric and date helpers shared by the context formatter and reply handlers."""

import math
from datetime import datetime

CURRENCY_SYMBOL = "₹"
SECONDS_PER_DAY = 86400


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)


def stock_percentage(quantity: int, reorder_level: int) -> int:
    """Current stock as a whole percentage of the reorder level."""
    if reorder_level <= 0:
        return 0
    return round_half_up(quantity / reorder_level * 100)


def stock_ratio(quantity: int, reorder_level: int) -> float:
    """Stock-to-threshold ratio; lower is more urgent."""
    if reorder_level <= 0:
        return 0.0
    return quantity / reorder_level


def days_until(expiry: datetime, now: datetime) -> int:
    """Whole days remaining until ``expiry``, rounded up."""
    return math.ceil((expiry - now).total_seconds() / SECONDS_PER_DAY)


def days_since(expiry: datetime, now: datetime) -> int:
    """Whole days elapsed since ``expiry``, rounded up."""
    return math.ceil((now - expiry).total_seconds() / SECONDS_PER_DAY)


def format_money(amount: float) -> str:
    return f"{CURRENCY_SYMBOL}{amount:,.2f}"


def format_count(value: float) -> str:
    return f"{value:,.0f}"


def format_date(value: datetime) -> str:
    return value.strftime("%d %b %Y")
