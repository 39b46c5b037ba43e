"""
Formulas for consumption projection.

These functions implement the simple linear model used by the
consumption report: an average daily consumption over an activity
window, projected forward to a month and to the day the current stock
runs out. No statistical modeling beyond averages is attempted.

All functions are pure: they depend solely on their inputs and do
not modify any external state. This makes them safe to unit test
individually.
"""

from datetime import datetime
from math import ceil, floor
from typing import Optional, Union

SECONDS_PER_DAY = 86400.0


def active_days(
    window_days: Optional[int],
    first_exit: Optional[datetime] = None,
    last_exit: Optional[datetime] = None,
) -> int:
    """Return the number of days over which consumption is averaged.

    Parameters
    ----------
    window_days: int or None
        Day count of a fixed period window (7, 30, 90). ``None`` means an
        unbounded window.
    first_exit, last_exit: datetime
        Earliest and latest exit of the product inside the filtered set.
        Only used for unbounded windows.

    Returns
    -------
    int
        ``window_days`` for fixed windows, otherwise the per-product span
        ``ceil(last_exit - first_exit)`` in days, floored to 1. A product
        with a single exit therefore averages over one day; this is a known
        coarse approximation.
    """
    if window_days is not None:
        return max(int(window_days), 1)
    if first_exit is None or last_exit is None:
        return 1
    span = (last_exit - first_exit).total_seconds() / SECONDS_PER_DAY
    return max(1, ceil(span))


def daily_average(total_consumed: Union[int, float], days: Union[int, float]) -> float:
    """Average consumption per day; ``days`` is floored to 1."""
    return float(total_consumed) / max(float(days), 1.0)


def monthly_projection(daily_avg: float, days_per_month: int = 30) -> float:
    """Linear projection of a daily average to a month."""
    return float(daily_avg) * days_per_month


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(floor(float(x) + 0.5))


def days_until_empty(quantity: Union[int, float], daily_avg: float) -> Optional[int]:
    """Projected days before the current stock reaches zero.

    Returns ``None`` when there is no recent consumption: the projection is
    undefined rather than infinite.
    """
    if daily_avg is None or daily_avg <= 0:
        return None
    return round_half_up(float(quantity) / float(daily_avg))


def cost_projection(monthly_qty: float, price: Union[int, float]) -> float:
    """Monetary value of the projected monthly consumption."""
    return float(monthly_qty) * float(price)
