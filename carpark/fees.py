"""
Parking fee strategies.

All strategies bill whole hours, truncated, with a minimum of one hour:

    0h 00m .. 0h 59m  -> 1 hour
    2h 10m            -> 2 hours

Each strategy is a plain function (elapsed, rate) -> fee. get_fee_calculator()
looks one up by name so callers (CLI, registry) can swap them.
"""

from __future__ import annotations

from datetime import timedelta
from functools import partial
from typing import Callable, Optional

MINIMUM_BILLED_HOURS = 1
WEEKEND_DISCOUNT = 0.8  # 20% off

STANDARD = "standard"
WEEKEND = "weekend"
DAILY_MAX = "daily-max"
STRATEGY_NAMES = (STANDARD, WEEKEND, DAILY_MAX)


def billable_hours(elapsed: timedelta) -> int:
    hours = int(elapsed.total_seconds() // 3600)
    return hours if hours > 0 else MINIMUM_BILLED_HOURS


def standard_fee(elapsed: timedelta, rate: float) -> float:
    return billable_hours(elapsed) * rate


def weekend_fee(elapsed: timedelta, rate: float) -> float:
    return billable_hours(elapsed) * rate * WEEKEND_DISCOUNT


def daily_max_fee(elapsed: timedelta, rate: float, daily_max: float) -> float:
    return min(standard_fee(elapsed, rate), daily_max)


def get_fee_calculator(name: str, daily_max: Optional[float] = None) -> Callable[[timedelta, float], float]:
    """
    Return the strategy registered under `name`.

    'daily-max' needs a positive daily_max. Unknown names raise ValueError.
    """
    key = (name or "").strip().lower()
    if key == STANDARD:
        return standard_fee
    if key == WEEKEND:
        return weekend_fee
    if key == DAILY_MAX:
        if daily_max is None or daily_max <= 0:
            raise ValueError("daily-max strategy requires a positive daily maximum")
        return partial(daily_max_fee, daily_max=daily_max)
    raise ValueError(f"Unknown fee strategy: {name!r} (choose from {', '.join(STRATEGY_NAMES)})")


def describe_fee_calculator(name: str, rate: float, daily_max: Optional[float] = None) -> str:
    key = (name or "").strip().lower()
    # validates name and daily_max the same way as get_fee_calculator
    get_fee_calculator(key, daily_max)
    if key == WEEKEND:
        return f"Weekend Rate: ${rate * WEEKEND_DISCOUNT:.2f}/hour (20% off)"
    if key == DAILY_MAX:
        return f"Daily Max: ${rate:.2f}/hour (max ${daily_max:.2f}/day)"
    return f"Standard Rate: ${rate:.2f}/hour"
