"""Calendar constants and the default monthly yield pattern."""

from __future__ import annotations

from typing import Tuple

MONTHS_PER_YEAR = 12

# Longest loan term accepted, in months
MAX_PERIOD_MONTHS = 600

# Non-leap calendar
DAYS_IN_MONTH: Tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

MONTH_NAMES: Tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# kWh produced per installed kW in each calendar month (sums to 995 kWh/kW/year)
DEFAULT_MONTHLY_YIELD_PATTERN: Tuple[float, ...] = (
    40.0,
    50.0,
    75.0,
    95.0,
    115.0,
    125.0,
    125.0,
    115.0,
    95.0,
    70.0,
    50.0,
    40.0,
)

__all__ = [
    "DAYS_IN_MONTH",
    "DEFAULT_MONTHLY_YIELD_PATTERN",
    "MAX_PERIOD_MONTHS",
    "MONTHS_PER_YEAR",
    "MONTH_NAMES",
]
