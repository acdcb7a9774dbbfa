"""
Rain-season calendar.

A season runs from the first day of ``SEASON_START_MONTH`` for
``SEASON_LENGTH_DAYS`` days. Dates are re-based onto a "day of season"
ordinal (0 = season start) using fixed non-leap reference years, so the
spacing between two calendar dates is the same in every season and Feb 29
never shifts the ordinals that follow it.
"""

from datetime import date
from typing import List

import numpy as np
import pandas as pd

from rainwatch.config import (
    SEASON_LENGTH_DAYS,
    SEASON_REFERENCE_YEARS,
    SEASON_START_MONTH,
)

SEASON_LENGTH = SEASON_LENGTH_DAYS


def _reference_year(month: int) -> int:
    first_half, second_half = SEASON_REFERENCE_YEARS
    return first_half if month >= SEASON_START_MONTH else second_half


def _month_offset(month: int) -> int:
    """Day-of-season of the first day of ``month``."""
    season_start = date(SEASON_REFERENCE_YEARS[0], SEASON_START_MONTH, 1)
    return (date(_reference_year(month), month, 1) - season_start).days


# Index 0 unused so the table can be indexed by month number
MONTH_OFFSETS = np.array([0] + [_month_offset(m) for m in range(1, 13)], dtype=int)


def day_of_season(month: int, day: int) -> int:
    """
    Map a (month, day) pair onto [0, SEASON_LENGTH).

    Days past the end of a month roll into the next month the way a
    calendar would (Feb 29 lands on Mar 1 of the non-leap reference year).

    :param month: Calendar month, 1-12.
    :param day: Day of month, 1-31.
    :return: Zero-based ordinal within the season.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    ordinal = int(MONTH_OFFSETS[month]) + int(day) - 1
    return min(max(ordinal, 0), SEASON_LENGTH - 1)


def day_of_season_array(months, days) -> np.ndarray:
    """
    Vectorised ``day_of_season`` for DataFrame columns.

    :param months: Sequence or Series of month numbers.
    :param days: Sequence or Series of day numbers.
    :return: Integer numpy array of ordinals.
    """
    months = np.asarray(months, dtype=int)
    days = np.asarray(days, dtype=int)
    if months.size and (months.min() < 1 or months.max() > 12):
        raise ValueError("month values must be in 1..12")
    ordinals = MONTH_OFFSETS[months] + days - 1
    return np.clip(ordinals, 0, SEASON_LENGTH - 1)


def season_months_in_order() -> List[int]:
    """Month numbers in season order, starting at the season start month."""
    return [(SEASON_START_MONTH - 1 + i) % 12 + 1 for i in range(12)]


def month_start_days() -> List[int]:
    """Day-of-season of each season month's first day, in season order."""
    return [day_of_season(m, 1) for m in season_months_in_order()]


def add_day_of_season(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of ``df`` with a ``day_of_season`` column.

    :param df: Rain records with 'month' and 'day' columns.
    :return: New DataFrame; the input is not modified.
    """
    return df.assign(day_of_season=day_of_season_array(df["month"], df["day"]))
