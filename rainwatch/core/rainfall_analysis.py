"""
Rainfall statistics over the daily rain row set.

All functions are pure data processing with no UI dependencies. The
lexicographically greatest season label is the "current" season: it may
be incomplete, so it is left out of every statistic that describes a
typical completed season (average annual rainfall, wettest/driest season)
while still counting towards record-level figures.
"""

from typing import List, Optional

import pandas as pd

from rainwatch.config import RAIN_INTENSITY_THRESHOLDS, TOP_DAYS_COUNT
from rainwatch.core.season_calendar import season_months_in_order
from rainwatch.models.rain import RainRecord, RainStatistics, RainSummary, SeasonTotal
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)


def current_season(df: pd.DataFrame) -> Optional[str]:
    """Lexicographically greatest season label, or None for an empty set."""
    if df.empty:
        return None
    return max(df["season"].unique())


def calculate_summary(df: pd.DataFrame) -> RainSummary:
    """
    Headline figures: record and season counts, max single-day rain, year span.

    :param df: Rain row set.
    :return: RainSummary (value fields are None for an empty set).
    """
    if df.empty:
        return RainSummary(0, 0, None, None, None)

    return RainSummary(
        record_count=len(df),
        season_count=int(df["season"].nunique()),
        max_rain=float(df["rain"].max()),
        min_year=int(df["year"].min()),
        max_year=int(df["year"].max()),
    )


def calculate_season_totals(df: pd.DataFrame) -> pd.DataFrame:
    """
    Total rainfall and rainy-day count per season, in first-encountered order.

    :param df: Rain row set.
    :return: DataFrame with columns season, total_rain, rain_days.
    """
    if df.empty:
        return pd.DataFrame(columns=["season", "total_rain", "rain_days"])

    grouped = df.groupby("season", sort=False)["rain"]
    sums = grouped.sum()
    return pd.DataFrame(
        {
            "season": sums.index,
            "total_rain": sums.values,
            "rain_days": grouped.count().values,
        }
    )


def _season_total_at(totals: pd.DataFrame, position: int) -> SeasonTotal:
    row = totals.iloc[position]
    return SeasonTotal(
        season=str(row["season"]),
        total_rain=float(row["total_rain"]),
        rain_days=int(row["rain_days"]),
    )


def find_max_day(df: pd.DataFrame) -> Optional[RainRecord]:
    """Single wettest record; ties resolve to the first in load order."""
    if df.empty:
        return None
    row = df.loc[df["rain"].idxmax()]
    return RainRecord(
        season=str(row["season"]),
        year=int(row["year"]),
        month=int(row["month"]),
        day=int(row["day"]),
        rain=float(row["rain"]),
    )


def calculate_rainfall_statistics(df: pd.DataFrame) -> RainStatistics:
    """
    Extended statistics across the full row set.

    - average_annual: mean of completed-season totals
    - average_per_rain_day: total rain / record count (all seasons)
    - average_rain_days: mean records per season (all seasons)
    - wettest/driest: argmax/argmin of completed-season totals, first wins ties
    - max_day: wettest single record (current season included)

    :param df: Rain row set.
    :return: RainStatistics; completed-season fields are None when no
        completed season exists.
    """
    latest = current_season(df)
    stats = RainStatistics(current_season=latest)
    if df.empty:
        return stats

    totals = calculate_season_totals(df)
    completed = totals[totals["season"] != latest].reset_index(drop=True)
    stats.completed_seasons = completed["season"].tolist()

    stats.average_per_rain_day = float(df["rain"].sum() / len(df))
    stats.average_rain_days = float(totals["rain_days"].mean())
    stats.max_day = find_max_day(df)

    if not completed.empty:
        stats.average_annual = float(completed["total_rain"].mean())
        # idxmax/idxmin return the first occurrence on ties
        stats.wettest_season = _season_total_at(
            completed, int(completed["total_rain"].idxmax())
        )
        stats.driest_season = _season_total_at(
            completed, int(completed["total_rain"].idxmin())
        )
    else:
        logger.debug("No completed seasons; season averages left undefined")

    return stats


def calculate_monthly_climatology(df: pd.DataFrame) -> pd.DataFrame:
    """
    Average rain per calendar month, normalised by distinct years observed.

    For each month the total rain over all records is divided by the number
    of distinct years that have at least one record in that month. Months
    without records get 0.

    :param df: Rain row set.
    :return: DataFrame with columns month, total_rain, years, average_rain,
        ordered by season month order.
    """
    months = season_months_in_order()
    if df.empty:
        totals = pd.Series(0.0, index=months)
        years = pd.Series(0, index=months)
    else:
        grouped = df.groupby("month")
        totals = grouped["rain"].sum().reindex(months, fill_value=0.0)
        years = grouped["year"].nunique().reindex(months, fill_value=0)

    average = (totals / years.where(years > 0)).fillna(0.0)
    return pd.DataFrame(
        {
            "month": months,
            "total_rain": totals.values.astype(float),
            "years": years.values.astype(int),
            "average_rain": average.values.astype(float),
        }
    )


def top_rain_days(df: pd.DataFrame, n: int = TOP_DAYS_COUNT) -> pd.DataFrame:
    """
    The ``n`` wettest single days, descending; ties keep load order.

    :param df: Rain row set.
    :param n: Number of records to return.
    :return: DataFrame slice with a 1-based 'rank' column.
    """
    if df.empty:
        return df.assign(rank=pd.Series(dtype="int64"))

    order = (-df["rain"]).sort_values(kind="stable").index
    top = df.loc[order[:n]].reset_index(drop=True)
    return top.assign(rank=range(1, len(top) + 1))


def rain_intensity(rain_mm: float) -> str:
    """Intensity class for a daily amount: light, moderate, heavy or extreme."""
    for threshold, label in RAIN_INTENSITY_THRESHOLDS:
        if rain_mm >= threshold:
            return label
    return RAIN_INTENSITY_THRESHOLDS[-1][1]
