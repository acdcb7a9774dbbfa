"""
Cumulative rainfall series on the day-of-season axis.

``build_season_series`` turns one season's records into a running total.
``build_average_curve`` aligns every completed season onto a dense
day-of-season array and averages the forward-filled totals:

- before a season's first record it does not contribute to a day,
- between records it carries its last cumulative value forward,
- after its last record it contributes its season total to every day.

The per-day contributor count is returned with the curve.
"""

import numpy as np
import pandas as pd

from rainwatch.core.rainfall_analysis import current_season
from rainwatch.core.season_calendar import SEASON_LENGTH, add_day_of_season
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

SEASON_SERIES_COLUMNS = ["day_of_season", "cumulative_rain", "rain"]
AVERAGE_CURVE_COLUMNS = ["day_of_season", "average_cumulative", "contributors"]


def _empty_frame(columns) -> pd.DataFrame:
    return pd.DataFrame({col: pd.Series(dtype="float64") for col in columns})


def build_season_series(df: pd.DataFrame, season: str) -> pd.DataFrame:
    """
    Running rainfall total for one season.

    Records on the same day of season are summed into one point. Only days
    present in the data appear; there is no implied zero at day 0.

    :param df: Rain row set.
    :param season: Season label.
    :return: DataFrame with day_of_season, cumulative_rain and the day's rain.
    """
    season_rows = df.loc[df["season"] == season]
    if season_rows.empty:
        return _empty_frame(SEASON_SERIES_COLUMNS)

    daily = (
        add_day_of_season(season_rows)
        .groupby("day_of_season", sort=True)["rain"]
        .sum()
    )
    return pd.DataFrame(
        {
            "day_of_season": daily.index.astype(int),
            "cumulative_rain": daily.cumsum().values,
            "rain": daily.values,
        }
    )


def forward_fill_season(series: pd.DataFrame) -> np.ndarray:
    """
    Dense array of length SEASON_LENGTH holding the last known cumulative
    value at or before each day; NaN before the first record.
    """
    dense = np.full(SEASON_LENGTH, np.nan)
    if series.empty:
        return dense
    dense[series["day_of_season"].to_numpy(dtype=int)] = series["cumulative_rain"].to_numpy()
    return pd.Series(dense).ffill().to_numpy()


def build_average_curve(df: pd.DataFrame) -> pd.DataFrame:
    """
    Mean forward-filled cumulative rainfall across completed seasons.

    :param df: Rain row set (the current season is excluded here).
    :return: DataFrame with day_of_season, average_cumulative and
        contributors, one row per day with at least one contributing season.
    """
    latest = current_season(df)
    completed = sorted(s for s in df["season"].unique() if s != latest)
    if not completed:
        return _empty_frame(AVERAGE_CURVE_COLUMNS)

    sums = np.zeros(SEASON_LENGTH)
    counts = np.zeros(SEASON_LENGTH, dtype=int)

    for season in completed:
        filled = forward_fill_season(build_season_series(df, season))
        has_value = ~np.isnan(filled)
        sums[has_value] += filled[has_value]
        counts[has_value] += 1

    days = np.flatnonzero(counts)
    logger.debug(f"Average curve from {len(completed)} seasons, {len(days)} days")
    return pd.DataFrame(
        {
            "day_of_season": days,
            "average_cumulative": sums[days] / counts[days],
            "contributors": counts[days],
        }
    )


def final_value(curve: pd.DataFrame, column: str) -> float:
    """Last value of a cumulative column, 0 for an empty curve."""
    if curve.empty:
        return 0.0
    return float(curve[column].iloc[-1])

