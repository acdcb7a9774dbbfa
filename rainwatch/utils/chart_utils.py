"""
Chart utilities for visualizations.

Provides axis calculations for the season-indexed rainfall charts.
"""

from typing import List, Tuple

import numpy as np

from rainwatch.config import CHART_Y_STEP_MM, MONTH_ABBREVIATIONS
from rainwatch.core.season_calendar import month_start_days, season_months_in_order
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)


def cumulative_axis_max(
    season_total: float, average_total: float, step: int = CHART_Y_STEP_MM
) -> int:
    """
    Vertical axis ceiling that fits both cumulative curves.

    :param season_total: Final value of the selected season's curve.
    :param average_total: Final value of the average curve.
    :param step: Rounding step in mm.
    :return: ceil(max / step) * step, never below ``step``.
    """
    peak = max(season_total, average_total, 0.0)
    return max(step, int(np.ceil(peak / step)) * step)


def season_axis_ticks() -> Tuple[List[int], List[str]]:
    """
    Month gridline positions and labels on the day-of-season axis.

    :return: (tick values, tick labels) in season month order.
    """
    labels = [MONTH_ABBREVIATIONS[m] for m in season_months_in_order()]
    return month_start_days(), labels


def y_axis_step(axis_max: float, steps: int = 5) -> float:
    """Gridline spacing that splits [0, axis_max] into ``steps`` bands."""
    return axis_max / steps
