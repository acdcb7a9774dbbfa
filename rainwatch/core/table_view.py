"""
Table view over the rain row set: filtering, sorting and pagination.

The pure functions (``apply_filters``, ``apply_sorting``, ``page_count``,
``page_slice``) never modify the loaded row set. ``TableController`` owns a
``TableState`` and the derived filtered/sorted view, and is the single place
where user interactions change that state.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional

import pandas as pd

from rainwatch.config import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_DIR,
    DEFAULT_SORT_KEY,
    MONTH_NAMES,
    SORT_KEYS,
)
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

# Applied after the primary key regardless of its direction
TIE_BREAK_KEYS = ["year", "month", "day"]


@dataclass(frozen=True)
class TableState:
    """Filter, sort and page settings for the rain table."""

    search: str = ""
    season: Optional[str] = None
    month: Optional[int] = None
    sort_key: str = DEFAULT_SORT_KEY
    sort_dir: str = DEFAULT_SORT_DIR
    page_size: int = DEFAULT_PAGE_SIZE
    page: int = 1


def format_rain(rain: float) -> str:
    """Render a rain amount without a trailing '.0' for whole numbers."""
    rain = float(rain)
    return str(int(rain)) if rain.is_integer() else repr(rain)


def build_search_text(df: pd.DataFrame) -> pd.Series:
    """
    Lower-cased haystack per row: season, year, month, day, rain, D/M/YYYY
    date and month name.
    """
    if df.empty:
        return pd.Series([], index=df.index, dtype="object")

    month_names = df["month"].map(lambda m: MONTH_NAMES[m] if 1 <= m <= 12 else "")
    year = df["year"].astype(str)
    month = df["month"].astype(str)
    day = df["day"].astype(str)
    text = (
        df["season"].astype(str)
        + " " + year
        + " " + month
        + " " + day
        + " " + df["rain"].map(format_rain)
        + " " + day + "/" + month + "/" + year
        + " " + month_names
    )
    return text.str.lower()


def apply_filters(df: pd.DataFrame, state: TableState) -> pd.DataFrame:
    """
    Rows matching the season, month and free-text filters of ``state``.

    :param df: Rain row set.
    :param state: Current table state.
    :return: Filtered frame (a new object; ``df`` is untouched).
    """
    mask = pd.Series(True, index=df.index)
    if state.season:
        mask &= df["season"] == state.season
    if state.month:
        mask &= df["month"] == int(state.month)

    search = (state.search or "").strip().lower()
    if search:
        mask &= build_search_text(df).str.contains(search, regex=False)

    return df.loc[mask]


def apply_sorting(df: pd.DataFrame, sort_key: str, sort_dir: str) -> pd.DataFrame:
    """
    Sort by ``sort_key`` then year desc, month desc, day desc.

    ``season`` compares as text, every other key numerically. Rows equal on
    all keys keep their input order.

    :param df: Rows to sort.
    :param sort_key: One of SORT_KEYS.
    :param sort_dir: "asc" or "desc".
    :return: New sorted frame.
    """
    if sort_key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_key}")
    if sort_dir not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction: {sort_dir}")

    by = [sort_key] + [k for k in TIE_BREAK_KEYS if k != sort_key]
    ascending = [sort_dir == "asc"] + [False] * (len(by) - 1)
    return df.sort_values(by=by, ascending=ascending, kind="stable")


def next_sort(state: TableState, sort_key: str) -> TableState:
    """
    State after choosing ``sort_key``: same key flips direction, a new key
    starts ascending for season and descending for numeric keys.
    """
    if sort_key == state.sort_key:
        direction = "asc" if state.sort_dir == "desc" else "desc"
        return replace(state, sort_dir=direction)
    direction = "asc" if sort_key == "season" else "desc"
    return replace(state, sort_key=sort_key, sort_dir=direction)


def page_count(row_count: int, page_size: int) -> int:
    """ceil(row_count / page_size), never less than 1."""
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(row_count / page_size))


def clamp_page(page: int, pages: int) -> int:
    return min(max(int(page), 1), pages)


def page_slice(df: pd.DataFrame, page: int, page_size: int) -> pd.DataFrame:
    """Rows for a 1-based ``page``; the page is clamped into range."""
    page = clamp_page(page, page_count(len(df), page_size))
    start = (page - 1) * page_size
    return df.iloc[start : start + page_size]


def row_count_label(filtered_count: int, total_count: int) -> str:
    """'N rows' when nothing is filtered out, otherwise 'k / N'."""
    if filtered_count == total_count:
        return f"{total_count:,} rows"
    return f"{filtered_count:,} / {total_count:,}"


class TableController:
    """
    Owns the table state for one loaded row set.

    Filter and page-size changes reset to page 1; sort changes keep the
    current page. The filtered/sorted view is recomputed only when filters
    or sorting change.
    """

    def __init__(self, rows: pd.DataFrame, state: Optional[TableState] = None):
        self.rows = rows
        self.state = state or TableState()
        self._view = self._derive_view()

    def _derive_view(self) -> pd.DataFrame:
        filtered = apply_filters(self.rows, self.state)
        return apply_sorting(filtered, self.state.sort_key, self.state.sort_dir)

    @property
    def view(self) -> pd.DataFrame:
        """Filtered and sorted rows (all pages)."""
        return self._view

    @property
    def page_count(self) -> int:
        return page_count(len(self._view), self.state.page_size)

    @property
    def has_prev(self) -> bool:
        return self.state.page > 1

    @property
    def has_next(self) -> bool:
        return self.state.page < self.page_count

    def set_filters(
        self,
        search: Optional[str] = None,
        season: Optional[str] = None,
        month: Optional[int] = None,
    ) -> None:
        """Replace all filters; resets to page 1 when anything changed."""
        new_state = replace(
            self.state, search=search or "", season=season or None, month=month or None
        )
        if new_state == self.state:
            return
        self.state = replace(new_state, page=1)
        self._view = self._derive_view()
        logger.debug(f"Filters changed: {len(self._view)} of {len(self.rows)} rows")

    def set_page_size(self, page_size: int) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        if page_size == self.state.page_size:
            return
        self.state = replace(self.state, page_size=int(page_size), page=1)

    def sort_by(self, sort_key: str) -> None:
        self.state = next_sort(self.state, sort_key)
        self._view = self._derive_view()

    def go_to_page(self, page: int) -> int:
        """Move to ``page`` clamped to [1, page_count]; returns the page used."""
        self.state = replace(self.state, page=clamp_page(page, self.page_count))
        return self.state.page

    def next_page(self) -> int:
        return self.go_to_page(self.state.page + 1)

    def prev_page(self) -> int:
        return self.go_to_page(self.state.page - 1)

    def visible_rows(self) -> pd.DataFrame:
        return page_slice(self._view, self.state.page, self.state.page_size)

    def row_count_label(self) -> str:
        return row_count_label(len(self._view), len(self.rows))
