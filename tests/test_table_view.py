"""
Unit tests for table filtering, sorting and pagination.
"""

import pandas as pd
import pytest

from rainwatch.core.rain_data import records_to_frame
from rainwatch.core.table_view import (
    TableController,
    TableState,
    apply_filters,
    apply_sorting,
    build_search_text,
    format_rain,
    next_sort,
    page_count,
    page_slice,
    row_count_label,
)
from rainwatch.models.rain import RainRecord


def _sample_frame():
    rows = [
        ("22-23", 2022, 11, 3, 5.5),
        ("22-23", 2023, 1, 15, 42.0),
        ("23-24", 2023, 10, 5, 12.0),
        ("23-24", 2023, 10, 6, 3.0),
        ("23-24", 2024, 2, 29, 18.2),
        ("24-25", 2024, 10, 5, 20.0),
    ]
    return records_to_frame(RainRecord(*r) for r in rows)


def _bulk_frame(count):
    rows = [("23-24", 2023, 11, (i % 28) + 1, float(i)) for i in range(count)]
    return records_to_frame(RainRecord(*r) for r in rows)


class TestFilters:
    """Test apply_filters."""

    def setup_method(self):
        self.df = _sample_frame()

    def test_no_filters_returns_all(self):
        assert len(apply_filters(self.df, TableState())) == len(self.df)

    def test_season_filter(self):
        result = apply_filters(self.df, TableState(season="23-24"))
        assert set(result["season"]) == {"23-24"}
        assert len(result) == 3

    def test_month_filter(self):
        result = apply_filters(self.df, TableState(month=10))
        assert result["month"].tolist() == [10, 10, 10]

    def test_search_is_case_insensitive_substring(self):
        result = apply_filters(self.df, TableState(search="JANUARY"))
        assert result["day"].tolist() == [15]

    def test_search_matches_date_string(self):
        result = apply_filters(self.df, TableState(search="29/2/2024"))
        assert result["rain"].tolist() == [18.2]

    def test_search_matches_rain_value(self):
        result = apply_filters(self.df, TableState(search="42"))
        assert result["day"].tolist() == [15]

    def test_combined_filters(self):
        result = apply_filters(self.df, TableState(season="23-24", month=10, search="12"))
        assert result["day"].tolist() == [5]

    def test_does_not_modify_input(self):
        before = self.df.copy()
        apply_filters(self.df, TableState(season="23-24"))
        pd.testing.assert_frame_equal(self.df, before)

    def test_empty_result(self):
        result = apply_filters(self.df, TableState(search="no such thing"))
        assert result.empty


class TestSearchText:
    """Test the searchable haystack."""

    def test_contents(self):
        df = _sample_frame().iloc[[0]]
        text = build_search_text(df).iloc[0]
        assert text == "22-23 2022 11 3 5.5 3/11/2022 november"

    def test_whole_rain_value_has_no_decimal(self):
        assert format_rain(42.0) == "42"
        assert format_rain(5.5) == "5.5"


class TestSorting:
    """Test apply_sorting and tie-breaks."""

    def setup_method(self):
        self.df = _sample_frame()

    def test_rain_descending(self):
        result = apply_sorting(self.df, "rain", "desc")
        assert result["rain"].tolist() == [42.0, 20.0, 18.2, 12.0, 5.5, 3.0]

    def test_season_ascending_with_tie_break(self):
        result = apply_sorting(self.df, "season", "asc")
        assert result["season"].tolist() == ["22-23", "22-23", "23-24", "23-24", "23-24", "24-25"]
        # Within a season: year desc, month desc, day desc
        assert result[["year", "month", "day"]].values.tolist()[2:5] == [
            [2024, 2, 29],
            [2023, 10, 6],
            [2023, 10, 5],
        ]

    @pytest.mark.parametrize("direction", ["asc", "desc"])
    @pytest.mark.parametrize("key", ["rain", "month", "day"])
    def test_equal_primary_values_use_fixed_tie_break(self, key, direction):
        rows = [
            ("23-24", 2023, 10, 5, 1.0),
            ("23-24", 2024, 1, 5, 1.0),
            ("23-24", 2023, 12, 5, 1.0),
            ("23-24", 2024, 1, 5, 1.0),
        ]
        df = records_to_frame(RainRecord(*r) for r in rows)
        df = df.assign(month=10, day=5) if key in ("month", "day") else df
        result = apply_sorting(df, key, direction)

        ordered = result[["year", "month", "day"]].values.tolist()
        assert ordered == sorted(ordered, reverse=True)

    def test_idempotent(self):
        state = TableState(search="2023", sort_key="rain", sort_dir="asc")
        first = apply_sorting(apply_filters(self.df, state), state.sort_key, state.sort_dir)
        second = apply_sorting(apply_filters(self.df, state), state.sort_key, state.sort_dir)
        again = apply_sorting(first, state.sort_key, state.sort_dir)

        pd.testing.assert_frame_equal(first, second)
        pd.testing.assert_frame_equal(first, again)

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            apply_sorting(self.df, "date", "asc")


class TestNextSort:
    """Test sort key / direction transitions."""

    def test_same_key_flips(self):
        state = next_sort(TableState(sort_key="year", sort_dir="desc"), "year")
        assert state.sort_dir == "asc"

    def test_new_numeric_key_starts_desc(self):
        state = next_sort(TableState(sort_key="season", sort_dir="asc"), "rain")
        assert (state.sort_key, state.sort_dir) == ("rain", "desc")

    def test_season_starts_asc(self):
        state = next_sort(TableState(), "season")
        assert (state.sort_key, state.sort_dir) == ("season", "asc")


class TestPagination:
    """Test page arithmetic."""

    def test_page_count(self):
        assert page_count(250, 100) == 3
        assert page_count(0, 100) == 1
        assert page_count(100, 100) == 1

    def test_page_slice_clamps(self):
        df = _bulk_frame(250)
        assert len(page_slice(df, 3, 100)) == 50
        pd.testing.assert_frame_equal(page_slice(df, 4, 100), page_slice(df, 3, 100))

    def test_row_count_label(self):
        assert row_count_label(10, 10) == "10 rows"
        assert row_count_label(0, 1200) == "0 / 1,200"


class TestTableController:
    """Test the stateful controller."""

    def setup_method(self):
        self.df = _bulk_frame(250)
        self.controller = TableController(self.df)

    def test_defaults(self):
        state = self.controller.state
        assert (state.sort_key, state.sort_dir, state.page_size, state.page) == ("year", "desc", 100, 1)

    def test_page_clamped(self):
        assert self.controller.page_count == 3
        assert self.controller.go_to_page(4) == 3
        assert self.controller.go_to_page(0) == 1
        assert not self.controller.has_prev

    def test_filter_change_resets_page(self):
        self.controller.go_to_page(3)
        self.controller.set_filters(search="23-24")
        assert self.controller.state.page == 1

    def test_unchanged_filters_keep_page(self):
        self.controller.go_to_page(2)
        self.controller.set_filters(search="", season=None, month=None)
        assert self.controller.state.page == 2

    def test_page_size_change_resets_page(self):
        self.controller.go_to_page(3)
        self.controller.set_page_size(50)
        assert self.controller.state.page == 1
        assert self.controller.page_count == 5

    def test_empty_result_set(self):
        self.controller.set_filters(search="nothing matches")
        assert self.controller.visible_rows().empty
        assert self.controller.row_count_label() == "0 / 250"
        assert self.controller.page_count == 1
        assert not self.controller.has_prev
        assert not self.controller.has_next
        assert self.controller.next_page() == 1

    def test_navigation(self):
        assert self.controller.next_page() == 2
        assert self.controller.next_page() == 3
        assert self.controller.next_page() == 3
        assert self.controller.prev_page() == 2

    def test_sort_by_does_not_modify_rows(self):
        before = self.df.copy()
        self.controller.sort_by("rain")
        assert self.controller.view["rain"].iloc[0] == 249.0
        pd.testing.assert_frame_equal(self.df, before)

    def test_export_view_covers_all_pages(self):
        assert len(self.controller.view) == 250
        assert len(self.controller.visible_rows()) == 100
