"""
Unit tests for the CSV export of the table view.
"""

import pandas as pd

from rainwatch.config import EXPORT_HEADER
from rainwatch.core.export import (
    BOM,
    export_rows_to_bytes,
    export_rows_to_csv,
    format_date_label,
    parse_export_csv,
)
from rainwatch.core.rain_data import empty_rain_frame, records_to_frame
from rainwatch.core.table_view import TableState, apply_filters, apply_sorting
from rainwatch.models.rain import RainRecord


class TestExportCsv:
    """Test export_rows_to_csv."""

    def setup_method(self):
        self.df = records_to_frame(
            [
                RainRecord("23-24", 2023, 10, 5, 12.0),
                RainRecord("23-24", 2024, 2, 29, 18.2),
                RainRecord("22-23", 2023, 1, 15, 42.0),
                RainRecord("24-25", 2024, 10, 5, 0.5),
            ]
        )

    def test_bom_and_header(self):
        text = export_rows_to_csv(self.df)
        lines = text.split("\n")

        assert text.startswith(BOM)
        assert lines[0] == BOM + ",".join(EXPORT_HEADER)
        assert lines[0] == BOM + "Season,Year,Month,Day,Rain (mm),Date"

    def test_row_format(self):
        lines = export_rows_to_csv(self.df).split("\n")

        assert lines[1] == "23-24,2023,10,5,12,05/10/2023"
        assert lines[2] == "23-24,2024,2,29,18.2,29/02/2024"
        assert lines[4] == "24-25,2024,10,5,0.5,05/10/2024"

    def test_one_line_per_row(self):
        lines = export_rows_to_csv(self.df).rstrip("\n").split("\n")
        assert len(lines) == len(self.df) + 1

    def test_empty_view_has_header_only(self):
        text = export_rows_to_csv(empty_rain_frame())
        assert text.rstrip("\n") == BOM + ",".join(EXPORT_HEADER)

    def test_bytes_are_utf8(self):
        data = export_rows_to_bytes(self.df)
        assert data.startswith(b"\xef\xbb\xbf")

    def test_date_label(self):
        assert format_date_label(1, 3, 2024) == "01/03/2024"
        assert format_date_label(31, 12, 1999) == "31/12/1999"


class TestExportRoundTrip:
    """Exported rows parse back to the same tuples in the same order."""

    def test_filtered_sorted_view(self):
        df = records_to_frame(
            [
                RainRecord("22-23", 2022, 11, 3, 5.5),
                RainRecord("22-23", 2023, 1, 15, 42.0),
                RainRecord("23-24", 2023, 10, 5, 12.0),
                RainRecord("23-24", 2023, 10, 6, 3.0),
                RainRecord("23-24", 2024, 2, 29, 18.25),
            ]
        )
        state = TableState(season="23-24", sort_key="rain", sort_dir="asc")
        view = apply_sorting(apply_filters(df, state), state.sort_key, state.sort_dir)

        parsed = parse_export_csv(export_rows_to_csv(view))

        expected = list(view[["season", "year", "month", "day", "rain"]].itertuples(index=False))
        assert list(parsed.itertuples(index=False)) == expected

    def test_full_precision_rain_survives(self):
        df = records_to_frame(
            [
                RainRecord("22-23", 2022, 11, 1, 0.1 + 0.2),
                RainRecord("22-23", 2022, 11, 2, 1 / 3),
                RainRecord("22-23", 2022, 11, 3, 7.0),
                RainRecord("23-24", 2023, 10, 5, 12.0),
            ]
        )
        state = TableState(season="22-23", sort_key="rain", sort_dir="desc")
        view = apply_sorting(apply_filters(df, state), state.sort_key, state.sort_dir)

        parsed = parse_export_csv(export_rows_to_csv(view))

        assert parsed["rain"].tolist() == [7.0, 1 / 3, 0.1 + 0.2]
        expected = list(view[["season", "year", "month", "day", "rain"]].itertuples(index=False))
        assert list(parsed.itertuples(index=False)) == expected

    def test_season_label_kept_as_text(self):
        df = records_to_frame([RainRecord("2023", 2023, 10, 5, 1.0)])
        parsed = parse_export_csv(export_rows_to_csv(df))

        assert parsed["season"].tolist() == ["2023"]
        pd.testing.assert_series_equal(parsed["rain"], df["rain"])
