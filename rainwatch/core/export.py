"""
CSV export of the table view.

The export holds the rows currently visible in the table view (filtered and
sorted, all pages), with a fixed header and a UTF-8 byte-order mark so
spreadsheet software decodes non-ASCII season labels correctly.
"""

import io

import pandas as pd

from rainwatch.config import EXPORT_HEADER, RAIN_COLUMNS
from rainwatch.core.table_view import format_rain

BOM = "\ufeff"


def format_date_label(day: int, month: int, year: int) -> str:
    return f"{int(day):02d}/{int(month):02d}/{int(year)}"


def export_rows_to_csv(rows: pd.DataFrame) -> str:
    """
    Serialize rows to CSV text with a BOM and the fixed export header.

    :param rows: Filtered and sorted rain rows.
    :return: CSV document as text.
    """
    export_df = pd.DataFrame(
        {
            "Season": rows["season"].astype(str),
            "Year": rows["year"].astype(int),
            "Month": rows["month"].astype(int),
            "Day": rows["day"].astype(int),
            "Rain (mm)": rows["rain"].map(format_rain),
            "Date": [
                format_date_label(d, m, y)
                for d, m, y in zip(rows["day"], rows["month"], rows["year"])
            ],
        },
        columns=EXPORT_HEADER,
    )
    return BOM + export_df.to_csv(index=False, lineterminator="\n")


def export_rows_to_bytes(rows: pd.DataFrame) -> bytes:
    """CSV export encoded for a download button."""
    return export_rows_to_csv(rows).encode("utf-8")


def parse_export_csv(text: str) -> pd.DataFrame:
    """
    Read an exported CSV back into the canonical rain columns.

    :param text: Document produced by export_rows_to_csv.
    :return: DataFrame with season, year, month, day, rain in file order.
    """
    if text.startswith(BOM):
        text = text[len(BOM) :]
    raw = pd.read_csv(io.StringIO(text), dtype={"Season": str}, float_precision="round_trip")
    parsed = raw.rename(
        columns={
            "Season": "season",
            "Year": "year",
            "Month": "month",
            "Day": "day",
            "Rain (mm)": "rain",
        }
    )
    return parsed[RAIN_COLUMNS].astype(
        {"year": "int64", "month": "int64", "day": "int64", "rain": "float64"}
    )
