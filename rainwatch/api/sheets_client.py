"""
sheets_client.py: Fetch the daily rainfall table from the Google Sheets
visualization endpoint and parse it into ``RainRecord`` rows.

The endpoint answers with a JSONP-style wrapper,
``google.visualization.Query.setResponse({...});``, around a table payload
whose rows hold cells as ``{"v": value, "f": formatted}`` objects.

Functions:
- build_sheet_url(sheet_id)
- fetch_sheet_text(sheet_id, gid)
- parse_sheet_response(text)
"""

import json
import math
import re
from typing import Any, List, Optional

import requests

from rainwatch.config import (
    RAIN_SHEET_GID,
    RAIN_SHEET_ID,
    RAIN_SHEET_URL,
    REQUEST_TIMEOUT_SECONDS,
)
from rainwatch.models.rain import RainRecord
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

_RESPONSE_PATTERN = re.compile(r"setResponse\((.+)\);?\s*$", re.DOTALL)


class SheetParseError(ValueError):
    """Raised when the sheet payload cannot be unwrapped or decoded."""


def build_sheet_url(sheet_id: str = RAIN_SHEET_ID) -> str:
    """Return the visualization query URL for a sheet tab."""
    return RAIN_SHEET_URL.format(sheet_id=sheet_id)


def fetch_sheet_text(sheet_id: str = RAIN_SHEET_ID, gid: str = RAIN_SHEET_GID) -> str:
    """
    Download the raw (wrapped) sheet payload.

    :param sheet_id: Spreadsheet id.
    :param gid: Tab id within the spreadsheet.
    :return: Response body as text.
    :raises requests.RequestException: On network failure or a non-200 status.
    """
    url = build_sheet_url(sheet_id)
    params = {"tqx": "out:json", "gid": gid}
    logger.info(f"Fetching rain sheet {sheet_id} (gid={gid})")

    resp = requests.get(url, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
    if resp.status_code != 200:
        logger.error(f"Sheet fetch failed: {resp.status_code} {resp.text[:200]}")
        resp.raise_for_status()
        raise requests.HTTPError(f"Unexpected status {resp.status_code}")
    return resp.text


def _cell_value(cells: list, index: int) -> Any:
    if index >= len(cells):
        return None
    cell = cells[index]
    if not isinstance(cell, dict):
        return None
    return cell.get("v")


def _to_number(value: Any) -> Optional[float]:
    """Coerce a cell value to float, tolerating padded or comma-decimal text."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _to_label(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parse_row(cells: list) -> Optional[RainRecord]:
    """
    Convert one table row to a ``RainRecord``.

    :param cells: The row's ``c`` array.
    :return: RainRecord, or None when a required cell is missing or invalid.
    """
    season = _to_label(_cell_value(cells, 0))
    year = _to_number(_cell_value(cells, 1))
    month = _to_number(_cell_value(cells, 2))
    day = _to_number(_cell_value(cells, 3))
    rain = _to_number(_cell_value(cells, 4))

    if not season or year is None or month is None or day is None or rain is None:
        return None
    if not all(v.is_integer() for v in (year, month, day)):
        return None
    if not 1 <= month <= 12 or not 1 <= day <= 31 or rain < 0:
        return None

    return RainRecord(
        season=season, year=int(year), month=int(month), day=int(day), rain=rain
    )


def parse_sheet_response(text: str) -> List[RainRecord]:
    """
    Unwrap and parse the sheet payload.

    Rows missing any of the five required cells are skipped.

    :param text: Raw response body.
    :return: Parsed records in sheet order.
    :raises SheetParseError: When the wrapper or JSON body is malformed.
    """
    match = _RESPONSE_PATTERN.search(text or "")
    if not match:
        raise SheetParseError("Failed to parse sheet response")

    try:
        payload = json.loads(match.group(1))
        table_rows = payload["table"]["rows"]
    except (json.JSONDecodeError, KeyError, TypeError) as e:
        raise SheetParseError(f"Malformed sheet payload: {e}") from e

    records = []
    skipped = 0
    for row in table_rows:
        cells = row.get("c") if isinstance(row, dict) else None
        record = parse_row(cells) if cells else None
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.info(f"Skipped {skipped} incomplete sheet rows")
    logger.debug(f"Parsed {len(records)} rain records")
    return records
