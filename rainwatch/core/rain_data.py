"""
Rain dataset loading.

``load_rain_data`` returns the daily rainfall row set as a DataFrame with the
canonical columns (season, year, month, day, rain). A persisted cache entry
younger than ``CACHE_TTL_MS`` is used without a network call; otherwise the
sheet is fetched, parsed and written back to the cache together with a fresh
timestamp. There is no automatic retry: a failed load raises
``RainDataLoadError`` and the caller may try again on the next page load.
"""

import time
from typing import Callable, Iterable, List, Optional

import pandas as pd
import requests

from rainwatch.api import sheets_client
from rainwatch.config import CACHE_DATA_KEY, CACHE_TS_KEY, CACHE_TTL_MS, RAIN_COLUMNS
from rainwatch.models.rain import RainRecord
from rainwatch.storage.cache_store import JsonCacheStore
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

RAIN_DTYPES = {
    "season": "object",
    "year": "int64",
    "month": "int64",
    "day": "int64",
    "rain": "float64",
}


class RainDataLoadError(RuntimeError):
    """The rainfall dataset could not be fetched or parsed."""


def now_ms() -> int:
    return int(time.time() * 1000)


def empty_rain_frame() -> pd.DataFrame:
    return pd.DataFrame({col: pd.Series(dtype=dtype) for col, dtype in RAIN_DTYPES.items()})


def records_to_frame(records: Iterable[RainRecord]) -> pd.DataFrame:
    """
    Build the canonical row-set DataFrame from records, preserving order.

    :param records: RainRecord values.
    :return: DataFrame with RAIN_COLUMNS and a fresh RangeIndex.
    """
    rows = [r.to_dict() for r in records]
    if not rows:
        return empty_rain_frame()
    return pd.DataFrame(rows, columns=RAIN_COLUMNS).astype(RAIN_DTYPES)


def is_cache_fresh(cached_ts: Optional[float], current_ms: int, ttl_ms: int = CACHE_TTL_MS) -> bool:
    """True when a cache timestamp exists and is younger than ``ttl_ms``."""
    if cached_ts is None:
        return False
    try:
        return current_ms - float(cached_ts) < ttl_ms
    except (TypeError, ValueError):
        return False


def _read_cached_records(store: JsonCacheStore) -> Optional[List[RainRecord]]:
    cached = store.get(CACHE_DATA_KEY)
    if not isinstance(cached, list):
        return None
    try:
        return [RainRecord.from_dict(item) for item in cached]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Discarding malformed cached rain data: {e}")
        return None


def fetch_rain_records() -> List[RainRecord]:
    """Fetch and parse the sheet (network path only, no cache)."""
    text = sheets_client.fetch_sheet_text()
    return sheets_client.parse_sheet_response(text)


def load_rain_data(
    store: Optional[JsonCacheStore] = None,
    fetch: Callable[[], List[RainRecord]] = fetch_rain_records,
    current_ms: Optional[int] = None,
) -> pd.DataFrame:
    """
    Load the rainfall row set from cache or network.

    :param store: Persisted cache; defaults to the configured JsonCacheStore.
    :param fetch: Callable returning freshly parsed records.
    :param current_ms: Clock override in epoch milliseconds.
    :return: Canonical row-set DataFrame.
    :raises RainDataLoadError: On network or parse failure.
    """
    store = store if store is not None else JsonCacheStore()
    current_ms = now_ms() if current_ms is None else current_ms

    if is_cache_fresh(store.get(CACHE_TS_KEY), current_ms):
        records = _read_cached_records(store)
        if records is not None:
            logger.info(f"Rain data cache hit: {len(records)} records")
            return records_to_frame(records)

    logger.info("Rain data cache miss, fetching sheet")
    try:
        records = fetch()
    except (requests.RequestException, ValueError) as e:
        logger.exception(f"Failed to load rain data: {e}")
        raise RainDataLoadError(str(e)) from e

    if store.set(CACHE_DATA_KEY, [r.to_dict() for r in records]):
        store.set(CACHE_TS_KEY, current_ms)
    else:
        logger.warning("Rain data fetched but could not be cached")

    logger.info(f"Loaded {len(records)} rain records from sheet")
    return records_to_frame(records)


def get_last_fetch_ms(store: Optional[JsonCacheStore] = None) -> Optional[int]:
    """Epoch-ms timestamp of the last successful fetch, if cached."""
    store = store if store is not None else JsonCacheStore()
    cached_ts = store.get(CACHE_TS_KEY)
    try:
        return int(cached_ts) if cached_ts is not None else None
    except (TypeError, ValueError):
        return None


def list_seasons(df: pd.DataFrame, newest_first: bool = True) -> List[str]:
    """Distinct season labels in label order, newest first by default."""
    return sorted(df["season"].unique().tolist(), reverse=newest_first)
