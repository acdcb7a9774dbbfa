# config.py
"""
Configurations for the rainwatch weather station dashboard.

This module holds the rain-season definition, data source ids, cache and
table settings, chart constants and the station endpoints that are shared
across the application. Deployment-specific values are resolved through
``get_setting`` so the same code runs under Streamlit, tests and the proxy.
"""

import calendar
import os
from typing import Any, Optional


def get_setting(name: str, default: Optional[Any] = None) -> Any:
    """
    Resolve a setting from the environment, then Streamlit secrets.

    :param name: Setting name, e.g. "RAIN_SHEET_ID".
    :param default: Value returned when the setting is not defined anywhere.
    :return: The configured value or ``default``.
    """
    if name in os.environ:
        return os.environ[name]

    try:
        import streamlit as st

        return st.secrets.get(name, default)
    except Exception:
        # No secrets.toml outside of a Streamlit deployment
        return default


# Rain season: Oct 1 -> Sep 30, fixed width regardless of leap years
SEASON_START_MONTH = 10
SEASON_LENGTH_DAYS = 365
# Non-leap reference years for the two halves of a season (Oct-Dec, Jan-Sep)
SEASON_REFERENCE_YEARS = (2001, 2002)

# Dataset source (Google Sheets visualization endpoint)
RAIN_SHEET_ID = get_setting(
    "RAIN_SHEET_ID", "1AfOkRqGLd915bBpV6pRLnAKT2Ux3AXauxPaqLGBXlGE"
)
RAIN_SHEET_GID = get_setting("RAIN_SHEET_GID", "231285793")
RAIN_SHEET_URL = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq"
RAIN_COLUMNS = ["season", "year", "month", "day", "rain"]
REQUEST_TIMEOUT_SECONDS = 30

# Persisted dataset cache
CACHE_URI = get_setting("RAINWATCH_CACHE_URI", ".cache")
CACHE_NAMESPACE = "rainwatch"
CACHE_DATA_KEY = "rain_data"
CACHE_TS_KEY = "rain_data_ts"
CACHE_TTL_MS = 6 * 60 * 60 * 1000

# Table view
DEFAULT_PAGE_SIZE = 100
PAGE_SIZE_OPTIONS = [50, 100, 250, 500]
SORT_KEYS = ["season", "year", "month", "day", "rain"]
DEFAULT_SORT_KEY = "year"
DEFAULT_SORT_DIR = "desc"

# Statistics
TOP_DAYS_COUNT = 10

# Charts
CHART_Y_STEP_MM = 50
CHART_MARKER_LIMIT = 80
RAIN_BAR_MAX_MM = 150
RAIN_INTENSITY_THRESHOLDS = [
    (50, "extreme"),
    (20, "heavy"),
    (5, "moderate"),
    (0, "light"),
]

MONTH_NAMES = list(calendar.month_name)
MONTH_ABBREVIATIONS = list(calendar.month_abbr)

# Export
EXPORT_HEADER = ["Season", "Year", "Month", "Day", "Rain (mm)", "Date"]
EXPORT_FILENAME = "rain-data.csv"

# Station (upstream for the proxy and the Station tab)
STATION_BASE_URL = get_setting(
    "STATION_BASE_URL", "http://weather.maabarot.org.il"
).rstrip("/")
STATION_CURRENT_PAGE = "Current_Vantage_Pro.htm"
STATION_TAG_LIST_URL = get_setting(
    "STATION_TAG_LIST_URL", "http://62.128.42.5/weather/Tag-List.htm"
)
IMAGE_CACHE_TTL_SECONDS = 120
DEFAULT_PROXY_PORT = 3000

STATION_GAUGES = [
    {"image": "OutsideTemp.gif", "title": "Temperature", "group": "temperature"},
    {"image": "OutsideHumidity.gif", "title": "Humidity", "group": "temperature"},
    {"image": "DewPoint.gif", "title": "Dew Point", "group": "temperature"},
    {"image": "WindChill.gif", "title": "Wind Chill", "group": "temperature"},
    {"image": "HeatIndex.gif", "title": "Heat Index", "group": "temperature"},
    {"image": "WindDirection.gif", "title": "Wind Direction", "group": "wind"},
    {"image": "WindSpeed.gif", "title": "Wind Speed", "group": "wind"},
    {"image": "Barometer.gif", "title": "Barometer", "group": "wind"},
    {"image": "Rain.gif", "title": "Daily Rain", "group": "rain"},
    {"image": "RainRate.gif", "title": "Rain Rate", "group": "rain"},
    {"image": "RainStorm.gif", "title": "Storm Rain", "group": "rain"},
    {"image": "MonthlyRain.gif", "title": "Monthly Rain", "group": "rain"},
    {"image": "YearlyRain.gif", "title": "Yearly Rain", "group": "rain"},
    {"image": "OutsideTempHistory.gif", "title": "Temperature History", "group": "history"},
    {"image": "BarometerHistory.gif", "title": "Barometer History", "group": "history"},
]

MIME_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".htm": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "text/javascript; charset=utf-8",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
}
