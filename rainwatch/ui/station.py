"""
Station gauges UI.

Shows the gauge and history images published by the weather station,
grouped by sensor. Images are fetched through ``station_proxy`` helpers and
cached for ``IMAGE_CACHE_TTL_SECONDS``.
"""

from typing import Optional

import requests
import streamlit as st

from rainwatch.api.station_proxy import fetch_upstream
from rainwatch.config import IMAGE_CACHE_TTL_SECONDS, STATION_BASE_URL, STATION_GAUGES
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

GROUP_TITLES = {
    "temperature": "Temperature & Humidity",
    "wind": "Wind & Pressure",
    "rain": "Rain",
    "history": "History",
}


@st.cache_data(show_spinner=False, ttl=IMAGE_CACHE_TTL_SECONDS)
def _cached_station_image(image: str) -> Optional[bytes]:
    try:
        return fetch_upstream(f"{STATION_BASE_URL}/{image}")
    except requests.RequestException as e:
        logger.warning(f"Station image unavailable: {image}: {e}")
        return None


def render():
    """Render the station gauges tab."""
    st.header("Station")
    st.caption(f"Live gauges from {STATION_BASE_URL}, refreshed every {IMAGE_CACHE_TTL_SECONDS // 60} minutes")

    for group, title in GROUP_TITLES.items():
        gauges = [g for g in STATION_GAUGES if g["group"] == group]
        st.subheader(title)
        columns = st.columns(2 if group == "history" else 5)
        for i, gauge in enumerate(gauges):
            with columns[i % len(columns)]:
                image = _cached_station_image(gauge["image"])
                if image is None:
                    st.caption(f"{gauge['title']}: unavailable")
                else:
                    st.image(image, caption=gauge["title"])
