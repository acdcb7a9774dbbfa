"""
Main streamlit.io application
"""

import streamlit as st

from rainwatch.ui import rain, station
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

st.set_page_config(
    page_title="Weather Station Dashboard",
    layout="wide",
    initial_sidebar_state="collapsed",
)

if st.sidebar.button("🔄 Reload rain data"):
    st.session_state.pop("rain_df", None)
    st.session_state.pop("rain_table", None)
    logger.info("Rain data reload requested")


# Present the dashboard ########################

tab_names = ["Rain History", "Station"]
tabs = st.tabs(tab_names)

tab_modules = {
    "Rain History": rain,
    "Station": station,
}

for tab, name in zip(tabs, tab_names):
    with tab:
        tab_modules[name].render()
