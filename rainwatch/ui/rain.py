"""
Rain history UI for the rainwatch dashboard.

This module provides the Streamlit presentation layer for the rainfall
archive: headline figures, extended statistics, the cumulative season chart,
the filterable table and CSV export. Data processing lives in
rainwatch.core and charts in rainwatch.core.rain_viz.
"""

from datetime import datetime

import pandas as pd
import streamlit as st

import rainwatch.core.cumulative as cumulative
import rainwatch.core.rain_data as rain_data
import rainwatch.core.rain_viz as rain_viz
import rainwatch.core.rainfall_analysis as rain_analysis
from rainwatch.config import (
    CACHE_TTL_MS,
    EXPORT_FILENAME,
    MONTH_NAMES,
    PAGE_SIZE_OPTIONS,
    RAIN_BAR_MAX_MM,
    SORT_KEYS,
)
from rainwatch.core.export import export_rows_to_bytes, format_date_label
from rainwatch.core.table_view import TableController
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)

BLANK = "—"


@st.cache_data(show_spinner=False, max_entries=5, ttl=CACHE_TTL_MS // 1000)
def _cached_average_curve(df: pd.DataFrame, version: str = "v1") -> pd.DataFrame:
    return cumulative.build_average_curve(df)


@st.cache_data(show_spinner=False, max_entries=5, ttl=CACHE_TTL_MS // 1000)
def _cached_statistics(df: pd.DataFrame, version: str = "v1"):
    """Summary, extended statistics, monthly climatology and top days."""
    return (
        rain_analysis.calculate_summary(df),
        rain_analysis.calculate_rainfall_statistics(df),
        rain_analysis.calculate_monthly_climatology(df),
        rain_analysis.top_rain_days(df),
    )


def _get_rain_df() -> pd.DataFrame:
    """Row set for this session, loaded once from cache or network."""
    if "rain_df" not in st.session_state:
        with st.spinner("Loading rain history..."):
            st.session_state["rain_df"] = rain_data.load_rain_data()
    return st.session_state["rain_df"]


def _get_table_controller(df: pd.DataFrame) -> TableController:
    controller = st.session_state.get("rain_table")
    if controller is None or controller.rows is not df:
        controller = TableController(df)
        st.session_state["rain_table"] = controller
    return controller


def _fmt(value, pattern: str = "{:.1f}") -> str:
    return BLANK if value is None else pattern.format(value)


def render_summary(summary, stats) -> None:
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Records", f"{summary.record_count:,}")
    col2.metric("Seasons", summary.season_count)
    col3.metric("Max daily (mm)", _fmt(summary.max_rain))
    if summary.min_year is not None:
        col4.metric("Years", f"{summary.min_year} – {summary.max_year}")
    else:
        col4.metric("Years", BLANK)

    col1, col2, col3 = st.columns(3)
    col1.metric("Average season (mm)", _fmt(stats.average_annual))
    col2.metric("Average per rain day (mm)", _fmt(stats.average_per_rain_day))
    col3.metric("Rain days per season", _fmt(stats.average_rain_days, "{:.0f}"))

    col1, col2, col3 = st.columns(3)
    wettest, driest, max_day = stats.wettest_season, stats.driest_season, stats.max_day
    col1.metric(
        "Wettest season",
        wettest.season if wettest else BLANK,
        f"{wettest.total_rain:.1f} mm" if wettest else None,
        delta_color="off",
    )
    col2.metric(
        "Driest season",
        driest.season if driest else BLANK,
        f"{driest.total_rain:.1f} mm" if driest else None,
        delta_color="off",
    )
    col3.metric(
        "Wettest day",
        f"{max_day.rain:.1f} mm" if max_day else BLANK,
        max_day.date_label if max_day else None,
        delta_color="off",
    )


def render_cumulative_chart(df: pd.DataFrame) -> None:
    st.subheader("Cumulative Rainfall")
    seasons = rain_data.list_seasons(df)
    if not seasons:
        st.info("No seasons available.")
        return

    season = st.selectbox("Season:", seasons, index=0, key="rain_chart_season")
    average_curve = _cached_average_curve(df)
    season_series = cumulative.build_season_series(df, season)

    fig = rain_viz.create_cumulative_rain_chart(season_series, average_curve, season)
    st.plotly_chart(fig, width="stretch", key="cumulative_rain")

    if not average_curve.empty:
        contributors = int(average_curve["contributors"].max())
        st.caption(f"Dashed line: average of {contributors} completed seasons")


def _table_display(rows: pd.DataFrame) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Season": rows["season"],
            "Year": rows["year"],
            "Month": rows["month"].map(lambda m: MONTH_NAMES[m]),
            "Day": rows["day"],
            "Rain (mm)": rows["rain"],
            "Intensity": rows["rain"].map(rain_analysis.rain_intensity),
            "Date": [
                format_date_label(d, m, y)
                for d, m, y in zip(rows["day"], rows["month"], rows["year"])
            ],
        }
    )


def _intensity_style(rain_mm: float) -> str:
    return f"color: {rain_viz.intensity_color(rain_mm)}; font-weight: 600"


def _styled_table(display: pd.DataFrame):
    """Colour the Intensity column by the day's rain amount."""
    colors = display["Rain (mm)"].map(_intensity_style)
    return display.style.apply(lambda _: colors, subset=["Intensity"])


def _apply_sort_choice(controller: TableController, sort_key: str) -> None:
    """Re-sort when the selected key differs from the controller's."""
    if sort_key != controller.state.sort_key:
        controller.sort_by(sort_key)


def render_table(df: pd.DataFrame) -> None:
    st.subheader("Daily Records")
    controller = _get_table_controller(df)
    seasons = rain_data.list_seasons(df)

    col1, col2, col3, col4 = st.columns([3, 2, 2, 1])
    with col1:
        search = st.text_input("Search:", key="rain_search", placeholder="season, date, amount...")
    with col2:
        season = st.selectbox("Season filter:", [None] + seasons, format_func=lambda s: s or "All seasons")
    with col3:
        month = st.selectbox(
            "Month filter:",
            [None] + list(range(1, 13)),
            format_func=lambda m: MONTH_NAMES[m] if m else "All months",
        )
    with col4:
        page_size = st.selectbox(
            "Rows:",
            PAGE_SIZE_OPTIONS,
            index=PAGE_SIZE_OPTIONS.index(controller.state.page_size),
        )

    controller.set_filters(search=search, season=season, month=month)
    controller.set_page_size(page_size)

    col1, col2, col3 = st.columns([2, 1, 3])
    with col1:
        # Unkeyed so the widget always shows the controller's sort key
        sort_key = st.selectbox(
            "Sort by:",
            SORT_KEYS,
            index=SORT_KEYS.index(controller.state.sort_key),
        )
        _apply_sort_choice(controller, sort_key)
    with col2:
        arrow = "▲ asc" if controller.state.sort_dir == "asc" else "▼ desc"
        st.button(arrow, on_click=lambda: controller.sort_by(controller.state.sort_key))
    with col3:
        st.caption(controller.row_count_label())

    visible = controller.visible_rows()
    st.dataframe(
        _styled_table(_table_display(visible)),
        width="stretch",
        hide_index=True,
        column_config={
            "Rain (mm)": st.column_config.ProgressColumn(
                "Rain (mm)", min_value=0, max_value=RAIN_BAR_MAX_MM, format="%.1f"
            )
        },
    )

    col1, col2, col3, col4 = st.columns([1, 2, 1, 2])
    with col1:
        st.button("◀ Prev", disabled=not controller.has_prev, on_click=controller.prev_page)
    with col2:
        st.write(f"Page {controller.state.page} of {controller.page_count}")
    with col3:
        st.button("Next ▶", disabled=not controller.has_next, on_click=controller.next_page)
    with col4:
        st.download_button(
            "Export CSV",
            data=export_rows_to_bytes(controller.view),
            file_name=EXPORT_FILENAME,
            mime="text/csv",
        )


def render():
    """Render the rain history tab."""
    st.header("Rain History")

    try:
        df = _get_rain_df()
    except rain_data.RainDataLoadError as e:
        st.error(f"Failed to load rain data: {e}")
        return

    last_fetch = rain_data.get_last_fetch_ms()
    if last_fetch:
        st.caption(f"Last updated: {datetime.fromtimestamp(last_fetch / 1000):%d/%m/%Y %H:%M}")

    summary, stats, climatology, top_days = _cached_statistics(df)
    render_summary(summary, stats)

    st.divider()
    render_cumulative_chart(df)

    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Monthly Average")
        st.plotly_chart(
            rain_viz.create_monthly_climatology_chart(climatology),
            width="stretch",
            key="monthly_climatology",
        )
    with col2:
        st.subheader("Wettest Days")
        st.plotly_chart(
            rain_viz.create_top_days_chart(top_days), width="stretch", key="top_days"
        )

    st.divider()
    render_table(df)
