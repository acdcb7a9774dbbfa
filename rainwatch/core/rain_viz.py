"""
rain_viz.py
Rainfall visualization functions for the rainwatch dashboard.

Functions:
- create_cumulative_rain_chart: Season running total over the average curve
- create_no_data_chart: Placeholder figure for a season without records
- create_monthly_climatology_chart: Average rain per month in season order
- create_top_days_chart: Wettest single days as horizontal bars
- month_band_color: Colour band for a monthly average
- intensity_color: Colour for a daily amount by intensity class
"""

import pandas as pd
import plotly.graph_objects as go

from rainwatch.config import (
    CHART_MARKER_LIMIT,
    MONTH_ABBREVIATIONS,
    SEASON_LENGTH_DAYS,
)
from rainwatch.core.chart_config import (
    apply_bar_layout,
    apply_standard_axes,
    apply_time_series_layout,
    create_standard_annotation,
    get_rain_band_colors,
    get_standard_colors,
)
from rainwatch.core.cumulative import final_value
from rainwatch.core.rainfall_analysis import rain_intensity
from rainwatch.core.season_calendar import season_months_in_order
from rainwatch.utils.chart_utils import (
    cumulative_axis_max,
    season_axis_ticks,
    y_axis_step,
)
from rainwatch.utils.log_util import app_logger

logger = app_logger(__name__)


def create_no_data_chart(season: str, height: int = 300) -> go.Figure:
    """
    Placeholder figure: hidden axes and a centred message.

    :param season: Season label shown in the message.
    :param height: Chart height in pixels.
    :return: Plotly figure without traces.
    """
    colors = get_standard_colors()
    fig = go.Figure()
    fig = apply_time_series_layout(fig, height=height)
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    fig.add_annotation(
        create_standard_annotation(
            text=f"No data for season {season}",
            position="center",
            bgcolor="rgba(0,0,0,0)",
            borderwidth=0,
            font=dict(size=14, color=colors["placeholder_text"]),
        )
    )
    return fig


def create_cumulative_rain_chart(
    season_series: pd.DataFrame,
    average_curve: pd.DataFrame,
    season: str,
    height: int = 380,
) -> go.Figure:
    """
    Cumulative rainfall for one season over the multi-season average.

    Both curves share the day-of-season x axis, fixed to the full season,
    with a gridline at each month start. The y axis runs to
    ``cumulative_axis_max`` so both curves fit.

    :param season_series: Output of build_season_series.
    :param average_curve: Output of build_average_curve.
    :param season: Selected season label.
    :param height: Chart height in pixels.
    :return: Plotly figure (placeholder when the season has no data).
    """
    if season_series.empty:
        logger.debug(f"No records for season {season}, rendering placeholder")
        return create_no_data_chart(season, height=height)

    colors = get_standard_colors()
    season_total = final_value(season_series, "cumulative_rain")
    average_total = final_value(average_curve, "average_cumulative")
    y_max = cumulative_axis_max(season_total, average_total)

    fig = go.Figure()

    # Average drawn first so the season line sits on top
    if not average_curve.empty:
        fig.add_trace(
            go.Scatter(
                x=average_curve["day_of_season"],
                y=average_curve["average_cumulative"],
                mode="lines",
                fill="tozeroy",
                line=dict(color=colors["average_line"], width=1.5, dash="dash"),
                fillcolor=colors["average_fill"],
                customdata=average_curve["contributors"],
                hovertemplate="Average: %{y:.1f} mm (%{customdata} seasons)<extra></extra>",
                name="Average",
            )
        )
        last_avg = average_curve.iloc[-1]
        fig.add_annotation(
            create_standard_annotation(
                text=f"Average {average_total:.0f} mm",
                xref="x",
                yref="y",
                x=float(last_avg["day_of_season"]),
                y=average_total,
                xanchor="right",
                yanchor="top",
                bgcolor="rgba(0,0,0,0)",
                borderwidth=0,
                font=dict(size=11, color=colors["average_label"]),
            )
        )

    show_markers = len(season_series) <= CHART_MARKER_LIMIT
    fig.add_trace(
        go.Scatter(
            x=season_series["day_of_season"],
            y=season_series["cumulative_rain"],
            mode="lines+markers" if show_markers else "lines",
            fill="tozeroy",
            line=dict(color=colors["season_line"], width=2),
            marker=dict(color=colors["season_marker"], size=5),
            fillcolor=colors["season_fill"],
            customdata=season_series["rain"],
            hovertemplate="%{y:.1f} mm (+%{customdata:.1f})<extra></extra>",
            name=season,
        )
    )

    last_point = season_series.iloc[-1]
    near_right_edge = last_point["day_of_season"] > SEASON_LENGTH_DAYS * 0.85
    fig.add_annotation(
        create_standard_annotation(
            text=f"<b>{season_total:.1f} mm</b>",
            xref="x",
            yref="y",
            x=float(last_point["day_of_season"]),
            y=season_total,
            xanchor="right" if near_right_edge else "left",
            yanchor="bottom",
            bgcolor="rgba(0,0,0,0)",
            borderwidth=0,
            font=dict(size=12, color=colors["season_marker"]),
        )
    )

    fig = apply_time_series_layout(fig, height=height, showlegend=False)
    fig = apply_standard_axes(
        fig,
        xaxis_title="",
        yaxis_title="Cumulative rain (mm)",
        showgrid_x=True,
        showgrid_y=True,
    )

    tickvals, ticktext = season_axis_ticks()
    fig.update_xaxes(
        range=[0, SEASON_LENGTH_DAYS],
        tickmode="array",
        tickvals=tickvals,
        ticktext=ticktext,
    )
    fig.update_yaxes(range=[0, y_max], dtick=y_axis_step(y_max))

    return fig


def month_band_color(average_mm: float) -> str:
    """Bar colour for a monthly average (>80, >30, >0, none)."""
    bands = get_rain_band_colors()
    if average_mm > 80:
        return bands["month_high"]
    if average_mm > 30:
        return bands["month_medium"]
    if average_mm > 0:
        return bands["month_low"]
    return bands["month_none"]


def intensity_color(rain_mm: float) -> str:
    """Colour for a daily amount: red extreme, amber heavy, blue moderate, cyan light."""
    return get_rain_band_colors()[rain_intensity(rain_mm)]


def create_monthly_climatology_chart(
    climatology: pd.DataFrame, height: int = 280
) -> go.Figure:
    """
    Bar chart of the average rain per month, in season month order.

    :param climatology: Output of calculate_monthly_climatology.
    :param height: Chart height in pixels.
    :return: Plotly figure
    """
    order = {month: i for i, month in enumerate(season_months_in_order())}
    data = climatology.assign(_order=climatology["month"].map(order)).sort_values("_order")

    fig = go.Figure(
        go.Bar(
            x=[MONTH_ABBREVIATIONS[m] for m in data["month"]],
            y=data["average_rain"],
            marker_color=[month_band_color(v) for v in data["average_rain"]],
            text=[f"{v:.0f}" if v > 0 else "" for v in data["average_rain"]],
            textposition="outside",
            customdata=data["years"],
            hovertemplate="%{x}: %{y:.1f} mm (%{customdata} years)<extra></extra>",
        )
    )
    return apply_bar_layout(fig, height=height, yaxis_title="Average rain (mm)")


def create_top_days_chart(top_days: pd.DataFrame, height: int = 360) -> go.Figure:
    """
    Horizontal bars for the wettest single days, largest first.

    :param top_days: Output of top_rain_days.
    :param height: Chart height in pixels.
    :return: Plotly figure
    """
    if top_days.empty:
        fig = go.Figure()
        fig.add_annotation(create_standard_annotation("No rain records", position="center"))
        return apply_bar_layout(fig, height=height, horizontal=True)

    colors = get_standard_colors()
    labels = [
        f"{int(r.rank)}. {int(r.day):02d}/{int(r.month):02d}/{int(r.year)}"
        for r in top_days.itertuples()
    ]
    fig = go.Figure(
        go.Bar(
            x=top_days["rain"],
            y=labels,
            orientation="h",
            marker_color=colors["season_marker"],
            text=[f"{v:.1f} mm" for v in top_days["rain"]],
            textposition="auto",
            customdata=top_days["season"],
            hovertemplate="%{y} (season %{customdata}): %{x:.1f} mm<extra></extra>",
        )
    )
    return apply_bar_layout(fig, height=height, yaxis_title="Rain (mm)", horizontal=True)
