"""
chart_config.py

Reusable Plotly configuration helpers shared by the rainfall charts.

Provides standardized layout, axis, annotation, and colour configurations
so every chart in the dashboard looks the same.
"""

from typing import Any, Dict

import plotly.graph_objects as go


def get_default_margins() -> Dict[str, int]:
    """
    Get standard margin configuration for charts.

    :return: Dictionary with margin settings
    """
    return dict(l=55, r=30, t=30, b=45)


def get_standard_colors() -> Dict[str, str]:
    """
    Get standard color palette used across charts.

    :return: Dictionary with color definitions
    """
    return {
        "season_line": "rgba(56, 189, 248, 0.9)",
        "season_marker": "rgba(56, 189, 248, 1)",
        "season_fill": "rgba(56, 189, 248, 0.2)",
        "average_line": "rgba(251, 191, 36, 0.6)",
        "average_label": "rgba(251, 191, 36, 0.8)",
        "average_fill": "rgba(251, 191, 36, 0.08)",
        "placeholder_text": "rgba(120, 120, 120, 0.8)",
        "gridline": "#e5e7eb",
    }


def get_rain_band_colors() -> Dict[str, str]:
    """
    Colours for rainfall amount bands (monthly bars, intensity classes).

    :return: Dictionary keyed by band name
    """
    return {
        "extreme": "#ef4444",
        "heavy": "#f59e0b",
        "moderate": "#3b82f6",
        "light": "#22d3ee",
        "month_high": "#3b82f6",
        "month_medium": "#22d3ee",
        "month_low": "rgba(56, 189, 248, 0.4)",
        "month_none": "rgba(200, 200, 200, 0.3)",
    }


def apply_time_series_layout(
    fig: go.Figure,
    height: int = 380,
    showlegend: bool = False,
) -> go.Figure:
    """
    Apply standard line chart layout configuration.

    :param fig: Plotly figure to configure
    :param height: Chart height in pixels
    :param showlegend: Whether to show legend
    :return: Configured figure
    """
    layout_config = {
        "height": height,
        "margin": get_default_margins(),
        "showlegend": showlegend,
        "hovermode": "x unified",
        "template": "plotly_white",
    }

    fig.update_layout(**layout_config)
    return fig


def apply_standard_axes(
    fig: go.Figure,
    xaxis_title: str = "",
    yaxis_title: str = "",
    showgrid_x: bool = False,
    showgrid_y: bool = True,
) -> go.Figure:
    """
    Apply standard axis configuration to charts.

    :param fig: Plotly figure to configure
    :param xaxis_title: X-axis title
    :param yaxis_title: Y-axis title
    :param showgrid_x: Whether to show x-axis grid
    :param showgrid_y: Whether to show y-axis grid
    :return: Configured figure
    """
    gridcolor = get_standard_colors()["gridline"]
    xaxis_config = {
        "title": xaxis_title,
        "showgrid": showgrid_x,
        "gridcolor": gridcolor,
    }

    yaxis_config = {
        "title": yaxis_title,
        "showgrid": showgrid_y,
        "gridcolor": gridcolor,
        "rangemode": "tozero",
    }

    fig.update_xaxes(**xaxis_config)
    fig.update_yaxes(**yaxis_config)
    return fig


def create_standard_annotation(
    text: str,
    position: str = "top_right",
    xref: str = "paper",
    yref: str = "paper",
    showarrow: bool = False,
    **kwargs
) -> Dict[str, Any]:
    """
    Create a standard annotation with common positioning.

    :param text: Annotation text
    :param position: Position preset ("top_right", "top_left", "bottom_right", "center")
    :param xref: X reference ("paper" or "data")
    :param yref: Y reference ("paper" or "data")
    :param showarrow: Whether to show arrow
    :param kwargs: Additional annotation parameters, override the preset
    :return: Annotation configuration dictionary
    """
    positions = {
        "top_right": dict(x=0.98, y=0.95, xanchor="right", yanchor="top"),
        "top_left": dict(x=0.02, y=0.95, xanchor="left", yanchor="top"),
        "bottom_right": dict(x=0.98, y=0.05, xanchor="right", yanchor="bottom"),
        "center": dict(x=0.5, y=0.5, xanchor="center", yanchor="middle"),
    }

    pos_config = positions.get(position, positions["top_right"])

    annotation = {
        "text": text,
        "xref": xref,
        "yref": yref,
        "showarrow": showarrow,
        "bgcolor": "rgba(255,255,255,0.8)",
        "bordercolor": "gray",
        "borderwidth": 1,
        "borderpad": 4,
        **pos_config,
        **kwargs,
    }

    return annotation


def apply_bar_layout(
    fig: go.Figure,
    height: int = 300,
    yaxis_title: str = "",
    horizontal: bool = False,
) -> go.Figure:
    """
    Apply standard bar chart layout configuration.

    :param fig: Plotly figure to configure
    :param height: Chart height in pixels
    :param yaxis_title: Value-axis title
    :param horizontal: True when bars run along the x axis
    :return: Configured figure
    """
    layout_config = {
        "height": height,
        "showlegend": False,
        "template": "plotly_white",
        "margin": get_default_margins(),
        "bargap": 0.25,
    }

    fig.update_layout(**layout_config)

    gridcolor = get_standard_colors()["gridline"]
    if horizontal:
        fig.update_xaxes(title=yaxis_title, rangemode="tozero", showgrid=True, gridcolor=gridcolor)
        fig.update_yaxes(showgrid=False, autorange="reversed", type="category")
    else:
        fig.update_yaxes(title=yaxis_title, rangemode="tozero", showgrid=True, gridcolor=gridcolor)
        fig.update_xaxes(showgrid=False, type="category")

    return fig
