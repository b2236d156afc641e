"""
src/callbacks/region.py
───────────────────────
Region detail and historical chart for the selected map point.
"""
from __future__ import annotations

import plotly.graph_objects as go
from dash import Input, Output, ctx, html

from config.air_quality import TIER_RECOMMENDATIONS
from src.adapters.chart_series import build_chart_series
from src.adapters.formatting import format_timestamp
from src.analytics.classification import badge_text_color, classify
from src.analytics.correlation import correlate
from src.data.models import AnomalyRecord
from src.errors import NoHistoryAvailable
from src.layout.components.alert_badge import tier_badge
from src.runtime import feed

CARD_BG = "#161b22"
GRID_CLR = "#30363d"
MUTED = "#8b949e"
PLOTLY_TMPL = "plotly_dark"


def _layout(height: int = 300) -> dict:
    return {
        "template": PLOTLY_TMPL,
        "paper_bgcolor": CARD_BG,
        "plot_bgcolor": CARD_BG,
        "margin": {"l": 10, "r": 10, "t": 30, "b": 10},
        "font": {"color": "#c9d1d9", "size": 11},
        "xaxis": {"gridcolor": GRID_CLR, "title": "Time"},
        "yaxis": {"gridcolor": GRID_CLR, "title": "Value", "rangemode": "tozero"},
        "height": height,
        "showlegend": False,
    }


def _empty_figure(message: str) -> go.Figure:
    fig = go.Figure()
    fig.update_layout(**_layout())
    fig.add_annotation(text=message, showarrow=False, font={"color": MUTED, "size": 12},
                       xref="paper", yref="paper", x=0.5, y=0.5)
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return fig


def _detail(record: AnomalyRecord) -> html.Div:
    result = classify(record.parameter, record.value)
    children = [
        html.H6("Location", style={"color": MUTED, "fontSize": ".72rem", "textTransform": "uppercase"}),
        html.P(
            [f"Latitude: {record.latitude:.5f}", html.Br(), f"Longitude: {record.longitude:.5f}"],
            style={"fontSize": ".82rem"},
        ),
        html.H6("Latest Measurement", style={"color": MUTED, "fontSize": ".72rem", "textTransform": "uppercase"}),
        html.Div(
            html.Strong(f"{record.parameter}: {record.value:.2f}"),
            style={"color": result.color, "fontSize": "1.1rem"},
        ),
        tier_badge(result.description, result.color, badge_text_color(record.value)),
        html.P(f"Detected at: {format_timestamp(record.detected_at)}", style={"fontSize": ".78rem", "marginTop": "8px"}),
    ]
    if record.kind is not None:
        children += [
            html.H6("Anomaly Information", style={"color": MUTED, "fontSize": ".72rem", "textTransform": "uppercase"}),
            html.P([html.Strong("Type: "), record.kind.value], style={"fontSize": ".78rem", "marginBottom": "2px"}),
            html.P([html.Strong("ID: "), record.id], style={"fontSize": ".78rem", "marginBottom": "2px"}),
        ]
        if record.source_data_id:
            children.append(
                html.P([html.Strong("Data Source ID: "), record.source_data_id], style={"fontSize": ".78rem"})
            )
    children += [
        html.H6("Health Recommendations", style={"color": MUTED, "fontSize": ".72rem", "textTransform": "uppercase", "marginTop": "10px"}),
        html.P(TIER_RECOMMENDATIONS[result.tier], style={"fontSize": ".78rem"}),
    ]
    return html.Div(children)


def register(app) -> None:

    @app.callback(
        [
            Output("region-detail", "children"),
            Output("history-chart", "figure"),
            Output("history-note", "children"),
        ],
        [
            Input("store-selected", "data"),
            Input("history-window", "value"),
            Input("interval-live", "n_intervals"),
        ],
    )
    def update_region(selected: dict | None, window_hours: int, n_intervals: int):
        if ctx.triggered_id == "history-window" and window_hours:
            feed.change_window(int(window_hours))

        if not selected:
            prompt = "Select a region on the map to view details"
            return (
                html.Div(prompt, style={"color": MUTED, "padding": "20px", "textAlign": "center"}),
                _empty_figure("Select a region on the map to view historical data"),
                "",
            )

        record = AnomalyRecord.model_validate(selected)
        view = feed.view()
        try:
            history = correlate(record, view.records)
        except NoHistoryAvailable:
            return (
                _detail(record),
                _empty_figure(f"No history available for this location in the last {view.window_hours} hours"),
                "Chart shows 0 data points over the selected time period",
            )

        series = build_chart_series(history)
        fig = go.Figure()
        fig.add_scatter(
            x=series.points["timestamp"],
            y=series.points["value"],
            mode="lines+markers",
            line={"color": series.color, "width": 1.6, "shape": "spline"},
            name=series.parameter,
            hovertemplate="%{x|%d/%m %H:%M}<br>" + series.parameter + ": %{y:.1f}<extra></extra>",
        )
        fig.update_layout(**_layout(300), title={"text": f"Historical {series.parameter} Values", "font": {"size": 12}})

        note = f"Chart shows {len(series.points)} data points over the selected time period"
        return _detail(record), fig, note
