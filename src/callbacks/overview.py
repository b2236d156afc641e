"""
src/callbacks/overview.py
─────────────────────────
Live map, KPI banner and active-alert panel callbacks.
"""
from __future__ import annotations

from datetime import UTC, datetime

import dash_bootstrap_components as dbc
import plotly.graph_objects as go
from dash import Input, Output, State, ctx, html, no_update

from src.adapters.alert_list import AlertItem, build_alert_items
from src.adapters.geo import build_features
from src.layout.components.alert_badge import tier_badge
from src.layout.components.kpi_card import kpi_card
from src.runtime import feed

CARD_BG = "#161b22"
MUTED = "#8b949e"

_EMPHASIS_BG = {
    "danger": "rgba(218,54,51,0.12)",
    "warning": "rgba(232,160,32,0.12)",
}


def _map_figure(features) -> go.Figure:
    if features.empty:
        center = {"lat": 20.0, "lon": 0.0}
        zoom = 1.5
    else:
        center = {"lat": float(features["lat"].mean()), "lon": float(features["lon"].mean())}
        zoom = 8

    fig = go.Figure(
        go.Scattermap(
            lat=features["lat"],
            lon=features["lon"],
            mode="markers",
            marker={"size": 12, "color": features["color"], "opacity": 0.9},
            customdata=features[["id", "parameter", "value"]].values if not features.empty else None,
            hovertemplate="%{customdata[1]}: %{customdata[2]:.1f}<extra></extra>",
        )
    )
    fig.update_layout(
        map={"style": "open-street-map", "center": center, "zoom": zoom},
        margin={"l": 0, "r": 0, "t": 0, "b": 0},
        paper_bgcolor=CARD_BG,
        height=460,
        uirevision="anomaly-map",
        showlegend=False,
    )
    return fig


def loading_indicator(refreshing: bool) -> html.Div | None:
    """'Loading data...' strip shown while a pull refresh is in flight."""
    if not refreshing:
        return None
    return html.Div(
        [dbc.Spinner(size="sm", color="info"), html.Span("Loading data...", style={"marginLeft": "8px"})],
        style={"color": MUTED, "fontSize": ".75rem", "padding": "4px 0"},
    )


def _alert_row(item: AlertItem) -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.Strong(item.title, style={"fontSize": ".85rem"}),
                    tier_badge(item.tier_label, item.color, item.text_color),
                ],
                style={"display": "flex", "justifyContent": "space-between", "alignItems": "center"},
            ),
            html.Div(item.description, style={"fontSize": ".75rem", "marginTop": "4px"}),
            html.Small(f"Location: {item.location}", style={"color": MUTED, "fontSize": ".7rem"}),
            html.Div(html.Small(item.age, style={"color": MUTED}), style={"fontSize": ".68rem"}),
        ],
        style={
            "borderLeft": f"4px solid {item.color}",
            "backgroundColor": _EMPHASIS_BG.get(item.emphasis, "transparent"),
            "padding": "8px 10px",
            "marginBottom": "8px",
            "borderRadius": "4px",
        },
    )


def register(app) -> None:

    @app.callback(
        [
            Output("overview-map", "figure"),
            Output("overview-alert-panel", "children"),
            Output("overview-kpi-banner", "children"),
            Output("overview-loading", "children"),
        ],
        [
            Input("interval-live", "n_intervals"),
            Input("map-refresh-btn", "n_clicks"),
        ],
    )
    def update_overview(n_intervals: int, n_clicks: int):
        if ctx.triggered_id == "map-refresh-btn":
            feed.refresh_now()

        view, _ = feed.snapshot()
        now = datetime.now(tz=UTC)

        features = build_features(view.records)
        items = build_alert_items(view.alerts, now)

        if items:
            panel = html.Div([_alert_row(item) for item in items])
        else:
            panel = html.Div(
                "No active alerts in the last hour",
                style={"color": MUTED, "padding": "20px", "textAlign": "center"},
            )

        refreshed = view.last_refreshed_at.strftime("%H:%M:%S") if view.last_refreshed_at else "—"
        kpis = dbc.Row(
            [
                dbc.Col(kpi_card("Anomalies", str(len(view.records)), sub_label=f"last {view.window_hours} h"), xs=6, md=3),
                dbc.Col(
                    kpi_card(
                        "Active alerts",
                        str(len(items)),
                        color="#da3633" if items else "#2ea44f",
                        sub_label="last hour",
                    ),
                    xs=6,
                    md=3,
                ),
                dbc.Col(kpi_card("Last refresh", refreshed, sub_label="UTC"), xs=6, md=3),
            ],
            className="g-2",
        )
        return _map_figure(features), panel, kpis, loading_indicator(view.refreshing)

    @app.callback(
        Output("store-selected", "data"),
        Input("overview-map", "clickData"),
        State("store-selected", "data"),
        prevent_initial_call=True,
    )
    def select_point(click_data: dict | None, current: dict | None):
        if not click_data or not click_data.get("points"):
            return no_update
        record_id = click_data["points"][0]["customdata"][0]
        record = feed.view().find(record_id)
        if record is None:
            return current
        return record.model_dump(mode="json")
