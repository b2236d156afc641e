"""
src/pages/overview.py
──────────────────────
Live map page: anomaly map, active alerts, region detail, history chart.

Static structure; dynamic data injected via callbacks.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

from config.air_quality import WINDOW_OPTIONS_HOURS
from src.runtime import feed

MUTED = "#8b949e"

_WINDOW_OPTIONS = [{"label": f"Last {h} hours", "value": h} for h in WINDOW_OPTIONS_HOURS]


def layout(window_hours: int | None = None) -> html.Div:
    # dropdown follows the feed's window across page visits
    if window_hours is None:
        window_hours = feed.window_hours()
    return html.Div(
        [
            # ── Page header ───────────────────────────────────────────────────
            html.Div(
                [
                    html.H2("Real-time Air Quality", className="page-title"),
                    html.P(
                        "Detected anomalies · live alerts · WHO guideline tiers",
                        className="page-subtitle",
                    ),
                ],
                className="page-header",
            ),
            # ── KPI banner (dynamic) ──────────────────────────────────────────
            html.Div(id="overview-kpi-banner", className="mb-3"),
            # ── Map + alert panel ─────────────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div(
                                    [
                                        html.Span("Anomaly Map", className="chart-title"),
                                        html.Button(
                                            "Refresh",
                                            id="map-refresh-btn",
                                            n_clicks=0,
                                            style={
                                                "float": "right",
                                                "fontSize": ".68rem",
                                                "color": "#58a6ff",
                                                "background": "transparent",
                                                "border": "1px solid #58a6ff",
                                                "borderRadius": "4px",
                                                "padding": "2px 8px",
                                            },
                                        ),
                                    ]
                                ),
                                html.Div(id="overview-loading"),
                                dcc.Graph(id="overview-map", config={"displayModeBar": False}),
                            ],
                            className="chart-card",
                        ),
                        md=8,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Anomaly Alerts", className="chart-title"),
                                html.Div(
                                    id="overview-alert-panel",
                                    style={"maxHeight": "460px", "overflowY": "auto"},
                                ),
                            ],
                            className="chart-card",
                        ),
                        md=4,
                    ),
                ],
                className="g-3 mb-3",
            ),
            # ── Region detail + history ───────────────────────────────────────
            dbc.Row(
                [
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Region Details", className="chart-title"),
                                html.Div(id="region-detail"),
                            ],
                            className="chart-card",
                        ),
                        md=5,
                    ),
                    dbc.Col(
                        html.Div(
                            [
                                html.Div("Historical Data", className="chart-title"),
                                html.Label(
                                    "Time Range",
                                    style={"fontSize": ".72rem", "color": MUTED, "textTransform": "uppercase"},
                                ),
                                dcc.Dropdown(
                                    id="history-window",
                                    options=_WINDOW_OPTIONS,
                                    value=window_hours,
                                    clearable=False,
                                    style={"fontSize": ".85rem", "maxWidth": "220px"},
                                    className="dark-dropdown",
                                ),
                                dcc.Graph(id="history-chart", config={"displayModeBar": False}),
                                html.Div(id="history-note", style={"fontSize": ".72rem", "color": MUTED}),
                            ],
                            className="chart-card",
                        ),
                        md=7,
                    ),
                ],
                className="g-3",
            ),
        ],
        style={"padding": "1.5rem"},
    )
