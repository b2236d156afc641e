"""
src/pages/alerts.py
────────────────────
Anomaly table for the current pull window, with tier and pollutant filters.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

from config.air_quality import BREAKPOINTS, TIER_LABELS, SeverityTier

MUTED = "#8b949e"

_TIER_OPTIONS = [{"label": "All", "value": "all"}] + [
    {"label": TIER_LABELS[tier], "value": int(tier)} for tier in SeverityTier
]

_PARAMETER_OPTIONS = [{"label": "All", "value": "all"}] + [
    {"label": code, "value": code} for code in BREAKPOINTS
]


def _filter(label: str, component) -> dbc.Col:
    return dbc.Col(
        [
            html.Label(
                label,
                style={"fontSize": ".72rem", "color": MUTED, "textTransform": "uppercase"},
            ),
            component,
        ],
        md=3,
    )


def layout() -> html.Div:
    return html.Div(
        [
            html.Div(
                [
                    html.H2("Anomalies", className="page-title"),
                    html.P(
                        "All anomalies in the current look-back window",
                        className="page-subtitle",
                    ),
                ],
                className="page-header",
            ),
            # ── Summary badges ─────────────────────────────────────────────────
            html.Div(id="anomalies-summary-badges", className="mb-3"),
            # ── Filter row ─────────────────────────────────────────────────────
            dbc.Row(
                [
                    _filter(
                        "Severity",
                        dcc.Dropdown(
                            id="anomalies-filter-tier",
                            options=_TIER_OPTIONS,
                            value="all",
                            clearable=False,
                            style={"fontSize": ".85rem"},
                            className="dark-dropdown",
                        ),
                    ),
                    _filter(
                        "Pollutant",
                        dcc.Dropdown(
                            id="anomalies-filter-parameter",
                            options=_PARAMETER_OPTIONS,
                            value="all",
                            clearable=False,
                            style={"fontSize": ".85rem"},
                            className="dark-dropdown",
                        ),
                    ),
                ],
                className="g-3 mb-3",
            ),
            # ── Anomaly table ──────────────────────────────────────────────────
            html.Div(
                html.Div(id="anomalies-table"),
                className="chart-card",
            ),
        ],
        style={"padding": "1.5rem"},
    )
