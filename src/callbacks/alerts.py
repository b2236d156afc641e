"""
src/callbacks/alerts.py
────────────────────────
Anomaly table page callbacks.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
import pandas as pd
from dash import Input, Output, html

from config.air_quality import TIER_COLORS, TIER_LABELS, SeverityTier
from src.adapters.formatting import format_location
from src.analytics.classification import badge_text_color, classify, normalize_parameter
from src.data.models import AnomalyRecord
from src.layout.components.alert_badge import tier_badge
from src.runtime import feed

CARD_BG = "#161b22"
BORDER = "#30363d"
MUTED = "#8b949e"


def anomalies_frame(records: tuple[AnomalyRecord, ...]) -> pd.DataFrame:
    """Tabular view of the pull window with tier columns, newest first."""
    rows = []
    for r in records:
        result = classify(r.parameter, r.value)
        rows.append(
            {
                "id": r.id,
                "detected_at": r.detected_at,
                "parameter": r.parameter,
                "parameter_code": normalize_parameter(r.parameter),
                "value": r.value,
                "tier": int(result.tier),
                "tier_label": result.description,
                "color": result.color,
                "kind": r.kind.value if r.kind else "",
                "location": format_location(r.latitude, r.longitude),
            }
        )
    df = pd.DataFrame(
        rows,
        columns=["id", "detected_at", "parameter", "parameter_code", "value",
                 "tier", "tier_label", "color", "kind", "location"],
    )
    return df.sort_values("detected_at", ascending=False, kind="stable")


def _build_table(df: pd.DataFrame) -> html.Div:
    if df.empty:
        return html.Div(
            "No anomalies for the selected filters.",
            style={"color": MUTED, "padding": "20px", "textAlign": "center"},
        )

    rows = []
    for _, row in df.head(200).iterrows():
        rows.append(
            html.Tr(
                [
                    html.Td(
                        pd.Timestamp(row["detected_at"]).strftime("%d/%m %H:%M"),
                        style={"color": MUTED, "fontSize": ".78rem"},
                    ),
                    html.Td(row["parameter"], style={"fontSize": ".82rem", "fontWeight": "600"}),
                    html.Td(f"{row['value']:.1f}", style={"fontSize": ".78rem", "color": row["color"]}),
                    html.Td(tier_badge(row["tier_label"], row["color"], badge_text_color(row["value"]))),
                    html.Td(row["kind"] or "—", style={"fontSize": ".72rem", "color": MUTED}),
                    html.Td(row["location"], style={"fontSize": ".72rem", "color": MUTED}),
                ],
                style={"borderBottom": f"1px solid {BORDER}"},
            )
        )

    return html.Div(
        html.Table(
            [
                html.Thead(
                    html.Tr(
                        [html.Th(h) for h in ["Time", "Parameter", "Value", "Quality", "Type", "Location"]],
                        style={"color": MUTED, "fontSize": ".68rem", "textTransform": "uppercase"},
                    )
                ),
                html.Tbody(rows),
            ],
            style={"width": "100%", "borderCollapse": "collapse", "fontSize": ".82rem"},
        ),
        style={"overflowX": "auto"},
    )


def register(app) -> None:

    @app.callback(
        [
            Output("anomalies-table", "children"),
            Output("anomalies-summary-badges", "children"),
        ],
        [
            Input("interval-live", "n_intervals"),
            Input("anomalies-filter-tier", "value"),
            Input("anomalies-filter-parameter", "value"),
        ],
    )
    def update_anomalies_table(n_intervals: int, tier_filter, parameter_filter: str):
        df = anomalies_frame(feed.view().records)

        counts = df.groupby("tier").size()
        badges = dbc.Row(
            [
                dbc.Col(
                    html.Div(
                        [
                            html.Div(
                                str(counts.get(int(tier), 0)),
                                style={"fontSize": "1.4rem", "fontWeight": "700", "color": TIER_COLORS[tier]},
                            ),
                            html.Div(
                                TIER_LABELS[tier],
                                style={"fontSize": ".65rem", "color": MUTED, "textTransform": "uppercase"},
                            ),
                        ],
                        style={"backgroundColor": CARD_BG, "border": f"1px solid {BORDER}", "borderRadius": "8px", "padding": "10px 16px"},
                    ),
                    xs=6, md=2,
                )
                for tier in reversed(SeverityTier)
            ],
            className="g-2",
        )

        if tier_filter != "all":
            df = df[df["tier"] == int(tier_filter)]
        if parameter_filter != "all":
            df = df[df["parameter_code"] == parameter_filter]

        return _build_table(df), badges
