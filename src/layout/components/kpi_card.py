"""
src/layout/components/kpi_card.py
──────────────────────────────────
Compact KPI card for the live map banner.
"""
from dash import html

CARD_BG = "#161b22"
MUTED = "#8b949e"


def kpi_card(
    label: str,
    value: str,
    color: str = "#c9d1d9",
    sub_label: str = "",
    border_color: str = "#30363d",
) -> html.Div:
    """
    Args:
        label: Metric name (shown above value)
        value: Formatted value string
        color: Value text color
        sub_label: Small secondary label below value, e.g. the window
        border_color: Card border color
    """
    children = [
        html.Div(label, style={"fontSize": ".68rem", "color": MUTED, "textTransform": "uppercase", "letterSpacing": ".06em"}),
        html.Div(value, style={"fontSize": "1.4rem", "fontWeight": "700", "color": color, "lineHeight": "1.2", "marginTop": "2px"}),
    ]
    if sub_label:
        children.append(html.Div(sub_label, style={"fontSize": ".68rem", "color": MUTED, "marginTop": "2px"}))

    return html.Div(
        children,
        style={
            "backgroundColor": CARD_BG,
            "border": f"1px solid {border_color}",
            "borderRadius": "8px",
            "padding": "12px 16px",
        },
    )
