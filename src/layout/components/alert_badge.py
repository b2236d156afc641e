"""
src/layout/components/alert_badge.py
──────────────────────────────────────
Severity tier badge and connection status pill.
"""

from dash import html

from src.stream.client import ConnectionState

_STATE_COLORS = {
    ConnectionState.CONNECTED: "#2ea44f",
    ConnectionState.CONNECTING: "#e8a020",
    ConnectionState.DISCONNECTED: "#da3633",
    ConnectionState.CLOSED: "#8b949e",
}


def tier_badge(label: str, color: str, text_color: str = "black") -> html.Span:
    """Filled badge in the tier color."""
    return html.Span(
        label,
        style={
            "fontSize": ".65rem",
            "fontWeight": "700",
            "color": text_color,
            "backgroundColor": color,
            "borderRadius": "4px",
            "padding": "1px 7px",
            "whiteSpace": "nowrap",
        },
    )


def connection_pill(state: ConnectionState) -> html.Span:
    color = _STATE_COLORS.get(state, "#8b949e")
    return html.Span(
        [html.Span("●", style={"marginRight": "5px"}), state.value.capitalize()],
        style={
            "fontSize": ".72rem",
            "fontWeight": "700",
            "color": color,
            "border": f"1px solid {color}",
            "borderRadius": "4px",
            "padding": "2px 8px",
        },
    )
