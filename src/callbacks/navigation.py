"""
src/callbacks/navigation.py — Routing, navbar, connection status and stale banner.
"""
from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import Input, Output, State, html

from src.layout.components.alert_badge import connection_pill
from src.runtime import feed


def register(app) -> None:
    """Register routing + global status callbacks."""

    # ── Page routing ──────────────────────────────────────────────────────────
    from src.pages import alerts, overview

    @app.callback(
        Output("page-content", "children"),
        Input("url", "pathname"),
    )
    def display_page(pathname: str):
        routes = {
            "/": overview.layout,
            "/alerts": alerts.layout,
        }
        return routes.get(pathname, overview.layout)()

    # ── Navbar collapse ───────────────────────────────────────────────────────
    @app.callback(
        Output("navbar-collapse", "is_open"),
        Input("navbar-toggler", "n_clicks"),
        State("navbar-collapse", "is_open"),
        prevent_initial_call=True,
    )
    def toggle_navbar(n_clicks: int, is_open: bool) -> bool:
        return not is_open

    # ── Live status ───────────────────────────────────────────────────────────
    @app.callback(
        [
            Output("connection-status", "children"),
            Output("stale-banner", "children"),
        ],
        Input("interval-live", "n_intervals"),
    )
    def update_status(n_intervals: int):
        view, state = feed.snapshot()
        pill = connection_pill(state)

        if view.stale_warning is not None:
            banner = dbc.Alert(str(view.stale_warning), color="warning", className="m-3 mb-0 py-2")
        elif view.last_error is not None:
            banner = dbc.Alert(
                f"Failed to load air quality data: {view.last_error}",
                color="danger",
                className="m-3 mb-0 py-2",
            )
        else:
            banner = html.Div()
        return pill, banner
