"""
app.py
──────
Air Quality Anomaly Monitor — Application Entry Point.

Startup sequence:
  1. Configure logging
  2. Start the live feed (pull cadence + push channel on a background loop)
  3. Create Dash app with DARKLY bootstrap theme
  4. Register all callbacks
  5. Run dev server (or expose `server` for gunicorn in production)
"""
import atexit
import logging

import dash
import dash_bootstrap_components as dbc

from config.log_config import configure_logging
from config.settings import settings
from src.adapters.geo import build_features, to_feature_collection
from src.layout.main import create_layout
from src.runtime import feed

# ── 1. Logging ────────────────────────────────────────────────────────────────
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger("app")

# ── 2. Live feed ──────────────────────────────────────────────────────────────
logger.info("Starting live anomaly feed...")
feed.start()
atexit.register(feed.stop)

# ── 3. Dash app ───────────────────────────────────────────────────────────────
app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.DARKLY],
    suppress_callback_exceptions=True,
    meta_tags=[{"name": "viewport", "content": "width=device-width, initial-scale=1"}],
    title="AQ Monitor",
)

server = app.server  # gunicorn entry point
app.layout = create_layout()


@server.route("/api/features")
def features_geojson():
    """Current pull window as a GeoJSON FeatureCollection."""
    return to_feature_collection(build_features(feed.view().records))


@server.route("/api/health")
def services_health():
    """Diagnostics: /health of the notifier and ingest services."""
    report = feed.health()
    status = 200 if all(r["ok"] for r in report.values()) else 503
    return report, status


# ── 4. Register callbacks ─────────────────────────────────────────────────────
from src.callbacks import alerts, navigation, overview, region

navigation.register(app)
overview.register(app)
region.register(app)
alerts.register(app)

# ── 5. Run ────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    # reloader would start a second feed in the child process
    app.run(
        debug=settings.DEBUG,
        host=settings.HOST,
        port=settings.PORT,
        use_reloader=False,
    )
