"""
config/settings.py
──────────────────
Application configuration loaded from environment variables.
"""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    # Server
    DEBUG: bool = os.getenv("DEBUG", "true").lower() == "true"
    PORT: int = int(os.getenv("PORT", "8050"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # Upstream services
    NOTIFIER_API_URL: str = os.getenv("NOTIFIER_API_URL", "http://localhost:8081")
    INGEST_API_URL: str = os.getenv("INGEST_API_URL", "http://localhost:8080")
    ALERTS_WS_URL: str = os.getenv("ALERTS_WS_URL", "ws://localhost:8081/ws/alerts")
    HTTP_TIMEOUT_S: float = float(os.getenv("HTTP_TIMEOUT_S", "10"))

    # Pull cadence
    REFRESH_INTERVAL_S: float = float(os.getenv("REFRESH_INTERVAL_S", "60"))
    PRUNE_INTERVAL_S: float = float(os.getenv("PRUNE_INTERVAL_S", "15"))
    WINDOW_DEBOUNCE_S: float = float(os.getenv("WINDOW_DEBOUNCE_S", "0.3"))
    DEFAULT_WINDOW_HOURS: int = int(os.getenv("DEFAULT_WINDOW_HOURS", "24"))

    # Active alerts
    RECENCY_HORIZON_S: int = int(os.getenv("RECENCY_HORIZON_S", "3600"))

    # Push channel reconnect backoff
    RECONNECT_BASE_MS: int = int(os.getenv("RECONNECT_BASE_MS", "1000"))
    RECONNECT_CAP_MS: int = int(os.getenv("RECONNECT_CAP_MS", "30000"))

    # Region correlation
    PROXIMITY_TOLERANCE_DEG: float = float(os.getenv("PROXIMITY_TOLERANCE_DEG", "0.01"))

    # Dashboard redraw interval in milliseconds
    UI_REFRESH_INTERVAL_MS: int = int(os.getenv("UI_REFRESH_INTERVAL_MS", "5000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
