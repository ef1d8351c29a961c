"""
Application configuration for api-lp-hedge.

Centralizes environment variables using python-dotenv.
"""

import os

from dotenv import load_dotenv

# Load variables from .env (if present)
load_dotenv()


class Settings:
    """
    Configuration settings for the api-lp-hedge service.
    """

    # MongoDB
    MONGODB_URI: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "lp_hedge_db")
    MONGODB_MAX_POOL_SIZE: int = int(os.getenv("MONGODB_MAX_POOL_SIZE", "20"))
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = int(
        os.getenv("MONGODB_SERVER_SELECTION_TIMEOUT_MS", "5000")
    )
    MONGODB_CONNECT_TIMEOUT_MS: int = int(
        os.getenv("MONGODB_CONNECT_TIMEOUT_MS", "3000")
    )
    MONGODB_SOCKET_TIMEOUT_MS: int = int(
        os.getenv("MONGODB_SOCKET_TIMEOUT_MS", "10000")
    )

    # Strategy defaults (fractions, not percents: 0.02 == 2%)
    DEFAULT_PRICE_MOVE_THRESHOLD_PCT: float = float(
        os.getenv("DEFAULT_PRICE_MOVE_THRESHOLD_PCT", "0.02")
    )
    DEFAULT_DELTA_DRIFT_THRESHOLD_PCT: float = float(
        os.getenv("DEFAULT_DELTA_DRIFT_THRESHOLD_PCT", "0.10")
    )
    DEFAULT_CROSS_POSITION_THRESHOLD_PCT: float = float(
        os.getenv("DEFAULT_CROSS_POSITION_THRESHOLD_PCT", "0.20")
    )

    # Ensure Mongo indexes on startup
    ENSURE_INDEXES_ON_START: bool = (
        os.getenv("ENSURE_INDEXES_ON_START", "true").lower() == "true"
    )

    # Log / app
    APP_NAME: str = os.getenv("APP_NAME", "api-lp-hedge")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()
