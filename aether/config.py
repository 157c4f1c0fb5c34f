"""
Configuration - Environment-driven settings.

All values are read once at import time:
    AETHER_ENV                 development | production
    AETHER_LOG_LEVEL           logging level name (INFO)
    AETHER_TICK_RATE_MS        real milliseconds per game hour (30000)
    AETHER_STARTING_CURRENCY   currency of a new game (4999)
    AETHER_SEED                optional integer seed for new games
    AETHER_REALTIME            run timers for API-created games (1/true/yes)
    ALLOWED_ORIGINS            comma separated CORS origins (*)
"""

import os

from .engine_core.clock import TICK_RATE_MS
from .engine_core.state import STARTING_CURRENCY


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def _env_int(name: str, default):
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


AETHER_ENV = os.getenv("AETHER_ENV", "development")
AETHER_LOG_LEVEL = os.getenv("AETHER_LOG_LEVEL", "INFO").upper()
AETHER_TICK_RATE_MS = _env_int("AETHER_TICK_RATE_MS", TICK_RATE_MS)
AETHER_STARTING_CURRENCY = float(os.getenv("AETHER_STARTING_CURRENCY", STARTING_CURRENCY))
AETHER_SEED = _env_int("AETHER_SEED", None)
AETHER_REALTIME = _env_flag("AETHER_REALTIME")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
