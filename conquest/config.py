"""
Single place for default room/engine configuration.
Each value can be overridden with an environment variable of the same name prefixed with CONQUEST_.
"""

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# Map id from conquest/data/maps/<id>.json. Used when a match is started without map_id.
DEFAULT_MAP_ID = os.environ.get("CONQUEST_MAP_ID", "default")

# Pause before each automated step so observers can render intermediate state. 0 = run immediately.
AI_TURN_DELAY_SECONDS = float(os.environ.get("CONQUEST_AI_TURN_DELAY", "1.0"))

# Upper bound on consecutive automated steps (an all-bot match would otherwise never yield)
MAX_AUTOMATED_STEPS = int(os.environ.get("CONQUEST_MAX_AUTOMATED_STEPS", "500"))

CONTINENT_BONUSES_ENABLED = _env_bool("CONQUEST_CONTINENT_BONUSES", False)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "CONQUEST_CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000",
    ).split(",")
    if origin.strip()
]

JWT_SECRET = os.environ.get("CONQUEST_JWT_SECRET", "change-me-in-production-use-env")
SEAT_TOKEN_EXPIRE_HOURS = int(os.environ.get("CONQUEST_SEAT_TOKEN_EXPIRE_HOURS", "12"))

LOG_LEVEL = os.environ.get("CONQUEST_LOG_LEVEL", "INFO").upper()
