"""Runtime configuration read from environment variables."""

import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Header carrying the API key on every joke route
API_KEY_HEADER_NAME = os.getenv("API_KEY_HEADER", "API-Key")

RATE_LIMIT = os.getenv("RATE_LIMIT", "100/hour")
KEY_RATE_LIMIT = os.getenv("KEY_RATE_LIMIT", "10/minute")

SEED_JOKES = _env_flag("SEED_JOKES", "true")

AUTH_FAILURE_WINDOW = int(os.getenv("AUTH_FAILURE_WINDOW", "300"))  # seconds
AUTH_FAILURE_THRESHOLD = int(os.getenv("AUTH_FAILURE_THRESHOLD", "10"))  # per IP

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
