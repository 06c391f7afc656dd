# Server-side settings read once from the environment (or a local .env).

import os

from dotenv import load_dotenv

# dev convenience; in prod the platform injects env vars
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}.")


# "local" auto-creates tables at startup; tests use "test".
APP_ENV = os.getenv("APP_ENV", "local")

# Day boundaries ("today", expiresAt) are computed in this timezone.
PUZZLE_TIMEZONE = os.getenv("PUZZLE_TIMEZONE", "Asia/Kolkata")

# Guesses allowed per puzzle session.
MAX_ATTEMPTS = _env_int("MAX_ATTEMPTS", 6)

# Max score for a word seeded without explicit points (6 attempts x 10).
DEFAULT_WORD_POINTS = _env_int("DEFAULT_WORD_POINTS", 60)

# "server": score derived from stored attempts (default).
# "client": trust the score posted to /finish, clamped to >= 0.
SCORE_MODE = os.getenv("SCORE_MODE", "server").strip().lower()
if SCORE_MODE not in ("server", "client"):
    raise RuntimeError("SCORE_MODE must be 'server' or 'client'.")

# Signing key for bearer tokens; override in production.
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-prod-please")

# Bearer tokens older than this are rejected.
TOKEN_MAX_AGE_SECONDS = _env_int("TOKEN_MAX_AGE_SECONDS", 60 * 60 * 24 * 7)

# When on, every puzzle endpoint needs a bearer token.
REQUIRE_AUTH = _env_bool("REQUIRE_AUTH", False)

# CORS origins (comma separated); the React dev server runs on :5173.
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
