"""
Centralized configuration for the micropurchase bidding service.
All settings come from environment variables for 12-factor deployment.
"""

import os
import secrets


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _env_id_set(name: str) -> set:
    return {
        s.strip()
        for s in os.environ.get(name, "").split(",")
        if s.strip()
    }


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///micropurchase.db")
DATABASE_ECHO = _env_bool("DATABASE_ECHO", False)

# ---------------------------------------------------------------------------
# Browser sessions
# ---------------------------------------------------------------------------
AUTH_SECRET = os.environ.get("AUTH_SECRET", "") or secrets.token_hex(32)
SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "micropurchase_session")
SESSION_EXPIRY_SECONDS = int(os.environ.get("SESSION_EXPIRY_SECONDS", str(7 * 24 * 3600)))
LOGIN_PATH = os.environ.get("LOGIN_PATH", "/login")

# ---------------------------------------------------------------------------
# API credentials (delegated to GitHub)
# ---------------------------------------------------------------------------
API_KEY_HEADER = os.environ.get("API_KEY_HEADER", "Api-Key")
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_TIMEOUT_SECONDS = float(os.environ.get("GITHUB_TIMEOUT_SECONDS", "5"))

# GitHub user ids (as strings) allowed through require_admin.
ADMIN_GITHUB_IDS = _env_id_set("ADMIN_GITHUB_IDS")

# ---------------------------------------------------------------------------
# Bidding rules
# ---------------------------------------------------------------------------
# Upper sanity bound for a bid when the auction carries no start price.
MAX_BID_AMOUNT = int(os.environ.get("MAX_BID_AMOUNT", "3500"))

# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
PORT = int(os.environ.get("PORT", "8001"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
CORS_ORIGINS = [
    s.strip()
    for s in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
    if s.strip()
]
