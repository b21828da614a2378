"""Configuration constants, service endpoints, and .env loading.

WHY: Both clients talk to fixed, undocumented endpoints that occasionally
move. Keeping the base URLs, the default Suno model, and the HTTP timeout
in one module makes them easy to find and override without touching the
client code.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level strings and numbers, each overridable by an environment
variable of the same name. The load_* functions read credentials and fail
with a clear message when they are missing.

RULES:
- Credentials are loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- Base URLs are stored without a trailing slash
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Suno endpoints
# ---------------------------------------------------------------------------

SUNO_BASE_URL = os.getenv("SUNO_BASE_URL", "https://studio-api.suno.ai").rstrip("/")
SUNO_CLERK_BASE_URL = os.getenv("SUNO_CLERK_BASE_URL", "https://clerk.suno.com").rstrip("/")
SUNO_DEFAULT_MODEL = os.getenv("SUNO_DEFAULT_MODEL", "chirp-v3-5")

CLERK_JS_VERSION = "4.73.2"
"""Clerk frontend version the session endpoints expect in the query string."""

SUNO_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)

# ---------------------------------------------------------------------------
# FakeYou endpoints
# ---------------------------------------------------------------------------

FAKEYOU_BASE_URL = os.getenv("FAKEYOU_BASE_URL", "https://api.fakeyou.com").rstrip("/")
FAKEYOU_STORAGE_URL = os.getenv(
    "FAKEYOU_STORAGE_URL", "https://storage.googleapis.com/vocodes-public"
).rstrip("/")

# ---------------------------------------------------------------------------
# HTTP defaults
# ---------------------------------------------------------------------------

HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", "60"))


def load_suno_cookie() -> str:
    """Load the Suno browser cookie from the environment.

    WHY: Suno has no public auth flow. The Clerk session is bootstrapped
    from the cookie of a logged-in browser session.

    HOW: Reads SUNO_COOKIE from os.environ (populated by python-dotenv).

    RULES:
    - Raises ValueError if the cookie is missing or empty
    - Never returns a default/placeholder value
    """
    cookie = os.getenv("SUNO_COOKIE", "").strip()
    if not cookie:
        raise ValueError(
            "Suno cookie not configured. "
            "Add SUNO_COOKIE to the .env file (copy it from a logged-in browser)."
        )
    return cookie


def load_fakeyou_credentials() -> tuple[str, str]:
    """Load the FakeYou username (or email) and password from the environment.

    RULES:
    - Raises ValueError naming every missing variable
    - Password is returned as-is (not stripped)
    """
    username = os.getenv("FAKEYOU_USERNAME", "").strip()
    password = os.getenv("FAKEYOU_PASSWORD", "")
    missing = [
        name
        for name, value in (("FAKEYOU_USERNAME", username), ("FAKEYOU_PASSWORD", password))
        if not value
    ]
    if missing:
        raise ValueError(
            "FakeYou credentials not configured. "
            "Add {} to the .env file.".format(" and ".join(missing))
        )
    return username, password
