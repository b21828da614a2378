"""Suno client package: async access to the unofficial Suno studio API.

RULES:
- All HTTP calls go through SunoClient (no direct httpx usage elsewhere)
- Authentication is a Clerk session cookie exchanged for short-lived JWTs
"""

from audiogen_clients.suno.client import (
    DEFAULT_MODEL,
    RenewalConfig,
    SunoClient,
    SunoPollConfig,
)
from audiogen_clients.suno.models import (
    AudioInfo,
    BillingInformation,
    Clip,
    ClipMetadata,
    Lyrics,
    parse_lyrics,
)

__all__ = [
    "DEFAULT_MODEL",
    "AudioInfo",
    "BillingInformation",
    "Clip",
    "ClipMetadata",
    "Lyrics",
    "RenewalConfig",
    "SunoClient",
    "SunoPollConfig",
    "parse_lyrics",
]
