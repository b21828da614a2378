"""FakeYou client package: async access to the unofficial FakeYou voice API.

RULES:
- All HTTP calls go through FakeYouClient (no direct httpx usage elsewhere)
- Authentication is an optional username/password login producing a cookie
"""

from audiogen_clients.fakeyou.client import FakeYouClient
from audiogen_clients.fakeyou.models import (
    Job,
    TextToSpeechOptions,
    UserRatings,
    VoiceModel,
    VoiceToVoiceOptions,
)

__all__ = [
    "FakeYouClient",
    "Job",
    "TextToSpeechOptions",
    "UserRatings",
    "VoiceModel",
    "VoiceToVoiceOptions",
]
