"""FakeYou API dataclasses, per-operation options, and model search helpers.

WHY: FakeYou's model list is large (thousands of community voices) and
its job records carry many fields we only partly use. Typed dataclasses
make the fields explicit; the search helpers keep the filtering and
ranking rules in plain functions that can be tested without HTTP.

HOW: VoiceModel and Job map the API objects via from_dict(). The options
dataclasses replace free-form keyword bags with named, defaulted fields
validated at construction. build_title_pattern() and rank_models()
implement search.

RULES:
- Search treats the query literally; regex metacharacters never leak
- Whitespace in the query matches any run of whitespace in the title
- Language-matching models always rank before non-matching ones
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

PENDING_STATUSES = frozenset({"pending", "started"})
SUCCESS_STATUS = "complete_success"

_VALID_SOURCES = ("file", "device")
_VALID_F0_METHODS = ("rmvpe", "crepe", "harvest")


@dataclass
class UserRatings:
    positive_count: int = 0
    negative_count: int = 0
    total_count: int = 0

    @classmethod
    def from_dict(cls, data: dict | None) -> UserRatings:
        data = data or {}
        return cls(
            positive_count=data.get("positive_count") or 0,
            negative_count=data.get("negative_count") or 0,
            total_count=data.get("total_count") or 0,
        )


@dataclass
class VoiceModel:
    """A selectable TTS voice model from GET tts/list.

    RULES:
    - model_token and title are required
    - ietf_language_tag is "" when absent so prefix checks never fail
    """

    model_token: str
    title: str
    ietf_language_tag: str = ""
    ietf_primary_language_subtag: str | None = None
    tts_model_type: str | None = None
    creator_user_token: str | None = None
    creator_username: str | None = None
    creator_display_name: str | None = None
    creator_gravatar_hash: str | None = None
    is_front_page_featured: bool = False
    is_twitch_featured: bool = False
    maybe_suggested_unique_bot_command: str | None = None
    creator_set_visibility: str | None = None
    user_ratings: UserRatings = field(default_factory=UserRatings)
    category_tokens: list[str] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def language(self) -> str:
        """Two-letter language prefix of ietf_language_tag."""
        return self.ietf_language_tag[:2]

    @classmethod
    def from_dict(cls, data: dict) -> VoiceModel:
        return cls(
            model_token=data["model_token"],
            title=data["title"],
            ietf_language_tag=data.get("ietf_language_tag") or "",
            ietf_primary_language_subtag=data.get("ietf_primary_language_subtag"),
            tts_model_type=data.get("tts_model_type"),
            creator_user_token=data.get("creator_user_token"),
            creator_username=data.get("creator_username"),
            creator_display_name=data.get("creator_display_name"),
            creator_gravatar_hash=data.get("creator_gravatar_hash"),
            is_front_page_featured=bool(data.get("is_front_page_featured", False)),
            is_twitch_featured=bool(data.get("is_twitch_featured", False)),
            maybe_suggested_unique_bot_command=data.get("maybe_suggested_unique_bot_command"),
            creator_set_visibility=data.get("creator_set_visibility"),
            user_ratings=UserRatings.from_dict(data.get("user_ratings")),
            category_tokens=list(data.get("category_tokens") or []),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class Job:
    """State of an inference job from GET tts/job/{token}.

    RULES:
    - status is one of pending, started, complete_success,
      complete_failure, attempt_failed, dead
    - maybe_public_bucket_wav_audio_path is set only on success
    """

    job_token: str
    status: str
    maybe_extra_status_description: str | None = None
    attempt_count: int = 0
    maybe_result_token: str | None = None
    maybe_public_bucket_wav_audio_path: str | None = None
    model_token: str | None = None
    tts_model_type: str | None = None
    title: str | None = None
    raw_inference_text: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCESS_STATUS

    @classmethod
    def from_dict(cls, data: dict) -> Job:
        return cls(
            job_token=data["job_token"],
            status=data["status"],
            maybe_extra_status_description=data.get("maybe_extra_status_description"),
            attempt_count=data.get("attempt_count") or 0,
            maybe_result_token=data.get("maybe_result_token"),
            maybe_public_bucket_wav_audio_path=data.get("maybe_public_bucket_wav_audio_path"),
            model_token=data.get("model_token"),
            tts_model_type=data.get("tts_model_type"),
            title=data.get("title"),
            raw_inference_text=data.get("raw_inference_text"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )


@dataclass
class TextToSpeechOptions:
    """Options for text_to_speech(). poll_interval_s defaults to 2s."""

    poll_interval_s: float = 2.0

    def __post_init__(self) -> None:
        if self.poll_interval_s < 0:
            raise ValueError("poll_interval_s must be >= 0")


@dataclass
class VoiceToVoiceOptions(TextToSpeechOptions):
    """Options for voice_to_voice().

    RULES:
    - source: "file" (default) or "device"
    - auto_predict_f0: let the model predict pitch (default False)
    - override_f0_method: "rmvpe" (default), "crepe" or "harvest"
    - transpose: semitone shift (default 0)
    """

    source: str = "file"
    auto_predict_f0: bool = False
    override_f0_method: str = "rmvpe"
    transpose: int = 0

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.source not in _VALID_SOURCES:
            raise ValueError(
                f"source must be one of {', '.join(_VALID_SOURCES)}, got {self.source!r}"
            )
        if self.override_f0_method not in _VALID_F0_METHODS:
            raise ValueError(
                "override_f0_method must be one of {}, got {!r}".format(
                    ", ".join(_VALID_F0_METHODS), self.override_f0_method
                )
            )


# ---------------------------------------------------------------------------
# Search helpers
# ---------------------------------------------------------------------------


def build_title_pattern(query: str) -> re.Pattern[str]:
    """Compile a case-insensitive pattern matching query literally.

    Each whitespace-separated part is escaped and the parts are joined
    with \\s+, so "mario  bros" matches "Mario Bros" and "C++." only
    matches the literal characters.
    """
    parts = [re.escape(part) for part in query.strip().split()]
    return re.compile(r"\s+".join(parts), re.IGNORECASE)


def rank_models(models: list[VoiceModel], language: str | None = None) -> list[VoiceModel]:
    """Sort models: language matches first, then by title.

    Titles compare case-insensitively, falling back to the exact title so
    the order is total.
    """

    def key(model: VoiceModel) -> tuple[bool, str, str]:
        mismatch = bool(language) and model.language != language
        return (mismatch, model.title.casefold(), model.title)

    return sorted(models, key=key)


def filter_models(models: list[VoiceModel], query: str) -> list[VoiceModel]:
    pattern = build_title_pattern(query)
    return [model for model in models if pattern.search(model.title)]
