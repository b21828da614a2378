"""Suno API response dataclasses and the clip normaliser.

WHY: Suno's studio API returns deeply nested clip objects whose optional
fields come and go between model versions. Callers want one flat,
predictable record per song, and typed access to the few other payloads
(lyrics, billing, raw clip detail).

HOW: Each dataclass has a from_dict() factory that reads known keys with
.get() so absent or null fields become None instead of raising.
AudioInfo.from_clip() flattens a raw clip plus its metadata object into
the record returned by every generation/feed call.

RULES:
- Only id and status are treated as required on a clip
- A missing or null metadata object is treated as empty
- parse_lyrics() output must stay byte-for-byte stable (consumers compare it)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

SUCCESS_STATUSES = frozenset({"streaming", "complete"})
"""Clip statuses meaning the audio is playable."""

FAILURE_STATUS = "error"


def parse_lyrics(prompt: str) -> str:
    """Drop blank lines from lyric text.

    Splits on newline, removes lines that are empty after stripping, and
    rejoins with newline. Non-blank lines are kept untouched.
    """
    lines = [line for line in prompt.split("\n") if line.strip() != ""]
    return "\n".join(lines)


@dataclass
class ClipMetadata:
    """The metadata object nested inside a clip."""

    tags: Optional[str] = None
    prompt: Optional[str] = None
    gpt_description_prompt: Optional[str] = None
    audio_prompt_id: Optional[str] = None
    history: Any = None
    concat_history: Any = None
    type: Optional[str] = None
    duration: Optional[float] = None
    duration_formatted: Optional[str] = None
    stream: Optional[bool] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> ClipMetadata:
        data = data or {}
        return cls(
            tags=data.get("tags"),
            prompt=data.get("prompt"),
            gpt_description_prompt=data.get("gpt_description_prompt"),
            audio_prompt_id=data.get("audio_prompt_id"),
            history=data.get("history"),
            concat_history=data.get("concat_history"),
            type=data.get("type"),
            duration=data.get("duration"),
            duration_formatted=data.get("duration_formatted"),
            stream=data.get("stream"),
            error_type=data.get("error_type"),
            error_message=data.get("error_message"),
        )


@dataclass
class Clip:
    """Raw clip detail as returned by GET /api/clip/{id}.

    RULES:
    - id and status are required
    - Everything else defaults to None (or False/0 for flags and counters)
    """

    id: str
    status: str
    title: Optional[str] = None
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    image_url: Optional[str] = None
    image_large_url: Optional[str] = None
    is_video_pending: bool = False
    major_model_version: Optional[str] = None
    model_name: Optional[str] = None
    metadata: ClipMetadata = field(default_factory=ClipMetadata)
    is_liked: bool = False
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    handle: Optional[str] = None
    is_trashed: bool = False
    created_at: Optional[str] = None
    play_count: int = 0
    upvote_count: int = 0
    is_public: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> Clip:
        return cls(
            id=data["id"],
            status=data["status"],
            title=data.get("title"),
            audio_url=data.get("audio_url"),
            video_url=data.get("video_url"),
            image_url=data.get("image_url"),
            image_large_url=data.get("image_large_url"),
            is_video_pending=bool(data.get("is_video_pending", False)),
            major_model_version=data.get("major_model_version"),
            model_name=data.get("model_name"),
            metadata=ClipMetadata.from_dict(data.get("metadata")),
            is_liked=bool(data.get("is_liked", False)),
            user_id=data.get("user_id"),
            display_name=data.get("display_name"),
            handle=data.get("handle"),
            is_trashed=bool(data.get("is_trashed", False)),
            created_at=data.get("created_at"),
            play_count=data.get("play_count") or 0,
            upvote_count=data.get("upvote_count") or 0,
            is_public=bool(data.get("is_public", False)),
        )


@dataclass
class AudioInfo:
    """Flattened, service-agnostic record for one generated song.

    WHY: Every generation and feed call returns the same shape so callers
    never dig through Suno's nested metadata.

    RULES:
    - lyric is the blank-line-stripped prompt for feed reads, "" when the
      prompt is empty, and the raw prompt for freshly submitted clips
    - duration is the human-formatted duration string (e.g. "2:31")
    """

    id: str
    status: str
    title: Optional[str] = None
    image_url: Optional[str] = None
    lyric: Optional[str] = None
    audio_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: Optional[str] = None
    model_name: Optional[str] = None
    gpt_description_prompt: Optional[str] = None
    prompt: Optional[str] = None
    type: Optional[str] = None
    tags: Optional[str] = None
    duration: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.status in SUCCESS_STATUSES

    @property
    def is_failed(self) -> bool:
        return self.status == FAILURE_STATUS

    @classmethod
    def from_clip(cls, data: dict, parse_lyric: bool = True) -> AudioInfo:
        """Flatten a raw clip dict.

        Args:
            data: Raw clip object from any Suno endpoint.
            parse_lyric: Strip blank lines from the lyric (feed reads).
                When False the raw prompt is used as-is.
        """
        metadata = data.get("metadata") or {}
        prompt = metadata.get("prompt")
        if parse_lyric:
            lyric = parse_lyrics(prompt) if prompt else ""
        else:
            lyric = prompt
        return cls(
            id=data["id"],
            status=data["status"],
            title=data.get("title"),
            image_url=data.get("image_url"),
            lyric=lyric,
            audio_url=data.get("audio_url"),
            video_url=data.get("video_url"),
            created_at=data.get("created_at"),
            model_name=data.get("model_name"),
            gpt_description_prompt=metadata.get("gpt_description_prompt"),
            prompt=prompt,
            type=metadata.get("type"),
            tags=metadata.get("tags"),
            duration=metadata.get("duration_formatted"),
            error_message=metadata.get("error_message"),
        )


@dataclass
class LyricsJob:
    """Polling response from GET /api/generate/lyrics/{id}."""

    status: str
    title: Optional[str] = None
    text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> LyricsJob:
        return cls(
            status=data.get("status") or "",
            title=data.get("title"),
            text=data.get("text"),
        )


@dataclass
class Lyrics:
    """Finished lyrics: a suggested title and the lyric text."""

    title: Optional[str]
    text: Optional[str]


@dataclass
class BillingInformation:
    """Account usage from GET /api/billing/info/."""

    total_credits_left: int
    period: Optional[str]
    monthly_limit: int
    monthly_usage: int

    @classmethod
    def from_dict(cls, data: dict) -> BillingInformation:
        return cls(
            total_credits_left=data.get("total_credits_left") or 0,
            period=data.get("period"),
            monthly_limit=data.get("monthly_limit") or 0,
            monthly_usage=data.get("monthly_usage") or 0,
        )
