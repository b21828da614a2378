"""Tests for Suno response normalisation.

WHY: AudioInfo is the record every caller consumes. Suno drops and nulls
optional fields freely, so the normaliser must pass gaps through as None
rather than raise, and the lyric cleanup must stay exactly as consumers
expect.

RULES:
- Pure functions only; no HTTP
"""

from __future__ import annotations

import pytest

from audiogen_clients.suno.models import (
    AudioInfo,
    BillingInformation,
    Clip,
    LyricsJob,
    parse_lyrics,
)

from conftest import make_clip


class TestParseLyrics:
    def test_drops_blank_and_whitespace_lines(self):
        assert parse_lyrics("line1\n\n  \nline2\n") == "line1\nline2"

    def test_keeps_inner_whitespace(self):
        assert parse_lyrics("  indented\n\ttabbed  ") == "  indented\n\ttabbed  "

    def test_empty_input(self):
        assert parse_lyrics("") == ""

    def test_only_blank_lines(self):
        assert parse_lyrics("\n \n\t\n") == ""


class TestAudioInfoFromClip:
    """AudioInfo.from_clip() flattening."""

    def test_flattens_metadata(self):
        audio = AudioInfo.from_clip(make_clip("c1", "complete"))
        assert audio.id == "c1"
        assert audio.status == "complete"
        assert audio.title == "Night Drive"
        assert audio.tags == "synthwave"
        assert audio.type == "gen"
        assert audio.duration == "2:31"
        assert audio.gpt_description_prompt == "a synthwave song about driving"
        assert audio.prompt == "[Verse]\nNeon lights\n\n  \nOpen road\n"
        assert audio.lyric == "[Verse]\nNeon lights\nOpen road"
        assert audio.error_message is None

    def test_raw_lyric_when_not_parsing(self):
        audio = AudioInfo.from_clip(make_clip("c1", "complete"), parse_lyric=False)
        assert audio.lyric == audio.prompt

    @pytest.mark.parametrize("metadata", [None, {}])
    def test_missing_metadata_passes_none(self, metadata):
        audio = AudioInfo.from_clip({"id": "x", "status": "queued", "metadata": metadata})
        assert audio.prompt is None
        assert audio.tags is None
        assert audio.duration is None
        assert audio.lyric == ""

    def test_missing_metadata_raw_lyric_is_none(self):
        audio = AudioInfo.from_clip({"id": "x", "status": "queued"}, parse_lyric=False)
        assert audio.lyric is None

    def test_minimal_clip(self):
        audio = AudioInfo.from_clip({"id": "x", "status": "submitted"})
        assert audio.title is None
        assert audio.audio_url is None
        assert audio.created_at is None

    def test_status_flags(self):
        assert AudioInfo(id="a", status="streaming").is_ready
        assert AudioInfo(id="a", status="complete").is_ready
        assert not AudioInfo(id="a", status="queued").is_ready
        assert AudioInfo(id="a", status="error").is_failed


class TestOtherModels:
    def test_clip_defaults(self):
        clip = Clip.from_dict({"id": "c", "status": "complete", "metadata": None})
        assert clip.metadata.prompt is None
        assert clip.play_count == 0
        assert clip.is_public is False

    def test_billing_from_dict(self):
        billing = BillingInformation.from_dict(
            {"total_credits_left": 5, "period": None, "monthly_limit": 50, "monthly_usage": 45}
        )
        assert billing.total_credits_left == 5
        assert billing.period is None

    def test_lyrics_job_without_status(self):
        assert LyricsJob.from_dict({}).status == ""
