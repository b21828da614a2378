"""Shared test fixtures for the audiogen_clients test suite.

WHY: Both client test modules need a fake remote service that answers
the same endpoints the real ones do, records every request, and can be
scripted to walk a job through a sequence of statuses.

HOW: FakeSunoServer and FakeFakeYouServer are callables usable as
httpx.MockTransport handlers. They route on host + path, keep counters
and request logs, and pop scripted responses for polling endpoints (the
last scripted response repeats once the script is exhausted).

RULES:
- No test ever touches the network; every client gets a MockTransport
- Hosts are fake (*.test) so a misrouted request fails loudly with 404
- Sample payloads mirror real response shapes, trimmed to used fields
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

SUNO_URL = "https://suno.test"
CLERK_URL = "https://clerk.test"
FAKEYOU_URL = "https://fakeyou.test"
STORAGE_URL = "https://storage.test/bucket"

WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt "


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------


def make_clip(clip_id: str, status: str, **overrides: Any) -> Dict[str, Any]:
    """Build a raw Suno clip dict with realistic nested metadata."""
    clip: Dict[str, Any] = {
        "id": clip_id,
        "status": status,
        "title": "Night Drive",
        "image_url": f"https://cdn.test/{clip_id}.png",
        "audio_url": f"https://cdn.test/{clip_id}.mp3" if status != "submitted" else "",
        "video_url": "",
        "created_at": "2024-05-01T12:00:00.000Z",
        "model_name": "chirp-v3",
        "metadata": {
            "tags": "synthwave",
            "prompt": "[Verse]\nNeon lights\n\n  \nOpen road\n",
            "gpt_description_prompt": "a synthwave song about driving",
            "type": "gen",
            "duration_formatted": "2:31",
            "error_message": None,
        },
    }
    clip.update(overrides)
    return clip


SAMPLE_MODELS: List[Dict[str, Any]] = [
    {
        "model_token": "TM:mario",
        "title": "Mario (Super Mario Bros)",
        "ietf_language_tag": "en-US",
        "tts_model_type": "tacotron2",
        "user_ratings": {"positive_count": 10, "negative_count": 1, "total_count": 11},
        "category_tokens": ["CAT:games"],
    },
    {
        "model_token": "TM:mario-es",
        "title": "Mario   Bros (Latino)",
        "ietf_language_tag": "es-419",
    },
    {
        "model_token": "TM:luigi",
        "title": "Luigi",
        "ietf_language_tag": "en-GB",
    },
    {
        "model_token": "TM:cpp",
        "title": "C++. Narrator",
        "ietf_language_tag": "en-US",
    },
    {
        "model_token": "TM:cxx",
        "title": "Cxx Narrator",
        "ietf_language_tag": "en-US",
    },
    {
        "model_token": "TM:abe",
        "title": "abe mario fan",
        "ietf_language_tag": "fr-FR",
    },
]


# ---------------------------------------------------------------------------
# Fake Suno service
# ---------------------------------------------------------------------------


class FakeSunoServer:
    """MockTransport handler emulating Clerk + studio-api."""

    def __init__(self, session_id: Optional[str] = "sess_123") -> None:
        self.session_id = session_id
        self.requests: List[httpx.Request] = []
        self.tokens_issued = 0
        self.generated_clips = [make_clip("c1", "submitted"), make_clip("c2", "submitted")]
        self.feed_script: List[Any] = [[make_clip("c1", "complete"), make_clip("c2", "complete")]]
        self.lyrics_script: List[Dict[str, Any]] = [
            {"status": "complete", "title": "Road Song", "text": "La la\nLa"}
        ]
        self.failing_paths: Dict[str, int] = {}

    def studio_requests(self, path: Optional[str] = None) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.host == "suno.test" and (path is None or r.url.path == path)
        ]

    @staticmethod
    def _next(script: List[Any]) -> Any:
        return script.pop(0) if len(script) > 1 else script[0]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.failing_paths:
            return httpx.Response(self.failing_paths[path], text="nope")

        if request.url.host == "clerk.test":
            if path == "/v1/client":
                response = {"object": "client", "id": "client_1"}
                if self.session_id:
                    response["last_active_session_id"] = self.session_id
                return httpx.Response(200, json={"response": response, "client": None})
            if path == f"/v1/client/sessions/{self.session_id}/tokens":
                self.tokens_issued += 1
                return httpx.Response(
                    200, json={"object": "token", "jwt": f"jwt-{self.tokens_issued}"}
                )

        if request.url.host == "suno.test":
            if path == "/api/generate/v2/":
                return httpx.Response(
                    200,
                    json={"id": "batch_1", "status": "complete", "clips": self.generated_clips},
                )
            if path == "/api/generate/concat/v2/":
                body = json.loads(request.content)
                return httpx.Response(200, json=make_clip(body["clip_id"] + "-full", "complete"))
            if path == "/api/feed/":
                return httpx.Response(200, json=self._next(self.feed_script))
            if path == "/api/generate/lyrics/":
                return httpx.Response(200, json={"id": "lyr_1"})
            if path == "/api/generate/lyrics/lyr_1":
                return httpx.Response(200, json=self._next(self.lyrics_script))
            if path.startswith("/api/clip/"):
                return httpx.Response(200, json=make_clip(path.rsplit("/", 1)[-1], "complete"))
            if path == "/api/billing/info/":
                return httpx.Response(
                    200,
                    json={
                        "total_credits_left": 420,
                        "period": "month",
                        "monthly_limit": 500,
                        "monthly_usage": 80,
                    },
                )

        return httpx.Response(404, text="not found")


# ---------------------------------------------------------------------------
# Fake FakeYou service
# ---------------------------------------------------------------------------


def make_job(status: str, **overrides: Any) -> Dict[str, Any]:
    job: Dict[str, Any] = {
        "job_token": "JTINF:1",
        "status": status,
        "maybe_extra_status_description": None,
        "attempt_count": 0,
        "maybe_result_token": None,
        "maybe_public_bucket_wav_audio_path": None,
        "model_token": "TM:mario",
        "title": "Mario",
    }
    if status == "complete_success":
        job["maybe_result_token"] = "TR:1"
        job["maybe_public_bucket_wav_audio_path"] = "/media/a/b/result.wav"
    job.update(overrides)
    return job


class FakeFakeYouServer:
    """MockTransport handler emulating api.fakeyou.com and its bucket."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.login_success = True
        self.logout_success = True
        self.set_cookie: Optional[str] = "session=sess-cookie-42; Path=/; HttpOnly"
        self.models: List[Dict[str, Any]] = list(SAMPLE_MODELS)
        self.job_script: List[Dict[str, Any]] = [
            make_job("pending"),
            make_job("started"),
            make_job("complete_success"),
        ]
        self.job_reads = 0

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "storage.test":
            if path == "/bucket/media/a/b/result.wav":
                return httpx.Response(200, content=WAV_BYTES)
            return httpx.Response(404)

        if path == "/v1/login":
            headers = [("set-cookie", self.set_cookie)] if self.set_cookie else []
            return httpx.Response(200, json={"success": self.login_success}, headers=headers)
        if path == "/v1/logout":
            return httpx.Response(200, json={"success": self.logout_success})
        if path == "/tts/list":
            return httpx.Response(200, json={"success": True, "models": self.models})
        if path in ("/tts/inference", "/v1/voice_conversion/inference"):
            return httpx.Response(200, json={"success": True, "inference_job_token": "JTINF:1"})
        if path == "/v1/media_uploads/upload_audio":
            return httpx.Response(200, json={"success": True, "upload_token": "MU:1"})
        if path == "/tts/job/JTINF:1":
            self.job_reads += 1
            state = self.job_script.pop(0) if len(self.job_script) > 1 else self.job_script[0]
            return httpx.Response(200, json={"success": True, "state": state})

        return httpx.Response(404, json={"success": False})


@pytest.fixture
def suno_server():
    return FakeSunoServer()


@pytest.fixture
def fakeyou_server():
    return FakeFakeYouServer()


@pytest.fixture
def sample_models():
    return [dict(m) for m in SAMPLE_MODELS]
