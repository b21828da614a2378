"""Async client for the FakeYou voice API (unofficial).

WHY: FakeYou exposes thousands of community TTS and voice-conversion
models behind an undocumented JSON API. Inference is asynchronous: a
submit call returns a job token, the job is polled until it finishes,
and the resulting WAV is served from a public storage bucket. This module
wraps that workflow in one client class.

HOW: FakeYouClient is an async context manager wrapping
httpx.AsyncClient. Every API response is a {"success": ..., <field>: ...}
envelope, unwrapped by _request() via decode_envelope(). Login stores the
session cookie from the set-cookie header; later calls send it back as
"visitor=<value>".

RULES:
- Always use the async context manager (async with FakeYouClient() as client:)
- Login is optional for public models; init() is required for private ones
- Job polling has no deadline: it ends only on a terminal job status
- The session cookie is per instance and unlocked; last write wins
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from audiogen_clients.config import (
    FAKEYOU_BASE_URL,
    FAKEYOU_STORAGE_URL,
    HTTP_TIMEOUT_S,
    load_fakeyou_credentials,
)
from audiogen_clients.core.errors import AuthError, JobFailedError, MissingResultError
from audiogen_clients.core.transport import (
    Body,
    FormData,
    decode_envelope,
    parse_json,
    pause,
    send_request,
)
from audiogen_clients.fakeyou.models import (
    Job,
    TextToSpeechOptions,
    VoiceModel,
    VoiceToVoiceOptions,
    filter_models,
    rank_models,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SESSION_COOKIE_RE = re.compile(r"^[^=;\s]+=([^;]+)")
_TTS_BREAK_RE = re.compile(r"[.,!?:;]")


def _identity(value: Any) -> Any:
    return value


def _prepare_inference_text(text: str) -> str:
    """Insert a newline after each punctuation mark; FakeYou voices pause on them."""
    return _TTS_BREAK_RE.sub(lambda m: m.group(0) + "\n", text)


class FakeYouClient:
    """Async client for FakeYou text-to-speech and voice conversion.

    WHY: Gives callers typed methods (list/search models, TTS, V2V)
    without exposing envelopes, job tokens, or the storage bucket.

    HOW: All API calls go through _request(), which adds the session
    cookie, checks the envelope, and parses the payload field. Both
    inference methods share wait_for_job_completion() and
    _download_result().

    RULES:
    - base_url/storage_url default to the values in config
    - transport is forwarded to httpx.AsyncClient (tests pass MockTransport)
    - Inference methods return raw WAV bytes
    """

    def __init__(
        self,
        base_url: str | None = None,
        storage_url: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or FAKEYOU_BASE_URL).rstrip("/")
        self._storage_url = (storage_url or FAKEYOU_STORAGE_URL).rstrip("/")
        self._timeout_s = timeout_s if timeout_s is not None else HTTP_TIMEOUT_S
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._session_cookie: str | None = None

    async def __aenter__(self) -> FakeYouClient:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout_s),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def session_cookie(self) -> str | None:
        return self._session_cookie

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "FakeYouClient must be used as an async context manager: "
                "async with FakeYouClient() as client: ..."
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        if self._session_cookie:
            return {"cookie": f"visitor={self._session_cookie}"}
        return {}

    async def _send(
        self, path: str, *, method: str = "GET", body: Body | None = None
    ) -> httpx.Response:
        return await send_request(
            self._ensure_client(),
            self._base_url,
            path,
            method=method,
            headers=self._headers(),
            body=body,
        )

    async def _request(
        self,
        path: str,
        result_field: str,
        parse: Callable[[Any], T] = _identity,
        *,
        method: str = "GET",
        body: Body | None = None,
    ) -> T:
        resp = await self._send(path, method=method, body=body)
        return decode_envelope(parse_json(resp, path), result_field, parse, path)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def init(
        self,
        username_or_email: str | None = None,
        password: str | None = None,
    ) -> FakeYouClient:
        """Log in and keep the session cookie for later calls.

        RULES:
        - Credentials default to load_fakeyou_credentials() when both are omitted
        - Passing only one of the two raises ValueError
        - Raises AuthError if the login envelope reports failure
        - Raises AuthError if set-cookie carries no session value
        """
        if username_or_email is None and password is None:
            username_or_email, password = load_fakeyou_credentials()
        elif username_or_email is None or password is None:
            raise ValueError("username_or_email and password must be given together")

        path = "v1/login"
        resp = await self._send(
            path,
            method="POST",
            body={"username_or_email": username_or_email, "password": password},
        )
        data = parse_json(resp, path)
        if not isinstance(data, dict) or data.get("success") is not True:
            raise AuthError("Login failed")

        session = None
        for header in resp.headers.get_list("set-cookie"):
            match = _SESSION_COOKIE_RE.match(header)
            if match:
                session = match.group(1)
                break
        if not session:
            raise AuthError("Login succeeded but no session cookie was returned")
        self._session_cookie = session
        logger.info("Logged in to FakeYou as %s", username_or_email)
        return self

    async def deinit(self) -> FakeYouClient:
        """Log out and forget the session cookie.

        The cookie is cleared even if the logout call fails. Without a
        session this is a no-op.
        """
        if self._session_cookie is None:
            return self
        path = "v1/logout"
        try:
            resp = await self._send(path, method="POST")
            data = parse_json(resp, path)
        finally:
            self._session_cookie = None
            # httpx keeps the login set-cookie in its jar; drop it too
            if self._client is not None:
                self._client.cookies.clear()
        if not isinstance(data, dict) or data.get("success") is not True:
            raise AuthError("Logout failed")
        logger.info("Logged out of FakeYou")
        return self

    # ------------------------------------------------------------------
    # Models
    # ------------------------------------------------------------------

    async def list_models(self) -> list[VoiceModel]:
        return await self._request(
            "tts/list",
            "models",
            lambda models: [VoiceModel.from_dict(m) for m in models],
        )

    async def search_model(self, query: str, language: str | None = None) -> list[VoiceModel]:
        """Find models whose title contains query.

        Args:
            query: Free text, matched literally, case-insensitively, with
                any whitespace run matching any whitespace run.
            language: Optional two-letter code; models whose language tag
                starts with it are listed first.

        Returns:
            Matching models, language matches first, each group by title.
        """
        models = await self.list_models()
        return rank_models(filter_models(models, query), language)

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def wait_for_job_completion(self, job_token: str, poll_interval_s: float = 2.0) -> Job:
        """Poll an inference job until it leaves pending/started.

        RULES:
        - No deadline; a job stuck in pending polls forever
        - complete_success returns the Job
        - Any other terminal status raises JobFailedError with the
          status and maybe_extra_status_description
        """
        path = f"tts/job/{job_token}"
        while True:
            job = await self._request(path, "state", Job.from_dict)
            if not job.is_pending:
                break
            logger.debug("Job %s is %s", job_token, job.status)
            await pause(poll_interval_s)

        if not job.succeeded:
            raise JobFailedError(job.status, job.maybe_extra_status_description)
        return job

    async def _download_result(self, job: Job) -> bytes:
        audio_path = job.maybe_public_bucket_wav_audio_path
        if not audio_path:
            raise MissingResultError(job.job_token, "maybe_public_bucket_wav_audio_path")
        # public bucket: no session cookie, and the body is WAV, not JSON
        resp = await send_request(
            self._ensure_client(),
            self._storage_url,
            audio_path,
            headers={"accept": "audio/wav"},
        )
        return resp.content

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    async def text_to_speech(
        self,
        model_token: str,
        text: str,
        options: TextToSpeechOptions | None = None,
    ) -> bytes:
        """Synthesize text with a TTS model and return WAV bytes."""
        options = options or TextToSpeechOptions()
        job_token = await self._request(
            "tts/inference",
            "inference_job_token",
            str,
            method="POST",
            body={
                "uuid_idempotency_token": str(uuid.uuid4()),
                "tts_model_token": model_token,
                "inference_text": _prepare_inference_text(text),
            },
        )
        logger.debug("Submitted TTS job %s", job_token)
        job = await self.wait_for_job_completion(job_token, options.poll_interval_s)
        return await self._download_result(job)

    async def voice_to_voice(
        self,
        model_token: str,
        voice: bytes,
        options: VoiceToVoiceOptions | None = None,
    ) -> bytes:
        """Convert a recorded voice (WAV bytes) with a voice-conversion model.

        HOW: Uploads the audio as multipart form data to get an upload
        token, submits the conversion job referencing it, waits, and
        downloads the converted WAV.
        """
        options = options or VoiceToVoiceOptions()
        if not voice:
            raise ValueError("voice audio is empty")

        upload_token = await self._request(
            "v1/media_uploads/upload_audio",
            "upload_token",
            str,
            method="POST",
            body=FormData(
                fields={
                    "uuid_idempotency_token": str(uuid.uuid4()),
                    "source": options.source,
                },
                files={"file": ("voice.wav", voice, "audio/wav")},
            ),
        )

        job_token = await self._request(
            "v1/voice_conversion/inference",
            "inference_job_token",
            str,
            method="POST",
            body={
                "auto_predict_f0": options.auto_predict_f0,
                "override_f0_method": options.override_f0_method,
                "transpose": options.transpose,
                "source_media_upload_token": upload_token,
                "uuid_idempotency_token": str(uuid.uuid4()),
                "voice_conversion_model_token": model_token,
            },
        )
        logger.debug("Submitted voice conversion job %s", job_token)
        job = await self.wait_for_job_completion(job_token, options.poll_interval_s)
        return await self._download_result(job)
