"""Async client for the Suno studio API (unofficial).

WHY: Suno has no public API. The web app talks to studio-api with a
short-lived Clerk JWT that is minted from a browser session cookie. This
module hides the session dance and the "submit, then poll the feed"
workflow behind one client class.

HOW: SunoClient is an async context manager wrapping httpx.AsyncClient.
init(cookie) resolves the Clerk session id and fetches the first JWT;
keep_alive() re-issues the JWT and is called at the start of every
operation. Generation calls can optionally poll the feed until the clips
are playable, bounded by a wall-clock deadline.

RULES:
- Always use the async context manager (async with SunoClient() as client:)
- Call init() before any other operation
- Every operation renews the JWT first (keep_alive(wait=False))
- The wait_audio loop gives up after SunoPollConfig.timeout_s and returns
  the last clips it saw; that is a normal return, not an error
- Credential state is per instance and unlocked: concurrent operations on
  one client may race on renewal, and the last renewal wins
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from audiogen_clients.config import (
    CLERK_JS_VERSION,
    HTTP_TIMEOUT_S,
    SUNO_BASE_URL,
    SUNO_CLERK_BASE_URL,
    SUNO_DEFAULT_MODEL,
    SUNO_USER_AGENT,
    load_suno_cookie,
)
from audiogen_clients.core.errors import ApiError, AuthError, JobFailedError
from audiogen_clients.core.transport import (
    Body,
    parse_json,
    parse_payload,
    pause,
    send_request,
)
from audiogen_clients.suno.models import (
    FAILURE_STATUS,
    AudioInfo,
    BillingInformation,
    Clip,
    Lyrics,
    LyricsJob,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MODEL = SUNO_DEFAULT_MODEL

_LYRICS_COMPLETE = "complete"


def _now() -> float:
    return time.monotonic()


def _identity(value: Any) -> Any:
    return value


@dataclass
class SunoPollConfig:
    """Timing of the wait_audio polling loop.

    RULES:
    - initial_delay_s: sleep before the first feed read (default 5s)
    - timeout_s: overall deadline measured from submission (default 100s)
    - interval_min_s/interval_max_s: random sleep between reads (3-6s)
    """

    initial_delay_s: float = 5.0
    timeout_s: float = 100.0
    interval_min_s: float = 3.0
    interval_max_s: float = 6.0


@dataclass
class RenewalConfig:
    """Jitter window applied after keep_alive(wait=True) (default 1-2s)."""

    jitter_min_s: float = 1.0
    jitter_max_s: float = 2.0


class SunoClient:
    """Async client for Suno song generation.

    WHY: Provides typed methods for each Suno capability (generate, extend,
    concatenate, feed, clip detail, credits, lyrics) while owning the
    Clerk session and JWT renewal.

    HOW: Two base URLs are used: the Clerk frontend API for session and
    token calls, and studio-api for everything else. Both go through
    send_request() with the current cookie and bearer token attached.

    RULES:
    - base_url/clerk_base_url default to the values in config
    - transport is forwarded to httpx.AsyncClient (tests pass MockTransport)
    - deinit() only forgets credentials; it makes no network call
    """

    def __init__(
        self,
        base_url: str | None = None,
        clerk_base_url: str | None = None,
        model: str | None = None,
        poll_config: SunoPollConfig | None = None,
        renewal_config: RenewalConfig | None = None,
        lyrics_poll_interval_s: float = 2.0,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or SUNO_BASE_URL).rstrip("/")
        self._clerk_base_url = (clerk_base_url or SUNO_CLERK_BASE_URL).rstrip("/")
        self._model = model or DEFAULT_MODEL
        self._poll = poll_config or SunoPollConfig()
        self._renewal = renewal_config or RenewalConfig()
        self._lyrics_poll_interval_s = lyrics_poll_interval_s
        self._timeout_s = timeout_s if timeout_s is not None else HTTP_TIMEOUT_S
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self._cookie: str | None = None
        self._sid: str | None = None
        self._token: str | None = None

    async def __aenter__(self) -> SunoClient:
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
    def session_id(self) -> str | None:
        return self._sid

    @property
    def token(self) -> str | None:
        return self._token

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "SunoClient must be used as an async context manager: "
                "async with SunoClient() as client: ..."
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {
            "user-agent": SUNO_USER_AGENT,
            "cookie": self._cookie or "",
        }
        if self._token:
            headers["authorization"] = f"Bearer {self._token}"
        return headers

    async def _fetch(
        self,
        base_url: str,
        path: str,
        *,
        method: str = "GET",
        body: Body | None = None,
        params: dict[str, str] | None = None,
        parse: Callable[[Any], T] = _identity,
    ) -> T:
        resp = await send_request(
            self._ensure_client(),
            base_url,
            path,
            method=method,
            headers=self._headers(),
            body=body,
            params=params,
        )
        return parse_payload(parse_json(resp, path), parse, path)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def init(self, cookie: str | None = None) -> SunoClient:
        """Establish a Clerk session from a browser cookie.

        WHY: Every studio-api call needs a JWT, and JWTs are minted per
        Clerk session. The cookie identifies the browser's Clerk client,
        from which we read the active session id.

        HOW: Stores the cookie, reads the Clerk client object to get
        last_active_session_id, then renews once to obtain the first JWT.

        RULES:
        - cookie defaults to load_suno_cookie() (SUNO_COOKIE in .env)
        - Raises AuthError when no session id comes back
        """
        self._cookie = cookie or load_suno_cookie()
        await self._fetch_session_id()
        await self.keep_alive()
        logger.info("Suno session %s established", self._sid)
        return self

    async def deinit(self) -> SunoClient:
        self._cookie = None
        self._sid = None
        self._token = None
        return self

    async def _fetch_session_id(self) -> None:
        data = await self._fetch(
            self._clerk_base_url,
            "/v1/client",
            params={"_clerk_js_version": CLERK_JS_VERSION},
        )
        response = data.get("response") if isinstance(data, dict) else None
        sid = response.get("last_active_session_id") if isinstance(response, dict) else None
        if not sid:
            raise AuthError(
                "Failed to get session id, you may need to update the Suno cookie."
            )
        self._sid = sid

    async def keep_alive(self, wait: bool = False) -> None:
        """Exchange the session id for a fresh JWT.

        The new token replaces the old one unconditionally. With wait=True
        the call sleeps a random RenewalConfig jitter before returning.

        Raises:
            AuthError: if init() has not stored a session id, or the
                response carries no jwt.
        """
        if not self._sid:
            raise AuthError("Session ID is not set. Cannot renew token.")
        data = await self._fetch(
            self._clerk_base_url,
            f"/v1/client/sessions/{self._sid}/tokens",
            method="POST",
            params={"_clerk_js_version": CLERK_JS_VERSION},
        )
        jwt = data.get("jwt") if isinstance(data, dict) else None
        if not jwt:
            raise AuthError("Token renewal returned no jwt.")
        if wait:
            await pause(self._renewal.jitter_min_s, self._renewal.jitter_max_s)
        self._token = jwt
        logger.debug("Renewed Suno token for session %s", self._sid)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def generate(
        self,
        prompt: str,
        make_instrumental: bool = False,
        model: str | None = None,
        wait_audio: bool = False,
    ) -> list[AudioInfo]:
        """Generate songs from a free-text description.

        Suno writes the lyrics, style and title itself. With wait_audio
        the call polls until the clips are playable (or the deadline hits).
        """
        return await self._generate_songs(
            prompt,
            is_custom=False,
            make_instrumental=make_instrumental,
            model=model,
            wait_audio=wait_audio,
        )

    async def custom_generate(
        self,
        prompt: str,
        tags: str,
        title: str,
        make_instrumental: bool = False,
        model: str | None = None,
        wait_audio: bool = False,
    ) -> list[AudioInfo]:
        """Generate songs from caller-supplied lyrics, style tags and title."""
        return await self._generate_songs(
            prompt,
            is_custom=True,
            tags=tags,
            title=title,
            make_instrumental=make_instrumental,
            model=model,
            wait_audio=wait_audio,
        )

    async def _generate_songs(
        self,
        prompt: str,
        is_custom: bool,
        tags: str | None = None,
        title: str | None = None,
        make_instrumental: bool = False,
        model: str | None = None,
        wait_audio: bool = False,
    ) -> list[AudioInfo]:
        await self.keep_alive(False)
        payload: dict[str, Any] = {
            "make_instrumental": bool(make_instrumental),
            "mv": model or self._model,
            "prompt": "",
        }
        if is_custom:
            payload["tags"] = tags
            payload["title"] = title
            payload["prompt"] = prompt
        else:
            payload["gpt_description_prompt"] = prompt

        path = "/api/generate/v2/"
        audios = await self._fetch(
            self._base_url,
            path,
            method="POST",
            body=payload,
            parse=lambda data: _submitted_audios(data, path),
        )

        if wait_audio:
            return await self._wait_for_clips([audio.id for audio in audios])

        await self.keep_alive(True)
        return audios

    async def _wait_for_clips(self, song_ids: list[str]) -> list[AudioInfo]:
        """Poll the feed until every clip is playable or every clip failed.

        WHY: Generation takes tens of seconds. Callers asking for
        wait_audio want URLs they can play, but should not hang forever on
        a stuck job.

        HOW: Sleeps the initial delay, then reads the feed for song_ids
        until the deadline, sleeping a random interval and renewing the
        token (with jitter) between reads.

        RULES:
        - No song_ids → return [] without polling
        - All clips streaming/complete → return them
        - All clips error → raise JobFailedError("error", first message)
        - Deadline reached → return the last read (possibly []) unchanged
        """
        if not song_ids:
            logger.warning("Generation returned no clips; nothing to wait for")
            return []
        cfg = self._poll
        start = _now()
        last: list[AudioInfo] = []
        await pause(cfg.initial_delay_s)
        while _now() - start < cfg.timeout_s:
            audios = await self.get(song_ids)
            if all(audio.is_ready for audio in audios):
                return audios
            if all(audio.is_failed for audio in audios):
                detail = next((a.error_message for a in audios if a.error_message), None)
                raise JobFailedError(FAILURE_STATUS, detail)
            logger.debug(
                "Clips not ready: %s",
                ", ".join(f"{a.id}={a.status}" for a in audios),
            )
            last = audios
            await pause(cfg.interval_min_s, cfg.interval_max_s)
            await self.keep_alive(True)

        logger.warning(
            "Gave up waiting for clips %s after %.0fs; returning last status",
            ",".join(song_ids),
            cfg.timeout_s,
        )
        return last

    async def concatenate(self, clip_id: str) -> AudioInfo:
        """Stitch an extended clip and its parents into one full song."""
        await self.keep_alive(False)
        return await self._fetch(
            self._base_url,
            "/api/generate/concat/v2/",
            method="POST",
            body={"clip_id": clip_id},
            parse=lambda data: AudioInfo.from_clip(data, parse_lyric=False),
        )

    async def extend_audio(
        self,
        audio_id: str,
        prompt: str = "",
        continue_at: str = "0",
        tags: str = "",
        title: str = "",
        model: str | None = None,
    ) -> list[AudioInfo]:
        """Continue an existing clip with new content.

        Args:
            audio_id: Clip to extend.
            prompt: Lyrics for the continuation.
            continue_at: Position to branch from, e.g. "00:30". "0"
                extends from the end of the song.
            tags: Style of music.
            title: Title for the new clip.
            model: Model version; defaults to the client's model.
        """
        await self.keep_alive(False)
        path = "/api/generate/v2/"
        return await self._fetch(
            self._base_url,
            path,
            method="POST",
            body={
                "continue_clip_id": audio_id,
                "continue_at": continue_at,
                "mv": model or self._model,
                "prompt": prompt,
                "tags": tags,
                "title": title,
            },
            parse=lambda data: _submitted_audios(data, path),
        )

    async def generate_lyrics(self, prompt: str) -> Lyrics:
        """Generate lyrics from a prompt and wait for the result.

        Polls every lyrics_poll_interval_s with no deadline until the job
        reports "complete". A job reporting "error" raises JobFailedError.
        """
        await self.keep_alive(False)
        data = await self._fetch(
            self._base_url,
            "/api/generate/lyrics/",
            method="POST",
            body={"prompt": prompt},
        )
        if not isinstance(data, dict) or not data.get("id"):
            raise ApiError("/api/generate/lyrics/", "response has no 'id' field")
        generate_id = data["id"]

        path = f"/api/generate/lyrics/{generate_id}"
        while True:
            job = await self._fetch(self._base_url, path, parse=LyricsJob.from_dict)
            if job.status == _LYRICS_COMPLETE:
                return Lyrics(title=job.title, text=job.text)
            if job.status == FAILURE_STATUS:
                raise JobFailedError(job.status)
            logger.debug("Lyrics job %s is %s", generate_id, job.status or "pending")
            await pause(self._lyrics_poll_interval_s)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, song_ids: list[str] | None = None) -> list[AudioInfo]:
        """Read songs from the feed, optionally restricted to song_ids.

        None reads the whole feed. An empty list asks for no songs and
        returns [] without a feed read.
        """
        await self.keep_alive(False)
        if song_ids is not None and not song_ids:
            return []
        path = "/api/feed/"
        params = {"ids": ",".join(song_ids)} if song_ids is not None else None
        return await self._fetch(
            self._base_url,
            path,
            params=params,
            parse=lambda data: _feed_audios(data, path),
        )

    async def get_clip(self, clip_id: str) -> Clip:
        await self.keep_alive(False)
        return await self._fetch(
            self._base_url, f"/api/clip/{clip_id}", parse=Clip.from_dict
        )

    async def get_credits(self) -> BillingInformation:
        await self.keep_alive(False)
        return await self._fetch(
            self._base_url, "/api/billing/info/", parse=BillingInformation.from_dict
        )


def _submitted_audios(data: Any, path: str) -> list[AudioInfo]:
    clips = data.get("clips") if isinstance(data, dict) else None
    if not isinstance(clips, list):
        raise ApiError(path, "response has no 'clips' list")
    return [AudioInfo.from_clip(clip, parse_lyric=False) for clip in clips]


def _feed_audios(data: Any, path: str) -> list[AudioInfo]:
    if not isinstance(data, list):
        raise ApiError(path, "expected a list of clips")
    return [AudioInfo.from_clip(clip) for clip in data]
