"""HTTP transport helpers shared by the Suno and FakeYou clients.

WHY: Both services are called the same way: one request to a fixed base
URL, JSON in and out (multipart for audio uploads), credential headers
attached, and any non-2xx status turned into an exception. The FakeYou
API additionally wraps every payload in a {"success": ..., "<field>": ...}
envelope that must be checked even on HTTP 200.

HOW: send_request() issues one request on a caller-owned
httpx.AsyncClient and raises TransportError on failure. decode_envelope()
is the generic "success flag + named payload field" step, parameterised
by the field name and a parser for the payload. pause() is the single
sleep primitive used by renewal jitter and polling loops, so tests can
patch it in one place per client module.

RULES:
- No retries here; only the polling loops in the clients retry reads
- dict bodies are sent as JSON, FormData bodies as multipart; bodiless
  requests carry no content-type
- Caller headers override the defaults
- httpx exceptions are wrapped in TransportError with the cause chained
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar, Union

import httpx

from audiogen_clients.core.errors import ApiError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FormData:
    """Multipart form body: plain fields plus file parts.

    files maps a form field name to (filename, content, content_type).
    """

    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, tuple[str, bytes, str]] = field(default_factory=dict)


Body = Union[Mapping[str, Any], FormData]


def build_url(base_url: str, path: str) -> str:
    """Join a base URL and a path with exactly one slash between them."""
    return "{}/{}".format(base_url.rstrip("/"), path.lstrip("/"))


async def send_request(
    client: httpx.AsyncClient,
    base_url: str,
    path: str,
    *,
    method: str = "GET",
    headers: Mapping[str, str] | None = None,
    body: Body | None = None,
    params: Mapping[str, str] | None = None,
) -> httpx.Response:
    """Issue one HTTP request and return the response if it is 2xx.

    Args:
        client: Open httpx client owned by the calling service client.
        base_url: Service base URL (no trailing slash needed).
        path: Path relative to base_url; used in error messages.
        method: HTTP method.
        headers: Extra headers, typically the credential headers.
        body: dict for a JSON body, FormData for multipart, or None.
        params: Optional query string parameters.

    Returns:
        The raw httpx.Response.

    Raises:
        TransportError: on a non-2xx status or any httpx.HTTPError.
    """
    request_headers: dict[str, str] = {"accept": "application/json"}
    # httpx sets the multipart boundary itself
    if body is not None and not isinstance(body, FormData):
        request_headers["content-type"] = "application/json"
    if headers:
        request_headers.update(headers)

    kwargs: dict[str, Any] = {"headers": request_headers}
    if params:
        kwargs["params"] = dict(params)
    if isinstance(body, FormData):
        kwargs["data"] = body.fields
        kwargs["files"] = body.files
    elif body is not None:
        kwargs["json"] = dict(body)

    url = build_url(base_url, path)
    logger.debug("%s %s", method, url)
    try:
        resp = await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        raise TransportError(path, None, str(exc)) from exc

    if not resp.is_success:
        raise TransportError(path, resp.status_code, resp.text)
    return resp


def parse_json(resp: httpx.Response, path: str) -> Any:
    """Decode a response body as JSON, raising ApiError if it is not JSON."""
    try:
        return resp.json()
    except ValueError as exc:
        raise ApiError(path, "response body is not valid JSON") from exc


def parse_payload(data: Any, parse: Callable[[Any], T], path: str) -> T:
    """Run parse(data), reporting a malformed payload as ApiError.

    The model factories index required keys directly, so a missing key or
    a value of the wrong type surfaces here as KeyError/TypeError.
    """
    try:
        return parse(data)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ApiError(path, f"unexpected response shape: {exc!r}") from exc


def decode_envelope(
    data: Any,
    field_name: str,
    parse: Callable[[Any], T],
    path: str,
) -> T:
    """Unwrap a {"success": bool, field_name: payload} envelope.

    WHY: The services report application-level failures with HTTP 200 and
    success=false, so a status-code check alone is not enough.

    RULES:
    - Non-object bodies, success != true, and a missing field all raise ApiError
    - The payload is handed to parse() and its result returned
    - A payload parse() cannot handle raises ApiError, not KeyError
    """
    if not isinstance(data, dict):
        raise ApiError(path, "response body is not a JSON object")
    if data.get("success") is not True:
        raise ApiError(path)
    if field_name not in data:
        raise ApiError(path, f"response has no '{field_name}' field")
    return parse_payload(data[field_name], parse, path)


async def pause(min_s: float, max_s: float | None = None) -> None:
    """Sleep for min_s seconds, or a random duration in [min_s, max_s]."""
    delay = min_s
    if max_s is not None and max_s != min_s:
        low, high = sorted((min_s, max_s))
        delay = random.uniform(low, high)
    await asyncio.sleep(delay)
