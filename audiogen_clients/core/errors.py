"""Exception types shared by the Suno and FakeYou clients.

WHY: Callers need to tell apart a network/HTTP failure, an application
error hidden behind a 2xx response, a failed login, and a remote job that
died. One small hierarchy covers both services so callers can catch
AudiogenError for "anything the client raised".

RULES:
- Every exception carries the context needed to debug it (path, status)
- Errors propagate to the caller; the clients never log-and-swallow them
"""

from __future__ import annotations


class AudiogenError(Exception):
    """Base class for every error raised by the clients."""


class TransportError(AudiogenError):
    """Raised on a non-2xx HTTP status or a network-level failure.

    WHY: Both services reject expired credentials with plain HTTP errors,
    so there is no separate "token expired" kind.

    RULES:
    - path is the request path as passed to the transport helper
    - status_code is None when no response was received
    """

    def __init__(self, path: str, status_code: int | None = None, message: str = "") -> None:
        self.path = path
        self.status_code = status_code
        self.message = message
        if status_code is None:
            text = f"Failed to fetch {path}: {message}"
        else:
            text = f"Failed to fetch {path} (HTTP {status_code}): {message}"
        super().__init__(text)


class ApiError(AudiogenError):
    """Raised when a 2xx response reports failure in its envelope."""

    def __init__(self, path: str, message: str = "success flag was false") -> None:
        self.path = path
        self.message = message
        super().__init__(f"API error from {path}: {message}")


class AuthError(AudiogenError):
    """Raised when login or session renewal yields no usable credential."""


class JobFailedError(AudiogenError):
    """Raised when a polled job reaches a failure terminal state.

    RULES:
    - status is the last status string the service reported
    - detail is the service's error description, or None
    """

    def __init__(self, status: str, detail: str | None = None) -> None:
        self.status = status
        self.detail = detail
        text = f"Job failed with status: {status}"
        if detail:
            text += f" ({detail})"
        super().__init__(text)


class MissingResultError(AudiogenError):
    """Raised when a job succeeded but its result locator is absent."""

    def __init__(self, job_token: str, field: str) -> None:
        self.job_token = job_token
        self.field = field
        super().__init__(f"Job {job_token} completed without {field}")
