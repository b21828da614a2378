"""Shared plumbing for the service clients: errors and HTTP transport.

RULES:
- Service clients import from here; nothing here knows about a service
"""

from audiogen_clients.core.errors import (
    ApiError,
    AudiogenError,
    AuthError,
    JobFailedError,
    MissingResultError,
    TransportError,
)
from audiogen_clients.core.transport import FormData, decode_envelope, send_request

__all__ = [
    "ApiError",
    "AudiogenError",
    "AuthError",
    "FormData",
    "JobFailedError",
    "MissingResultError",
    "TransportError",
    "decode_envelope",
    "send_request",
]
