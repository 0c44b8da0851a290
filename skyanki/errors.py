# skyanki/errors.py
from __future__ import annotations

from typing import Optional


class SkyankiError(Exception):
    """Base class for every failure surfaced by the sync agent."""


class TransportError(SkyankiError):
    def __init__(self, path: str):
        super().__init__(f"request failed to `{path}`")
        self.path = path


class ParsingError(SkyankiError):
    """Expected HTML/cookie structure is missing: the upstream page changed shape."""


class ServerError(SkyankiError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UserError(SkyankiError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DeserializationError(SkyankiError):
    """Response body did not match the expected schema.

    Keeps the raw body around, the meanings API is known to return
    malformed payloads from time to time.
    """

    def __init__(self, error: Exception, body: str):
        super().__init__(f"unable to deserialize response: {error}")
        self.error = error
        self.body = body


class AnkiConnectError(SkyankiError):
    """Exception raised when AnkiConnect returns an error."""

    @property
    def is_duplicate(self) -> bool:
        return "duplicate" in str(self).lower()


def raise_for_status(status_code: int, message: str) -> None:
    """Map a non-2xx status onto the error taxonomy."""
    if 200 <= status_code < 300:
        return
    if 400 <= status_code < 500:
        raise UserError(message, status_code)
    raise ServerError(message, status_code)
