"""
Exception types raised by the logistics cart client.

Request failures and validation errors are raised by the lower layers
(api_client, session_key, search) and turned into user-facing notifications
by the state holders. Connectivity problems on the push channel are not
exceptions; they only flip the channel's connection state.
"""

from typing import Optional


class LogisticaError(Exception):
    """Base class for all client errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackendError(LogisticaError):
    """A request/response call failed (non-2xx status or network failure)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidSessionKey(LogisticaError, ValueError):
    """The supplied cart key is empty after trimming."""


class MissingSearchValue(LogisticaError, ValueError):
    """A product lookup was requested without a material code or EAN."""
