"""Keyforge error types.

Error codes are stable strings for programmatic handling and map 1:1 onto
the ``error.code`` field of HTTP error responses.
"""

from __future__ import annotations

from typing import Any


class KeyforgeError(Exception):
    """Base error for all Keyforge exceptions."""

    code: str = "internal_error"
    message: str = "An internal error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Render the error envelope returned by the HTTP API."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "request_id": request_id,
                "details": self.details,
            }
        }


class ValidationError(KeyforgeError):
    """Invalid caller input (400). Never retried."""

    code = "validation_error"
    message = "Validation error"
    status_code = 400


class UnauthorizedError(KeyforgeError):
    """No current user could be resolved (401)."""

    code = "unauthorized"
    message = "Authentication required"
    status_code = 401


class StoreUnavailable(KeyforgeError):
    """Row store transport or availability failure (503).

    Reads may be retried with backoff. Writes are not retried.
    """

    code = "store_unavailable"
    message = "Key store is unavailable"
    status_code = 503


class DecodeError(KeyforgeError):
    """A row returned by the store does not match the ApiKey shape (502)."""

    code = "decode_error"
    message = "Stored API key row is malformed"
    status_code = 502


class UnavailableRandomness(KeyforgeError):
    """The OS entropy source cannot produce secure random bytes (500)."""

    code = "unavailable_randomness"
    message = "Secure randomness is unavailable"
    status_code = 500
