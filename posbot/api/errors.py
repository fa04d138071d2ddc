"""Exceptions raised by the edge function client."""

from __future__ import annotations


class ApiError(Exception):
    """A remote call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(ApiError):
    """No valid session, or the backend rejected the token."""


class NetworkError(ApiError):
    """Transport failure or timeout before a response arrived."""


class NotFoundError(ApiError):
    """The endpoint or the resource does not exist."""


class ResponseFormatError(ApiError):
    """The response body does not match the expected schema."""


class TenantNotFoundError(ApiError):
    """No tenant could be resolved for the current session."""
