"""Edge function client layer."""

from .errors import (
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    ResponseFormatError,
    TenantNotFoundError,
)

__all__ = [
    "ApiError",
    "AuthenticationError",
    "NetworkError",
    "NotFoundError",
    "ResponseFormatError",
    "TenantNotFoundError",
]
