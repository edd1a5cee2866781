"""HTTP access to the console backend API."""

from .client import ApiClientConfig, ConsoleApiClient, TokenProvider
from .errors import (
    ApiError,
    ApiErrorCategory,
    AuthenticationError,
    PermissionDeniedError,
)
from .requests import ApiRequest

__all__ = [
    "ApiClientConfig",
    "ConsoleApiClient",
    "TokenProvider",
    "ApiError",
    "ApiErrorCategory",
    "AuthenticationError",
    "PermissionDeniedError",
    "ApiRequest",
]
