from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ApiErrorCategory(str, Enum):
    PERMISSION = "permission"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    SERVER = "server"
    UNKNOWN = "unknown"


@dataclass(slots=True)
class ApiError(Exception):
    message: str
    category: ApiErrorCategory = ApiErrorCategory.UNKNOWN
    status_code: int | None = None
    errors: dict[str, list[str]] | None = None
    inner_error: Exception | None = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message

    @property
    def recovery_suggestion(self) -> str | None:
        if self.category is ApiErrorCategory.AUTHENTICATION:
            return "Your session has expired. Sign in again."
        if self.category is ApiErrorCategory.PERMISSION:
            return "Ask an administrator for the role required by this operation."
        if self.category is ApiErrorCategory.NETWORK:
            return "Check the connection to the console server and try again."
        if self.category is ApiErrorCategory.CONFLICT:
            return "The record changed on the server. Refresh and review the latest state."
        if self.category is ApiErrorCategory.VALIDATION:
            return "The request was rejected. Review the entered values and try again."
        if self.category is ApiErrorCategory.SERVER:
            return "The server failed to process the request. Retry shortly."
        return None

    @property
    def is_retriable(self) -> bool:
        if self.category in {ApiErrorCategory.NETWORK, ApiErrorCategory.SERVER}:
            return True
        if self.status_code and 500 <= self.status_code <= 599:
            return True
        return False


class AuthenticationError(ApiError):
    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(
            message=message,
            category=ApiErrorCategory.AUTHENTICATION,
            status_code=401,
        )


class PermissionDeniedError(ApiError):
    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(
            message=message,
            category=ApiErrorCategory.PERMISSION,
            status_code=403,
        )


__all__ = [
    "ApiError",
    "ApiErrorCategory",
    "AuthenticationError",
    "PermissionDeniedError",
]
