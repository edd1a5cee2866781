from __future__ import annotations

import asyncio
import socket
from dataclasses import dataclass
from enum import Enum

import httpx

from modbus_console.api.errors import ApiError, ApiErrorCategory


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True)
class ErrorDescriptor:
    headline: str
    detail: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    transient: bool = False
    suggestion: str | None = None


_NETWORK_ERRNOS = {
    getattr(socket, "EAI_AGAIN", None),
    getattr(socket, "EAI_FAIL", None),
    getattr(socket, "EAI_NONAME", None),
    getattr(socket, "EHOSTUNREACH", None),
    getattr(socket, "ENETDOWN", None),
    getattr(socket, "ENETUNREACH", None),
    getattr(socket, "ECONNREFUSED", None),
    getattr(socket, "ECONNRESET", None),
    getattr(socket, "ETIMEDOUT", None),
}
_NETWORK_ERRNOS.discard(None)


def describe_exception(error: BaseException) -> ErrorDescriptor:
    descriptor = ErrorDescriptor(
        headline="Operation failed.",
        detail=f"{type(error).__name__}: {error}",
        severity=ErrorSeverity.ERROR,
        transient=False,
    )

    api_error = _locate_api_error(error)
    if api_error is not None:
        descriptor.detail = _format_api_detail(api_error)
        descriptor.suggestion = api_error.recovery_suggestion
        descriptor.transient = api_error.is_retriable
        if api_error.is_retriable:
            descriptor.severity = ErrorSeverity.WARNING
        descriptor.headline = _api_headline(api_error)
        return descriptor

    root = _unwrap_error(error)

    if isinstance(root, httpx.TimeoutException):
        descriptor.headline = "Temporary timeout contacting the console server."
        descriptor.detail = f"{type(root).__name__}: {root}"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        descriptor.suggestion = "Check your network connection and retry shortly."
        return descriptor

    if isinstance(root, asyncio.TimeoutError):
        descriptor.headline = "Operation timed out before the console server responded."
        descriptor.detail = "asyncio.TimeoutError: Operation timed out"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        descriptor.suggestion = "Retry the request after verifying connectivity."
        return descriptor

    if isinstance(root, socket.gaierror):
        descriptor.headline = "DNS lookup failed while contacting the console server."
        descriptor.detail = f"socket.gaierror: {root}"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        descriptor.suggestion = "Verify the configured API base URL and DNS settings."
        return descriptor

    if isinstance(root, OSError) and getattr(root, "errno", None) in _NETWORK_ERRNOS:
        descriptor.headline = "Network connection issue encountered."
        descriptor.detail = f"OSError[{root.errno}]: {root.strerror}"
        descriptor.severity = ErrorSeverity.WARNING
        descriptor.transient = True
        descriptor.suggestion = "Retry once your connection is stable."
        return descriptor

    return descriptor


def _locate_api_error(error: BaseException) -> ApiError | None:
    current: BaseException | None = error
    visited: set[int] = set()
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        if isinstance(current, ApiError):
            return current
        current = current.__cause__ or current.__context__
    return None


def _unwrap_error(error: BaseException) -> BaseException:
    current = error
    visited: set[int] = set()
    while True:
        visited.add(id(current))
        inner = current.__cause__ or current.__context__
        if inner is None or id(inner) in visited:
            return current
        current = inner


def _api_headline(error: ApiError) -> str:
    match error.category:
        case ApiErrorCategory.NETWORK:
            return "Network issue contacting the console server."
        case ApiErrorCategory.AUTHENTICATION:
            return "Authentication is required to call the console server."
        case ApiErrorCategory.PERMISSION:
            return "The signed-in account lacks the required role."
        case ApiErrorCategory.CONFLICT:
            return "The requested change conflicts with existing data."
        case ApiErrorCategory.VALIDATION:
            return "The console server rejected the request payload."
        case ApiErrorCategory.SERVER:
            return "The console server failed to process the request."
        case _:
            return "Console request failed."


def _format_api_detail(error: ApiError) -> str:
    if error.status_code:
        return f"HTTP {error.status_code}: {error}"
    return str(error)


__all__ = [
    "ErrorDescriptor",
    "ErrorSeverity",
    "describe_exception",
]
