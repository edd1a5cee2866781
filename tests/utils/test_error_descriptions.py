from __future__ import annotations

import asyncio

import httpx

from modbus_console.api import ApiError, ApiErrorCategory, AuthenticationError
from modbus_console.utils.errors import ErrorSeverity, describe_exception


def test_api_error_is_found_through_cause_chain() -> None:
    api_error = ApiError("backend down", category=ApiErrorCategory.SERVER, status_code=503)
    try:
        try:
            raise api_error
        except ApiError as exc:
            raise RuntimeError("wrapped") from exc
    except RuntimeError as outer:
        descriptor = describe_exception(outer)

    assert descriptor.headline == "The console server failed to process the request."
    assert descriptor.detail == "HTTP 503: backend down"
    assert descriptor.transient is True
    assert descriptor.severity is ErrorSeverity.WARNING


def test_authentication_error_is_not_transient() -> None:
    descriptor = describe_exception(AuthenticationError("expired"))

    assert descriptor.transient is False
    assert descriptor.severity is ErrorSeverity.ERROR
    assert descriptor.suggestion == "Your session has expired. Sign in again."


def test_httpx_timeout_is_transient() -> None:
    descriptor = describe_exception(httpx.ReadTimeout("slow"))

    assert descriptor.transient is True
    assert "timeout" in descriptor.headline.lower()


def test_asyncio_timeout_is_transient() -> None:
    descriptor = describe_exception(asyncio.TimeoutError())

    assert descriptor.transient is True


def test_unknown_error_keeps_type_name() -> None:
    descriptor = describe_exception(KeyError("missing"))

    assert descriptor.headline == "Operation failed."
    assert descriptor.detail.startswith("KeyError")
    assert descriptor.transient is False
