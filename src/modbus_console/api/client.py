from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from modbus_console.api.errors import (
    ApiError,
    ApiErrorCategory,
    AuthenticationError,
    PermissionDeniedError,
)
from modbus_console.api.requests import ApiRequest
from modbus_console.config import Settings
from modbus_console.utils import get_logger


logger = get_logger(__name__)


TokenProvider = Callable[[], str | None]


@dataclass(slots=True)
class ApiClientConfig:
    base_url: str
    timeout: float = 10.0
    verify_tls: bool = True
    user_agent: str = "ModbusConsole-Python"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ApiClientConfig":
        return cls(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
            verify_tls=settings.verify_tls,
        )


class ConsoleApiClient:
    """Async JSON client for the console backend API."""

    def __init__(
        self,
        config: ApiClientConfig,
        *,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._token_provider = token_provider
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._config.base_url.rstrip("/")

    async def __aenter__(self) -> "ConsoleApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def execute(self, request: ApiRequest) -> dict[str, Any]:
        """Send a request and return the decoded JSON body."""

        client = self._get_http_client()
        start = time.perf_counter()
        try:
            response = await client.request(
                request.method,
                request.path,
                json=request.body if request.method != "GET" else None,
                params=request.params,
                headers=self._auth_headers(),
            )
        except httpx.TimeoutException as exc:
            logger.warning(
                "Console API request timed out",
                method=request.method,
                path=request.path,
            )
            raise ApiError(
                message="Network timeout communicating with the console server",
                category=ApiErrorCategory.NETWORK,
                inner_error=exc,
            ) from exc
        except httpx.RequestError as exc:
            logger.warning(
                "Console API request failed",
                method=request.method,
                path=request.path,
                error=str(exc),
            )
            raise ApiError(
                message=f"Network error communicating with the console server: {exc}",
                category=ApiErrorCategory.NETWORK,
                inner_error=exc,
            ) from exc

        duration_ms = (time.perf_counter() - start) * 1000
        if response.status_code >= 400:
            rejection = _business_rejection(response)
            if rejection is not None:
                logger.info(
                    "Console API business rejection",
                    method=request.method,
                    path=request.path,
                    status=response.status_code,
                    duration_ms=round(duration_ms, 1),
                )
                return rejection
            error = _map_response_to_error(response)
            logger.debug(
                "Console API request rejected",
                method=request.method,
                path=request.path,
                status=response.status_code,
                category=error.category.value,
                duration_ms=round(duration_ms, 1),
            )
            raise error

        logger.debug(
            "Console API request completed",
            method=request.method,
            path=request.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 1),
        )
        return _decode_body(response)

    def _auth_headers(self) -> dict[str, str]:
        if self._token_provider is None:
            return {}
        token = self._token_provider()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._config.timeout,
                verify=self._config.verify_tls,
                headers={
                    "User-Agent": self._config.user_agent,
                    "Content-Type": "application/json",
                },
                transport=self._transport,
            )
        return self._http_client


def _decode_body(response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise ApiError(
            message="The console server returned a malformed response",
            category=ApiErrorCategory.SERVER,
            status_code=response.status_code,
            inner_error=exc,
        ) from exc
    if isinstance(body, dict):
        return body
    return {"data": body}


def _business_rejection(response: httpx.Response) -> dict[str, Any] | None:
    """Return the body of a 4xx reply that carries a structured business outcome."""

    if response.status_code in {401, 403} or response.status_code >= 500:
        return None
    if not response.content:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("success", "isSuccessful"):
        if body.get(key) is False:
            return body
    return None


def _map_response_to_error(response: httpx.Response) -> ApiError:
    status = response.status_code
    body: dict[str, Any] = {}
    try:
        decoded = response.json()
        if isinstance(decoded, dict):
            body = decoded
    except Exception:  # noqa: BLE001 - non-JSON error bodies fall back to text
        body = {}

    message = (
        body.get("message")
        or body.get("errorMessage")
        or body.get("title")
        or response.text
        or f"Console request failed with status {status}"
    )
    raw_errors = body.get("errors")
    errors = None
    if isinstance(raw_errors, dict):
        errors = {
            str(field): [str(item) for item in items]
            for field, items in raw_errors.items()
            if isinstance(items, list)
        }

    if status == 401:
        return AuthenticationError(message=message)
    if status == 403:
        return PermissionDeniedError(message=message)

    category = ApiErrorCategory.UNKNOWN
    if 500 <= status <= 599:
        category = ApiErrorCategory.SERVER
    elif status == 409:
        category = ApiErrorCategory.CONFLICT
    elif status in {400, 404, 422}:
        category = ApiErrorCategory.VALIDATION

    return ApiError(
        message=message,
        category=category,
        status_code=status,
        errors=errors,
    )


__all__ = ["ApiClientConfig", "ConsoleApiClient", "TokenProvider"]
