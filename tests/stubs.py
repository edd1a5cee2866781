from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from modbus_console.api import ApiRequest


class FakeConsoleClient:
    """Stand-in for ``ConsoleApiClient`` that never touches the network.

    Queued items are returned in order; exceptions in the queue are raised.
    When the queue is empty every call succeeds with ``{"success": True}``.
    Call ``hold()`` to park requests until ``release()`` so tests can observe
    a dialog while its submission is in flight.
    """

    def __init__(self, responses: Iterable[dict[str, Any] | BaseException] = ()) -> None:
        self.requests: list[ApiRequest] = []
        self._responses: list[dict[str, Any] | BaseException] = list(responses)
        self._gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    def queue(self, *responses: dict[str, Any] | BaseException) -> None:
        self._responses.extend(responses)

    def hold(self) -> None:
        self._gate = asyncio.Event()

    def release(self) -> None:
        if self._gate is not None:
            self._gate.set()

    @property
    def paths(self) -> list[str]:
        return [request.path for request in self.requests]

    async def execute(self, request: ApiRequest) -> dict[str, Any]:
        self.requests.append(request)
        self.started.set()
        if self._gate is not None:
            await self._gate.wait()
        if not self._responses:
            return {"success": True}
        response = self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self) -> None:
        return None


class RecordingCallback:
    """Collect ``on_close`` notifications from a dialog."""

    def __init__(self) -> None:
        self.calls: list[bool] = []

    def __call__(self, should_refresh: bool) -> None:
        self.calls.append(should_refresh)


__all__ = ["FakeConsoleClient", "RecordingCallback"]
