from __future__ import annotations

from collections.abc import Iterator

import pytest

from modbus_console.utils import LoggingOptions, configure_logging

from tests.stubs import FakeConsoleClient


configure_logging(LoggingOptions(level="DEBUG", file_sink=False))


@pytest.fixture
def fake_client() -> Iterator[FakeConsoleClient]:
    """Console client double that records requests and replays queued bodies."""

    client = FakeConsoleClient()
    yield client
    client.release()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "API_BASE_URL",
        "REQUEST_TIMEOUT",
        "VERIFY_TLS",
        "LOG_LEVEL",
        "LOG_DIR",
        "LOG_TO_FILE",
        "LANGUAGE",
        "API_TOKEN",
    ):
        monkeypatch.delenv(f"MODBUS_CONSOLE_{name}", raising=False)
