from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Awaitable, Callable, Generic, Mapping, TypeVar

from modbus_console.api.errors import ApiError, ApiErrorCategory
from modbus_console.utils import get_logger


logger = get_logger(__name__)

T_co = TypeVar("T_co", covariant=True)
PayloadT = TypeVar("PayloadT")
ReturnT = TypeVar("ReturnT")


class MutationStatus(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class EventHook(Generic[T_co]):
    """Simple observer pattern helper for UI-friendly bridging."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[T_co], None]] = []

    def subscribe(self, callback: Callable[[T_co], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:  # pragma: no cover - best effort cleanup
                pass

        return unsubscribe

    def emit(self, payload: T_co) -> None:
        for callback in list(self._subscribers):
            try:
                callback(payload)
            except Exception:  # pragma: no cover - callbacks should not crash services
                logger.exception("Service event callback failed")


@dataclass(slots=True, frozen=True)
class MutationOutcome:
    """Result of a remote mutation that completed at the transport level.

    ``success=False`` is a business rejection; ``message`` carries the
    server's human-readable reason when one was given.
    """

    success: bool
    message: str | None = None

    @classmethod
    def ok(cls, message: str | None = None) -> "MutationOutcome":
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, message: str | None = None) -> "MutationOutcome":
        return cls(success=False, message=message)

    @classmethod
    def from_response(cls, body: Mapping[str, Any]) -> "MutationOutcome":
        """Read the success flag and message from a console API response."""

        flag = body.get("success", body.get("isSuccessful", True))
        message = body.get("message") or body.get("errorMessage")
        if not message:
            errors = body.get("errors")
            if isinstance(errors, list) and errors:
                message = "; ".join(str(item) for item in errors)
            validation = body.get("validationErrors")
            if isinstance(validation, list) and validation:
                message = "; ".join(
                    str(item.get("message", item)) if isinstance(item, dict) else str(item)
                    for item in validation
                )
        return cls(success=bool(flag), message=message or None)


async def run_optimistic_mutation(
    *,
    emitter: "EventHook[PayloadT]",
    event_builder: Callable[[MutationStatus, Exception | None], PayloadT],
    operation: Callable[[], Awaitable[ReturnT]],
) -> ReturnT:
    """Emit pending/success/failure events while executing a mutation."""

    emitter.emit(event_builder(MutationStatus.PENDING, None))
    try:
        result = await operation()
    except Exception as exc:  # noqa: BLE001
        emitter.emit(event_builder(MutationStatus.FAILED, exc))
        raise
    if isinstance(result, MutationOutcome) and not result.success:
        emitter.emit(event_builder(MutationStatus.FAILED, None))
        return result
    emitter.emit(event_builder(MutationStatus.SUCCEEDED, None))
    return result


def ensure_query_succeeded(body: Mapping[str, Any], fallback: str) -> None:
    """Raise ``ApiError`` when a read endpoint reports failure in its body."""

    outcome = MutationOutcome.from_response(body)
    if outcome.success:
        return
    raise ApiError(
        message=outcome.message or fallback,
        category=ApiErrorCategory.VALIDATION,
    )


@dataclass(slots=True)
class RefreshEvent(Generic[T_co]):
    items: T_co


@dataclass(slots=True)
class ServiceErrorEvent:
    operation: str
    error: Exception


__all__ = [
    "EventHook",
    "MutationOutcome",
    "MutationStatus",
    "RefreshEvent",
    "ServiceErrorEvent",
    "ensure_query_succeeded",
    "run_optimistic_mutation",
]
