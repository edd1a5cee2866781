from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Awaitable, Callable, Generic, Iterable, TypeVar

from pydantic import ValidationError
from structlog.stdlib import BoundLogger

from modbus_console.services.base import EventHook, MutationOutcome
from modbus_console.services.diff import (
    CollectionDelta,
    CollectionDiffEngine,
    CollectionValidationError,
)
from modbus_console.ui.i18n import DEFAULT_CATALOG, Translator
from modbus_console.utils import get_logger
from modbus_console.utils.errors import describe_exception


_module_logger = get_logger(__name__)

TargetT = TypeVar("TargetT")
DraftT = TypeVar("DraftT")
PayloadT = TypeVar("PayloadT")
EntityT = TypeVar("EntityT")

SubmitMutation = Callable[[PayloadT], Awaitable[MutationOutcome]]
DraftMutation = Callable[[DraftT], DraftT]


class DialogPhase(StrEnum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    CLOSED = "closed"


@dataclass(slots=True, frozen=True)
class DialogState:
    phase: DialogPhase
    message: str | None = None
    should_refresh: bool = False

    @classmethod
    def idle(cls) -> "DialogState":
        return cls(DialogPhase.IDLE)

    @classmethod
    def loading(cls) -> "DialogState":
        return cls(DialogPhase.LOADING)

    @classmethod
    def error(cls, message: str) -> "DialogState":
        return cls(DialogPhase.ERROR, message=message)

    @classmethod
    def closed(cls, should_refresh: bool) -> "DialogState":
        return cls(DialogPhase.CLOSED, should_refresh=should_refresh)

    @property
    def is_loading(self) -> bool:
        return self.phase is DialogPhase.LOADING

    @property
    def is_closed(self) -> bool:
        return self.phase is DialogPhase.CLOSED


class DialogBusyError(RuntimeError):
    """Raised when a dialog is reopened while a submission is in flight."""


class DraftValidationError(ValueError):
    """Raised by a dialog when its draft cannot be submitted as-is."""


class MutationDialogController(Generic[TargetT, DraftT, PayloadT]):
    """Drive one confirm-or-cancel mutation cycle.

    The owner opens the dialog with a target (``None`` for create or bulk
    flows) and an optional reference collection, which is snapshotted at
    open time. Draft edits stay local until ``submit`` succeeds; the owner
    only hears back through ``on_close(should_refresh)``.

    Subclasses provide ``seed_draft``, ``empty_draft`` and ``build_payload``
    and may override ``validate_draft``, ``is_noop`` and ``send``.
    """

    failure_message_key = "common.errors.operation_failed"

    def __init__(
        self,
        submit_mutation: SubmitMutation[PayloadT] | None = None,
        *,
        on_close: Callable[[bool], None] | None = None,
        translate: Translator | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._submit_mutation = submit_mutation
        self._translate: Translator = translate or DEFAULT_CATALOG.translate
        self._logger = (logger or _module_logger).bind(dialog=type(self).__name__)
        self._state = DialogState.closed(False)
        self._open = False
        self._target: TargetT | None = None
        self._draft: DraftT | None = None
        self._reference: tuple[Any, ...] = ()
        self.state_changed: EventHook[DialogState] = EventHook()
        self.draft_changed: EventHook[DraftT] = EventHook()
        self.closed: EventHook[bool] = EventHook()
        if on_close is not None:
            self.closed.subscribe(on_close)

    # ----------------------------------------------------------------- State

    @property
    def state(self) -> DialogState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error_message(self) -> str | None:
        if self._state.phase is DialogPhase.ERROR:
            return self._state.message
        return None

    @property
    def target(self) -> TargetT | None:
        return self._target

    @property
    def has_target(self) -> bool:
        return self._target is not None

    @property
    def draft(self) -> DraftT | None:
        return self._draft

    @property
    def reference(self) -> tuple[Any, ...]:
        """Reference collection as captured when the dialog was opened."""
        return self._reference

    # ----------------------------------------------------------------- Lifecycle

    def open(
        self,
        target: TargetT | None = None,
        reference_collection: Iterable[Any] = (),
    ) -> None:
        if self._state.is_loading:
            raise DialogBusyError(
                f"{type(self).__name__} cannot be reopened while a submission is in flight"
            )
        self._target = target
        self._reference = tuple(
            self.snapshot_entity(entity) for entity in reference_collection
        )
        self._draft = self.empty_draft() if target is None else self.seed_draft(target)
        self._open = True
        self._set_state(DialogState.idle())
        self._logger.debug(
            "Dialog opened",
            has_target=target is not None,
            reference_size=len(self._reference),
        )

    def update_draft(self, mutation: DraftMutation[DraftT]) -> DraftT | None:
        """Apply a pure draft transformation and return the new draft."""

        if not self._open or self._state.is_loading:
            self._logger.debug(
                "Draft update ignored",
                is_open=self._open,
                phase=self._state.phase.value,
            )
            return self._draft
        self._draft = mutation(self._draft)  # type: ignore[arg-type]
        self.draft_changed.emit(self._draft)
        return self._draft

    async def submit(self) -> DialogState:
        if not self._open:
            self._logger.debug("Submit ignored; dialog is not open")
            return self._state
        if self._state.is_loading:
            self._logger.debug("Submit ignored; mutation already in flight")
            return self._state

        self._set_state(DialogState.loading())
        try:
            await self._run_submission()
        finally:
            if self._state.is_loading:
                # Cancelled mid-flight; leave the dialog open for a retry.
                self._set_state(DialogState.error(self._failure_message()))
        return self._state

    def cancel(self) -> bool:
        """Discard the draft and close without refreshing the owner."""

        if self._state.is_loading:
            self._logger.debug("Cancel ignored; mutation in flight")
            return False
        if not self._open:
            return False
        self._close(should_refresh=False)
        return True

    def dismiss_error(self) -> None:
        if self._state.phase is DialogPhase.ERROR:
            self._set_state(DialogState.idle())

    # ----------------------------------------------------------------- Hooks

    def seed_draft(self, target: TargetT) -> DraftT:
        raise NotImplementedError

    def empty_draft(self) -> DraftT:
        raise NotImplementedError

    def build_payload(self) -> PayloadT:
        raise NotImplementedError

    def snapshot_entity(self, entity: Any) -> Any:
        return entity

    def validate_draft(self) -> None:
        """Raise ``DraftValidationError`` when the draft cannot be submitted."""

    def is_noop(self, payload: PayloadT) -> bool:
        return False

    async def send(self, payload: PayloadT) -> MutationOutcome:
        if self._submit_mutation is None:
            raise NotImplementedError(f"{type(self).__name__} has no remote mutation")
        return await self._submit_mutation(payload)

    def translate(self, key: str, **params: object) -> str:
        return self._translate(key, **params)

    # ----------------------------------------------------------------- Internals

    async def _run_submission(self) -> None:
        try:
            self.validate_draft()
            payload = self.build_payload()
        except ValueError as exc:
            message = self._validation_message(exc)
            self._logger.info("Draft rejected before submit", reason=message)
            self._set_state(DialogState.error(message))
            return
        except Exception as exc:  # noqa: BLE001
            descriptor = describe_exception(exc)
            self._logger.exception(
                "Draft could not be prepared for submit",
                headline=descriptor.headline,
                detail=descriptor.detail,
            )
            self._set_state(DialogState.error(self._failure_message()))
            return

        if self.is_noop(payload):
            self._logger.debug("Submit skipped; draft has no changes")
            self._close(should_refresh=False)
            return

        try:
            outcome = await self.send(payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            descriptor = describe_exception(exc)
            self._logger.exception(
                "Dialog mutation failed",
                headline=descriptor.headline,
                detail=descriptor.detail,
                transient=descriptor.transient,
            )
            self._set_state(DialogState.error(self._failure_message()))
            return

        if not outcome.success:
            self._logger.warning("Dialog mutation rejected", reason=outcome.message)
            self._set_state(DialogState.error(outcome.message or self._failure_message()))
            return

        self._logger.info("Dialog mutation succeeded")
        self._close(should_refresh=True)

    def _close(self, *, should_refresh: bool) -> None:
        self._open = False
        self._draft = None
        self._set_state(DialogState.closed(should_refresh))
        self.closed.emit(should_refresh)

    def _set_state(self, state: DialogState) -> None:
        self._state = state
        self.state_changed.emit(state)

    def _failure_message(self) -> str:
        return self.translate(self.failure_message_key)

    def _validation_message(self, exc: Exception) -> str:
        if isinstance(exc, ValidationError):
            errors = exc.errors()
            if errors:
                first = errors[0]
                location = ".".join(str(part) for part in first.get("loc", ()))
                detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
            else:
                detail = str(exc)
            return self.translate("common.errors.validation_failed", detail=detail)
        return str(exc)


class EntityDialogController(MutationDialogController[TargetT, DraftT, PayloadT]):
    """Dialog whose payload is a serialization of a single-entity draft."""

    def build_payload(self) -> PayloadT:
        return self.serialize_draft(self._require_draft())

    def serialize_draft(self, draft: DraftT) -> PayloadT:
        return draft  # type: ignore[return-value]

    def require_target(self) -> TargetT:
        if self._target is None:
            raise DraftValidationError(self.translate("common.errors.no_target"))
        return self._target

    def _require_draft(self) -> DraftT:
        return self._draft  # type: ignore[return-value]


class CollectionDialogController(
    MutationDialogController[TargetT, tuple[EntityT, ...], CollectionDelta[EntityT]]
):
    """Dialog editing a working copy of a collection, submitted as a delta.

    The draft is seeded from the reference snapshot taken at ``open`` and
    the delta is always computed against that snapshot.
    """

    def __init__(
        self,
        submit_mutation: SubmitMutation[CollectionDelta[EntityT]] | None = None,
        *,
        engine: CollectionDiffEngine[EntityT] | None = None,
        **kwargs: Any,
    ) -> None:
        self._engine: CollectionDiffEngine[EntityT] = engine or CollectionDiffEngine()
        super().__init__(submit_mutation, **kwargs)

    def open(
        self,
        target: TargetT | None = None,
        reference_collection: Iterable[Any] = (),
    ) -> None:
        super().open(target, reference_collection)
        self._draft = tuple(self._reference)

    def seed_draft(self, target: TargetT) -> tuple[EntityT, ...]:
        return ()

    def empty_draft(self) -> tuple[EntityT, ...]:
        return ()

    def build_payload(self) -> CollectionDelta[EntityT]:
        return self._engine.diff(self._reference, self._draft or ())

    def is_noop(self, payload: CollectionDelta[EntityT]) -> bool:
        return payload.is_noop

    @property
    def has_changes(self) -> bool:
        if not self._open:
            return False
        try:
            return not self.build_payload().is_noop
        except CollectionValidationError:
            return True


__all__ = [
    "CollectionDialogController",
    "DialogBusyError",
    "DialogPhase",
    "DialogState",
    "DraftValidationError",
    "EntityDialogController",
    "MutationDialogController",
    "SubmitMutation",
]
