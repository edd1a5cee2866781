from __future__ import annotations

import asyncio
from typing import Any

import pytest

from modbus_console.api import ApiError, ApiErrorCategory
from modbus_console.services import CollectionDelta, MutationOutcome
from modbus_console.ui.components import (
    CollectionDialogController,
    DialogBusyError,
    DialogPhase,
    DialogState,
    DraftValidationError,
    EntityDialogController,
)
from modbus_console.ui.i18n import MessageCatalog

from tests.stubs import RecordingCallback


Row = dict[str, Any]


class _RenameDialog(EntityDialogController[Row, Row, Row]):
    failure_message_key = "common.errors.operation_failed"

    def seed_draft(self, target: Row) -> Row:
        return dict(target)

    def empty_draft(self) -> Row:
        return {"id": "", "name": ""}

    def validate_draft(self) -> None:
        if not self.draft["name"]:
            raise DraftValidationError("Name is required")


class _RowsDialog(CollectionDialogController[None, Row]):
    pass


class _RecordingMutation:
    def __init__(self, *results: MutationOutcome | BaseException) -> None:
        self.payloads: list[Any] = []
        self._results = list(results)
        self.gate: asyncio.Event | None = None

    async def __call__(self, payload: Any) -> MutationOutcome:
        self.payloads.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        if not self._results:
            return MutationOutcome.ok()
        result = self._results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


def _rename(name: str):
    return lambda draft: {**draft, "name": name}


# ----------------------------------------------------------------- Lifecycle


def test_new_controller_is_closed_until_opened() -> None:
    dialog = _RenameDialog(_RecordingMutation())

    assert dialog.state == DialogState.closed(False)
    assert not dialog.is_open

    dialog.open({"id": "1", "name": "pump"})

    assert dialog.state.phase is DialogPhase.IDLE
    assert dialog.draft == {"id": "1", "name": "pump"}
    assert dialog.has_target


def test_absent_target_seeds_empty_draft() -> None:
    dialog = _RenameDialog(_RecordingMutation())

    dialog.open(None)

    assert dialog.draft == {"id": "", "name": ""}
    assert not dialog.has_target


def test_update_draft_never_touches_target() -> None:
    target = {"id": "1", "name": "pump"}
    dialog = _RenameDialog(_RecordingMutation())
    dialog.open(target)

    new_draft = dialog.update_draft(_rename("valve"))

    assert new_draft == {"id": "1", "name": "valve"}
    assert target == {"id": "1", "name": "pump"}


def test_update_draft_is_ignored_when_closed() -> None:
    dialog = _RenameDialog(_RecordingMutation())

    assert dialog.update_draft(_rename("valve")) is None


def test_cancel_closes_without_refresh() -> None:
    mutation = _RecordingMutation()
    callback = RecordingCallback()
    dialog = _RenameDialog(mutation, on_close=callback)
    dialog.open({"id": "1", "name": "pump"})
    dialog.update_draft(_rename("valve"))

    assert dialog.cancel() is True

    assert callback.calls == [False]
    assert dialog.state == DialogState.closed(False)
    assert dialog.draft is None
    assert mutation.payloads == []


def test_reopen_resets_draft_and_error() -> None:
    dialog = _RenameDialog(_RecordingMutation())
    dialog.open({"id": "1", "name": "pump"})
    dialog.update_draft(_rename("valve"))
    dialog.cancel()

    dialog.open({"id": "1", "name": "pump"})

    assert dialog.draft == {"id": "1", "name": "pump"}
    assert dialog.error_message is None


# ----------------------------------------------------------------- Submit


@pytest.mark.asyncio
async def test_successful_submit_closes_with_refresh() -> None:
    mutation = _RecordingMutation(MutationOutcome.ok())
    callback = RecordingCallback()
    states: list[DialogPhase] = []
    dialog = _RenameDialog(mutation, on_close=callback)
    dialog.state_changed.subscribe(lambda state: states.append(state.phase))
    dialog.open({"id": "1", "name": "pump"})
    dialog.update_draft(_rename("valve"))

    state = await dialog.submit()

    assert state == DialogState.closed(True)
    assert mutation.payloads == [{"id": "1", "name": "valve"}]
    assert callback.calls == [True]
    assert states == [DialogPhase.IDLE, DialogPhase.LOADING, DialogPhase.CLOSED]


@pytest.mark.asyncio
async def test_business_failure_shows_server_message_and_keeps_draft() -> None:
    mutation = _RecordingMutation(MutationOutcome.failed("name already exists"))
    callback = RecordingCallback()
    dialog = _RenameDialog(mutation, on_close=callback)
    dialog.open({"id": "1", "name": "pump"})
    dialog.update_draft(_rename("valve"))

    state = await dialog.submit()

    assert state == DialogState.error("name already exists")
    assert dialog.is_open
    assert dialog.draft == {"id": "1", "name": "valve"}
    assert callback.calls == []


@pytest.mark.asyncio
async def test_business_failure_without_message_uses_fallback() -> None:
    catalog = MessageCatalog(messages={"common.errors.operation_failed": "Nope"})
    dialog = _RenameDialog(
        _RecordingMutation(MutationOutcome.failed()), translate=catalog.translate
    )
    dialog.open({"id": "1", "name": "pump"})

    state = await dialog.submit()

    assert state.message == "Nope"


@pytest.mark.asyncio
async def test_transport_fault_shows_generic_message() -> None:
    fault = ApiError("socket closed", category=ApiErrorCategory.NETWORK)
    callback = RecordingCallback()
    dialog = _RenameDialog(_RecordingMutation(fault), on_close=callback)
    dialog.open({"id": "1", "name": "pump"})

    state = await dialog.submit()

    assert state.phase is DialogPhase.ERROR
    assert state.message == "The operation failed. Please try again."
    assert "socket" not in state.message
    assert not dialog.is_loading
    assert callback.calls == []


@pytest.mark.asyncio
async def test_retry_after_failure_succeeds() -> None:
    mutation = _RecordingMutation(RuntimeError("boom"), MutationOutcome.ok())
    callback = RecordingCallback()
    dialog = _RenameDialog(mutation, on_close=callback)
    dialog.open({"id": "1", "name": "pump"})

    first = await dialog.submit()
    second = await dialog.submit()

    assert first.phase is DialogPhase.ERROR
    assert second == DialogState.closed(True)
    assert len(mutation.payloads) == 2
    assert callback.calls == [True]


@pytest.mark.asyncio
async def test_validation_fault_skips_remote_call() -> None:
    mutation = _RecordingMutation()
    dialog = _RenameDialog(mutation)
    dialog.open(None)

    state = await dialog.submit()

    assert state == DialogState.error("Name is required")
    assert mutation.payloads == []


@pytest.mark.asyncio
async def test_unexpected_draft_fault_stays_inside_dialog() -> None:
    mutation = _RecordingMutation()
    callback = RecordingCallback()
    dialog = _RenameDialog(mutation, on_close=callback)
    dialog.open({"id": "1"})

    state = await dialog.submit()

    assert state == DialogState.error("The operation failed. Please try again.")
    assert dialog.is_open
    assert mutation.payloads == []
    assert callback.calls == []


@pytest.mark.asyncio
async def test_dismiss_error_returns_to_idle() -> None:
    dialog = _RenameDialog(_RecordingMutation(MutationOutcome.failed("no")))
    dialog.open({"id": "1", "name": "pump"})
    await dialog.submit()

    dialog.dismiss_error()

    assert dialog.state == DialogState.idle()


@pytest.mark.asyncio
async def test_submit_when_closed_is_ignored() -> None:
    mutation = _RecordingMutation()
    dialog = _RenameDialog(mutation)

    state = await dialog.submit()

    assert state.is_closed
    assert mutation.payloads == []


# ----------------------------------------------------------------- In flight


@pytest.mark.asyncio
async def test_second_submit_while_loading_is_ignored() -> None:
    mutation = _RecordingMutation(MutationOutcome.ok())
    mutation.gate = asyncio.Event()
    callback = RecordingCallback()
    dialog = _RenameDialog(mutation, on_close=callback)
    dialog.open({"id": "1", "name": "pump"})

    first = asyncio.create_task(dialog.submit())
    await asyncio.sleep(0)
    assert dialog.is_loading

    second = await dialog.submit()
    assert second.is_loading

    mutation.gate.set()
    await first

    assert len(mutation.payloads) == 1
    assert callback.calls == [True]
    assert not dialog.is_loading


@pytest.mark.asyncio
async def test_cancel_open_and_edit_are_refused_while_loading() -> None:
    mutation = _RecordingMutation(MutationOutcome.ok())
    mutation.gate = asyncio.Event()
    callback = RecordingCallback()
    dialog = _RenameDialog(mutation, on_close=callback)
    dialog.open({"id": "1", "name": "pump"})

    task = asyncio.create_task(dialog.submit())
    await asyncio.sleep(0)

    assert dialog.cancel() is False
    assert dialog.update_draft(_rename("valve")) == {"id": "1", "name": "pump"}
    with pytest.raises(DialogBusyError):
        dialog.open({"id": "2", "name": "other"})

    mutation.gate.set()
    await task
    assert callback.calls == [True]


@pytest.mark.asyncio
async def test_cancelled_submission_clears_loading() -> None:
    mutation = _RecordingMutation()
    mutation.gate = asyncio.Event()
    dialog = _RenameDialog(mutation)
    dialog.open({"id": "1", "name": "pump"})

    task = asyncio.create_task(dialog.submit())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not dialog.is_loading
    assert dialog.state.phase is DialogPhase.ERROR
    assert dialog.is_open


# ----------------------------------------------------------------- Collections


@pytest.mark.asyncio
async def test_collection_dialog_submits_delta_against_snapshot() -> None:
    mutation = _RecordingMutation()
    dialog = _RowsDialog(mutation)
    reference = [{"id": "1", "name": "a"}, {"id": "2", "name": "b"}]
    dialog.open(None, reference)
    reference.append({"id": "3", "name": "late"})

    dialog.update_draft(
        lambda rows: (rows[0], {"id": "2", "name": "B"}, {"id": "4", "name": "d"})
    )
    state = await dialog.submit()

    assert state == DialogState.closed(True)
    (delta,) = mutation.payloads
    assert delta == CollectionDelta(
        added=[{"id": "4", "name": "d"}],
        changed=[{"id": "2", "name": "B"}],
        removed=[],
    )


@pytest.mark.asyncio
async def test_collection_dialog_noop_closes_without_call() -> None:
    mutation = _RecordingMutation()
    callback = RecordingCallback()
    dialog = _RowsDialog(mutation, on_close=callback)
    dialog.open(None, [{"id": "1", "name": "a"}])

    assert not dialog.has_changes
    state = await dialog.submit()

    assert state == DialogState.closed(False)
    assert callback.calls == [False]
    assert mutation.payloads == []


@pytest.mark.asyncio
async def test_collection_dialog_duplicate_ids_surface_as_error() -> None:
    mutation = _RecordingMutation()
    dialog = _RowsDialog(mutation)
    dialog.open(None, [{"id": "1", "name": "a"}])
    dialog.update_draft(lambda rows: (*rows, {"id": "1", "name": "copy"}))

    state = await dialog.submit()

    assert state.phase is DialogPhase.ERROR
    assert "'1'" in state.message
    assert mutation.payloads == []
    assert dialog.has_changes
