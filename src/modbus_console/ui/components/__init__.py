"""Framework-free dialog building blocks shared by the console pages."""

from .dialog_controller import (
    CollectionDialogController,
    DialogBusyError,
    DialogPhase,
    DialogState,
    DraftValidationError,
    EntityDialogController,
    MutationDialogController,
    SubmitMutation,
)
from .drafts import SelectionSet, find_row, insert_row, remove_row, replace_row

__all__ = [
    "CollectionDialogController",
    "DialogBusyError",
    "DialogPhase",
    "DialogState",
    "DraftValidationError",
    "EntityDialogController",
    "MutationDialogController",
    "SubmitMutation",
    "SelectionSet",
    "find_row",
    "insert_row",
    "remove_row",
    "replace_row",
]
