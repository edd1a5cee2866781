"""Presentation-agnostic dialog layer for the Modbus console."""

from .components import (
    CollectionDialogController,
    DialogBusyError,
    DialogPhase,
    DialogState,
    DraftValidationError,
    EntityDialogController,
    MutationDialogController,
    SelectionSet,
)
from .i18n import DEFAULT_CATALOG, MessageCatalog
from .modbus import (
    DeleteModbusControllerDialog,
    GatewayMappingsDialog,
    MappingOverlapError,
    ModbusControllerDialog,
    ModbusPageController,
)
from .users import (
    AssignRolesDialog,
    DeleteUserDialog,
    ResetPasswordDialog,
    ToggleUserStatusDialog,
    UserEditorDialog,
    UserManagementController,
)

__all__ = [
    "CollectionDialogController",
    "DialogBusyError",
    "DialogPhase",
    "DialogState",
    "DraftValidationError",
    "EntityDialogController",
    "MutationDialogController",
    "SelectionSet",
    "DEFAULT_CATALOG",
    "MessageCatalog",
    "DeleteModbusControllerDialog",
    "GatewayMappingsDialog",
    "MappingOverlapError",
    "ModbusControllerDialog",
    "ModbusPageController",
    "AssignRolesDialog",
    "DeleteUserDialog",
    "ResetPasswordDialog",
    "ToggleUserStatusDialog",
    "UserEditorDialog",
    "UserManagementController",
]
