"""User and role administration dialogs."""

from .controller import UserManagementController
from .dialogs import (
    AssignRolesDialog,
    DeleteUserDialog,
    PasswordReset,
    ResetPasswordDialog,
    RoleAssignment,
    StatusChange,
    ToggleUserStatusDialog,
    UserEditorDialog,
)

__all__ = [
    "AssignRolesDialog",
    "DeleteUserDialog",
    "PasswordReset",
    "ResetPasswordDialog",
    "RoleAssignment",
    "StatusChange",
    "ToggleUserStatusDialog",
    "UserEditorDialog",
    "UserManagementController",
]
