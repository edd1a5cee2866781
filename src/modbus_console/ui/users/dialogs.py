from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from modbus_console.data import RoleInfo, UserDraft, UserInfo
from modbus_console.services import MutationOutcome, UserService
from modbus_console.ui.components import (
    DraftValidationError,
    EntityDialogController,
    SelectionSet,
)


MIN_PASSWORD_LENGTH = 6


@dataclass(slots=True, frozen=True)
class RoleAssignment:
    user_id: str
    roles: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class PasswordReset:
    user_id: str
    new_password: str


@dataclass(slots=True, frozen=True)
class StatusChange:
    user_id: str
    disable: bool


class _UserDialog(EntityDialogController[UserInfo, Any, Any]):
    def __init__(self, service: UserService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service


# ----------------------------------------------------------------- Roles


class AssignRolesDialog(_UserDialog):
    """Edit the role membership of one user.

    Open with the user as target and the available ``RoleInfo`` list as the
    reference collection. The selection starts from the user's current roles.
    """

    failure_message_key = "users.errors.assign_roles_failed"

    @property
    def available_roles(self) -> list[str]:
        return [
            role.name if isinstance(role, RoleInfo) else str(role)
            for role in self.reference
        ]

    @property
    def selection(self) -> SelectionSet:
        return self.draft if self.draft is not None else SelectionSet()

    def seed_draft(self, target: UserInfo) -> SelectionSet:
        return SelectionSet(target.roles)

    def empty_draft(self) -> SelectionSet:
        return SelectionSet()

    def toggle_role(self, role: str) -> SelectionSet:
        return self.update_draft(lambda selection: selection.toggle(role))

    def is_selected(self, role: str) -> bool:
        return role in self.selection

    def validate_draft(self) -> None:
        self.require_target()
        if not self.reference:
            raise DraftValidationError(self.translate("users.errors.no_roles_available"))

    def serialize_draft(self, draft: SelectionSet) -> RoleAssignment:
        return RoleAssignment(user_id=self.require_target().id, roles=tuple(draft))

    async def send(self, payload: RoleAssignment) -> MutationOutcome:
        return await self._service.update_roles(payload.user_id, payload.roles)


# ----------------------------------------------------------------- Editor


class UserEditorDialog(_UserDialog):
    """Create a user (no target) or edit the profile of an existing one."""

    @property
    def is_create(self) -> bool:
        return not self.has_target

    @property
    def failure_message_key(self) -> str:  # type: ignore[override]
        if self.is_create:
            return "users.errors.create_failed"
        return "users.errors.edit_failed"

    def seed_draft(self, target: UserInfo) -> UserDraft:
        return UserDraft.from_user(target)

    def empty_draft(self) -> UserDraft:
        return UserDraft.empty()

    def set_field(self, name: str, value: Any) -> UserDraft:
        if name not in UserDraft.model_fields:
            raise AttributeError(f"UserDraft has no field {name!r}")
        return self.update_draft(lambda draft: draft.model_copy(update={name: value}))

    def validate_draft(self) -> None:
        draft: UserDraft = self.draft
        if self.is_create and len(draft.password or "") < MIN_PASSWORD_LENGTH:
            raise DraftValidationError(
                self.translate(
                    "users.errors.password_too_short", minimum=MIN_PASSWORD_LENGTH
                )
            )

    def serialize_draft(self, draft: UserDraft) -> UserDraft:
        validated = draft.validated()
        if not self.is_create:
            validated = validated.model_copy(update={"password": None})
        return validated

    async def send(self, payload: UserDraft) -> MutationOutcome:
        if self.is_create:
            return await self._service.register_user(payload)
        return await self._service.edit_user(self.require_target().id, payload)


# ----------------------------------------------------------------- Account actions


class DeleteUserDialog(_UserDialog):
    failure_message_key = "users.errors.delete_failed"

    def seed_draft(self, target: UserInfo) -> None:
        return None

    def empty_draft(self) -> None:
        return None

    def validate_draft(self) -> None:
        self.require_target()

    def build_payload(self) -> str:
        return self.require_target().id

    async def send(self, payload: str) -> MutationOutcome:
        return await self._service.delete_user(payload)


class ResetPasswordDialog(_UserDialog):
    """Set a new password for a user without knowing the old one."""

    failure_message_key = "users.errors.reset_password_failed"

    def seed_draft(self, target: UserInfo) -> str:
        return ""

    def empty_draft(self) -> str:
        return ""

    def set_password(self, value: str) -> str:
        return self.update_draft(lambda _current: value)

    def validate_draft(self) -> None:
        self.require_target()
        if len(self.draft or "") < MIN_PASSWORD_LENGTH:
            raise DraftValidationError(
                self.translate(
                    "users.errors.password_too_short", minimum=MIN_PASSWORD_LENGTH
                )
            )

    def serialize_draft(self, draft: str) -> PasswordReset:
        return PasswordReset(user_id=self.require_target().id, new_password=draft)

    async def send(self, payload: PasswordReset) -> MutationOutcome:
        return await self._service.set_password(payload.user_id, payload.new_password)


class ToggleUserStatusDialog(_UserDialog):
    """Confirm enabling a disabled user or disabling an active one."""

    failure_message_key = "users.errors.toggle_status_failed"

    @property
    def will_disable(self) -> bool:
        target = self.target
        return target is not None and not target.is_disabled

    def seed_draft(self, target: UserInfo) -> None:
        return None

    def empty_draft(self) -> None:
        return None

    def validate_draft(self) -> None:
        self.require_target()

    def build_payload(self) -> StatusChange:
        return StatusChange(user_id=self.require_target().id, disable=self.will_disable)

    async def send(self, payload: StatusChange) -> MutationOutcome:
        return await self._service.toggle_status(payload.user_id, disable=payload.disable)


__all__ = [
    "AssignRolesDialog",
    "DeleteUserDialog",
    "MIN_PASSWORD_LENGTH",
    "PasswordReset",
    "ResetPasswordDialog",
    "RoleAssignment",
    "StatusChange",
    "ToggleUserStatusDialog",
    "UserEditorDialog",
]
