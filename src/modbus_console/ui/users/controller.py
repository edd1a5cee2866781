from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable

from modbus_console.data import RoleInfo, UserInfo
from modbus_console.services import (
    ServiceErrorEvent,
    ServiceRegistry,
    UserMutationEvent,
    UserService,
)
from modbus_console.ui.i18n import Translator
from modbus_console.ui.users.dialogs import (
    AssignRolesDialog,
    DeleteUserDialog,
    ResetPasswordDialog,
    ToggleUserStatusDialog,
    UserEditorDialog,
)
from modbus_console.utils import get_logger
from modbus_console.utils.errors import describe_exception


logger = get_logger(__name__)


class UserManagementController:
    """Bridge between the user management page and the service layer.

    Owns the cached user and role lists and hands out dialogs whose close
    notifications trigger a reload when the server state changed.
    """

    def __init__(
        self,
        services: ServiceRegistry,
        *,
        translate: Translator | None = None,
    ) -> None:
        self._services = services
        self._service: UserService | None = services.users
        self._translate = translate
        self._subscriptions: list[Callable[[], None]] = []
        self._users: list[UserInfo] = []
        self._roles: list[RoleInfo] = []
        self._refresh_task: asyncio.Task[list[UserInfo]] | None = None
        self._stale = True

    def register_callbacks(
        self,
        *,
        refreshed: Callable[[Iterable[UserInfo]], None] | None = None,
        mutated: Callable[[UserMutationEvent], None] | None = None,
        error: Callable[[ServiceErrorEvent], None] | None = None,
    ) -> None:
        if self._service is None:
            return
        if refreshed is not None:
            self._subscriptions.append(
                self._service.refreshed.subscribe(lambda event: refreshed(event.items)),
            )
        if mutated is not None:
            self._subscriptions.append(self._service.mutated.subscribe(mutated))
        if error is not None:
            self._subscriptions.append(self._service.errors.subscribe(error))

    def dispose(self) -> None:
        while self._subscriptions:
            unsubscribe = self._subscriptions.pop()
            unsubscribe()

    # ----------------------------------------------------------------- Queries

    @property
    def users(self) -> list[UserInfo]:
        return list(self._users)

    @property
    def roles(self) -> list[RoleInfo]:
        return list(self._roles)

    @property
    def is_stale(self) -> bool:
        return self._stale

    def find_user(self, user_id: str) -> UserInfo | None:
        return next((user for user in self._users if user.id == user_id), None)

    # ----------------------------------------------------------------- Actions

    async def refresh(self) -> list[UserInfo]:
        service = self._require_service()
        users = await service.list_users()
        roles = await service.list_roles()
        self._users = users
        self._roles = roles
        self._stale = False
        logger.debug("User page refreshed", users=len(users), roles=len(roles))
        return users

    async def wait_for_refresh(self) -> None:
        """Await a reload scheduled by a dialog that closed with changes.

        A failed reload is logged and leaves the page stale.
        """

        task = self._refresh_task
        if task is not None:
            await asyncio.wait({task})

    # ----------------------------------------------------------------- Dialogs

    def assign_roles(self, user: UserInfo) -> AssignRolesDialog:
        dialog = AssignRolesDialog(self._require_service(), **self._dialog_options())
        dialog.open(user, self._roles)
        return dialog

    def create_user(self) -> UserEditorDialog:
        dialog = UserEditorDialog(self._require_service(), **self._dialog_options())
        dialog.open(None)
        return dialog

    def edit_user(self, user: UserInfo) -> UserEditorDialog:
        dialog = UserEditorDialog(self._require_service(), **self._dialog_options())
        dialog.open(user)
        return dialog

    def delete_user(self, user: UserInfo) -> DeleteUserDialog:
        dialog = DeleteUserDialog(self._require_service(), **self._dialog_options())
        dialog.open(user)
        return dialog

    def reset_password(self, user: UserInfo) -> ResetPasswordDialog:
        dialog = ResetPasswordDialog(self._require_service(), **self._dialog_options())
        dialog.open(user)
        return dialog

    def toggle_status(self, user: UserInfo) -> ToggleUserStatusDialog:
        dialog = ToggleUserStatusDialog(self._require_service(), **self._dialog_options())
        dialog.open(user)
        return dialog

    # ----------------------------------------------------------------- Internals

    def _dialog_options(self) -> dict[str, object]:
        return {"on_close": self._on_dialog_closed, "translate": self._translate}

    def _on_dialog_closed(self, should_refresh: bool) -> None:
        if not should_refresh:
            return
        self._stale = True
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; user list marked stale")
            return
        self._refresh_task = loop.create_task(self.refresh())
        self._refresh_task.add_done_callback(_log_failed_refresh)

    def _require_service(self) -> UserService:
        if self._service is None:
            raise RuntimeError("User service not configured")
        return self._service


def _log_failed_refresh(task: asyncio.Task[list[UserInfo]]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        return
    descriptor = describe_exception(exc)
    logger.error(
        "User page reload failed",
        headline=descriptor.headline,
        detail=descriptor.detail,
        exc_info=exc,
    )


__all__ = ["UserManagementController"]
