from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from modbus_console.api import ApiRequest, ConsoleApiClient
from modbus_console.api.requests import (
    delete_user_request,
    edit_user_request,
    list_roles_request,
    list_users_request,
    register_user_request,
    set_user_password_request,
    toggle_user_status_request,
    update_user_roles_request,
)
from modbus_console.data import RoleInfo, UserDraft, UserInfo
from modbus_console.services.base import (
    EventHook,
    MutationOutcome,
    MutationStatus,
    RefreshEvent,
    ServiceErrorEvent,
    ensure_query_succeeded,
    run_optimistic_mutation,
)
from modbus_console.utils import get_logger


logger = get_logger(__name__)


@dataclass(slots=True)
class UserMutationEvent:
    action: str
    user_id: str | None
    status: MutationStatus
    error: Exception | None = None


class UserService:
    """User and role administration against the console API."""

    def __init__(self, client: ConsoleApiClient) -> None:
        self._client = client
        self.refreshed: EventHook[RefreshEvent[list[UserInfo]]] = EventHook()
        self.mutated: EventHook[UserMutationEvent] = EventHook()
        self.errors: EventHook[ServiceErrorEvent] = EventHook()

    # ----------------------------------------------------------------- Queries

    async def list_users(
        self,
        *,
        search_term: str | None = None,
        role: str | None = None,
        include_disabled: bool = True,
        page: int = 1,
        page_size: int = 50,
    ) -> list[UserInfo]:
        body = await self._client.execute(
            list_users_request(
                search_term=search_term,
                role=role,
                include_disabled=include_disabled,
                page=page,
                page_size=page_size,
            )
        )
        ensure_query_succeeded(body, "Failed to load users")
        users = [UserInfo.from_api(item) for item in body.get("users") or []]
        logger.debug("Users fetched", count=len(users), page=page)
        self.refreshed.emit(RefreshEvent(items=users))
        return users

    async def list_roles(self) -> list[RoleInfo]:
        body = await self._client.execute(list_roles_request())
        ensure_query_succeeded(body, "Failed to load roles")
        return [RoleInfo.from_api(item) for item in body.get("roles") or []]

    # ----------------------------------------------------------------- Mutations

    async def register_user(self, draft: UserDraft) -> MutationOutcome:
        request = register_user_request(draft.to_register_payload())
        return await self._mutate("register", None, request)

    async def edit_user(self, user_id: str, draft: UserDraft) -> MutationOutcome:
        request = edit_user_request(user_id, draft.to_edit_payload())
        return await self._mutate("edit", user_id, request)

    async def delete_user(self, user_id: str) -> MutationOutcome:
        return await self._mutate("delete", user_id, delete_user_request(user_id))

    async def update_roles(self, user_id: str, roles: Sequence[str]) -> MutationOutcome:
        request = update_user_roles_request(user_id, roles)
        return await self._mutate("update_roles", user_id, request)

    async def set_password(self, user_id: str, new_password: str) -> MutationOutcome:
        request = set_user_password_request(user_id, new_password)
        return await self._mutate("set_password", user_id, request)

    async def toggle_status(self, user_id: str, *, disable: bool) -> MutationOutcome:
        request = toggle_user_status_request(user_id, disable=disable)
        return await self._mutate("toggle_status", user_id, request)

    async def _mutate(
        self,
        action: str,
        user_id: str | None,
        request: ApiRequest,
    ) -> MutationOutcome:
        def event_builder(
            status: MutationStatus, error: Exception | None = None
        ) -> UserMutationEvent:
            return UserMutationEvent(
                action=action,
                user_id=user_id,
                status=status,
                error=error,
            )

        async def operation() -> MutationOutcome:
            body = await self._client.execute(request)
            return MutationOutcome.from_response(body)

        try:
            outcome = await run_optimistic_mutation(
                emitter=self.mutated,
                event_builder=event_builder,
                operation=operation,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("User mutation failed", action=action, user_id=user_id)
            self.errors.emit(ServiceErrorEvent(operation=f"users.{action}", error=exc))
            raise
        if outcome.success:
            logger.info("User mutation applied", action=action, user_id=user_id)
        else:
            logger.warning(
                "User mutation rejected",
                action=action,
                user_id=user_id,
                reason=outcome.message,
            )
        return outcome


__all__ = ["UserService", "UserMutationEvent"]
