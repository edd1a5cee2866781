from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Sequence


ApiMethod = Literal["GET", "POST"]

AUTH_PREFIX = "/api/Auth"
MONITORING_PREFIX = "/api/Monitoring"


@dataclass(slots=True)
class ApiRequest:
    """Structured representation of a console API call."""

    method: ApiMethod
    path: str
    body: Any | None = None
    params: dict[str, Any] | None = None


# ----------------------------------------------------------------- Users


def list_users_request(
    *,
    search_term: str | None = None,
    role: str | None = None,
    include_disabled: bool = True,
    page: int = 1,
    page_size: int = 50,
) -> ApiRequest:
    body: dict[str, Any] = {
        "includeDisabled": include_disabled,
        "page": page,
        "pageSize": page_size,
    }
    if search_term:
        body["searchTerm"] = search_term
    if role:
        body["role"] = role
    return ApiRequest(method="POST", path=f"{AUTH_PREFIX}/users", body=body)


def list_roles_request() -> ApiRequest:
    return ApiRequest(method="GET", path=f"{AUTH_PREFIX}/roles")


def register_user_request(payload: dict[str, Any]) -> ApiRequest:
    return ApiRequest(method="POST", path=f"{AUTH_PREFIX}/register", body=payload)


def edit_user_request(user_id: str, payload: dict[str, Any]) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{AUTH_PREFIX}/edit-user",
        body={"userId": user_id, **payload},
    )


def delete_user_request(user_id: str) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{AUTH_PREFIX}/delete-user",
        body={"userId": user_id},
    )


def update_user_roles_request(user_id: str, roles: Sequence[str]) -> ApiRequest:
    """Replace the full role list of a user."""

    return ApiRequest(
        method="POST",
        path=f"{AUTH_PREFIX}/update-user-roles",
        body={"userId": user_id, "roles": list(roles)},
    )


def set_user_password_request(user_id: str, new_password: str) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{AUTH_PREFIX}/set-user-password",
        body={"userId": user_id, "newPassword": new_password},
    )


def toggle_user_status_request(user_id: str, *, disable: bool) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{AUTH_PREFIX}/toggle-user-status",
        body={"userId": user_id, "disable": disable},
    )


# ----------------------------------------------------------------- Modbus


def list_modbus_controllers_request() -> ApiRequest:
    return ApiRequest(method="POST", path=f"{MONITORING_PREFIX}/ModbusControllers")


def add_modbus_controller_request(payload: dict[str, Any]) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{MONITORING_PREFIX}/AddModbusController",
        body=payload,
    )


def edit_modbus_controller_request(payload: dict[str, Any]) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{MONITORING_PREFIX}/EditModbusController",
        body=payload,
    )


def delete_modbus_controller_request(controller_id: str) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{MONITORING_PREFIX}/DeleteModbusController",
        body={"id": controller_id},
    )


def list_modbus_gateways_request() -> ApiRequest:
    return ApiRequest(method="POST", path=f"{MONITORING_PREFIX}/GetModbusGateways", body={})


def list_gateway_mappings_request(gateway_id: str) -> ApiRequest:
    return ApiRequest(
        method="POST",
        path=f"{MONITORING_PREFIX}/GetModbusGatewayMappings",
        body={"gatewayId": gateway_id},
    )


def batch_edit_gateway_mappings_request(
    gateway_id: str,
    *,
    added: Sequence[dict[str, Any]],
    updated: Sequence[dict[str, Any]],
    removed_ids: Sequence[str],
) -> ApiRequest:
    """Submit add/update/remove changes for one gateway as a single transaction."""

    return ApiRequest(
        method="POST",
        path=f"{MONITORING_PREFIX}/BatchEditModbusGatewayMappings",
        body={
            "gatewayId": gateway_id,
            "added": list(added),
            "updated": list(updated),
            "removedIds": list(removed_ids),
        },
    )


__all__ = [
    "ApiMethod",
    "ApiRequest",
    "list_users_request",
    "list_roles_request",
    "register_user_request",
    "edit_user_request",
    "delete_user_request",
    "update_user_roles_request",
    "set_user_password_request",
    "toggle_user_status_request",
    "list_modbus_controllers_request",
    "add_modbus_controller_request",
    "edit_modbus_controller_request",
    "delete_modbus_controller_request",
    "list_modbus_gateways_request",
    "list_gateway_mappings_request",
    "batch_edit_gateway_mappings_request",
]
