from __future__ import annotations

from typing import Iterable

from modbus_console.config.settings import Settings
from modbus_console.data import (
    DataRepresentation,
    GatewayMapping,
    GatewayMappingRow,
    ModbusController,
    ModbusGateway,
    RegisterType,
    RoleInfo,
    UserInfo,
)


def make_settings(**overrides: object) -> Settings:
    """Build Settings pointing at a local test server."""

    settings = Settings(api_base_url="https://console.test")
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings


def make_user(
    *,
    user_id: str = "u1",
    user_name: str = "operator",
    roles: Iterable[str] = (),
    is_disabled: bool = False,
    **overrides: object,
) -> UserInfo:
    """Create a UserInfo using the API's camelCase aliases."""

    payload: dict[str, object] = {
        "id": user_id,
        "userName": user_name,
        "firstName": "Ada",
        "lastName": "Lovelace",
        "roles": list(roles),
        "isDisabled": is_disabled,
    }
    payload.update(overrides)
    return UserInfo.from_api(payload)


def make_roles(*names: str) -> list[RoleInfo]:
    return [
        RoleInfo.from_api({"id": f"role-{name.lower()}", "name": name})
        for name in names
    ]


def make_controller(
    *,
    controller_id: str = "c1",
    name: str = "Boiler PLC",
    ip_address: str = "192.168.1.20",
    **overrides: object,
) -> ModbusController:
    payload: dict[str, object] = {
        "id": controller_id,
        "name": name,
        "ipAddress": ip_address,
        "port": 502,
        "startAddress": 0,
        "dataLength": 10,
        "dataType": 3,
        "unitIdentifier": 1,
    }
    payload.update(overrides)
    return ModbusController.from_api(payload)


def make_gateway(*, gateway_id: str = "g1", name: str = "SCADA link") -> ModbusGateway:
    return ModbusGateway.from_api(
        {"id": gateway_id, "name": name, "listenIP": "0.0.0.0", "port": 5020}
    )


def make_mapping(
    *,
    mapping_id: str,
    address: int,
    item_id: str = "item-1",
    register_type: RegisterType = RegisterType.HOLDING_REGISTER,
    representation: DataRepresentation = DataRepresentation.FLOAT32,
    **overrides: object,
) -> GatewayMapping:
    payload: dict[str, object] = {
        "id": mapping_id,
        "modbusAddress": address,
        "registerType": int(register_type),
        "itemId": item_id,
        "dataRepresentation": int(representation),
    }
    payload.update(overrides)
    return GatewayMapping.from_api(payload)


def make_mapping_row(
    *,
    mapping_id: str,
    address: int,
    gateway_id: str = "g1",
    item_id: str = "item-1",
    representation: DataRepresentation = DataRepresentation.FLOAT32,
    **overrides: object,
) -> GatewayMappingRow:
    payload: dict[str, object] = {
        "id": mapping_id,
        "gatewayId": gateway_id,
        "modbusAddress": address,
        "registerType": int(RegisterType.HOLDING_REGISTER),
        "itemId": item_id,
        "itemName": f"Item {item_id}",
        "dataRepresentation": int(representation),
        "isEditable": True,
    }
    payload.update(overrides)
    return GatewayMappingRow.from_api(payload)
