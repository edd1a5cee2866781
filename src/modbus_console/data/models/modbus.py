from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from typing import Any, Iterable

from pydantic import Field, model_validator

from .common import ConsoleBaseModel, ConsoleResource


class RegisterType(IntEnum):
    COIL = 1
    DISCRETE_INPUT = 2
    HOLDING_REGISTER = 3
    INPUT_REGISTER = 4

    @property
    def label(self) -> str:
        return _REGISTER_TYPE_LABELS[self]


_REGISTER_TYPE_LABELS = {
    RegisterType.COIL: "Coils",
    RegisterType.DISCRETE_INPUT: "Discrete Inputs",
    RegisterType.HOLDING_REGISTER: "Holding Registers",
    RegisterType.INPUT_REGISTER: "Input Registers",
}


class DataRepresentation(IntEnum):
    INT16 = 1
    FLOAT32 = 2
    SCALED_INTEGER = 3

    @property
    def register_count(self) -> int:
        return 2 if self is DataRepresentation.FLOAT32 else 1


class Endianness(IntEnum):
    """Word/byte order for multi-register values.

    - BIG_ENDIAN: AB CD
    - LITTLE_ENDIAN: DC BA
    - MID_BIG_ENDIAN: CD AB (word swap)
    - MID_LITTLE_ENDIAN: BA DC (byte swap)
    """

    NONE = 0
    BIG_ENDIAN = 1
    LITTLE_ENDIAN = 2
    MID_BIG_ENDIAN = 3
    MID_LITTLE_ENDIAN = 4


class ModbusDataType(IntEnum):
    BOOLEAN = 1
    INT = 2
    FLOAT = 3


class ConnectionType(IntEnum):
    TCP = 1
    TCP_OVER_RTU = 2


class ModbusProtocol(IntEnum):
    NONE = 0
    ASCII = 1
    RTU = 2


class AddressBase(IntEnum):
    BASE0 = 0
    BASE1 = 1
    BASE40001 = 2
    BASE40000 = 3


class ModbusController(ConsoleResource):
    """Polling configuration for one Modbus TCP slave device."""

    id: str = Field(default="", alias="id")
    name: str = Field(default="", max_length=100)
    ip_address: str = Field(default="", alias="ipAddress")
    port: int = Field(default=502, ge=1, le=65535)
    start_address: int = Field(default=0, alias="startAddress", ge=0)
    data_length: int = Field(default=1, alias="dataLength", ge=1)
    data_type: ModbusDataType = Field(default=ModbusDataType.FLOAT, alias="dataType")
    endianness: Endianness | None = None
    connection_type: ConnectionType | None = Field(default=None, alias="connectionType")
    modbus_type: ModbusProtocol | None = Field(default=None, alias="modbusType")
    unit_identifier: int | None = Field(
        default=None, alias="unitIdentifier", ge=0, le=247
    )
    address_base: AddressBase | None = Field(default=None, alias="addressBase")
    is_disabled: bool = Field(default=False, alias="isDisabled")

    def validated(self) -> "ModbusController":
        """Return a validated copy, raising ``ValidationError`` on bad input."""

        return type(self).model_validate(self.model_dump())

    def to_add_payload(self) -> dict[str, Any]:
        payload = self.validated().to_api()
        payload.pop("id", None)
        return payload

    def to_edit_payload(self) -> dict[str, Any]:
        return self.validated().to_api()


class ModbusGateway(ConsoleResource):
    """A Modbus TCP slave endpoint exposing monitoring items as registers."""

    name: str = ""
    listen_ip: str = Field(default="0.0.0.0", alias="listenIP")
    port: int = 502
    unit_id: int = Field(default=1, alias="unitId")
    is_enabled: bool = Field(default=True, alias="isEnabled")
    connected_clients: int = Field(default=0, alias="connectedClients")
    last_read_time: datetime | None = Field(default=None, alias="lastReadTime")
    last_write_time: datetime | None = Field(default=None, alias="lastWriteTime")
    mapping_count: int = Field(default=0, alias="mappingCount")


_SCALE_KEYS = frozenset({"scale_min", "scaleMin", "scale_max", "scaleMax"})


class GatewayMapping(ConsoleResource):
    """Maps a gateway register range to a monitoring item."""

    modbus_address: int = Field(alias="modbusAddress", ge=0)
    register_type: RegisterType = Field(
        default=RegisterType.HOLDING_REGISTER, alias="registerType"
    )
    item_id: str = Field(alias="itemId")
    data_representation: DataRepresentation = Field(
        default=DataRepresentation.FLOAT32, alias="dataRepresentation"
    )
    endianness: Endianness = Endianness.BIG_ENDIAN
    scale_min: float | None = Field(default=None, alias="scaleMin")
    scale_max: float | None = Field(default=None, alias="scaleMax")

    @model_validator(mode="before")
    @classmethod
    def _clear_unused_scale(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        representation = data.get(
            "data_representation",
            data.get("dataRepresentation", DataRepresentation.FLOAT32),
        )
        if int(representation) == DataRepresentation.SCALED_INTEGER:
            return data
        return {key: value for key, value in data.items() if key not in _SCALE_KEYS}

    @property
    def register_count(self) -> int:
        return self.data_representation.register_count

    @property
    def end_address(self) -> int:
        """Exclusive end of the register range."""
        return self.modbus_address + self.register_count

    def to_edit_payload(self, *, include_id: bool) -> dict[str, Any]:
        payload = self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id"},
        )
        if include_id:
            payload["id"] = self.id
        return payload


class GatewayMappingRow(GatewayMapping):
    """Mapping row as listed by the server, with display-only item details."""

    gateway_id: str | None = Field(default=None, alias="gatewayId")
    item_name: str | None = Field(default=None, alias="itemName")
    item_name_fa: str | None = Field(default=None, alias="itemNameFa")
    is_editable: bool = Field(default=False, alias="isEditable")

    def as_mapping(self) -> GatewayMapping:
        """Strip display fields so diffing compares only editable attributes."""

        return GatewayMapping.model_validate(
            self.model_dump(include=set(GatewayMapping.model_fields))
        )


@dataclass(slots=True, frozen=True)
class MappingOverlap:
    register_type: RegisterType
    mapping_id: str
    other_id: str
    start_address: int
    register_count: int

    @property
    def message(self) -> str:
        end = self.start_address + self.register_count - 1
        return (
            f"{self.register_type.label} address range {self.start_address}-{end} "
            "overlaps an existing mapping"
        )


def find_mapping_overlaps(mappings: Iterable[GatewayMapping]) -> list[MappingOverlap]:
    """Detect overlapping register ranges within each register type.

    Ranges are half-open ``[start, start + count)``; two ranges overlap when
    each starts before the other ends.
    """

    grouped: dict[RegisterType, list[GatewayMapping]] = defaultdict(list)
    for mapping in mappings:
        grouped[RegisterType(mapping.register_type)].append(mapping)

    overlaps: list[MappingOverlap] = []
    for register_type in sorted(grouped):
        ordered = sorted(grouped[register_type], key=lambda m: m.modbus_address)
        for index, current in enumerate(ordered):
            for other in ordered[index + 1 :]:
                if other.modbus_address >= current.end_address:
                    break
                overlaps.append(
                    MappingOverlap(
                        register_type=register_type,
                        mapping_id=current.id,
                        other_id=other.id,
                        start_address=other.modbus_address,
                        register_count=other.register_count,
                    )
                )
    return overlaps


__all__ = [
    "AddressBase",
    "ConnectionType",
    "DataRepresentation",
    "Endianness",
    "GatewayMapping",
    "GatewayMappingRow",
    "MappingOverlap",
    "ModbusController",
    "ModbusDataType",
    "ModbusGateway",
    "ModbusProtocol",
    "RegisterType",
    "find_mapping_overlaps",
]
