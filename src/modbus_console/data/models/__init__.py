"""Pydantic models for console API payloads."""

from .common import ConsoleBaseModel, ConsoleResource
from .modbus import (
    AddressBase,
    ConnectionType,
    DataRepresentation,
    Endianness,
    GatewayMapping,
    GatewayMappingRow,
    MappingOverlap,
    ModbusController,
    ModbusDataType,
    ModbusGateway,
    ModbusProtocol,
    RegisterType,
    find_mapping_overlaps,
)
from .users import RoleInfo, UserDraft, UserInfo

__all__ = [
    "ConsoleBaseModel",
    "ConsoleResource",
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
    "RoleInfo",
    "UserDraft",
    "UserInfo",
]
