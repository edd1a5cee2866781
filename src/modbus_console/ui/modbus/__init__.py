"""Modbus controller and gateway mapping dialogs."""

from .controller import ModbusPageController
from .dialogs import (
    DeleteModbusControllerDialog,
    DuplicateItemMappingError,
    GatewayMappingsDialog,
    MappingOverlapError,
    ModbusControllerDialog,
)

__all__ = [
    "DeleteModbusControllerDialog",
    "DuplicateItemMappingError",
    "GatewayMappingsDialog",
    "MappingOverlapError",
    "ModbusControllerDialog",
    "ModbusPageController",
]
