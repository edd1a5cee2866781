from __future__ import annotations

from dataclasses import dataclass

from .modbus import ModbusService
from .users import UserService


@dataclass(slots=True)
class ServiceRegistry:
    """Centralised container for the console's domain services."""

    users: UserService | None = None
    modbus: ModbusService | None = None


__all__ = ["ServiceRegistry"]
