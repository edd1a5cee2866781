from __future__ import annotations

import asyncio
from collections.abc import Callable

from modbus_console.data import GatewayMappingRow, ModbusController, ModbusGateway
from modbus_console.services import (
    MappingsAppliedEvent,
    ModbusMutationEvent,
    ModbusService,
    ServiceErrorEvent,
    ServiceRegistry,
)
from modbus_console.ui.i18n import Translator
from modbus_console.ui.modbus.dialogs import (
    DeleteModbusControllerDialog,
    GatewayMappingsDialog,
    ModbusControllerDialog,
)
from modbus_console.utils import get_logger
from modbus_console.utils.errors import describe_exception


logger = get_logger(__name__)


class ModbusPageController:
    """Bridge between the Modbus pages and the service layer."""

    def __init__(
        self,
        services: ServiceRegistry,
        *,
        translate: Translator | None = None,
    ) -> None:
        self._services = services
        self._service: ModbusService | None = services.modbus
        self._translate = translate
        self._subscriptions: list[Callable[[], None]] = []
        self._controllers: list[ModbusController] = []
        self._gateways: list[ModbusGateway] = []
        self._mapping_cache: dict[str, list[GatewayMappingRow]] = {}
        self._pending: set[asyncio.Task[object]] = set()
        self._stale = False

    def register_callbacks(
        self,
        *,
        mutated: Callable[[ModbusMutationEvent], None] | None = None,
        mappings_applied: Callable[[MappingsAppliedEvent], None] | None = None,
        error: Callable[[ServiceErrorEvent], None] | None = None,
    ) -> None:
        if self._service is None:
            return
        if mutated is not None:
            self._subscriptions.append(self._service.mutated.subscribe(mutated))
        if mappings_applied is not None:
            self._subscriptions.append(
                self._service.mappings_applied.subscribe(mappings_applied)
            )
        if error is not None:
            self._subscriptions.append(self._service.errors.subscribe(error))

    def dispose(self) -> None:
        while self._subscriptions:
            unsubscribe = self._subscriptions.pop()
            unsubscribe()

    # ----------------------------------------------------------------- Queries

    @property
    def controllers(self) -> list[ModbusController]:
        return list(self._controllers)

    @property
    def gateways(self) -> list[ModbusGateway]:
        return list(self._gateways)

    @property
    def is_stale(self) -> bool:
        """True while a reload requested by a closed dialog has not completed."""
        return self._stale

    def cached_mappings(self, gateway_id: str) -> list[GatewayMappingRow] | None:
        return self._mapping_cache.get(gateway_id)

    # ----------------------------------------------------------------- Actions

    async def refresh_controllers(self) -> list[ModbusController]:
        self._controllers = await self._require_service().list_controllers()
        logger.debug("Modbus controllers refreshed", count=len(self._controllers))
        return self.controllers

    async def refresh_gateways(self) -> list[ModbusGateway]:
        self._gateways = await self._require_service().list_gateways()
        logger.debug("Modbus gateways refreshed", count=len(self._gateways))
        return self.gateways

    async def load_mappings(self, gateway_id: str) -> list[GatewayMappingRow]:
        rows = await self._require_service().list_gateway_mappings(gateway_id)
        self._mapping_cache[gateway_id] = rows
        return list(rows)

    async def wait_for_refresh(self) -> None:
        """Await every reload scheduled by dialogs that closed with changes.

        Failed reloads are logged when they finish and leave the page stale.
        """

        while self._pending:
            await asyncio.wait(set(self._pending))

    # ----------------------------------------------------------------- Dialogs

    def add_controller(self) -> ModbusControllerDialog:
        dialog = ModbusControllerDialog(
            self._require_service(),
            on_close=self._reload_on_close(self.refresh_controllers),
            translate=self._translate,
        )
        dialog.open(None)
        return dialog

    def edit_controller(self, controller: ModbusController) -> ModbusControllerDialog:
        dialog = ModbusControllerDialog(
            self._require_service(),
            on_close=self._reload_on_close(self.refresh_controllers),
            translate=self._translate,
        )
        dialog.open(controller)
        return dialog

    def delete_controller(
        self, controller: ModbusController
    ) -> DeleteModbusControllerDialog:
        dialog = DeleteModbusControllerDialog(
            self._require_service(),
            on_close=self._reload_on_close(self.refresh_controllers),
            translate=self._translate,
        )
        dialog.open(controller)
        return dialog

    def edit_mappings(self, gateway: ModbusGateway) -> GatewayMappingsDialog:
        """Open the mapping editor against the last loaded rows for ``gateway``."""

        rows = self._mapping_cache.get(gateway.id, [])

        async def reload() -> None:
            await self.load_mappings(gateway.id)
            await self.refresh_gateways()

        dialog = GatewayMappingsDialog(
            self._require_service(),
            on_close=self._reload_on_close(reload),
            translate=self._translate,
        )
        dialog.open(gateway, rows)
        return dialog

    # ----------------------------------------------------------------- Internals

    def _reload_on_close(
        self, reload: Callable[[], object]
    ) -> Callable[[bool], None]:
        def on_close(should_refresh: bool) -> None:
            if not should_refresh:
                return
            self._stale = True
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("No running loop; Modbus page marked stale")
                return
            task = loop.create_task(reload())  # type: ignore[arg-type]
            self._pending.add(task)
            task.add_done_callback(self._on_reload_done)

        return on_close

    def _on_reload_done(self, task: asyncio.Task[object]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            descriptor = describe_exception(exc)
            logger.error(
                "Modbus page reload failed",
                headline=descriptor.headline,
                detail=descriptor.detail,
                exc_info=exc,
            )
            return
        if not self._pending:
            self._stale = False

    def _require_service(self) -> ModbusService:
        if self._service is None:
            raise RuntimeError("Modbus service not configured")
        return self._service


__all__ = ["ModbusPageController"]
