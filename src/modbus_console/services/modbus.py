from __future__ import annotations

from dataclasses import dataclass

from modbus_console.api import ApiRequest, ConsoleApiClient
from modbus_console.api.requests import (
    add_modbus_controller_request,
    batch_edit_gateway_mappings_request,
    delete_modbus_controller_request,
    edit_modbus_controller_request,
    list_gateway_mappings_request,
    list_modbus_controllers_request,
    list_modbus_gateways_request,
)
from modbus_console.data import (
    GatewayMapping,
    GatewayMappingRow,
    ModbusController,
    ModbusGateway,
)
from modbus_console.services.base import (
    EventHook,
    MutationOutcome,
    MutationStatus,
    ServiceErrorEvent,
    ensure_query_succeeded,
    run_optimistic_mutation,
)
from modbus_console.services.diff import CollectionDelta, is_draft_id
from modbus_console.utils import get_logger


logger = get_logger(__name__)


@dataclass(slots=True)
class ModbusMutationEvent:
    action: str
    target_id: str | None
    status: MutationStatus
    error: Exception | None = None


@dataclass(slots=True)
class MappingsAppliedEvent:
    gateway_id: str
    delta: CollectionDelta[GatewayMapping]
    status: MutationStatus
    error: Exception | None = None


class ModbusService:
    """Modbus controller, gateway and gateway mapping administration."""

    def __init__(self, client: ConsoleApiClient) -> None:
        self._client = client
        self.mutated: EventHook[ModbusMutationEvent] = EventHook()
        self.mappings_applied: EventHook[MappingsAppliedEvent] = EventHook()
        self.errors: EventHook[ServiceErrorEvent] = EventHook()

    # ----------------------------------------------------------------- Controllers

    async def list_controllers(self) -> list[ModbusController]:
        body = await self._client.execute(list_modbus_controllers_request())
        ensure_query_succeeded(body, "Failed to load Modbus controllers")
        return [ModbusController.from_api(item) for item in body.get("data") or []]

    async def add_controller(self, controller: ModbusController) -> MutationOutcome:
        request = add_modbus_controller_request(controller.to_add_payload())
        return await self._mutate("add_controller", None, request)

    async def edit_controller(self, controller: ModbusController) -> MutationOutcome:
        request = edit_modbus_controller_request(controller.to_edit_payload())
        return await self._mutate("edit_controller", controller.id, request)

    async def delete_controller(self, controller_id: str) -> MutationOutcome:
        request = delete_modbus_controller_request(controller_id)
        return await self._mutate("delete_controller", controller_id, request)

    # ----------------------------------------------------------------- Gateways

    async def list_gateways(self) -> list[ModbusGateway]:
        body = await self._client.execute(list_modbus_gateways_request())
        ensure_query_succeeded(body, "Failed to load Modbus gateways")
        return [ModbusGateway.from_api(item) for item in body.get("data") or []]

    async def list_gateway_mappings(self, gateway_id: str) -> list[GatewayMappingRow]:
        body = await self._client.execute(list_gateway_mappings_request(gateway_id))
        ensure_query_succeeded(body, "Failed to load gateway mappings")
        rows = [GatewayMappingRow.from_api(item) for item in body.get("mappings") or []]
        logger.debug("Gateway mappings fetched", gateway_id=gateway_id, count=len(rows))
        return rows

    async def batch_edit_mappings(
        self,
        gateway_id: str,
        delta: CollectionDelta[GatewayMapping],
    ) -> MutationOutcome:
        """Submit a mapping delta for one gateway as a single request."""

        def event_builder(
            status: MutationStatus, error: Exception | None = None
        ) -> MappingsAppliedEvent:
            return MappingsAppliedEvent(
                gateway_id=gateway_id,
                delta=delta,
                status=status,
                error=error,
            )

        if delta.is_noop:
            logger.debug("Gateway mapping delta is noop", gateway_id=gateway_id)
            self.mappings_applied.emit(event_builder(MutationStatus.SUCCEEDED, None))
            return MutationOutcome.ok()

        request = batch_edit_gateway_mappings_request(
            gateway_id,
            added=[mapping.to_edit_payload(include_id=False) for mapping in delta.added],
            updated=[mapping.to_edit_payload(include_id=True) for mapping in delta.changed],
            removed_ids=[
                str(identity) for identity in delta.removed if not is_draft_id(identity)
            ],
        )

        async def operation() -> MutationOutcome:
            body = await self._client.execute(request)
            return MutationOutcome.from_response(body)

        try:
            outcome = await run_optimistic_mutation(
                emitter=self.mappings_applied,
                event_builder=event_builder,
                operation=operation,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to apply gateway mapping delta", gateway_id=gateway_id)
            self.errors.emit(
                ServiceErrorEvent(operation="modbus.batch_edit_mappings", error=exc)
            )
            raise
        logger.debug(
            "Gateway mapping delta submitted",
            gateway_id=gateway_id,
            success=outcome.success,
            **delta.counts(),
        )
        return outcome

    async def _mutate(
        self,
        action: str,
        target_id: str | None,
        request: ApiRequest,
    ) -> MutationOutcome:
        def event_builder(
            status: MutationStatus, error: Exception | None = None
        ) -> ModbusMutationEvent:
            return ModbusMutationEvent(
                action=action,
                target_id=target_id,
                status=status,
                error=error,
            )

        async def operation() -> MutationOutcome:
            body = await self._client.execute(request)
            return MutationOutcome.from_response(body)

        try:
            return await run_optimistic_mutation(
                emitter=self.mutated,
                event_builder=event_builder,
                operation=operation,
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Modbus mutation failed", action=action, target_id=target_id)
            self.errors.emit(ServiceErrorEvent(operation=f"modbus.{action}", error=exc))
            raise


__all__ = [
    "MappingsAppliedEvent",
    "ModbusMutationEvent",
    "ModbusService",
]
