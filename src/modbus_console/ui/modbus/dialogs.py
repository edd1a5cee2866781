from __future__ import annotations

import ipaddress
from typing import Any, Iterable

from modbus_console.data import (
    DataRepresentation,
    GatewayMapping,
    GatewayMappingRow,
    MappingOverlap,
    ModbusController,
    ModbusGateway,
    find_mapping_overlaps,
)
from modbus_console.services import (
    CollectionDelta,
    ModbusService,
    MutationOutcome,
    new_draft_id,
)
from modbus_console.ui.components import (
    CollectionDialogController,
    DraftValidationError,
    EntityDialogController,
    find_row,
    insert_row,
    remove_row,
    replace_row,
)


DEFAULT_SCALE_MIN = 0.0
DEFAULT_SCALE_MAX = 100.0


class MappingOverlapError(DraftValidationError):
    """Raised when two draft mappings claim the same register addresses."""

    def __init__(self, message: str, overlaps: Iterable[MappingOverlap]) -> None:
        super().__init__(message)
        self.overlaps = tuple(overlaps)


class DuplicateItemMappingError(DraftValidationError):
    """Raised when one monitoring item is mapped twice on the same gateway."""

    def __init__(self, message: str, item_id: str) -> None:
        super().__init__(message)
        self.item_id = item_id


# ----------------------------------------------------------------- Controllers


class ModbusControllerDialog(
    EntityDialogController[ModbusController, ModbusController, ModbusController]
):
    """Add a Modbus controller (no target) or edit an existing one."""

    failure_message_key = "modbus.errors.save_controller_failed"

    def __init__(self, service: ModbusService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service

    @property
    def is_create(self) -> bool:
        return not self.has_target

    def seed_draft(self, target: ModbusController) -> ModbusController:
        return target

    def empty_draft(self) -> ModbusController:
        return ModbusController()

    def set_field(self, name: str, value: Any) -> ModbusController:
        if name not in ModbusController.model_fields:
            raise AttributeError(f"ModbusController has no field {name!r}")
        return self.update_draft(lambda draft: draft.model_copy(update={name: value}))

    def validate_draft(self) -> None:
        draft: ModbusController = self.draft
        if not draft.name.strip():
            raise DraftValidationError(
                self.translate("common.errors.validation_failed", detail="name is required")
            )
        try:
            ipaddress.ip_address(draft.ip_address.strip())
        except ValueError:
            raise DraftValidationError(
                self.translate(
                    "common.errors.validation_failed",
                    detail=f"{draft.ip_address!r} is not a valid IP address",
                )
            ) from None

    def serialize_draft(self, draft: ModbusController) -> ModbusController:
        return draft.model_copy(update={"ip_address": draft.ip_address.strip()}).validated()

    async def send(self, payload: ModbusController) -> MutationOutcome:
        if self.is_create:
            return await self._service.add_controller(payload)
        return await self._service.edit_controller(payload)


class DeleteModbusControllerDialog(EntityDialogController[ModbusController, None, str]):
    failure_message_key = "modbus.errors.delete_controller_failed"

    def __init__(self, service: ModbusService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service

    def seed_draft(self, target: ModbusController) -> None:
        return None

    def empty_draft(self) -> None:
        return None

    def validate_draft(self) -> None:
        self.require_target()

    def build_payload(self) -> str:
        return self.require_target().id

    async def send(self, payload: str) -> MutationOutcome:
        return await self._service.delete_controller(payload)


# ----------------------------------------------------------------- Gateway mappings


class GatewayMappingsDialog(CollectionDialogController[ModbusGateway, GatewayMapping]):
    """Batch-edit the register mappings of one gateway.

    Open with the gateway as target and its current mapping rows as the
    reference collection. Rows added here carry a temporary ``new-`` id
    until the server assigns a real one.
    """

    failure_message_key = "modbus.errors.save_mappings_failed"

    def __init__(self, service: ModbusService, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service

    @property
    def mappings(self) -> tuple[GatewayMapping, ...]:
        return self.draft or ()

    def snapshot_entity(self, entity: Any) -> GatewayMapping:
        if isinstance(entity, GatewayMappingRow):
            return entity.as_mapping()
        if isinstance(entity, GatewayMapping):
            return entity
        return GatewayMapping.from_api(entity)

    def add_mapping(self, **fields: Any) -> GatewayMapping:
        """Append a new mapping row built from ``fields`` and return it."""

        mapping = _with_default_scale(
            GatewayMapping.model_validate({**fields, "id": new_draft_id()})
        )
        self.update_draft(lambda rows: insert_row(rows, mapping))
        return mapping

    def update_mapping(self, mapping_id: str, **changes: Any) -> GatewayMapping:
        current = find_row(self.mappings, mapping_id)
        if current is None:
            raise KeyError(mapping_id)
        mapping = GatewayMapping.model_validate({**current.model_dump(), **changes})
        self.update_draft(lambda rows: replace_row(rows, mapping))
        return mapping

    def remove_mapping(self, mapping_id: str) -> None:
        self.update_draft(lambda rows: remove_row(rows, mapping_id))

    def validate_draft(self) -> None:
        if self.target is None:
            raise DraftValidationError(self.translate("common.errors.no_target"))
        seen: set[str] = set()
        for mapping in self.mappings:
            if mapping.item_id in seen:
                raise DuplicateItemMappingError(
                    self.translate("modbus.errors.duplicate_item", item_id=mapping.item_id),
                    mapping.item_id,
                )
            seen.add(mapping.item_id)
        overlaps = find_mapping_overlaps(self.mappings)
        if overlaps:
            raise MappingOverlapError(
                self.translate("modbus.errors.mapping_overlap", detail=overlaps[0].message),
                overlaps,
            )

    async def send(self, payload: CollectionDelta[GatewayMapping]) -> MutationOutcome:
        return await self._service.batch_edit_mappings(self.target.id, payload)


def _with_default_scale(mapping: GatewayMapping) -> GatewayMapping:
    if mapping.data_representation is not DataRepresentation.SCALED_INTEGER:
        return mapping
    return mapping.model_copy(
        update={
            "scale_min": DEFAULT_SCALE_MIN if mapping.scale_min is None else mapping.scale_min,
            "scale_max": DEFAULT_SCALE_MAX if mapping.scale_max is None else mapping.scale_max,
        }
    )


__all__ = [
    "DeleteModbusControllerDialog",
    "DuplicateItemMappingError",
    "GatewayMappingsDialog",
    "MappingOverlapError",
    "ModbusControllerDialog",
]
