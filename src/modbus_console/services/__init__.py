"""Business logic service layer for the Modbus console."""

from .base import (
    EventHook,
    MutationOutcome,
    MutationStatus,
    RefreshEvent,
    ServiceErrorEvent,
    run_optimistic_mutation,
)
from .diff import (
    CollectionDelta,
    CollectionDiffEngine,
    CollectionValidationError,
    DuplicateIdentityError,
    diff_collections,
    is_draft_id,
    new_draft_id,
)
from .modbus import MappingsAppliedEvent, ModbusMutationEvent, ModbusService
from .registry import ServiceRegistry
from .users import UserMutationEvent, UserService

__all__ = [
    "EventHook",
    "MutationOutcome",
    "MutationStatus",
    "RefreshEvent",
    "ServiceErrorEvent",
    "run_optimistic_mutation",
    "CollectionDelta",
    "CollectionDiffEngine",
    "CollectionValidationError",
    "DuplicateIdentityError",
    "diff_collections",
    "is_draft_id",
    "new_draft_id",
    "MappingsAppliedEvent",
    "ModbusMutationEvent",
    "ModbusService",
    "ServiceRegistry",
    "UserMutationEvent",
    "UserService",
]
