from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Hashable, Iterable, Mapping, Sequence, TypeVar
from uuid import uuid4

from pydantic import BaseModel

from modbus_console.utils import get_logger


logger = get_logger(__name__)

EntityT = TypeVar("EntityT")

DRAFT_ID_PREFIX = "new-"


class CollectionValidationError(ValueError):
    """Raised when a collection handed to the diff engine is malformed."""


class DuplicateIdentityError(CollectionValidationError):
    def __init__(self, identity: Hashable, side: str) -> None:
        super().__init__(f"Duplicate id {identity!r} in {side} collection")
        self.identity = identity
        self.side = side


@dataclass(slots=True)
class CollectionDelta(Generic[EntityT]):
    """Minimal add/change/remove difference between two collections.

    ``added`` and ``changed`` hold full entities from the updated side;
    ``removed`` holds identities only.
    """

    added: list[EntityT] = field(default_factory=list)
    changed: list[EntityT] = field(default_factory=list)
    removed: list[Hashable] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not (self.added or self.changed or self.removed)

    def counts(self) -> dict[str, int]:
        return {
            "added": len(self.added),
            "changed": len(self.changed),
            "removed": len(self.removed),
        }


def new_draft_id() -> str:
    """Return a temporary id for a row created locally and not yet saved."""

    return f"{DRAFT_ID_PREFIX}{uuid4().hex}"


def is_draft_id(identity: Hashable) -> bool:
    return isinstance(identity, str) and identity.startswith(DRAFT_ID_PREFIX)


def entity_identity(entity: Any) -> Hashable:
    if isinstance(entity, Mapping):
        return entity.get("id")
    return getattr(entity, "id", None)


def entity_attributes(entity: Any) -> dict[str, Any]:
    """Return the comparable attributes of an entity, identity excluded."""

    if isinstance(entity, BaseModel):
        return entity.model_dump(exclude={"id"})
    if isinstance(entity, Mapping):
        return {key: value for key, value in entity.items() if key != "id"}
    if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        payload = dataclasses.asdict(entity)
        payload.pop("id", None)
        return payload
    return {key: value for key, value in vars(entity).items() if key != "id"}


class CollectionDiffEngine(Generic[EntityT]):
    """Compute and apply deltas between identity-keyed collections."""

    def __init__(
        self,
        *,
        identity: Callable[[EntityT], Hashable] = entity_identity,
        attributes: Callable[[EntityT], Mapping[str, Any]] = entity_attributes,
    ) -> None:
        self._identity = identity
        self._attributes = attributes

    def diff(
        self,
        original: Iterable[EntityT],
        updated: Iterable[EntityT],
    ) -> CollectionDelta[EntityT]:
        original_list = list(original)
        updated_list = list(updated)
        original_by_id = self._index(original_list, side="original")
        updated_by_id = self._index(updated_list, side="updated")

        added: list[EntityT] = []
        changed: list[EntityT] = []
        for identity, entity in updated_by_id.items():
            previous = original_by_id.get(identity)
            if previous is None:
                added.append(entity)
            elif not self.same_attributes(previous, entity):
                changed.append(entity)

        removed = [
            identity for identity in original_by_id if identity not in updated_by_id
        ]
        delta = CollectionDelta(added=added, changed=changed, removed=removed)
        logger.debug("Collection diff computed", **delta.counts())
        return delta

    def apply(
        self,
        original: Iterable[EntityT],
        delta: CollectionDelta[EntityT],
    ) -> list[EntityT]:
        """Return ``original`` with the delta applied.

        Surviving entities keep their original order; added entities are
        appended in delta order.
        """

        removed = set(delta.removed)
        replacements = {self._identity(entity): entity for entity in delta.changed}
        result = [
            replacements.get(self._identity(entity), entity)
            for entity in original
            if self._identity(entity) not in removed
        ]
        result.extend(delta.added)
        return result

    def same_attributes(self, left: EntityT, right: EntityT) -> bool:
        return dict(self._attributes(left)) == dict(self._attributes(right))

    def _index(
        self,
        entities: Sequence[EntityT],
        *,
        side: str,
    ) -> dict[Hashable, EntityT]:
        index: dict[Hashable, EntityT] = {}
        for position, entity in enumerate(entities):
            identity = self._identity(entity)
            if identity is None:
                raise CollectionValidationError(
                    f"Entity at position {position} in {side} collection has no id"
                )
            if identity in index:
                raise DuplicateIdentityError(identity, side)
            index[identity] = entity
        return index


def diff_collections(
    original: Iterable[EntityT],
    updated: Iterable[EntityT],
) -> CollectionDelta[EntityT]:
    """Diff two collections keyed by their ``id`` field."""

    return CollectionDiffEngine().diff(original, updated)


__all__ = [
    "CollectionDelta",
    "CollectionDiffEngine",
    "CollectionValidationError",
    "DuplicateIdentityError",
    "diff_collections",
    "entity_attributes",
    "entity_identity",
    "is_draft_id",
    "new_draft_id",
]
