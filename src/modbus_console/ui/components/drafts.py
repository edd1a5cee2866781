from __future__ import annotations

from typing import AbstractSet, Hashable, Iterable, Iterator, TypeVar

from modbus_console.services.diff import DuplicateIdentityError, entity_identity


RowT = TypeVar("RowT")


class SelectionSet:
    """Immutable, insertion-ordered set of identifiers.

    Equality ignores order so toggling an item on and off again yields a
    selection equal to the one you started with.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: tuple[str, ...] = tuple(dict.fromkeys(items))

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SelectionSet):
            return frozenset(self._items) == frozenset(other._items)
        if isinstance(other, (set, frozenset)):
            return frozenset(self._items) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._items))

    def __repr__(self) -> str:
        return f"SelectionSet({list(self._items)!r})"

    def toggle(self, item: str) -> "SelectionSet":
        if item in self._items:
            return self.without(item)
        return self.with_item(item)

    def with_item(self, item: str) -> "SelectionSet":
        if item in self._items:
            return self
        return SelectionSet((*self._items, item))

    def without(self, item: str) -> "SelectionSet":
        if item not in self._items:
            return self
        return SelectionSet(existing for existing in self._items if existing != item)

    def restricted_to(self, allowed: AbstractSet[str]) -> "SelectionSet":
        return SelectionSet(item for item in self._items if item in allowed)

    def as_list(self) -> list[str]:
        return list(self._items)


def insert_row(rows: tuple[RowT, ...], row: RowT) -> tuple[RowT, ...]:
    identity = entity_identity(row)
    if any(entity_identity(existing) == identity for existing in rows):
        raise DuplicateIdentityError(identity, "draft")
    return (*rows, row)


def replace_row(rows: tuple[RowT, ...], row: RowT) -> tuple[RowT, ...]:
    identity = entity_identity(row)
    if not any(entity_identity(existing) == identity for existing in rows):
        raise KeyError(identity)
    return tuple(row if entity_identity(existing) == identity else existing for existing in rows)


def remove_row(rows: tuple[RowT, ...], identity: Hashable) -> tuple[RowT, ...]:
    return tuple(row for row in rows if entity_identity(row) != identity)


def find_row(rows: Iterable[RowT], identity: Hashable) -> RowT | None:
    for row in rows:
        if entity_identity(row) == identity:
            return row
    return None


__all__ = [
    "SelectionSet",
    "find_row",
    "insert_row",
    "remove_row",
    "replace_row",
]

