"""
InfOpt Arena - Stable-Key Object Storage
========================================

This module provides the arena every modeling object lives in. Objects never
hold each other directly: all cross-object links are ``ObjectIndex`` values
looked up through the arena that owns the target.

Key Features:
- Monotonic integer slots, one counter per arena
- Tombstone deletion: a freed slot is never handed out again
- No compaction: deleting an entry never renumbers the survivors
- Restartable iteration in insertion (ascending index) order
- O(1) insert, lookup, delete and size

Usage:
    arena = ObjectArena(ObjectKind.MEASURE)
    idx = arena.insert(data)
    arena[idx] is data
    arena.delete(idx)
    idx in arena  # False, and stays False forever
"""

import logging
from typing import Any, Dict, Generic, Iterator, List, Tuple, TypeVar

from ..errors import ObjectNotFoundError
from ..indices import ObjectIndex, ObjectKind

T = TypeVar("T")


class ObjectArena(Generic[T]):
    """
    Keyed collection with stable, never reused integer identities.

    Unlike a free-list allocator, freed slots are retired instead of recycled:
    any reference issued for a deleted slot keeps failing with
    ``ObjectNotFoundError`` instead of silently aliasing a newer object.

    Attributes:
        kind: The object kind every index of this arena carries
    """

    def __init__(self, kind: ObjectKind):
        self.kind = kind
        # Python dicts preserve insertion order and slots only grow, so the
        # iteration order of _slots is ascending index order.
        self._slots: Dict[int, T] = {}
        self._next_value = 1

    def _check_index(self, index: ObjectIndex) -> None:
        # An index routed to the wrong arena means the store discipline was
        # broken elsewhere; this is not a recoverable user error.
        assert (
            index.kind is self.kind
        ), f"{index!r} routed to the {self.kind.label} arena"

    @property
    def next_index(self) -> ObjectIndex:
        """Index that the next ``insert`` will return."""
        return ObjectIndex(self.kind, self._next_value)

    def insert(self, obj: T) -> ObjectIndex:
        """
        Store an object in the next unused slot.

        Args:
            obj: The object to store

        Returns:
            Index of the new slot
        """
        index = ObjectIndex(self.kind, self._next_value)
        self._slots[self._next_value] = obj
        self._next_value += 1
        logging.debug(f"Arena insert {index!r}")
        return index

    def get(self, index: ObjectIndex) -> T:
        """
        Look up a live object.

        Raises:
            ObjectNotFoundError: If the slot was never filled or was deleted
        """
        self._check_index(index)
        try:
            return self._slots[index.value]
        except KeyError:
            raise ObjectNotFoundError(
                f"No {self.kind.label} with index {index!r} exists "
                "(it was deleted or never created)"
            ) from None

    def delete(self, index: ObjectIndex) -> T:
        """
        Retire a slot permanently and return the object it held.

        Raises:
            ObjectNotFoundError: If the slot is not live
        """
        obj = self.get(index)
        del self._slots[index.value]
        logging.debug(f"Arena delete {index!r}")
        return obj

    def keys(self) -> Iterator[ObjectIndex]:
        """Iterate over live indices in ascending order."""
        for value in list(self._slots):
            yield ObjectIndex(self.kind, value)

    def values(self) -> Iterator[T]:
        """Iterate over live objects in ascending index order."""
        for _, obj in self.items():
            yield obj

    def items(self) -> Iterator[Tuple[ObjectIndex, T]]:
        """
        Iterate over live ``(index, object)`` pairs in ascending index order.

        Every call starts a fresh pass. The pass works on a snapshot of the
        live slots, so deleting during iteration is safe.
        """
        for value, obj in list(self._slots.items()):
            yield ObjectIndex(self.kind, value), obj

    def indices(self) -> List[ObjectIndex]:
        """Return all live indices as a list."""
        return list(self.keys())

    def __getitem__(self, index: ObjectIndex) -> T:
        return self.get(index)

    def __contains__(self, index: Any) -> bool:
        if not isinstance(index, ObjectIndex) or index.kind is not self.kind:
            return False
        return index.value in self._slots

    def __iter__(self) -> Iterator[ObjectIndex]:
        return self.keys()

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return (
            f"ObjectArena({self.kind.label}, live={len(self._slots)}, "
            f"next={self._next_value})"
        )
