# music_catalog/store/data_store.py

"""Generic in-memory store with CRUD, predicate search and ID assignment."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable
from typing import Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)


class Entity(Protocol):
    """Anything carrying a unique integer identifier."""

    id: int


T = TypeVar("T", bound=Entity)


class DataStore(Generic[T]):
    """Keyed collection of entities of one type.

    Entities are copied on the way in and on the way out, so callers can never
    mutate stored state through a returned object. Lookups are linear scans.
    IDs come from a counter owned by the instance; it starts at 1 and never
    hands out the same ID twice (until clear()).
    """

    def __init__(self) -> None:
        self._items: list[T] = []
        self._next_id = 1

    @property
    def count(self) -> int:
        """Number of stored entities."""
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: T) -> T:
        """Store a copy of `item` under the next free ID and return it."""
        if item is None:
            msg = "item must not be None."
            raise ValueError(msg)

        stored = copy.deepcopy(item)
        stored.id = self._next_id
        self._next_id += 1
        self._items.append(stored)
        return copy.deepcopy(stored)

    def update(self, item: T) -> bool:
        """Replace the stored entity having the same ID.

        Returns False if there is nothing to replace.
        """
        if item is None:
            msg = "item must not be None."
            raise ValueError(msg)

        index = self._index_of(item.id)
        if index is None:
            return False

        self._items[index] = copy.deepcopy(item)
        return True

    def delete(self, item_id: int) -> bool:
        """Remove the entity with `item_id`. Returns False if it is absent."""
        index = self._index_of(item_id)
        if index is None:
            return False

        del self._items[index]
        return True

    def get_by_id(self, item_id: int) -> T | None:
        index = self._index_of(item_id)
        if index is None:
            return None
        return copy.deepcopy(self._items[index])

    def get_all(self) -> list[T]:
        """Return a snapshot of all entities in insertion order."""
        return copy.deepcopy(self._items)

    def find(self, predicate: Callable[[T], bool]) -> list[T]:
        """Return copies of all entities for which `predicate` is true."""
        if predicate is None:
            msg = "predicate must not be None."
            raise ValueError(msg)
        return [copy.deepcopy(item) for item in self._items if predicate(item)]

    def search(self, selector: Callable[[T], str], term: str | None) -> list[T]:
        """Case-insensitive substring search on the selected text field.

        A blank term matches everything.
        """
        if not term or not term.strip():
            return self.get_all()

        needle = term.strip().casefold()
        return self.find(lambda item: needle in (selector(item) or "").casefold())

    def restore(self, items: Iterable[T]) -> int:
        """Load entities that already carry IDs, e.g. from a data file.

        The ID counter moves past the highest restored ID. Returns the number
        of restored entities.
        """
        restored = 0
        for item in items:
            if item.id <= 0:
                msg = f"Cannot restore entity without a positive ID: {item!r}"
                raise ValueError(msg)
            if self._index_of(item.id) is not None:
                msg = f"Duplicate ID {item.id} while restoring entities."
                raise ValueError(msg)

            self._items.append(copy.deepcopy(item))
            self._next_id = max(self._next_id, item.id + 1)
            restored += 1

        logger.debug("Restored %s entities, next ID is %s.", restored, self._next_id)
        return restored

    def clear(self) -> None:
        """Remove everything and reset the ID counter."""
        self._items.clear()
        self._next_id = 1

    def _index_of(self, item_id: int) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None
