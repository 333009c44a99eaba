"""EntityRegistry - owns key -> handle mappings for regions and markers."""

import logging
from typing import Iterator, Optional

from vectormap.model.entity import Category, EntityHandle

logger = logging.getLogger(__name__)


class EntityRegistry:
    """Per-category mapping from stable key to entity handle.

    Insertion order is preserved and is the order selections are reported in.

    Example:
        registry = EntityRegistry()
        registry.add(category=Category.REGIONS, key="FR", handle=handle)
        for key, handle in registry.all(Category.REGIONS):
            ...
    """

    def __init__(self) -> None:
        self._handles: dict[Category, dict[str, EntityHandle]] = {category: {} for category in Category}

    def _table(self, category: "Category | str") -> dict[str, EntityHandle]:
        return self._handles[Category.coerce(category)]

    def add(self, category: "Category | str", key: str, handle: EntityHandle) -> None:
        """Insert a handle, disposing any handle previously stored under key."""
        table = self._table(category)
        previous = table.get(key)
        if previous is not None and previous is not handle:
            logger.debug(f"Replacing {previous!r}")
            previous.remove()
        table[key] = handle

    def remove(self, category: "Category | str", key: str) -> None:
        """Dispose and drop the handle under key. Missing keys are a no-op."""
        handle = self._table(category).pop(key, None)
        if handle is None:
            logger.debug(f"remove({key!r}): not registered")
            return
        handle.remove()

    def get(self, category: "Category | str", key: str) -> Optional[EntityHandle]:
        return self._table(category).get(key)

    def all(self, category: "Category | str") -> Iterator[tuple[str, EntityHandle]]:
        """Lazily yield (key, handle) pairs in insertion order.

        Iterates over a snapshot of the keys, so handles may be removed
        while the caller is iterating; removed entries are skipped.
        """
        table = self._table(category)
        for key in list(table):
            handle = table.get(key)
            if handle is not None:
                yield key, handle

    def keys(self, category: "Category | str") -> list[str]:
        return list(self._table(category))

    def clear(self, category: "Category | str") -> None:
        """Dispose every handle in the category and empty it."""
        table = self._table(category)
        for handle in table.values():
            handle.remove()
        table.clear()

    def clear_all(self) -> None:
        for category in Category:
            self.clear(category)

    def count(self, category: "Category | str") -> int:
        return len(self._table(category))

    def contains(self, category: "Category | str", key: str) -> bool:
        return key in self._table(category)

    def __contains__(self, item: tuple["Category | str", str]) -> bool:
        category, key = item
        return self.contains(category, key)

    def __len__(self) -> int:
        return sum(len(table) for table in self._handles.values())

    def __repr__(self) -> str:
        counts = ", ".join(f"{c.value}={len(t)}" for c, t in self._handles.items())
        return f"EntityRegistry({counts})"
