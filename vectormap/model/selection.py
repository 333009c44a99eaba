"""SelectionStore - selection queries over the entity registry.

The store keeps no state of its own. "Selected" always means "the handle's
selected flag is set", recomputed on every call, so it cannot drift from
the handles even when collaborators toggle them directly.
"""

import logging
from typing import Iterable

from vectormap.model.entity import Category
from vectormap.model.registry import EntityRegistry

logger = logging.getLogger(__name__)


class SelectionStore:
    """Select/deselect entities by key and report what is selected.

    Example:
        store = SelectionStore(registry=registry)
        store.select(category="regions", keys=["FR", "DE", "XX"])  # XX skipped
        store.get_selected("regions")  # ["FR", "DE"] in registry order
    """

    def __init__(self, registry: EntityRegistry) -> None:
        self.registry = registry

    def get_selected(self, category: "Category | str") -> list[str]:
        """Keys whose handle is selected, in registry order."""
        return [key for key, handle in self.registry.all(category) if handle.selected]

    def select(self, category: "Category | str", keys: Iterable[str]) -> None:
        """Select every key present in the registry; absent keys are skipped."""
        for key in keys:
            handle = self.registry.get(category, key)
            if handle is None:
                logger.debug(f"select({key!r}): not in {Category.coerce(category).value}, skipped")
                continue
            handle.select()

    def clear(self, category: "Category | str") -> None:
        """Deselect exactly the currently selected handles."""
        for key in self.get_selected(category):
            self.registry.get(category, key).deselect()
