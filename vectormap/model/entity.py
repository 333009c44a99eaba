"""Entity handles - the engine's reference to one renderable region or marker.

The handle's `selected` flag is the single source of truth for selection.
SelectionStore never caches it; it only scans handles.
"""

import logging
from enum import Enum
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class Category(Enum):
    """Entity category - each has its own registry and selection set."""

    REGIONS = "regions"
    MARKERS = "markers"

    @property
    def singular(self) -> str:
        """Event prefix ("region" / "marker")."""
        return self.value[:-1]

    @classmethod
    def coerce(cls, value: "Category | str") -> "Category":
        """Accept a Category or its string value.

        Raises:
            ValueError: If the string is not a known category
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown entity category '{value}' (expected 'regions' or 'markers')") from None


class VisualElement(Protocol):
    """What a handle needs from the rendered element behind it."""

    bounds: Optional[tuple[float, float, float, float]]

    def set_selected(self, selected: bool) -> None: ...

    def remove(self) -> None: ...


class EntityHandle:
    """Handle for one region or marker.

    Attributes:
        key: Stable key, unique within its category
        category: REGIONS or MARKERS
        element: Rendered element (select/deselect toggles its style)
        name: Display name (used for tooltips)
        config: Raw configuration the entity was built from

    Example:
        handle = EntityHandle(key="FR", category=Category.REGIONS, element=shape)
        handle.select()
        assert handle.selected
    """

    def __init__(
        self,
        key: str,
        category: Category,
        element: VisualElement,
        name: str = "",
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        self.key = key
        self.category = category
        self.element = element
        self.name = name or key
        self.config = config or {}
        self._selected = False
        self._removed = False

    @property
    def selected(self) -> bool:
        return self._selected

    @property
    def is_removed(self) -> bool:
        return self._removed

    @property
    def bounds(self) -> Optional[tuple[float, float, float, float]]:
        """(min_x, min_y, max_x, max_y) of the element in map space."""
        return self.element.bounds

    def select(self) -> None:
        self._selected = True
        self.element.set_selected(True)

    def deselect(self) -> None:
        self._selected = False
        self.element.set_selected(False)

    def toggle(self) -> bool:
        """Flip selection and return the new state."""
        if self._selected:
            self.deselect()
        else:
            self.select()
        return self._selected

    def remove(self) -> None:
        """Dispose the visual element. Safe to call twice."""
        if self._removed:
            return
        self.element.remove()
        self._removed = True

    def __repr__(self) -> str:
        flag = ", selected" if self._selected else ""
        return f"EntityHandle({self.category.value}:{self.key}{flag})"
