"""Entity labels - text pinned to a region or marker that follows the viewport.

Labels config (one entry per category, both optional):
    {
        "regions": {"render": lambda key: key.upper(), "offsets": {"A": (0, 12)}},
        "markers": {"render": lambda key: None, "offsets": lambda key: (0, -10)},
    }

render(key) returns the label text; a falsy result means no label for
that entity. Without render the entity's display name is used. Offsets
are screen pixels, given as a dict or a callable keyed by entity key.

Region labels sit on the polygon's representative point (always inside
the shape, unlike the centroid); marker labels on the marker point.
"""

import logging
from typing import Any, Optional

from vectormap.constants import ClassNames
from vectormap.core.viewport import ViewportState
from vectormap.model.entity import Category, EntityHandle
from vectormap.ui.host import Element

logger = logging.getLogger(__name__)

Point2D = tuple[float, float]


def label_anchor(handle: EntityHandle) -> Optional[Point2D]:
    """Map-space point a label for this handle is pinned to (None if it has no area/point)."""
    element = handle.element
    if handle.category is Category.MARKERS:
        return getattr(element, "point", None)

    geometry = getattr(element, "geometry", None)
    if geometry is None or geometry.is_empty:
        return None
    point = geometry.representative_point()
    return (float(point.x), float(point.y))


class Label:
    """One label element. Its left/top style is the screen position."""

    def __init__(self, group: Element, key: str, text: str, anchor: Point2D, offset: Point2D) -> None:
        self.key = key
        self.anchor = anchor
        self.offset = offset
        self.element = group.append(Element(tag="text", classes=[ClassNames.LABEL]))
        self.element.text = text
        self.element.data.update(anchor=anchor, offset=offset)

    @property
    def text(self) -> str:
        return self.element.text

    @property
    def position(self) -> Optional[Point2D]:
        if "left" not in self.element.style:
            return None
        return (self.element.style["left"], self.element.style["top"])

    def reposition(self, state: ViewportState) -> None:
        scale, translate_x, translate_y = state.as_tuple()
        self.element.css(
            left=self.anchor[0] * scale + translate_x + self.offset[0],
            top=self.anchor[1] * scale + translate_y + self.offset[1],
        )

    def remove(self) -> None:
        self.element.remove()


class LabelLayer:
    """All labels of one map, keyed by category and entity key.

    Example:
        layer = LabelLayer(group=surface.labels_group, config=params["labels"])
        for _, handle in registry.all(Category.REGIONS):
            layer.add(handle)
        layer.reposition(viewport.state)
    """

    def __init__(self, group: Element, config: dict[str, Optional[dict[str, Any]]]) -> None:
        self.group = group
        self.config = {Category.coerce(name): value or {} for name, value in config.items()}
        self.labels: dict[Category, dict[str, Label]] = {category: {} for category in Category}

    def add(self, handle: EntityHandle) -> Optional[Label]:
        """Create (or replace) the label for a handle. Returns None when no label applies."""
        category_config = self.config.get(handle.category)
        if category_config is None or handle.is_removed:
            return None

        anchor = label_anchor(handle)
        if anchor is None:
            logger.debug(f"No label anchor for {handle!r}")
            return None

        render = category_config.get("render")
        text = render(handle.key) if callable(render) else handle.name
        self.remove(handle.category, handle.key)
        if not text:
            return None

        label = Label(
            group=self.group,
            key=handle.key,
            text=str(text),
            anchor=anchor,
            offset=self._offset(category_config.get("offsets"), handle.key),
        )
        self.labels[handle.category][handle.key] = label
        return label

    @staticmethod
    def _offset(offsets: Any, key: str) -> Point2D:
        if callable(offsets):
            value = offsets(key)
        elif isinstance(offsets, dict):
            value = offsets.get(key)
        else:
            value = None
        if not value:
            return (0.0, 0.0)
        return (float(value[0]), float(value[1]))

    def get(self, category: "Category | str", key: str) -> Optional[Label]:
        return self.labels[Category.coerce(category)].get(key)

    def remove(self, category: "Category | str", key: str) -> None:
        label = self.labels[Category.coerce(category)].pop(key, None)
        if label is not None:
            label.remove()

    def reposition(self, state: ViewportState) -> None:
        """Move every label to its anchor's screen position under state."""
        for table in self.labels.values():
            for label in table.values():
                label.reposition(state)

    def __len__(self) -> int:
        return sum(len(table) for table in self.labels.values())
