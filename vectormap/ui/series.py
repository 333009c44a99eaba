"""Data series - color regions/markers by data values, with optional legends.

Series config (one list per category):
    {
        "values": {"FR": 12.0, "DE": 30.5},      # key -> number or category
        "scale": ["#c8eeff", "#0071a4"],          # numeric gradient, or
        "scale": {"low": "#00ff00", "high": "#ff0000"},  # ordinal mapping
        "attribute": "fill",                       # style property to set
        "min": 0, "max": 100,                      # optional numeric bounds
        "legend": {"title": "GDP", "vertical": True},
    }
"""

import logging
from typing import Any, Optional

import numpy as np

from vectormap.constants import ClassNames, StyleConfig
from vectormap.model.entity import Category
from vectormap.model.registry import EntityRegistry
from vectormap.ui.host import Element

logger = logging.getLogger(__name__)


def hex_to_rgb(color: str) -> np.ndarray:
    color = color.lstrip("#")
    return np.array([int(color[i : i + 2], 16) for i in (0, 2, 4)], dtype=float)


def rgb_to_hex(rgb: np.ndarray) -> str:
    r, g, b = (int(round(c)) for c in np.clip(rgb, 0, 255))
    return f"#{r:02x}{g:02x}{b:02x}"


def interpolate_color(low: str, high: str, t: float) -> str:
    """Linear RGB interpolation, t clipped to [0, 1]."""
    t = float(np.clip(t, 0.0, 1.0))
    return rgb_to_hex(hex_to_rgb(low) + (hex_to_rgb(high) - hex_to_rgb(low)) * t)


class Legend:
    """Legend block for one series, appended to a legend container."""

    def __init__(self, container: Element, title: str, entries: list[tuple[str, str]]) -> None:
        self.element = container.append(Element(tag="div", classes=[ClassNames.LEGEND]))
        if title:
            heading = self.element.append(Element(tag="div"))
            heading.text = title
        for label, color in entries:
            tick = self.element.append(Element(tag="div"))
            tick.text = label
            tick.css(swatch=color)

    def remove(self) -> None:
        self.element.remove()


class DataSeries:
    """One data series applied to the entities of a category.

    Example:
        series = DataSeries(category=Category.REGIONS, config=cfg, registry=registry)
        series.set_values({"FR": 10})
        series.clear()
    """

    def __init__(
        self,
        category: Category,
        config: dict[str, Any],
        registry: EntityRegistry,
        legend_container: Optional[Element] = None,
    ) -> None:
        self.category = category
        self.config = config
        self.registry = registry
        self.attribute = config.get("attribute", "fill")
        self.scale = config.get("scale", list(StyleConfig.SERIES_SCALE))
        self.values: dict[str, Any] = {}
        self.legend: Optional[Legend] = None

        self.set_values(config.get("values", {}))

        legend_config = config.get("legend")
        if legend_config and legend_container is not None:
            self.legend = Legend(
                container=legend_container,
                title=legend_config.get("title", ""),
                entries=self.legend_entries(),
            )

    @property
    def is_ordinal(self) -> bool:
        return isinstance(self.scale, dict)

    def _bounds(self) -> tuple[float, float]:
        numeric = [float(v) for v in self.values.values()]
        low = float(self.config.get("min", min(numeric, default=0.0)))
        high = float(self.config.get("max", max(numeric, default=1.0)))
        return low, high

    def color_for(self, value: Any) -> Optional[str]:
        """Style value for one data value (None if it cannot be mapped)."""
        if self.is_ordinal:
            return self.scale.get(value)

        low, high = self._bounds()
        t = 0.0 if high == low else (float(value) - low) / (high - low)
        return interpolate_color(low=self.scale[0], high=self.scale[-1], t=t)

    def set_values(self, values: dict[str, Any]) -> None:
        """Merge values and restyle. Unknown keys are ignored.

        Numeric series restyle every value when the merge moves the scale
        bounds, otherwise only the merged keys.
        """
        previous_bounds = None if self.is_ordinal else self._bounds()
        self.values.update(values)
        if self.is_ordinal or self._bounds() == previous_bounds:
            keys = list(values)
        else:
            keys = list(self.values)

        for key in keys:
            handle = self.registry.get(self.category, key)
            if handle is None:
                continue
            color = self.color_for(self.values[key])
            if color is not None:
                handle.element.set_style(**{self.attribute: color})

    def clear(self) -> None:
        """Remove this series' attribute from every entity it touched."""
        for key in self.values:
            handle = self.registry.get(self.category, key)
            if handle is not None:
                handle.element.clear_override(self.attribute)
        self.values = {}

    def legend_entries(self) -> list[tuple[str, str]]:
        if self.is_ordinal:
            return [(str(label), color) for label, color in self.scale.items()]
        low, high = self._bounds()
        return [(f"{low:g}", self.scale[0]), (f"{high:g}", self.scale[-1])]
