"""Map definitions, insets and the point → inset index.

A map definition describes one logical coordinate space: its canonical
width/height, the region shapes drawn in it, and an ordered list of insets.
An inset is a detached sub-territory (think Alaska or Hawaii next to the
contiguous US) whose projected coordinates live inside a bounding box but
which is drawn at a different place in map space.

Definitions are registered once in the process-wide MapRegistry and shared
read-only by every map instance that references them.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from shapely.geometry import Point, box

from vectormap.errors import ConfigurationError

logger = logging.getLogger(__name__)

# ((min_x, min_y), (max_x, max_y)) in logical coordinates
BoundingBox = tuple[tuple[float, float], tuple[float, float]]


@dataclass(frozen=True)
class Inset:
    """A bounding region mapped to a detached sub-territory.

    Attributes:
        bbox: ((min_x, min_y), (max_x, max_y)) in projected coordinates
        left: X offset of the sub-territory in map space
        top: Y offset of the sub-territory in map space
        width: Drawn width in map space
        height: Drawn height in map space
    """

    bbox: BoundingBox
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @cached_property
    def box(self):
        """Shapely polygon for the bounding box."""
        (min_x, min_y), (max_x, max_y) = self.bbox
        return box(min_x, min_y, max_x, max_y)

    def contains(self, x: float, y: float) -> bool:
        """True if the point lies strictly inside the bounding box.

        Shapely's contains() excludes the boundary, which gives the
        exclusive-bounds rule for adjacent insets.
        """
        return self.box.contains(Point(x, y))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Inset":
        """Create Inset from the JSON map-file layout.

        Accepts bbox as [{"x": .., "y": ..}, {"x": .., "y": ..}] or as
        [[x, y], [x, y]].
        """
        raw_min, raw_max = data["bbox"]
        if isinstance(raw_min, dict):
            bbox = ((float(raw_min["x"]), float(raw_min["y"])), (float(raw_max["x"]), float(raw_max["y"])))
        else:
            bbox = ((float(raw_min[0]), float(raw_min[1])), (float(raw_max[0]), float(raw_max[1])))
        return cls(
            bbox=bbox,
            left=float(data.get("left", 0.0)),
            top=float(data.get("top", 0.0)),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
        )


@dataclass(frozen=True)
class RegionShape:
    """Static outline of one region in map space."""

    key: str
    points: tuple[tuple[float, float], ...]
    name: str = ""


@dataclass(frozen=True)
class MapDefinition:
    """Immutable per-map metadata shared by every instance using it.

    Attributes:
        name: Identifier integrators pass as the "map" option
        width: Canonical width of the map space
        height: Canonical height of the map space
        insets: Ordered insets (first match wins on ties)
        paths: Read-only mapping of region key -> RegionShape
    """

    name: str
    width: float
    height: float
    insets: tuple[Inset, ...] = ()
    paths: Mapping[str, RegionShape] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        """Validate dimensions and freeze the paths mapping."""
        for label, value in (("width", self.width), ("height", self.height)):
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"Map '{self.name}' has invalid {label}: {value}")
        if not isinstance(self.paths, MappingProxyType):
            object.__setattr__(self, "paths", MappingProxyType(dict(self.paths)))
        object.__setattr__(self, "insets", tuple(self.insets))

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: Optional[str] = None) -> "MapDefinition":
        """Create MapDefinition from a parsed map file.

        Args:
            data: Parsed JSON with width, height, insets and paths
            name: Override for the map name (defaults to data["name"])

        Raises:
            ConfigurationError: If required fields are missing or invalid
        """
        map_name = name or data.get("name")
        if not map_name:
            raise ConfigurationError("Map definition has no name")
        try:
            paths = {
                key: RegionShape(
                    key=key,
                    points=tuple((float(x), float(y)) for x, y in shape["path"]),
                    name=shape.get("name", key),
                )
                for key, shape in data.get("paths", {}).items()
            }
            return cls(
                name=map_name,
                width=float(data["width"]),
                height=float(data["height"]),
                insets=tuple(Inset.from_dict(inset) for inset in data.get("insets", [])),
                paths=paths,
            )
        except ConfigurationError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Malformed map definition '{map_name}': {e}") from e


class GeometryIndex:
    """Routes logical points to the inset (sub-territory) containing them.

    Example:
        index = GeometryIndex(definition=MapRegistry.get("demo_islands"))
        inset = index.resolve_inset(x=5.0, y=5.0)
    """

    def __init__(self, definition: MapDefinition) -> None:
        self.definition = definition

    @property
    def width(self) -> float:
        return self.definition.width

    @property
    def height(self) -> float:
        return self.definition.height

    @property
    def insets(self) -> tuple[Inset, ...]:
        return self.definition.insets

    def resolve_inset(self, x: float, y: float) -> Optional[Inset]:
        """Return the first inset whose bbox strictly contains (x, y).

        Args:
            x: X in logical (projected) coordinates
            y: Y in logical (projected) coordinates

        Returns:
            Matching Inset, or None if the point belongs to the base map space.
        """
        for inset in self.definition.insets:
            if inset.contains(x=x, y=y):
                return inset
        return None

    def project_to_map(self, x: float, y: float) -> Optional[tuple[float, float]]:
        """Rescale a projected point into map space through its inset.

        Args:
            x: X in projected coordinates
            y: Y in projected coordinates

        Returns:
            (x, y) in map space, or None if no inset contains the point.
        """
        inset = self.resolve_inset(x=x, y=y)
        if inset is None:
            return None

        (min_x, min_y), (max_x, max_y) = inset.bbox
        map_x = inset.left + (x - min_x) / (max_x - min_x) * inset.width
        map_y = inset.top + (y - min_y) / (max_y - min_y) * inset.height
        return (map_x, map_y)


class MapRegistry:
    """Process-wide table of registered map definitions.

    Definitions must be registered before any map instance references them.
    """

    _maps: dict[str, MapDefinition] = {}

    @classmethod
    def register(cls, definition: MapDefinition) -> MapDefinition:
        """Register (or replace) a definition under its name."""
        if definition.name in cls._maps:
            logger.warning(f"Replacing registered map '{definition.name}'")
        cls._maps[definition.name] = definition
        logger.debug(f"Registered map '{definition.name}' ({len(definition.paths)} regions)")
        return definition

    @classmethod
    def get(cls, name: Optional[str]) -> MapDefinition:
        """Look up a registered definition.

        Raises:
            ConfigurationError: If no map is registered under this name
        """
        definition = cls._maps.get(name) if name is not None else None
        if definition is None:
            raise ConfigurationError(f"Attempt to use map which was not loaded: {name}")
        return definition

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._maps

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._maps.pop(name, None)

    @classmethod
    def names(cls) -> list[str]:
        return list(cls._maps)

    @classmethod
    def load_file(cls, path: Path) -> MapDefinition:
        """Load a JSON map file and register it.

        Raises:
            ConfigurationError: If the file cannot be parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load map file {path}: {e}") from e

        definition = MapDefinition.from_dict(data=data, name=data.get("name") or Path(path).stem)
        logger.info(f"Loaded map '{definition.name}' from {path}")
        return cls.register(definition)
