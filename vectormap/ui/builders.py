"""Entity builders - turn map shapes and marker configs into entity handles.

Regions come from the map definition's paths. Markers come from options:
    {"name": "Paris", "point": (x, y)}    map-space position
    {"name": "Honolulu", "coords": (x, y)} projected position, routed
                                           through the inset index
Markers whose coords fall in no inset are skipped with a warning.
"""

import logging
from typing import Any, Optional

from vectormap.core.geometry import GeometryIndex, MapDefinition
from vectormap.model.entity import Category, EntityHandle
from vectormap.ui.surface import RenderSurface

logger = logging.getLogger(__name__)


def merge_style(base: dict[str, dict[str, Any]], extra: Optional[dict[str, dict[str, Any]]]) -> dict[str, dict[str, Any]]:
    """Merge a per-entity style table over the default one, state by state."""
    merged = {state: dict(values) for state, values in base.items()}
    for state, values in (extra or {}).items():
        merged.setdefault(state, {}).update(values)
    return merged


def build_regions(
    surface: RenderSurface,
    definition: MapDefinition,
    style: dict[str, dict[str, Any]],
) -> dict[str, EntityHandle]:
    """Create one region handle per path in the map definition.

    Returns:
        Dict of key -> handle in definition order.
    """
    handles: dict[str, EntityHandle] = {}
    for key, shape in definition.paths.items():
        element = surface.add_region(key=key, points=shape.points, style=style)
        element.data["name"] = shape.name
        handles[key] = EntityHandle(key=key, category=Category.REGIONS, element=element, name=shape.name)

    logger.debug(f"Built {len(handles)} region(s) for map '{definition.name}'")
    return handles


def resolve_marker_point(config: dict[str, Any], geometry: GeometryIndex) -> Optional[tuple[float, float]]:
    """Map-space position for a marker config, or None if it cannot be placed."""
    if "point" in config:
        x, y = config["point"]
        return (float(x), float(y))
    if "coords" in config:
        x, y = config["coords"]
        return geometry.project_to_map(x=float(x), y=float(y))
    return None


def build_marker(
    surface: RenderSurface,
    geometry: GeometryIndex,
    key: str,
    config: dict[str, Any],
    style: dict[str, dict[str, Any]],
) -> Optional[EntityHandle]:
    """Create a single marker handle.

    Returns:
        The handle, or None if the marker has no resolvable position.
    """
    point = resolve_marker_point(config=config, geometry=geometry)
    if point is None:
        logger.warning(f"Marker '{key}' has no resolvable position, skipped: {config}")
        return None

    element = surface.add_marker(key=key, point=point, style=merge_style(style, config.get("style")))
    name = config.get("name", key)
    element.data["name"] = name
    return EntityHandle(key=key, category=Category.MARKERS, element=element, name=name, config=config)


def normalize_markers(markers: Any) -> dict[str, dict[str, Any]]:
    """Accept markers as a dict keyed by marker key or as a list (keyed by index)."""
    if not markers:
        return {}
    if isinstance(markers, dict):
        return {str(key): config for key, config in markers.items()}
    return {str(index): config for index, config in enumerate(markers)}
