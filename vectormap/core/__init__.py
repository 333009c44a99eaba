"""Core foundation classes for map geometry, viewport math and listener bookkeeping.

- GeometryIndex: Point → inset routing for detached sub-territories
- MapDefinition / Inset / MapRegistry: Shared read-only map metadata
- ViewportTransform: Zoom/pan composition with a one-time base snapshot
- EventRegistry: Process-wide table of bound interaction listeners
"""

from vectormap.core.event_registry import EventRegistry, Subscription
from vectormap.core.geometry import (
    GeometryIndex,
    Inset,
    MapDefinition,
    MapRegistry,
    RegionShape,
)
from vectormap.core.viewport import ViewportState, ViewportTransform

__all__ = [
    # Geometry
    "GeometryIndex",
    "Inset",
    "MapDefinition",
    "MapRegistry",
    "RegionShape",
    # Viewport
    "ViewportState",
    "ViewportTransform",
    # Listener bookkeeping
    "EventRegistry",
    "Subscription",
]
