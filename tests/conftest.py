"""Shared pytest fixtures for vectormap tests.

Provides a small registered test map, host documents and a map factory.
All fixtures use explicit values with documented rationale.

TEST MAP GEOMETRY:
    Map space is 100 x 50. The default test container is 200 x 100, so the
    fitted base transform is exactly scale=2, translate=(0, 0) and screen
    coordinates are simply map coordinates doubled.

    Inset A: bbox (0,0)-(10,10)   drawn at left=0,  top=0,  40 x 40
    Inset B: bbox (20,20)-(30,30) drawn at left=60, top=10, 20 x 20

    Region "A" covers inset A's drawing area, region "B" covers inset B's,
    region "C" is a thin strip on the right edge.
"""

from typing import Any, Callable, Iterator

import pytest

from vectormap.core.event_registry import EventRegistry
from vectormap.core.geometry import MapDefinition, MapRegistry
from vectormap.ui.controller import VectorMap
from vectormap.ui.host import Document, Element

CONTAINER_WIDTH = 200
CONTAINER_HEIGHT = 100

TEST_MAP_DATA: dict[str, Any] = {
    "name": "test_map",
    "width": 100,
    "height": 50,
    "insets": [
        {"bbox": [{"x": 0, "y": 0}, {"x": 10, "y": 10}], "left": 0, "top": 0, "width": 40, "height": 40},
        {"bbox": [[20, 20], [30, 30]], "left": 60, "top": 10, "width": 20, "height": 20},
    ],
    "paths": {
        "A": {"name": "Alpha", "path": [[0, 0], [40, 0], [40, 40], [0, 40]]},
        "B": {"name": "Beta", "path": [[60, 10], [80, 10], [80, 30], [60, 30]]},
        "C": {"name": "Gamma", "path": [[85, 5], [95, 5], [95, 45], [85, 45]]},
    },
}


# =============================================================================
# MAP DEFINITION
# =============================================================================


@pytest.fixture(autouse=True)
def registered_map() -> Iterator[MapDefinition]:
    """Register the test map for the duration of one test."""
    definition = MapRegistry.register(MapDefinition.from_dict(data=TEST_MAP_DATA))
    yield definition
    MapRegistry.unregister(definition.name)


# =============================================================================
# HOST DOCUMENTS
# =============================================================================


def _add_containers(document: Document) -> Document:
    for element_id in ("map", "map2"):
        document.body.append(Element(element_id=element_id, width=CONTAINER_WIDTH, height=CONTAINER_HEIGHT))
    return document


@pytest.fixture
def document() -> Document:
    """Interactive document with two 200x100 containers (#map, #map2)."""
    return _add_containers(Document(ready=True))


@pytest.fixture
def loading_document() -> Document:
    """Document that is still loading; call mark_ready() to fire the readiness signal."""
    return _add_containers(Document(ready=False))


@pytest.fixture
def touch_document() -> Document:
    """Interactive, touch-capable document."""
    return _add_containers(Document(ready=True, supports_touch=True))


@pytest.fixture
def event_registry() -> EventRegistry:
    """Fresh listener registry so tests never see each other's subscriptions."""
    return EventRegistry()


# =============================================================================
# MAP FACTORY
# =============================================================================


@pytest.fixture
def make_map(document: Document, event_registry: EventRegistry) -> Callable[..., VectorMap]:
    """Factory building VectorMap instances on the test map.

    Usage:
        vmap = make_map(regionsSelectable=True)
        vmap = make_map(document=loading_document, selector="#map2")
    """

    def _make(document: Document = document, registry: EventRegistry = event_registry, **options: Any) -> VectorMap:
        merged = {"map": "test_map", "selector": "#map"}
        merged.update(options)
        return VectorMap(options=merged, document=document, registry=registry)

    return _make


@pytest.fixture
def vmap(make_map: Callable[..., VectorMap]) -> VectorMap:
    """Ready map with default options."""
    return make_map()
