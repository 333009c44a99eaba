"""Tests for map definitions, insets and the point -> inset index.

Tests: Inset, MapDefinition, GeometryIndex, MapRegistry, built-in maps
Focus: Exclusive inset bounds, deterministic resolution, configuration errors

Note: The test map (insets A and B) is registered by conftest.py.
"""

import json
from pathlib import Path

import pytest

from vectormap.core.geometry import GeometryIndex, Inset, MapDefinition, MapRegistry
from vectormap.errors import ConfigurationError
from vectormap.maps import register_builtin_maps


class TestInset:
    """Inset - bounding box with strict containment."""

    def test_contains_interior_point(self) -> None:
        inset = Inset(bbox=((0.0, 0.0), (10.0, 10.0)))
        assert inset.contains(x=5.0, y=5.0)

    @pytest.mark.parametrize(
        "x, y",
        [
            (0.0, 5.0),  # left edge
            (10.0, 5.0),  # right edge
            (5.0, 0.0),  # top edge
            (5.0, 10.0),  # bottom edge
            (10.0, 10.0),  # corner
        ],
    )
    def test_boundary_is_excluded(self, x: float, y: float) -> None:
        """Points on the bbox edge belong to no inset."""
        inset = Inset(bbox=((0.0, 0.0), (10.0, 10.0)))
        assert inset.contains(x=x, y=y) is False

    def test_from_dict_accepts_both_bbox_layouts(self) -> None:
        as_dicts = Inset.from_dict({"bbox": [{"x": 1, "y": 2}, {"x": 3, "y": 4}], "left": 5})
        as_lists = Inset.from_dict({"bbox": [[1, 2], [3, 4]], "left": 5})
        assert as_dicts == as_lists
        assert as_dicts.bbox == ((1.0, 2.0), (3.0, 4.0))
        assert as_dicts.left == 5.0


class TestMapDefinition:
    """MapDefinition - immutable, validated map metadata."""

    def test_from_dict(self, registered_map: MapDefinition) -> None:
        assert registered_map.name == "test_map"
        assert registered_map.width == 100
        assert registered_map.height == 50
        assert len(registered_map.insets) == 2
        assert list(registered_map.paths) == ["A", "B", "C"]
        assert registered_map.paths["A"].name == "Alpha"

    def test_paths_are_read_only(self, registered_map: MapDefinition) -> None:
        with pytest.raises(TypeError):
            registered_map.paths["Z"] = registered_map.paths["A"]  # type: ignore[index]

    @pytest.mark.parametrize("width", [0, -10, float("inf"), float("nan")])
    def test_invalid_width_raises(self, width: float) -> None:
        with pytest.raises(ConfigurationError, match="invalid width"):
            MapDefinition(name="bad", width=width, height=10)

    def test_missing_height_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Malformed"):
            MapDefinition.from_dict({"name": "bad", "width": 10})

    def test_missing_name_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="no name"):
            MapDefinition.from_dict({"width": 10, "height": 10})

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            MapDefinition.from_dict({"name": "bad", "width": "wide", "height": 10})


class TestGeometryIndex:
    """GeometryIndex - point to inset routing."""

    @pytest.fixture
    def index(self, registered_map: MapDefinition) -> GeometryIndex:
        return GeometryIndex(definition=registered_map)

    def test_resolves_first_inset(self, index: GeometryIndex) -> None:
        assert index.resolve_inset(x=5, y=5) is index.insets[0]

    def test_resolves_second_inset(self, index: GeometryIndex) -> None:
        assert index.resolve_inset(x=25, y=25) is index.insets[1]

    def test_gap_between_insets(self, index: GeometryIndex) -> None:
        assert index.resolve_inset(x=15, y=15) is None

    def test_shared_edge_resolves_to_none(self, index: GeometryIndex) -> None:
        assert index.resolve_inset(x=10, y=5) is None
        assert index.resolve_inset(x=20, y=25) is None

    def test_resolution_is_deterministic(self, index: GeometryIndex) -> None:
        results = {id(index.resolve_inset(x=5, y=5)) for _ in range(10)}
        assert len(results) == 1

    def test_project_to_map_rescales_through_inset(self, index: GeometryIndex) -> None:
        # Inset A: 10x10 bbox drawn as 40x40 at (0, 0)
        assert index.project_to_map(x=5, y=5) == pytest.approx((20.0, 20.0))
        # Inset B: 10x10 bbox drawn as 20x20 at (60, 10)
        assert index.project_to_map(x=25, y=25) == pytest.approx((70.0, 20.0))

    def test_project_outside_every_inset(self, index: GeometryIndex) -> None:
        assert index.project_to_map(x=50, y=50) is None

    def test_dimensions(self, index: GeometryIndex) -> None:
        assert (index.width, index.height) == (100, 50)


class TestMapRegistry:
    """MapRegistry - process-wide definition table."""

    def test_get_unknown_map(self) -> None:
        with pytest.raises(ConfigurationError, match="Attempt to use map which was not loaded: nowhere"):
            MapRegistry.get("nowhere")

    def test_get_none(self) -> None:
        with pytest.raises(ConfigurationError):
            MapRegistry.get(None)

    def test_registered_names(self) -> None:
        assert "test_map" in MapRegistry.names()
        assert MapRegistry.is_registered("test_map")

    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "tiny.json"
        path.write_text(json.dumps({"width": 10, "height": 5, "paths": {"X": {"path": [[0, 0], [1, 0], [1, 1]]}}}))
        try:
            definition = MapRegistry.load_file(path)
            assert definition.name == "tiny"
            assert MapRegistry.get("tiny") is definition
            assert definition.paths["X"].name == "X"
        finally:
            MapRegistry.unregister("tiny")

    def test_load_file_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Failed to load"):
            MapRegistry.load_file(path)
        assert not MapRegistry.is_registered("broken")

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            MapRegistry.load_file(tmp_path / "missing.json")


class TestBuiltinMaps:
    """Built-in JSON maps shipped with the package."""

    def test_register_builtin_maps(self) -> None:
        try:
            definitions = register_builtin_maps()
            names = [d.name for d in definitions]
            assert "demo_islands" in names

            demo = MapRegistry.get("demo_islands")
            assert len(demo.insets) == 2
            assert "north" in demo.paths
        finally:
            MapRegistry.unregister("demo_islands")
