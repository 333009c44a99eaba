"""Render surface - the drawing collaborator the engine calls into.

The engine only uses the RenderSurface interface: attach, size, background,
bounds queries, transform application, and shape creation. It never touches
drawing primitives itself.

PlotlySurface is the default implementation. It keeps shapes as host
elements (so they can be removed, styled and hit-tested like any other
element) and exports the current view as a Plotly figure.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

import plotly.graph_objects as go
from shapely.geometry import Point, Polygon
from shapely.ops import unary_union

from vectormap.constants import ClassNames
from vectormap.core.viewport import ViewportState
from vectormap.ui.host import Element

logger = logging.getLogger(__name__)

Bounds = tuple[float, float, float, float]  # (min_x, min_y, max_x, max_y)


# =============================================================================
# Shape elements
# =============================================================================


class ShapeElement(Element):
    """Host element carrying geometry and state-dependent style.

    Style is composed from the style table in this order:
    initial, then override (data series), then hover / selected /
    selectedHover when those states are active.
    """

    def __init__(
        self,
        tag: str,
        category: str,
        key: str,
        geometry: Any,
        style: dict[str, dict[str, Any]],
        classes: Optional[list[str]] = None,
    ) -> None:
        super().__init__(tag=tag, classes=classes)
        self.geometry = geometry
        self.style_table = {state: dict(values) for state, values in style.items()}
        self.override: dict[str, Any] = {}
        self.is_selected = False
        self.is_hovered = False
        self.data.update(category=category, key=key)
        self._refresh()

    @property
    def key(self) -> str:
        return self.data["key"]

    @property
    def category(self) -> str:
        return self.data["category"]

    @property
    def bounds(self) -> Optional[Bounds]:
        if self.geometry is None or self.geometry.is_empty:
            return None
        return tuple(self.geometry.bounds)

    def set_selected(self, selected: bool) -> None:
        self.is_selected = selected
        self._refresh()

    def set_hovered(self, hovered: bool) -> None:
        self.is_hovered = hovered
        self._refresh()

    def set_style(self, **properties: Any) -> None:
        """Override initial style properties (used by data series)."""
        self.override.update(properties)
        self._refresh()

    def clear_override(self, *properties: str) -> None:
        """Drop the named override properties, or all of them when none are given."""
        if properties:
            for name in properties:
                self.override.pop(name, None)
        else:
            self.override.clear()
        self._refresh()

    def _refresh(self) -> None:
        style = dict(self.style_table.get("initial", {}))
        style.update(self.override)
        if self.is_hovered:
            style.update(self.style_table.get("hover", {}))
        if self.is_selected:
            style.update(self.style_table.get("selected", {}))
        if self.is_selected and self.is_hovered:
            style.update(self.style_table.get("selectedHover", {}))
        self.style = style


class RegionElement(ShapeElement):
    """Polygon outline of a region in map space."""

    def __init__(self, key: str, points: Iterable[tuple[float, float]], style: dict[str, dict[str, Any]]) -> None:
        points = list(points)
        geometry = Polygon(points) if len(points) >= 3 else None
        super().__init__(
            tag="path",
            category="regions",
            key=key,
            geometry=geometry,
            style=style,
            classes=[ClassNames.REGION],
        )
        self.points = points


class MarkerElement(ShapeElement):
    """Point marker in map space."""

    def __init__(self, key: str, point: tuple[float, float], style: dict[str, dict[str, Any]]) -> None:
        super().__init__(
            tag="circle",
            category="markers",
            key=key,
            geometry=Point(point),
            style=style,
            classes=[ClassNames.MARKER],
        )
        self.point = (float(point[0]), float(point[1]))


# =============================================================================
# Surface interface
# =============================================================================


class RenderSurface(ABC):
    """Drawing collaborator constructed with (container, width, height)."""

    def __init__(self, container: Element, width: float, height: float) -> None:
        self.container = container
        self.width = width
        self.height = height
        self.root = Element(tag="surface", classes=[ClassNames.SURFACE], width=width, height=height)
        self.regions_group = self.root.append(Element(tag="g", classes=[ClassNames.REGIONS_GROUP]))
        self.markers_group = self.root.append(Element(tag="g", classes=[ClassNames.MARKERS_GROUP]))
        self.labels_group = self.root.append(Element(tag="g", classes=[ClassNames.LABELS_GROUP]))
        self.transform: Optional[ViewportState] = None
        self.background: Optional[str] = None

    @property
    def is_attached(self) -> bool:
        return self.root.parent is self.container

    def attach(self) -> None:
        """Attach the surface root to the container."""
        self.container.append(self.root)

    def set_size(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self.root.width = width
        self.root.height = height

    def set_background(self, color: str) -> None:
        self.background = color
        self.container.css(background_color=color)

    def region_elements(self) -> list[RegionElement]:
        return [child for child in self.regions_group.children if isinstance(child, RegionElement)]

    def marker_elements(self) -> list[MarkerElement]:
        return [child for child in self.markers_group.children if isinstance(child, MarkerElement)]

    def get_bounds(self, elements: Optional[Iterable[ShapeElement]] = None) -> Optional[Bounds]:
        """Union bounds of the given elements (all attached regions by default)."""
        if elements is None:
            elements = self.region_elements()
        geometries = [e.geometry for e in elements if e.geometry is not None and not e.geometry.is_empty]
        if not geometries:
            return None
        return tuple(unary_union(geometries).bounds)

    def add_region(self, key: str, points: Iterable[tuple[float, float]], style: dict[str, dict[str, Any]]) -> RegionElement:
        return self.regions_group.append(RegionElement(key=key, points=points, style=style))

    def add_marker(self, key: str, point: tuple[float, float], style: dict[str, dict[str, Any]]) -> MarkerElement:
        return self.markers_group.append(MarkerElement(key=key, point=point, style=style))

    @abstractmethod
    def apply_transform(self, state: ViewportState) -> None:
        """Apply a viewport transform to the rendered content."""


# =============================================================================
# Plotly implementation
# =============================================================================


class PlotlySurface(RenderSurface):
    """Surface exporting the current view as a Plotly figure.

    Example:
        surface = PlotlySurface(container=container, width=800, height=400)
        surface.attach()
        fig = surface.to_figure()
        st.plotly_chart(fig)
    """

    def apply_transform(self, state: ViewportState) -> None:
        self.transform = state
        logger.debug(f"Surface transform: {state.as_tuple()}")

    def visible_range(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """Map-space ((x0, x1), (y_bottom, y_top)) currently on screen.

        The y range is returned top-down reversed so Plotly draws map y
        growing downwards, like screen coordinates.
        """
        if self.transform is None:
            return ((0.0, self.width), (self.height, 0.0))
        s, tx, ty = self.transform.as_tuple()
        x_range = ((0 - tx) / s, (self.width - tx) / s)
        y_range = ((self.height - ty) / s, (0 - ty) / s)
        return x_range, y_range

    def to_figure(self) -> go.Figure:
        """Build a Plotly figure of the attached regions, markers and labels."""
        fig = go.Figure()

        for region in self.region_elements():
            if not region.points:
                continue
            xs = [p[0] for p in region.points] + [region.points[0][0]]
            ys = [p[1] for p in region.points] + [region.points[0][1]]
            fig.add_trace(
                go.Scatter(
                    x=xs,
                    y=ys,
                    mode="lines",
                    fill="toself",
                    fillcolor=region.style.get("fill"),
                    line=dict(
                        color=region.style.get("stroke"),
                        width=region.style.get("stroke_width", 1.0),
                    ),
                    name=region.key,
                    text=region.data.get("name", region.key),
                    hoveron="fills",
                    hoverinfo="text",
                    customdata=[["regions", region.key]] * len(xs),
                )
            )

        markers = self.marker_elements()
        if markers:
            fig.add_trace(
                go.Scatter(
                    x=[m.point[0] for m in markers],
                    y=[m.point[1] for m in markers],
                    mode="markers",
                    marker=dict(
                        color=[m.style.get("fill") for m in markers],
                        size=[2 * m.style.get("r", 5.0) for m in markers],
                        line=dict(
                            color=[m.style.get("stroke") for m in markers],
                            width=[m.style.get("stroke_width", 1.0) for m in markers],
                        ),
                    ),
                    name="Markers",
                    text=[m.data.get("name", m.key) for m in markers],
                    hoverinfo="text",
                    customdata=[["markers", m.key] for m in markers],
                )
            )

        labels = [child for child in self.labels_group.children if "anchor" in child.data]
        if labels:
            scale = self.transform.scale if self.transform is not None else 1.0
            fig.add_trace(
                go.Scatter(
                    x=[label.data["anchor"][0] + label.data["offset"][0] / scale for label in labels],
                    y=[label.data["anchor"][1] + label.data["offset"][1] / scale for label in labels],
                    mode="text",
                    text=[label.text for label in labels],
                    textposition="middle center",
                    name="Labels",
                    hoverinfo="skip",
                )
            )

        x_range, y_range = self.visible_range()
        background = self.background if self.background not in (None, "transparent") else "rgba(0,0,0,0)"
        fig.update_layout(
            xaxis=dict(range=list(x_range), visible=False, fixedrange=True),
            yaxis=dict(range=list(y_range), visible=False, fixedrange=True),
            width=self.width,
            height=self.height,
            margin=dict(l=0, r=0, t=0, b=0),
            paper_bgcolor=background,
            plot_bgcolor=background,
            showlegend=False,
            clickmode="event+select",
        )
        return fig
