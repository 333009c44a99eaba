"""Interaction bindings - container gestures and entity clicks/hover.

All listeners are bound through the owning map's bind() so they land in
the shared EventRegistry and are released on destroy().

Container gestures:
    mousedown/mousemove/mouseup  drag to pan (draggable)
    wheel                        zoom at the pointer (zoomOnScroll)
    touchstart/touchmove         one finger pans, two fingers pinch

Entity events are delegated on the container: the event's target element
carries data["category"] and data["key"].
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from vectormap.constants import ClassNames, ViewportConfig
from vectormap.model.entity import Category
from vectormap.model.events import MapEvent
from vectormap.ui.host import Element

if TYPE_CHECKING:
    from vectormap.ui.controller import VectorMap

logger = logging.getLogger(__name__)


# =============================================================================
# Event types
# =============================================================================


@dataclass
class PointerEvent:
    """Mouse event in container (screen) coordinates.

    Attributes:
        x: Pointer X relative to the container
        y: Pointer Y relative to the container
        target: Element under the pointer (None for empty background)
    """

    x: float
    y: float
    target: Optional[Element] = None


@dataclass
class WheelEvent:
    """Scroll wheel event; positive delta_y scrolls down (zooms out)."""

    x: float
    y: float
    delta_y: float


@dataclass
class TouchEvent:
    """Touch event with the positions of all active touches."""

    touches: list[tuple[float, float]] = field(default_factory=list)


def wheel_zoom_factor(delta_y: float, speed: float, exponent: float) -> float:
    """Scale factor for one wheel tick: (1 + speed / 1000) ** (exponent * delta_y).

    Computed in log space with a bounded exponent, so any delta yields a
    finite positive factor and the viewport's zoom limits do the clamping.
    """
    limit = ViewportConfig.WHEEL_LOG_FACTOR_LIMIT
    log_factor = exponent * delta_y * math.log1p(speed / 1000)
    return math.exp(max(-limit, min(limit, log_factor)))


def entity_target(event: Optional[PointerEvent]) -> Optional[tuple[Category, str]]:
    """(category, key) of the entity element an event targets, if any."""
    if event is None or event.target is None:
        return None
    category = event.target.data.get("category")
    key = event.target.data.get("key")
    if category is None or key is None:
        return None
    return Category.coerce(category), key


# =============================================================================
# Bindings
# =============================================================================


class InteractionHandler:
    """Translates host events into viewport and selection changes.

    Holds only gesture-tracking state (last drag/touch positions); the map
    owns the viewport and the selection.
    """

    def __init__(self, map_: VectorMap) -> None:
        self.map = map_
        self._drag_origin: Optional[tuple[float, float]] = None
        self._touch_points: list[tuple[float, float]] = []

    # -------------------------------------------------------------------------
    # Container gestures
    # -------------------------------------------------------------------------

    def bind_container_events(self) -> None:
        container = self.map.container
        params = self.map.params

        if params["draggable"]:
            self.map.bind(container, "mousedown", self.on_mouse_down)
            self.map.bind(container, "mousemove", self.on_mouse_move)
            self.map.bind(container, "mouseup", self.on_mouse_up)

        if params["zoomOnScroll"]:
            self.map.bind(container, "wheel", self.on_wheel)

    def on_mouse_down(self, event: PointerEvent) -> None:
        self._drag_origin = (event.x, event.y)

    def on_mouse_move(self, event: PointerEvent) -> None:
        if self._drag_origin is None:
            return
        last_x, last_y = self._drag_origin
        self._drag_origin = (event.x, event.y)
        self.map.viewport.pan(delta_x=event.x - last_x, delta_y=event.y - last_y)
        self.map.apply_transform()

    def on_mouse_up(self, event: PointerEvent) -> None:
        self._drag_origin = None

    def on_wheel(self, event: WheelEvent) -> None:
        factor = wheel_zoom_factor(
            delta_y=event.delta_y,
            speed=self.map.params["zoomOnScrollSpeed"],
            exponent=self.map.wheel_exponent,
        )
        self.map.viewport.apply_zoom(factor=factor, anchor=(event.x, event.y))
        self.map.apply_transform()

    # -------------------------------------------------------------------------
    # Zoom buttons
    # -------------------------------------------------------------------------

    def create_zoom_buttons(self) -> tuple[Element, Element]:
        container = self.map.container
        zoom_in = container.append(Element(tag="button", classes=[ClassNames.ZOOM_BUTTONS, ClassNames.ZOOM_IN]))
        zoom_in.text = "+"
        zoom_out = container.append(Element(tag="button", classes=[ClassNames.ZOOM_BUTTONS, ClassNames.ZOOM_OUT]))
        zoom_out.text = "-"

        self.map.bind(zoom_in, "click", lambda event: self.map.zoom_in())
        self.map.bind(zoom_out, "click", lambda event: self.map.zoom_out())
        return zoom_in, zoom_out

    # -------------------------------------------------------------------------
    # Touch
    # -------------------------------------------------------------------------

    def bind_touch_events(self) -> None:
        container = self.map.container
        self.map.bind(container, "touchstart", self.on_touch_start)
        self.map.bind(container, "touchmove", self.on_touch_move)
        self.map.bind(container, "touchend", self.on_touch_start)

    def on_touch_start(self, event: TouchEvent) -> None:
        self._touch_points = list(event.touches)

    def on_touch_move(self, event: TouchEvent) -> None:
        touches = list(event.touches)
        previous = self._touch_points
        self._touch_points = touches

        if len(touches) == 1 and len(previous) == 1:
            (x, y), (last_x, last_y) = touches[0], previous[0]
            self.map.viewport.pan(delta_x=x - last_x, delta_y=y - last_y)
            self.map.apply_transform()
        elif len(touches) == 2 and len(previous) == 2:
            before = math.dist(previous[0], previous[1])
            after = math.dist(touches[0], touches[1])
            if before == 0 or after == 0:
                return
            mid_x = (touches[0][0] + touches[1][0]) / 2
            mid_y = (touches[0][1] + touches[1][1]) / 2
            self.map.viewport.apply_zoom(factor=after / before, anchor=(mid_x, mid_y))
            self.map.apply_transform()

    # -------------------------------------------------------------------------
    # Entity events
    # -------------------------------------------------------------------------

    def bind_element_events(self) -> None:
        container = self.map.container
        self.map.bind(container, "click", self.on_click)
        self.map.bind(container, "mouseover", self.on_mouse_over)
        self.map.bind(container, "mouseout", self.on_mouse_out)

    def on_click(self, event: PointerEvent) -> None:
        target = entity_target(event)
        if target is None:
            return
        category, key = target
        handle = self.map.registry.get(category, key)
        if handle is None:
            return

        prefix = category.singular
        if self.map.params[f"{category.value}Selectable"]:
            if self.map.params[f"{category.value}SelectableOne"] and not handle.selected:
                self.map.clear_selected(category)
            is_selected = handle.toggle()
            self.map.emit(
                MapEvent(f"{prefix}:selected"),
                key,
                is_selected,
                self.map.get_selected(category),
            )

        self.map.emit(MapEvent(f"{prefix}:clicked"), event, key)

    def on_mouse_over(self, event: PointerEvent) -> None:
        target = entity_target(event)
        if target is None:
            return
        category, key = target
        handle = self.map.registry.get(category, key)
        if handle is None:
            return

        handle.element.set_hovered(True)
        tooltip = self.map.tooltip
        if tooltip is not None:
            tooltip.text = handle.name
            self.map.emit(MapEvent(f"{category.singular}.tooltip:show"), tooltip, key)
            tooltip.show(x=event.x, y=event.y)

    def on_mouse_out(self, event: PointerEvent) -> None:
        target = entity_target(event)
        if target is None:
            return
        category, key = target
        handle = self.map.registry.get(category, key)
        if handle is not None:
            handle.element.set_hovered(False)
        if self.map.tooltip is not None:
            self.map.tooltip.hide()
