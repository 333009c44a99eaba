"""VectorMap - the lifecycle controller for one interactive map instance.

Construction validates options, then either initializes immediately (the
document is already interactive) or defers initialization to the
document's one-shot readiness signal.

Initialization runs these steps in order; later steps rely on earlier ones:
    1. attach the render surface sized to the container
    2. background color
    3. container listeners (drag pan, wheel zoom)
    4. region handles
    5. base transform (fit + set_base, exactly once)
    6. marker handles
    7. tooltip (showTooltip)
    8. zoom buttons (zoomButtons)
    9. selectedRegions / selectedMarkers
    10. focusOn
    11. touch listeners (bindTouchEvents and a touch-capable document)
    12. entity listeners (click select, hover tooltip), then labels
    13. legend containers and data series
Then the lifecycle moves to READY and "map:loaded" is emitted. A step that
raises tears down the partial build and leaves the map DESTROYED before
the error propagates.

Every listener goes through bind(), which records a Subscription handle.
destroy() releases exactly this instance's handles.
"""

import copy
import itertools
import logging
from typing import Any, Callable, Iterable, Optional

from statemachine.exceptions import TransitionNotAllowed

from vectormap.constants import AppConfig, ClassNames, MapDefaults, ViewportConfig
from vectormap.core.event_registry import EventRegistry, Subscription
from vectormap.core.geometry import GeometryIndex, Inset, MapRegistry
from vectormap.core.viewport import ViewportState, ViewportTransform
from vectormap.errors import ConfigurationError, InvalidStateError
from vectormap.model.entity import Category
from vectormap.model.events import EventEmitter, MapEvent, Unsubscribe
from vectormap.model.registry import EntityRegistry
from vectormap.model.selection import SelectionStore
from vectormap.ui.builders import build_marker, build_regions, normalize_markers
from vectormap.ui.host import READY_EVENT, Document, Element
from vectormap.ui.interaction import InteractionHandler
from vectormap.ui.labels import LabelLayer
from vectormap.ui.lifecycle import LifecycleLogListener, MapLifecycle
from vectormap.ui.series import DataSeries
from vectormap.ui.surface import PlotlySurface, RenderSurface
from vectormap.ui.tooltip import Tooltip

logger = logging.getLogger(__name__)

SurfaceFactory = Callable[[Element, float, float], RenderSurface]


def merge_options(defaults: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge options over defaults. Nested dicts merge, everything else is replaced."""
    merged = copy.deepcopy(defaults)
    for key, value in options.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_options(merged[key], value)
        else:
            merged[key] = value
    return merged


class VectorMap:
    """One interactive vector map bound to a host container.

    Example:
        vmap = VectorMap(
            options={"map": "demo_islands", "regionsSelectable": True},
            document=document,
        )
        vmap.set_selected("regions", ["north"])
        vmap.reset()
        vmap.destroy()

    Raises:
        ConfigurationError: If options["map"] is not a registered map
    """

    _ids = itertools.count(1)
    _destroyed = False

    def __init__(
        self,
        options: dict[str, Any],
        document: Optional[Document] = None,
        surface_factory: SurfaceFactory = PlotlySurface,
        registry: Optional[EventRegistry] = None,
    ) -> None:
        self.params = merge_options(MapDefaults.OPTIONS, options)
        self.definition = MapRegistry.get(self.params["map"])
        self.geometry = GeometryIndex(definition=self.definition)

        self.name = f"{self.definition.name}-{next(self._ids)}"
        self.document = document if document is not None else Document()
        self.surface_factory = surface_factory
        self.event_registry = registry if registry is not None else EventRegistry.shared()
        self.events = EventEmitter(options=self.params)
        self.registry = EntityRegistry()
        self.selection = SelectionStore(registry=self.registry)
        self.interaction = InteractionHandler(self)
        self.wheel_exponent = ViewportConfig.WHEEL_EXPONENT

        self.container: Optional[Element] = None
        self.surface: Optional[RenderSurface] = None
        self.viewport: Optional[ViewportTransform] = None
        self.tooltip: Optional[Tooltip] = None
        self.zoom_buttons: tuple[Element, ...] = ()
        self.legend_horizontal: Optional[Element] = None
        self.legend_vertical: Optional[Element] = None
        self.labels: Optional[LabelLayer] = None
        self.series: dict[Category, list[DataSeries]] = {category: [] for category in Category}
        self._subscriptions: list[Subscription] = []
        self._ready_subscription: Optional[Subscription] = None

        self.lifecycle = MapLifecycle()
        self.lifecycle.add_listener(LifecycleLogListener(name=self.name))

        if self.document.is_interactive:
            self._transition("begin_init")
            self._init()
        else:
            self._transition("wait_for_document")
            self._ready_subscription = self.bind(self.document, READY_EVENT, self._on_document_ready)
            logger.info(f"Map {self.name} waiting for the document to become interactive")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _transition(self, event: str) -> None:
        try:
            self.lifecycle.send(event)
        except TransitionNotAllowed as e:
            state_name = self.lifecycle.get_state_name()
            raise InvalidStateError(f"Map {self.name}: '{event}' not allowed in state {state_name}") from e

    def _on_document_ready(self, event: Any = None) -> None:
        self._release(self._ready_subscription)
        self._ready_subscription = None
        self._transition("begin_init")
        self._init()

    def _resolve_container(self) -> Element:
        selector = self.params["selector"]
        if selector is None:
            container = self.document.body.append(
                Element(
                    element_id=self.name,
                    width=AppConfig.CONTAINER_WIDTH,
                    height=AppConfig.CONTAINER_HEIGHT,
                )
            )
        else:
            container = self.document.query(selector)
            if container is None:
                raise ConfigurationError(f"Container not found for selector: {selector}")
        return container.add_class(ClassNames.CONTAINER)

    def _init(self) -> None:
        try:
            self._run_init_steps()
        except Exception as e:
            self._abort_init(error=e)
            raise

        self._transition("finish_init")
        logger.info(
            f"Map {self.name} ready: {self.registry.count(Category.REGIONS)} region(s), "
            f"{self.registry.count(Category.MARKERS)} marker(s)"
        )
        self.emit(MapEvent.LOADED, self)

    def _abort_init(self, error: Exception) -> None:
        """Undo a partial initialization so nothing this instance bound survives."""
        released = self._release_all()
        if self.tooltip is not None:
            self.tooltip.destroy()
        for element in (*self.zoom_buttons, self.legend_horizontal, self.legend_vertical):
            if element is not None:
                element.remove()
        self.registry.clear_all()
        if self.surface is not None:
            self.surface.root.remove()
        if self.container is not None and ClassNames.CONTAINER in self.container.classes:
            self.container.classes.remove(ClassNames.CONTAINER)

        self._transition("fail")
        self.events.clear()
        self._destroyed = True
        logger.error(f"Map {self.name} failed to initialize ({error}), released {released} listener(s)")

    def _run_init_steps(self) -> None:
        params = self.params

        # 1. Render surface
        self.container = self._resolve_container()
        width = self.container.width or AppConfig.CONTAINER_WIDTH
        height = self.container.height or AppConfig.CONTAINER_HEIGHT
        self.surface = self.surface_factory(self.container, width, height)
        self.surface.attach()

        # 2. Background
        self.surface.set_background(params["backgroundColor"])

        # 3. Container gestures
        self.interaction.bind_container_events()

        # 4. Regions
        for key, handle in build_regions(self.surface, self.definition, params["regionStyle"]).items():
            self.registry.add(Category.REGIONS, key, handle)

        # 5. Base transform
        self.viewport = ViewportTransform(
            zoom_min=params["zoomMin"],
            zoom_max=params["zoomMax"],
            clamp_translation=params["clampTranslation"],
            content_size=(self.definition.width, self.definition.height),
            viewport_size=(width, height),
        )
        base = self.viewport.set_base(
            *ViewportTransform.fit(self.definition.width, self.definition.height, width, height)
        )
        self.surface.apply_transform(base)

        # 6. Markers
        for key, config in normalize_markers(params["markers"]).items():
            self._create_marker(key, config)

        # 7. Tooltip
        if params["showTooltip"]:
            self.tooltip = Tooltip(body=self.document.body)

        # 8. Zoom buttons
        if params["zoomButtons"]:
            self.zoom_buttons = self.interaction.create_zoom_buttons()

        # 9. Initial selection
        if params["selectedRegions"]:
            self.selection.select(Category.REGIONS, params["selectedRegions"])
        if params["selectedMarkers"]:
            self.selection.select(Category.MARKERS, params["selectedMarkers"])

        # 10. Initial focus
        if params["focusOn"]:
            self._focus(params["focusOn"])
            self.surface.apply_transform(self.viewport.state)

        # 11. Touch
        if params["bindTouchEvents"] and self.document.supports_touch:
            self.interaction.bind_touch_events()

        # 12. Entity events, then labels
        self.interaction.bind_element_events()
        if params["labels"]:
            self.labels = LabelLayer(group=self.surface.labels_group, config=params["labels"])
            for category in Category:
                for _, handle in self.registry.all(category):
                    self.labels.add(handle)
            self.labels.reposition(self.viewport.state)

        # 13. Legends and series
        self.legend_horizontal = self.container.append(
            Element(classes=[ClassNames.SERIES_CONTAINER, ClassNames.SERIES_HORIZONTAL])
        )
        self.legend_vertical = self.container.append(
            Element(classes=[ClassNames.SERIES_CONTAINER, ClassNames.SERIES_VERTICAL])
        )
        if params["series"]:
            self._create_series(params["series"])

    def _create_marker(self, key: str, config: dict[str, Any]) -> None:
        handle = build_marker(
            surface=self.surface,
            geometry=self.geometry,
            key=key,
            config=config,
            style=self.params["markerStyle"],
        )
        if handle is None:
            return
        self.registry.add(Category.MARKERS, key, handle)
        if self.labels is not None:
            label = self.labels.add(handle)
            if label is not None:
                label.reposition(self.viewport.state)

    def _create_series(self, config: dict[str, list[dict[str, Any]]]) -> None:
        for category_name, series_list in config.items():
            category = Category.coerce(category_name)
            for series_config in series_list:
                legend = series_config.get("legend") or {}
                container = self.legend_vertical if legend.get("vertical") else self.legend_horizontal
                self.series[category].append(
                    DataSeries(
                        category=category,
                        config=series_config,
                        registry=self.registry,
                        legend_container=container,
                    )
                )

    def _require_ready(self) -> None:
        if self._destroyed:
            raise InvalidStateError("Map has been destroyed")
        if not self.lifecycle.is_ready:
            raise InvalidStateError(f"Map {self.name} is not ready (state: {self.lifecycle.get_state_name()})")

    # =========================================================================
    # Listener bookkeeping and emission
    # =========================================================================

    def bind(self, subject: Any, event_name: str, handler: Callable[..., Any]) -> Subscription:
        """Bind a listener through the shared registry and keep its handle."""
        subscription = self.event_registry.subscribe(
            owner=self,
            subject=subject,
            event_name=event_name,
            handler=handler,
        )
        self._subscriptions.append(subscription)
        return subscription

    def _release(self, subscription: Optional[Subscription]) -> None:
        if subscription is None:
            return
        self.event_registry.unsubscribe(subscription)
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _release_all(self) -> int:
        """Release every handle this instance bound. Returns how many were released."""
        released = len(self._subscriptions)
        for subscription in list(self._subscriptions):
            self.event_registry.unsubscribe(subscription)
        self._subscriptions.clear()
        self._ready_subscription = None
        return released

    def emit(self, event: "MapEvent | str", *args: Any) -> int:
        return self.events.emit(event, *args)

    def apply_transform(self) -> ViewportState:
        """Push the current viewport state to the surface and labels, then notify listeners."""
        state = self.viewport.state
        self.surface.apply_transform(state)
        if self.labels is not None:
            self.labels.reposition(state)
        self.emit(MapEvent.VIEWPORT_CHANGED, *state.as_tuple())
        return state

    # =========================================================================
    # Public API - events and introspection
    # =========================================================================

    def on(self, event: "MapEvent | str", handler: Callable[..., Any]) -> Unsubscribe:
        """Register an event handler. Allowed while pending, so "map:loaded" can be caught."""
        if self._destroyed:
            raise InvalidStateError("Map has been destroyed")
        return self.events.on(event, handler)

    @property
    def state(self) -> str:
        """Lifecycle state id ("pending", "ready", "destroyed", ...)."""
        if self._destroyed:
            return "destroyed"
        return self.lifecycle.current_state.id

    @property
    def transform(self) -> ViewportState:
        self._require_ready()
        return self.viewport.state

    # =========================================================================
    # Public API - selection
    # =========================================================================

    def get_selected(self, category: "Category | str") -> list[str]:
        self._require_ready()
        return self.selection.get_selected(category)

    def set_selected(self, category: "Category | str", keys: Iterable[str]) -> None:
        """Select the given keys (added to the current selection; absent keys skipped)."""
        self._require_ready()
        self.selection.select(category, keys)

    def clear_selected(self, category: "Category | str") -> None:
        self._require_ready()
        self.selection.clear(category)

    def get_selected_regions(self) -> list[str]:
        return self.get_selected(Category.REGIONS)

    def get_selected_markers(self) -> list[str]:
        return self.get_selected(Category.MARKERS)

    def clear_selected_regions(self) -> None:
        self.clear_selected(Category.REGIONS)

    def clear_selected_markers(self) -> None:
        self.clear_selected(Category.MARKERS)

    # =========================================================================
    # Public API - markers
    # =========================================================================

    def add_marker(self, key: str, config: dict[str, Any]) -> None:
        """Add (or replace) one marker. Markers without a resolvable position are skipped."""
        self._require_ready()
        self._create_marker(str(key), config)

    def remove_markers(self, keys: Iterable[str]) -> None:
        self._require_ready()
        for key in keys:
            self.registry.remove(Category.MARKERS, str(key))
            if self.labels is not None:
                self.labels.remove(Category.MARKERS, str(key))

    # =========================================================================
    # Public API - viewport
    # =========================================================================

    def zoom_in(self) -> ViewportState:
        """Zoom by zoomStep around the container center."""
        self._require_ready()
        return self._zoom_by(self.params["zoomStep"])

    def zoom_out(self) -> ViewportState:
        self._require_ready()
        return self._zoom_by(1 / self.params["zoomStep"])

    def _zoom_by(self, factor: float) -> ViewportState:
        center = (self.surface.width / 2, self.surface.height / 2)
        self.viewport.apply_zoom(factor=factor, anchor=center)
        return self.apply_transform()

    def set_focus(self, config: dict[str, Any]) -> bool:
        """Focus on regions or a coordinate.

        Args:
            config: {"region": key}, {"regions": [keys]}, or
                {"coords": (x, y), "scale": n} with n a multiple of the base scale

        Returns:
            True if the viewport moved, False if the target was unknown.
        """
        self._require_ready()
        if not self._focus(config):
            return False
        self.apply_transform()
        return True

    def _focus(self, config: dict[str, Any]) -> bool:
        if "region" in config or "regions" in config:
            keys = config.get("regions") or ([config["region"]] if "region" in config else [])
            if not keys:
                logger.warning(f"Focus config names no regions: {config}")
                return False
            handles = [self.registry.get(Category.REGIONS, key) for key in keys]
            bounds = self.surface.get_bounds([h.element for h in handles if h is not None])
            if bounds is None:
                logger.warning(f"Cannot focus on unknown region(s): {keys}")
                return False
            min_x, min_y, max_x, max_y = bounds
            width, height = self.viewport.viewport_size
            scale = min(
                width / max(max_x - min_x, 1e-9),
                height / max(max_y - min_y, 1e-9),
            )
            self.viewport.focus(scale=scale, center_x=(min_x + max_x) / 2, center_y=(min_y + max_y) / 2)
            return True

        if "coords" in config:
            x, y = config["coords"]
            point = self.geometry.project_to_map(x=float(x), y=float(y))
            if point is None:
                logger.warning(f"Cannot focus on coordinates outside every inset: {config['coords']}")
                return False
            scale = float(config.get("scale", 1)) * self.viewport.base.scale
            self.viewport.focus(scale=scale, center_x=point[0], center_y=point[1])
            return True

        logger.warning(f"Unrecognized focus config: {config}")
        return False

    def get_inset_for_point(self, x: float, y: float) -> Optional[Inset]:
        self._require_ready()
        return self.geometry.resolve_inset(x=x, y=y)

    def set_background_color(self, color: str) -> None:
        self._require_ready()
        self.surface.set_background(color)

    # =========================================================================
    # Public API - reset and teardown
    # =========================================================================

    def reset(self) -> None:
        """Clear series, restore the base transform and clear all selection."""
        self._require_ready()
        for series_list in self.series.values():
            for series in series_list:
                series.clear()

        self.viewport.reset()
        self.clear_selected_markers()
        self.clear_selected_regions()
        self.apply_transform()

    def destroy(self, destroy_instance: bool = True) -> None:
        """Tear the map down. Terminal: every later call raises InvalidStateError.

        Args:
            destroy_instance: Also purge every attribute of this instance
        """
        if self._destroyed:
            raise InvalidStateError("Map has already been destroyed")
        if not (self.lifecycle.is_ready or self.lifecycle.is_pending):
            raise InvalidStateError(f"Map {self.name} cannot be destroyed in state {self.lifecycle.get_state_name()}")

        # A raising hook still gets a complete teardown; its error propagates afterwards
        try:
            self.emit(MapEvent.DESTROYED, self)
        finally:
            self._teardown(destroy_instance=destroy_instance)

    def _teardown(self, destroy_instance: bool) -> None:
        if self.tooltip is not None:
            self.tooltip.destroy()

        released = self._release_all()

        self._transition("destroy")
        self.events.clear()
        logger.info(f"Map {self.name} destroyed, released {released} listener(s)")

        if destroy_instance:
            for attribute in list(vars(self)):
                try:
                    delattr(self, attribute)
                except Exception as e:
                    logger.debug(f"Could not purge attribute {attribute!r}: {e}")
        self._destroyed = True

    def __repr__(self) -> str:
        if self._destroyed:
            return "VectorMap(destroyed)"
        return f"VectorMap(name={self.name!r}, state={self.state})"
