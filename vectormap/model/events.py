"""Lifecycle and interaction events emitted by a map instance.

Two ways to listen:
- Configuration hooks: an option such as "onLoaded" holding a callable.
  EVENT_HOOKS is the static table mapping option names to events; it is
  walked in table order on every emit.
- Registered handlers: map.on(MapEvent.LOADED, handler) returns an
  Unsubscribe token.

Payloads per event:
    LOADED              (map,)
    VIEWPORT_CHANGED    (scale, translate_x, translate_y)
    REGION_CLICKED      (event, key)
    MARKER_CLICKED      (event, key)
    REGION_SELECTED     (key, is_selected, selected_keys)
    MARKER_SELECTED     (key, is_selected, selected_keys)
    REGION_TOOLTIP_SHOW (tooltip, key)
    MARKER_TOOLTIP_SHOW (tooltip, key)
    DESTROYED           (map,)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)


class MapEvent(Enum):
    """Event names, matching the string names integrators know."""

    LOADED = "map:loaded"
    VIEWPORT_CHANGED = "viewport:changed"
    REGION_CLICKED = "region:clicked"
    MARKER_CLICKED = "marker:clicked"
    REGION_SELECTED = "region:selected"
    MARKER_SELECTED = "marker:selected"
    REGION_TOOLTIP_SHOW = "region.tooltip:show"
    MARKER_TOOLTIP_SHOW = "marker.tooltip:show"
    DESTROYED = "map:destroyed"

    @classmethod
    def coerce(cls, value: "MapEvent | str") -> "MapEvent":
        if isinstance(value, cls):
            return value
        return cls(value)


# Option name -> event, in dispatch order
EVENT_HOOKS: tuple[tuple[str, MapEvent], ...] = (
    ("onLoaded", MapEvent.LOADED),
    ("onViewportChange", MapEvent.VIEWPORT_CHANGED),
    ("onRegionClick", MapEvent.REGION_CLICKED),
    ("onMarkerClick", MapEvent.MARKER_CLICKED),
    ("onRegionSelected", MapEvent.REGION_SELECTED),
    ("onMarkerSelected", MapEvent.MARKER_SELECTED),
    ("onRegionTooltipShow", MapEvent.REGION_TOOLTIP_SHOW),
    ("onMarkerTooltipShow", MapEvent.MARKER_TOOLTIP_SHOW),
    ("onDestroyed", MapEvent.DESTROYED),
)


@dataclass(eq=False)
class Unsubscribe:
    """Token returned by EventEmitter.on(); call it to remove the handler."""

    emitter: "EventEmitter"
    event: MapEvent
    handler: Callable[..., Any]

    def __call__(self) -> bool:
        return self.emitter.off(event=self.event, handler=self.handler)


class EventEmitter:
    """Dispatches events to configuration hooks and registered handlers.

    Example:
        emitter = EventEmitter(options={"onLoaded": print})
        token = emitter.on(MapEvent.LOADED, handler)
        emitter.emit(MapEvent.LOADED, map_instance)
        token()
    """

    def __init__(self, options: Mapping[str, Any]) -> None:
        self.options = options
        self._handlers: dict[MapEvent, list[Callable[..., Any]]] = {}

    def on(self, event: "MapEvent | str", handler: Callable[..., Any]) -> Unsubscribe:
        event = MapEvent.coerce(event)
        self._handlers.setdefault(event, []).append(handler)
        return Unsubscribe(emitter=self, event=event, handler=handler)

    def off(self, event: "MapEvent | str", handler: Callable[..., Any]) -> bool:
        handlers = self._handlers.get(MapEvent.coerce(event), [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def emit(self, event: "MapEvent | str", *args: Any) -> int:
        """Invoke every matching hook, then every registered handler.

        Returns:
            Number of callables invoked.
        """
        event = MapEvent.coerce(event)
        invoked = 0

        for option_name, hook_event in EVENT_HOOKS:
            if hook_event is not event:
                continue
            hook = self.options.get(option_name)
            if callable(hook):
                hook(*args)
                invoked += 1

        for handler in list(self._handlers.get(event, [])):
            handler(*args)
            invoked += 1

        logger.debug(f"emit {event.value}: {invoked} listener(s)")
        return invoked

    def clear(self) -> None:
        self._handlers.clear()
