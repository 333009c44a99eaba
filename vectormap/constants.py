"""Configuration constants for the vector map engine.

All tunable parameters are centralized here.

Classes:
    AppConfig: Streamlit demo viewer settings
    ViewportConfig: Zoom limits and gesture speeds
    StyleConfig: Default region/marker styles and series colors
    ClassNames: CSS-like class names given to host elements
    MapDefaults: Default option table merged under every map's options
"""

from pathlib import Path

# Package root directory (where vectormap/ lives)
PACKAGE_DIR = Path(__file__).parent

# Built-in map definitions shipped as JSON
MAPS_DIR = PACKAGE_DIR / "maps"


class AppConfig:
    """Streamlit demo viewer settings."""

    TITLE = "Vector Map Viewer"
    ICON = "🗺️"
    LAYOUT = "wide"
    DEFAULT_MAP = "demo_islands"
    CONTAINER_WIDTH = 900
    CONTAINER_HEIGHT = 480


class ViewportConfig:
    """Zoom limits and gesture speeds.

    Zoom limits are multipliers of the base scale captured at first layout,
    so zoom_min=1 means "never smaller than the fitted map".
    """

    ZOOM_MIN = 1.0
    ZOOM_MAX = 12.0
    ZOOM_STEP = 1.5  # Factor per zoom button press
    ZOOM_ON_SCROLL_SPEED = 3  # Wheel zoom speed (1-10)

    # Wheel factor = (1 + speed / 1000) ** (WHEEL_EXPONENT * delta_y)
    WHEEL_EXPONENT = -1.5
    # Bound on the exponent of a single wheel factor, keeps exp() finite and non-zero
    WHEEL_LOG_FACTOR_LIMIT = 700.0


class StyleConfig:
    """Default visual styles for entities and data series."""

    REGION_STYLE = {
        "initial": {"fill": "#dee2e8", "stroke": "#676767", "stroke_width": 1.0},
        "hover": {"fill": "#c9d1dc"},
        "selected": {"fill": "#9ca8b6"},
        "selectedHover": {},
    }

    MARKER_STYLE = {
        "initial": {"fill": "#374151", "stroke": "#ffffff", "stroke_width": 2.0, "r": 7.0},
        "hover": {"fill": "#111827"},
        "selected": {"fill": "#e74c3c"},
        "selectedHover": {},
    }

    # Fallback gradient for numeric series without an explicit scale
    SERIES_SCALE = ("#c8eeff", "#0071a4")


class ClassNames:
    """Class names attached to host elements created by the engine."""

    CONTAINER = "vectormap-container"
    SURFACE = "vectormap-surface"
    REGIONS_GROUP = "vectormap-regions-group"
    MARKERS_GROUP = "vectormap-markers-group"
    LABELS_GROUP = "vectormap-labels-group"
    REGION = "vectormap-region"
    MARKER = "vectormap-marker"
    LABEL = "vectormap-label"
    TOOLTIP = "vectormap-tooltip"
    ZOOM_BUTTONS = "vectormap-zoom-btn"
    ZOOM_IN = "vectormap-zoomin"
    ZOOM_OUT = "vectormap-zoomout"
    SERIES_CONTAINER = "vectormap-series-container"
    SERIES_HORIZONTAL = "vectormap-series-h"
    SERIES_VERTICAL = "vectormap-series-v"
    LEGEND = "vectormap-legend"


class MapDefaults:
    """Default options merged under user options (user values win).

    Keys use the camelCase names integrators pass in their configuration.
    Event hooks (onLoaded, onRegionClick, ...) have no default.
    """

    OPTIONS = {
        "map": None,
        "selector": None,
        "backgroundColor": "transparent",
        "draggable": True,
        "zoomButtons": True,
        "zoomOnScroll": True,
        "zoomOnScrollSpeed": ViewportConfig.ZOOM_ON_SCROLL_SPEED,
        "zoomMax": ViewportConfig.ZOOM_MAX,
        "zoomMin": ViewportConfig.ZOOM_MIN,
        "zoomStep": ViewportConfig.ZOOM_STEP,
        "clampTranslation": False,
        "showTooltip": True,
        "bindTouchEvents": True,
        "regionsSelectable": False,
        "regionsSelectableOne": False,
        "markersSelectable": False,
        "markersSelectableOne": False,
        "regionStyle": StyleConfig.REGION_STYLE,
        "markerStyle": StyleConfig.MARKER_STYLE,
        "markers": None,
        "selectedRegions": [],
        "selectedMarkers": [],
        "focusOn": {},
        "series": {},
        "labels": None,
    }
