"""Vector Map Viewer - Streamlit demo for the vector map engine.

Shows a registered map as a Plotly figure. Clicking a region or marker is
forwarded to the map as a container click, so selection, events and
tooltips run through the same code paths as any other host.

Run: streamlit run vectormap/app.py
"""

import logging
from typing import Any, Optional

import streamlit as st

from vectormap.constants import AppConfig
from vectormap.core.geometry import MapRegistry
from vectormap.maps import register_builtin_maps
from vectormap.model.entity import Category
from vectormap.model.events import MapEvent
from vectormap.ui import Document, Element, PlotlySurface, PointerEvent, VectorMap

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def create_map(map_name: str) -> VectorMap:
    """Build a map instance in a fresh host document."""
    document = Document(ready=True)
    document.body.append(
        Element(
            element_id="map",
            width=AppConfig.CONTAINER_WIDTH,
            height=AppConfig.CONTAINER_HEIGHT,
        )
    )

    vmap = VectorMap(
        options={
            "map": map_name,
            "selector": "#map",
            "regionsSelectable": True,
            "markersSelectable": True,
            "markers": {
                "harbor": {"name": "Harbor", "coords": (225, 25)},
                "capital": {"name": "Capital", "coords": (50, 30)},
            },
        },
        document=document,
        surface_factory=PlotlySurface,
    )
    vmap.on(MapEvent.REGION_SELECTED, _log_selection)
    vmap.on(MapEvent.MARKER_SELECTED, _log_selection)
    return vmap


def _log_selection(key: str, is_selected: bool, selected: list[str]) -> None:
    logger.info(f"[APP] {key} {'selected' if is_selected else 'deselected'}, now {selected}")


def init_session_state() -> None:
    if not MapRegistry.names():
        register_builtin_maps()

    if "map_name" not in st.session_state:
        st.session_state.map_name = AppConfig.DEFAULT_MAP

    if "vmap" not in st.session_state:
        st.session_state.vmap = create_map(st.session_state.map_name)

    if "last_click" not in st.session_state:
        st.session_state.last_click = None


def switch_map(map_name: str) -> None:
    """Destroy the current instance and build one for map_name."""
    st.session_state.vmap.destroy()
    st.session_state.map_name = map_name
    st.session_state.vmap = create_map(map_name)
    st.session_state.last_click = None


# =============================================================================
# CLICK HANDLING
# =============================================================================


def _clicked_entity(event: Any) -> Optional[tuple[str, str]]:
    """(category, key) of the first selected point in a Plotly selection event."""
    if not event:
        return None
    points = event["selection"]["points"]
    if not points:
        return None
    customdata = points[0].get("customdata")
    if not customdata or len(customdata) < 2:
        return None
    return str(customdata[0]), str(customdata[1])


def forward_click(vmap: VectorMap, event: Any) -> bool:
    """Dispatch a chart click to the map container, once per distinct click.

    Returns:
        True if the click reached the map (the figure needs a redraw).
    """
    clicked = _clicked_entity(event)
    if clicked is None or clicked == st.session_state.last_click:
        return False
    st.session_state.last_click = clicked

    category, key = clicked
    handle = vmap.registry.get(category, key)
    if handle is None:
        logger.warning(f"[APP] Click on unknown entity {category}:{key}")
        return False
    vmap.container.dispatch("click", PointerEvent(x=0.0, y=0.0, target=handle.element))
    return True


# =============================================================================
# RENDERING
# =============================================================================


def render_sidebar(vmap: VectorMap) -> None:
    with st.sidebar:
        st.header("Map")
        names = MapRegistry.names()
        current = st.session_state.map_name
        chosen = st.selectbox("Map definition", names, index=names.index(current) if current in names else 0)
        if chosen != current:
            switch_map(chosen)
            st.rerun()

        st.header("View")
        col_in, col_out, col_reset = st.columns(3)
        if col_in.button("➕", help="Zoom in"):
            vmap.zoom_in()
        if col_out.button("➖", help="Zoom out"):
            vmap.zoom_out()
        if col_reset.button("↺", help="Reset view and selection"):
            vmap.reset()
            st.session_state.last_click = None

        scale, tx, ty = vmap.transform.as_tuple()
        st.caption(f"scale {scale:.3f} · translate ({tx:.0f}, {ty:.0f})")

        st.header("Selection")
        st.write(f"Regions: {', '.join(vmap.get_selected(Category.REGIONS)) or '-'}")
        st.write(f"Markers: {', '.join(vmap.get_selected(Category.MARKERS)) or '-'}")


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    vmap: VectorMap = st.session_state.vmap
    render_sidebar(vmap)

    fig = vmap.surface.to_figure()
    event = st.plotly_chart(fig, key=f"map_{vmap.name}", on_select="rerun", selection_mode="points")
    if forward_click(vmap, event):
        st.rerun()


if __name__ == "__main__":
    main()
