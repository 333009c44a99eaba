"""Host-facing components of the vector map engine.

File Structure:
- host.py: Element / Document tree the engine attaches to
- surface.py: RenderSurface interface + PlotlySurface (Plotly figure export)
- builders.py: Region and marker handle construction
- interaction.py: Drag, wheel, touch, zoom buttons, click/hover delegation
- tooltip.py: Floating hover label
- labels.py: Region and marker labels that follow pan and zoom
- series.py: Data series coloring and legends
- lifecycle.py: MapLifecycle state machine + transition log listener

Core Component:
- controller.py: VectorMap, the per-instance lifecycle controller
"""

from vectormap.ui.controller import VectorMap, merge_options
from vectormap.ui.host import READY_EVENT, Document, Element
from vectormap.ui.interaction import PointerEvent, TouchEvent, WheelEvent
from vectormap.ui.labels import Label, LabelLayer
from vectormap.ui.lifecycle import LifecycleLogListener, MapLifecycle
from vectormap.ui.series import DataSeries, Legend
from vectormap.ui.surface import PlotlySurface, RenderSurface
from vectormap.ui.tooltip import Tooltip

__all__ = [
    "VectorMap",
    "merge_options",
    "Document",
    "Element",
    "READY_EVENT",
    "PointerEvent",
    "WheelEvent",
    "TouchEvent",
    "MapLifecycle",
    "LifecycleLogListener",
    "DataSeries",
    "Legend",
    "RenderSurface",
    "PlotlySurface",
    "Tooltip",
    "Label",
    "LabelLayer",
]
