"""Viewport transform - scale and translation from map space to screen space.

Convention (all values in screen pixels unless noted):
    screen_x = map_x * scale + translate_x
    screen_y = map_y * scale + translate_y

The base transform is captured once, at the first successful layout, and is
the restore target for reset(). Zoom is always anchored: the map point under
the gesture origin stays under it. Scale is clamped to
[base_scale * zoom_min, base_scale * zoom_max]; translation is unbounded
unless clamp_translation is enabled.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from vectormap.constants import ViewportConfig
from vectormap.errors import InvalidStateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewportState:
    """Snapshot of an affine viewport transform.

    Attributes:
        scale: Screen pixels per map unit (always > 0 and finite)
        translate_x: Screen X of the map origin
        translate_y: Screen Y of the map origin
    """

    scale: float
    translate_x: float
    translate_y: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.scale) or self.scale <= 0:
            raise ValueError(f"Viewport scale must be positive and finite, got {self.scale}")

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.scale, self.translate_x, self.translate_y)


class ViewportTransform:
    """Owns current and base viewport state and composes pan/zoom gestures.

    Example:
        viewport = ViewportTransform(viewport_size=(800, 400), content_size=(900, 440))
        viewport.set_base(*ViewportTransform.fit(900, 440, 800, 400))
        viewport.apply_zoom(factor=2.0, anchor=(400, 200))
        viewport.reset()
    """

    def __init__(
        self,
        zoom_min: float = ViewportConfig.ZOOM_MIN,
        zoom_max: float = ViewportConfig.ZOOM_MAX,
        clamp_translation: bool = False,
        content_size: Optional[tuple[float, float]] = None,
        viewport_size: Optional[tuple[float, float]] = None,
    ) -> None:
        """Initialize an un-baselined viewport.

        Args:
            zoom_min: Minimum scale as a multiple of the base scale
            zoom_max: Maximum scale as a multiple of the base scale
            clamp_translation: Keep content reachable on pan/zoom
            content_size: (width, height) of the map space, needed for clamping
            viewport_size: (width, height) of the screen area, needed for
                clamping and focus()
        """
        if zoom_min <= 0 or zoom_max < zoom_min:
            raise ValueError(f"Invalid zoom range [{zoom_min}, {zoom_max}]")
        if clamp_translation and (content_size is None or viewport_size is None):
            raise ValueError("clamp_translation requires content_size and viewport_size")

        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.clamp_translation = clamp_translation
        self.content_size = content_size
        self.viewport_size = viewport_size

        self._current: Optional[ViewportState] = None
        self._base: Optional[ViewportState] = None

    # =========================================================================
    # State access
    # =========================================================================

    @property
    def has_base(self) -> bool:
        return self._base is not None

    @property
    def base(self) -> ViewportState:
        self._require_base()
        return self._base

    @property
    def state(self) -> ViewportState:
        self._require_base()
        return self._current

    @property
    def scale(self) -> float:
        return self.state.scale

    @property
    def translate_x(self) -> float:
        return self.state.translate_x

    @property
    def translate_y(self) -> float:
        return self.state.translate_y

    @property
    def scale_limits(self) -> tuple[float, float]:
        """Absolute (min, max) scale allowed by the zoom range."""
        base_scale = self.base.scale
        return (base_scale * self.zoom_min, base_scale * self.zoom_max)

    def _require_base(self) -> None:
        if self._base is None:
            raise InvalidStateError("Viewport has no base transform yet - call set_base() first")

    # =========================================================================
    # Mutations
    # =========================================================================

    def set_base(self, scale: float, translate_x: float, translate_y: float) -> ViewportState:
        """Capture the base transform. Callable exactly once.

        The current transform is set to the base as well.

        Raises:
            InvalidStateError: If a base was already captured
        """
        if self._base is not None:
            raise InvalidStateError("Viewport base is already set - destroy and rebuild the map instead")

        self._base = ViewportState(scale=scale, translate_x=translate_x, translate_y=translate_y)
        self._current = self._base
        logger.debug(f"Viewport base set: scale={scale:.4f}, translate=({translate_x:.1f}, {translate_y:.1f})")
        return self._base

    def apply_zoom(self, factor: float, anchor: tuple[float, float]) -> ViewportState:
        """Multiply the scale by factor, keeping the map point under anchor fixed.

        Out-of-range results are clamped to the zoom limits, not rejected.

        Args:
            factor: Zoom multiplier (> 0)
            anchor: (x, y) gesture origin in screen coordinates

        Returns:
            The new current state.
        """
        if not math.isfinite(factor) or factor <= 0:
            raise ValueError(f"Zoom factor must be positive and finite, got {factor}")

        current = self.state
        min_scale, max_scale = self.scale_limits
        new_scale = min(max(current.scale * factor, min_scale), max_scale)
        effective = new_scale / current.scale

        anchor_x, anchor_y = anchor
        translate_x = anchor_x - (anchor_x - current.translate_x) * effective
        translate_y = anchor_y - (anchor_y - current.translate_y) * effective
        return self._set(scale=new_scale, translate_x=translate_x, translate_y=translate_y)

    def pan(self, delta_x: float, delta_y: float) -> ViewportState:
        """Add a screen-space delta to the translation."""
        current = self.state
        return self._set(
            scale=current.scale,
            translate_x=current.translate_x + delta_x,
            translate_y=current.translate_y + delta_y,
        )

    def focus(self, scale: float, center_x: float, center_y: float) -> ViewportState:
        """Center a map point in the viewport at the given (clamped) scale.

        Args:
            scale: Desired absolute scale
            center_x: Map-space X to center
            center_y: Map-space Y to center
        """
        self._require_base()
        if self.viewport_size is None:
            raise InvalidStateError("focus() requires a viewport_size")

        min_scale, max_scale = self.scale_limits
        new_scale = min(max(scale, min_scale), max_scale)
        viewport_w, viewport_h = self.viewport_size
        return self._set(
            scale=new_scale,
            translate_x=viewport_w / 2 - center_x * new_scale,
            translate_y=viewport_h / 2 - center_y * new_scale,
        )

    def reset(self) -> ViewportState:
        """Restore the base transform. Idempotent."""
        self._current = self.base
        return self._current

    def _set(self, scale: float, translate_x: float, translate_y: float) -> ViewportState:
        if self.clamp_translation:
            translate_x, translate_y = self._clamped(scale=scale, translate_x=translate_x, translate_y=translate_y)
        self._current = ViewportState(scale=scale, translate_x=translate_x, translate_y=translate_y)
        return self._current

    def _clamped(self, scale: float, translate_x: float, translate_y: float) -> tuple[float, float]:
        """Keep scaled content reachable inside the viewport.

        Content smaller than the viewport is centered on that axis; larger
        content may not leave a gap at either edge.
        """
        content_w, content_h = self.content_size
        viewport_w, viewport_h = self.viewport_size
        return (
            self._clamp_axis(translate=translate_x, content=content_w * scale, viewport=viewport_w),
            self._clamp_axis(translate=translate_y, content=content_h * scale, viewport=viewport_h),
        )

    @staticmethod
    def _clamp_axis(translate: float, content: float, viewport: float) -> float:
        if content <= viewport:
            return (viewport - content) / 2
        return min(max(translate, viewport - content), 0.0)

    # =========================================================================
    # Derived representations
    # =========================================================================

    def to_matrix(self) -> np.ndarray:
        """Return the 3x3 homogeneous matrix mapping map space to screen space."""
        current = self.state
        return np.array(
            [
                [current.scale, 0.0, current.translate_x],
                [0.0, current.scale, current.translate_y],
                [0.0, 0.0, 1.0],
            ]
        )

    def map_to_screen(self, x: float, y: float) -> tuple[float, float]:
        current = self.state
        return (x * current.scale + current.translate_x, y * current.scale + current.translate_y)

    def screen_to_map(self, x: float, y: float) -> tuple[float, float]:
        current = self.state
        return ((x - current.translate_x) / current.scale, (y - current.translate_y) / current.scale)

    @staticmethod
    def fit(
        content_width: float,
        content_height: float,
        viewport_width: float,
        viewport_height: float,
    ) -> tuple[float, float, float]:
        """Compute the (scale, translate_x, translate_y) that fits and centers content.

        Returns:
            Base triple suitable for set_base().
        """
        if content_width <= 0 or content_height <= 0:
            raise ValueError("Content size must be positive")
        if viewport_width <= 0 or viewport_height <= 0:
            raise ValueError("Viewport size must be positive")

        scale = min(viewport_width / content_width, viewport_height / content_height)
        translate_x = (viewport_width - content_width * scale) / 2
        translate_y = (viewport_height - content_height * scale) / 2
        return scale, translate_x, translate_y

    def __repr__(self) -> str:
        if self._current is None:
            return "ViewportTransform(unset)"
        s = self._current
        return f"ViewportTransform(scale={s.scale:.4f}, translate=({s.translate_x:.1f}, {s.translate_y:.1f}))"
