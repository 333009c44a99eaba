"""Tests for the viewport transform.

Tests: ViewportState, ViewportTransform
Focus: One-time base, anchored zoom, zoom limits, idempotent reset, translation bounds

Base used throughout: content 100x50 fitted into a 200x100 viewport,
i.e. scale=2, translate=(0, 0).
"""

import math

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from vectormap.core.viewport import ViewportState, ViewportTransform
from vectormap.errors import InvalidStateError


@pytest.fixture
def viewport() -> ViewportTransform:
    vp = ViewportTransform(zoom_min=1.0, zoom_max=4.0, content_size=(100, 50), viewport_size=(200, 100))
    vp.set_base(*ViewportTransform.fit(100, 50, 200, 100))
    return vp


class TestViewportState:
    """ViewportState - validated transform snapshot."""

    @pytest.mark.parametrize("scale", [0.0, -1.0, math.inf, math.nan])
    def test_rejects_bad_scale(self, scale: float) -> None:
        with pytest.raises(ValueError):
            ViewportState(scale=scale, translate_x=0.0, translate_y=0.0)

    def test_as_tuple(self) -> None:
        assert ViewportState(scale=2.0, translate_x=3.0, translate_y=4.0).as_tuple() == (2.0, 3.0, 4.0)


class TestFit:
    """ViewportTransform.fit - base triple computation."""

    def test_exact_fit(self) -> None:
        assert ViewportTransform.fit(100, 50, 200, 100) == (2.0, 0.0, 0.0)

    def test_centers_narrow_content(self) -> None:
        scale, tx, ty = ViewportTransform.fit(100, 100, 200, 100)
        assert scale == 1.0
        assert tx == 50.0
        assert ty == 0.0

    def test_rejects_empty_sizes(self) -> None:
        with pytest.raises(ValueError):
            ViewportTransform.fit(0, 50, 200, 100)
        with pytest.raises(ValueError):
            ViewportTransform.fit(100, 50, 200, 0)


class TestBase:
    """Base transform capture."""

    def test_operations_before_base_raise(self) -> None:
        vp = ViewportTransform()
        assert vp.has_base is False
        with pytest.raises(InvalidStateError):
            _ = vp.state
        with pytest.raises(InvalidStateError):
            vp.apply_zoom(factor=2.0, anchor=(0, 0))
        with pytest.raises(InvalidStateError):
            vp.pan(delta_x=1, delta_y=1)
        with pytest.raises(InvalidStateError):
            vp.reset()

    def test_set_base_sets_current(self, viewport: ViewportTransform) -> None:
        assert viewport.has_base
        assert viewport.state == viewport.base
        assert viewport.state.as_tuple() == (2.0, 0.0, 0.0)

    def test_set_base_twice_raises(self, viewport: ViewportTransform) -> None:
        with pytest.raises(InvalidStateError, match="already set"):
            viewport.set_base(1.0, 0.0, 0.0)
        assert viewport.base.scale == 2.0

    def test_invalid_zoom_range(self) -> None:
        with pytest.raises(ValueError):
            ViewportTransform(zoom_min=0.0)
        with pytest.raises(ValueError):
            ViewportTransform(zoom_min=2.0, zoom_max=1.0)

    def test_clamp_requires_sizes(self) -> None:
        with pytest.raises(ValueError, match="clamp_translation"):
            ViewportTransform(clamp_translation=True)


class TestZoom:
    """apply_zoom - anchored, clamped zoom."""

    @pytest.mark.parametrize("anchor", [(50.0, 40.0), (0.0, 0.0), (199.0, 99.0), (-30.0, 500.0)])
    @pytest.mark.parametrize("factor", [1.5, 0.8, 3.0])
    def test_anchor_point_stays_fixed(
        self, viewport: ViewportTransform, anchor: tuple[float, float], factor: float
    ) -> None:
        """The map point under the anchor is the same before and after zooming."""
        viewport.pan(delta_x=13.0, delta_y=-7.0)
        before = viewport.screen_to_map(*anchor)
        viewport.apply_zoom(factor=factor, anchor=anchor)
        after = viewport.screen_to_map(*anchor)
        assert after == pytest.approx(before)

    def test_zoom_in_clamped_to_max(self, viewport: ViewportTransform) -> None:
        viewport.apply_zoom(factor=100.0, anchor=(100, 50))
        assert viewport.scale == pytest.approx(8.0)  # base 2 * zoom_max 4

    def test_zoom_out_clamped_to_min(self, viewport: ViewportTransform) -> None:
        viewport.apply_zoom(factor=0.01, anchor=(100, 50))
        assert viewport.scale == pytest.approx(2.0)

    def test_clamped_zoom_keeps_anchor(self, viewport: ViewportTransform) -> None:
        before = viewport.screen_to_map(30, 20)
        viewport.apply_zoom(factor=100.0, anchor=(30, 20))
        assert viewport.screen_to_map(30, 20) == pytest.approx(before)

    def test_scale_limits(self, viewport: ViewportTransform) -> None:
        assert viewport.scale_limits == (2.0, 8.0)

    @pytest.mark.parametrize("factor", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_factor(self, viewport: ViewportTransform, factor: float) -> None:
        with pytest.raises(ValueError):
            viewport.apply_zoom(factor=factor, anchor=(0, 0))


class TestPanAndReset:
    """pan() and reset()."""

    def test_pan_adds_delta(self, viewport: ViewportTransform) -> None:
        viewport.pan(delta_x=10.0, delta_y=-5.0)
        viewport.pan(delta_x=1.0, delta_y=1.0)
        assert viewport.state.as_tuple() == (2.0, 11.0, -4.0)

    def test_pan_is_unbounded_by_default(self, viewport: ViewportTransform) -> None:
        viewport.pan(delta_x=10_000.0, delta_y=10_000.0)
        assert viewport.translate_x == 10_000.0

    def test_reset_restores_base(self, viewport: ViewportTransform) -> None:
        viewport.apply_zoom(factor=2.0, anchor=(10, 10))
        viewport.pan(delta_x=40.0, delta_y=40.0)
        viewport.reset()
        assert viewport.state == viewport.base

    def test_reset_is_idempotent(self, viewport: ViewportTransform) -> None:
        viewport.apply_zoom(factor=3.0, anchor=(10, 10))
        first = viewport.reset()
        second = viewport.reset()
        assert first == second == viewport.base


class TestTranslationBounds:
    """clamp_translation=True keeps content reachable."""

    @pytest.fixture
    def clamped(self) -> ViewportTransform:
        vp = ViewportTransform(
            zoom_min=1.0,
            zoom_max=4.0,
            clamp_translation=True,
            content_size=(100, 50),
            viewport_size=(200, 100),
        )
        vp.set_base(*ViewportTransform.fit(100, 50, 200, 100))
        return vp

    def test_content_filling_viewport_cannot_move(self, clamped: ViewportTransform) -> None:
        clamped.pan(delta_x=50.0, delta_y=50.0)
        assert (clamped.translate_x, clamped.translate_y) == (0.0, 0.0)

    def test_zoomed_content_cannot_leave_gap(self, clamped: ViewportTransform) -> None:
        clamped.apply_zoom(factor=2.0, anchor=(0, 0))  # content is now 400x200
        clamped.pan(delta_x=-500.0, delta_y=0.0)
        assert clamped.translate_x == -200.0  # viewport 200 - content 400
        clamped.pan(delta_x=1000.0, delta_y=0.0)
        assert clamped.translate_x == 0.0


class TestFocus:
    """focus() - center a map point."""

    def test_focus_centers_point(self, viewport: ViewportTransform) -> None:
        viewport.focus(scale=4.0, center_x=25.0, center_y=10.0)
        assert viewport.state.as_tuple() == (4.0, 0.0, 10.0)
        assert viewport.map_to_screen(25.0, 10.0) == (100.0, 50.0)

    def test_focus_scale_is_clamped(self, viewport: ViewportTransform) -> None:
        viewport.focus(scale=1000.0, center_x=50.0, center_y=25.0)
        assert viewport.scale == 8.0

    def test_focus_requires_viewport_size(self) -> None:
        vp = ViewportTransform()
        vp.set_base(1.0, 0.0, 0.0)
        with pytest.raises(InvalidStateError):
            vp.focus(scale=1.0, center_x=0.0, center_y=0.0)


class TestMatrix:
    """to_matrix() and coordinate conversion."""

    def test_matrix_layout(self, viewport: ViewportTransform) -> None:
        viewport.pan(delta_x=5.0, delta_y=7.0)
        expected = np.array([[2.0, 0.0, 5.0], [0.0, 2.0, 7.0], [0.0, 0.0, 1.0]])
        np.testing.assert_allclose(viewport.to_matrix(), expected)

    def test_matrix_agrees_with_map_to_screen(self, viewport: ViewportTransform) -> None:
        viewport.apply_zoom(factor=1.7, anchor=(33, 21))
        x, y, _ = viewport.to_matrix() @ np.array([12.0, 34.0, 1.0])
        assert (x, y) == pytest.approx(viewport.map_to_screen(12.0, 34.0))

    def test_screen_to_map_inverts_map_to_screen(self, viewport: ViewportTransform) -> None:
        viewport.apply_zoom(factor=2.5, anchor=(70, 30))
        assert viewport.screen_to_map(*viewport.map_to_screen(42.0, 17.0)) == pytest.approx((42.0, 17.0))


# =============================================================================
# PROPERTY-BASED TESTS
# =============================================================================


def _fitted_viewport() -> ViewportTransform:
    vp = ViewportTransform(zoom_min=1.0, zoom_max=4.0, content_size=(100, 50), viewport_size=(200, 100))
    vp.set_base(*ViewportTransform.fit(100, 50, 200, 100))
    return vp


finite_factors = st.floats(min_value=0.05, max_value=20.0, allow_nan=False, allow_infinity=False)
screen_points = st.tuples(
    st.floats(min_value=0.0, max_value=200.0, allow_nan=False),
    st.floats(min_value=0.0, max_value=100.0, allow_nan=False),
)


class TestViewportProperties:
    """Invariants that hold for arbitrary gesture sequences."""

    @given(factor=finite_factors, anchor=screen_points)
    @settings(max_examples=50)
    def test_zoom_keeps_anchor_fixed(self, factor: float, anchor: tuple[float, float]) -> None:
        """The map point under the anchor stays under the anchor, clamped or not."""
        vp = _fitted_viewport()
        before = vp.screen_to_map(*anchor)
        vp.apply_zoom(factor=factor, anchor=anchor)
        assert vp.screen_to_map(*anchor) == pytest.approx(before, rel=1e-9, abs=1e-9)

    @given(factors=st.lists(finite_factors, min_size=1, max_size=10), anchor=screen_points)
    @settings(max_examples=50)
    def test_scale_never_leaves_limits(self, factors: list[float], anchor: tuple[float, float]) -> None:
        vp = _fitted_viewport()
        min_scale, max_scale = vp.scale_limits
        for factor in factors:
            vp.apply_zoom(factor=factor, anchor=anchor)
            assert min_scale <= vp.scale <= max_scale

    @given(
        factors=st.lists(finite_factors, max_size=5),
        deltas=st.lists(screen_points, max_size=5),
    )
    @settings(max_examples=50)
    def test_reset_restores_base_after_any_sequence(
        self,
        factors: list[float],
        deltas: list[tuple[float, float]],
    ) -> None:
        vp = _fitted_viewport()
        for factor in factors:
            vp.apply_zoom(factor=factor, anchor=(100.0, 50.0))
        for dx, dy in deltas:
            vp.pan(delta_x=dx, delta_y=dy)

        assert vp.reset() == vp.base
        assert vp.reset() == vp.base
