"""Tests for cursorcast.interpolator — bracketing, blending, zoom crops."""

import pytest

from cursorcast.interpolator import (
    bracket,
    clamp_zoom_region,
    interpolate_cursor,
    interpolate_zoom,
    resolve_crop,
    segment_progress,
)
from cursorcast.models import CursorKeyframe, ZoomKeyframe, ZoomRegion


# ── bracket ─────────────────────────────────────────────────────────


class TestBracket:
    def setup_method(self) -> None:
        self.kfs = [CursorKeyframe(timestamp=t, x=t, y=0) for t in (0, 100, 200, 300)]

    def test_before_first(self) -> None:
        prev, nxt = bracket(self.kfs, -50)
        assert prev is nxt is self.kfs[0]

    def test_after_last(self) -> None:
        prev, nxt = bracket(self.kfs, 999)
        assert prev is nxt is self.kfs[-1]

    def test_exact_interior_keyframe_is_prev(self) -> None:
        prev, nxt = bracket(self.kfs, 200)
        assert prev.timestamp == 200
        assert nxt.timestamp == 300

    def test_between(self) -> None:
        prev, nxt = bracket(self.kfs, 150)
        assert (prev.timestamp, nxt.timestamp) == (100, 200)

    def test_zero_span_progress(self) -> None:
        kf = self.kfs[0]
        assert segment_progress(kf, kf, 0) == 0.0


# ── Cursor ──────────────────────────────────────────────────────────


class TestInterpolateCursor:
    def test_empty_timeline(self) -> None:
        assert interpolate_cursor([], 100) is None

    def test_single_keyframe(self) -> None:
        state = interpolate_cursor([CursorKeyframe(timestamp=500, x=3, y=4, shape="hand")], 0)
        assert (state.x, state.y, state.shape) == (3, 4, "hand")

    def test_clamps_to_boundaries(self, linear_track) -> None:
        assert interpolate_cursor(linear_track, -100).x == 0
        assert interpolate_cursor(linear_track, 1000).x == 100
        assert interpolate_cursor(linear_track, 5000).x == 100

    def test_default_curve_is_ease_in_out(self, linear_track) -> None:
        assert interpolate_cursor(linear_track, 500).x == pytest.approx(50.0)
        assert interpolate_cursor(linear_track, 250).x == pytest.approx(12.5)

    def test_default_curve_override(self, linear_track) -> None:
        assert interpolate_cursor(linear_track, 250, default_easing="linear").x == pytest.approx(25.0)

    def test_prev_keyframe_easing_governs(self) -> None:
        kfs = [
            CursorKeyframe(timestamp=0, x=0, y=0, easing="ease-in"),
            CursorKeyframe(timestamp=1000, x=100, y=0, easing="linear"),
        ]
        assert interpolate_cursor(kfs, 500).x == pytest.approx(12.5)

    def test_legacy_easing_name(self) -> None:
        kfs = [
            CursorKeyframe(timestamp=0, x=0, y=0, easing="easeOut"),
            CursorKeyframe(timestamp=1000, x=100, y=0),
        ]
        assert interpolate_cursor(kfs, 500).x == pytest.approx(87.5)

    def test_size_blended_when_both_set(self) -> None:
        kfs = [
            CursorKeyframe(timestamp=0, x=0, y=0, size=100, easing="linear"),
            CursorKeyframe(timestamp=1000, x=0, y=0, size=200),
        ]
        assert interpolate_cursor(kfs, 500).size == pytest.approx(150)

    def test_size_from_whichever_side_has_it(self) -> None:
        kfs = [
            CursorKeyframe(timestamp=0, x=0, y=0),
            CursorKeyframe(timestamp=1000, x=0, y=0, size=200),
        ]
        assert interpolate_cursor(kfs, 500).size == 200

    def test_shape_and_color_step(self) -> None:
        kfs = [
            CursorKeyframe(timestamp=0, x=0, y=0, shape="arrow"),
            CursorKeyframe(timestamp=1000, x=0, y=0, shape="hand", color="#ffffff"),
        ]
        state = interpolate_cursor(kfs, 999)
        assert state.shape == "arrow"
        assert state.color == "#ffffff"

    def test_deterministic(self, shaped_track) -> None:
        a = [interpolate_cursor(shaped_track, t) for t in range(0, 1200, 7)]
        b = [interpolate_cursor(shaped_track, t) for t in reversed(range(0, 1200, 7))]
        assert a == list(reversed(b))


# ── Zoom ────────────────────────────────────────────────────────────


class TestInterpolateZoom:
    def test_empty_is_identity(self) -> None:
        assert interpolate_zoom([], 100, 1920, 1080) == ZoomRegion.identity(1920, 1080)

    def test_crop_from_level(self) -> None:
        kf = ZoomKeyframe(timestamp=0, center_x=960, center_y=540, level=2.0)
        assert resolve_crop(kf, 1920, 1080) == (960, 540)

    def test_explicit_crop_wins(self) -> None:
        kf = ZoomKeyframe(timestamp=0, center_x=0, center_y=0, level=2.0, crop_width=500, crop_height=300)
        assert resolve_crop(kf, 1920, 1080) == (500, 300)

    def test_midpoint(self, zoom_pair) -> None:
        r = interpolate_zoom(zoom_pair, 500, 1920, 1080)
        assert r.center_x == pytest.approx(720)
        assert r.center_y == pytest.approx(405)
        assert r.level == pytest.approx(1.5)
        assert r.crop_width == pytest.approx(1440)
        assert r.crop_height == pytest.approx(810)

    def test_hits_next_keyframe_exactly(self, zoom_pair) -> None:
        r = interpolate_zoom(zoom_pair, 1000, 1920, 1080)
        assert r.as_tuple() == (480, 270, 2.0, 960, 540)


class TestClampZoomRegion:
    def test_pushes_centre_inside(self) -> None:
        r = clamp_zoom_region(ZoomRegion(100, 100, 2.0, 960, 540), 1920, 1080)
        assert (r.center_x, r.center_y) == (480, 270)
        assert r.left == 0
        assert r.top == 0

    def test_far_edge(self) -> None:
        r = clamp_zoom_region(ZoomRegion(1900, 1070, 2.0, 960, 540), 1920, 1080)
        assert (r.center_x, r.center_y) == (1440, 810)

    def test_oversized_crop_is_centred(self) -> None:
        r = clamp_zoom_region(ZoomRegion(0, 0, 0.5, 3840, 2160), 1920, 1080)
        assert (r.center_x, r.center_y) == (960, 540)

    def test_inside_region_returned_as_is(self) -> None:
        region = ZoomRegion(960, 540, 2.0, 960, 540)
        assert clamp_zoom_region(region, 1920, 1080) is region
