"""Keyframe interpolation — the pure ``(timeline, t) -> state`` function.

Preview and export both sample through here, so every function in this
module is a deterministic function of its arguments: no caches, no
hidden state, no logging in the hot path.

Bracketing rules shared by the cursor and zoom timelines:

* ``t`` before the first keyframe → the first keyframe (no extrapolation)
* ``t`` at or after the last keyframe → the last keyframe
* otherwise the last keyframe with ``timestamp <= t`` (*prev*) and the
  next one (*next*) are blended with *prev*'s easing curve
"""

from typing import Optional, Sequence, Tuple, TypeVar

from .easing import DEFAULT_EASING, apply_easing, lerp
from .models import CursorKeyframe, CursorState, ZoomKeyframe, ZoomRegion

K = TypeVar("K")


def bracket(keyframes: Sequence[K], t: float) -> Tuple[K, K]:
    """Return the ``(prev, next)`` pair surrounding *t*.

    *keyframes* must be non-empty and sorted by timestamp.  Outside the
    covered range both items are the same boundary keyframe.
    """
    first, last = keyframes[0], keyframes[-1]
    if t < first.timestamp:
        return first, first
    if t >= last.timestamp:
        return last, last

    # Binary search for the last keyframe at or before t
    lo, hi = 0, len(keyframes) - 1
    while lo < hi - 1:
        mid = (lo + hi) // 2
        if keyframes[mid].timestamp <= t:
            lo = mid
        else:
            hi = mid
    return keyframes[lo], keyframes[hi]


def segment_progress(prev, nxt, t: float, default_easing: str = DEFAULT_EASING) -> float:
    """Eased progress of *t* across the ``prev → next`` segment."""
    span = nxt.timestamp - prev.timestamp
    if span <= 0:
        return 0.0
    return apply_easing((t - prev.timestamp) / span, prev.easing or default_easing)


def _cursor_state(kf: CursorKeyframe) -> CursorState:
    return CursorState(x=kf.x, y=kf.y, size=kf.size, shape=kf.shape, color=kf.color)


def interpolate_cursor(
    keyframes: Sequence[CursorKeyframe],
    t: float,
    default_easing: str = DEFAULT_EASING,
) -> Optional[CursorState]:
    """Cursor state at *t*, or ``None`` for an empty timeline.

    ``x``, ``y`` and ``size`` are blended; ``shape`` and ``color`` come
    from *prev*, falling back to *next* when *prev* leaves them unset.
    """
    if not keyframes:
        return None
    if len(keyframes) == 1:
        return _cursor_state(keyframes[0])

    prev, nxt = bracket(keyframes, t)
    if prev.timestamp == nxt.timestamp:
        return _cursor_state(prev)

    p = segment_progress(prev, nxt, t, default_easing)

    if prev.size is not None and nxt.size is not None:
        size = lerp(prev.size, nxt.size, p)
    else:
        size = prev.size if prev.size is not None else nxt.size

    return CursorState(
        x=lerp(prev.x, nxt.x, p),
        y=lerp(prev.y, nxt.y, p),
        size=size,
        shape=prev.shape if prev.shape is not None else nxt.shape,
        color=prev.color if prev.color is not None else nxt.color,
    )


def resolve_crop(kf: ZoomKeyframe, video_width: float, video_height: float) -> Tuple[float, float]:
    """Explicit crop size, or ``video / level`` when the keyframe omits it."""
    level = kf.level if kf.level > 0 else 1.0
    crop_w = kf.crop_width if kf.crop_width is not None else video_width / level
    crop_h = kf.crop_height if kf.crop_height is not None else video_height / level
    return crop_w, crop_h


def _zoom_state(kf: ZoomKeyframe, video_width: float, video_height: float) -> ZoomRegion:
    crop_w, crop_h = resolve_crop(kf, video_width, video_height)
    return ZoomRegion(
        center_x=kf.center_x,
        center_y=kf.center_y,
        level=kf.level,
        crop_width=crop_w,
        crop_height=crop_h,
    )


def interpolate_zoom(
    keyframes: Sequence[ZoomKeyframe],
    t: float,
    video_width: float,
    video_height: float,
) -> ZoomRegion:
    """Zoom state at *t*; the identity zoom for an empty timeline.

    The result is not clamped to the frame; see :func:`clamp_zoom_region`.
    """
    if not keyframes:
        return ZoomRegion.identity(video_width, video_height)
    if len(keyframes) == 1:
        return _zoom_state(keyframes[0], video_width, video_height)

    prev, nxt = bracket(keyframes, t)
    if prev.timestamp == nxt.timestamp:
        return _zoom_state(prev, video_width, video_height)

    p = segment_progress(prev, nxt, t)
    a = _zoom_state(prev, video_width, video_height)
    b = _zoom_state(nxt, video_width, video_height)
    return ZoomRegion(
        center_x=lerp(a.center_x, b.center_x, p),
        center_y=lerp(a.center_y, b.center_y, p),
        level=lerp(a.level, b.level, p),
        crop_width=lerp(a.crop_width, b.crop_width, p),
        crop_height=lerp(a.crop_height, b.crop_height, p),
    )


def clamp_zoom_region(region: ZoomRegion, video_width: float, video_height: float) -> ZoomRegion:
    """Shift the centre so the crop rectangle stays inside the video.

    A crop larger than the frame along an axis is centred on that axis.
    """
    def _clamp_axis(center: float, crop: float, dim: float) -> float:
        if crop >= dim:
            return dim / 2
        half = crop / 2
        return max(half, min(dim - half, center))

    cx = _clamp_axis(region.center_x, region.crop_width, video_width)
    cy = _clamp_axis(region.center_y, region.crop_height, video_height)
    if cx == region.center_x and cy == region.center_y:
        return region
    return ZoomRegion(cx, cy, region.level, region.crop_width, region.crop_height)
