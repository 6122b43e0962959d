"""Generate keyframes from click telemetry.

When a recording has clicks but only a handful of hand-placed
keyframes, this module synthesizes a path that visits every click at
the right moment:

1. **Look-back keyframe** — ``LOOKBACK_FRAMES`` frames before each click,
   holding the *previous* click's state, so the move into the click
   starts late and arrives exactly on time.
2. **Click keyframe** — at the click timestamp, at the click's state.
3. **Trailing keyframe** — at the end of the video, holding the last
   state, so the timeline covers the whole recording.

Generated and existing keyframes are merged by one shared routine
(:func:`synthesize_and_merge`): sort, collapse anything closer than the
minimum spacing (the later keyframe wins), then add the trailing
keyframe.  The cursor and zoom variants differ only in payload.

Also detects static/moving zoom sections from a cursor sample stream.
"""

import logging
import math
from typing import Callable, List, Optional, Sequence, TypeVar

from .interpolator import clamp_zoom_region, interpolate_zoom
from .models import (
    DEFAULT_FRAME_RATE,
    DEFAULT_ZOOM_LEVEL,
    ClickEvent,
    CursorKeyframe,
    ZoomConfig,
    ZoomKeyframe,
    ZoomRegion,
    ZoomSection,
)
from .timeline import MIN_KEYFRAME_SPACING_MS, normalize_keyframes, sort_keyframes

logger = logging.getLogger(__name__)

K = TypeVar("K")


# ── Tuning constants ────────────────────────────────────────────────

LOOKBACK_FRAMES = 7          # start moving toward a click this many frames early
TRAILING_TOLERANCE_MS = 100  # add an end-of-video keyframe if the last is further away
DENSITY_RATIO = 0.5          # generate only if existing < clicks * ratio

# Zoom section detection
MIN_STATIC_MS = 300          # cursor must rest this long to count as static
LOOKAHEAD_SAMPLES = 50       # cap on samples scanned when checking for a settle


def frames_to_ms(frames: float, frame_rate: float) -> float:
    """Duration of *frames* frames at *frame_rate* fps, in ms."""
    return frames / frame_rate * 1000.0


def _effective_frame_rate(frame_rate: float) -> float:
    if frame_rate <= 0:
        logger.warning("Frame rate %s is not positive — using %d fps", frame_rate, DEFAULT_FRAME_RATE)
        return float(DEFAULT_FRAME_RATE)
    return frame_rate


def down_clicks(clicks: Sequence[ClickEvent]) -> List[ClickEvent]:
    """Button presses only, in chronological order."""
    return sorted((c for c in clicks if c.is_down), key=lambda c: c.timestamp)


def should_generate(existing_count: int, click_count: int) -> bool:
    """Density heuristic: dense existing keyframes mean manual authoring."""
    return click_count > 0 and existing_count < click_count * DENSITY_RATIO


def synthesize_and_merge(
    existing: Sequence[K],
    candidates: Sequence[K],
    video_duration: float,
    make_trailing: Callable[[Optional[K], float], K],
    min_spacing: float = MIN_KEYFRAME_SPACING_MS,
) -> List[K]:
    """Merge generated *candidates* into *existing* and close the timeline.

    *make_trailing* receives the last retained keyframe (or ``None``)
    and the end timestamp, and returns the keyframe to append there.
    """
    merged = normalize_keyframes(list(existing) + list(candidates), min_spacing)
    last = merged[-1] if merged else None
    if video_duration > 0 and (last is None or last.timestamp < video_duration - TRAILING_TOLERANCE_MS):
        merged.append(make_trailing(last, video_duration))
    return merged


# ── Cursor keyframes ────────────────────────────────────────────────


def generate_cursor_keyframes(
    existing: Sequence[CursorKeyframe],
    clicks: Sequence[ClickEvent],
    video_duration: float,
    frame_rate: float,
) -> List[CursorKeyframe]:
    """Fill a sparse cursor timeline from click telemetry.

    Returns the existing keyframes unchanged when there are no presses
    or the timeline is already dense enough to be hand-authored.
    """
    presses = down_clicks(clicks)
    if not should_generate(len(existing), len(presses)):
        return list(existing)

    frame_rate = _effective_frame_rate(frame_rate)
    existing = sort_keyframes(existing)

    # Start where the user's first keyframe is, else at the first click
    start = existing[0] if existing else presses[0]
    prev_x, prev_y = start.x, start.y

    candidates: List[CursorKeyframe] = []
    if not existing:
        candidates.append(CursorKeyframe(timestamp=0.0, x=prev_x, y=prev_y))

    lookback = frames_to_ms(LOOKBACK_FRAMES, frame_rate)
    for click in presses:
        before = max(0.0, click.timestamp - lookback)
        if before < click.timestamp:
            candidates.append(CursorKeyframe(timestamp=before, x=prev_x, y=prev_y))
        candidates.append(CursorKeyframe(timestamp=click.timestamp, x=click.x, y=click.y))
        prev_x, prev_y = click.x, click.y

    last_click = presses[-1]

    def _trailing(last: Optional[CursorKeyframe], ts: float) -> CursorKeyframe:
        src = last if last is not None else last_click
        return CursorKeyframe(timestamp=ts, x=src.x, y=src.y)

    result = synthesize_and_merge(existing, candidates, video_duration, _trailing)
    logger.info(
        "Auto-generated cursor keyframes from %d clicks: %d existing → %d total",
        len(presses), len(existing), len(result),
    )
    return result


# ── Zoom keyframes ──────────────────────────────────────────────────


def _zoom_keyframe(
    timestamp: float, region: ZoomRegion
) -> ZoomKeyframe:
    return ZoomKeyframe(
        timestamp=timestamp,
        center_x=region.center_x,
        center_y=region.center_y,
        level=region.level,
        crop_width=region.crop_width,
        crop_height=region.crop_height,
    )


def zoom_region_at(
    x: float, y: float, level: float, video_width: float, video_height: float
) -> ZoomRegion:
    """Crop of *level* centred as close to ``(x, y)`` as the frame allows."""
    level = level if level > 0 else 1.0
    region = ZoomRegion(x, y, level, video_width / level, video_height / level)
    return clamp_zoom_region(region, video_width, video_height)


def generate_zoom_keyframes(
    existing: Sequence[ZoomKeyframe],
    clicks: Sequence[ClickEvent],
    video_duration: float,
    frame_rate: float,
    video_width: float,
    video_height: float,
    zoom_level: float = DEFAULT_ZOOM_LEVEL,
    replace_existing: bool = False,
) -> List[ZoomKeyframe]:
    """Zoom in on every click.

    By default generated keyframes are merged into *existing* under the
    same density rule as the cursor timeline.  ``replace_existing=True``
    discards the existing zoom timeline and rebuilds it from clicks
    alone (the behaviour of earlier releases).
    """
    presses = down_clicks(clicks)
    if not presses:
        return list(existing)
    if not replace_existing and not should_generate(len(existing), len(presses)):
        return list(existing)

    frame_rate = _effective_frame_rate(frame_rate)
    base = [] if replace_existing else sort_keyframes(existing)
    if replace_existing and existing:
        logger.info("Replacing %d existing zoom keyframes", len(existing))

    lookback = frames_to_ms(LOOKBACK_FRAMES, frame_rate)

    # Hold what the existing timeline shows just before the first click
    first_before = max(0.0, presses[0].timestamp - lookback)
    prev = interpolate_zoom(base, first_before, video_width, video_height)

    candidates: List[ZoomKeyframe] = []
    if not base:
        candidates.append(_zoom_keyframe(0.0, prev))

    for click in presses:
        target = zoom_region_at(click.x, click.y, zoom_level, video_width, video_height)
        before = max(0.0, click.timestamp - lookback)
        if before < click.timestamp:
            candidates.append(_zoom_keyframe(before, prev))
        candidates.append(_zoom_keyframe(click.timestamp, target))
        prev = target

    def _trailing(last: Optional[ZoomKeyframe], ts: float) -> ZoomKeyframe:
        if last is None:
            return _zoom_keyframe(ts, prev)
        return ZoomKeyframe(
            timestamp=ts,
            center_x=last.center_x,
            center_y=last.center_y,
            level=last.level,
            crop_width=last.crop_width,
            crop_height=last.crop_height,
        )

    result = synthesize_and_merge(base, candidates, video_duration, _trailing)
    logger.info(
        "Auto-generated zoom keyframes from %d clicks: %d total (level %.2fx)",
        len(presses), len(result), zoom_level,
    )
    return result


# ── Zoom section detection ──────────────────────────────────────────


def _dist(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(bx - ax, by - ay)


def detect_zoom_sections(
    samples: Sequence,
    video_width: float,
    video_height: float,
    config: Optional[ZoomConfig] = None,
) -> List[ZoomSection]:
    """Split a cursor sample stream into alternating static / moving sections.

    *samples* are any objects with ``timestamp``, ``x`` and ``y`` in
    chronological order (cursor keyframes or raw telemetry).  A static
    section ends once the cursor leaves the dead-zone radius around its
    settle point; a moving section ends when the cursor is about to rest
    for at least ``MIN_STATIC_MS``.  Static sections zoom to
    ``config.level`` on the settle point; moving sections are un-zoomed.
    """
    if not samples:
        return []
    config = config or ZoomConfig()
    dead_zone = config.effective_dead_zone

    def _section(start: float, end: float, static: bool, cx: float = 0.0, cy: float = 0.0) -> ZoomSection:
        if static:
            return ZoomSection(start, end, config.level, cx, cy)
        return ZoomSection(start, end, 1.0, video_width / 2, video_height / 2)

    sections: List[ZoomSection] = []
    static = True
    section_start = samples[0].timestamp
    cx, cy = samples[0].x, samples[0].y
    last_time = section_start

    for i in range(1, len(samples)):
        s = samples[i]
        last_time = s.timestamp

        if static:
            if _dist(cx, cy, s.x, s.y) > dead_zone:
                sections.append(_section(section_start, s.timestamp, True, cx, cy))
                static = False
                section_start = s.timestamp
            continue

        # Moving: look ahead to see whether the cursor settles here
        settles = True
        rest_ms = 0.0
        for j in range(i + 1, min(len(samples), i + LOOKAHEAD_SAMPLES)):
            nxt = samples[j]
            if _dist(s.x, s.y, nxt.x, nxt.y) > dead_zone:
                settles = False
                break
            rest_ms = nxt.timestamp - s.timestamp
            if rest_ms >= MIN_STATIC_MS:
                break

        if settles and rest_ms >= MIN_STATIC_MS:
            sections.append(_section(section_start, s.timestamp, False))
            static = True
            section_start = s.timestamp
            cx, cy = s.x, s.y

    sections.append(_section(section_start, last_time, static, cx, cy))
    logger.info("Detected %d zoom sections from %d samples", len(sections), len(samples))
    return sections
