"""Zoom path — compile zoom sections into a per-frame array of crop regions.

Sections are coarse authoring intervals (one scale and centre between a
start and an end time).  They compile down to zoom keyframes: a hold at
each section's start and end, with eased lead-in / lead-out transitions
to the un-zoomed frame ``transitionSpeed`` ms either side, or a direct
section-to-section transition when neighbours are too close for both.
The keyframes are then sampled once per video frame so preview (which
maps time → frame index) and export (which walks frame indices) read
exactly the same regions.

Building the path is O(frame count), so consumers hold a
:class:`ZoomPathCache`, keyed by a structural hash of everything the
path depends on, and invalidate it when sections or config change.
"""

import copy
import dataclasses
import hashlib
import json
import logging
import math
from typing import Iterator, List, Optional, Sequence

import numpy as np

from .autogen import zoom_region_at
from .interpolator import clamp_zoom_region, interpolate_zoom
from .models import RecordingMetadata, ZoomConfig, ZoomKeyframe, ZoomRegion, ZoomSection
from .timeline import normalize_keyframes

logger = logging.getLogger(__name__)

SECTION_EASING = "ease-in-out"
_FRAME_EPSILON = 1e-6  # absorbs float error in i * interval → i


# ── Section compiler ────────────────────────────────────────────────


def clip_sections(sections: Sequence[ZoomSection]) -> List[ZoomSection]:
    """Sort by start time and trim overlaps so each starts after the previous ends."""
    result: List[ZoomSection] = []
    for s in sorted(sections, key=lambda s: s.start_time):
        start = s.start_time
        if result and start < result[-1].end_time:
            start = result[-1].end_time
            if s.end_time <= start:
                continue  # swallowed by the previous section
        elif s.end_time < start:
            continue
        if start != s.start_time:
            s = dataclasses.replace(s, start_time=start)
        result.append(s)
    return result


def _keyframe(timestamp: float, region: ZoomRegion) -> ZoomKeyframe:
    return ZoomKeyframe(
        timestamp=timestamp,
        center_x=region.center_x,
        center_y=region.center_y,
        level=region.level,
        crop_width=region.crop_width,
        crop_height=region.crop_height,
        easing=SECTION_EASING,
    )


def sections_to_keyframes(
    sections: Sequence[ZoomSection],
    video_width: float,
    video_height: float,
    config: Optional[ZoomConfig] = None,
) -> List[ZoomKeyframe]:
    """Compile *sections* into a normalized zoom keyframe timeline."""
    config = config or ZoomConfig()
    transition = max(config.transition_ms, 0.0)
    identity = ZoomRegion.identity(video_width, video_height)
    clipped = clip_sections(sections)

    keyframes: List[ZoomKeyframe] = []
    for i, s in enumerate(clipped):
        scale = s.scale if s.scale > 0 else config.level
        region = zoom_region_at(s.center_x, s.center_y, scale, video_width, video_height)

        prev = clipped[i - 1] if i > 0 else None
        nxt = clipped[i + 1] if i + 1 < len(clipped) else None

        # Neighbours closer than two transitions blend directly into each other
        if prev is None or s.start_time - prev.end_time > 2 * transition:
            keyframes.append(_keyframe(max(0.0, s.start_time - transition), identity))
        keyframes.append(_keyframe(s.start_time, region))
        if nxt is None or nxt.start_time - s.end_time > 2 * transition:
            keyframes.append(_keyframe(s.end_time, region))
            keyframes.append(_keyframe(s.end_time + transition, identity))
        else:
            # Leave at least one transition's time before the next section
            hold_end = max(s.start_time, min(s.end_time, nxt.start_time - transition))
            keyframes.append(_keyframe(hold_end, region))

    return normalize_keyframes(keyframes)


# ── Per-frame path ──────────────────────────────────────────────────


class ZoomPath:
    """Immutable per-frame sequence of :class:`ZoomRegion`.

    Frame *i* covers ``[i * interval, (i + 1) * interval)`` ms.  Lookups
    outside the path return the identity region.
    """

    def __init__(
        self,
        regions: Sequence[ZoomRegion],
        frame_interval: float,
        video_width: float,
        video_height: float,
    ) -> None:
        self._regions = tuple(regions)
        self.frame_interval = frame_interval
        self.video_width = video_width
        self.video_height = video_height
        self._identity = ZoomRegion.identity(video_width, video_height)

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[ZoomRegion]:
        return iter(self._regions)

    def __getitem__(self, i: int) -> ZoomRegion:
        return self._regions[i]

    @property
    def regions(self) -> tuple:
        return self._regions

    def frame_index(self, t: float) -> int:
        if self.frame_interval <= 0:
            return 0
        return int(math.floor(t / self.frame_interval + _FRAME_EPSILON))

    def region_at_frame(self, index: int) -> ZoomRegion:
        if 0 <= index < len(self._regions):
            return self._regions[index]
        return self._identity

    def region_at(self, t: float) -> ZoomRegion:
        """Region for the frame containing timestamp *t* (ms)."""
        return self.region_at_frame(self.frame_index(t))

    def as_array(self) -> np.ndarray:
        """``(n, 5)`` float array of ``centerX, centerY, level, cropWidth, cropHeight``."""
        if not self._regions:
            return np.zeros((0, 5), dtype=np.float64)
        return np.array([r.as_tuple() for r in self._regions], dtype=np.float64)


def generate_zoom_path(
    sections: Sequence[ZoomSection],
    video_width: float,
    video_height: float,
    config: ZoomConfig,
    frame_rate: float,
    duration_ms: float,
) -> ZoomPath:
    """Sample the compiled section timeline once per frame.

    Returns an empty path for a non-positive frame rate or duration, and
    the identity region on every frame when zoom is disabled or there
    are no sections.
    """
    if frame_rate <= 0 or duration_ms <= 0:
        return ZoomPath([], 0.0, video_width, video_height)

    interval = 1000.0 / frame_rate
    frame_count = int(math.ceil(duration_ms / interval))

    if not config.enabled or not sections:
        identity = ZoomRegion.identity(video_width, video_height)
        return ZoomPath([identity] * frame_count, interval, video_width, video_height)

    keyframes = sections_to_keyframes(sections, video_width, video_height, config)
    regions = [
        clamp_zoom_region(
            interpolate_zoom(keyframes, i * interval, video_width, video_height),
            video_width,
            video_height,
        )
        for i in range(frame_count)
    ]
    logger.info(
        "Built zoom path: %d frames from %d sections (%d keyframes)",
        frame_count, len(sections), len(keyframes),
    )
    return ZoomPath(regions, interval, video_width, video_height)


# ── Cache ───────────────────────────────────────────────────────────


def zoom_cache_key(
    sections: Sequence[ZoomSection],
    video_width: float,
    video_height: float,
    config: ZoomConfig,
    frame_rate: float,
    duration_ms: float,
) -> str:
    """Structural hash of everything a zoom path depends on."""
    payload = {
        "enabled": config.enabled,
        "level": config.level,
        "transitionSpeed": config.transition_ms,
        "sections": [s.to_dict() for s in sections],
        "video": [video_width, video_height],
        "frameRate": frame_rate,
        "duration": duration_ms,
    }
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha1(blob.encode("utf-8")).hexdigest()


class ZoomPathCache:
    """Read-through memo for :func:`generate_zoom_path`.

    Owned by one consumer (a preview widget or an export job).  Equal
    inputs hit the cache regardless of object identity.
    """

    def __init__(self) -> None:
        self._key: Optional[str] = None
        self._path: Optional[ZoomPath] = None
        self.hits = 0
        self.misses = 0

    @property
    def key(self) -> Optional[str]:
        return self._key

    def get(
        self,
        sections: Sequence[ZoomSection],
        video_width: float,
        video_height: float,
        config: ZoomConfig,
        frame_rate: float,
        duration_ms: float,
    ) -> ZoomPath:
        key = zoom_cache_key(sections, video_width, video_height, config, frame_rate, duration_ms)
        if self._path is not None and key == self._key:
            self.hits += 1
            return self._path
        self.misses += 1
        self._path = generate_zoom_path(
            sections, video_width, video_height, config, frame_rate, duration_ms
        )
        self._key = key
        return self._path

    def invalidate(self) -> None:
        """Drop the cached path; the next ``get()`` rebuilds it."""
        self._key = None
        self._path = None


# ── Legacy documents ────────────────────────────────────────────────


def migrate_sections(metadata: RecordingMetadata) -> RecordingMetadata:
    """Compile ``zoom_sections`` into ``zoom_keyframes`` and clear the sections.

    Returns a new document; the input is left untouched.  Existing zoom
    keyframes are kept and merged with the compiled ones.
    """
    migrated = copy.deepcopy(metadata)
    if not migrated.zoom_sections:
        return migrated

    compiled = sections_to_keyframes(
        migrated.zoom_sections,
        migrated.video.width,
        migrated.video.height,
        migrated.zoom_config,
    )
    logger.info(
        "Migrated %d zoom sections to %d zoom keyframes",
        len(migrated.zoom_sections), len(compiled),
    )
    migrated.zoom_keyframes = normalize_keyframes(migrated.zoom_keyframes + compiled)
    migrated.zoom_sections = []
    return migrated
