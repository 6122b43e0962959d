"""Per-frame effect evaluation for preview and export.

:class:`FrameSampler` resolves everything a renderer needs to draw one
frame: cursor position, size, shape and colour, the click-pulse scale,
and the zoom crop.  Each preview widget or export job owns its own
sampler, because the glide smoother and the shape stabilizer carry state
from one frame to the next.

Two ways to drive it:

* **Interactive** — ``sample(t, dt)`` at whatever times the playhead
  produces; call ``seek(t)`` after any non-sequential jump.
* **Export** — ``iter_frames()`` walks fixed frame times
  ``i * 1000 / frameRate`` with a fixed step.
"""

import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Iterator, Optional

from .click_pulse import scale_at
from .interpolator import clamp_zoom_region, interpolate_cursor, interpolate_zoom
from .models import CursorState, RecordingMetadata, ZoomRegion
from .shape_stabilizer import ShapeStabilizer
from .smoothing import PassthroughSmoother, Smoother, make_smoother
from .timeline import sort_keyframes
from .zoom_path import ZoomPathCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameState:
    """Everything needed to paint cursor and zoom for one frame.

    ``cursor`` is ``None`` when the cursor timeline is empty; renderers
    skip drawing the cursor in that case.
    """
    timestamp: float
    frame_index: int
    cursor: Optional[CursorState]
    cursor_x: Optional[float]
    cursor_y: Optional[float]
    cursor_size: float
    cursor_scale: float
    cursor_shape: str
    cursor_color: str
    zoom: ZoomRegion

    @property
    def drawn_size(self) -> float:
        return self.cursor_size * self.cursor_scale

    def to_dict(self) -> dict:
        d = {
            "timestamp": self.timestamp,
            "frame": self.frame_index,
            "zoom": self.zoom.to_dict(),
        }
        if self.cursor is not None:
            d["cursor"] = {
                "x": self.cursor_x,
                "y": self.cursor_y,
                "size": self.cursor_size,
                "scale": self.cursor_scale,
                "shape": self.cursor_shape,
                "color": self.cursor_color,
            }
        return d


class FrameSampler:
    """Stateful evaluator bound to one metadata document.

    *smoothing* overrides the document's cursor config: ``None`` follows
    ``cursor_config.smoothing``, ``False`` samples the raw interpolated
    path, ``True`` always glides.
    """

    def __init__(self, metadata: RecordingMetadata, smoothing: Optional[bool] = None) -> None:
        self.metadata = metadata
        self._smoothing_override = smoothing
        self._zoom_cache = ZoomPathCache()
        self._last_t: Optional[float] = None
        self.refresh()

    # ── setup ──────────────────────────────────────────────────────

    def refresh(self) -> None:
        """Re-read timelines and config after the document was edited."""
        meta = self.metadata
        cfg = meta.cursor_config
        self._cursor_keyframes = sort_keyframes(meta.cursor_keyframes)
        self._zoom_keyframes = sort_keyframes(meta.zoom_keyframes)

        start = interpolate_cursor(self._cursor_keyframes, 0.0, cfg.default_easing)
        x, y = (start.x, start.y) if start is not None else (0.0, 0.0)

        if self._smoothing_override is False:
            self._smoother: Smoother = PassthroughSmoother(x, y)
        elif self._smoothing_override is True and cfg.smoothing <= 0:
            self._smoother = make_smoother(dataclasses.replace(cfg, smoothing=1.0), x, y)
        else:
            self._smoother = make_smoother(cfg, x, y)

        self._stabilizer = ShapeStabilizer(cfg.effective_shape, cfg.shape_dwell_ms)
        self._stabilizer.set_keyframes(self._cursor_keyframes)
        self._last_t = None
        logger.debug(
            "Sampler refreshed: %d cursor / %d zoom keyframes, %d sections, smoothing=%s",
            len(self._cursor_keyframes), len(self._zoom_keyframes),
            len(meta.zoom_sections), self.smoothing,
        )

    @property
    def smoothing(self) -> bool:
        return not isinstance(self._smoother, PassthroughSmoother)

    @property
    def frame_interval(self) -> float:
        return 1000.0 / self.metadata.frame_rate

    @property
    def frame_count(self) -> int:
        duration = self.metadata.duration
        if duration <= 0:
            return 0
        return int(math.ceil(duration / self.frame_interval))

    @property
    def zoom_cache(self) -> ZoomPathCache:
        return self._zoom_cache

    # ── pure lookups ───────────────────────────────────────────────

    def zoom_at(self, t: float) -> ZoomRegion:
        """Zoom crop at *t*: the section path if any, else the keyframes."""
        meta = self.metadata
        w, h = meta.video.width, meta.video.height
        if meta.zoom_sections:
            path = self._zoom_cache.get(
                meta.zoom_sections, w, h, meta.zoom_config, meta.frame_rate, meta.duration
            )
            return path.region_at(t)
        if not meta.zoom_config.enabled:
            return ZoomRegion.identity(w, h)
        return clamp_zoom_region(interpolate_zoom(self._zoom_keyframes, t, w, h), w, h)

    def cursor_at(self, t: float) -> Optional[CursorState]:
        return interpolate_cursor(self._cursor_keyframes, t, self.metadata.cursor_config.default_easing)

    # ── stateful sampling ──────────────────────────────────────────

    def seek(self, t: float) -> None:
        """Reset smoother and stabilizer for a discontinuous jump to *t*."""
        raw = self.cursor_at(t)
        if raw is not None:
            self._smoother.reset(raw.x, raw.y)
        self._stabilizer.reset(self._stabilizer.stable_shape_at(t))
        self._last_t = t

    def sample(self, t: float, dt: Optional[float] = None) -> FrameState:
        """Evaluate the frame at *t* ms.

        *dt* is wall-clock seconds since the previous call.  When omitted
        it is derived from the timestamps, and a backwards jump is
        treated as a seek.
        """
        if dt is None:
            if self._last_t is None or t < self._last_t:
                self.seek(t)
                dt = 0.0
            else:
                dt = (t - self._last_t) / 1000.0
        self._last_t = t
        return self._evaluate(t, dt)

    def iter_frames(self, start_frame: int = 0, end_frame: Optional[int] = None) -> Iterator[FrameState]:
        """Yield export-mode states for frames ``[start_frame, end_frame)``."""
        end = self.frame_count if end_frame is None else min(end_frame, self.frame_count)
        if start_frame >= end:
            return
        interval = self.frame_interval
        step = interval / 1000.0
        self.seek(start_frame * interval)
        for i in range(start_frame, end):
            t = i * interval
            self._last_t = t
            yield self._evaluate(t, 0.0 if i == start_frame else step)

    def _evaluate(self, t: float, dt: float) -> FrameState:
        cfg = self.metadata.cursor_config
        raw = self.cursor_at(t)

        x: Optional[float] = None
        y: Optional[float] = None
        size = cfg.size
        color = cfg.effective_color
        shape = self._stabilizer.committed_shape
        if raw is not None:
            target = raw
            if self.smoothing:
                # Aim one time constant ahead so the glide arrives on time
                ahead = self.cursor_at(t + self._smoother.smooth_time * 1000.0)
                target = ahead if ahead is not None else raw
            self._smoother.set_target(target.x, target.y)
            x, y = self._smoother.update(dt)
            if raw.size is not None:
                size = raw.size
            if raw.color is not None:
                color = raw.color
            # Unshaped keyframes continue the previous shape, so read it off the run
            run = self._stabilizer.run_at(t)
            shape = self._stabilizer.update(run.shape if run is not None else raw.shape, t)

        frame_index = int(math.floor(t / self.frame_interval + 1e-6))
        return FrameState(
            timestamp=t,
            frame_index=frame_index,
            cursor=raw,
            cursor_x=x,
            cursor_y=y,
            cursor_size=size,
            cursor_scale=scale_at(t, self.metadata.clicks),
            cursor_shape=shape,
            cursor_color=color,
            zoom=self.zoom_at(t),
        )
