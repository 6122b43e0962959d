"""Cursor-shape flicker suppression.

Raw cursor shapes follow hover telemetry and can flip every few
milliseconds (arrow → ibeam → arrow while skimming over a text field).
:class:`ShapeStabilizer` only commits a new shape once it is known to
persist for ``min_dwell_ms``.

With a keyframe timeline loaded via ``set_keyframes()`` the check looks
*ahead*: the run of identical shapes covering ``t`` is known up front,
so a run long enough is committed at its first frame and a short run is
never shown.  This makes the committed shape a function of ``t`` alone,
which keeps preview and export in agreement.  Without run information
the stabilizer falls back to a temporal dwell over successive updates.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import DEFAULT_CURSOR_SHAPE, CursorKeyframe

MIN_DWELL_MS = 100.0  # a shape must persist this long to be shown


@dataclass(frozen=True)
class ShapeRun:
    """A maximal interval over which the effective keyframe shape is constant."""
    start: float
    end: float  # exclusive; ``inf`` for the final run
    shape: str

    @property
    def duration(self) -> float:
        return self.end - self.start


def build_shape_runs(keyframes: Sequence[CursorKeyframe], initial_shape: str) -> List[ShapeRun]:
    """Collapse a sorted cursor timeline into runs of identical shape.

    A keyframe with no shape continues the previous one; before any
    shaped keyframe the *initial_shape* applies.
    """
    runs: List[ShapeRun] = []
    current = initial_shape
    start: Optional[float] = None
    for kf in keyframes:
        shape = kf.shape if kf.shape is not None else current
        if start is None:
            start, current = kf.timestamp, shape
        elif shape != current:
            runs.append(ShapeRun(start, kf.timestamp, current))
            start, current = kf.timestamp, shape
    if start is not None:
        runs.append(ShapeRun(start, math.inf, current))
    return runs


class ShapeStabilizer:
    """Stateful shape filter; reset it alongside the motion smoother on seek."""

    def __init__(self, initial_shape: str = DEFAULT_CURSOR_SHAPE, min_dwell_ms: float = MIN_DWELL_MS) -> None:
        self.initial_shape = initial_shape
        self.min_dwell_ms = min_dwell_ms
        self._committed = initial_shape
        self._runs: List[ShapeRun] = []
        self._pending: Optional[str] = None
        self._pending_since = 0.0
        self._last_t: Optional[float] = None

    def set_keyframes(self, keyframes: Sequence[CursorKeyframe]) -> None:
        """Precompute shape runs for look-ahead (timeline must be sorted)."""
        self._runs = build_shape_runs(keyframes, self.initial_shape)

    @property
    def committed_shape(self) -> str:
        return self._committed

    @property
    def runs(self) -> List[ShapeRun]:
        return list(self._runs)

    def run_at(self, t: float) -> Optional[ShapeRun]:
        """The run covering *t*; the first run for times before the timeline."""
        if not self._runs:
            return None
        lo, hi = 0, len(self._runs) - 1
        while lo < hi:
            mid = (lo + hi + 1) // 2
            if self._runs[mid].start <= t:
                lo = mid
            else:
                hi = mid - 1
        return self._runs[lo]

    def stable_shape_at(self, t: float) -> str:
        """Shape of the latest run at or before *t* that lasts the dwell.

        This is what sequential updates would have committed by *t*, so
        seeks reset to it.
        """
        if not self._runs:
            return self.initial_shape
        for run in reversed(self._runs):
            if run.start > t:
                continue
            if run.duration >= self.min_dwell_ms:
                return run.shape
        return self.initial_shape

    def update(self, raw_shape: Optional[str], t: float) -> str:
        """Feed the raw shape observed at *t*; returns the committed shape."""
        if self._last_t is not None and t < self._last_t:
            self._pending = None
        self._last_t = t

        if raw_shape is None or raw_shape == self._committed:
            self._pending = None
            return self._committed

        run = self.run_at(t)
        if run is not None and run.shape == raw_shape:
            if run.duration >= self.min_dwell_ms:
                self._commit(raw_shape)
            return self._committed

        # No usable look-ahead: require the candidate to be seen for the dwell
        if raw_shape != self._pending:
            self._pending = raw_shape
            self._pending_since = t
        if t - self._pending_since >= self.min_dwell_ms:
            self._commit(raw_shape)
        return self._committed

    def _commit(self, shape: str) -> None:
        self._committed = shape
        self._pending = None

    def reset(self, shape: Optional[str] = None) -> None:
        """Restore *shape* (default: the initial shape) and drop pending state."""
        self._committed = shape if shape is not None else self.initial_shape
        self._pending = None
        self._last_t = None
