"""Click pulse — a transient cursor scale that bounces on each click.

The pulse is a pure function of ``(t, clicks)``: the most recent
``down`` click within ``CLICK_DURATION_MS`` of ``t`` drives a shrink
(ease-out) to ``CLICK_MIN_SCALE`` over the first half of the window and
a grow back (ease-in) to 1.0 over the second half.
"""

from typing import Iterable, Optional

from .easing import ease_in, ease_out, lerp
from .models import ClickEvent

CLICK_DURATION_MS = 200.0  # whole press animation
CLICK_MIN_SCALE = 0.7      # scale at the bottom of the bounce


def active_click(
    t: float, clicks: Iterable[ClickEvent], duration_ms: float = CLICK_DURATION_MS
) -> Optional[ClickEvent]:
    """Most recent ``down`` click with ``0 <= t - click.timestamp <= duration``."""
    best: Optional[ClickEvent] = None
    for click in clicks:
        if not click.is_down:
            continue
        age = t - click.timestamp
        if 0 <= age <= duration_ms and (best is None or click.timestamp > best.timestamp):
            best = click
    return best


def scale_at(
    t: float,
    clicks: Iterable[ClickEvent],
    duration_ms: float = CLICK_DURATION_MS,
    min_scale: float = CLICK_MIN_SCALE,
) -> float:
    """Cursor scale multiplier at *t* (1.0 when no click is animating)."""
    if duration_ms <= 0:
        return 1.0
    click = active_click(t, clicks, duration_ms)
    if click is None:
        return 1.0

    progress = (t - click.timestamp) / duration_ms
    if progress < 0.5:
        return lerp(1.0, min_scale, ease_out(progress * 2.0))
    return lerp(min_scale, 1.0, ease_in((progress - 0.5) * 2.0))
