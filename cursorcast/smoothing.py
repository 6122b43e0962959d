"""Cursor glide — a critically damped follower on top of interpolated position.

:class:`MotionSmoother` implements the "SmoothDamp" step: the tracked
position chases its target with no overshoot, and the time constant
``smooth_time`` (seconds) sets how far it lags behind.  It integrates
over *wall-clock* ``dt`` rather than video time, so it must be reset
whenever the caller seeks or loads new content.

:class:`PassthroughSmoother` has the same interface and returns the
target unchanged, for consumers that want the raw interpolated path.
"""

from typing import Dict, Tuple, Union

from .models import CursorConfig

# ── Tuning constants ────────────────────────────────────────────────

CURSOR_SMOOTH_TIME = 0.2      # default time constant (s)
MAX_DT = 0.1                  # cap per-update step to ride out frame hitches (s)
SMOOTHDAMP_COEFF_1 = 0.48     # Padé-style approximation of exp(-x)
SMOOTHDAMP_COEFF_2 = 0.235
CONVERGENCE_THRESHOLD = 1e-4  # snap to target below this offset and speed

# Fixed time constant per style; it does not shrink with cursor speed
ANIMATION_STYLES: Dict[str, float] = {
    "slow": 0.45,
    "mellow": 0.25,
    "quick": 0.12,
    "rapid": 0.06,
}


def smooth_time_for_style(style: str) -> float:
    """Time constant for an animation style name (``mellow`` if unknown)."""
    return ANIMATION_STYLES.get(style, ANIMATION_STYLES["mellow"])


def _smooth_damp(
    current: float, target: float, velocity: float, omega: float, dt: float, exp: float
) -> Tuple[float, float]:
    change = current - target
    temp = (velocity + omega * change) * dt
    new_velocity = (velocity - omega * temp) * exp
    return target + (change + temp) * exp, new_velocity


class MotionSmoother:
    """2D SmoothDamp follower.

    ``set_target()`` moves the goal without touching velocity, so a
    moving target keeps its momentum.  ``update(dt)`` advances the
    simulation and returns the new ``(x, y)``.
    """

    def __init__(self, x: float, y: float, smooth_time: float = CURSOR_SMOOTH_TIME) -> None:
        self.smooth_time = max(smooth_time, 1e-3)
        self._x = x
        self._y = y
        self._target_x = x
        self._target_y = y
        self._vx = 0.0
        self._vy = 0.0

    def set_target(self, x: float, y: float) -> None:
        self._target_x = x
        self._target_y = y

    def update(self, dt: float) -> Tuple[float, float]:
        """Advance by *dt* seconds (capped at ``MAX_DT``)."""
        if dt <= 0:
            return self._x, self._y
        if self.converged:
            self._x, self._y = self._target_x, self._target_y
            self._vx = self._vy = 0.0
            return self._x, self._y

        dt = min(dt, MAX_DT)
        omega = 2.0 / self.smooth_time
        x = omega * dt
        exp = 1.0 / (1.0 + x + SMOOTHDAMP_COEFF_1 * x * x + SMOOTHDAMP_COEFF_2 * x * x * x)

        self._x, self._vx = _smooth_damp(self._x, self._target_x, self._vx, omega, dt, exp)
        self._y, self._vy = _smooth_damp(self._y, self._target_y, self._vy, omega, dt, exp)
        return self._x, self._y

    def reset(self, x: float, y: float) -> None:
        """Jump straight to ``(x, y)`` with zero velocity (call after a seek)."""
        self._x = self._target_x = x
        self._y = self._target_y = y
        self._vx = self._vy = 0.0

    @property
    def converged(self) -> bool:
        return (
            abs(self._x - self._target_x) < CONVERGENCE_THRESHOLD
            and abs(self._y - self._target_y) < CONVERGENCE_THRESHOLD
            and abs(self._vx) < CONVERGENCE_THRESHOLD
            and abs(self._vy) < CONVERGENCE_THRESHOLD
        )

    @property
    def position(self) -> Tuple[float, float]:
        return self._x, self._y

    @property
    def velocity(self) -> Tuple[float, float]:
        return self._vx, self._vy

    @property
    def target(self) -> Tuple[float, float]:
        return self._target_x, self._target_y


class PassthroughSmoother:
    """Disabled glide: ``update()`` returns the target immediately."""

    smooth_time = 0.0
    converged = True

    def __init__(self, x: float = 0.0, y: float = 0.0) -> None:
        self._x = x
        self._y = y

    def set_target(self, x: float, y: float) -> None:
        self._x = x
        self._y = y

    def update(self, dt: float) -> Tuple[float, float]:
        return self._x, self._y

    def reset(self, x: float, y: float) -> None:
        self._x = x
        self._y = y

    @property
    def position(self) -> Tuple[float, float]:
        return self._x, self._y

    @property
    def velocity(self) -> Tuple[float, float]:
        return 0.0, 0.0

    @property
    def target(self) -> Tuple[float, float]:
        return self._x, self._y


Smoother = Union[MotionSmoother, PassthroughSmoother]


def make_smoother(config: CursorConfig, x: float = 0.0, y: float = 0.0) -> Smoother:
    """Pick the smoother a cursor configuration asks for."""
    if config.smoothing <= 0:
        return PassthroughSmoother(x, y)
    return MotionSmoother(x, y, smooth_time_for_style(config.animation_style))
