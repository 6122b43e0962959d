"""Easing curves — map normalised progress in [0, 1] to eased progress.

All curves are pure functions with exact endpoints (``f(0) == 0`` and
``f(1) == 1``).  Keyframes name their curve with an easing identifier;
the canonical spelling is hyphenated (``ease-in-out``) but documents
written by older builds use camelCase (``easeInOut``), so both resolve
to the same function.  Unrecognised identifiers fall back to
``ease-in-out``.
"""

from typing import Callable, Dict, Optional

EasingFunc = Callable[[float], float]

DEFAULT_EASING = "ease-in-out"


def linear(t: float) -> float:
    """Constant speed."""
    return t


def ease_in(t: float) -> float:
    """Cubic ease-in — slow start, accelerating.  f(t) = t³"""
    return t * t * t


def ease_out(t: float) -> float:
    """Cubic ease-out — fast start, decelerating.  f(t) = 1 - (1-t)³"""
    inv = 1.0 - t
    return 1.0 - inv * inv * inv


def ease_in_out(t: float) -> float:
    """Quadratic ease-in-out — slow at both ends, fastest at t = 0.5."""
    if t < 0.5:
        return 2.0 * t * t
    return 1.0 - ((-2.0 * t + 2.0) ** 2) / 2.0


EASING_FUNCTIONS: Dict[str, EasingFunc] = {
    "linear": linear,
    "ease-in": ease_in,
    "ease-out": ease_out,
    "ease-in-out": ease_in_out,
}

# Alternate spellings found in persisted documents
_ALIASES = {
    "easeIn": "ease-in",
    "easeOut": "ease-out",
    "easeInOut": "ease-in-out",
    "ease_in": "ease-in",
    "ease_out": "ease-out",
    "ease_in_out": "ease-in-out",
}


def normalize_easing(name: Optional[str]) -> str:
    """Return the canonical identifier for *name* (``ease-in-out`` if unknown)."""
    if not name:
        return DEFAULT_EASING
    if name in EASING_FUNCTIONS:
        return name
    return _ALIASES.get(name, DEFAULT_EASING)


def is_known_easing(name: Optional[str]) -> bool:
    return bool(name) and (name in EASING_FUNCTIONS or name in _ALIASES)


def get_easing(name: Optional[str]) -> EasingFunc:
    """Look up an easing function by identifier, with fallback."""
    return EASING_FUNCTIONS[normalize_easing(name)]


def apply_easing(t: float, easing: Optional[str] = None) -> float:
    """Clamp *t* to [0, 1] and run it through the named curve."""
    return get_easing(easing)(clamp(t, 0.0, 1.0))


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    """Blend *a* → *b*.  Written so ``t == 0`` and ``t == 1`` are exact."""
    return a * (1.0 - t) + b * t
