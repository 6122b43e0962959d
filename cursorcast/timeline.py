"""Keyframe timeline maintenance — ordering, spacing, and edit history.

Every keyframe sequence in a document is kept sorted ascending by
``timestamp`` with no two entries closer than ``MIN_KEYFRAME_SPACING_MS``.
The helpers here work on any keyframe type that carries a ``timestamp``
(cursor or zoom), so both timelines share one implementation.

:class:`TimelineHistory` is the undo/redo stack used by the metadata
manager (deep-copy snapshots, max 50 entries).
"""

import copy
from typing import Any, Generic, List, Optional, Sequence, TypeVar

MIN_KEYFRAME_SPACING_MS = 10.0  # closer keyframes are merged
EDIT_TOLERANCE_MS = 100.0  # how close a click on the timeline must be to "hit" a keyframe
MAX_UNDO = 50  # maximum undo history depth

K = TypeVar("K")
S = TypeVar("S")


def sort_keyframes(keyframes: Sequence[K]) -> List[K]:
    """Return a new list sorted by timestamp (stable for equal times)."""
    return sorted(keyframes, key=lambda k: k.timestamp)


def dedup_keyframes(
    keyframes: Sequence[K], min_spacing: float = MIN_KEYFRAME_SPACING_MS
) -> List[K]:
    """Single forward pass over a *sorted* sequence.

    When a keyframe lands within *min_spacing* of the last retained one,
    it replaces that one: the later keyframe is the more specific.
    """
    result: List[K] = []
    for kf in keyframes:
        if result and kf.timestamp - result[-1].timestamp < min_spacing:
            result[-1] = kf
        else:
            result.append(kf)
    return result


def normalize_keyframes(
    keyframes: Sequence[K], min_spacing: float = MIN_KEYFRAME_SPACING_MS
) -> List[K]:
    """Sort then deduplicate."""
    return dedup_keyframes(sort_keyframes(keyframes), min_spacing)


def find_keyframe_index(
    keyframes: Sequence[Any], timestamp: float, tolerance: float = EDIT_TOLERANCE_MS
) -> Optional[int]:
    """Index of the keyframe nearest *timestamp* within *tolerance*, else ``None``."""
    best: Optional[int] = None
    best_diff = float("inf")
    for i, kf in enumerate(keyframes):
        diff = abs(kf.timestamp - timestamp)
        if diff <= tolerance and diff < best_diff:
            best = i
            best_diff = diff
    return best


def is_normalized(keyframes: Sequence[Any], min_spacing: float = MIN_KEYFRAME_SPACING_MS) -> bool:
    return all(
        b.timestamp - a.timestamp >= min_spacing
        for a, b in zip(keyframes, keyframes[1:])
    )


class TimelineHistory(Generic[S]):
    """Bounded undo/redo stack of deep-copied snapshots.

    Callers ``push()`` the state *before* mutating it; ``undo()`` and
    ``redo()`` take the live state so it can be moved to the opposite
    stack, and return the state to restore (or ``None``).
    """

    def __init__(self, max_depth: int = MAX_UNDO) -> None:
        self._max_depth = max_depth
        self._undo_stack: List[S] = []
        self._redo_stack: List[S] = []

    def push(self, state: S) -> None:
        """Save *state* onto the undo stack and clear the redo branch."""
        self._undo_stack.append(copy.deepcopy(state))
        if len(self._undo_stack) > self._max_depth:
            self._undo_stack.pop(0)
        self._redo_stack.clear()

    def undo(self, current: S) -> Optional[S]:
        if not self._undo_stack:
            return None
        self._redo_stack.append(copy.deepcopy(current))
        return self._undo_stack.pop()

    def redo(self, current: S) -> Optional[S]:
        if not self._redo_stack:
            return None
        self._undo_stack.append(copy.deepcopy(current))
        return self._redo_stack.pop()

    @property
    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    @property
    def depth(self) -> int:
        return len(self._undo_stack)

    def clear(self) -> None:
        """Discard all undo/redo history."""
        self._undo_stack.clear()
        self._redo_stack.clear()
