"""Metadata manager — edit operations on the loaded recording metadata.

Owns the in-memory :class:`RecordingMetadata` for an editing session and
exposes the operations the timeline and property panels call: add /
remove / update keyframes and zoom sections, change configuration, run
the auto-generators.  Every mutation re-sorts and re-deduplicates the
affected timeline, records an undo snapshot, and emits ``changed``.

Keyframe operations match by timestamp within ``EDIT_TOLERANCE_MS``
(the hit radius of a keyframe marker on the timeline); section
operations match sections by their exact start time.
"""

import dataclasses
import logging
from typing import Any, List, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from . import autogen, zoom_path
from .metadata_file import apply_frame_offset
from .models import (
    DEFAULT_FRAME_RATE,
    CursorKeyframe,
    RecordingMetadata,
    ZoomKeyframe,
    ZoomSection,
)
from .timeline import EDIT_TOLERANCE_MS, TimelineHistory, find_keyframe_index, normalize_keyframes

logger = logging.getLogger(__name__)


class MetadataManager(QObject):
    """Signal-emitting wrapper around one metadata document with undo/redo."""

    changed = Signal(object)  # RecordingMetadata | None

    def __init__(self, metadata: Optional[RecordingMetadata] = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._metadata: Optional[RecordingMetadata] = None
        self._history: TimelineHistory[RecordingMetadata] = TimelineHistory()
        if metadata is not None:
            self.load(metadata)

    # ── document lifecycle ─────────────────────────────────────────

    @property
    def metadata(self) -> Optional[RecordingMetadata]:
        return self._metadata

    @property
    def is_loaded(self) -> bool:
        return self._metadata is not None

    def load(self, metadata: RecordingMetadata) -> None:
        """Adopt *metadata* as the working document and clear history."""
        metadata.cursor_keyframes = normalize_keyframes(metadata.cursor_keyframes)
        metadata.zoom_keyframes = normalize_keyframes(metadata.zoom_keyframes)
        self._metadata = metadata
        self._history.clear()
        logger.info(
            "Loaded metadata: %d cursor keyframes, %d zoom keyframes, %d sections, %d clicks",
            len(metadata.cursor_keyframes), len(metadata.zoom_keyframes),
            len(metadata.zoom_sections), len(metadata.clicks),
        )
        self.changed.emit(self._metadata)

    def clear(self) -> None:
        self._metadata = None
        self._history.clear()
        self.changed.emit(None)

    def _begin(self, action: str) -> bool:
        """Guard + undo snapshot; returns False when nothing is loaded."""
        if self._metadata is None:
            logger.warning("Cannot %s: no metadata loaded", action)
            return False
        self._history.push(self._metadata)
        return True

    def _commit(self) -> None:
        self.changed.emit(self._metadata)

    # ── accessors ──────────────────────────────────────────────────

    def video_dimensions(self) -> Tuple[int, int]:
        if self._metadata is None:
            return 0, 0
        return self._metadata.video.width, self._metadata.video.height

    def frame_rate(self) -> float:
        if self._metadata is None:
            return float(DEFAULT_FRAME_RATE)
        return self._metadata.frame_rate

    def duration(self) -> float:
        if self._metadata is None:
            return 0.0
        return self._metadata.duration

    def cursor_keyframes(self) -> List[CursorKeyframe]:
        return list(self._metadata.cursor_keyframes) if self._metadata else []

    def zoom_keyframes(self) -> List[ZoomKeyframe]:
        return list(self._metadata.zoom_keyframes) if self._metadata else []

    def zoom_sections(self) -> List[ZoomSection]:
        return list(self._metadata.zoom_sections) if self._metadata else []

    # ── cursor keyframes ───────────────────────────────────────────

    def add_cursor_keyframe(self, kf: CursorKeyframe, tolerance: float = EDIT_TOLERANCE_MS) -> None:
        """Insert *kf*, or replace the keyframe already within *tolerance*."""
        if not self._begin("add cursor keyframe"):
            return
        kfs = list(self._metadata.cursor_keyframes)
        idx = find_keyframe_index(kfs, kf.timestamp, tolerance)
        if idx is not None:
            kfs[idx] = kf
        else:
            kfs.append(kf)
        self._metadata.cursor_keyframes = normalize_keyframes(kfs)
        logger.debug("Cursor keyframe at %.0f ms", kf.timestamp)
        self._commit()

    def remove_cursor_keyframe(self, timestamp: float, tolerance: float = EDIT_TOLERANCE_MS) -> bool:
        if self._metadata is None:
            logger.warning("Cannot remove cursor keyframe: no metadata loaded")
            return False
        idx = find_keyframe_index(self._metadata.cursor_keyframes, timestamp, tolerance)
        if idx is None:
            return False
        self._begin("remove cursor keyframe")
        del self._metadata.cursor_keyframes[idx]
        self._commit()
        return True

    def update_cursor_keyframe(
        self, at: float, /, tolerance: float = EDIT_TOLERANCE_MS, **changes: Any
    ) -> bool:
        """Apply field *changes* to the keyframe nearest *at*.

        *changes* may include ``timestamp`` to move the keyframe in time.
        """
        if self._metadata is None:
            logger.warning("Cannot update cursor keyframe: no metadata loaded")
            return False
        idx = find_keyframe_index(self._metadata.cursor_keyframes, at, tolerance)
        if idx is None:
            return False
        self._begin("update cursor keyframe")
        kfs = list(self._metadata.cursor_keyframes)
        kfs[idx] = dataclasses.replace(kfs[idx], **changes)
        self._metadata.cursor_keyframes = normalize_keyframes(kfs)
        self._commit()
        return True

    # ── zoom keyframes ─────────────────────────────────────────────

    def add_zoom_keyframe(self, kf: ZoomKeyframe, tolerance: float = EDIT_TOLERANCE_MS) -> None:
        """Insert *kf* (crop filled in from its level), or replace a near one."""
        if not self._begin("add zoom keyframe"):
            return
        if kf.crop_width is None or kf.crop_height is None:
            w, h = self.video_dimensions()
            level = kf.level if kf.level > 0 else 1.0
            kf = dataclasses.replace(
                kf,
                crop_width=kf.crop_width if kf.crop_width is not None else w / level,
                crop_height=kf.crop_height if kf.crop_height is not None else h / level,
            )
        kfs = list(self._metadata.zoom_keyframes)
        idx = find_keyframe_index(kfs, kf.timestamp, tolerance)
        if idx is not None:
            kfs[idx] = kf
        else:
            kfs.append(kf)
        self._metadata.zoom_keyframes = normalize_keyframes(kfs)
        self._commit()

    def remove_zoom_keyframe(self, timestamp: float, tolerance: float = EDIT_TOLERANCE_MS) -> bool:
        if self._metadata is None:
            logger.warning("Cannot remove zoom keyframe: no metadata loaded")
            return False
        idx = find_keyframe_index(self._metadata.zoom_keyframes, timestamp, tolerance)
        if idx is None:
            return False
        self._begin("remove zoom keyframe")
        del self._metadata.zoom_keyframes[idx]
        self._commit()
        return True

    def update_zoom_keyframe(
        self, at: float, /, tolerance: float = EDIT_TOLERANCE_MS, **changes: Any
    ) -> bool:
        if self._metadata is None:
            logger.warning("Cannot update zoom keyframe: no metadata loaded")
            return False
        idx = find_keyframe_index(self._metadata.zoom_keyframes, at, tolerance)
        if idx is None:
            return False
        self._begin("update zoom keyframe")
        kfs = list(self._metadata.zoom_keyframes)
        kfs[idx] = dataclasses.replace(kfs[idx], **changes)
        self._metadata.zoom_keyframes = normalize_keyframes(kfs)
        self._commit()
        return True

    # ── zoom sections ──────────────────────────────────────────────

    def set_zoom_sections(self, sections: List[ZoomSection]) -> None:
        if not self._begin("set zoom sections"):
            return
        self._metadata.zoom_sections = sorted(sections, key=lambda s: s.start_time)
        self._commit()

    def add_zoom_section(self, section: ZoomSection) -> None:
        if not self._begin("add zoom section"):
            return
        self._metadata.zoom_sections = sorted(
            self._metadata.zoom_sections + [section], key=lambda s: s.start_time
        )
        logger.info("Added zoom section: %.0fms - %.0fms", section.start_time, section.end_time)
        self._commit()

    def _section_index(self, start_time: float) -> Optional[int]:
        for i, s in enumerate(self._metadata.zoom_sections):
            if s.start_time == start_time:
                return i
        return None

    def remove_zoom_section(self, start_time: float) -> bool:
        """Remove the section starting exactly at *start_time*."""
        if self._metadata is None:
            logger.warning("Cannot remove zoom section: no metadata loaded")
            return False
        idx = self._section_index(start_time)
        if idx is None:
            return False
        self._begin("remove zoom section")
        del self._metadata.zoom_sections[idx]
        logger.info("Removed zoom section at %.0fms", start_time)
        self._commit()
        return True

    def update_zoom_section(self, at: float, /, **changes: Any) -> bool:
        if self._metadata is None:
            logger.warning("Cannot update zoom section: no metadata loaded")
            return False
        idx = self._section_index(at)
        if idx is None:
            return False
        self._begin("update zoom section")
        sections = list(self._metadata.zoom_sections)
        sections[idx] = dataclasses.replace(sections[idx], **changes)
        self._metadata.zoom_sections = sorted(sections, key=lambda s: s.start_time)
        logger.info("Updated zoom section at %.0fms", at)
        self._commit()
        return True

    # ── configuration ──────────────────────────────────────────────

    def update_cursor_config(self, **changes: Any) -> None:
        if not self._begin("update cursor config"):
            return
        self._metadata.cursor_config = dataclasses.replace(self._metadata.cursor_config, **changes)
        self._commit()

    def update_zoom_config(self, **changes: Any) -> None:
        if not self._begin("update zoom config"):
            return
        self._metadata.zoom_config = dataclasses.replace(self._metadata.zoom_config, **changes)
        self._commit()

    # ── generators ─────────────────────────────────────────────────

    def auto_generate_cursor_keyframes(self) -> int:
        """Fill the cursor timeline from clicks.  Returns keyframes added."""
        if self._metadata is None:
            logger.warning("Cannot auto-generate cursor keyframes: no metadata loaded")
            return 0
        meta = self._metadata
        before = meta.cursor_keyframes
        result = autogen.generate_cursor_keyframes(
            before, meta.clicks, meta.duration, meta.frame_rate
        )
        if result == before:
            return 0
        self._begin("auto-generate cursor keyframes")
        meta.cursor_keyframes = result
        self._commit()
        return len(result) - len(before)

    def auto_generate_zoom_keyframes(self, replace_existing: bool = False) -> int:
        """Zoom in on clicks.  Returns the change in zoom keyframe count."""
        if self._metadata is None:
            logger.warning("Cannot auto-generate zoom keyframes: no metadata loaded")
            return 0
        meta = self._metadata
        before = meta.zoom_keyframes
        result = autogen.generate_zoom_keyframes(
            before,
            meta.clicks,
            meta.duration,
            meta.frame_rate,
            meta.video.width,
            meta.video.height,
            meta.zoom_config.level,
            replace_existing=replace_existing,
        )
        if result == before:
            return 0
        self._begin("auto-generate zoom keyframes")
        meta.zoom_keyframes = result
        self._commit()
        return len(result) - len(before)

    def migrate_sections(self) -> int:
        """Compile zoom sections into zoom keyframes.  Returns sections migrated."""
        if self._metadata is None:
            logger.warning("Cannot migrate zoom sections: no metadata loaded")
            return 0
        count = len(self._metadata.zoom_sections)
        if count == 0:
            return 0
        self._begin("migrate zoom sections")
        self._metadata = zoom_path.migrate_sections(self._metadata)
        self._commit()
        return count

    def apply_frame_offset(self, frames: int) -> None:
        """Shift every timestamp in the document by *frames* frames."""
        if not frames or not self._begin("apply frame offset"):
            return
        self._metadata = apply_frame_offset(self._metadata, frames)
        self._commit()

    # ── undo / redo ────────────────────────────────────────────────

    def undo(self) -> bool:
        """Restore the previous document state.  Returns True if successful."""
        if self._metadata is None:
            return False
        state = self._history.undo(self._metadata)
        if state is None:
            return False
        self._metadata = state
        self._commit()
        return True

    def redo(self) -> bool:
        """Re-apply the last undone change.  Returns True if successful."""
        if self._metadata is None:
            return False
        state = self._history.redo(self._metadata)
        if state is None:
            return False
        self._metadata = state
        self._commit()
        return True

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo
