"""Metadata file management — save / load the JSON sidecar of a recording.

A recording ``demo.mp4`` is accompanied by ``demo.json`` holding the
:class:`RecordingMetadata` document (cursor and zoom timelines, zoom
sections, click telemetry and configuration).

Capture and encode can drift by a few frames; ``load_metadata`` can
shift every timestamp by a whole number of frames to line the two up.
"""

import copy
import dataclasses
import logging
import os

from .easing import DEFAULT_EASING, is_known_easing
from .models import RecordingMetadata
from .timeline import normalize_keyframes

logger = logging.getLogger(__name__)

METADATA_EXT = ".json"


def metadata_path_for_video(video_path: str) -> str:
    """Sidecar path for *video_path* (``clip.mp4`` → ``clip.json``)."""
    root, _ = os.path.splitext(video_path)
    return root + METADATA_EXT


def save_metadata(output_path: str, metadata: RecordingMetadata) -> str:
    """Write *metadata* as pretty-printed JSON.  Returns the final path."""
    if not output_path.lower().endswith(METADATA_EXT):
        output_path += METADATA_EXT

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(metadata.to_json())

    logger.info(
        "Saved metadata to %s (%d cursor / %d zoom keyframes)",
        output_path, len(metadata.cursor_keyframes), len(metadata.zoom_keyframes),
    )
    return output_path


def load_metadata(input_path: str, frame_offset: int = 0) -> RecordingMetadata:
    """Read a metadata file, optionally shifted by *frame_offset* frames.

    Raises ``ValueError`` if the file is missing or not a metadata document.
    """
    if not os.path.isfile(input_path):
        raise ValueError(f"Metadata file not found: {input_path}")

    try:
        with open(input_path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ValueError(f"Cannot read metadata file {input_path}: {exc}") from exc

    metadata = RecordingMetadata.from_json(text)
    logger.info(
        "Loaded metadata from %s: %dx%d @ %sfps, %.0f ms, %d clicks",
        input_path, metadata.video.width, metadata.video.height,
        metadata.frame_rate, metadata.duration, len(metadata.clicks),
    )
    unknown = sorted({
        k.easing for k in [*metadata.cursor_keyframes, *metadata.zoom_keyframes]
        if k.easing and not is_known_easing(k.easing)
    })
    if unknown:
        logger.warning("Unknown easing %s in %s, using %s", ", ".join(unknown), input_path, DEFAULT_EASING)
    if frame_offset:
        metadata = apply_frame_offset(metadata, frame_offset)
    return metadata


def apply_frame_offset(metadata: RecordingMetadata, frames: int) -> RecordingMetadata:
    """Return a copy with every timestamp moved by *frames* frames.

    Positive offsets move events later.  Shifted times are clamped at 0
    and the keyframe timelines re-normalized, since clamping can stack
    several keyframes on the first frame.
    """
    shifted = copy.deepcopy(metadata)
    if not frames:
        return shifted

    offset_ms = frames * 1000.0 / metadata.frame_rate

    def _shift(t: float) -> float:
        return max(0.0, t + offset_ms)

    shifted.cursor_keyframes = normalize_keyframes(
        [dataclasses.replace(k, timestamp=_shift(k.timestamp)) for k in shifted.cursor_keyframes]
    )
    shifted.zoom_keyframes = normalize_keyframes(
        [dataclasses.replace(k, timestamp=_shift(k.timestamp)) for k in shifted.zoom_keyframes]
    )
    shifted.zoom_sections = [
        dataclasses.replace(s, start_time=_shift(s.start_time), end_time=_shift(s.end_time))
        for s in shifted.zoom_sections
    ]
    shifted.clicks = [dataclasses.replace(c, timestamp=_shift(c.timestamp)) for c in shifted.clicks]
    logger.info("Applied frame offset of %d frames (%.1f ms)", frames, offset_ms)
    return shifted
