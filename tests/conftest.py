"""Shared pytest fixtures for CursorCast tests."""

import pytest

from cursorcast.models import (
    ClickEvent,
    CursorConfig,
    CursorKeyframe,
    RecordingMetadata,
    VideoInfo,
    ZoomConfig,
    ZoomKeyframe,
    ZoomSection,
)


# ── Video ───────────────────────────────────────────────────────────

@pytest.fixture
def video_info() -> VideoInfo:
    """A 5-second 1920×1080 recording at 30 fps."""
    return VideoInfo(width=1920, height=1080, frame_rate=30, duration=5000.0, path="demo.mp4")


# ── Cursor keyframes ────────────────────────────────────────────────

@pytest.fixture
def linear_track() -> list[CursorKeyframe]:
    """Two keyframes, 0 → 100 px over one second."""
    return [
        CursorKeyframe(timestamp=0.0, x=0.0, y=0.0),
        CursorKeyframe(timestamp=1000.0, x=100.0, y=0.0, easing="linear"),
    ]


@pytest.fixture
def shaped_track() -> list[CursorKeyframe]:
    """Arrow, a 30 ms ibeam flicker, arrow again, then a long hand run."""
    return [
        CursorKeyframe(timestamp=0.0, x=0.0, y=0.0, shape="arrow"),
        CursorKeyframe(timestamp=100.0, x=10.0, y=0.0, shape="ibeam"),
        CursorKeyframe(timestamp=130.0, x=13.0, y=0.0, shape="arrow"),
        CursorKeyframe(timestamp=500.0, x=50.0, y=0.0, shape="hand"),
        CursorKeyframe(timestamp=1000.0, x=100.0, y=0.0),
    ]


# ── Clicks ──────────────────────────────────────────────────────────

@pytest.fixture
def clicks() -> list[ClickEvent]:
    """Three presses (each with its release) spread over the recording."""
    return [
        ClickEvent(timestamp=1000.0, x=400.0, y=300.0, action="down"),
        ClickEvent(timestamp=1080.0, x=400.0, y=300.0, action="up"),
        ClickEvent(timestamp=2000.0, x=1200.0, y=700.0, action="down"),
        ClickEvent(timestamp=2090.0, x=1200.0, y=700.0, action="up"),
        ClickEvent(timestamp=3500.0, x=800.0, y=500.0, button="right", action="down"),
        ClickEvent(timestamp=3560.0, x=800.0, y=500.0, button="right", action="up"),
    ]


# ── Zoom ────────────────────────────────────────────────────────────

@pytest.fixture
def zoom_config() -> ZoomConfig:
    return ZoomConfig(enabled=True, level=2.0, transition_ms=300.0)


@pytest.fixture
def one_section() -> list[ZoomSection]:
    """A 2× zoom on the frame centre from 1s to 2s."""
    return [ZoomSection(start_time=1000.0, end_time=2000.0, scale=2.0, center_x=960.0, center_y=540.0)]


@pytest.fixture
def zoom_pair() -> list[ZoomKeyframe]:
    """Un-zoomed at 0, 2× on the top-left quadrant at 1s."""
    return [
        ZoomKeyframe(timestamp=0.0, center_x=960.0, center_y=540.0, level=1.0, easing="linear"),
        ZoomKeyframe(timestamp=1000.0, center_x=480.0, center_y=270.0, level=2.0),
    ]


# ── Metadata document ───────────────────────────────────────────────

@pytest.fixture
def sample_metadata(
    video_info: VideoInfo,
    linear_track: list[CursorKeyframe],
    clicks: list[ClickEvent],
) -> RecordingMetadata:
    """Minimal document: a linear cursor track, clicks, no zoom."""
    return RecordingMetadata(
        video=video_info,
        cursor_keyframes=list(linear_track),
        cursor_config=CursorConfig(),
        clicks=list(clicks),
        created_at=1700000000000.0,
    )
