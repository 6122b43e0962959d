"""Tests for cursorcast.models — serialization round-trips and defaults."""

import json

import pytest

from cursorcast.models import (
    DEFAULT_FRAME_RATE,
    ClickEvent,
    CursorConfig,
    CursorKeyframe,
    RecordingMetadata,
    VideoInfo,
    ZoomConfig,
    ZoomKeyframe,
    ZoomRegion,
    ZoomSection,
    to_cursor_shape,
)


# ── Keyframes ───────────────────────────────────────────────────────


class TestCursorKeyframe:
    def test_optional_fields_omitted(self) -> None:
        d = CursorKeyframe(timestamp=10, x=1, y=2).to_dict()
        assert d == {"timestamp": 10, "x": 1, "y": 2}

    def test_round_trip_all_fields(self) -> None:
        kf = CursorKeyframe(timestamp=5, x=1, y=2, size=80, shape="hand", color="#ff0000", easing="easeOut")
        assert CursorKeyframe.from_dict(kf.to_dict()) == kf

    def test_ignores_unknown_keys(self) -> None:
        kf = CursorKeyframe.from_dict({"timestamp": 0, "x": 1, "y": 2, "future": True})
        assert kf.x == 1
        assert kf.shape is None


class TestZoomKeyframe:
    def test_camel_case_keys(self) -> None:
        d = ZoomKeyframe(timestamp=0, center_x=1, center_y=2, level=2.0, crop_width=960).to_dict()
        assert d["centerX"] == 1
        assert d["centerY"] == 2
        assert d["cropWidth"] == 960
        assert "cropHeight" not in d

    def test_round_trip(self) -> None:
        kf = ZoomKeyframe(timestamp=3, center_x=10, center_y=20, level=1.5, crop_width=100, crop_height=50, easing="linear")
        assert ZoomKeyframe.from_dict(kf.to_dict()) == kf

    def test_level_defaults_to_one(self) -> None:
        kf = ZoomKeyframe.from_dict({"timestamp": 0, "centerX": 5, "centerY": 5})
        assert kf.level == 1.0


class TestZoomSection:
    def test_round_trip(self) -> None:
        s = ZoomSection(start_time=100, end_time=900, scale=2.0, center_x=50, center_y=60)
        assert s.to_dict()["startTime"] == 100
        assert ZoomSection.from_dict(s.to_dict()) == s

    def test_contains_and_duration(self) -> None:
        s = ZoomSection(100, 900, 2.0, 0, 0)
        assert s.duration == 800
        assert s.contains(100)
        assert s.contains(900)
        assert not s.contains(901)


class TestClickEvent:
    def test_defaults(self) -> None:
        c = ClickEvent.from_dict({"timestamp": 5, "x": 1, "y": 2})
        assert c.button == "left"
        assert c.action == "down"
        assert c.is_down

    def test_release_is_not_down(self) -> None:
        assert not ClickEvent(timestamp=0, x=0, y=0, action="up").is_down

    def test_immutable(self) -> None:
        c = ClickEvent(timestamp=0, x=0, y=0)
        with pytest.raises(AttributeError):
            c.x = 5  # type: ignore[misc]


# ── Regions and configs ─────────────────────────────────────────────


class TestZoomRegion:
    def test_identity(self) -> None:
        r = ZoomRegion.identity(1920, 1080)
        assert r.as_tuple() == (960, 540, 1.0, 1920, 1080)
        assert r.left == 0
        assert r.top == 0


class TestConfigs:
    def test_cursor_defaults(self) -> None:
        cfg = CursorConfig()
        assert cfg.size == 150
        assert cfg.effective_shape == "arrow"
        assert cfg.effective_color == "#000000"
        assert cfg.smoothing == 0.0

    def test_cursor_unknown_shape_renders_as_arrow(self) -> None:
        cfg = CursorConfig.from_dict({"shape": "spaceship"})
        assert cfg.effective_shape == "arrow"
        assert cfg.to_dict()["shape"] == "spaceship"

    def test_cursor_diagonal_resize_shape_kept(self) -> None:
        cfg = CursorConfig.from_dict({"shape": "resizenortheast"})
        assert cfg.effective_shape == "resizenortheast"
        assert cfg.to_dict()["shape"] == "resizenortheast"

    def test_cursor_absent_color_stays_absent(self) -> None:
        d = CursorConfig.from_dict({"size": 120}).to_dict()
        assert "color" not in d
        assert "shape" not in d

    def test_cursor_unknown_keys_round_trip(self) -> None:
        raw = {"size": 90, "shape": "hand", "color": "#ff0000", "glow": {"radius": 4}}
        assert CursorConfig.from_dict(raw).to_dict()["glow"] == {"radius": 4}

    def test_zoom_transition_key(self) -> None:
        d = ZoomConfig(transition_ms=450).to_dict()
        assert d["transitionSpeed"] == 450
        assert ZoomConfig.from_dict(d).transition_ms == 450

    def test_zoom_dead_zone_zero_round_trips(self) -> None:
        cfg = ZoomConfig.from_dict({"deadZone": 0})
        assert cfg.to_dict()["deadZone"] == 0
        assert cfg.effective_dead_zone == 15

    def test_zoom_unknown_keys_round_trip(self) -> None:
        assert ZoomConfig.from_dict({"level": 2.5, "spring": 0.3}).to_dict()["spring"] == 0.3

    def test_video_frame_rate_default(self) -> None:
        v = VideoInfo.from_dict({"width": 100, "height": 50, "frameRate": 0})
        assert v.frame_rate == DEFAULT_FRAME_RATE

    def test_to_cursor_shape(self) -> None:
        assert to_cursor_shape("ibeam") == "ibeam"
        assert to_cursor_shape(None) == "arrow"
        assert to_cursor_shape("bogus") == "arrow"


# ── RecordingMetadata ───────────────────────────────────────────────


class TestRecordingMetadata:
    def test_json_round_trip(self, sample_metadata: RecordingMetadata) -> None:
        restored = RecordingMetadata.from_json(sample_metadata.to_json())
        assert restored.to_dict() == sample_metadata.to_dict()
        assert restored == sample_metadata

    def test_document_layout(self, sample_metadata: RecordingMetadata) -> None:
        d = sample_metadata.to_dict()
        assert set(d) == {"version", "video", "cursor", "zoom", "clicks", "createdAt"}
        assert set(d["cursor"]) == {"keyframes", "config"}
        assert d["video"]["frameRate"] == 30

    def test_sections_under_zoom(self, sample_metadata: RecordingMetadata, one_section) -> None:
        sample_metadata.zoom_sections = one_section
        d = sample_metadata.to_dict()
        assert d["zoom"]["sections"][0]["startTime"] == 1000.0
        assert RecordingMetadata.from_dict(d).zoom_sections == one_section

    def test_unknown_blocks_preserved(self, sample_metadata: RecordingMetadata) -> None:
        d = sample_metadata.to_dict()
        d["effects"] = {"motionBlur": {"enabled": True}}
        restored = RecordingMetadata.from_dict(d)
        assert restored.extras == {"effects": {"motionBlur": {"enabled": True}}}
        assert restored.to_dict()["effects"] == d["effects"]

    def test_document_round_trip_is_lossless(self) -> None:
        doc = {
            "version": "1.0.0",
            "video": {"path": "a.mp4", "width": 1280, "height": 720, "frameRate": 60, "duration": 2000},
            "cursor": {
                "keyframes": [{"timestamp": 0, "x": 1, "y": 2}],
                "config": {
                    "size": 100, "shape": "resizenortheast", "smoothing": 0.0,
                    "animationStyle": "mellow", "defaultEasing": "ease-in-out", "shapeDwellMs": 100,
                },
                "segments": [{"start": 0, "end": 500, "hidden": True}],
            },
            "zoom": {
                "keyframes": [],
                "config": {
                    "enabled": True, "level": 2.0, "transitionSpeed": 300,
                    "padding": 0.0, "followSpeed": 1.0, "deadZone": 0,
                },
                "segments": [{"start": 100, "end": 900}],
            },
            "clicks": [],
            "createdAt": 1700000000000,
        }
        assert RecordingMetadata.from_dict(doc).to_dict() == doc

    def test_legacy_easing_kept_verbatim(self, sample_metadata: RecordingMetadata) -> None:
        d = sample_metadata.to_dict()
        d["cursor"]["keyframes"][0]["easing"] = "easeInOut"
        assert RecordingMetadata.from_dict(d).to_dict()["cursor"]["keyframes"][0]["easing"] == "easeInOut"

    def test_missing_blocks_get_defaults(self) -> None:
        md = RecordingMetadata.from_dict({"video": {"width": 640, "height": 480}})
        assert md.cursor_keyframes == []
        assert md.zoom_config.enabled is True
        assert md.frame_rate == 30
        assert md.duration == 0.0

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ValueError, match="not valid JSON"):
            RecordingMetadata.from_json("{not json")

    def test_not_an_object_raises(self) -> None:
        with pytest.raises(ValueError):
            RecordingMetadata.from_json(json.dumps([1, 2, 3]))

    def test_missing_video_raises(self) -> None:
        with pytest.raises(ValueError, match="video"):
            RecordingMetadata.from_dict({"cursor": {"keyframes": []}})

    def test_malformed_keyframe_raises(self) -> None:
        with pytest.raises(ValueError, match="Malformed"):
            RecordingMetadata.from_dict({
                "video": {"width": 10, "height": 10},
                "cursor": {"keyframes": [{"timestamp": 0}]},
            })
