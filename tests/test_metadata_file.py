"""Tests for cursorcast.metadata_file — save / load JSON sidecars."""

import json
import logging

import pytest

from cursorcast.metadata_file import (
    METADATA_EXT,
    apply_frame_offset,
    load_metadata,
    metadata_path_for_video,
    save_metadata,
)
from cursorcast.models import CursorKeyframe


# ── save_metadata ───────────────────────────────────────────────────


class TestSaveMetadata:
    def test_writes_json(self, tmp_path, sample_metadata) -> None:
        out = save_metadata(str(tmp_path / "demo.json"), sample_metadata)
        with open(out, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert data["video"]["width"] == 1920
        assert len(data["cursor"]["keyframes"]) == 2

    def test_appends_extension(self, tmp_path, sample_metadata) -> None:
        out = save_metadata(str(tmp_path / "demo"), sample_metadata)
        assert out.endswith(METADATA_EXT)

    def test_does_not_double_extension(self, tmp_path, sample_metadata) -> None:
        out = save_metadata(str(tmp_path / "demo.JSON"), sample_metadata)
        assert not out.endswith(".JSON.json")

    def test_sidecar_path(self) -> None:
        assert metadata_path_for_video("/videos/clip.mp4") == "/videos/clip.json"


# ── load_metadata ───────────────────────────────────────────────────


class TestLoadMetadata:
    def test_round_trip(self, tmp_path, sample_metadata) -> None:
        out = save_metadata(str(tmp_path / "demo"), sample_metadata)
        assert load_metadata(out) == sample_metadata

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ValueError, match="not found"):
            load_metadata(str(tmp_path / "nope.json"))

    def test_not_metadata(self, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text('{"hello": "world"}', encoding="utf-8")
        with pytest.raises(ValueError):
            load_metadata(str(path))

    def test_garbage(self, tmp_path) -> None:
        path = tmp_path / "garbage.json"
        path.write_bytes(b"\xff\xfe\x00not json")
        with pytest.raises(ValueError):
            load_metadata(str(path))

    def test_unknown_easing_warns(self, tmp_path, sample_metadata, caplog: pytest.LogCaptureFixture) -> None:
        sample_metadata.cursor_keyframes[0].easing = "bounce"
        out = save_metadata(str(tmp_path / "demo"), sample_metadata)
        with caplog.at_level(logging.WARNING, logger="cursorcast.metadata_file"):
            loaded = load_metadata(out)
        assert "bounce" in caplog.text
        assert loaded.cursor_keyframes[0].easing == "bounce"

    def test_frame_offset_on_load(self, tmp_path, sample_metadata) -> None:
        out = save_metadata(str(tmp_path / "demo"), sample_metadata)
        shifted = load_metadata(out, frame_offset=3)
        assert shifted.cursor_keyframes[0].timestamp == pytest.approx(100.0)


# ── apply_frame_offset ──────────────────────────────────────────────


class TestApplyFrameOffset:
    def test_shifts_everything(self, sample_metadata, one_section) -> None:
        sample_metadata.zoom_sections = one_section
        shifted = apply_frame_offset(sample_metadata, 3)
        assert [k.timestamp for k in shifted.cursor_keyframes] == pytest.approx([100, 1100])
        assert shifted.clicks[0].timestamp == pytest.approx(1100)
        assert shifted.zoom_sections[0].start_time == pytest.approx(1100)
        assert shifted.zoom_sections[0].end_time == pytest.approx(2100)

    def test_input_untouched(self, sample_metadata) -> None:
        apply_frame_offset(sample_metadata, 3)
        assert sample_metadata.cursor_keyframes[0].timestamp == 0
        assert sample_metadata.clicks[0].timestamp == 1000

    def test_negative_clamps_and_dedups(self, sample_metadata) -> None:
        sample_metadata.cursor_keyframes.insert(1, CursorKeyframe(timestamp=50, x=5, y=0))
        shifted = apply_frame_offset(sample_metadata, -3)
        assert [k.timestamp for k in shifted.cursor_keyframes] == pytest.approx([0, 900])
        assert shifted.cursor_keyframes[0].x == 5

    def test_zero_is_a_copy(self, sample_metadata) -> None:
        copy = apply_frame_offset(sample_metadata, 0)
        assert copy == sample_metadata
        assert copy.video is not sample_metadata.video
