"""Core data models for CursorCast.

Defines the dataclasses shared by every part of the effect engine:
keyframes, zoom sections, click events, resolved zoom regions, the
user-facing cursor/zoom configuration, and the top-level
:class:`RecordingMetadata` document.  All models support JSON
serialization via ``to_dict()`` / ``from_dict()`` using the camelCase
field names of the persisted metadata file (``to_json()`` /
``from_json()`` for the top-level document).

Optional keyframe fields that are absent on input stay absent on
output so a load → save cycle is lossless.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import time


METADATA_VERSION = "1.0.0"
DEFAULT_FRAME_RATE = 30
DEFAULT_CURSOR_SIZE = 150.0
DEFAULT_CURSOR_COLOR = "#000000"
DEFAULT_CURSOR_SHAPE = "arrow"
DEFAULT_ZOOM_LEVEL = 2.0
DEFAULT_TRANSITION_MS = 300.0
DEFAULT_DEAD_ZONE = 15.0

# Shapes the telemetry layer can report; anything else renders as an arrow
CURSOR_SHAPES = (
    "arrow", "pointer", "hand", "openhand", "closedhand", "crosshair",
    "ibeam", "ibeamvertical", "move", "resizeleft", "resizeright",
    "resizeleftright", "resizeup", "resizedown", "resizeupdown", "resize",
    "resizenortheast", "resizesouthwest", "resizenorthwest", "resizesoutheast",
    "copy", "dragcopy", "draglink", "help", "notallowed", "contextmenu",
    "poof", "screenshot", "zoomin", "zoomout",
)

CLICK_BUTTONS = ("left", "right", "middle")


def to_cursor_shape(name: Optional[str]) -> str:
    """Map a raw cursor type to a known shape, defaulting to ``arrow``."""
    if name and name in CURSOR_SHAPES:
        return name
    return DEFAULT_CURSOR_SHAPE


def _put_optional(d: dict, key: str, value: Any) -> None:
    if value is not None:
        d[key] = value


# Keys each block reads; anything else is carried through untouched
_CURSOR_CONFIG_KEYS = {"size", "shape", "color", "smoothing", "animationStyle", "defaultEasing", "shapeDwellMs"}
_ZOOM_CONFIG_KEYS = {"enabled", "level", "transitionSpeed", "padding", "followSpeed", "deadZone"}
_CURSOR_BLOCK_KEYS = {"keyframes", "config"}
_ZOOM_BLOCK_KEYS = {"keyframes", "sections", "config"}
_KNOWN_TOP_LEVEL = {"version", "video", "cursor", "zoom", "clicks", "createdAt"}


def _unknown_keys(d: dict, known: set) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if k not in known}


@dataclass
class CursorKeyframe:
    """An explicit cursor state anchored at *timestamp*.

    Coordinates are in source-video pixels.  ``size``, ``shape`` and
    ``color`` inherit from :class:`CursorConfig` when ``None``; ``easing``
    governs the segment that *starts* at this keyframe.
    """
    timestamp: float  # ms since recording start
    x: float
    y: float
    size: Optional[float] = None
    shape: Optional[str] = None
    color: Optional[str] = None
    easing: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize to a plain dict for JSON storage."""
        d = {"timestamp": self.timestamp, "x": self.x, "y": self.y}
        _put_optional(d, "size", self.size)
        _put_optional(d, "shape", self.shape)
        _put_optional(d, "color", self.color)
        _put_optional(d, "easing", self.easing)
        return d

    @staticmethod
    def from_dict(d: dict) -> "CursorKeyframe":
        """Reconstruct from a dict, ignoring unknown keys for forward compat."""
        return CursorKeyframe(
            timestamp=d["timestamp"],
            x=d["x"],
            y=d["y"],
            size=d.get("size"),
            shape=d.get("shape"),
            color=d.get("color"),
            easing=d.get("easing"),
        )


@dataclass
class ZoomKeyframe:
    """A zoom state anchored at *timestamp*.

    ``level`` is the zoom multiplier (1.0 = no zoom).  ``crop_width`` /
    ``crop_height`` default to ``video / level`` when ``None``.
    """
    timestamp: float  # ms
    center_x: float
    center_y: float
    level: float = 1.0
    crop_width: Optional[float] = None
    crop_height: Optional[float] = None
    easing: Optional[str] = None

    def to_dict(self) -> dict:
        d = {
            "timestamp": self.timestamp,
            "centerX": self.center_x,
            "centerY": self.center_y,
            "level": self.level,
        }
        _put_optional(d, "cropWidth", self.crop_width)
        _put_optional(d, "cropHeight", self.crop_height)
        _put_optional(d, "easing", self.easing)
        return d

    @staticmethod
    def from_dict(d: dict) -> "ZoomKeyframe":
        return ZoomKeyframe(
            timestamp=d["timestamp"],
            center_x=d["centerX"],
            center_y=d["centerY"],
            level=d.get("level", 1.0),
            crop_width=d.get("cropWidth"),
            crop_height=d.get("cropHeight"),
            easing=d.get("easing"),
        )


@dataclass
class ZoomSection:
    """A flat zoom interval: one scale and centre between two times."""
    start_time: float  # ms
    end_time: float  # ms
    scale: float
    center_x: float
    center_y: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def contains(self, t: float) -> bool:
        return self.start_time <= t <= self.end_time

    def to_dict(self) -> dict:
        return {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "scale": self.scale,
            "centerX": self.center_x,
            "centerY": self.center_y,
        }

    @staticmethod
    def from_dict(d: dict) -> "ZoomSection":
        return ZoomSection(
            start_time=d["startTime"],
            end_time=d["endTime"],
            scale=d.get("scale", 1.0),
            center_x=d["centerX"],
            center_y=d["centerY"],
        )


@dataclass(frozen=True)
class ClickEvent:
    """A mouse button transition captured during recording (immutable)."""
    timestamp: float  # ms since recording start
    x: float
    y: float
    button: str = "left"
    action: str = "down"

    @property
    def is_down(self) -> bool:
        return self.action == "down"

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "x": self.x,
            "y": self.y,
            "button": self.button,
            "action": self.action,
        }

    @staticmethod
    def from_dict(d: dict) -> "ClickEvent":
        return ClickEvent(
            timestamp=d["timestamp"],
            x=d["x"],
            y=d["y"],
            button=d.get("button", "left"),
            action=d.get("action", "down"),
        )


@dataclass(frozen=True)
class ZoomRegion:
    """A fully resolved zoom crop: centre, multiplier and crop size."""
    center_x: float
    center_y: float
    level: float
    crop_width: float
    crop_height: float

    @staticmethod
    def identity(video_width: float, video_height: float) -> "ZoomRegion":
        """Full-frame, un-zoomed region centred on the video."""
        return ZoomRegion(
            center_x=video_width / 2,
            center_y=video_height / 2,
            level=1.0,
            crop_width=float(video_width),
            crop_height=float(video_height),
        )

    @property
    def left(self) -> float:
        return self.center_x - self.crop_width / 2

    @property
    def top(self) -> float:
        return self.center_y - self.crop_height / 2

    def as_tuple(self) -> tuple:
        return (self.center_x, self.center_y, self.level, self.crop_width, self.crop_height)

    def to_dict(self) -> dict:
        return {
            "centerX": self.center_x,
            "centerY": self.center_y,
            "level": self.level,
            "cropWidth": self.crop_width,
            "cropHeight": self.crop_height,
        }


@dataclass(frozen=True)
class CursorState:
    """Interpolated cursor parameters at one instant."""
    x: float
    y: float
    size: Optional[float] = None
    shape: Optional[str] = None
    color: Optional[str] = None


@dataclass
class CursorConfig:
    """Global cursor appearance and motion settings.

    ``smoothing == 0`` disables the glide smoother.  ``animation_style``
    picks the smoother time constant (see ``smoothing.ANIMATION_STYLES``).
    ``shape`` and ``color`` are stored as written; read them through
    ``effective_shape`` / ``effective_color``.
    """
    size: float = DEFAULT_CURSOR_SIZE
    shape: Optional[str] = None
    color: Optional[str] = None
    smoothing: float = 0.0  # 0-1
    animation_style: str = "mellow"
    default_easing: str = "ease-in-out"
    shape_dwell_ms: float = 100.0
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def effective_shape(self) -> str:
        return to_cursor_shape(self.shape)

    @property
    def effective_color(self) -> str:
        return self.color or DEFAULT_CURSOR_COLOR

    def to_dict(self) -> dict:
        d = {"size": self.size}
        _put_optional(d, "shape", self.shape)
        _put_optional(d, "color", self.color)
        d.update({
            "smoothing": self.smoothing,
            "animationStyle": self.animation_style,
            "defaultEasing": self.default_easing,
            "shapeDwellMs": self.shape_dwell_ms,
        })
        d.update(self.extras)
        return d

    @staticmethod
    def from_dict(d: dict) -> "CursorConfig":
        return CursorConfig(
            size=d.get("size", DEFAULT_CURSOR_SIZE),
            shape=d.get("shape"),
            color=d.get("color"),
            smoothing=d.get("smoothing", 0.0),
            animation_style=d.get("animationStyle", "mellow"),
            default_easing=d.get("defaultEasing", "ease-in-out"),
            shape_dwell_ms=d.get("shapeDwellMs", 100.0),
            extras=_unknown_keys(d, _CURSOR_CONFIG_KEYS),
        )


@dataclass
class ZoomConfig:
    """Global zoom settings.  ``transition_ms`` is persisted as ``transitionSpeed``."""
    enabled: bool = True
    level: float = DEFAULT_ZOOM_LEVEL
    transition_ms: float = DEFAULT_TRANSITION_MS
    padding: float = 0.0
    follow_speed: float = 1.0
    dead_zone: float = DEFAULT_DEAD_ZONE  # px; 0 means "use the default"
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def effective_dead_zone(self) -> float:
        return self.dead_zone or DEFAULT_DEAD_ZONE

    def to_dict(self) -> dict:
        d = {
            "enabled": self.enabled,
            "level": self.level,
            "transitionSpeed": self.transition_ms,
            "padding": self.padding,
            "followSpeed": self.follow_speed,
            "deadZone": self.dead_zone,
        }
        d.update(self.extras)
        return d

    @staticmethod
    def from_dict(d: dict) -> "ZoomConfig":
        return ZoomConfig(
            enabled=d.get("enabled", True),
            level=d.get("level", DEFAULT_ZOOM_LEVEL),
            transition_ms=d.get("transitionSpeed", DEFAULT_TRANSITION_MS),
            padding=d.get("padding", 0.0),
            follow_speed=d.get("followSpeed", 1.0),
            dead_zone=d.get("deadZone", DEFAULT_DEAD_ZONE),
            extras=_unknown_keys(d, _ZOOM_CONFIG_KEYS),
        )


@dataclass
class VideoInfo:
    """The source video the metadata describes."""
    width: int
    height: int
    frame_rate: float = DEFAULT_FRAME_RATE
    duration: float = 0.0  # ms
    path: str = ""

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "width": self.width,
            "height": self.height,
            "frameRate": self.frame_rate,
            "duration": self.duration,
        }

    @staticmethod
    def from_dict(d: dict) -> "VideoInfo":
        return VideoInfo(
            width=d["width"],
            height=d["height"],
            frame_rate=d.get("frameRate") or DEFAULT_FRAME_RATE,
            duration=d.get("duration", 0.0),
            path=d.get("path", ""),
        )


@dataclass
class RecordingMetadata:
    """Top-level metadata document exported alongside a recording.

    Holds both zoom representations: fine-grained ``zoom_keyframes`` and
    the coarser ``zoom_sections`` used by section-based editing.
    Unknown top-level blocks (e.g. ``effects``) are kept in ``extras``
    and written back untouched; unknown keys inside the ``cursor`` and
    ``zoom`` blocks (e.g. ``segments``) likewise land in ``cursor_extras``
    and ``zoom_extras``.
    """

    video: VideoInfo
    cursor_keyframes: List[CursorKeyframe] = field(default_factory=list)
    cursor_config: CursorConfig = field(default_factory=CursorConfig)
    zoom_keyframes: List[ZoomKeyframe] = field(default_factory=list)
    zoom_sections: List[ZoomSection] = field(default_factory=list)
    zoom_config: ZoomConfig = field(default_factory=ZoomConfig)
    clicks: List[ClickEvent] = field(default_factory=list)
    version: str = METADATA_VERSION
    created_at: float = field(default_factory=lambda: time.time() * 1000)
    extras: Dict[str, Any] = field(default_factory=dict)
    cursor_extras: Dict[str, Any] = field(default_factory=dict)
    zoom_extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def frame_rate(self) -> float:
        return self.video.frame_rate or DEFAULT_FRAME_RATE

    @property
    def duration(self) -> float:
        return self.video.duration or 0.0

    def to_dict(self) -> dict:
        data = {
            "version": self.version,
            "video": self.video.to_dict(),
            "cursor": {
                "keyframes": [k.to_dict() for k in self.cursor_keyframes],
                "config": self.cursor_config.to_dict(),
            },
            "zoom": {
                "keyframes": [k.to_dict() for k in self.zoom_keyframes],
                "config": self.zoom_config.to_dict(),
            },
            "clicks": [c.to_dict() for c in self.clicks],
            "createdAt": self.created_at,
        }
        if self.zoom_sections:
            data["zoom"]["sections"] = [s.to_dict() for s in self.zoom_sections]
        data["cursor"].update(self.cursor_extras)
        data["zoom"].update(self.zoom_extras)
        data.update(self.extras)
        return data

    @staticmethod
    def from_dict(d: dict) -> "RecordingMetadata":
        """Reconstruct a document; raises ``ValueError`` if it is not one."""
        if not isinstance(d, dict):
            raise ValueError("Metadata document must be a JSON object")
        if not isinstance(d.get("video"), dict):
            raise ValueError("Metadata document is missing the 'video' block")
        try:
            video = VideoInfo.from_dict(d["video"])
            cursor = d.get("cursor") or {}
            zoom = d.get("zoom") or {}
            return RecordingMetadata(
                version=d.get("version", METADATA_VERSION),
                video=video,
                cursor_keyframes=[CursorKeyframe.from_dict(k) for k in cursor.get("keyframes", [])],
                cursor_config=CursorConfig.from_dict(cursor.get("config") or {}),
                zoom_keyframes=[ZoomKeyframe.from_dict(k) for k in zoom.get("keyframes", [])],
                zoom_sections=[ZoomSection.from_dict(s) for s in zoom.get("sections", [])],
                zoom_config=ZoomConfig.from_dict(zoom.get("config") or {}),
                clicks=[ClickEvent.from_dict(c) for c in d.get("clicks", [])],
                created_at=d.get("createdAt", 0.0),
                extras=_unknown_keys(d, _KNOWN_TOP_LEVEL),
                cursor_extras=_unknown_keys(cursor, _CURSOR_BLOCK_KEYS),
                zoom_extras=_unknown_keys(zoom, _ZOOM_BLOCK_KEYS),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed metadata document: {exc}") from exc

    def to_json(self) -> str:
        """Serialize the entire document to a JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @staticmethod
    def from_json(s: str) -> "RecordingMetadata":
        try:
            d = json.loads(s)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Metadata is not valid JSON: {exc}") from exc
        return RecordingMetadata.from_dict(d)
