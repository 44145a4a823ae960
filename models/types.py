"""Type definitions for WLED Control.

This module provides the data model shared by the engine: segments, the
device snapshot, nightlight state, device info and the attribute events handed
to the host.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict


NIGHTLIGHT_MODES = ['Instant', 'Fade', 'Color Fade', 'Sunrise']


class ConnectionState(str, Enum):
    """Connection state reported to the host as the connectionState attribute."""
    UNKNOWN = 'unknown'
    INITIALIZING = 'initializing'
    CONNECTED = 'connected'
    ERROR = 'error'
    DISCONNECTED = 'disconnected'


class CatalogKind(str, Enum):
    """The four named catalogs a controller exposes."""
    EFFECT = 'effect'
    PALETTE = 'palette'
    PRESET = 'preset'
    PLAYLIST = 'playlist'


class SegmentPayload(TypedDict, total=False):
    """Segment block of a command payload."""
    id: int
    on: bool
    bri: int
    col: list[list[int]]
    fx: int
    sx: int
    ix: int
    pal: int
    rev: bool


@dataclass
class Segment:
    """One independently addressable region of the strip."""
    id: int
    on: bool = False
    brightness: int = 255
    colors: list[list[int]] = field(default_factory=lambda: [[255, 255, 255]])
    effect_id: int = 0
    palette_id: int = 0
    effect_speed: int = 128
    effect_intensity: int = 128
    reverse: bool = False
    start: int = 0
    stop: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> 'Segment':
        """Create a segment from a controller `seg` entry.

        Raises:
            ValueError: If the entry has no usable integer id
        """
        if not isinstance(data, dict) or not isinstance(data.get('id'), int):
            raise ValueError(f"Segment entry without integer id: {data!r}")

        colors = [list(c[:3]) for c in data.get('col') or [] if isinstance(c, (list, tuple)) and len(c) >= 3]
        bri = data.get('bri')
        return cls(
            id=data['id'],
            on=data.get('on') is True,
            brightness=bri if isinstance(bri, int) else 255,
            colors=colors or [[255, 255, 255]],
            effect_id=data.get('fx') or 0,
            palette_id=data.get('pal') or 0,
            effect_speed=data.get('sx', 128),
            effect_intensity=data.get('ix', 128),
            reverse=bool(data.get('rev', False)),
            start=data.get('start', 0),
            stop=data.get('stop', 0),
        )

    @property
    def primary_color(self) -> list[int] | None:
        return self.colors[0] if self.colors else None


@dataclass
class Nightlight:
    """Nightlight sub-state of the controller."""
    active: bool = False
    duration_minutes: int = 0
    mode: int = 0
    target_brightness: int = 0
    remaining: int | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any] | None) -> 'Nightlight | None':
        if not data:
            return None
        return cls(
            active=bool(data.get('on', False)),
            duration_minutes=data.get('dur') or 0,
            mode=data.get('mode') or 0,
            target_brightness=data.get('tbri') or 0,
            remaining=data.get('rem'),
        )

    @property
    def mode_name(self) -> str:
        if 0 <= self.mode < len(NIGHTLIGHT_MODES):
            return NIGHTLIGHT_MODES[self.mode]
        return NIGHTLIGHT_MODES[0]


@dataclass
class DeviceInfo:
    """Firmware and identity block from /json/info."""
    version: str | None = None
    build: int | None = None
    name: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> 'DeviceInfo':
        if not isinstance(data, dict):
            raise ValueError(f"Device info is not an object: {data!r}")
        return cls(version=data.get('ver'), build=data.get('vid'), name=data.get('name'))


@dataclass
class DeviceSnapshot:
    """A full or partial report of the controller state."""
    segments: list[Segment] = field(default_factory=list)
    on: bool | None = None
    brightness: int | None = None
    preset_id: int = -1
    playlist_id: int = -1
    nightlight: Nightlight | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> 'DeviceSnapshot':
        """Parse a `state` object.

        Raises:
            ValueError: If the object is not shaped like controller state
        """
        if not isinstance(data, dict):
            raise ValueError(f"State is not an object: {data!r}")
        seg = data.get('seg', [])
        if not isinstance(seg, list):
            raise ValueError(f"State 'seg' is not a list: {seg!r}")

        return cls(
            segments=[Segment.from_json(s) for s in seg],
            on=data.get('on'),
            brightness=data.get('bri'),
            preset_id=data.get('ps') if isinstance(data.get('ps'), int) else -1,
            playlist_id=data.get('pl') if isinstance(data.get('pl'), int) else -1,
            nightlight=Nightlight.from_json(data.get('nl')),
        )

    def find_segment(self, segment_id: int) -> Segment | None:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        return None


@dataclass(frozen=True)
class AttributeEvent:
    """A single attribute update handed to the host."""
    name: str
    value: Any
    unit: str | None = None
