"""State synchronisation between controller snapshots and host attributes.

The synchroniser derives every host attribute from a snapshot of the target
segment and publishes only the attributes whose value actually changed, as a
single batch.
"""

import logging
from typing import Any, Callable, Protocol

from core.catalog import CatalogStore
from models.colour import (
    estimate_colour_temperature,
    name_from_hue,
    name_from_temperature,
    rgb_to_hsv,
    rgb_to_hue_degrees,
)
from models.types import AttributeEvent, CatalogKind, DeviceSnapshot, Segment

_LOGGER = logging.getLogger(__name__)

UNITS = {
    'level': '%',
    'colorTemperature': 'K',
    'nightlightDuration': 'min',
    'nightlightRemaining': 's',
}


class AttributeSink(Protocol):
    """Host side receiver of attribute updates."""

    def send_events(self, events: list[AttributeEvent]) -> None:
        ...


class DeviceAttributes:
    """In-memory attribute store acting as the host's device record."""

    def __init__(self, listener: Callable[[list[AttributeEvent]], None] | None = None):
        self.values: dict[str, Any] = {}
        self.history: list[list[AttributeEvent]] = []
        self._listener = listener

    def send_events(self, events: list[AttributeEvent]) -> None:
        for event in events:
            self.values[event.name] = event.value
        self.history.append(list(events))
        if self._listener:
            self._listener(events)

    def current_value(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)


def level_from_brightness(segment: Segment) -> int:
    if not segment.on:
        return 0
    return round(segment.brightness / 2.55)


def colour_attributes(segment: Segment) -> dict[str, Any]:
    """colorMode, colorName and either colorTemperature or hue/saturation."""
    attrs: dict[str, Any] = {}
    rgb = segment.primary_color

    if rgb is None:
        attrs['colorName'] = 'Unknown'
    else:
        kelvin = estimate_colour_temperature(*rgb)
        if kelvin is not None:
            attrs['colorMode'] = 'CT'
            attrs['colorTemperature'] = kelvin
            attrs['colorName'] = name_from_temperature(kelvin)
        else:
            hue, saturation = rgb_to_hsv(*rgb)
            attrs['colorMode'] = 'RGB'
            attrs['hue'] = hue
            attrs['saturation'] = saturation
            attrs['colorName'] = name_from_hue(rgb_to_hue_degrees(*rgb))

    if segment.effect_id > 0:
        attrs['colorMode'] = 'EFFECTS'
    return attrs


class Synchronizer:
    """Publishes derived attributes, deduplicated against the last published values."""

    def __init__(self, sink: AttributeSink, catalogs: CatalogStore, segment_id: int = 0):
        self._sink = sink
        self._catalogs = catalogs
        self.segment_id = segment_id
        self._published: dict[str, Any] = {}

    def reset(self):
        self._published.clear()

    def last_published(self, name: str, default: Any = None) -> Any:
        return self._published.get(name, default)

    def publish(self, attributes: dict[str, Any]) -> list[AttributeEvent]:
        """Send the attributes that differ from what was last published."""
        events = []
        for name, value in attributes.items():
            if name in self._published and self._published[name] == value:
                continue
            events.append(AttributeEvent(name, value, UNITS.get(name)))

        if events:
            for event in events:
                self._published[event.name] = event.value
            _LOGGER.debug("Batch updating %d attributes: %s",
                          len(events), ', '.join(e.name for e in events))
            self._sink.send_events(events)
        return events

    def apply(self, snapshot: DeviceSnapshot) -> bool:
        """Synchronise attributes with a snapshot.

        Returns:
            False if the target segment is absent (nothing is touched),
            True otherwise
        """
        segment = snapshot.find_segment(self.segment_id)
        if segment is None:
            _LOGGER.warning("Segment ID %d not found in state.", self.segment_id)
            return False

        attrs: dict[str, Any] = {
            'switch': 'on' if segment.on else 'off',
            'level': level_from_brightness(segment),
        }
        attrs.update(colour_attributes(segment))
        attrs.update(self._effect_attributes(segment))
        attrs.update(self._preset_attributes(snapshot))
        attrs.update(self._playlist_attributes(snapshot))
        attrs.update(self._nightlight_attributes(snapshot))

        self.publish(attrs)
        return True

    def _effect_attributes(self, segment: Segment) -> dict[str, Any]:
        attrs = {
            'effectId': segment.effect_id,
            'paletteId': segment.palette_id,
            'effectDirection': 'reverse' if segment.reverse else 'forward',
            'reverse': 'on' if segment.reverse else 'off',
        }
        if self._catalogs.effects:
            attrs['effectName'] = self._catalogs.name_of(CatalogKind.EFFECT, segment.effect_id) or 'Unknown'
        if self._catalogs.palettes:
            attrs['paletteName'] = self._catalogs.name_of(CatalogKind.PALETTE, segment.palette_id) or 'Unknown'
        return attrs

    def _preset_attributes(self, snapshot: DeviceSnapshot) -> dict[str, Any]:
        preset_id = snapshot.preset_id
        if preset_id <= 0:
            return {'presetValue': 0, 'presetName': 'None'}
        return {
            'presetValue': preset_id,
            'presetName': self._catalogs.name_of(CatalogKind.PRESET, preset_id) or 'Unknown Preset',
        }

    def _playlist_attributes(self, snapshot: DeviceSnapshot) -> dict[str, Any]:
        playlist_id = snapshot.playlist_id
        if playlist_id <= 0:
            return {'playlistId': 0, 'playlistState': 'none', 'playlistName': 'None'}
        name = self._catalogs.name_of(CatalogKind.PLAYLIST, playlist_id)
        return {
            'playlistId': playlist_id,
            'playlistState': 'running',
            'playlistName': name or f"Unknown Playlist {playlist_id}",
        }

    def _nightlight_attributes(self, snapshot: DeviceSnapshot) -> dict[str, Any]:
        nl = snapshot.nightlight
        if nl is None:
            return {
                'nightlightActive': 'off',
                'nightlightDuration': 0,
                'nightlightMode': 'Instant',
                'nightlightTargetBrightness': 0,
                'nightlightRemaining': -1,
            }

        attrs = {
            'nightlightActive': 'on' if nl.active else 'off',
            'nightlightDuration': nl.duration_minutes,
            'nightlightMode': nl.mode_name,
            'nightlightTargetBrightness': nl.target_brightness,
        }
        if nl.remaining is not None:
            attrs['nightlightRemaining'] = nl.remaining
        return attrs
