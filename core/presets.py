"""Preset payload construction.

Builds the JSON payloads that save, overwrite and delete presets. A build
either produces a complete payload or raises PresetValidationError; nothing
partial is ever sent.
"""

import logging
from typing import Callable

from core.catalog import CatalogStore, MAX_PRESET_ID, MIN_PRESET_ID
from core.errors import PresetValidationError
from core.resolver import Resolver, range_message
from models.colour import parse_hex_colour
from models.types import CatalogKind, Segment, SegmentPayload
from models.utils import check_range

_LOGGER = logging.getLogger(__name__)

DEFAULT_PRIMARY = [255, 255, 255]
DEFAULT_SECONDARY = [0, 0, 0]

COLOUR_SLOTS = ('primary', 'secondary', 'tertiary')


def _check_byte(label: str, value) -> int | None:
    if value is None:
        return None
    return check_range(label, value, 0, 255, error=PresetValidationError)


class PresetBuilder:
    """Assembles preset payloads for the target segment.

    Args:
        catalogs: Catalog store, used for free-slot allocation and logging
        resolver: Resolver for effect and palette tokens
        segment_id: Target segment id
        current_segment: Callable returning the latest known target segment
    """

    def __init__(self, catalogs: CatalogStore, resolver: Resolver, segment_id: int,
                 current_segment: Callable[[], Segment | None]):
        self._catalogs = catalogs
        self._resolver = resolver
        self.segment_id = segment_id
        self._current_segment = current_segment

    def _target_id(self, preset_id) -> int:
        if preset_id is None:
            allocated = self._catalogs.next_free_preset_id()
            if allocated is None:
                raise PresetValidationError(
                    f"No available preset slots found ({MIN_PRESET_ID}-{MAX_PRESET_ID}).")
            _LOGGER.debug("Auto-assigned preset ID: %d", allocated)
            return allocated

        try:
            target = int(preset_id)
        except (TypeError, ValueError):
            raise PresetValidationError(f"Invalid preset ID: {preset_id}. {range_message(CatalogKind.PRESET)}.")
        if not MIN_PRESET_ID <= target <= MAX_PRESET_ID:
            raise PresetValidationError(f"Invalid preset ID: {target}. {range_message(CatalogKind.PRESET)}.")

        if target in self._catalogs.presets:
            _LOGGER.debug("Updating existing preset %d (was: '%s')", target, self._catalogs.presets[target])
        return target

    @staticmethod
    def _check_name(name) -> str:
        if not name or not str(name).strip():
            raise PresetValidationError("Preset name cannot be empty.")
        return str(name).strip()

    def _resolve(self, token, kind: CatalogKind) -> int:
        resolved = self._resolver.resolve(token, kind)
        if resolved is None:
            raise PresetValidationError(
                f"{kind.value.capitalize()} '{token}' not found. "
                f"Available {kind.value}s: {self._catalogs.format_list(kind)}")
        return resolved

    def _current_colours(self) -> list[list[int]]:
        segment = self._current_segment()
        if segment is None or not segment.colors:
            return []
        return [list(c) for c in segment.colors]

    def _colours(self, color0, color1, color2) -> list[list[int]]:
        parsed = []
        for slot, value in zip(COLOUR_SLOTS, (color0, color1, color2)):
            if value is None:
                parsed.append(None)
                continue
            rgb = parse_hex_colour(value)
            if rgb is None:
                raise PresetValidationError(
                    f"Invalid {slot} color format: {value}. Use hex format like 'FF0000'.")
            parsed.append(rgb)

        primary, secondary, tertiary = parsed
        current = self._current_colours()
        defaults = [
            current[0] if len(current) > 0 else DEFAULT_PRIMARY,
            current[1] if len(current) > 1 else DEFAULT_SECONDARY,
        ]

        colours = []
        if primary is not None:
            colours.append(primary)
        if secondary is not None:
            if not colours:
                colours.append(defaults[0])
                _LOGGER.debug("Using current segment primary color as default: %s", defaults[0])
            colours.append(secondary)
        if tertiary is not None:
            while len(colours) < 2:
                colours.append(defaults[len(colours)])
                _LOGGER.debug("Using current segment color %d as default: %s",
                              len(colours) - 1, colours[-1])
            colours.append(tertiary)
        return colours

    def build_preset(self, name, preset_id=None, brightness=None, effect=None, palette=None,
                     speed=None, intensity=None, color0=None, color1=None, color2=None) -> dict:
        """Build a save-preset payload from sparse parameters.

        Raises:
            PresetValidationError: On the first invalid parameter
        """
        name = self._check_name(name)
        target = self._target_id(preset_id)

        brightness = _check_byte('brightness', brightness)
        effect_id = self._resolve(effect, CatalogKind.EFFECT) if effect is not None else None
        palette_id = self._resolve(palette, CatalogKind.PALETTE) if palette is not None else None
        speed = _check_byte('speed', speed)
        intensity = _check_byte('intensity', intensity)
        colours = self._colours(color0, color1, color2)

        segment: SegmentPayload = {'id': self.segment_id}
        payload: dict = {}
        if brightness is not None:
            payload['bri'] = brightness
            segment['bri'] = brightness
        if effect_id is not None:
            segment['fx'] = effect_id
        if palette_id is not None:
            segment['pal'] = palette_id
        if speed is not None:
            segment['sx'] = speed
        if intensity is not None:
            segment['ix'] = intensity
        if colours:
            segment['col'] = colours

        payload['seg'] = [segment]
        payload.update(self._save_directive(target, name))
        _LOGGER.debug("Built preset %d '%s': %s", target, name, payload)
        return payload

    def build_current_preset(self, name, preset_id=None) -> dict:
        """Payload saving the live controller state as a preset."""
        name = self._check_name(name)
        return self._save_directive(self._target_id(preset_id), name)

    @staticmethod
    def build_delete(preset_id) -> dict:
        try:
            target = int(preset_id)
        except (TypeError, ValueError):
            raise PresetValidationError(f"Invalid preset ID: {preset_id}. {range_message(CatalogKind.PRESET)}.")
        if not MIN_PRESET_ID <= target <= MAX_PRESET_ID:
            raise PresetValidationError(f"Invalid preset ID: {target}. {range_message(CatalogKind.PRESET)}.")
        return {'pdel': target}

    @staticmethod
    def _save_directive(target: int, name: str) -> dict:
        # ib/sb: include brightness and segment bounds in the saved preset
        return {'psave': target, 'n': name, 'ib': True, 'sb': True}
