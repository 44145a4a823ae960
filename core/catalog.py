"""Catalogs of named controller entities.

Effects and palettes are flat lists addressed by position. Presets and
playlists share one sparse id space (1-250) and arrive together from the
presets endpoint, so they are split here by the presence of a `playlist` key.
"""

import logging
from typing import Any

from core.errors import SnapshotParseError
from models.types import CatalogKind

_LOGGER = logging.getLogger(__name__)

MIN_PRESET_ID = 1
MAX_PRESET_ID = 250

UNNAMED = {
    CatalogKind.EFFECT: 'Unknown',
    CatalogKind.PALETTE: 'Unknown',
    CatalogKind.PRESET: 'Unnamed Preset',
    CatalogKind.PLAYLIST: 'Unnamed Playlist',
}

ATTRIBUTE_NAMES = {
    CatalogKind.EFFECT: 'availableEffects',
    CatalogKind.PALETTE: 'availablePalettes',
    CatalogKind.PRESET: 'availablePresets',
    CatalogKind.PLAYLIST: 'availablePlaylists',
}


class CatalogStore:
    """Holds the four catalogs reported by the controller."""

    def __init__(self):
        self.effects: list[str | None] = []
        self.palettes: list[str | None] = []
        self.presets: dict[int, str | None] = {}
        self.playlists: dict[int, str | None] = {}

    def clear(self):
        self.effects = []
        self.palettes = []
        self.presets = {}
        self.playlists = {}

    def load_effects_and_palettes(self, effects: Any, palettes: Any):
        """Replace the effect and palette lists from a full response.

        Raises:
            SnapshotParseError: If either list is missing or not a list
        """
        if not isinstance(effects, list) or not isinstance(palettes, list):
            raise SnapshotParseError("Full response without effect/palette lists")
        self.effects = [e if isinstance(e, str) else None for e in effects]
        self.palettes = [p if isinstance(p, str) else None for p in palettes]
        _LOGGER.info("Loaded %d effects and %d palettes", len(self.effects), len(self.palettes))

    def load_presets(self, records: Any):
        """Replace presets and playlists from a /presets.json response.

        Raises:
            SnapshotParseError: If the response is not an id-keyed object
        """
        if not isinstance(records, dict):
            raise SnapshotParseError(f"Presets response is not an object: {type(records).__name__}")

        presets = {}
        playlists = {}
        for key, record in records.items():
            try:
                preset_id = int(key)
            except (TypeError, ValueError):
                _LOGGER.debug("Skipping non-numeric preset key %r", key)
                continue
            if preset_id == 0:
                continue

            record = record if isinstance(record, dict) else {}
            name = record.get('n') or None
            if 'playlist' in record:
                playlists[preset_id] = name
            else:
                presets[preset_id] = name

        self.presets = dict(sorted(presets.items()))
        self.playlists = dict(sorted(playlists.items()))
        _LOGGER.debug("Loaded %d presets and %d playlists.", len(self.presets), len(self.playlists))

    def entries(self, kind: CatalogKind) -> list[tuple[int, str | None]]:
        """(id, name) pairs in catalog order."""
        if kind is CatalogKind.EFFECT:
            return list(enumerate(self.effects))
        if kind is CatalogKind.PALETTE:
            return list(enumerate(self.palettes))
        if kind is CatalogKind.PRESET:
            return list(self.presets.items())
        return list(self.playlists.items())

    def is_loaded(self, kind: CatalogKind) -> bool:
        return bool(self.entries(kind))

    def name_of(self, kind: CatalogKind, entry_id: int) -> str | None:
        """Display name for an id, or None if the id is not in the catalog."""
        for index, name in self.entries(kind):
            if index == entry_id:
                return name or UNNAMED[kind]
        return None

    def format_list(self, kind: CatalogKind) -> str:
        """Human readable 'id: name' listing used for attributes and guidance."""
        entries = self.entries(kind)
        if not entries:
            return f"{kind.value.capitalize()}s not loaded"
        return ', '.join(f"{index}: {name or UNNAMED[kind]}" for index, name in entries)

    def next_free_preset_id(self) -> int | None:
        """Lowest id in [1, 250] used by neither a preset nor a playlist."""
        used = set(self.presets) | set(self.playlists)
        for candidate in range(MIN_PRESET_ID, MAX_PRESET_ID + 1):
            if candidate not in used:
                return candidate
        return None
