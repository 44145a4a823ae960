"""Name-or-id resolution for effects, palettes, presets and playlists.

A user token is parsed once at the API boundary into a NumericToken or a
NamedToken. Numeric tokens are range checked and passed through untouched so
automations built against raw ids keep working. Named tokens are matched
case-insensitively, exact first, then by substring in catalog order.

Substring ties are resolved by catalog order, not by specificity: "Fire"
against ["Fire 2012", "Firefly"] yields "Fire 2012".
"""

import logging
import re
from dataclasses import dataclass

from core.catalog import CatalogStore, MAX_PRESET_ID, MIN_PRESET_ID
from models.types import CatalogKind

_LOGGER = logging.getLogger(__name__)

ID_RANGES = {
    CatalogKind.EFFECT: (0, 255),
    CatalogKind.PALETTE: (0, 255),
    CatalogKind.PRESET: (MIN_PRESET_ID, MAX_PRESET_ID),
    CatalogKind.PLAYLIST: (MIN_PRESET_ID, MAX_PRESET_ID),
}

_NUMERIC = re.compile(r'^[+-]?\d+$')


@dataclass(frozen=True)
class NumericToken:
    value: int


@dataclass(frozen=True)
class NamedToken:
    name: str


Token = NumericToken | NamedToken


def parse_token(raw) -> Token | None:
    """Classify a raw user value as an id or a name.

    Returns:
        NumericToken for ints and integer strings, NamedToken for other
        non-blank strings, None for None/blank/unsupported values
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, NumericToken | NamedToken):
        return raw
    if isinstance(raw, int):
        return NumericToken(raw)
    if isinstance(raw, float) and raw.is_integer():
        return NumericToken(int(raw))
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        if _NUMERIC.match(text):
            return NumericToken(int(text))
        return NamedToken(text)
    return None


def range_message(kind: CatalogKind) -> str:
    low, high = ID_RANGES[kind]
    return f"Must be between {low}-{high}"


def in_range(value: int, kind: CatalogKind) -> bool:
    low, high = ID_RANGES[kind]
    return low <= value <= high


class Resolver:
    """Resolves tokens against a CatalogStore."""

    def __init__(self, catalogs: CatalogStore):
        self._catalogs = catalogs

    def resolve(self, token, kind: CatalogKind) -> int | None:
        """Resolve a token (raw value or parsed Token) to a validated id.

        Returns:
            The id, or None when the token is blank, out of range or unknown
        """
        parsed = parse_token(token)
        if parsed is None:
            return None

        if isinstance(parsed, NumericToken):
            if not in_range(parsed.value, kind):
                _LOGGER.warning("%s ID %d is out of valid range. %s",
                                kind.value.capitalize(), parsed.value, range_message(kind))
                return None
            return parsed.value

        return self.find_by_name(parsed.name, kind)

    def find_by_name(self, name: str, kind: CatalogKind) -> int | None:
        wanted = name.lower()
        entries = [(index, entry) for index, entry in self._catalogs.entries(kind) if entry]

        for index, entry in entries:
            if entry.lower() == wanted:
                return index

        for index, entry in entries:
            if wanted in entry.lower():
                _LOGGER.debug("Found partial match for '%s': '%s' (ID: %d)", name, entry, index)
                return index

        return None
