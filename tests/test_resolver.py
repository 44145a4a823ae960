"""Tests for name-or-id resolution in core/resolver.py"""

import pytest
from core.catalog import CatalogStore
from core.resolver import NamedToken, NumericToken, Resolver, parse_token
from models.types import CatalogKind


class TestParseToken:
    """Tests for parse_token function."""

    @pytest.mark.parametrize("raw,expected", [
        (9, NumericToken(9)),
        ('9', NumericToken(9)),
        (' 12 ', NumericToken(12)),
        (3.0, NumericToken(3)),
        ('-1', NumericToken(-1)),
        ('Rainbow', NamedToken('Rainbow')),
        ('fire 2012', NamedToken('fire 2012')),
    ])
    def test_classification(self, raw, expected):
        assert parse_token(raw) == expected

    @pytest.mark.parametrize("raw", [None, '', '   ', True, 2.5, ['Solid']])
    def test_unsupported_values(self, raw):
        assert parse_token(raw) is None


class TestResolve:
    """Tests for Resolver.resolve."""

    def test_numeric_in_range_returned_unchanged(self):
        """Numeric ids pass through without consulting the catalog."""
        resolver = Resolver(CatalogStore())
        for value in (0, 9, 200, 255):
            assert resolver.resolve(value, CatalogKind.EFFECT) == value
        assert resolver.resolve('42', CatalogKind.PALETTE) == 42

    def test_numeric_out_of_range(self):
        resolver = Resolver(CatalogStore())
        assert resolver.resolve(256, CatalogKind.EFFECT) is None
        assert resolver.resolve(-1, CatalogKind.PALETTE) is None
        assert resolver.resolve(0, CatalogKind.PRESET) is None
        assert resolver.resolve(251, CatalogKind.PLAYLIST) is None

    def test_exact_name_case_insensitive(self, catalogs):
        resolver = Resolver(catalogs)
        for index, name in enumerate(catalogs.effects):
            assert resolver.resolve(name.upper(), CatalogKind.EFFECT) == index

    def test_exact_beats_earlier_partial(self, catalogs):
        """'Rainbow' matches the exact entry, not 'Rainbow Bands'."""
        resolver = Resolver(catalogs)
        assert resolver.resolve('rainbow', CatalogKind.PALETTE) == 11

    def test_partial_match(self):
        store = CatalogStore()
        store.load_effects_and_palettes(['Solid', 'Fire 2012'], ['Default'])
        assert Resolver(store).resolve('fire', CatalogKind.EFFECT) == 1

    def test_partial_ties_resolve_in_catalog_order(self):
        store = CatalogStore()
        store.load_effects_and_palettes(['Solid', 'Fire 2012', 'Firefly'], ['Default'])
        assert Resolver(store).resolve('Fire', CatalogKind.EFFECT) == 1

    def test_unknown_name(self, catalogs):
        """Unknown names return None and never raise."""
        resolver = Resolver(catalogs)
        assert resolver.resolve('doesnotexist', CatalogKind.EFFECT) is None
        assert resolver.resolve('doesnotexist', CatalogKind.PRESET) is None

    def test_presets_and_playlists_resolved_separately(self, catalogs):
        resolver = Resolver(catalogs)
        assert resolver.resolve('Party Mix', CatalogKind.PLAYLIST) == 5
        assert resolver.resolve('party', CatalogKind.PRESET) == 2

    def test_blank_token(self, catalogs):
        assert Resolver(catalogs).resolve('  ', CatalogKind.EFFECT) is None
