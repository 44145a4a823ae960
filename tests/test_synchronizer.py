"""Tests for attribute synchronisation in core/synchronizer.py"""

from core.synchronizer import DeviceAttributes, Synchronizer, colour_attributes
from models.types import DeviceSnapshot, Segment

from conftest import make_state


def _sync(catalogs, segment_id=0):
    sink = DeviceAttributes()
    return sink, Synchronizer(sink, catalogs, segment_id)


class TestApply:
    """Tests for Synchronizer.apply."""

    def test_effect_snapshot(self, catalogs):
        """A red Rainbow effect publishes level, names and a hue-based colour name."""
        sink, sync = _sync(catalogs)
        snapshot = DeviceSnapshot.from_json(
            {'seg': [{'id': 0, 'on': True, 'bri': 128, 'fx': 9, 'pal': 11, 'col': [[255, 0, 0]]}]})

        assert sync.apply(snapshot) is True

        values = sink.values
        assert values['switch'] == 'on'
        assert values['level'] == 50
        assert values['effectName'] == 'Rainbow'
        assert values['effectId'] == 9
        assert values['paletteName'] == 'Rainbow'
        assert values['paletteId'] == 11
        assert values['colorName'] == 'Red'
        assert values['colorMode'] == 'EFFECTS'
        assert 'colorTemperature' not in values

    def test_same_snapshot_twice_publishes_nothing(self, catalogs):
        sink, sync = _sync(catalogs)
        snapshot = DeviceSnapshot.from_json(make_state(fx=9))

        sync.apply(snapshot)
        batches = len(sink.history)
        sync.apply(snapshot)

        assert len(sink.history) == batches

    def test_only_changes_published(self, catalogs):
        sink, sync = _sync(catalogs)
        sync.apply(DeviceSnapshot.from_json(make_state(bri=255)))
        sync.apply(DeviceSnapshot.from_json(make_state(bri=51)))

        assert [e.name for e in sink.history[-1]] == ['level']
        assert sink.history[-1][0].value == 20
        assert sink.history[-1][0].unit == '%'

    def test_one_batch_per_snapshot(self, catalogs):
        sink, sync = _sync(catalogs)
        sync.apply(DeviceSnapshot.from_json(make_state()))
        assert len(sink.history) == 1

    def test_missing_segment_touches_nothing(self, catalogs):
        sink, sync = _sync(catalogs, segment_id=3)
        assert sync.apply(DeviceSnapshot.from_json(make_state())) is False
        assert sink.history == []

    def test_off_segment_has_zero_level(self, catalogs):
        sink, sync = _sync(catalogs)
        sync.apply(DeviceSnapshot.from_json(make_state(on=False, bri=200)))
        assert sink.values['switch'] == 'off'
        assert sink.values['level'] == 0

    def test_reverse(self, catalogs):
        sink, sync = _sync(catalogs)
        sync.apply(DeviceSnapshot.from_json(make_state(rev=True)))
        assert sink.values['effectDirection'] == 'reverse'
        assert sink.values['reverse'] == 'on'


class TestPresetAndPlaylist:
    """Tests for preset, playlist and nightlight attributes."""

    def test_active_preset_named(self, catalogs):
        sink, sync = _sync(catalogs)
        state = make_state()
        state['ps'] = 1
        sync.apply(DeviceSnapshot.from_json(state))
        assert sink.values['presetValue'] == 1
        assert sink.values['presetName'] == 'Evening'

    def test_unknown_preset_id(self, catalogs):
        sink, sync = _sync(catalogs)
        state = make_state()
        state['ps'] = 77
        sync.apply(DeviceSnapshot.from_json(state))
        assert sink.values['presetName'] == 'Unknown Preset'

    def test_no_preset(self, catalogs):
        sink, sync = _sync(catalogs)
        sync.apply(DeviceSnapshot.from_json(make_state()))
        assert sink.values['presetValue'] == 0
        assert sink.values['presetName'] == 'None'

    def test_running_playlist(self, catalogs):
        sink, sync = _sync(catalogs)
        state = make_state()
        state['pl'] = 5
        sync.apply(DeviceSnapshot.from_json(state))
        assert sink.values['playlistState'] == 'running'
        assert sink.values['playlistName'] == 'Party Mix'

    def test_unknown_playlist(self, catalogs):
        sink, sync = _sync(catalogs)
        state = make_state()
        state['pl'] = 9
        sync.apply(DeviceSnapshot.from_json(state))
        assert sink.values['playlistName'] == 'Unknown Playlist 9'

    def test_nightlight(self, catalogs):
        sink, sync = _sync(catalogs)
        state = make_state()
        state['nl'] = {'on': True, 'dur': 30, 'mode': 3, 'tbri': 10, 'rem': 1200}
        sync.apply(DeviceSnapshot.from_json(state))
        assert sink.values['nightlightActive'] == 'on'
        assert sink.values['nightlightDuration'] == 30
        assert sink.values['nightlightMode'] == 'Sunrise'
        assert sink.values['nightlightRemaining'] == 1200


class TestColourAttributes:
    """Tests for colour_attributes function."""

    def test_white_reports_temperature(self):
        attrs = colour_attributes(Segment(id=0, colors=[[255, 237, 222]]))
        assert attrs['colorMode'] == 'CT'
        assert attrs['colorTemperature'] == 5500
        assert attrs['colorName'] == 'Skylight'

    def test_warm_white_named_by_temperature(self):
        attrs = colour_attributes(Segment(id=0, colors=[[255, 200, 170]]))
        assert attrs['colorMode'] == 'CT'
        assert attrs['colorName'] == 'Daylight'

    def test_orange_reports_hue(self):
        attrs = colour_attributes(Segment(id=0, colors=[[255, 128, 0]]))
        assert attrs['colorMode'] == 'RGB'
        assert 'colorTemperature' not in attrs
        assert attrs['colorName'] == 'Orange'

    def test_colour_reports_hue(self):
        attrs = colour_attributes(Segment(id=0, colors=[[0, 0, 255]]))
        assert attrs['colorMode'] == 'RGB'
        assert attrs['hue'] == 67
        assert attrs['saturation'] == 100
        assert attrs['colorName'] == 'Blue'

    def test_no_colour(self):
        assert colour_attributes(Segment(id=0, colors=[]))['colorName'] == 'Unknown'
