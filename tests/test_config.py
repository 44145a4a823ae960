"""Tests for configuration functions in core/config.py

File operations use pytest's tmp_path; the real config file is never touched.
"""

import json
from pathlib import Path

import pytest
from core.config import CONFIG_FILE, DriverConfig, load_config, save_config


class TestConstants:
    """Test that constants are properly defined."""

    def test_config_file_path(self):
        """CONFIG_FILE should point to ~/.wled_control/config.json."""
        assert isinstance(CONFIG_FILE, Path)
        assert CONFIG_FILE.name == 'config.json'
        assert '.wled_control' in str(CONFIG_FILE)


class TestValidate:
    """Tests for DriverConfig.validate."""

    def test_defaults(self):
        config = DriverConfig()
        assert config.target_segment_id == 0
        assert config.default_transition_time == 700
        assert config.poll_interval_seconds == 300
        assert config.retry_enabled is True
        assert config.health_monitoring_enabled is True

    @pytest.mark.parametrize("raw,expected", [
        ('192.168.1.50', 'http://192.168.1.50'),
        ('http://wled.local/', 'http://wled.local'),
        ('https://wled.example ', 'https://wled.example'),
    ])
    def test_address_normalised(self, raw, expected):
        config = DriverConfig(endpoint_address=raw)
        config.validate()
        assert config.endpoint_address == expected

    @pytest.mark.parametrize("segment", [-1, 33, 'abc'])
    def test_invalid_segment_falls_back_to_zero(self, segment):
        config = DriverConfig(target_segment_id=segment)
        config.validate()
        assert config.target_segment_id == 0

    def test_numeric_strings_coerced(self):
        config = DriverConfig(target_segment_id='2', default_transition_time='400',
                              poll_interval_seconds='60')
        config.validate()
        assert config.target_segment_id == 2
        assert config.default_transition_time == 400
        assert config.poll_interval_seconds == 60

    def test_from_dict_ignores_unknown_keys(self):
        config = DriverConfig.from_dict({'endpoint_address': 'wled.local', 'colour': 'red'})
        assert config.endpoint_address == 'http://wled.local'


class TestLoadSave:
    """Tests for load_config and save_config."""

    def test_load_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / 'missing.json')
        assert config == DriverConfig()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / 'nested' / 'config.json'
        save_config(DriverConfig(endpoint_address='http://10.0.0.9', target_segment_id=3), path)

        assert json.loads(path.read_text())['target_segment_id'] == 3
        loaded = load_config(path)
        assert loaded.endpoint_address == 'http://10.0.0.9'
        assert loaded.target_segment_id == 3
