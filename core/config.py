"""Configuration management.

This module handles:
- Loading/saving the JSON configuration file
- Validating driver settings and filling defaults
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

_LOGGER = logging.getLogger(__name__)

# Configuration file path
CONFIG_FILE = Path.home() / '.wled_control' / 'config.json'

TRANSITION_TIMES = (0, 400, 700, 1000, 2000, 5000)
POLL_INTERVALS = (0, 30, 60, 300, 600, 1800, 3600)
MAX_SEGMENTS = 32


@dataclass
class DriverConfig:
    """Settings for one controller, as supplied by the host."""
    endpoint_address: str | None = None
    target_segment_id: int = 0
    default_transition_time: int = 700
    poll_interval_seconds: int = 300
    retry_enabled: bool = True
    health_monitoring_enabled: bool = True
    power_off_parent: bool = False
    debug_logging: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'DriverConfig':
        """Build a config from a loaded dict, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        config = cls(**known)
        config.validate()
        return config

    def validate(self):
        """Coerce out-of-range values to safe defaults, with a warning."""
        if self.endpoint_address:
            address = self.endpoint_address.strip().rstrip('/')
            if not address.startswith(('http://', 'https://')):
                address = f"http://{address}"
            self.endpoint_address = address

        try:
            segment = int(self.target_segment_id)
        except (TypeError, ValueError):
            segment = -1
        if not 0 <= segment <= MAX_SEGMENTS:
            _LOGGER.warning("Invalid segment ID %s, using default segment 0", self.target_segment_id)
            segment = 0
        self.target_segment_id = segment

        try:
            self.default_transition_time = max(0, int(self.default_transition_time))
        except (TypeError, ValueError):
            _LOGGER.warning("Invalid transition time %s, using 700ms", self.default_transition_time)
            self.default_transition_time = 700

        try:
            self.poll_interval_seconds = int(self.poll_interval_seconds)
        except (TypeError, ValueError):
            _LOGGER.warning("Invalid poll interval %s, polling disabled", self.poll_interval_seconds)
            self.poll_interval_seconds = 0

    def to_dict(self) -> dict:
        return asdict(self)


def load_config(path: Path | None = None) -> DriverConfig:
    """Load configuration from the local file.

    Returns:
        DriverConfig, with defaults if the file doesn't exist
    """
    path = path or CONFIG_FILE
    if path.exists():
        with open(path, 'r') as f:
            return DriverConfig.from_dict(json.load(f))
    return DriverConfig()


def save_config(config: DriverConfig, path: Path | None = None):
    """Save configuration to file.

    Args:
        config: Configuration to save
        path: Destination (defaults to CONFIG_FILE)
    """
    path = path or CONFIG_FILE
    # Create config directory if it doesn't exist
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)
