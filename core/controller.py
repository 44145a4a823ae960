"""WledController: synchronisation engine for one WLED controller.

This module wires the transport, retry coordinator, health monitor, catalogs,
resolver, synchroniser and preset builder together, owns the initialisation
state machine, dispatches every network completion, and exposes the user
commands.
"""

import asyncio
import functools
import itertools
import logging
import time
from enum import Enum
from typing import Any

from core.catalog import ATTRIBUTE_NAMES, CatalogStore
from core.config import POLL_INTERVALS, DriverConfig
from core.errors import InvalidParameterError, SnapshotParseError
from core.health import ConnectionHealthMonitor
from core.presets import PresetBuilder
from core.resolver import Resolver, parse_token
from core.retry import RetryCoordinator
from core.scheduler import Scheduler
from core.synchronizer import AttributeSink, DeviceAttributes, Synchronizer
from core.transport import ENDPOINTS, ERROR_PARSE, Request, Transport, TransportResult
from models.colour import hsv_to_rgb, kelvin_to_rgb
from models.types import (
    NIGHTLIGHT_MODES,
    CatalogKind,
    DeviceInfo,
    DeviceSnapshot,
    Segment,
)
from models.utils import check_range, find_similar_strings

_LOGGER = logging.getLogger(__name__)

SELF_HEAL_DELAY = 2
MAX_SELF_HEAL_ATTEMPTS = 3
CATALOG_REFRESH_DELAY = 2

# Alarm effects: (effect, speed, intensity, palette)
ALARMS = {
    'siren': ('Chase Flash', 255, 255, 'Fire'),
    'strobe': ('Strobe', 255, 255, 'Default'),
    'both': ('Strobe Mega', 255, 255, 'Red & Blue'),
}


def percent_to_brightness(percent: float) -> int:
    """Host level (0-100) to controller brightness (0-255)."""
    return round(percent * 255 / 100)


class Phase(str, Enum):
    """Initialisation state of the engine."""
    UNINITIALISED = 'uninitialised'
    READY = 'ready'
    RECOVERING = 'recovering'


def requires_ready(method):
    """Ignore a command (with a warning) until the first full refresh has been parsed."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        if self.phase is Phase.UNINITIALISED:
            _LOGGER.warning("Driver not fully initialized. Ignoring %s; waiting for full refresh.",
                            method.__name__)
            return False
        return method(self, *args, **kwargs)
    return wrapper


class WledController:
    """Keeps host attributes in step with one WLED controller."""

    def __init__(self, config: DriverConfig, sink: AttributeSink | None = None,
                 scheduler: Scheduler | None = None, transport: Transport | None = None,
                 clock=time.monotonic):
        """Initialise the engine.

        Args:
            config: Driver settings
            sink: Receiver of attribute updates (in-memory store if omitted)
            scheduler: Timer source (event-loop scheduler if omitted)
            transport: HTTP transport (requests-based if omitted)
            clock: Monotonic clock used by the health monitor
        """
        self.config = config
        self.sink = sink if sink is not None else DeviceAttributes()
        self.scheduler = scheduler or Scheduler()
        self.segment_id = config.target_segment_id

        self.catalogs = CatalogStore()
        self.resolver = Resolver(self.catalogs)
        self.synchronizer = Synchronizer(self.sink, self.catalogs, self.segment_id)
        self.presets = PresetBuilder(self.catalogs, self.resolver, self.segment_id,
                                     lambda: self.target_segment)
        self.transport = transport or Transport(config.endpoint_address, self.handle_completion)
        self.retry = RetryCoordinator(self.scheduler, self._submit, enabled=config.retry_enabled)
        self.health = ConnectionHealthMonitor(self.scheduler, self._probe,
                                              self.synchronizer.publish,
                                              enabled=config.health_monitoring_enabled,
                                              clock=clock)

        self.phase = Phase.UNINITIALISED
        self.generation = 0
        self.snapshot: DeviceSnapshot | None = None
        self.device_info = DeviceInfo()
        self._sequence = itertools.count(1)
        self._last_applied_sequence = 0
        self._recovery_attempts = 0
        self._ready = asyncio.Event()

    # --- lifecycle ---

    @property
    def initialized(self) -> bool:
        return self.phase is not Phase.UNINITIALISED

    @property
    def target_segment(self) -> Segment | None:
        if self.snapshot is None:
            return None
        return self.snapshot.find_segment(self.segment_id)

    def start(self) -> bool:
        """Begin initialisation: full refresh plus health monitoring."""
        if not self.config.endpoint_address:
            _LOGGER.error("WLED URI is not set.")
            return False

        _LOGGER.info("Initializing connection to %s (segment %d)...",
                     self.config.endpoint_address, self.segment_id)
        self.health.reset()
        self.force_refresh()
        self.health.start()
        return True

    def stop(self):
        self.scheduler.cancel_all()
        self.transport.close()

    def reinitialise(self) -> bool:
        """Drop all runtime state and start over. In-flight responses are ignored."""
        _LOGGER.info("Settings updated. Initializing...")
        self.generation += 1
        self.scheduler.cancel_all()
        self.phase = Phase.UNINITIALISED
        self.catalogs.clear()
        self.snapshot = None
        self.synchronizer.reset()
        self._recovery_attempts = 0
        self._ready.clear()
        return self.start()

    async def wait_until_ready(self, timeout: float = 10) -> bool:
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
            return True
        except asyncio.TimeoutError:
            return False

    # --- requests ---

    def _submit(self, request: Request):
        request.sequence = next(self._sequence)
        self.health.request_sent()
        self.transport.send(request)

    def _get(self, path: str):
        self._submit(Request('GET', path, generation=self.generation))

    def _transition_units(self, rate: float | None) -> int:
        """Transition time in protocol units (100 ms)."""
        if rate is not None:
            return max(0, int(rate * 10))
        return self.config.default_transition_time // 100

    def send_command(self, payload: dict[str, Any], rate: float | None = None) -> bool:
        """POST a command and ask for the resulting state in the response."""
        body = dict(payload)
        body['v'] = True
        body['tt'] = self._transition_units(rate)
        self._submit(Request('POST', ENDPOINTS['STATE'], body=body, generation=self.generation))
        return True

    # --- response handling ---

    def handle_completion(self, result: TransportResult):
        """Single entry point for every transport completion."""
        request = result.request
        if request.generation != self.generation:
            _LOGGER.debug("Ignoring response to %s from a superseded session", request.path)
            return

        if not result.ok:
            if result.error_kind == ERROR_PARSE:
                self.health.record_success()
                _LOGGER.error("Parse error for %s: %s", request.path, result.error)
                return
            self.health.record_failure(result.error)
            self.retry.on_failure(request, result.error)
            return

        self.retry.on_success(request)
        self.health.record_success()

        if not result.payload:
            _LOGGER.warning("Received empty or invalid JSON response.")
            return
        _LOGGER.debug("Response JSON: %s", result.payload)

        try:
            self._dispatch(result)
        except (SnapshotParseError, ValueError, TypeError, KeyError, AttributeError) as e:
            _LOGGER.error("Error parsing response from %s: %s", request.path, e)

    def _dispatch(self, result: TransportResult):
        path = result.path
        payload = result.payload

        if path == ENDPOINTS['FULL']:
            self._handle_full(payload, result.request)
        elif path == ENDPOINTS['STATE']:
            self._handle_state(payload, result.request)
        elif path == ENDPOINTS['INFO']:
            self._handle_info(payload)
        elif path == ENDPOINTS['PRESETS']:
            self._handle_presets(payload)
        elif isinstance(payload, dict) and {'state', 'effects', 'palettes'} <= payload.keys():
            self._handle_full(payload, result.request)
        elif isinstance(payload, dict) and 'state' in payload:
            self._handle_state(payload['state'], result.request)
        else:
            _LOGGER.warning("Unknown response type received from %s.", path)

    def _is_stale(self, request: Request) -> bool:
        if request.sequence < self._last_applied_sequence:
            _LOGGER.debug("Discarding stale snapshot (seq %d < %d)",
                          request.sequence, self._last_applied_sequence)
            return True
        return False

    def _handle_full(self, payload: dict, request: Request):
        if not isinstance(payload, dict) or 'state' not in payload:
            raise SnapshotParseError("Full response without 'state'")

        # Parse everything before mutating anything
        snapshot = DeviceSnapshot.from_json(payload['state'])
        info = DeviceInfo.from_json(payload['info']) if isinstance(payload.get('info'), dict) else None
        if self._is_stale(request):
            return
        self.catalogs.load_effects_and_palettes(payload.get('effects'), payload.get('palettes'))

        first_load = not self.initialized
        if first_load:
            self.phase = Phase.READY
        if info is not None:
            self._apply_info(info)
        self.synchronizer.publish({
            ATTRIBUTE_NAMES[CatalogKind.EFFECT]: self.catalogs.format_list(CatalogKind.EFFECT),
            ATTRIBUTE_NAMES[CatalogKind.PALETTE]: self.catalogs.format_list(CatalogKind.PALETTE),
        })
        self._apply_snapshot(snapshot, request)

        if first_load:
            _LOGGER.info("Full device info received. Driver initialization complete.")
            self._schedule_poll()
            if info is None:
                self.scheduler.schedule('device-info', 2, self.get_device_info)
            self.scheduler.schedule('presets-refresh', CATALOG_REFRESH_DELAY, self.get_presets)
            self._ready.set()

    def _handle_state(self, payload: dict, request: Request):
        if not self.initialized:
            _LOGGER.warning("Driver not fully initialized. Ignoring partial state update. "
                            "Waiting for full refresh.")
            return
        snapshot = DeviceSnapshot.from_json(payload)
        if self._is_stale(request):
            return
        self._apply_snapshot(snapshot, request)

    def _apply_snapshot(self, snapshot: DeviceSnapshot, request: Request):
        self._last_applied_sequence = max(self._last_applied_sequence, request.sequence)
        self.snapshot = snapshot

        if self.synchronizer.apply(snapshot):
            self._recovery_attempts = 0
            if self.phase is Phase.RECOVERING:
                _LOGGER.info("Segment %d found again. Recovery complete.", self.segment_id)
                self.phase = Phase.READY
        else:
            self._begin_recovery()

    def _begin_recovery(self):
        """Segment desync: move to RECOVERING and schedule a bounded full refresh."""
        self.phase = Phase.RECOVERING
        if self.scheduler.pending('self-heal'):
            return
        if self._recovery_attempts >= MAX_SELF_HEAL_ATTEMPTS:
            _LOGGER.error("Segment %d still missing after %d refresh attempts. "
                          "Waiting for the next update.", self.segment_id, MAX_SELF_HEAL_ATTEMPTS)
            return

        self._recovery_attempts += 1
        _LOGGER.warning("Attempting recovery with a full refresh (%d/%d)...",
                        self._recovery_attempts, MAX_SELF_HEAL_ATTEMPTS)
        self.scheduler.schedule('self-heal', SELF_HEAL_DELAY, self.force_refresh)

    def _handle_info(self, payload: dict):
        self._apply_info(DeviceInfo.from_json(payload))

    def _apply_info(self, info: DeviceInfo):
        self.device_info = info
        if info.version:
            self.synchronizer.publish({'firmwareVersion': info.version})
        _LOGGER.info("WLED Device Info - Version: %s, Build: %s, Name: %s",
                     info.version, info.build, info.name)

    def _handle_presets(self, payload: dict):
        self.catalogs.load_presets(payload)
        self.synchronizer.publish({
            ATTRIBUTE_NAMES[CatalogKind.PRESET]: self.catalogs.format_list(CatalogKind.PRESET),
            ATTRIBUTE_NAMES[CatalogKind.PLAYLIST]: self.catalogs.format_list(CatalogKind.PLAYLIST),
        })
        # Names may have become resolvable
        if self.phase is Phase.READY and self.snapshot is not None:
            self.synchronizer.apply(self.snapshot)

    # --- polling ---

    def _schedule_poll(self):
        interval = self.config.poll_interval_seconds
        if interval == 0:
            _LOGGER.info("Polling disabled.")
            return
        if interval not in POLL_INTERVALS:
            _LOGGER.warning("Unsupported refresh interval: %s. Disabling polling.", interval)
            return
        self.scheduler.schedule('poll', interval, self._poll)
        _LOGGER.debug("Device polling scheduled every %d seconds", interval)

    def _poll(self):
        self.refresh()
        self._schedule_poll()

    # --- helpers ---

    def _resolve(self, token, kind: CatalogKind, optional: bool = False) -> int | None:
        """Resolve a token, logging the catalog as guidance on a miss."""
        if parse_token(token) is None:
            if not optional:
                _LOGGER.error("%s cannot be empty.", kind.value.capitalize())
            return None

        resolved = self.resolver.resolve(token, kind)
        if resolved is None:
            level = logging.WARNING if optional else logging.ERROR
            _LOGGER.log(level, "%s '%s' not found. Available %ss: %s",
                        kind.value.capitalize(), token, kind.value, self.catalogs.format_list(kind))
            names = [name for _, name in self.catalogs.entries(kind) if name]
            suggestions = find_similar_strings(str(token), names, limit=3)
            if suggestions:
                _LOGGER.log(level, "Did you mean: %s?", ", ".join(suggestions))
            return None

        _LOGGER.debug("Resolved %s '%s' to ID %d", kind.value, token, resolved)
        return resolved

    def validate_segment(self) -> bool:
        if self.snapshot is None or not self.snapshot.segments:
            _LOGGER.warning("Segment information not available. Proceeding with command.")
            return True

        segment = self.target_segment
        if segment is None:
            available = [s.id for s in self.snapshot.segments]
            _LOGGER.warning("Segment %d not found on device. Available segments: %s",
                            self.segment_id, available)
            return False

        if segment.start == segment.stop:
            _LOGGER.warning("Segment %d is inactive (start == stop). Command may not have visible effect.",
                            self.segment_id)
        return True

    # --- refresh & diagnostics ---

    @requires_ready
    def refresh(self) -> bool:
        self._get(ENDPOINTS['STATE'])
        return True

    def force_refresh(self) -> bool:
        _LOGGER.info("Forcing full refresh of state, effects, and palettes...")
        self._get(ENDPOINTS['FULL'])
        return True

    def get_device_info(self) -> bool:
        _LOGGER.debug("Requesting device information...")
        self._get(ENDPOINTS['INFO'])
        return True

    def get_presets(self) -> bool:
        _LOGGER.debug("Requesting presets information...")
        self._get(ENDPOINTS['PRESETS'])
        return True

    def test_connection(self) -> bool:
        _LOGGER.info("Testing connection to WLED device...")
        self._get(ENDPOINTS['STATE'])
        return True

    def _probe(self):
        """Liveness request for the health monitor.

        Until the first full load succeeds a state reply is discarded, so the
        probe asks for the full document instead.
        """
        if self.phase is Phase.UNINITIALISED:
            self.force_refresh()
        else:
            self.test_connection()

    # --- switch, level, colour ---

    @requires_ready
    def on(self) -> bool:
        return self.send_command({'on': True, 'seg': [{'id': self.segment_id, 'on': True}]})

    @requires_ready
    def off(self) -> bool:
        payload: dict[str, Any] = {'seg': [{'id': self.segment_id, 'on': False}]}
        if self.config.power_off_parent:
            payload['on'] = False
        return self.send_command(payload)

    @requires_ready
    def set_level(self, value: float, rate: float | None = None) -> bool:
        value = max(0, min(value, 100))
        if value == 0:
            return self.off()
        brightness = percent_to_brightness(value)
        return self.send_command(
            {'on': True, 'seg': [{'id': self.segment_id, 'on': True, 'bri': brightness}]}, rate)

    @requires_ready
    def set_color(self, hue: float, saturation: float, level: float = 100) -> bool:
        """Set an HSV colour (all values 0-100) and stop any running effect."""
        try:
            hue = check_range('hue', hue, 0, 100)
            saturation = check_range('saturation', saturation, 0, 100)
            level = check_range('level', level, 0, 100)
        except InvalidParameterError as e:
            _LOGGER.error("%s", e)
            return False

        if level == 0:
            return self.off()
        rgb = hsv_to_rgb(hue, saturation, 100)
        return self.send_command({'on': True, 'seg': [{
            'id': self.segment_id, 'on': True, 'bri': percent_to_brightness(level), 'col': [rgb], 'fx': 0,
        }]})

    @requires_ready
    def set_color_temperature(self, kelvin: int) -> bool:
        try:
            kelvin = check_range('color temperature', kelvin, 1000, 40000)
        except InvalidParameterError as e:
            _LOGGER.error("%s", e)
            return False

        _LOGGER.debug("Setting color temperature to %dK", kelvin)
        rgb = kelvin_to_rgb(kelvin)
        return self.send_command({'on': True, 'seg': [{
            'id': self.segment_id, 'on': True, 'col': [rgb], 'fx': 0,
        }]})

    # --- effects & palettes ---

    @requires_ready
    def set_effect(self, effect, speed: int | None = None, intensity: int | None = None,
                   palette=None) -> bool:
        """Run an effect, by id or name, with optional speed, intensity and palette."""
        effect_id = self._resolve(effect, CatalogKind.EFFECT)
        if effect_id is None:
            return False
        palette_id = self._resolve(palette, CatalogKind.PALETTE, optional=True)

        try:
            segment = {'id': self.segment_id, 'fx': effect_id}
            if speed is not None:
                segment['sx'] = check_range('speed', speed, 0, 255)
            if intensity is not None:
                segment['ix'] = check_range('intensity', intensity, 0, 255)
        except InvalidParameterError as e:
            _LOGGER.error("%s", e)
            return False
        if palette_id is not None:
            segment['pal'] = palette_id

        _LOGGER.debug("Setting effect %d (speed %s, intensity %s, palette %s)",
                      effect_id, speed, intensity, palette_id)
        return self.send_command({'on': True, 'seg': [segment]})

    @requires_ready
    def set_palette(self, palette) -> bool:
        palette_id = self._resolve(palette, CatalogKind.PALETTE)
        if palette_id is None:
            return False
        return self.send_command({'seg': [{'id': self.segment_id, 'pal': palette_id}]})

    def _list(self, kind: CatalogKind) -> str | None:
        if not self.catalogs.is_loaded(kind):
            _LOGGER.warning("%ss not available. Refreshing device...", kind.value.capitalize())
            if kind in (CatalogKind.EFFECT, CatalogKind.PALETTE):
                self.force_refresh()
            else:
                self.get_presets()
            return None

        listing = self.catalogs.format_list(kind)
        _LOGGER.info("Available %ss (%d): %s", kind.value.capitalize(),
                     len(self.catalogs.entries(kind)), listing)
        self.synchronizer.publish({ATTRIBUTE_NAMES[kind]: listing})
        return listing

    @requires_ready
    def list_effects(self) -> str | None:
        return self._list(CatalogKind.EFFECT)

    @requires_ready
    def list_palettes(self) -> str | None:
        return self._list(CatalogKind.PALETTE)

    @requires_ready
    def set_effect_reverse(self, reverse: bool) -> bool:
        if not self.validate_segment():
            return False
        return self.send_command({'seg': [{'id': self.segment_id, 'rev': bool(reverse)}]})

    def reverse_on(self) -> bool:
        return self.set_effect_reverse(True)

    def reverse_off(self) -> bool:
        return self.set_effect_reverse(False)

    def toggle_effect_direction(self) -> bool:
        current = self.synchronizer.last_published('effectDirection')
        return self.set_effect_reverse(current != 'reverse')

    # --- alarm ---

    def siren(self) -> bool:
        return self.set_effect(*ALARMS['siren'])

    def strobe(self) -> bool:
        return self.set_effect(*ALARMS['strobe'])

    def both(self) -> bool:
        return self.set_effect(*ALARMS['both'])

    # --- presets ---

    @requires_ready
    def set_preset(self, preset) -> bool:
        preset_id = self._resolve(preset, CatalogKind.PRESET)
        if preset_id is None:
            return False
        _LOGGER.debug("Activating preset (ID: %d)", preset_id)
        return self.send_command({'ps': preset_id})

    def _send_and_refresh_presets(self, payload: dict) -> bool:
        self.send_command(payload)
        self.scheduler.schedule('presets-refresh', CATALOG_REFRESH_DELAY, self.get_presets)
        return True

    @requires_ready
    def save_preset(self, name, preset_id=None, brightness=None, effect=None, palette=None,
                    speed=None, intensity=None, primary_color=None, secondary_color=None,
                    tertiary_color=None) -> bool:
        """Save a preset from explicit parameters; unset values keep the live state."""
        try:
            payload = self.presets.build_preset(
                name, preset_id=preset_id, brightness=brightness, effect=effect, palette=palette,
                speed=speed, intensity=intensity, color0=primary_color, color1=secondary_color,
                color2=tertiary_color)
        except InvalidParameterError as e:
            _LOGGER.error("%s", e)
            return False

        _LOGGER.info("Saving preset %d '%s'", payload['psave'], payload['n'])
        return self._send_and_refresh_presets(payload)

    @requires_ready
    def save_current_as_preset(self, name, preset_id=None) -> bool:
        try:
            payload = self.presets.build_current_preset(name, preset_id)
        except InvalidParameterError as e:
            _LOGGER.error("%s", e)
            return False

        _LOGGER.info("Saving current state to preset %d '%s'", payload['psave'], payload['n'])
        return self._send_and_refresh_presets(payload)

    @requires_ready
    def delete_preset(self, preset_id) -> bool:
        try:
            payload = self.presets.build_delete(preset_id)
        except InvalidParameterError as e:
            _LOGGER.error("%s", e)
            return False

        _LOGGER.info("Deleting preset ID: %d", payload['pdel'])
        return self._send_and_refresh_presets(payload)

    @requires_ready
    def list_presets(self) -> str | None:
        return self._list(CatalogKind.PRESET)

    # --- playlists ---

    @requires_ready
    def set_playlist(self, playlist) -> bool:
        playlist_id = self._resolve(playlist, CatalogKind.PLAYLIST)
        if playlist_id is None:
            return False
        _LOGGER.debug("Starting playlist (ID: %d)", playlist_id)
        return self.send_command({'playlist': {'ps': playlist_id, 'on': True}})

    @requires_ready
    def stop_playlist(self) -> bool:
        return self.send_command({'playlist': {'on': False}})

    @requires_ready
    def next_preset_in_playlist(self) -> bool:
        if self.synchronizer.last_published('playlistState') != 'running':
            _LOGGER.warning("No playlist is currently running. Cannot advance to next preset.")
            return False
        return self.send_command({'np': True})

    @requires_ready
    def list_playlists(self) -> str | None:
        return self._list(CatalogKind.PLAYLIST)

    # --- nightlight ---

    @requires_ready
    def set_nightlight(self, duration: int, mode: str = 'Fade', target_brightness: int = 0) -> bool:
        """Start the nightlight timer; also turns master power on."""
        wanted = str(mode).replace(' ', '').lower()
        modes = [m.replace(' ', '').lower() for m in NIGHTLIGHT_MODES]
        if wanted not in modes:
            _LOGGER.error("Invalid nightlight mode '%s'. Must be one of: %s",
                          mode, ', '.join(NIGHTLIGHT_MODES))
            return False

        try:
            duration = check_range('nightlight duration', duration, 1, 255)
            target_brightness = check_range('target brightness', target_brightness, 0, 255)
        except InvalidParameterError as e:
            _LOGGER.error("%s", e)
            return False

        return self.send_command({'on': True, 'nl': {
            'on': True, 'dur': duration, 'mode': modes.index(wanted), 'tbri': target_brightness,
        }})

    @requires_ready
    def nightlight_off(self) -> bool:
        return self.send_command({'nl': {'on': False}})
