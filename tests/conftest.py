"""Pytest configuration and fixtures for WLED control tests."""

from pathlib import Path

import pytest

from core.catalog import CatalogStore
from core.config import DriverConfig
from core.controller import WledController
from core.synchronizer import DeviceAttributes
from core.transport import ENDPOINTS, Request, TransportResult


class RecordingScheduler:
    """Scheduler stand-in that records tasks instead of arming loop timers."""

    def __init__(self):
        self.tasks: dict[str, tuple[float, object, tuple]] = {}
        self.history: list[tuple[str, float]] = []

    def schedule(self, name, delay, callback, *args):
        self.tasks[name] = (delay, callback, args)
        self.history.append((name, delay))

    def cancel(self, name):
        return self.tasks.pop(name, None) is not None

    def cancel_all(self):
        self.tasks.clear()

    def pending(self, name):
        return name in self.tasks

    def pending_names(self):
        return list(self.tasks)

    def delay_of(self, name):
        return self.tasks[name][0]

    def fire(self, name):
        """Run a pending task now, as the loop would once its delay elapsed."""
        _, callback, args = self.tasks.pop(name)
        callback(*args)


class FakeTransport:
    """Transport stand-in that records requests without sending them."""

    def __init__(self):
        self.sent: list[Request] = []
        self.closed = False

    def send(self, request):
        self.sent.append(request)

    def close(self):
        self.closed = True

    async def drain(self):
        return None

    def last(self, path=None) -> Request:
        matching = [r for r in self.sent if path is None or r.path == path]
        return matching[-1]


EFFECTS = ['Solid', 'Blink', 'Breathe', 'Wipe', 'Wipe Random', 'Random Colors', 'Sweep',
           'Dynamic', 'Colorloop', 'Rainbow', 'Scan', 'Strobe', 'Chase Flash', 'Strobe Mega',
           'Fire 2012', 'Firefly']
PALETTES = ['Default', '* Random Cycle', '* Color 1', '* Colors 1&2', '* Color Gradient',
            '* Colors Only', 'Party', 'Cloud', 'Lava', 'Ocean', 'Forest', 'Rainbow',
            'Rainbow Bands', 'Sunset', 'Rivendell', 'Fire', 'Red & Blue']
PRESETS_JSON = {
    '0': {},
    '1': {'n': 'Evening', 'on': True, 'bri': 120},
    '2': {'n': 'Party', 'on': True},
    '3': {'on': True},
    '5': {'n': 'Party Mix', 'playlist': {'ps': [1, 2], 'dur': [30, 30]}},
}


def make_state(**segment):
    """State object with one segment (id 0) overridden by keyword arguments."""
    seg = {'id': 0, 'on': True, 'bri': 128, 'fx': 0, 'pal': 0, 'col': [[255, 160, 80]],
           'sx': 128, 'ix': 128, 'rev': False, 'start': 0, 'stop': 30}
    seg.update(segment)
    return {'on': True, 'bri': 128, 'ps': -1, 'pl': -1,
            'nl': {'on': False, 'dur': 60, 'mode': 1, 'tbri': 0, 'rem': -1},
            'seg': [seg]}


def make_full(state=None):
    return {
        'state': state or make_state(),
        'info': {'ver': '0.14.0', 'vid': 2310130, 'name': 'Desk Strip'},
        'effects': list(EFFECTS),
        'palettes': list(PALETTES),
    }


def respond(controller, request, payload=None, error=None, error_kind='transport', status=200):
    """Deliver a completion for `request` to the controller."""
    if error is not None:
        result = TransportResult(request, status=None, error=error, error_kind=error_kind)
    else:
        result = TransportResult(request, status=status, payload=payload)
    controller.handle_completion(result)


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config():
    return DriverConfig(endpoint_address='http://192.168.1.50', target_segment_id=0,
                        default_transition_time=700, poll_interval_seconds=300)


@pytest.fixture
def attributes():
    return DeviceAttributes()


@pytest.fixture
def controller(config, attributes, scheduler, transport):
    """Controller wired to fakes, not yet started."""
    return WledController(config, attributes, scheduler=scheduler, transport=transport,
                          clock=lambda: 1000.0)


@pytest.fixture
def ready_controller(controller, transport):
    """Controller that has completed initialisation, with presets loaded."""
    controller.start()
    respond(controller, transport.last(ENDPOINTS['FULL']), make_full())
    controller.get_presets()
    respond(controller, transport.last(ENDPOINTS['PRESETS']), PRESETS_JSON)
    return controller


@pytest.fixture
def catalogs():
    store = CatalogStore()
    store.load_effects_and_palettes(list(EFFECTS), list(PALETTES))
    store.load_presets(PRESETS_JSON)
    return store
