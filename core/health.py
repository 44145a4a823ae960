"""Connection health monitoring.

Owns the connection state. Only transport outcomes and the periodic liveness
check move it; command code never sets it.
"""

import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from models.types import ConnectionState

if TYPE_CHECKING:
    from core.scheduler import Scheduler

_LOGGER = logging.getLogger(__name__)

CONNECTION_CHECK_INTERVAL = 30
CONNECTION_TIMEOUT_MULTIPLIER = 2


class ConnectionHealthMonitor:
    """Tracks last contact and drives the connection state machine."""

    TASK_NAME = 'connection-check'

    def __init__(self, scheduler: 'Scheduler', probe: Callable[[], None],
                 publish: Callable[[dict], None], enabled: bool = True,
                 check_interval: float = CONNECTION_CHECK_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        """Initialise the monitor.

        Args:
            scheduler: Scheduler used for the recurring check
            probe: Issues a liveness request to the controller
            publish: Receives attribute updates (connectionState, lastUpdate)
            enabled: Whether the recurring check runs
            check_interval: Seconds between checks
            clock: Monotonic time source
        """
        self._scheduler = scheduler
        self._probe = probe
        self._publish = publish
        self.enabled = enabled
        self.check_interval = check_interval
        self._clock = clock
        self.state = ConnectionState.UNKNOWN
        self.last_contact: float | None = None

    @property
    def timeout(self) -> float:
        return self.check_interval * CONNECTION_TIMEOUT_MULTIPLIER

    def _transition(self, new_state: ConnectionState):
        if new_state is self.state:
            return
        _LOGGER.debug("Connection state %s -> %s", self.state.value, new_state.value)
        self.state = new_state
        self._publish({'connectionState': new_state.value})

    def reset(self):
        self.state = ConnectionState.UNKNOWN
        self.last_contact = self._clock()

    def request_sent(self):
        if self.state is ConnectionState.UNKNOWN:
            self._transition(ConnectionState.INITIALIZING)

    def record_success(self):
        self.last_contact = self._clock()
        self._transition(ConnectionState.CONNECTED)
        self._publish({'lastUpdate': datetime.now().strftime('%Y-%m-%d %H:%M:%S')})

    def record_failure(self, error: str):
        _LOGGER.warning("Network error: %s", error)
        self._transition(ConnectionState.ERROR)

    def seconds_since_contact(self) -> float | None:
        if self.last_contact is None:
            return None
        return self._clock() - self.last_contact

    def start(self):
        if not self.enabled:
            _LOGGER.debug("Connection monitoring disabled.")
            return
        self._scheduler.schedule(self.TASK_NAME, self.check_interval, self.check)

    def stop(self):
        self._scheduler.cancel(self.TASK_NAME)

    def check(self):
        """Liveness check. Reschedules itself while monitoring is enabled."""
        if not self.enabled:
            return

        elapsed = self.seconds_since_contact()
        if elapsed is None or elapsed > self.timeout:
            if elapsed is not None:
                _LOGGER.warning("No successful contact with WLED device for %.0f seconds", elapsed)
            if self.state is ConnectionState.CONNECTED:
                self._transition(ConnectionState.DISCONNECTED)
            self._probe()

        self._scheduler.schedule(self.TASK_NAME, self.check_interval, self.check)
