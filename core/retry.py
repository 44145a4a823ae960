"""Retry handling for failed requests.

Retries are safe because every command payload restates its full target
values: resubmitting after an unknown number of lost responses cannot
double-apply anything.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from core.scheduler import Scheduler
    from core.transport import Request

_LOGGER = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAY = 2


@dataclass
class RetryContext:
    """Retry bookkeeping for one logical command."""
    original_request: Any
    attempt_count: int = 0
    max_attempts: int = MAX_RETRIES
    base_delay: float = RETRY_DELAY


class RetryCoordinator:
    """Re-issues failed requests a bounded number of times with a constant delay."""

    def __init__(self, scheduler: 'Scheduler', resend: Callable[['Request'], None],
                 enabled: bool = True, max_attempts: int = MAX_RETRIES,
                 base_delay: float = RETRY_DELAY):
        self._scheduler = scheduler
        self._resend = resend
        self.enabled = enabled
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    def delay_for(self, context: RetryContext) -> float:
        """Delay before the next attempt. Constant, independent of attempt_count."""
        return context.base_delay

    def on_failure(self, request: 'Request', error: str) -> bool:
        """Handle a transport failure.

        Returns:
            True if a retry was scheduled, False if the command is given up
        """
        if not self.enabled:
            return False

        if request.retry is None:
            request.retry = RetryContext(original_request=request,
                                         max_attempts=self.max_attempts,
                                         base_delay=self.base_delay)

        context = request.retry
        context.attempt_count += 1

        if context.attempt_count > context.max_attempts:
            _LOGGER.error("Max retry attempts (%d) exceeded for %s %s. Command failed permanently: %s",
                          context.max_attempts, request.method, request.path, error)
            request.retry = None
            return False

        delay = self.delay_for(context)
        _LOGGER.info("Retrying %s %s in %s seconds (attempt %d/%d)",
                     request.method, request.path, delay, context.attempt_count, context.max_attempts)
        self._scheduler.schedule(f"retry-{context.original_request.sequence}", delay,
                                 self._resubmit, request)
        return True

    def on_success(self, request: 'Request'):
        if request.retry is not None:
            _LOGGER.debug("%s %s succeeded after %d retries",
                          request.method, request.path, request.retry.attempt_count)
        request.retry = None

    def _resubmit(self, request: 'Request'):
        self._resend(request.resubmission())
