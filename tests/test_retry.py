"""Tests for the retry coordinator in core/retry.py"""

import logging

from core.retry import RetryContext, RetryCoordinator
from core.transport import Request

from conftest import RecordingScheduler


class TestRetryLimit:
    """Tests for bounded retries."""

    def _fail_repeatedly(self, times, max_attempts=3):
        scheduler = RecordingScheduler()
        resent = []
        coordinator = RetryCoordinator(scheduler, resent.append, max_attempts=max_attempts)

        request = Request('POST', '/json/state', body={'on': True})
        outcomes = []
        for _ in range(times):
            outcomes.append(coordinator.on_failure(request, 'timed out'))
            if scheduler.pending_names():
                scheduler.fire(scheduler.pending_names()[0])
                request = resent[-1]
        return outcomes, resent

    def test_four_failures_give_three_retries(self, caplog):
        """Fourth failure is logged as permanent and never retried."""
        with caplog.at_level(logging.INFO, logger='core.retry'):
            outcomes, resent = self._fail_repeatedly(4)

        assert outcomes == [True, True, True, False]
        assert len(resent) == 3
        permanent = [r for r in caplog.records if 'failed permanently' in r.getMessage()]
        assert len(permanent) == 1
        assert permanent[0].levelno == logging.ERROR

    def test_resubmission_keeps_payload(self):
        _, resent = self._fail_repeatedly(1)
        assert resent[0].body == {'on': True}
        assert resent[0].method == 'POST'

    def test_resubmission_is_unsubmitted_copy(self):
        scheduler = RecordingScheduler()
        resent = []
        coordinator = RetryCoordinator(scheduler, resent.append)
        request = Request('GET', '/json/state')

        coordinator.on_failure(request, 'refused')
        scheduler.fire(scheduler.pending_names()[0])

        assert resent[0] is not request
        assert resent[0].sequence == 0
        assert resent[0].retry is request.retry

    def test_success_clears_context(self):
        scheduler = RecordingScheduler()
        coordinator = RetryCoordinator(scheduler, lambda r: None)
        request = Request('GET', '/json/state')

        coordinator.on_failure(request, 'refused')
        coordinator.on_success(request)

        assert request.retry is None

    def test_disabled(self):
        scheduler = RecordingScheduler()
        coordinator = RetryCoordinator(scheduler, lambda r: None, enabled=False)
        assert coordinator.on_failure(Request('GET', '/json'), 'refused') is False
        assert scheduler.pending_names() == []


class TestRetryDelay:
    """The delay is constant, not exponential."""

    def test_constant_delay(self):
        scheduler = RecordingScheduler()
        coordinator = RetryCoordinator(scheduler, lambda r: None, base_delay=2)
        context = RetryContext(original_request=None, base_delay=2)
        for attempt in range(1, 4):
            context.attempt_count = attempt
            assert coordinator.delay_for(context) == 2

    def test_scheduled_with_delay(self):
        scheduler = RecordingScheduler()
        coordinator = RetryCoordinator(scheduler, lambda r: None)
        request = Request('GET', '/json/state')
        coordinator.on_failure(request, 'refused')
        assert scheduler.delay_of(f"retry-{request.sequence}") == 2
