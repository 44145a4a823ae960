"""HTTP transport for the WLED JSON API.

All network calls are non-blocking from the engine's point of view: the
blocking `requests` call runs in a worker thread and its outcome, success or
failure, comes back through one completion callback on the event loop.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable

import requests

from core.retry import RetryContext

_LOGGER = logging.getLogger(__name__)

# WLED API endpoints
ENDPOINTS = {
    'STATE': '/json/state',
    'FULL': '/json',
    'INFO': '/json/info',
    'PRESETS': '/presets.json',
}

DEFAULT_TIMEOUT = 5

ERROR_TRANSPORT = 'transport'
ERROR_PARSE = 'parse'

@dataclass
class Request:
    """One logical request. The path doubles as the correlation token.

    The sequence number is assigned by the owning controller when the request
    is submitted; 0 means not yet submitted.
    """
    method: str
    path: str
    body: dict | None = None
    generation: int = 0
    sequence: int = 0
    retry: RetryContext | None = None

    def resubmission(self) -> 'Request':
        """Unsubmitted copy of this request with the same payload and retry context."""
        return Request(
            method=self.method,
            path=self.path,
            body=self.body,
            generation=self.generation,
            retry=self.retry,
        )


@dataclass
class TransportResult:
    """Outcome of a request as delivered to the completion callback."""
    request: Request
    status: int | None = None
    payload: Any = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def path(self) -> str:
        return self.request.path


class Transport:
    """Issues requests to one controller and reports every completion."""

    def __init__(self, base_url: str | None, on_complete: Callable[[TransportResult], None],
                 timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None,
                 loop: asyncio.AbstractEventLoop | None = None, max_workers: int = 2):
        """Initialise the transport.

        Args:
            base_url: Controller address, e.g. 'http://192.168.1.50'
            on_complete: Single entry point receiving every TransportResult
            timeout: Per-request timeout in seconds
            session: Optional requests session (created if not provided)
            loop: Event loop to deliver completions on (running loop if omitted)
            max_workers: Worker threads for blocking HTTP calls
        """
        self.base_url = base_url.rstrip('/') if base_url else None
        self.timeout = timeout
        self.session = session or requests.Session()
        self._on_complete = on_complete
        self._loop = loop
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='wled-http')
        self._inflight: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def send(self, request: Request) -> None:
        """Queue a request. Never raises; the outcome goes to the callback."""
        if not self.base_url:
            _LOGGER.error("WLED address is not set.")
            result = TransportResult(request, error="No controller address configured",
                                     error_kind=ERROR_TRANSPORT)
            self.loop.call_soon(self._on_complete, result)
            return

        _LOGGER.debug("%s %s (seq %d)", request.method, request.path, request.sequence)
        task = self.loop.create_task(self._dispatch(request))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _dispatch(self, request: Request):
        try:
            status, payload = await self.loop.run_in_executor(self._executor, self._perform, request)
            result = TransportResult(request, status=status, payload=payload)
        except requests.exceptions.JSONDecodeError as e:
            result = TransportResult(request, status=200, error=f"Invalid JSON response: {e}",
                                     error_kind=ERROR_PARSE)
        except requests.exceptions.RequestException as e:
            status = e.response.status_code if e.response is not None else None
            result = TransportResult(request, status=status, error=str(e),
                                     error_kind=ERROR_TRANSPORT)

        self._on_complete(result)

    def _perform(self, request: Request) -> tuple[int, Any]:
        """Blocking HTTP call, run in the executor."""
        url = f"{self.base_url}{request.path}"

        if request.method == 'GET':
            response = self.session.get(url, timeout=self.timeout)
        elif request.method == 'POST':
            response = self.session.post(url, json=request.body, timeout=self.timeout)
        else:
            raise requests.exceptions.InvalidURL(f"Unsupported method {request.method}")

        response.raise_for_status()
        return response.status_code, response.json()

    async def drain(self):
        """Wait for every in-flight request to complete."""
        if self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    def close(self):
        for task in list(self._inflight):
            task.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.session.close()
