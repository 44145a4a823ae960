"""Tests for the HTTP transport in core/transport.py

The requests session is mocked; no network calls are made.
"""

import asyncio
from unittest.mock import MagicMock

import requests
from core.transport import ERROR_PARSE, ERROR_TRANSPORT, Request, Transport


def _response(payload=None, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    return response


def _send(session, request, base_url='http://wled.local'):
    """Send one request on a fresh loop and return the delivered results."""
    results = []

    async def main():
        transport = Transport(base_url, results.append, session=session)
        transport.send(request)
        await transport.drain()
        await asyncio.sleep(0)
        transport.close()

    asyncio.run(main())
    return results


class TestSend:
    """Tests for Transport.send."""

    def test_get_success(self):
        session = MagicMock()
        session.get.return_value = _response({'on': True})

        results = _send(session, Request('GET', '/json/state'))

        session.get.assert_called_once_with('http://wled.local/json/state', timeout=5)
        assert len(results) == 1
        assert results[0].ok
        assert results[0].payload == {'on': True}
        assert results[0].path == '/json/state'

    def test_post_sends_json_body(self):
        session = MagicMock()
        session.post.return_value = _response({'on': False})
        body = {'seg': [{'id': 0, 'on': False}], 'v': True, 'tt': 7}

        results = _send(session, Request('POST', '/json/state', body=body))

        session.post.assert_called_once_with('http://wled.local/json/state', json=body, timeout=5)
        assert results[0].ok

    def test_connection_error_is_transport_error(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError('refused')

        results = _send(session, Request('GET', '/json'))

        assert not results[0].ok
        assert results[0].error_kind == ERROR_TRANSPORT
        assert 'refused' in results[0].error

    def test_http_error_keeps_status(self):
        response = _response(status=500)
        response.raise_for_status.side_effect = requests.exceptions.HTTPError('500 Server Error',
                                                                              response=response)
        session = MagicMock()
        session.get.return_value = response

        results = _send(session, Request('GET', '/json/info'))

        assert results[0].error_kind == ERROR_TRANSPORT
        assert results[0].status == 500

    def test_invalid_json_is_parse_error(self):
        response = _response()
        response.json.side_effect = requests.exceptions.JSONDecodeError('Expecting value', '<html>', 0)
        session = MagicMock()
        session.get.return_value = response

        results = _send(session, Request('GET', '/presets.json'))

        assert results[0].error_kind == ERROR_PARSE

    def test_missing_address_reports_failure(self):
        session = MagicMock()

        results = _send(session, Request('GET', '/json'), base_url=None)

        session.get.assert_not_called()
        assert results[0].error_kind == ERROR_TRANSPORT


class TestRequest:
    """Tests for Request bookkeeping."""

    def test_new_request_is_unsubmitted(self):
        assert Request('GET', '/json/state').sequence == 0

    def test_resubmission_copies_payload(self):
        original = Request('POST', '/json/state', body={'ps': 3}, generation=2)
        copy = original.resubmission()
        assert copy.body == {'ps': 3}
        assert copy.generation == 2
        assert copy is not original
        assert copy.sequence == 0
