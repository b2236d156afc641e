"""
tests/test_stream_client.py
────────────────────────────
Tests for the resilient push-channel client.
"""
import asyncio
import json

import pytest

from src.errors import DecodeError, TransportError
from src.stream.client import (
    ConnectionState,
    ResilientStreamClient,
    backoff_delay_ms,
    decode_message,
)
from tests.fakes import FakeTransport, RecordingSleep, wait_until


def _client(transport, sleep=None, **kwargs) -> ResilientStreamClient:
    return ResilientStreamClient(
        "ws://test/ws/alerts",
        transport,
        base_ms=1000,
        cap_ms=30_000,
        sleep=sleep or RecordingSleep(),
        **kwargs,
    )


class TestBackoffDelay:
    def test_doubles_from_base(self):
        assert [backoff_delay_ms(n) for n in range(5)] == [1000, 2000, 4000, 8000, 16000]

    def test_capped(self):
        assert backoff_delay_ms(5) == 30_000
        assert backoff_delay_ms(500) == 30_000

    def test_custom_base_and_cap(self):
        assert backoff_delay_ms(3, base_ms=100, cap_ms=500) == 500


class TestDecodeMessage:
    def test_json_text(self):
        assert decode_message('{"value": 1}') == {"value": 1}

    def test_utf8_bytes(self):
        assert decode_message(b'{"parameter": "PM2.5"}') == {"parameter": "PM2.5"}

    def test_invalid_json(self):
        with pytest.raises(DecodeError):
            decode_message("{oops")

    def test_invalid_encoding(self):
        with pytest.raises(DecodeError):
            decode_message(b"\xff\xfe\xfa")


class TestReconnect:
    def test_delay_after_n_failures(self):
        transport = FakeTransport(failures=6)
        sleep = RecordingSleep()
        client = _client(transport, sleep)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            await client.close()

        asyncio.run(scenario())
        assert [int(d * 1000) for d in sleep.delays] == [
            min(30_000, 1000 * 2 ** n) for n in range(1, 7)
        ]
        assert transport.attempts == 7

    def test_success_resets_attempt_counter(self):
        transport = FakeTransport(failures=3)
        sleep = RecordingSleep()
        client = _client(transport, sleep)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            assert client.attempt == 0
            transport.connections[0].inbox.put_nowait(TransportError("reset by peer"))
            await wait_until(lambda: len(transport.connections) == 2 and client.is_connected)
            await client.close()

        asyncio.run(scenario())
        # three failures, then one drop after a successful session
        assert [int(d * 1000) for d in sleep.delays] == [2000, 4000, 8000, 2000]
        assert client.last_delay_ms == 2000

    def test_state_transitions(self):
        transport = FakeTransport(failures=1)
        client = _client(transport)
        states = []
        client.on_state_change(states.append)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            await client.close()

        asyncio.run(scenario())
        assert states == [
            ConnectionState.CONNECTING,
            ConnectionState.DISCONNECTED,
            ConnectionState.CONNECTING,
            ConnectionState.CONNECTED,
            ConnectionState.CLOSED,
        ]

    def test_last_error_recorded(self):
        transport = FakeTransport(failures=1)
        client = _client(transport)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.last_error is not None)
            error = client.last_error
            await client.close()
            return error

        assert asyncio.run(scenario()) == "connection refused"


class TestLifecycle:
    def test_connect_is_idempotent(self):
        transport = FakeTransport()
        client = _client(transport)

        async def scenario():
            client.connect()
            client.connect()
            await wait_until(lambda: client.is_connected)
            client.connect()
            await asyncio.sleep(0)
            await client.close()

        asyncio.run(scenario())
        assert transport.attempts == 1

    def test_close_is_terminal(self):
        transport = FakeTransport()
        client = _client(transport)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            await client.close()
            client.connect()
            await asyncio.sleep(0)

        asyncio.run(scenario())
        assert client.state is ConnectionState.CLOSED
        assert transport.attempts == 1
        assert transport.connections[0].closed

    def test_close_cancels_pending_reconnect(self):
        transport = FakeTransport(failures=100)

        async def scenario():
            waiting = asyncio.Event()

            async def long_sleep(seconds):
                waiting.set()
                await asyncio.sleep(3600)

            client = _client(transport, long_sleep)
            client.connect()
            await waiting.wait()
            await client.close()
            return client

        client = asyncio.run(scenario())
        assert client.state is ConnectionState.CLOSED
        assert transport.attempts == 1


class TestMessages:
    def test_handler_receives_parsed_messages_only(self):
        transport = FakeTransport()
        client = _client(transport)
        received = []
        client.on_message(received.append)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            inbox = transport.connections[0].inbox
            inbox.put_nowait('{"parameter": "PM2.5", "value": 300}')
            inbox.put_nowait(b"\xff\xfe")
            inbox.put_nowait("not json")
            inbox.put_nowait('{"parameter": "NO2", "value": 10}')
            await wait_until(lambda: len(received) == 2)
            connected = client.is_connected
            await client.close()
            return connected

        assert asyncio.run(scenario()) is True
        assert [m["parameter"] for m in received] == ["PM2.5", "NO2"]
        assert transport.attempts == 1

    def test_failing_handler_does_not_disconnect(self):
        transport = FakeTransport()
        client = _client(transport)
        received = []

        def broken(message):
            raise RuntimeError("boom")

        client.on_message(broken)
        client.on_message(received.append)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            transport.connections[0].inbox.put_nowait('{"n": 1}')
            await wait_until(lambda: received)
            connected = client.is_connected
            await client.close()
            return connected

        assert asyncio.run(scenario()) is True
        assert received == [{"n": 1}]

    def test_unsubscribe(self):
        transport = FakeTransport()
        client = _client(transport)
        received = []
        unsubscribe = client.on_message(received.append)
        unsubscribe()

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            transport.connections[0].inbox.put_nowait('{"n": 1}')
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            await client.close()

        asyncio.run(scenario())
        assert received == []


class TestSend:
    def test_dropped_when_not_connected(self):
        client = _client(FakeTransport())
        assert asyncio.run(client.send({"ping": 1})) is False

    def test_sent_as_json_when_connected(self):
        transport = FakeTransport()
        client = _client(transport)

        async def scenario():
            client.connect()
            await wait_until(lambda: client.is_connected)
            ok = await client.send({"ping": 1})
            await client.close()
            return ok

        assert asyncio.run(scenario()) is True
        assert json.loads(transport.connections[0].sent[0]) == {"ping": 1}
