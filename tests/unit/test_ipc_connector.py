from __future__ import annotations

import asyncio
import sys

import pytest

from richpresence.ipc.connector import AsyncioConnector, StreamLink
from richpresence.ipc.transports import NamedPipeTransport, UnixSocketTransport

pytestmark = pytest.mark.unit


class _RecordingEvents:
    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []
        self.done = asyncio.Event()

    def on_connected(self, link) -> None:
        self.calls.append(("connected", link.address))

    def on_connect_failed(self) -> None:
        self.calls.append(("failed", None))
        self.done.set()

    def on_data_available(self, data: bytes) -> None:
        self.calls.append(("data", data))

    def on_disconnected(self) -> None:
        self.calls.append(("disconnected", None))
        self.done.set()


class _MissingTransport:
    async def connect(self, address: str):
        raise FileNotFoundError(address)


class _PipeTransport:
    """Hands out an in-memory reader fed by the test."""

    def __init__(self) -> None:
        self.reader = asyncio.StreamReader()
        self.writer = _NullWriter()

    async def connect(self, address: str):
        return self.reader, self.writer


class _NullWriter:
    def __init__(self) -> None:
        self.closing = False
        self.data = bytearray()

    def is_closing(self) -> bool:
        return self.closing

    def write(self, data: bytes) -> None:
        self.data.extend(data)

    def close(self) -> None:
        self.closing = True


async def test_no_endpoint_reports_connect_failed() -> None:
    events = _RecordingEvents()
    connector = AsyncioConnector("rp-none", transport=_MissingTransport())

    connector.connect(events)
    await asyncio.wait_for(events.done.wait(), timeout=2.0)

    assert events.calls == [("failed", None)]


async def test_reads_are_pumped_until_eof() -> None:
    events = _RecordingEvents()
    transport = _PipeTransport()
    connector = AsyncioConnector("rp-pipe", transport=transport)

    connector.connect(events)
    transport.reader.feed_data(b"abc")
    transport.reader.feed_eof()
    await asyncio.wait_for(events.done.wait(), timeout=2.0)

    assert events.calls[0][0] == "connected"
    assert ("data", b"abc") in events.calls
    assert events.calls[-1] == ("disconnected", None)
    assert transport.writer.closing


async def test_cancelled_attempt_delivers_no_disconnect() -> None:
    events = _RecordingEvents()
    transport = _PipeTransport()
    connector = AsyncioConnector("rp-pipe", transport=transport)

    task = connector.connect(events)
    while not events.calls:
        await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert ("disconnected", None) not in events.calls
    assert transport.writer.closing


class _ExplodingEvents(_RecordingEvents):
    def on_data_available(self, data: bytes) -> None:
        super().on_data_available(data)
        raise RuntimeError("handler bug")


async def test_handler_error_still_closes_and_disconnects(
    caplog: pytest.LogCaptureFixture,
) -> None:
    events = _ExplodingEvents()
    transport = _PipeTransport()
    connector = AsyncioConnector("rp-pipe", transport=transport)

    task = connector.connect(events)
    transport.reader.feed_data(b"abc")
    await asyncio.wait_for(events.done.wait(), timeout=2.0)
    await task

    assert events.calls[-1] == ("disconnected", None)
    assert transport.writer.closing
    assert "failed unexpectedly" in caplog.text


class _BrokenFailureEvents(_RecordingEvents):
    def on_connect_failed(self) -> None:
        super().on_connect_failed()
        raise RuntimeError("handler bug")


async def test_crashed_attempt_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    events = _BrokenFailureEvents()
    connector = AsyncioConnector("rp-none", transport=_MissingTransport())

    task = connector.connect(events)
    with pytest.raises(RuntimeError):
        await task
    await asyncio.sleep(0)

    assert "Presence connection task crashed" in caplog.text


def test_stream_link_refuses_writes_after_close() -> None:
    writer = _NullWriter()
    link = StreamLink("/tmp/x", writer)  # type: ignore[arg-type]

    link.write(b"1")
    link.close()

    assert link.closed
    with pytest.raises(ConnectionError):
        link.write(b"2")
    assert writer.data == b"1"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX only")
def test_named_pipes_rejected_off_windows() -> None:
    with pytest.raises(NotImplementedError):
        NamedPipeTransport()
    UnixSocketTransport()
