"""asyncio binding between local IPC streams and the presence state machine.

The state machine never touches sockets directly. It asks a connector to
start an attempt and then receives plain callbacks: ``on_connected``,
``on_connect_failed``, ``on_data_available`` and ``on_disconnected``.
Tests swap in a scripted connector; production uses ``AsyncioConnector``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from richpresence.ipc.discovery import locate_and_connect
from richpresence.limits import CONNECT_TIMEOUT, READ_CHUNK_BYTES

if TYPE_CHECKING:
    from richpresence.ipc.discovery import EndpointTransport, LocatedEndpoint

logger = logging.getLogger(__name__)


class Link(Protocol):
    """Outbound half of an established connection."""

    address: str

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...


class ConnectionEvents(Protocol):
    """Callbacks a connector delivers, in order, for one connection attempt."""

    def on_connected(self, link: Link) -> None: ...

    def on_connect_failed(self) -> None: ...

    def on_data_available(self, data: bytes) -> None: ...

    def on_disconnected(self) -> None: ...


class Cancellable(Protocol):
    def cancel(self) -> object: ...


class Connector(Protocol):
    def connect(self, events: ConnectionEvents) -> Cancellable: ...


class StreamLink:
    """``Link`` over an asyncio stream writer."""

    def __init__(self, address: str, writer: asyncio.StreamWriter) -> None:
        self.address = address
        self._writer = writer

    @property
    def closed(self) -> bool:
        return self._writer.is_closing()

    def write(self, data: bytes) -> None:
        if self._writer.is_closing():
            msg = f"Link to {self.address} is closed"
            raise ConnectionError(msg)
        self._writer.write(data)

    def close(self) -> None:
        if not self._writer.is_closing():
            self._writer.close()


class AsyncioConnector:
    """Runs one task per attempt: locate, connect, then pump reads into *events*.

    ``connect`` must be called with an event loop running. The returned task
    is cancelled by the client on shutdown; a cancelled attempt delivers no
    further callbacks.
    """

    def __init__(
        self,
        endpoint_base: str,
        *,
        transport: EndpointTransport | None = None,
        timeout: float = CONNECT_TIMEOUT,
        read_size: int = READ_CHUNK_BYTES,
    ) -> None:
        self._endpoint_base = endpoint_base
        self._transport = transport
        self._timeout = timeout
        self._read_size = read_size

    def connect(self, events: ConnectionEvents) -> asyncio.Task[None]:
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(events), name=f"presence-ipc-{self._endpoint_base}")
        task.add_done_callback(_log_task_failure)
        return task

    async def _run(self, events: ConnectionEvents) -> None:
        located = await locate_and_connect(
            self._endpoint_base,
            transport=self._transport,
            timeout=self._timeout,
        )
        if located is None:
            events.on_connect_failed()
            return

        link = StreamLink(located.address, located.writer)
        try:
            events.on_connected(link)
            await self._pump(located, events)
        except asyncio.CancelledError:
            link.close()
            raise
        except Exception:
            logger.exception("Presence link %s failed unexpectedly", located.address)
        link.close()
        events.on_disconnected()

    async def _pump(self, located: LocatedEndpoint, events: ConnectionEvents) -> None:
        reader = located.reader
        while True:
            try:
                data = await reader.read(self._read_size)
            except (ConnectionError, OSError) as exc:
                logger.info("Presence link %s failed: %s", located.address, exc)
                return
            if not data:
                logger.info("Presence peer at %s closed the connection", located.address)
                return
            events.on_data_available(data)


def _log_task_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Presence connection task crashed", exc_info=exc)


__all__ = [
    "AsyncioConnector",
    "Cancellable",
    "ConnectionEvents",
    "Connector",
    "Link",
    "StreamLink",
]
