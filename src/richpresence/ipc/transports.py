"""Local IPC transports for reaching the presence peer.

Provides Unix domain sockets on POSIX and named pipes on Windows.
``DefaultTransport`` is automatically set to the right choice for the current platform.
"""

from __future__ import annotations

import asyncio
import logging
import platform
import sys
from typing import TypeAlias

from richpresence.limits import READ_CHUNK_BYTES

logger = logging.getLogger(__name__)

StreamPair: TypeAlias = tuple[asyncio.StreamReader, asyncio.StreamWriter]


# ---------------------------------------------------------------------------
# Unix socket transport
# ---------------------------------------------------------------------------


class UnixSocketTransport:
    """IPC transport over Unix domain sockets.

    Only available on macOS and Linux.  On Windows this class raises
    ``NotImplementedError`` at construction time.
    """

    def __init__(self) -> None:
        if platform.system() == "Windows":
            msg = "Unix sockets are not supported on Windows"
            raise NotImplementedError(msg)

    async def connect(self, address: str) -> StreamPair:
        """Open a connection to the Unix socket at *address*."""
        reader, writer = await asyncio.open_unix_connection(address, limit=READ_CHUNK_BYTES)
        logger.debug("Connected to Unix socket at %s", address)
        return reader, writer


# ---------------------------------------------------------------------------
# Named pipe transport
# ---------------------------------------------------------------------------


class NamedPipeTransport:
    """IPC transport over Windows named pipes.

    Requires the proactor event loop, which is the asyncio default on Windows.
    """

    def __init__(self) -> None:
        if platform.system() != "Windows":
            msg = "Named pipes are only supported on Windows"
            raise NotImplementedError(msg)

    async def connect(self, address: str) -> StreamPair:
        """Open the named pipe at *address* and wrap it in asyncio streams."""
        loop = asyncio.get_running_loop()
        create_pipe_connection = getattr(loop, "create_pipe_connection", None)
        if create_pipe_connection is None:
            msg = "Running event loop cannot open named pipes; use the proactor loop"
            raise ConnectionError(msg)

        reader = asyncio.StreamReader(limit=READ_CHUNK_BYTES, loop=loop)
        protocol = asyncio.StreamReaderProtocol(reader, loop=loop)
        transport, _ = await create_pipe_connection(lambda: protocol, address)
        writer = asyncio.StreamWriter(transport, protocol, reader, loop)
        logger.debug("Connected to named pipe at %s", address)
        return reader, writer


# ---------------------------------------------------------------------------
# Default transport selection
# ---------------------------------------------------------------------------

if sys.platform == "win32":
    DefaultTransport = NamedPipeTransport
else:
    DefaultTransport = UnixSocketTransport

__all__ = [
    "DefaultTransport",
    "NamedPipeTransport",
    "StreamPair",
    "UnixSocketTransport",
]
