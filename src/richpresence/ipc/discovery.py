"""Endpoint discovery for a running presence peer.

The peer does not announce which slot it listens on, so the client walks a
fixed, numbered range of well-known names and keeps the first that answers.
"""

from __future__ import annotations

import asyncio
import logging
import platform
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from richpresence.limits import CONNECT_TIMEOUT, ENDPOINT_SLOTS
from richpresence.paths import PIPE_NAMESPACE, get_socket_dirs

if TYPE_CHECKING:
    from collections.abc import Mapping

    from richpresence.ipc.transports import StreamPair

logger = logging.getLogger(__name__)


class EndpointTransport(Protocol):
    async def connect(self, address: str) -> StreamPair: ...


@dataclass(frozen=True)
class LocatedEndpoint:
    """An open stream to the peer and the address it was found at.

    Attributes:
        address: Socket path or pipe name that accepted the connection.
        reader: Stream reader for inbound frames.
        writer: Stream writer for outbound frames.
    """

    address: str
    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter


def candidate_endpoints(
    base: str,
    *,
    system: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Return the ordered list of addresses the peer may be listening on."""
    system = system or platform.system()
    if system == "Windows":
        return [f"{PIPE_NAMESPACE}{base}-ipc-{slot}" for slot in range(ENDPOINT_SLOTS)]

    return [
        f"{directory.rstrip('/')}/{base}-ipc-{slot}"
        for directory in get_socket_dirs(environ)
        for slot in range(ENDPOINT_SLOTS)
    ]


async def locate_and_connect(
    base: str,
    *,
    transport: EndpointTransport | None = None,
    timeout: float = CONNECT_TIMEOUT,
    candidates: list[str] | None = None,
) -> LocatedEndpoint | None:
    """Connect to the first candidate endpoint that accepts within *timeout*.

    Returns ``None`` when every candidate fails; that is the normal outcome
    while the peer is not running, and callers retry later.
    """
    if transport is None:
        from richpresence.ipc.transports import DefaultTransport

        transport = DefaultTransport()

    addresses = candidates if candidates is not None else candidate_endpoints(base)
    for address in addresses:
        try:
            reader, writer = await asyncio.wait_for(transport.connect(address), timeout=timeout)
        except (OSError, TimeoutError) as exc:
            logger.debug("Endpoint %s unavailable: %s", address, exc)
            continue
        logger.info("Presence peer found at %s", address)
        return LocatedEndpoint(address=address, reader=reader, writer=writer)

    logger.debug("No presence peer among %d candidate endpoint(s)", len(addresses))
    return None


__all__ = [
    "EndpointTransport",
    "LocatedEndpoint",
    "candidate_endpoints",
    "locate_and_connect",
]
