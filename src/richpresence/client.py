"""Presence client: connection state machine over the local IPC link.

The client is driven by events from a connector (see
``richpresence.ipc.connector``) and by its own reconnect timer. Everything
runs on one event loop, so state is mutated without locks.

Usage::

    client = PresenceClient("123456789012345678")
    client.initialize()
    ...
    client.update_presence(Presence(name="Listening", state="Track - Artist"))
    ...
    client.shutdown()

Or as an async context manager::

    async with PresenceClient(app_id) as client:
        client.update_presence(presence)
"""

from __future__ import annotations

import itertools
import json
import logging
import os
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from richpresence.backoff import ReconnectBackoff, ReconnectScheduler
from richpresence.config import PresenceConfig
from richpresence.ipc.connector import AsyncioConnector
from richpresence.ipc.constants import CMD_DISPATCH, EVT_READY, Opcode
from richpresence.ipc.frames import FrameDecoder, FrameError, encode_frame
from richpresence.presence import Presence, build_handshake, build_set_activity

if TYPE_CHECKING:
    from richpresence.ipc.connector import Cancellable, Connector, Link

logger = logging.getLogger(__name__)


class ConnectionState(StrEnum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    HANDSHAKE_SENT = "HANDSHAKE_SENT"
    CONNECTED = "CONNECTED"


class PresenceClient:
    """Publishes presence to a local peer, reconnecting whenever the peer goes away.

    Only ``CONNECTED`` accepts presence updates; anything sent in other
    states is dropped rather than queued, since a presence from an earlier
    session means nothing to a restarted peer.
    """

    def __init__(
        self,
        client_id: str | None = None,
        *,
        config: PresenceConfig | None = None,
        connector: Connector | None = None,
        scheduler: ReconnectScheduler | None = None,
        pid: int | None = None,
    ) -> None:
        config = config or PresenceConfig()
        if client_id is not None:
            config = config.model_copy(update={"client_id": client_id})
        self._config = config
        self._connector = connector or AsyncioConnector(
            config.endpoint_base,
            timeout=config.connect_timeout_seconds,
        )
        self._scheduler = scheduler or ReconnectScheduler(
            ReconnectBackoff(config.reconnect_min_delay_ms, config.reconnect_max_delay_ms)
        )
        self._pid = pid if pid is not None else os.getpid()
        self._decoder = FrameDecoder(max_payload=config.max_frame_bytes)
        self._nonces = itertools.count(1)
        self._state = ConnectionState.DISCONNECTED
        self._link: Link | None = None
        self._attempt: Cancellable | None = None

    async def __aenter__(self) -> PresenceClient:
        self.initialize()
        return self

    async def __aexit__(self, *exc: object) -> None:
        self.shutdown()

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def client_id(self) -> str:
        return self._config.client_id

    @property
    def scheduler(self) -> ReconnectScheduler:
        return self._scheduler

    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Start connecting unless a connection is already up or in progress."""
        if self._state is not ConnectionState.DISCONNECTED:
            return
        self._connect()

    def shutdown(self) -> None:
        """Tear down the link and any pending retry. Safe to call repeatedly."""
        self._scheduler.cancel()
        if self._attempt is not None:
            self._attempt.cancel()
            self._attempt = None
        link, self._link = self._link, None
        if link is not None:
            try:
                link.close()
            except (ConnectionError, OSError):
                logger.debug("Error closing presence link during shutdown", exc_info=True)
        self._decoder.clear()
        if self._state is not ConnectionState.DISCONNECTED:
            logger.info("Presence client shut down")
        self._state = ConnectionState.DISCONNECTED

    def update_presence(self, presence: Presence) -> None:
        """Send *presence* to the peer; silently dropped unless connected."""
        if self._state is not ConnectionState.CONNECTED:
            return
        payload = build_set_activity(presence, nonce=next(self._nonces), pid=self._pid)
        self._send(Opcode.FRAME, payload)

    def clear_presence(self) -> None:
        self.update_presence(Presence())

    # ------------------------------------------------------------------
    # Connector and timer events
    # ------------------------------------------------------------------

    def on_connected(self, link: Link) -> None:
        if self._state is not ConnectionState.CONNECTING:
            logger.debug("Dropping late connection to %s in state %s", link.address, self._state)
            link.close()
            return
        self._link = link
        self._decoder.clear()
        self._state = ConnectionState.HANDSHAKE_SENT
        logger.info("Connected to presence peer at %s; sending handshake", link.address)
        self._send(Opcode.HANDSHAKE, build_handshake(self._config.client_id))

    def on_connect_failed(self) -> None:
        if self._state is not ConnectionState.CONNECTING:
            return
        self._attempt = None
        self._state = ConnectionState.DISCONNECTED
        self._schedule_reconnect()

    def on_disconnected(self) -> None:
        if self._state not in (ConnectionState.HANDSHAKE_SENT, ConnectionState.CONNECTED):
            return
        logger.info("Presence peer disconnected")
        if self._link is not None:
            self._link.close()
        self._link = None
        self._attempt = None
        self._decoder.clear()
        self._state = ConnectionState.DISCONNECTED
        self._schedule_reconnect()

    def on_data_available(self, data: bytes) -> None:
        if self._link is None:
            return
        try:
            frames = self._decoder.feed(data)
        except FrameError as exc:
            logger.warning("Malformed frame from presence peer: %s", exc)
            self._close_link()
            return

        for opcode, payload in frames:
            if self._link is None:
                break
            match opcode:
                case Opcode.FRAME:
                    self._handle_message(payload)
                case Opcode.CLOSE:
                    logger.info("Presence peer requested close")
                    self._close_link()
                case Opcode.PING:
                    self._send(Opcode.PONG, payload)
                case _:
                    logger.debug("Ignoring frame with opcode %s", opcode)

    def on_timer_fired(self) -> None:
        if self._state is not ConnectionState.DISCONNECTED:
            return
        self._connect()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _connect(self) -> None:
        self._state = ConnectionState.CONNECTING
        logger.debug("Connecting to presence peer (%s-ipc-*)", self._config.endpoint_base)
        self._attempt = self._connector.connect(self)

    def _schedule_reconnect(self) -> None:
        delay_ms = self._scheduler.schedule(self.on_timer_fired)
        logger.info("Presence peer unavailable; retrying in %d ms", delay_ms)

    def _handle_message(self, payload: bytes) -> None:
        try:
            message: Any = json.loads(payload)
        except (ValueError, RecursionError):
            logger.debug("Ignoring non-JSON frame payload (%d bytes)", len(payload))
            return
        if not isinstance(message, dict):
            return

        if self._state is ConnectionState.HANDSHAKE_SENT:
            if message.get("cmd") == CMD_DISPATCH and message.get("evt") == EVT_READY:
                self._state = ConnectionState.CONNECTED
                self._scheduler.reset()
                logger.info("Presence session ready")

    def _send(self, opcode: Opcode, payload: bytes) -> None:
        if self._link is None:
            return
        try:
            self._link.write(encode_frame(opcode, payload))
        except (ConnectionError, OSError) as exc:
            logger.info("Write to presence peer failed: %s", exc)
            self._close_link()

    def _close_link(self) -> None:
        """Close the transport; the connector then reports ``on_disconnected``.

        The link is detached right away so frames still queued behind a
        ``CLOSE`` are not acted on.
        """
        link, self._link = self._link, None
        if link is not None:
            link.close()


__all__ = ["ConnectionState", "PresenceClient"]
