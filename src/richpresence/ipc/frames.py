"""Length-prefixed frame codec for the presence IPC stream.

Wire layout: ``opcode:uint32 LE | length:uint32 LE | payload[length]``.
The stream is reliable and ordered, so there is no escaping or checksum;
a lost byte means a lost connection, never a corrupt frame.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from richpresence.ipc.constants import HEADER, HEADER_SIZE, MAX_UINT32, Opcode
from richpresence.limits import MAX_FRAME_BYTES

logger = logging.getLogger(__name__)


class FrameError(ConnectionError):
    """Raised when the peer sends a frame the decoder refuses to buffer."""


class Frame(NamedTuple):
    """A single decoded frame.

    ``opcode`` is an ``Opcode`` member when known, else the raw integer.
    """

    opcode: Opcode | int
    payload: bytes


def _coerce_opcode(value: int) -> Opcode | int:
    try:
        return Opcode(value)
    except ValueError:
        return value


def encode_frame(opcode: Opcode | int, payload: bytes = b"") -> bytes:
    """Return the header-prefixed wire form of *payload*."""
    if len(payload) > MAX_UINT32:
        msg = f"Frame payload too large to encode: {len(payload)} bytes"
        raise ValueError(msg)
    return HEADER.pack(int(opcode), len(payload)) + payload


class FrameDecoder:
    """Incremental decoder over an append-only receive buffer.

    Reads may deliver a frame in arbitrary pieces, or several frames at once;
    ``feed`` returns every frame completed so far and keeps the partial tail
    buffered for the next call.
    """

    def __init__(self, max_payload: int = MAX_FRAME_BYTES) -> None:
        self._buffer = bytearray()
        self._max_payload = max_payload

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def pending(self) -> bytes:
        """Bytes buffered but not yet part of a complete frame."""
        return bytes(self._buffer)

    @property
    def max_payload(self) -> int:
        return self._max_payload

    def clear(self) -> None:
        self._buffer.clear()

    def feed(self, data: bytes) -> list[Frame]:
        """Append *data* and extract all complete frames in arrival order.

        Raises:
            FrameError: If a header announces a payload above ``max_payload``.
                The buffer is discarded since the stream cannot be resynced.
        """
        if data:
            self._buffer.extend(data)
        return self.decode()

    def decode(self) -> list[Frame]:
        """Extract complete frames from what is already buffered."""
        frames: list[Frame] = []
        while len(self._buffer) >= HEADER_SIZE:
            opcode, length = HEADER.unpack_from(self._buffer)
            if length > self._max_payload:
                self._buffer.clear()
                msg = f"Peer frame length {length} exceeds limit of {self._max_payload} bytes"
                raise FrameError(msg)

            end = HEADER_SIZE + length
            if len(self._buffer) < end:
                break  # partial frame; wait for more bytes

            payload = bytes(self._buffer[HEADER_SIZE:end])
            del self._buffer[:end]
            frames.append(Frame(_coerce_opcode(opcode), payload))

        if frames:
            logger.debug("Decoded %d frame(s), %d byte(s) pending", len(frames), len(self._buffer))
        return frames


__all__ = ["Frame", "FrameDecoder", "FrameError", "encode_frame"]
