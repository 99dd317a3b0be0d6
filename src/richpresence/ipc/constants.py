"""Wire protocol constants shared by the frame codec and the client."""

from __future__ import annotations

import struct
from enum import IntEnum

RPC_VERSION = 1

HEADER = struct.Struct("<II")  # opcode, payload length (uint32 little-endian)
HEADER_SIZE = HEADER.size
MAX_UINT32 = 0xFFFFFFFF

CMD_DISPATCH = "DISPATCH"
CMD_SET_ACTIVITY = "SET_ACTIVITY"
EVT_READY = "READY"


class Opcode(IntEnum):
    """Frame opcodes understood by the presence peer."""

    HANDSHAKE = 0
    FRAME = 1
    CLOSE = 2
    PING = 3
    PONG = 4


__all__ = [
    "CMD_DISPATCH",
    "CMD_SET_ACTIVITY",
    "EVT_READY",
    "HEADER",
    "HEADER_SIZE",
    "MAX_UINT32",
    "RPC_VERSION",
    "Opcode",
]
