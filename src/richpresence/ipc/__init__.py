"""Frame codec, endpoint discovery, and transport layer for the presence IPC link."""

from __future__ import annotations

from richpresence.ipc.connector import AsyncioConnector, StreamLink
from richpresence.ipc.constants import Opcode
from richpresence.ipc.discovery import LocatedEndpoint, candidate_endpoints, locate_and_connect
from richpresence.ipc.frames import Frame, FrameDecoder, FrameError, encode_frame

__all__ = [
    "AsyncioConnector",
    "Frame",
    "FrameDecoder",
    "FrameError",
    "LocatedEndpoint",
    "Opcode",
    "StreamLink",
    "candidate_endpoints",
    "encode_frame",
    "locate_and_connect",
]
