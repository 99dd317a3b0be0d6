"""Numeric limits and timeouts - no circular dependencies."""

from __future__ import annotations

CONNECT_TIMEOUT = 0.1
"""Upper bound in seconds for a single candidate endpoint connection attempt."""

RECONNECT_MIN_DELAY_MS = 500
RECONNECT_MAX_DELAY_MS = 60000

MAX_FRAME_BYTES = 64 * 1024
READ_CHUNK_BYTES = 64 * 1024

ENDPOINT_SLOTS = 10
