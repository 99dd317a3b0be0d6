"""Scripted connector, link, and clock for driving PresenceClient without sockets."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from richpresence.ipc.constants import Opcode
from richpresence.ipc.frames import FrameDecoder, encode_frame

if TYPE_CHECKING:
    from collections.abc import Callable

    from richpresence.ipc.connector import ConnectionEvents


class FakeLink:
    """Records every frame the client writes."""

    def __init__(self, address: str = "/tmp/discord-ipc-0", *, fail_writes: bool = False) -> None:
        self.address = address
        self.closed = False
        self.fail_writes = fail_writes
        self.written = bytearray()

    def write(self, data: bytes) -> None:
        if self.fail_writes:
            raise BrokenPipeError("peer went away")
        self.written.extend(data)

    def close(self) -> None:
        self.closed = True

    def frames(self) -> list[tuple[Opcode | int, bytes]]:
        return [tuple(frame) for frame in FrameDecoder().feed(bytes(self.written))]

    def messages(self, opcode: Opcode = Opcode.FRAME) -> list[dict[str, Any]]:
        return [json.loads(payload) for op, payload in self.frames() if op == opcode]

    def reset(self) -> None:
        self.written.clear()


@dataclass
class FakeAttempt:
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeConnector:
    """Records connection attempts; the test decides how each one ends."""

    attempts: list[FakeAttempt] = field(default_factory=list)
    events: ConnectionEvents | None = None

    def connect(self, events: ConnectionEvents) -> FakeAttempt:
        self.events = events
        attempt = FakeAttempt()
        self.attempts.append(attempt)
        return attempt


class FakeTimer:
    def __init__(self, when: float, callback: Callable[[], None]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Manual ``call_later`` replacement; time only moves via ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def armed(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [timer for timer in self.armed if timer.when <= self.now]
        for timer in due:
            timer.cancelled = True
            timer.callback()


def ready_frame() -> bytes:
    return encode_frame(
        Opcode.FRAME,
        json.dumps({"cmd": "DISPATCH", "evt": "READY", "data": {"v": 1}}).encode(),
    )


__all__ = [
    "FakeAttempt",
    "FakeClock",
    "FakeConnector",
    "FakeLink",
    "FakeTimer",
    "ready_frame",
]
