"""Test helpers package."""

from tests.helpers.fakes import (
    FakeAttempt,
    FakeClock,
    FakeConnector,
    FakeLink,
    FakeTimer,
    ready_frame,
)
from tests.helpers.wait import wait_until

__all__ = [
    "FakeAttempt",
    "FakeClock",
    "FakeConnector",
    "FakeLink",
    "FakeTimer",
    "ready_frame",
    "wait_until",
]
