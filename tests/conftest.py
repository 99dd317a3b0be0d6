"""Pytest fixtures for richpresence tests."""

from __future__ import annotations

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from richpresence.backoff import ReconnectBackoff, ReconnectScheduler
from richpresence.client import PresenceClient
from tests.helpers.fakes import FakeClock, FakeConnector

settings.register_profile(
    "ci",
    max_examples=100,
    deadline=None,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)
settings.register_profile(
    "dev",
    max_examples=20,
    deadline=500,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
def scheduler(clock: FakeClock) -> ReconnectScheduler:
    return ReconnectScheduler(ReconnectBackoff(500, 60000), call_later=clock.call_later)


@pytest.fixture
def client(connector: FakeConnector, scheduler: ReconnectScheduler) -> PresenceClient:
    """A client wired to the scripted connector and manual clock."""
    return PresenceClient("1234", connector=connector, scheduler=scheduler, pid=4242)
