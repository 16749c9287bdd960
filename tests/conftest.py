"""Shared fixtures for the controller tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from presence_light.domain.controller import ControllerConfig, PresenceController


T0 = datetime(2025, 1, 15, 20, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable wall clock."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeTransport:
    """Device transport that records what would have been sent."""

    def __init__(self) -> None:
        self.commands: list[tuple[str, dict[str, Any]]] = []
        self.status_requests = 0
        self.handler = None
        self.started = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.started = False

    def set_status_handler(self, handler) -> None:
        self.handler = handler

    def send_command(self, cmd: str, data: dict[str, Any]) -> None:
        self.commands.append((cmd, data))

    def request_status(self) -> None:
        self.status_requests += 1

    @property
    def turns(self) -> list[int]:
        return [data["value"] for cmd, data in self.commands if cmd == "turn"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config():
    return ControllerConfig(
        motion_sensors=2,
        light_level_sensors=2,
        on_time_s=120.0,
        darkness_threshold=8500,
        status_stale_after_s=5.0,
        status_wait_s=0.05,
    )


@pytest.fixture
def controller(config, transport, clock):
    ctrl = PresenceController(config, transport, clock=clock)
    yield ctrl
    ctrl.stop()
