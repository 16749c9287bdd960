from __future__ import annotations
from typing import Any, AsyncIterator, Callable, Protocol, runtime_checkable

StatusHandler = Callable[[dict[str, Any]], None]


@runtime_checkable
class SensorEventSource(Protocol):
    def events(self) -> AsyncIterator[dict[str, Any]]:
        ...


@runtime_checkable
class SensorSnapshotFetcher(Protocol):
    async def fetch_resource(self, kind: str, resource_id: str) -> dict[str, Any]:
        ...


@runtime_checkable
class DeviceTransport(Protocol):
    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...

    def set_status_handler(self, handler: StatusHandler) -> None:
        ...

    def send_command(self, cmd: str, data: dict[str, Any]) -> None:
        ...

    def request_status(self) -> None:
        ...
