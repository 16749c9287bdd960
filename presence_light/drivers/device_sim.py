from __future__ import annotations
import asyncio
import logging
from typing import Any, Optional

from ..domain.interfaces import StatusHandler

logger = logging.getLogger(__name__)


class SimulatedLightDevice:
    """In-memory light that speaks the same command set as the Govee transport."""

    def __init__(self, brightness: int = 100) -> None:
        self._on = False
        self._brightness = brightness
        self._handler: Optional[StatusHandler] = None
        self.commands: list[tuple[str, dict[str, Any]]] = []

    @property
    def on(self) -> bool:
        return self._on

    def set_status_handler(self, handler: StatusHandler) -> None:
        self._handler = handler

    async def start(self) -> None:
        logger.info("Using simulated light device")

    async def stop(self) -> None:
        pass

    def send_command(self, cmd: str, data: dict[str, Any]) -> None:
        self.commands.append((cmd, data))
        if cmd == "turn":
            self._on = bool(data.get("value"))
            logger.info("LIGHT set_state=%s", self._on)
        elif cmd == "devStatus":
            self._reply()

    def request_status(self) -> None:
        self.send_command("devStatus", {})

    def _reply(self) -> None:
        if self._handler is None:
            return
        payload = {"onOff": 1 if self._on else 0, "brightness": self._brightness}
        # answers arrive asynchronously, like a datagram would
        asyncio.get_running_loop().call_soon(self._handler, payload)
