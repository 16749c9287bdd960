from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable, Optional

from ..core.timeutil import now_utc
from .interfaces import DeviceTransport
from .models import ControllerState

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Every on/off command leaves the process through set_light()."""

    def __init__(
        self,
        transport: DeviceTransport,
        state: ControllerState,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._transport = transport
        self._state = state
        self._clock = clock

    def set_light(self, on: bool) -> Optional[float]:
        """
        Send one turn command. Not deduplicated: repeated calls send
        repeated commands.

        Returns how long the light had been on (seconds) when turning it off
        after a recorded "on", otherwise None.
        """
        on_for: Optional[float] = None
        now = self._clock()

        if on:
            logger.info("Turning light on...")
            self._state.last_turned_on_at = now
        elif self._state.last_turned_on_at is not None:
            on_for = (now - self._state.last_turned_on_at).total_seconds()
            logger.info("Turning light off after %ds...", round(on_for))
            self._state.last_turned_on_at = None
        else:
            logger.debug("Turning light off...")

        self._transport.send_command("turn", {"value": 1 if on else 0})
        return on_for
