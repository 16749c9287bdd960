from __future__ import annotations
import logging

from .dispatcher import CommandDispatcher
from .models import ControllerState
from .status import DeviceStatusTracker
from .timers import TrackTimer

logger = logging.getLogger(__name__)


class OverrideController:
    """
    Button track. A press toggles based on what the device reports, not on
    the override flag: pressed while on turns it off and resumes automatic
    mode, pressed while off turns it on and holds it on.
    """

    def __init__(
        self,
        tracker: DeviceStatusTracker,
        dispatcher: CommandDispatcher,
        state: ControllerState,
        stale_after_s: float,
        wait_s: float,
    ) -> None:
        self._tracker = tracker
        self._dispatcher = dispatcher
        self._state = state
        self._stale_after_s = stale_after_s
        self._wait_s = wait_s
        self.timer = TrackTimer("button", self.handle_press)

    def schedule(self, delay_s: float) -> None:
        self.timer.schedule(delay_s)

    async def handle_press(self) -> None:
        status = self._tracker.current
        if status is None or self._tracker.is_stale(self._stale_after_s):
            status = await self._tracker.wait_for_status(self._wait_s)
        if status is None:
            logger.warning("Button pressed but the device status is unknown, ignoring")
            return

        if status.on_off:
            logger.info("Disabling manual override...")
            self._state.manual_override_active = False
            self._dispatcher.set_light(False)
            return

        logger.info("Enabling manual override...")
        self._state.manual_override_active = True
        self._dispatcher.set_light(True)
