from __future__ import annotations
import logging
from datetime import datetime
from typing import Callable

from ..core.timeutil import EPOCH, now_utc
from .dispatcher import CommandDispatcher
from .models import ControllerState
from .reports import SensorReportStore
from .timers import TrackTimer

logger = logging.getLogger(__name__)


class MotionDecisionEngine:
    """
    Motion track.

    Every evaluation either dispatches, re-arms its own timer, or both
    (except the "motion but bright enough" case), so a silent sensor
    cannot leave the light on.
    """

    def __init__(
        self,
        store: SensorReportStore,
        dispatcher: CommandDispatcher,
        state: ControllerState,
        on_time_s: float,
        darkness_threshold: float,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._state = state
        self._on_time_s = on_time_s
        self._darkness_threshold = darkness_threshold
        self._clock = clock
        self.timer = TrackTimer("motion", self.evaluate)

    @property
    def cool_down_s(self) -> float:
        return self._on_time_s * 2

    def schedule(self, delay_s: float) -> None:
        self.timer.schedule(delay_s)

    def evaluate(self) -> None:
        slots = self._store.motion_reports()
        reports = [r for r in slots if r is not None]
        if not reports:
            return

        with_motion = next((r for r in reports if r.motion), None)
        if with_motion is not None:
            light = self._store.light_level(with_motion.sensor_index)
            if light is not None and light.level <= self._darkness_threshold:
                self._dispatcher.set_light(True)
                self.schedule(self.cool_down_s)
            else:
                logger.debug(
                    "Motion on sensor %d but light level %s is above %s",
                    with_motion.sensor_index,
                    light.level if light else None,
                    self._darkness_threshold,
                )
            return

        latest_changed = max(r.changed_at if r else EPOCH for r in slots)
        elapsed = (self._clock() - latest_changed).total_seconds()

        if elapsed < self._on_time_s:
            self.schedule(self._on_time_s - elapsed)
            return

        if not self._state.manual_override_active:
            self._dispatcher.set_light(False)
        else:
            logger.debug("No motion for %ds, manual override keeps the light on", round(elapsed))

        self.schedule(self.cool_down_s)
