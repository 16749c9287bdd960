from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..core.timeutil import now_utc
from .dispatcher import CommandDispatcher
from .engine import MotionDecisionEngine
from .interfaces import DeviceTransport
from .models import ControllerState, SensorClass, UpdateResult
from .override import OverrideController
from .reports import Report, SensorReportStore
from .status import DeviceStatusTracker

logger = logging.getLogger(__name__)

# Changes are evaluated on the next loop tick so bursts coalesce.
COALESCE_DELAY_S = 0.001


@dataclass(frozen=True)
class ControllerConfig:
    motion_sensors: int
    light_level_sensors: int
    on_time_s: float = 120.0
    darkness_threshold: float = 8500
    status_stale_after_s: float = 5.0
    status_wait_s: float = 2.0


class PresenceController:
    def __init__(
        self,
        config: ControllerConfig,
        transport: DeviceTransport,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.config = config
        self.state = ControllerState()
        self.store = SensorReportStore(config.motion_sensors, config.light_level_sensors)
        self.tracker = DeviceStatusTracker(clock=clock)
        self.dispatcher = CommandDispatcher(transport, self.state, clock=clock)
        self.motion = MotionDecisionEngine(
            self.store,
            self.dispatcher,
            self.state,
            on_time_s=config.on_time_s,
            darkness_threshold=config.darkness_threshold,
            clock=clock,
        )
        self.override = OverrideController(
            self.tracker,
            self.dispatcher,
            self.state,
            stale_after_s=config.status_stale_after_s,
            wait_s=config.status_wait_s,
        )

        self.store.subscribe(SensorClass.MOTION, lambda _: self.motion.schedule(COALESCE_DELAY_S))
        self.store.subscribe(SensorClass.BUTTON, lambda _: self.override.schedule(COALESCE_DELAY_S))
        transport.set_status_handler(self.handle_status)

    def handle_report(self, sensor_class: SensorClass, index: int, report: Report) -> UpdateResult:
        return self.store.update(sensor_class, index, report)

    def handle_status(self, payload: dict[str, Any]) -> None:
        self.tracker.record(payload)

    def light_state(self) -> Optional[bool]:
        return self.tracker.is_on()

    def stop(self) -> None:
        self.motion.timer.cancel()
        self.override.timer.cancel()
