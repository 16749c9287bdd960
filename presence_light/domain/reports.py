from __future__ import annotations
import logging
from dataclasses import replace
from datetime import timedelta
from typing import Callable, Optional, Union

from .models import (
    ButtonEvent,
    ButtonReport,
    LightLevelReport,
    MotionReport,
    SensorClass,
    UpdateResult,
)

logger = logging.getLogger(__name__)

# Hue motion sensors report the end of motion about this much too late.
MOTION_END_SKEW = timedelta(seconds=10)

Report = Union[MotionReport, LightLevelReport, ButtonReport]
ChangeListener = Callable[[Report], None]

REPORT_TYPES = {
    SensorClass.MOTION: MotionReport,
    SensorClass.LIGHT_LEVEL: LightLevelReport,
    SensorClass.BUTTON: ButtonReport,
}


class SensorReportStore:
    def __init__(self, motion_sensors: int, light_level_sensors: int) -> None:
        self._motion: list[Optional[MotionReport]] = [None] * motion_sensors
        self._light_level: list[Optional[LightLevelReport]] = [None] * light_level_sensors
        self._button: Optional[ButtonReport] = None
        self._listeners: dict[SensorClass, list[ChangeListener]] = {c: [] for c in SensorClass}

    def subscribe(self, sensor_class: SensorClass, listener: ChangeListener) -> None:
        self._listeners[sensor_class].append(listener)

    def motion_reports(self) -> list[Optional[MotionReport]]:
        return list(self._motion)

    def light_level_reports(self) -> list[Optional[LightLevelReport]]:
        return list(self._light_level)

    def light_level(self, index: int) -> Optional[LightLevelReport]:
        if 0 <= index < len(self._light_level):
            return self._light_level[index]
        return None

    @property
    def button(self) -> Optional[ButtonReport]:
        return self._button

    def update(self, sensor_class: SensorClass, index: int, report: Report) -> UpdateResult:
        if not isinstance(report, REPORT_TYPES[sensor_class]):
            raise TypeError(f"{type(report).__name__} is not a {sensor_class.value} report")

        if sensor_class is SensorClass.MOTION:
            if not report.motion:
                report = replace(report, changed_at=report.changed_at - MOTION_END_SKEW)
            changed = self._store(self._motion, index, report)
        elif sensor_class is SensorClass.LIGHT_LEVEL:
            changed = self._store(self._light_level, index, report)
        else:
            if report.event is not ButtonEvent.INITIAL_PRESS or report == self._button:
                return UpdateResult.UNCHANGED
            self._button = report
            changed = True

        if not changed:
            return UpdateResult.UNCHANGED

        logger.info("%s %d: %s", sensor_class.value, index, report)
        for listener in self._listeners[sensor_class]:
            listener(report)
        return UpdateResult.CHANGED

    @staticmethod
    def _store(slots: list, index: int, report: Report) -> bool:
        if not 0 <= index < len(slots):
            raise IndexError(f"No sensor configured at index {index}")
        if slots[index] == report:
            return False
        slots[index] = report
        return True
