from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class SensorClass(str, Enum):
    MOTION = "motion"
    LIGHT_LEVEL = "light_level"
    BUTTON = "button"


class UpdateResult(Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class ButtonEvent(str, Enum):
    INITIAL_PRESS = "initial_press"
    REPEAT = "repeat"
    SHORT_RELEASE = "short_release"
    LONG_PRESS = "long_press"
    LONG_RELEASE = "long_release"
    DOUBLE_SHORT_RELEASE = "double_short_release"


@dataclass(frozen=True)
class MotionReport:
    sensor_index: int
    motion: bool
    changed_at: datetime


@dataclass(frozen=True)
class LightLevelReport:
    sensor_index: int
    level: float  # lower = darker
    changed_at: datetime


@dataclass(frozen=True)
class ButtonReport:
    event: ButtonEvent
    changed_at: datetime


@dataclass(frozen=True)
class DeviceStatus:
    on_off: bool
    polled_at: datetime
    round_trip_ms: Optional[float] = None
    details: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass
class ControllerState:
    manual_override_active: bool = False
    last_turned_on_at: Optional[datetime] = None
