from __future__ import annotations
from datetime import datetime
from typing import Any, Optional, List

from pydantic import BaseModel


class DeviceStatusOut(BaseModel):
    on_off: bool
    polled_at: datetime
    round_trip_ms: Optional[float] = None
    stale: bool
    details: dict[str, Any] = {}


class MotionReportOut(BaseModel):
    sensor_index: int
    motion: bool
    changed_at: datetime


class LightLevelReportOut(BaseModel):
    sensor_index: int
    level: float
    changed_at: datetime


class ButtonReportOut(BaseModel):
    event: str
    changed_at: datetime


class TimersOut(BaseModel):
    motion_pending: bool
    motion_remaining_s: Optional[float] = None
    button_pending: bool


class LiveResponse(BaseModel):
    app: str
    mode: str
    manual_override_active: bool
    last_turned_on_at: Optional[datetime] = None
    device: Optional[DeviceStatusOut] = None
    motion: List[Optional[MotionReportOut]]
    light_level: List[Optional[LightLevelReportOut]]
    button: Optional[ButtonReportOut] = None
    timers: TimersOut


class HealthResponse(BaseModel):
    ok: bool
    device_known: bool
    device_stale: bool
    poller_running: bool
