from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from ..core.config import settings
from ..services.runtime import ControllerService
from .schemas import (
    ButtonReportOut,
    DeviceStatusOut,
    HealthResponse,
    LightLevelReportOut,
    LiveResponse,
    MotionReportOut,
    TimersOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Overridden in main through app.dependency_overrides.
def get_service() -> ControllerService:
    raise RuntimeError("Controller service dependency not configured")


@router.get("/live", response_model=LiveResponse)
async def get_live(svc: ControllerService = Depends(get_service)):
    ctrl = svc.controller
    status = ctrl.tracker.current
    button = ctrl.store.button

    return LiveResponse(
        app=settings.app_name,
        mode=settings.mode,
        manual_override_active=ctrl.state.manual_override_active,
        last_turned_on_at=ctrl.state.last_turned_on_at,
        device=DeviceStatusOut(
            on_off=status.on_off,
            polled_at=status.polled_at,
            round_trip_ms=status.round_trip_ms,
            stale=ctrl.tracker.is_stale(ctrl.config.status_stale_after_s),
            details=status.details,
        ) if status else None,
        motion=[MotionReportOut(**asdict(r)) if r else None for r in ctrl.store.motion_reports()],
        light_level=[LightLevelReportOut(**asdict(r)) if r else None for r in ctrl.store.light_level_reports()],
        button=ButtonReportOut(event=button.event.value, changed_at=button.changed_at) if button else None,
        timers=TimersOut(
            motion_pending=ctrl.motion.timer.pending,
            motion_remaining_s=ctrl.motion.timer.remaining(),
            button_pending=ctrl.override.timer.pending,
        ),
    )


@router.get("/health", response_model=HealthResponse)
async def get_health(svc: ControllerService = Depends(get_service)):
    tracker = svc.controller.tracker
    stale = tracker.is_stale(svc.controller.config.status_stale_after_s)
    return HealthResponse(
        ok=not stale and svc.poller.running,
        device_known=tracker.current is not None,
        device_stale=stale,
        poller_running=svc.poller.running,
    )
