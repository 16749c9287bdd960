"""Decoding of Hue CLIP v2 resources into domain reports.

A resource that lacks the expected nested report, or carries a malformed one,
decodes to None: the caller treats it as "no report".
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from ..core.timeutil import ensure_utc
from ..domain.models import ButtonEvent, ButtonReport, LightLevelReport, MotionReport

logger = logging.getLogger(__name__)


class HueMotionReport(BaseModel):
    changed: datetime
    motion: bool


class HueLightLevelReport(BaseModel):
    changed: datetime
    light_level: float


class HueButtonReport(BaseModel):
    updated: datetime
    event: ButtonEvent


def _nested(resource: dict[str, Any], *path: str) -> Optional[Any]:
    node: Any = resource
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def parse_motion(resource: dict[str, Any], index: int) -> Optional[MotionReport]:
    raw = _nested(resource, "motion", "motion_report")
    if raw is None:
        return None
    try:
        r = HueMotionReport.model_validate(raw)
    except ValidationError as e:
        logger.debug("Skipping malformed motion report %s: %s", raw, e)
        return None
    return MotionReport(sensor_index=index, motion=r.motion, changed_at=ensure_utc(r.changed))


def parse_light_level(resource: dict[str, Any], index: int) -> Optional[LightLevelReport]:
    raw = _nested(resource, "light", "light_level_report")
    if raw is None:
        return None
    try:
        r = HueLightLevelReport.model_validate(raw)
    except ValidationError as e:
        logger.debug("Skipping malformed light level report %s: %s", raw, e)
        return None
    return LightLevelReport(sensor_index=index, level=r.light_level, changed_at=ensure_utc(r.changed))


def parse_button(resource: dict[str, Any]) -> Optional[ButtonReport]:
    raw = _nested(resource, "button", "button_report")
    if raw is None:
        return None
    try:
        r = HueButtonReport.model_validate(raw)
    except ValidationError as e:
        logger.debug("Skipping malformed button report %s: %s", raw, e)
        return None
    return ButtonReport(event=r.event, changed_at=ensure_utc(r.updated))


def iter_updates(message: Any):
    """Yield the resources of every "update" event in one event stream message."""
    if not isinstance(message, list):
        return
    for event in message:
        if not isinstance(event, dict) or event.get("type") != "update":
            continue
        for resource in event.get("data") or []:
            if isinstance(resource, dict) and "id" in resource:
                yield resource
