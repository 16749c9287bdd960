from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from ..core.timeutil import now_utc
from .models import DeviceStatus

logger = logging.getLogger(__name__)


class DeviceStatusTracker:
    """
    Latest known status of the light device.

    A single consumer may wait for the next status response through
    next_status(); the slot is fulfilled once and then cleared.
    """

    def __init__(self, clock: Callable[[], datetime] = now_utc) -> None:
        self._clock = clock
        self._current: Optional[DeviceStatus] = None
        self._last_requested_at: Optional[datetime] = None
        self._waiter: Optional[asyncio.Future] = None

    @property
    def current(self) -> Optional[DeviceStatus]:
        return self._current

    @property
    def last_requested_at(self) -> Optional[datetime]:
        return self._last_requested_at

    def is_on(self) -> Optional[bool]:
        return self._current.on_off if self._current else None

    def mark_requested(self, at: Optional[datetime] = None) -> None:
        self._last_requested_at = at or self._clock()

    def record(self, payload: dict[str, Any]) -> Optional[DeviceStatus]:
        """
        Replace the current status with a decoded devStatus payload.
        A payload without a usable onOff is not a status and leaves the
        tracker (and any waiter) untouched.
        """
        on_off = payload.get("onOff")
        if type(on_off) not in (bool, int) or on_off not in (0, 1):
            logger.debug("Ignoring device status without onOff: %s", payload)
            return None

        received_at = self._clock()
        round_trip_ms = None
        if self._last_requested_at is not None:
            round_trip_ms = (received_at - self._last_requested_at).total_seconds() * 1000.0

        details = {k: v for k, v in payload.items() if k != "onOff"}
        status = DeviceStatus(
            on_off=bool(on_off),
            polled_at=received_at,
            round_trip_ms=round_trip_ms,
            details=details,
        )
        previous = self._current
        self._current = status

        if previous is None or previous.on_off != status.on_off:
            logger.info("Device reports %s", "on" if status.on_off else "off")

        waiter, self._waiter = self._waiter, None
        if waiter is not None and not waiter.done():
            waiter.set_result(status)
        return status

    def is_stale(self, max_age_s: float, now: Optional[datetime] = None) -> bool:
        if self._current is None:
            return True
        now = now or self._clock()
        return now - self._current.polled_at > timedelta(seconds=max_age_s)

    def next_status(self) -> asyncio.Future:
        """Future resolved by the next status response; replaces any earlier waiter."""
        if self._waiter is not None and not self._waiter.done():
            self._waiter.cancel()
        self._waiter = asyncio.get_running_loop().create_future()
        return self._waiter

    async def wait_for_status(self, timeout_s: float) -> Optional[DeviceStatus]:
        waiter = self.next_status()
        try:
            return await asyncio.wait_for(waiter, timeout=timeout_s)
        except asyncio.TimeoutError:
            logger.warning("No device status received within %.1fs", timeout_s)
            return None
        finally:
            if self._waiter is waiter:
                self._waiter = None
