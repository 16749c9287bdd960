from __future__ import annotations
import asyncio
import logging
from typing import Optional

from ..domain.interfaces import DeviceTransport
from ..domain.status import DeviceStatusTracker

logger = logging.getLogger(__name__)


class StatusPoller:
    """Requests the device status on a fixed period; responses reach the tracker via the transport."""

    def __init__(
        self,
        transport: DeviceTransport,
        tracker: DeviceStatusTracker,
        period_s: float,
    ) -> None:
        self._transport = transport
        self._tracker = tracker
        self._period_s = period_s

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._stop.clear()
        self._task = asyncio.create_task(self._run(), name="status_poll_loop")

    async def stop(self) -> None:
        self._stop.set()
        if self._task:
            await self._task
            self._task = None

    def poll_once(self) -> None:
        self._transport.request_status()
        self._tracker.mark_requested()

    async def _run(self) -> None:
        logger.info("Status poll loop started (period=%.3fs)", self._period_s)

        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.exception("Status poll error: %s", e)

            # sleep with cancellation awareness
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._period_s)
            except asyncio.TimeoutError:
                pass

        logger.info("Status poll loop stopped")
