from __future__ import annotations
import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class TrackTimer:
    """
    One cancellable re-evaluation per reasoning track.

    schedule() always cancels the outstanding handle (and a coroutine the
    previous firing may still be running) before arming the new one, so a
    track never has more than one future firing.
    """

    def __init__(self, name: str, callback: Callable[[], Any]) -> None:
        self.name = name
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._delay: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def delay(self) -> Optional[float]:
        """Delay (seconds) the pending firing was armed with."""
        return self._delay if self._handle is not None else None

    def remaining(self) -> Optional[float]:
        if self._handle is None:
            return None
        return max(0.0, self._handle.when() - asyncio.get_running_loop().time())

    def schedule(self, delay_s: float) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._delay = max(0.0, delay_s)
        self._handle = loop.call_later(self._delay, self._fire)
        logger.debug("Track %s re-evaluation in %.3fs", self.name, self._delay)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _fire(self) -> None:
        self._handle = None
        try:
            result = self._callback()
        except Exception:
            logger.exception("Track %s evaluation failed", self.name)
            return

        if asyncio.iscoroutine(result):
            self._task = asyncio.get_running_loop().create_task(result, name=f"track_{self.name}")
            self._task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        if task is self._task:
            self._task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Track %s evaluation failed", self.name, exc_info=exc)
