from __future__ import annotations
import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

import httpx

from ..core.config import Settings
from ..core.timeutil import now_utc
from ..domain.controller import ControllerConfig, PresenceController
from ..domain.interfaces import DeviceTransport, SensorEventSource, SensorSnapshotFetcher
from ..domain.models import SensorClass
from ..drivers.device_sim import SimulatedLightDevice
from ..drivers.govee_lan import GoveeLanConfig, GoveeLanTransport
from ..drivers.hue_bridge import HueBridgeClient
from ..drivers.hue_payloads import parse_button, parse_light_level, parse_motion
from .poller import StatusPoller

logger = logging.getLogger(__name__)


def build_transport(settings: Settings) -> DeviceTransport:
    if settings.mode.lower() == "sim":
        return SimulatedLightDevice()

    return GoveeLanTransport(
        GoveeLanConfig(
            device_ip=settings.govee_device_ip,
            local_port=settings.govee_local_port,
            device_port=settings.govee_device_port,
            multicast_addr=settings.govee_multicast_addr,
            multicast_port=settings.govee_multicast_port,
            retry_s=settings.govee_retry_s,
            discovery_timeout_s=settings.govee_discovery_timeout_s,
        )
    )


def build_hue_client(settings: Settings) -> Optional[HueBridgeClient]:
    if not settings.hue_host:
        logger.warning("No Hue bridge configured, sensor events disabled")
        return None
    return HueBridgeClient(
        host=settings.hue_host,
        api_key=settings.hue_api_key,
        verify=settings.hue_verify_tls,
        timeout=settings.hue_timeout_seconds,
        reconnect_s=settings.hue_reconnect_s,
    )


class ControllerService:
    """
    Owns the controller and its collaborators for the lifetime of the process.
    Routes bridge resources to the report store by sensor id.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[DeviceTransport] = None,
        hue: Optional[Any] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._settings = settings
        self.transport = transport if transport is not None else build_transport(settings)
        self.hue = hue if hue is not None else build_hue_client(settings)

        self.controller = PresenceController(
            ControllerConfig(
                motion_sensors=len(settings.hue_motion_ids),
                light_level_sensors=len(settings.hue_light_level_ids),
                on_time_s=settings.on_time_seconds,
                darkness_threshold=settings.darkness_threshold,
                status_stale_after_s=settings.status_stale_after_s,
                status_wait_s=settings.status_wait_s,
            ),
            self.transport,
            clock=clock,
        )
        self.poller = StatusPoller(
            self.transport,
            self.controller.tracker,
            period_s=settings.status_poll_ms / 1000.0,
        )

        self._motion_index = {rid: i for i, rid in enumerate(settings.hue_motion_ids)}
        self._light_level_index = {rid: i for i, rid in enumerate(settings.hue_light_level_ids)}
        self._button_id = settings.hue_button_id
        self._stream_task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        await self.transport.start()
        await self.poller.start()

        if self.hue is not None:
            logger.info("Setting up Hue...")
            # snapshots first, so no fetched report can overwrite a newer streamed one
            await self.fetch_snapshots(self.hue)
            self._stream_task = asyncio.create_task(self._consume(self.hue), name="hue_event_stream")

    async def stop(self) -> None:
        if self._stream_task is not None:
            self._stream_task.cancel()
            try:
                await self._stream_task
            except asyncio.CancelledError:
                pass
            self._stream_task = None

        await self.poller.stop()
        self.controller.stop()
        await self.transport.stop()

        if isinstance(self.hue, HueBridgeClient):
            await self.hue.close()

    def route(self, resource: dict[str, Any]) -> None:
        rid = resource.get("id")

        if rid in self._motion_index:
            i = self._motion_index[rid]
            report = parse_motion(resource, i)
            if report is not None:
                self.controller.handle_report(SensorClass.MOTION, i, report)
        elif rid in self._light_level_index:
            i = self._light_level_index[rid]
            report = parse_light_level(resource, i)
            if report is not None:
                self.controller.handle_report(SensorClass.LIGHT_LEVEL, i, report)
        elif self._button_id and rid == self._button_id:
            report = parse_button(resource)
            if report is not None:
                self.controller.handle_report(SensorClass.BUTTON, 0, report)

    async def fetch_snapshots(self, fetcher: SensorSnapshotFetcher) -> None:
        logger.info("Fetching the current motion and light level reports...")
        targets = [("motion", rid) for rid in self._settings.hue_motion_ids]
        targets += [("light_level", rid) for rid in self._settings.hue_light_level_ids]

        for kind, rid in targets:
            try:
                resource = await fetcher.fetch_resource(kind, rid)
            except (httpx.HTTPError, RuntimeError, ValueError) as e:
                logger.error("[HUE] Failed to fetch the %s report of %s: %s", kind, rid, e)
                continue
            resource.setdefault("id", rid)
            self.route(resource)

    async def _consume(self, source: SensorEventSource) -> None:
        async for resource in source.events():
            try:
                self.route(resource)
            except Exception:
                logger.exception("Failed to handle sensor update %s", resource.get("id"))
