from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator

import httpx
from httpx_sse import aconnect_sse

from .hue_payloads import iter_updates

logger = logging.getLogger(__name__)


class HueBridgeClient:
    """Hue bridge CLIP v2 client: one-shot resource fetches and the event stream."""

    def __init__(
        self,
        host: str,
        api_key: str,
        verify: bool = False,
        timeout: float = 10.0,
        reconnect_s: float = 5.0,
    ) -> None:
        self._timeout = timeout
        self._reconnect_s = reconnect_s
        self._client = httpx.AsyncClient(
            base_url=f"https://{host}",
            headers={"hue-application-key": api_key},
            verify=verify,
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_resource(self, kind: str, resource_id: str) -> dict[str, Any]:
        resp = await self._client.get(f"/clip/v2/resource/{kind}/{resource_id}")
        resp.raise_for_status()
        data = resp.json().get("data") or []
        if not data:
            raise RuntimeError(f"Hue bridge returned no {kind} resource for {resource_id}")
        return data[0]

    async def events(self) -> AsyncIterator[dict[str, Any]]:
        """
        Yield every updated resource from the bridge event stream.
        Reconnects forever; only cancellation ends the iteration.
        """
        while True:
            try:
                async with aconnect_sse(
                    self._client,
                    "GET",
                    "/eventstream/clip/v2",
                    timeout=httpx.Timeout(self._timeout, read=None),
                ) as source:
                    source.response.raise_for_status()
                    logger.info("Hue event stream connected")
                    async for sse in source.aiter_sse():
                        try:
                            message = sse.json()
                        except ValueError:
                            logger.debug("Ignoring non-JSON event: %r", sse.data)
                            continue
                        for resource in iter_updates(message):
                            yield resource
                logger.warning("Hue event stream closed by the bridge")
            except httpx.HTTPError as e:
                logger.error("[HUE] %s", e)

            await asyncio.sleep(self._reconnect_s)
