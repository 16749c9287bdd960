from __future__ import annotations

import asyncio
import json
import logging
import socket
import struct
from dataclasses import dataclass
from typing import Any, Optional

from ..domain.interfaces import StatusHandler

logger = logging.getLogger(__name__)


@dataclass
class GoveeLanConfig:
    device_ip: str = ""              # empty = discover with a multicast scan
    local_port: int = 4002
    device_port: int = 4003
    multicast_addr: str = "239.255.255.250"
    multicast_port: int = 4001
    retry_s: float = 1.0
    discovery_timeout_s: float = 3.0


def encode_message(cmd: str, data: dict[str, Any]) -> bytes:
    return json.dumps({"msg": {"cmd": cmd, "data": data}}).encode()


def decode_message(raw: bytes) -> Optional[tuple[str, dict[str, Any]]]:
    """Return (cmd, data) of a Govee LAN datagram, or None if it is not one."""
    try:
        msg = json.loads(raw)["msg"]
        cmd = msg["cmd"]
        data = msg.get("data") or {}
    except (ValueError, KeyError, TypeError, AttributeError):
        return None
    if not isinstance(cmd, str) or not isinstance(data, dict):
        return None
    return cmd, data


class _GoveeProtocol(asyncio.DatagramProtocol):
    def __init__(self, owner: GoveeLanTransport) -> None:
        self._owner = owner

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._owner._on_datagram(data, addr)

    def error_received(self, exc: Exception) -> None:
        self._owner._on_error(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        self._owner._on_lost(exc)


class GoveeLanTransport:
    """
    Govee LAN API over UDP.
    Responsible for: socket setup/re-setup, device discovery, command and
    status datagrams. Sends while the socket is down are dropped.
    Status requests are only sent on behalf of the poller, which records
    when each one left.
    """

    def __init__(self, cfg: GoveeLanConfig) -> None:
        self.cfg = cfg
        self._device_ip = cfg.device_ip or None
        self._transport: Optional[asyncio.DatagramTransport] = None
        self._handler: Optional[StatusHandler] = None
        self._retry_task: Optional[asyncio.Task] = None
        self._discovery_task: Optional[asyncio.Task] = None
        self._stopping = False

    @property
    def device_ip(self) -> Optional[str]:
        return self._device_ip

    @property
    def ready(self) -> bool:
        return self._transport is not None

    def set_status_handler(self, handler: StatusHandler) -> None:
        self._handler = handler

    async def start(self) -> None:
        self._stopping = False
        logger.info("Setting up Govee...")
        if not await self._setup():
            self._schedule_retry()

    async def stop(self) -> None:
        self._stopping = True
        for task in (self._retry_task, self._discovery_task):
            if task is not None and not task.done():
                task.cancel()
        self._retry_task = None
        self._discovery_task = None
        self._close()

    def send_command(self, cmd: str, data: dict[str, Any]) -> None:
        if self._device_ip is None:
            logger.debug("Dropping %s, no Govee device address yet", cmd)
            return
        self._send(encode_message(cmd, data), (self._device_ip, self.cfg.device_port))

    def request_status(self) -> None:
        self.send_command("devStatus", {})

    def scan(self) -> None:
        self._send(
            encode_message("scan", {"account_topic": "reserve"}),
            (self.cfg.multicast_addr, self.cfg.multicast_port),
        )

    # --- socket lifecycle ---

    def _open_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("", self.cfg.local_port))
            mreq = struct.pack(
                "4s4s",
                socket.inet_aton(self.cfg.multicast_addr),
                socket.inet_aton("0.0.0.0"),
            )
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        return sock

    async def _setup(self) -> bool:
        loop = asyncio.get_running_loop()
        try:
            sock = self._open_socket()
            transport, _ = await loop.create_datagram_endpoint(
                lambda: _GoveeProtocol(self), sock=sock
            )
        except OSError as e:
            logger.error("[GOVEE] %s", e)
            return False

        self._transport = transport
        logger.info("Govee socket listening on port %d", self.cfg.local_port)

        if self._device_ip is None:
            self._discovery_task = loop.create_task(self._discover(), name="govee_discovery")
        return True

    async def _retry_loop(self) -> None:
        while not self._stopping:
            await asyncio.sleep(self.cfg.retry_s)
            if await self._setup():
                return

    def _schedule_retry(self) -> None:
        if self._stopping or (self._retry_task is not None and not self._retry_task.done()):
            return
        self._retry_task = asyncio.get_running_loop().create_task(
            self._retry_loop(), name="govee_setup_retry"
        )

    def _close(self) -> None:
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()

    async def _discover(self) -> None:
        while self._device_ip is None and self._transport is not None:
            logger.info("Scanning for Govee devices...")
            self.scan()
            await asyncio.sleep(self.cfg.discovery_timeout_s)

    def _send(self, payload: bytes, addr: tuple[str, int]) -> None:
        if self._transport is None:
            return
        self._transport.sendto(payload, addr)

    # --- protocol callbacks ---

    def _on_datagram(self, raw: bytes, addr: tuple[str, int]) -> None:
        decoded = decode_message(raw)
        if decoded is None:
            logger.warning("[GOVEE] Undecodable datagram from %s: %r", addr[0], raw[:200])
            return
        cmd, data = decoded

        if cmd == "scan":
            ip = data.get("ip")
            if self._device_ip is None and isinstance(ip, str):
                self._device_ip = ip
                logger.info("Found Govee device %s (%s) at %s", data.get("device"), data.get("sku"), ip)
            return

        if cmd != "devStatus":
            return
        if self._handler is not None:
            self._handler(data)

    def _on_error(self, exc: Exception) -> None:
        logger.error("[GOVEE] %s", exc)
        self._close()

    def _on_lost(self, exc: Optional[Exception]) -> None:
        if self._stopping:
            return
        if exc is not None:
            logger.error("[GOVEE] Connection lost: %s", exc)
        self._transport = None
        self._schedule_retry()
