from __future__ import annotations

import asyncio
import logging

from lightbridge.config import ScanningConfig
from lightbridge.core import protocol
from lightbridge.core.capabilities import describe_model
from lightbridge.core.controller import Controller, query_state
from lightbridge.errors import DiscoveryError
from lightbridge.models import DeviceCapability, DeviceIdentity

logger = logging.getLogger(__name__)


class _DiscoveryProtocol(asyncio.DatagramProtocol):
    def __init__(self) -> None:
        self.replies: dict[str, protocol.DiscoveryReply] = {}

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        reply = protocol.parse_discovery_reply(data)
        if reply is None:
            return
        if reply.unique_id not in self.replies:
            logger.debug(
                "Discovery reply from %s (%s, module=%s)",
                reply.ip_address,
                reply.unique_id,
                reply.module or "?",
            )
        self.replies[reply.unique_id] = reply

    def error_received(self, exc: Exception) -> None:
        logger.debug("Discovery socket error: %s", exc)


class Discovery:
    """Finds controllers on the LAN and turns them into ``Controller`` handles."""

    def __init__(self, config: ScanningConfig) -> None:
        self.config = config

    async def broadcast(self) -> list[protocol.DiscoveryReply]:
        loop = asyncio.get_running_loop()
        try:
            transport, listener = await loop.create_datagram_endpoint(
                _DiscoveryProtocol,
                local_addr=("0.0.0.0", 0),
                allow_broadcast=True,
            )
        except OSError as exc:
            raise DiscoveryError(f"Could not open discovery socket: {exc}") from exc

        target = (self.config.broadcast_address, self.config.discovery_port)
        logger.debug(
            "Broadcasting discovery to %s:%d (timeout=%.2fs)",
            *target,
            self.config.timeout,
        )
        try:
            transport.sendto(protocol.DISCOVERY_MESSAGE, target)
            await asyncio.sleep(self.config.timeout)
        except OSError as exc:
            raise DiscoveryError(f"Discovery broadcast failed: {exc}") from exc
        finally:
            transport.close()

        return sorted(listener.replies.values(), key=lambda reply: reply.unique_id)

    async def probe(self, reply: protocol.DiscoveryReply) -> Controller | None:
        try:
            report = await query_state(
                reply.ip_address, self.config.control_port, self.config.timeout
            )
        except (asyncio.TimeoutError, TimeoutError):
            logger.warning(
                "Device %s at %s did not answer the state query",
                reply.unique_id,
                reply.ip_address,
            )
            return None
        except (asyncio.IncompleteReadError, OSError, ValueError) as exc:
            logger.warning(
                "Device %s at %s returned no usable state: %s",
                reply.unique_id,
                reply.ip_address,
                exc,
            )
            return None

        identity = DeviceIdentity(
            unique_id=reply.unique_id,
            ip_address=reply.ip_address,
            model_number=report.model_number,
        )
        capability = DeviceCapability(
            description=describe_model(report.model_number),
            firmware_version=report.firmware_version,
        )
        return Controller(
            identity=identity,
            capability=capability,
            state=report.state,
            port=self.config.control_port,
        )

    async def discover_controllers(self) -> dict[str, Controller]:
        replies = await self.broadcast()
        controllers = await asyncio.gather(*(self.probe(reply) for reply in replies))
        snapshot = {
            controller.unique_id: controller
            for controller in controllers
            if controller is not None
        }
        logger.info(
            "Discovery complete: %d replied, %d usable", len(replies), len(snapshot)
        )
        return snapshot

    def create_custom_controllers(
        self, proto_device: DeviceIdentity, device_api: DeviceCapability
    ) -> list[Controller]:
        """Rebuild a controller handle from stored data, without probing."""
        return [
            Controller(
                identity=proto_device,
                capability=device_api,
                port=self.config.control_port,
            )
        ]
