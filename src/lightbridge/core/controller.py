from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from lightbridge.core import protocol
from lightbridge.models import DeviceCapability, DeviceIdentity, DeviceState

logger = logging.getLogger(__name__)

DEFAULT_CONTROL_PORT = 5577
DEFAULT_TIMEOUT = 3.0


@dataclass(frozen=True)
class DeviceInformation:
    proto_device: DeviceIdentity
    device_api: DeviceCapability
    device_state: DeviceState


@dataclass
class Controller:
    """Handle for one lighting controller as seen by the latest scan."""

    identity: DeviceIdentity
    capability: DeviceCapability
    state: DeviceState = field(default_factory=DeviceState)
    port: int = DEFAULT_CONTROL_PORT

    @property
    def unique_id(self) -> str:
        return self.identity.unique_id

    def cached_device_information(self) -> DeviceInformation:
        return DeviceInformation(
            proto_device=self.identity,
            device_api=self.capability,
            device_state=self.state,
        )

    async def refresh_state(self, timeout: float = DEFAULT_TIMEOUT) -> DeviceState:
        report = await query_state(self.identity.ip_address, self.port, timeout)
        self.state = report.state
        return self.state


async def query_state(
    ip: str, port: int = DEFAULT_CONTROL_PORT, timeout: float = DEFAULT_TIMEOUT
) -> protocol.StateReport:
    logger.debug("Querying state of %s:%d", ip, port)
    reader, writer = await asyncio.wait_for(
        asyncio.open_connection(ip, port), timeout=timeout
    )
    try:
        writer.write(protocol.state_query())
        await writer.drain()
        payload = await asyncio.wait_for(
            reader.readexactly(protocol.STATE_RESPONSE_LENGTH), timeout=timeout
        )
    finally:
        writer.close()
        await writer.wait_closed()
    return protocol.decode_state(payload)
