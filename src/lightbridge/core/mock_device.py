from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from lightbridge.core import protocol
from lightbridge.models import DeviceState

if TYPE_CHECKING:
    from asyncio import StreamReader, StreamWriter

logger = logging.getLogger(__name__)

CMD_SET_POWER = 0x71
CMD_SET_COLOR = 0x31
CMD_QUERY_STATE = 0x81

COMMAND_LENGTHS = {
    CMD_SET_POWER: 4,
    CMD_SET_COLOR: 8,
    CMD_QUERY_STATE: 4,
}


class _DiscoveryResponder(asyncio.DatagramProtocol):
    def __init__(self, device: MockController) -> None:
        self.device = device
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport  # type: ignore[assignment]

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        if data.strip() != protocol.DISCOVERY_MESSAGE or self.transport is None:
            return
        logger.debug("Discovery request from %s:%d", *addr)
        self.transport.sendto(self.device.discovery_reply(), addr)


@dataclass
class MockController:
    unique_id: str = "ACCF23000001"
    model_number: int = 0x35
    firmware_version: int = 0x09
    host: str = "127.0.0.1"
    discovery_port: int = 48899
    control_port: int = 5577
    module: str = "HF-LPB100-ZJ200"

    state: DeviceState = field(
        default_factory=lambda: DeviceState(is_on=True, red=255, green=120, blue=0)
    )

    _server: asyncio.Server | None = field(default=None, repr=False)
    _udp: asyncio.DatagramTransport | None = field(default=None, repr=False)

    def discovery_reply(self) -> bytes:
        return f"{self.host},{self.unique_id},{self.module}".encode("ascii")

    def state_report(self) -> bytes:
        return protocol.encode_state(
            self.model_number, self.firmware_version, self.state
        )

    def apply_command(self, frame: bytes) -> bytes | None:
        """Apply one checksummed command; returns the reply to send, if any."""
        if protocol.checksum(frame[:-1]) != frame[-1]:
            logger.debug("Dropping command with bad checksum: %s", frame.hex())
            return None

        command = frame[0]
        if command == CMD_QUERY_STATE:
            return self.state_report()
        if command == CMD_SET_POWER:
            self.state = self.state.model_copy(
                update={"is_on": frame[1] == protocol.POWER_ON}
            )
            logger.info("Power set to %s", "ON" if self.state.is_on else "OFF")
        elif command == CMD_SET_COLOR:
            self.state = self.state.model_copy(
                update={
                    "red": frame[1],
                    "green": frame[2],
                    "blue": frame[3],
                    "warm_white": frame[4],
                    "cold_white": frame[5],
                }
            )
            logger.info("Color set to %s", frame[1:6].hex())
        return None

    async def start(self) -> None:
        loop = asyncio.get_running_loop()
        self._udp, _ = await loop.create_datagram_endpoint(
            lambda: _DiscoveryResponder(self),
            local_addr=("0.0.0.0", self.discovery_port),
            allow_broadcast=True,
        )
        self._server = await asyncio.start_server(
            self._handle_client, "0.0.0.0", self.control_port
        )
        logger.info(
            "Mock controller %s answering discovery on %d, control on %d",
            self.unique_id,
            self.discovery_port,
            self.control_port,
        )

    async def stop(self) -> None:
        if self._udp:
            self._udp.close()
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            logger.info("Mock controller %s stopped", self.unique_id)

    async def run_forever(self) -> None:
        await self.start()
        try:
            if self._server:
                await self._server.serve_forever()
        finally:
            await self.stop()

    async def _handle_client(self, reader: StreamReader, writer: StreamWriter) -> None:
        addr = writer.get_extra_info("peername")
        logger.debug("Client connected: %s", addr)
        buffer = bytearray()

        try:
            while True:
                data = await reader.read(1024)
                if not data:
                    break
                buffer.extend(data)

                while buffer:
                    length = COMMAND_LENGTHS.get(buffer[0])
                    if length is None:
                        buffer.clear()
                        break
                    if len(buffer) < length:
                        break
                    frame = bytes(buffer[:length])
                    del buffer[:length]
                    reply = self.apply_command(frame)
                    if reply:
                        writer.write(reply)
                        await writer.drain()
        except (ConnectionResetError, BrokenPipeError):
            logger.debug("Client disconnected: %s", addr)
        finally:
            writer.close()
            await writer.wait_closed()


async def run_mock_device(
    unique_id: str = "ACCF23000001",
    model_number: int = 0x35,
    host: str = "127.0.0.1",
    discovery_port: int = 48899,
    control_port: int = 5577,
) -> None:
    device = MockController(
        unique_id=unique_id,
        model_number=model_number,
        host=host,
        discovery_port=discovery_port,
        control_port=control_port,
    )
    await device.run_forever()
