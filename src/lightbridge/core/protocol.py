"""MagicHome LAN wire format: discovery handshake and state query."""

from __future__ import annotations

import string
from dataclasses import dataclass

from lightbridge.models import DeviceState

DISCOVERY_MESSAGE = b"HF-A11ASSISTHREAD"

STATE_QUERY_BODY = bytes([0x81, 0x8A, 0x8B])
STATE_RESPONSE_HEADER = 0x81
STATE_RESPONSE_LENGTH = 14

POWER_ON = 0x23
POWER_OFF = 0x24

MODE_STATIC = 0x61


@dataclass(frozen=True)
class DiscoveryReply:
    ip_address: str
    unique_id: str
    module: str


@dataclass(frozen=True)
class StateReport:
    model_number: int
    firmware_version: int
    state: DeviceState


def checksum(data: bytes) -> int:
    return sum(data) & 0xFF


def with_checksum(data: bytes) -> bytes:
    return data + bytes([checksum(data)])


def state_query() -> bytes:
    return with_checksum(STATE_QUERY_BODY)


def normalize_unique_id(value: str) -> str:
    cleaned = value.strip().replace(":", "").replace("-", "")
    if len(cleaned) == 12 and all(ch in string.hexdigits for ch in cleaned):
        return cleaned.upper()
    return value.strip()


def parse_discovery_reply(data: bytes) -> DiscoveryReply | None:
    """Parse an ``ip,MAC,module`` reply; anything else is ignored."""
    text = data.decode("ascii", errors="replace").strip()
    if text == DISCOVERY_MESSAGE.decode("ascii"):
        return None

    parts = text.split(",")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None

    module = parts[2] if len(parts) > 2 else ""
    return DiscoveryReply(
        ip_address=parts[0],
        unique_id=normalize_unique_id(parts[1]),
        module=module,
    )


def decode_state(payload: bytes) -> StateReport:
    if len(payload) < STATE_RESPONSE_LENGTH:
        raise ValueError(f"State response too short ({len(payload)} bytes)")

    frame = payload[:STATE_RESPONSE_LENGTH]
    if frame[0] != STATE_RESPONSE_HEADER:
        raise ValueError(f"Unexpected state response header 0x{frame[0]:02X}")
    if checksum(frame[:-1]) != frame[-1]:
        raise ValueError("State response checksum mismatch")

    state = DeviceState(
        is_on=frame[2] == POWER_ON,
        red=frame[6],
        green=frame[7],
        blue=frame[8],
        warm_white=frame[9],
        cold_white=frame[11],
    )
    return StateReport(model_number=frame[1], firmware_version=frame[10], state=state)


def encode_state(model_number: int, firmware_version: int, state: DeviceState) -> bytes:
    body = bytes(
        [
            STATE_RESPONSE_HEADER,
            model_number,
            POWER_ON if state.is_on else POWER_OFF,
            MODE_STATIC,
            0x01,
            0x10,
            state.red,
            state.green,
            state.blue,
            state.warm_white,
            firmware_version,
            state.cold_white,
            0xF0,
        ]
    )
    return with_checksum(body)
