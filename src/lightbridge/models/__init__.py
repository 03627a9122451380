"""Data models for lightbridge."""

from lightbridge.models.devices import (
    AccessoryRecord,
    DeviceCapability,
    DeviceIdentity,
    DeviceState,
    DiscoveredDevice,
    ScanSnapshot,
)

__all__ = [
    "AccessoryRecord",
    "DeviceCapability",
    "DeviceIdentity",
    "DeviceState",
    "DiscoveredDevice",
    "ScanSnapshot",
]
