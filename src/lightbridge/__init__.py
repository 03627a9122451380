"""lightbridge: sync LAN lighting controllers into a host accessory registry."""

from __future__ import annotations

from importlib.metadata import version

from .config import ScanningConfig, Settings, get_settings
from .models import AccessoryRecord, DeviceCapability, DeviceIdentity, DeviceState
from .storage import Database

__all__ = [
    "AccessoryRecord",
    "Database",
    "DeviceCapability",
    "DeviceIdentity",
    "DeviceState",
    "ScanningConfig",
    "Settings",
    "__version__",
    "get_settings",
]

__version__ = version("lightbridge")
