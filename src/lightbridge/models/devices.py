from __future__ import annotations

import colorsys
from datetime import datetime

from pydantic import BaseModel, Field

MIN_MIREDS = 140
MAX_MIREDS = 500


class DeviceIdentity(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    unique_id: str
    ip_address: str
    model_number: int = Field(ge=0, le=255)


class DeviceCapability(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    description: str
    firmware_version: int | None = None


class DeviceState(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    is_on: bool = False
    red: int = Field(default=0, ge=0, le=255)
    green: int = Field(default=0, ge=0, le=255)
    blue: int = Field(default=0, ge=0, le=255)
    warm_white: int = Field(default=0, ge=0, le=255)
    cold_white: int = Field(default=0, ge=0, le=255)

    def hsv(self) -> tuple[int, int, int]:
        """Hue in degrees, saturation and value in percent."""
        hue, saturation, value = colorsys.rgb_to_hsv(
            self.red / 255, self.green / 255, self.blue / 255
        )
        return round(hue * 360), round(saturation * 100), round(value * 100)

    def white_brightness(self) -> int:
        return round(max(self.warm_white, self.cold_white) / 255 * 100)

    def color_temperature(self) -> int:
        """Color temperature in mireds derived from the warm/cold mix."""
        total = self.warm_white + self.cold_white
        if total == 0:
            return MIN_MIREDS
        ratio = self.warm_white / total
        return round(MIN_MIREDS + ratio * (MAX_MIREDS - MIN_MIREDS))


class AccessoryRecord(BaseModel):
    model_config = {"extra": "forbid"}

    record_id: str
    display_name: str
    proto_device: DeviceIdentity
    device_api: DeviceCapability
    restarts_since_seen: int = Field(default=0, ge=0)
    last_seen: datetime | None = None

    @property
    def unique_id(self) -> str:
        return self.proto_device.unique_id


class DiscoveredDevice(BaseModel):
    model_config = {"extra": "forbid"}

    proto_device: DeviceIdentity
    device_api: DeviceCapability


class ScanSnapshot(BaseModel):
    model_config = {"extra": "forbid"}

    scan_timestamp: datetime
    broadcast_address: str
    devices: list[DiscoveredDevice]
