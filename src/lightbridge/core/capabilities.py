"""Capability bindings: how a controller's state is exposed to the host.

Each device description maps to exactly one capability class. The mapping is
closed; descriptions outside it raise ``BindingError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from lightbridge.errors import BindingError

if TYPE_CHECKING:
    from lightbridge.config import Settings
    from lightbridge.core.controller import Controller
    from lightbridge.models import AccessoryRecord, DeviceState

RGBW_SIMULTANEOUS = "RGBW Simultaneous"
RGBW_NON_SIMULTANEOUS = "RGBW Non-Simultaneous"
RGBWW_SIMULTANEOUS = "RGBWW Simultaneous"
RGBWW_NON_SIMULTANEOUS = "RGBWW Non-Simultaneous"
RGB_STRIP = "RGB Strip"
GRB_STRIP = "GRB Strip"
DIMMER = "Dimmer"
CCT_STRIP = "CCT Strip"
POWER_SOCKET = "Power Socket"

DEVICE_TYPES: dict[int, str] = {
    0x03: RGB_STRIP,
    0x04: RGBW_SIMULTANEOUS,
    0x06: RGBW_NON_SIMULTANEOUS,
    0x07: RGBWW_NON_SIMULTANEOUS,
    0x21: DIMMER,
    0x25: RGBWW_SIMULTANEOUS,
    0x33: GRB_STRIP,
    0x35: RGBWW_SIMULTANEOUS,
    0x44: RGBW_NON_SIMULTANEOUS,
    0x52: CCT_STRIP,
    0x93: POWER_SOCKET,
    0x97: POWER_SOCKET,
}


def describe_model(model_number: int) -> str:
    return DEVICE_TYPES.get(model_number, f"Unknown 0x{model_number:02X}")


class Capability:
    """Base binding: power only."""

    service: ClassVar[str] = "Switch"

    def __init__(
        self,
        bridge: Any,
        record: AccessoryRecord,
        settings: Settings,
        controller: Controller,
    ) -> None:
        self.bridge = bridge
        self.record = record
        self.settings = settings
        self.controller = controller

    @property
    def state(self) -> DeviceState:
        return self.controller.state

    def characteristics(self) -> dict[str, Any]:
        return {"On": self.state.is_on}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.record.record_id!r})"


class DimmerCapability(Capability):
    service = "Lightbulb"

    def characteristics(self) -> dict[str, Any]:
        values = super().characteristics()
        values["Brightness"] = self.state.white_brightness() or self.state.hsv()[2]
        return values


class CCTCapability(Capability):
    service = "Lightbulb"

    def characteristics(self) -> dict[str, Any]:
        values = super().characteristics()
        values["Brightness"] = self.state.white_brightness()
        values["ColorTemperature"] = self.state.color_temperature()
        return values


class RGBCapability(Capability):
    service = "Lightbulb"

    def characteristics(self) -> dict[str, Any]:
        values = super().characteristics()
        hue, saturation, brightness = self.state.hsv()
        values.update(Hue=hue, Saturation=saturation, Brightness=brightness)
        return values


class GRBCapability(RGBCapability):
    """Strips wired green-first report red and green swapped."""

    @property
    def state(self) -> DeviceState:
        raw = self.controller.state
        return raw.model_copy(update={"red": raw.green, "green": raw.red})


class RGBWCapability(RGBCapability):
    simultaneous: ClassVar[bool] = True

    def characteristics(self) -> dict[str, Any]:
        values = super().characteristics()
        white = self.state.white_brightness()
        if not self.simultaneous and white:
            # white channel overrides color on these controllers
            values.update(Hue=0, Saturation=0, Brightness=white)
        else:
            values["Brightness"] = max(values["Brightness"], white)
        return values


class RGBWNonSimultaneousCapability(RGBWCapability):
    simultaneous = False


class RGBWWCapability(RGBWCapability):
    def characteristics(self) -> dict[str, Any]:
        values = super().characteristics()
        values["ColorTemperature"] = self.state.color_temperature()
        return values


class RGBWWNonSimultaneousCapability(RGBWWCapability):
    simultaneous = False


CAPABILITY_TYPES: dict[str, type[Capability]] = {
    RGBW_SIMULTANEOUS: RGBWCapability,
    RGBW_NON_SIMULTANEOUS: RGBWNonSimultaneousCapability,
    RGBWW_SIMULTANEOUS: RGBWWCapability,
    RGBWW_NON_SIMULTANEOUS: RGBWWNonSimultaneousCapability,
    RGB_STRIP: RGBCapability,
    GRB_STRIP: GRBCapability,
    DIMMER: DimmerCapability,
    CCT_STRIP: CCTCapability,
    POWER_SOCKET: Capability,
}


def bind(
    description: str,
    bridge: Any,
    record: AccessoryRecord,
    settings: Settings,
    controller: Controller,
) -> Capability:
    capability_type = CAPABILITY_TYPES.get(description)
    if capability_type is None:
        raise BindingError(description)
    return capability_type(bridge, record, settings, controller)
