from __future__ import annotations

import pytest

from lightbridge.config import Settings
from lightbridge.core import CAPABILITY_TYPES, bind, describe_model
from lightbridge.core.capabilities import DEVICE_TYPES, GRBCapability
from lightbridge.errors import BindingError
from lightbridge.models import DeviceState


def _bind(description, make_record, make_controller, state):
    controller = make_controller("A", description=description, state=state)
    return bind(description, None, make_record("A"), Settings(), controller)


def test_every_known_model_has_a_binding():
    assert set(DEVICE_TYPES.values()) <= set(CAPABILITY_TYPES)


def test_describe_model():
    assert describe_model(0x35) == "RGBWW Simultaneous"
    assert describe_model(0xEE) == "Unknown 0xEE"


def test_unknown_description_raises(make_record, make_controller):
    with pytest.raises(BindingError) as excinfo:
        _bind("Unknown 0xEE", make_record, make_controller, DeviceState())

    assert excinfo.value.description == "Unknown 0xEE"


def test_power_socket_exposes_only_power(make_record, make_controller):
    capability = _bind(
        "Power Socket", make_record, make_controller, DeviceState(is_on=True)
    )

    assert capability.characteristics() == {"On": True}


def test_rgbww_reports_color_and_temperature(make_record, make_controller):
    state = DeviceState(is_on=True, red=255, warm_white=255)
    capability = _bind("RGBWW Simultaneous", make_record, make_controller, state)

    values = capability.characteristics()

    assert values["Hue"] == 0
    assert values["Saturation"] == 100
    assert values["Brightness"] == 100
    assert values["ColorTemperature"] == 500


def test_non_simultaneous_white_overrides_color(make_record, make_controller):
    state = DeviceState(is_on=True, red=255, warm_white=128)
    capability = _bind("RGBW Non-Simultaneous", make_record, make_controller, state)

    values = capability.characteristics()

    assert values["Saturation"] == 0
    assert values["Brightness"] == 50


def test_grb_strip_swaps_red_and_green(make_record, make_controller):
    capability = _bind(
        "GRB Strip", make_record, make_controller, DeviceState(is_on=True, red=255)
    )

    assert isinstance(capability, GRBCapability)
    assert capability.characteristics()["Hue"] == 120


def test_cct_strip_reports_cold_white(make_record, make_controller):
    state = DeviceState(is_on=False, cold_white=255)
    capability = _bind("CCT Strip", make_record, make_controller, state)

    assert capability.characteristics() == {
        "On": False,
        "Brightness": 100,
        "ColorTemperature": 140,
    }
