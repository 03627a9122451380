from __future__ import annotations

from collections.abc import Callable

import pytest

from lightbridge.config import get_settings
from lightbridge.core import Controller, record_id
from lightbridge.models import (
    AccessoryRecord,
    DeviceCapability,
    DeviceIdentity,
    DeviceState,
)

ControllerFactory = Callable[..., Controller]
RecordFactory = Callable[..., AccessoryRecord]


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LIGHTBRIDGE_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_controller() -> ControllerFactory:
    def _make(
        unique_id: str,
        ip_address: str = "192.168.1.20",
        model_number: int = 0x35,
        description: str = "RGBWW Simultaneous",
        state: DeviceState | None = None,
    ) -> Controller:
        return Controller(
            identity=DeviceIdentity(
                unique_id=unique_id,
                ip_address=ip_address,
                model_number=model_number,
            ),
            capability=DeviceCapability(description=description),
            state=state or DeviceState(is_on=True, red=255),
        )

    return _make


@pytest.fixture
def make_record() -> RecordFactory:
    def _make(
        unique_id: str,
        display_name: str = "Lamp",
        restarts_since_seen: int = 0,
        ip_address: str = "192.168.1.20",
        description: str = "RGBWW Simultaneous",
    ) -> AccessoryRecord:
        return AccessoryRecord(
            record_id=record_id(unique_id),
            display_name=display_name,
            proto_device=DeviceIdentity(
                unique_id=unique_id, ip_address=ip_address, model_number=0x35
            ),
            device_api=DeviceCapability(description=description),
            restarts_since_seen=restarts_since_seen,
        )

    return _make
