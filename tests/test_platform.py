from __future__ import annotations

import asyncio
import json

import pytest

from lightbridge.config import DatabaseConfig, PruningConfig, Settings
from lightbridge.core import Controller, record_id
from lightbridge.core.platform import LightingPlatform
from lightbridge.errors import DiscoveryError
from lightbridge.storage import Database


class FakeDiscovery:
    def __init__(self, snapshots=None) -> None:
        self.snapshots = list(snapshots or [])
        self.release: asyncio.Event | None = None
        self.calls = 0

    async def discover_controllers(self):
        self.calls += 1
        if self.release is not None:
            await self.release.wait()
        snapshot = self.snapshots.pop(0) if self.snapshots else {}
        if isinstance(snapshot, Exception):
            raise snapshot
        return snapshot

    def create_custom_controllers(self, proto_device, device_api):
        return [Controller(identity=proto_device, capability=device_api)]


class RecordingBridge:
    def __init__(self) -> None:
        self.registered: list[list[str]] = []
        self.updated: list[list[str]] = []
        self.unregistered: list[tuple[list[str], str]] = []

    def register_new(self, records):
        self.registered.append([record.unique_id for record in records])

    def update_existing(self, records):
        self.updated.append([record.unique_id for record in records])

    def unregister(self, records, reason):
        self.unregistered.append(([record.unique_id for record in records], reason))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database=DatabaseConfig(path=str(tmp_path)),
        pruning=PruningConfig(prune_restarts=3),
    )


def _platform(settings, tmp_path, discovery, bridge=None):
    return LightingPlatform(settings, Database(tmp_path), discovery=discovery, bridge=bridge)


def test_rescan_registers_and_persists(settings, tmp_path, make_controller):
    discovery = FakeDiscovery([{"A": make_controller("A")}])
    platform = _platform(settings, tmp_path, discovery)
    platform.start()

    result = asyncio.run(platform.rescan())

    assert result is not None
    assert [record.unique_id for record in result.to_register] == ["A"]
    assert record_id("A") in platform.capabilities

    # the local bridge mirrors registrations into the cache right away
    cached = Database(tmp_path).load_accessories().records
    assert [record.unique_id for record in cached] == ["A"]

    scan = Database(tmp_path).load_current_scan()
    assert scan is not None
    assert [device.proto_device.unique_id for device in scan.devices] == ["A"]


def test_offline_counter_survives_restart(settings, tmp_path, make_controller):
    first = _platform(settings, tmp_path, FakeDiscovery([{"A": make_controller("A")}]))
    first.start()
    asyncio.run(first.rescan())
    first.stop()

    second = _platform(settings, tmp_path, FakeDiscovery([{}]))
    context = second.start()
    assert record_id("A") in context.disk_registry

    asyncio.run(second.rescan())
    second.stop()

    records = Database(tmp_path).load_accessories().records
    assert [record.restarts_since_seen for record in records] == [1]


def test_start_binds_cached_records(settings, tmp_path, make_record):
    Database(tmp_path).save_accessories(
        [make_record("A"), make_record("B", description="Mystery Box")]
    )
    platform = _platform(settings, tmp_path, FakeDiscovery())

    platform.start()

    assert set(platform.capabilities) == {record_id("A")}


def test_binding_failure_does_not_abort_pass(settings, tmp_path, make_controller):
    bridge = RecordingBridge()
    discovery = FakeDiscovery(
        [
            {
                "A": make_controller("A", description="Unknown 0xEE"),
                "B": make_controller("B"),
            }
        ]
    )
    platform = _platform(settings, tmp_path, discovery, bridge)
    platform.start()

    result = asyncio.run(platform.rescan())

    assert result is not None
    assert bridge.registered == [["A", "B"]]
    assert set(platform.capabilities) == {record_id("B")}


def test_discovery_failure_keeps_state(settings, tmp_path, make_record):
    Database(tmp_path).save_accessories([make_record("A", restarts_since_seen=1)])
    bridge = RecordingBridge()
    platform = _platform(
        settings, tmp_path, FakeDiscovery([DiscoveryError("network down")]), bridge
    )
    context = platform.start()

    result = asyncio.run(platform.rescan())

    assert result is None
    assert context.disk_registry[record_id("A")].restarts_since_seen == 1
    assert bridge.registered == []
    assert bridge.unregistered == []
    assert not platform.scan_in_flight


def test_concurrent_rescan_is_rejected(settings, tmp_path, make_controller):
    discovery = FakeDiscovery([{"A": make_controller("A")}])
    platform = _platform(settings, tmp_path, discovery)
    platform.start()

    async def scenario():
        discovery.release = asyncio.Event()
        first = asyncio.create_task(platform.rescan())
        await asyncio.sleep(0)
        assert platform.scan_in_flight
        second = await platform.rescan()
        discovery.release.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert second is None
    assert first is not None
    assert len(first.to_register) == 1
    assert discovery.calls == 1
    assert not platform.scan_in_flight


def test_prunes_are_unregistered_with_reason(settings, tmp_path, make_record, make_controller):
    Database(tmp_path).save_accessories(
        [make_record("A", display_name="delete me"), make_record("B", restarts_since_seen=5)]
    )
    bridge = RecordingBridge()
    discovery = FakeDiscovery([{"A": make_controller("A"), "B": make_controller("B")}])
    platform = _platform(settings, tmp_path, discovery, bridge)
    platform.start()

    asyncio.run(platform.rescan())
    platform.stop()

    assert sorted(bridge.unregistered) == [
        (["A"], "marked for deletion"),
        (["B"], "stale beyond restart threshold"),
    ]
    assert Database(tmp_path).load_accessories().records == []


def test_malformed_cache_entries_are_dropped(settings, tmp_path, make_record):
    good = make_record("A")
    payload = {
        "accessories": {
            good.record_id: good.model_dump(mode="json"),
            "broken": {"record_id": "broken", "display_name": "Half"},
        }
    }
    (tmp_path / "accessories.json").write_text(json.dumps(payload))
    platform = _platform(settings, tmp_path, FakeDiscovery())

    context = platform.start()

    assert list(context.disk_registry) == [good.record_id]
    stored = json.loads((tmp_path / "accessories.json").read_text())
    assert list(stored["accessories"]) == [good.record_id]


def test_rescan_requires_start(settings, tmp_path):
    platform = _platform(settings, tmp_path, FakeDiscovery())

    with pytest.raises(RuntimeError):
        asyncio.run(platform.rescan())


def test_run_stops_and_saves_on_cancel(settings, tmp_path, make_controller):
    discovery = FakeDiscovery([{"A": make_controller("A")}])
    platform = _platform(settings, tmp_path, discovery, RecordingBridge())

    async def scenario():
        task = asyncio.create_task(platform.run(interval=30))
        while discovery.calls == 0:
            await asyncio.sleep(0)
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert not platform.is_running
    records = Database(tmp_path).load_accessories().records
    assert [record.unique_id for record in records] == ["A"]
