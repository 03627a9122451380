"""Tests for the accessory cache and scan snapshot storage."""

from __future__ import annotations

import json

import pytest

from lightbridge.models import DeviceCapability, DeviceIdentity, DiscoveredDevice
from lightbridge.storage import Database


def test_accessories_roundtrip(tmp_path, make_record):
    db = Database(tmp_path)
    records = [make_record("A", restarts_since_seen=2), make_record("B")]

    db.save_accessories(records)
    loaded = db.load_accessories()

    assert loaded.malformed == []
    assert sorted(loaded.records, key=lambda item: item.record_id) == sorted(
        records, key=lambda item: item.record_id
    )


def test_missing_cache_loads_empty(tmp_path):
    loaded = Database(tmp_path / "nowhere").load_accessories()

    assert loaded.records == []
    assert loaded.malformed == []


def test_malformed_entries_are_set_aside(tmp_path, make_record):
    good = make_record("A")
    mismatched = make_record("B").model_dump(mode="json")
    payload = {
        "accessories": {
            good.record_id: good.model_dump(mode="json"),
            "not-b": mismatched,
            "negative": {
                **make_record("C").model_dump(mode="json"),
                "record_id": "negative",
                "restarts_since_seen": -1,
            },
        }
    }
    (tmp_path / "accessories.json").write_text(json.dumps(payload))

    loaded = Database(tmp_path).load_accessories()

    assert [record.unique_id for record in loaded.records] == ["A"]
    assert sorted(error.key for error in loaded.malformed) == ["negative", "not-b"]


def test_forged_record_id_is_malformed(tmp_path, make_record):
    record = make_record("A").model_dump(mode="json")
    record["record_id"] = "forged"
    (tmp_path / "accessories.json").write_text(
        json.dumps({"accessories": {"forged": record}})
    )

    loaded = Database(tmp_path).load_accessories()

    assert loaded.records == []
    assert "unique id" in loaded.malformed[0].detail


def test_invalid_json_raises(tmp_path):
    (tmp_path / "accessories.json").write_text("{not json")

    with pytest.raises(ValueError, match="Invalid JSON"):
        Database(tmp_path).load_accessories()


def test_rename_accessory(tmp_path, make_record):
    db = Database(tmp_path)
    record = make_record("A", display_name="Lamp")
    db.save_accessories([record])

    assert db.rename_accessory(record.record_id, "Lamp (delete)") is True
    assert db.load_accessories().records[0].display_name == "Lamp (delete)"
    assert db.rename_accessory("missing", "x") is False


def test_scan_roundtrip(tmp_path):
    db = Database(tmp_path)
    devices = [
        DiscoveredDevice(
            proto_device=DeviceIdentity(
                unique_id="ACCF23000001", ip_address="192.168.1.20", model_number=0x35
            ),
            device_api=DeviceCapability(description="RGBWW Simultaneous"),
        )
    ]
    db.save_scan(devices, broadcast_address="192.168.1.255")

    result = db.load_current_scan()
    assert result is not None
    assert result.devices == devices
    assert result.broadcast_address == "192.168.1.255"


def test_init_creates_empty_cache_once(tmp_path, make_record):
    db = Database(tmp_path / "data")

    assert db.init() is True
    db.save_accessories([make_record("A")])
    assert db.init() is False
    assert len(db.load_accessories().records) == 1
    assert db.init(force=True) is True
    assert db.load_accessories().records == []
