from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from lightbridge.core.identity import record_id as make_record_id
from lightbridge.errors import MalformedRecordError
from lightbridge.models import AccessoryRecord, DiscoveredDevice, ScanSnapshot

logger = logging.getLogger(__name__)

ACCESSORIES_FILE = "accessories.json"
PHYSICAL_DIR = "physical"
CURRENT_SCAN_FILE = "current.json"


@dataclass
class LoadedAccessories:
    records: list[AccessoryRecord] = field(default_factory=list)
    malformed: list[MalformedRecordError] = field(default_factory=list)


def _parse_record(key: str, raw: Any) -> AccessoryRecord:
    try:
        record = AccessoryRecord.model_validate(raw)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise MalformedRecordError(key, errors) from exc

    if record.record_id != key:
        raise MalformedRecordError(
            key, f"stored under a different id {record.record_id!r}"
        )
    if record.record_id != make_record_id(record.unique_id):
        raise MalformedRecordError(key, "id does not match the device unique id")
    return record


class Database:
    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._physical_dir = data_dir / PHYSICAL_DIR
        self._accessories_path = data_dir / ACCESSORIES_FILE
        self._current_scan_path = self._physical_dir / CURRENT_SCAN_FILE

    @property
    def path(self) -> Path:
        return self._data_dir

    @property
    def accessories_path(self) -> Path:
        return self._accessories_path

    @property
    def current_scan_path(self) -> Path:
        return self._current_scan_path

    def ensure_dirs(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._physical_dir.mkdir(parents=True, exist_ok=True)

    def load_accessories(self) -> LoadedAccessories:
        """Load the accessory cache, setting aside entries that fail validation."""
        loaded = LoadedAccessories()
        if not self._accessories_path.exists():
            return loaded

        try:
            with self._accessories_path.open("r") as handle:
                data = json.load(handle) or {}
        except json.JSONDecodeError as exc:
            raise ValueError(
                f"Invalid JSON in accessories file: {self._accessories_path}\n{exc}"
            ) from exc

        accessories = data.get("accessories", {}) if isinstance(data, dict) else None
        if not isinstance(accessories, dict):
            raise ValueError(
                f"Invalid accessories file: {self._accessories_path}\n"
                "expected an 'accessories' table"
            )

        for key, raw in accessories.items():
            try:
                loaded.records.append(_parse_record(key, raw))
            except MalformedRecordError as exc:
                logger.error("Discarding cached accessory: %s", exc)
                loaded.malformed.append(exc)
        return loaded

    def save_accessories(self, records: list[AccessoryRecord]) -> None:
        self.ensure_dirs()
        payload = {
            "accessories": {
                record.record_id: record.model_dump(mode="json")
                for record in sorted(records, key=lambda item: item.record_id)
            }
        }
        tmp_path = self._accessories_path.with_suffix(".json.tmp")
        with tmp_path.open("w") as handle:
            json.dump(payload, handle, indent=2)
        tmp_path.replace(self._accessories_path)

    def rename_accessory(self, record_id: str, display_name: str) -> bool:
        loaded = self.load_accessories()
        for record in loaded.records:
            if record.record_id == record_id:
                record.display_name = display_name
                self.save_accessories(loaded.records)
                return True
        return False

    def save_scan(
        self, devices: list[DiscoveredDevice], broadcast_address: str
    ) -> None:
        scan = ScanSnapshot(
            scan_timestamp=datetime.now(timezone.utc),
            broadcast_address=broadcast_address,
            devices=devices,
        )

        self._physical_dir.mkdir(parents=True, exist_ok=True)
        with self._current_scan_path.open("w") as handle:
            json.dump(scan.model_dump(mode="json"), handle, indent=2)

    def load_current_scan(self) -> ScanSnapshot | None:
        if not self._current_scan_path.exists():
            return None

        with self._current_scan_path.open("r") as handle:
            data = json.load(handle)

        return ScanSnapshot.model_validate(data)

    def init(self, force: bool = False) -> bool:
        existed = self._accessories_path.exists()
        self.ensure_dirs()
        if force or not existed:
            self.save_accessories([])
        return force or not existed
