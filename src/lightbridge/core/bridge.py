from __future__ import annotations

import logging
from typing import Protocol

from lightbridge.models import AccessoryRecord
from lightbridge.storage import Database

logger = logging.getLogger(__name__)


class BridgeAdapter(Protocol):
    def register_new(self, records: list[AccessoryRecord]) -> None: ...

    def update_existing(self, records: list[AccessoryRecord]) -> None: ...

    def unregister(self, records: list[AccessoryRecord], reason: str) -> None: ...


class LocalBridge:
    """Host registry kept in memory and mirrored to the accessory cache."""

    def __init__(self, database: Database) -> None:
        self.database = database
        self.accessories: dict[str, AccessoryRecord] = {}

    def restore(self, records: list[AccessoryRecord]) -> None:
        """Adopt cached records at startup, before any scan ran."""
        for record in records:
            self.accessories[record.record_id] = record

    def register_new(self, records: list[AccessoryRecord]) -> None:
        if not records:
            return
        for record in records:
            self.accessories[record.record_id] = record
        logger.info("Registered %d new accessory(ies)", len(records))
        self._persist()

    def update_existing(self, records: list[AccessoryRecord]) -> None:
        if not records:
            return
        for record in records:
            if record.record_id not in self.accessories:
                logger.debug("Updating unregistered accessory %s", record.record_id)
            self.accessories[record.record_id] = record
        logger.info("Updated %d existing accessory(ies)", len(records))
        self._persist()

    def unregister(self, records: list[AccessoryRecord], reason: str) -> None:
        if not records:
            return
        for record in records:
            self.accessories.pop(record.record_id, None)
            logger.warning(
                "Unregistered '%s' (%s): %s",
                record.display_name,
                record.unique_id,
                reason,
            )
        self._persist()

    def _persist(self) -> None:
        self.database.save_accessories(list(self.accessories.values()))
