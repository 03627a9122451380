from __future__ import annotations

import asyncio
import logging

from lightbridge.config import Settings
from lightbridge.core.bridge import BridgeAdapter, LocalBridge
from lightbridge.core.capabilities import Capability, bind
from lightbridge.core.controller import Controller
from lightbridge.core.discovery import Discovery
from lightbridge.core.freshness import FreshnessPolicy
from lightbridge.core.policy import DevicePolicy
from lightbridge.core.reconciler import (
    ReconcileResult,
    ReconciliationContext,
    Reconciler,
)
from lightbridge.errors import BindingError, DiscoveryError
from lightbridge.models import AccessoryRecord, DiscoveredDevice
from lightbridge.storage import Database

logger = logging.getLogger(__name__)


class LightingPlatform:
    """Owns the reconciliation context for one process lifetime.

    ``start`` loads the accessory cache into a fresh context, ``rescan`` runs
    one guarded discovery and reconciliation pass, and ``stop`` writes the
    surviving records back.
    """

    def __init__(
        self,
        settings: Settings,
        database: Database,
        discovery: Discovery | None = None,
        bridge: BridgeAdapter | None = None,
    ) -> None:
        self.settings = settings
        self.database = database
        self.discovery = discovery or Discovery(settings.scanning)
        self.bridge: BridgeAdapter = bridge or LocalBridge(database)
        self.policy = DevicePolicy.from_config(settings.device_management)
        self.freshness = FreshnessPolicy.from_config(settings.pruning)
        self.capabilities: dict[str, Capability] = {}
        self.context: ReconciliationContext | None = None
        self._reconciler: Reconciler | None = None
        self._in_flight = False

    @property
    def is_running(self) -> bool:
        return self.context is not None

    @property
    def scan_in_flight(self) -> bool:
        return self._in_flight

    def start(self) -> ReconciliationContext:
        loaded = self.database.load_accessories()
        self.context = ReconciliationContext.from_records(loaded.records)
        self._reconciler = Reconciler(self.context, self.policy, self.freshness)

        if isinstance(self.bridge, LocalBridge):
            self.bridge.restore(loaded.records)
        if loaded.malformed:
            logger.warning(
                "Dropped %d malformed cached accessory(ies)", len(loaded.malformed)
            )
            self.database.save_accessories(loaded.records)

        for record in loaded.records:
            for controller in self.discovery.create_custom_controllers(
                record.proto_device, record.device_api
            ):
                self._bind(record, controller)

        logger.info("Loaded %d cached accessory(ies)", len(loaded.records))
        return self.context

    def stop(self) -> None:
        if self.context is None:
            return
        records = self.context.records()
        self.database.save_accessories(records)
        logger.info("Saved %d accessory(ies)", len(records))
        self.context = None
        self._reconciler = None
        self.capabilities.clear()

    async def rescan(self) -> ReconcileResult | None:
        """Run one discovery pass. Returns ``None`` when the pass was skipped."""
        if self._reconciler is None:
            raise RuntimeError("Platform is not started")
        if self._in_flight:
            logger.warning("Rescan requested while a scan is in progress, skipping")
            return None

        self._in_flight = True
        try:
            try:
                discovered = await self.discovery.discover_controllers()
            except DiscoveryError as exc:
                logger.error("Discovery failed, keeping previous state: %s", exc)
                return None

            result = self._reconciler.reconcile(discovered)
            self.apply(result)
            self.database.save_scan(
                [
                    DiscoveredDevice(
                        proto_device=controller.identity,
                        device_api=controller.capability,
                    )
                    for controller in discovered.values()
                ],
                self.settings.scanning.broadcast_address,
            )
            return result
        finally:
            self._in_flight = False

    def apply(self, result: ReconcileResult) -> None:
        for record in [*result.to_register, *result.to_update]:
            self._bind(record, result.controllers[record.record_id])

        self.bridge.register_new(result.to_register)
        self.bridge.update_existing(result.to_update)
        for reason, records in result.prune_reasons().items():
            for record in records:
                self.capabilities.pop(record.record_id, None)
            self.bridge.unregister(records, reason)

    async def run(self, interval: float | None = None) -> None:
        """Rescan periodically until cancelled."""
        delay = interval or self.settings.scanning.rescan_interval
        if not self.is_running:
            self.start()
        try:
            while True:
                await self.rescan()
                await asyncio.sleep(delay)
        finally:
            self.stop()

    def _bind(self, record: AccessoryRecord, controller: Controller) -> None:
        try:
            self.capabilities[record.record_id] = bind(
                record.device_api.description,
                self.bridge,
                record,
                self.settings,
                controller,
            )
        except BindingError as exc:
            self.capabilities.pop(record.record_id, None)
            logger.error(
                "Cannot bind '%s' (%s at %s, model 0x%02X): %s",
                record.display_name,
                record.unique_id,
                record.proto_device.ip_address,
                record.proto_device.model_number,
                exc,
            )
