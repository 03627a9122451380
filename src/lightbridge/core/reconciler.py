"""Reconciliation of a discovery snapshot against known accessory records.

A pass walks the discovered controllers once and sorts each into one of:

* a record loaded from disk that reappeared: updated, or pruned when it is
  blocked by policy or fails the freshness check;
* a device never seen before: registered as a new record, unless blocked;
* a device already active in this process: refreshed in place.

Records that were not seen are offline. Their ``restarts_since_seen`` counter
is bumped and they wait in the disk registry; staleness is only judged when a
device comes back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from lightbridge.core.controller import Controller
from lightbridge.core.freshness import FreshnessPolicy
from lightbridge.core.identity import record_id as make_record_id
from lightbridge.core.policy import DevicePolicy
from lightbridge.models import AccessoryRecord

logger = logging.getLogger(__name__)

REASON_POLICY = "blocked by device policy"


class AccessoryState(str, Enum):
    UNKNOWN = "unknown"
    NEW = "new"
    ACTIVE = "active"
    OFFLINE = "offline"
    PRUNED = "pruned"


@dataclass(frozen=True)
class PruneAction:
    record: AccessoryRecord
    reason: str


@dataclass
class ReconcileResult:
    to_register: list[AccessoryRecord] = field(default_factory=list)
    to_update: list[AccessoryRecord] = field(default_factory=list)
    to_prune: list[PruneAction] = field(default_factory=list)
    controllers: dict[str, Controller] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.to_register or self.to_update or self.to_prune)

    def prune_reasons(self) -> dict[str, list[AccessoryRecord]]:
        grouped: dict[str, list[AccessoryRecord]] = {}
        for action in self.to_prune:
            grouped.setdefault(action.reason, []).append(action.record)
        return grouped


@dataclass
class ReconciliationContext:
    """Registry state shared by every pass of one platform lifetime."""

    disk_registry: dict[str, AccessoryRecord] = field(default_factory=dict)
    active_registry: dict[str, AccessoryRecord] = field(default_factory=dict)
    retired: set[str] = field(default_factory=set)

    @classmethod
    def from_records(cls, records: list[AccessoryRecord]) -> ReconciliationContext:
        return cls(disk_registry={record.record_id: record for record in records})

    def state_of(self, record_id: str) -> AccessoryState:
        if record_id in self.retired:
            return AccessoryState.PRUNED
        if record_id in self.active_registry:
            return AccessoryState.ACTIVE
        if record_id in self.disk_registry:
            return AccessoryState.OFFLINE
        return AccessoryState.UNKNOWN

    def offline_records(self) -> list[AccessoryRecord]:
        return list(self.disk_registry.values())

    def records(self) -> list[AccessoryRecord]:
        """Every record that should survive a restart."""
        merged = {**self.disk_registry, **self.active_registry}
        return [merged[key] for key in sorted(merged)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Reconciler:
    def __init__(
        self,
        context: ReconciliationContext,
        policy: DevicePolicy,
        freshness: FreshnessPolicy,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.context = context
        self.policy = policy
        self.freshness = freshness
        self._clock = clock

    def reconcile(self, discovered: Mapping[str, Controller]) -> ReconcileResult:
        result = ReconcileResult()
        seen: set[str] = set()
        now = self._clock()

        for unique_id, controller in discovered.items():
            key = make_record_id(unique_id)
            seen.add(key)

            if key in self.context.retired:
                logger.debug("Ignoring pruned device %s", unique_id)
            elif key in self.context.disk_registry:
                self._reappeared(key, unique_id, controller, now, result)
            elif key not in self.context.active_registry:
                self._discovered_new(key, unique_id, controller, now, result)
            else:
                self._refresh_active(key, controller, now, result)

        self._mark_offline(seen)
        return result

    def _reappeared(
        self,
        key: str,
        unique_id: str,
        controller: Controller,
        now: datetime,
        result: ReconcileResult,
    ) -> None:
        record = self.context.disk_registry.pop(key)

        if not self.policy.is_allowed(unique_id):
            logger.warning(
                "Known device %s is blacklisted or not whitelisted, removing",
                unique_id,
            )
            self._prune(record, REASON_POLICY, result)
            return

        freshness = self.freshness.check(record)
        if not freshness.fresh:
            reason = freshness.reason or "not fresh"
            logger.info(
                "Pruning '%s' (%s): %s", record.display_name, unique_id, reason
            )
            self._prune(record, reason, result)
            return

        if record.restarts_since_seen:
            logger.info(
                "Device '%s' (%s) is back after %d missed scan(s)",
                record.display_name,
                unique_id,
                record.restarts_since_seen,
            )
        self._merge(record, controller)
        record.restarts_since_seen = 0
        record.last_seen = now
        self.context.active_registry[key] = record
        result.to_update.append(record)
        result.controllers[key] = controller

    def _discovered_new(
        self,
        key: str,
        unique_id: str,
        controller: Controller,
        now: datetime,
        result: ReconcileResult,
    ) -> None:
        if not self.policy.is_allowed(unique_id):
            logger.warning(
                "New device %s is blacklisted or not whitelisted, skipping",
                unique_id,
            )
            return

        info = controller.cached_device_information()
        record = AccessoryRecord(
            record_id=key,
            display_name=info.device_api.description,
            proto_device=info.proto_device,
            device_api=info.device_api,
            restarts_since_seen=0,
            last_seen=now,
        )
        logger.info(
            "Registering new accessory '%s' (%s at %s, model 0x%02X)",
            record.display_name,
            unique_id,
            info.proto_device.ip_address,
            info.proto_device.model_number,
        )
        self.context.active_registry[key] = record
        result.to_register.append(record)
        result.controllers[key] = controller

    def _refresh_active(
        self,
        key: str,
        controller: Controller,
        now: datetime,
        result: ReconcileResult,
    ) -> None:
        record = self.context.active_registry[key]
        record.last_seen = now
        if self._merge(record, controller):
            result.to_update.append(record)
            result.controllers[key] = controller

    def _merge(self, record: AccessoryRecord, controller: Controller) -> bool:
        info = controller.cached_device_information()
        changed = (
            record.proto_device != info.proto_device
            or record.device_api != info.device_api
        )
        if record.proto_device.ip_address != info.proto_device.ip_address:
            logger.info(
                "Device %s moved from %s to %s",
                record.unique_id,
                record.proto_device.ip_address,
                info.proto_device.ip_address,
            )
        record.proto_device = info.proto_device
        record.device_api = info.device_api
        return changed

    def _prune(
        self, record: AccessoryRecord, reason: str, result: ReconcileResult
    ) -> None:
        self.context.retired.add(record.record_id)
        result.to_prune.append(PruneAction(record=record, reason=reason))

    def _mark_offline(self, seen: set[str]) -> None:
        for key in [key for key in self.context.active_registry if key not in seen]:
            self.context.disk_registry[key] = self.context.active_registry.pop(key)

        for record in self.context.disk_registry.values():
            record.restarts_since_seen += 1
            logger.warning(
                "Device '%s' (%s, last at %s) was not found, missed %d scan(s)",
                record.display_name,
                record.unique_id,
                record.proto_device.ip_address,
                record.restarts_since_seen,
            )
