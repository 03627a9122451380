from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from lightbridge.config import DeviceManagementConfig, PolicyMode


@dataclass(frozen=True)
class DevicePolicy:
    """Allow/deny decision for discovered unique ids."""

    mode: PolicyMode = "blacklist"
    unique_ids: frozenset[str] = frozenset()

    @classmethod
    def from_config(cls, config: DeviceManagementConfig) -> DevicePolicy:
        return cls(
            mode=config.blacklist_or_whitelist,
            unique_ids=frozenset(config.blacklisted_unique_ids),
        )

    @classmethod
    def whitelist(cls, unique_ids: Iterable[str]) -> DevicePolicy:
        return cls(mode="whitelist", unique_ids=frozenset(unique_ids))

    @classmethod
    def blacklist(cls, unique_ids: Iterable[str]) -> DevicePolicy:
        return cls(mode="blacklist", unique_ids=frozenset(unique_ids))

    def is_allowed(self, unique_id: str) -> bool:
        listed = unique_id in self.unique_ids
        if self.mode == "whitelist":
            return listed
        return not listed
