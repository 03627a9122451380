from __future__ import annotations

from lightbridge.config import DeviceManagementConfig
from lightbridge.core import DevicePolicy


def test_whitelist_allows_only_listed():
    policy = DevicePolicy.whitelist(["A"])

    assert policy.is_allowed("A") is True
    assert policy.is_allowed("B") is False


def test_blacklist_rejects_only_listed():
    policy = DevicePolicy.blacklist(["A"])

    assert policy.is_allowed("A") is False
    assert policy.is_allowed("B") is True


def test_default_policy_allows_everything():
    policy = DevicePolicy()

    assert policy.mode == "blacklist"
    assert policy.is_allowed("ACCF23ABCDEF") is True


def test_policy_from_config():
    config = DeviceManagementConfig(
        blacklisted_unique_ids=("ACCF23000001",),
        blacklist_or_whitelist="whitelist",
    )
    policy = DevicePolicy.from_config(config)

    assert policy.is_allowed("ACCF23000001") is True
    assert policy.is_allowed("ACCF23000002") is False
