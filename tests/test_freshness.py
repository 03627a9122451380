from __future__ import annotations

import pytest

from lightbridge.core import FreshnessPolicy
from lightbridge.core.freshness import REASON_MARKED, REASON_STALE


def test_record_without_marker_or_threshold_is_fresh(make_record):
    policy = FreshnessPolicy()
    result = policy.check(make_record("A", restarts_since_seen=50))

    assert result.fresh is True
    assert result.reason is None


@pytest.mark.parametrize("name", ["delete", "DELETE", "Kitchen (Delete me)", "undeleted"])
def test_deletion_marker_matches_any_case(make_record, name):
    result = FreshnessPolicy().check(make_record("A", display_name=name))

    assert result.fresh is False
    assert result.reason == REASON_MARKED


def test_threshold_reached_is_stale(make_record):
    policy = FreshnessPolicy(prune_restarts=3)

    assert policy.check(make_record("A", restarts_since_seen=3)).reason == REASON_STALE
    assert policy.check(make_record("A", restarts_since_seen=4)).fresh is False
    assert policy.check(make_record("A", restarts_since_seen=2)).fresh is True


def test_marker_takes_precedence_over_threshold(make_record):
    policy = FreshnessPolicy(prune_restarts=1)
    result = policy.check(make_record("A", display_name="delete", restarts_since_seen=5))

    assert result.reason == REASON_MARKED
