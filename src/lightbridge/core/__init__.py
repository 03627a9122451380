from __future__ import annotations

from .capabilities import CAPABILITY_TYPES, Capability, bind, describe_model
from .controller import Controller, query_state
from .discovery import Discovery
from .freshness import Freshness, FreshnessPolicy
from .identity import record_id
from .policy import DevicePolicy
from .reconciler import (
    AccessoryState,
    PruneAction,
    ReconcileResult,
    ReconciliationContext,
    Reconciler,
)

__all__ = [
    "CAPABILITY_TYPES",
    "AccessoryState",
    "Capability",
    "Controller",
    "DevicePolicy",
    "Discovery",
    "Freshness",
    "FreshnessPolicy",
    "PruneAction",
    "ReconcileResult",
    "ReconciliationContext",
    "Reconciler",
    "bind",
    "describe_model",
    "query_state",
    "record_id",
]
