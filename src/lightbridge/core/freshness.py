from __future__ import annotations

from dataclasses import dataclass

from lightbridge.config import PruningConfig
from lightbridge.models import AccessoryRecord

DELETION_MARKER = "delete"

REASON_MARKED = "marked for deletion"
REASON_STALE = "stale beyond restart threshold"


@dataclass(frozen=True)
class Freshness:
    fresh: bool
    reason: str | None = None


FRESH = Freshness(fresh=True)


@dataclass(frozen=True)
class FreshnessPolicy:
    """Decides whether a known record is kept or pruned when it reappears.

    A display name containing the deletion marker (any case) always prunes.
    With ``prune_restarts`` set, a record absent for at least that many passes
    is pruned as well.
    """

    prune_restarts: int | None = None
    deletion_marker: str = DELETION_MARKER

    @classmethod
    def from_config(cls, config: PruningConfig) -> FreshnessPolicy:
        return cls(prune_restarts=config.prune_restarts)

    def check(self, record: AccessoryRecord) -> Freshness:
        if self.deletion_marker.lower() in record.display_name.lower():
            return Freshness(fresh=False, reason=REASON_MARKED)

        if (
            self.prune_restarts is not None
            and record.restarts_since_seen >= self.prune_restarts
        ):
            return Freshness(fresh=False, reason=REASON_STALE)

        return FRESH
