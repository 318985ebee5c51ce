"""Reconciliation engine — builds the unified asset catalog.

Responsibilities:
1. Match every governance asset against one analytics snapshot.
2. Merge each governance asset with its match (or a fallback record).
3. Promote analytics assets nobody matched into synthesized governance
   records so no telemetry-only device is lost.
4. Serve per-asset address usage timelines on demand.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from asset_identity.config import ReconcileConfig
from asset_identity.history import build_usage_data
from asset_identity.matcher import IdentityMatcher, MatchConflict
from asset_identity.merger import group_name_map, merge, synthesize_governance

if TYPE_CHECKING:
    from asset_identity.models import (
        AddressUsage,
        AnalyticsAsset,
        AssetGroup,
        GovernanceAsset,
        TrustEntry,
        UnifiedAsset,
    )

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationResult:
    assets: list[UnifiedAsset]
    stats: dict[str, int] = field(default_factory=dict)
    conflicts: list[MatchConflict] = field(default_factory=list)


class ReconciliationEngine:
    """Runs full reconciliation passes over immutable catalog snapshots."""

    def __init__(self, config: ReconcileConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        governance: Sequence[GovernanceAsset],
        analytics: Sequence[AnalyticsAsset],
        groups: Iterable[AssetGroup] = (),
        trust_entries: Iterable[TrustEntry] = (),
    ) -> ReconciliationResult:
        """Reconcile the catalogs once.

        Governance-derived assets come first (governance order), followed by
        assets synthesized from unmatched analytics records (analytics order).
        """
        group_names = group_name_map(groups)
        trust = tuple(trust_entries)
        matcher = IdentityMatcher(analytics, exclusive=self.config.exclusive_matching)
        stats: dict[str, int] = {
            "governance": len(governance),
            "analytics": len(analytics),
            "matched": 0,
            "fallback": 0,
            "synthesized": 0,
            "conflicts": 0,
        }

        assets: list[UnifiedAsset] = []
        for gov in governance:
            found = matcher.match(gov)
            if found is None:
                stats["fallback"] += 1
            else:
                stats["matched"] += 1
            assets.append(merge(gov, found, group_names, trust))

        for record in analytics:
            if matcher.is_consumed(record.id):
                continue
            synthesized = synthesize_governance(record, self.config.unassigned_group_id)
            assets.append(merge(synthesized, record, group_names, trust))
            stats["synthesized"] += 1

        stats["conflicts"] = len(matcher.conflicts)
        logger.info(
            "Reconciled %d assets (matched=%d fallback=%d synthesized=%d conflicts=%d)",
            len(assets),
            stats["matched"],
            stats["fallback"],
            stats["synthesized"],
            stats["conflicts"],
        )
        return ReconciliationResult(assets=assets, stats=stats, conflicts=list(matcher.conflicts))

    def address_usage(self, asset: UnifiedAsset, kind: Literal["ip", "mac"] = "ip") -> list[AddressUsage]:
        """Usage timeline for an asset's IP or MAC history."""
        if kind == "ip":
            history = asset.ip_history
        elif kind == "mac":
            history = asset.mac_history
        else:
            raise ValueError(f"Unknown history kind: {kind}")
        return build_usage_data(history, self.config.gap_threshold_days)


def reconcile(
    governance: Sequence[GovernanceAsset],
    analytics: Sequence[AnalyticsAsset],
    groups: Iterable[AssetGroup] = (),
    trust_entries: Iterable[TrustEntry] = (),
    config: ReconcileConfig | None = None,
) -> list[UnifiedAsset]:
    """Convenience wrapper returning only the unified asset list."""
    engine = ReconciliationEngine(config or ReconcileConfig())
    return engine.run(governance, analytics, groups, trust_entries).assets
