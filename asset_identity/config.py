"""Reconciliation engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta


def _clamp(value: int, low: int, high: int) -> int:
    return min(high, max(low, value))


@dataclass
class RiskThresholds:
    """Score thresholds used for the high/critical risk KPIs."""

    high: int = 60
    critical: int = 80

    def normalised(self) -> RiskThresholds:
        """Clamp into range and keep ``critical`` strictly above ``high``."""
        high = _clamp(self.high, 1, 99)
        critical = _clamp(self.critical, 2, 100)
        if critical <= high:
            critical = _clamp(high + 1, 2, 100)
            if critical <= high:
                high = _clamp(critical - 1, 1, 99)
        return RiskThresholds(high=high, critical=critical)


@dataclass
class ReconcileConfig:
    """Tunables for matching, history segmentation and lifecycle KPIs."""

    # History segmentation: gaps longer than this split a usage period
    gap_threshold_days: int = 14

    # Skip analytics records already claimed by another governance asset
    exclusive_matching: bool = False

    # Group assigned to assets synthesized from analytics-only records
    unassigned_group_id: str = "grp-unassigned"

    # Lifecycle
    stale_after_days: int = 30
    new_asset_highlight_days: int = 7

    risk: RiskThresholds = field(default_factory=RiskThresholds)

    @classmethod
    def from_env(cls) -> ReconcileConfig:
        """Load configuration from environment variables."""

        def _bool(key: str, default: bool = False) -> bool:
            return os.getenv(key, str(default)).lower() in ("true", "1", "yes")

        def _int(key: str, default: int) -> int:
            try:
                return int(os.getenv(key, str(default)))
            except ValueError:
                return default

        def _days(key: str, default: int) -> int:
            value = _int(key, default)
            return value if 0 <= value <= timedelta.max.days else default

        return cls(
            gap_threshold_days=_days("ASSET_GAP_THRESHOLD_DAYS", 14),
            exclusive_matching=_bool("ASSET_EXCLUSIVE_MATCHING"),
            unassigned_group_id=os.getenv("ASSET_UNASSIGNED_GROUP_ID", "grp-unassigned"),
            stale_after_days=_days("ASSET_STALE_AFTER_DAYS", 30),
            new_asset_highlight_days=_days("ASSET_NEW_HIGHLIGHT_DAYS", 7),
            risk=RiskThresholds(
                high=_int("ASSET_HIGH_RISK_THRESHOLD", 60),
                critical=_int("ASSET_CRITICAL_RISK_THRESHOLD", 80),
            ).normalised(),
        )
