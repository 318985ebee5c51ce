"""Asset identity reconciliation & usage-timeline engine.

Merges a telemetry (analytics) device catalog with a governance catalog
into one canonical record per device, and derives per-address usage
periods from raw IP/MAC observation history.

CONTRACT:
- Catalogs are explicit inputs; no catalog is held in module-level state
- Every pass builds a new immutable snapshot; inputs are never mutated
- Unmatched or malformed data degrades to placeholders, never exceptions
"""

from __future__ import annotations

from asset_identity.api import assets_bp
from asset_identity.config import ReconcileConfig, RiskThresholds
from asset_identity.engine import ReconciliationEngine, ReconciliationResult, reconcile
from asset_identity.history import build_usage_data
from asset_identity.matcher import IdentityMatcher, MatchConflict
from asset_identity.merger import merge, synthesize_governance
from asset_identity.models import (
    AddressUsage,
    AnalyticsAsset,
    AssetGroup,
    GovernanceAsset,
    HistoryItem,
    TrustEntry,
    UnifiedAsset,
    UsagePeriod,
)

__version__ = "1.0.0"

__all__ = [
    "AddressUsage",
    "AnalyticsAsset",
    "AssetGroup",
    "GovernanceAsset",
    "HistoryItem",
    "IdentityMatcher",
    "MatchConflict",
    "ReconcileConfig",
    "ReconciliationEngine",
    "ReconciliationResult",
    "RiskThresholds",
    "TrustEntry",
    "UnifiedAsset",
    "UsagePeriod",
    "assets_bp",
    "build_usage_data",
    "merge",
    "reconcile",
    "synthesize_governance",
]
