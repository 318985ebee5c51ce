"""Asset lifecycle helpers: timestamp parsing, stale/new detection and KPIs.

Nothing here reads the wall clock; callers pass ``now`` explicitly so the
results are reproducible.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from asset_identity.config import ReconcileConfig, RiskThresholds
    from asset_identity.models import UnifiedAsset

SECONDS_PER_DAY = 24 * 60 * 60


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse ``2024-01-15T10:30:00Z`` or ``2024-01-15 10:30:00``.

    Naive values are taken as UTC.  Returns ``None`` for empty or
    unparsable input.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _aware(now: datetime) -> datetime:
    return now if now.tzinfo is not None else now.replace(tzinfo=timezone.utc)


def days_since(value: str | None, now: datetime) -> int | None:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return int((_aware(now) - parsed).total_seconds() // SECONDS_PER_DAY)


@dataclass(frozen=True)
class StaleInfo:
    is_stale: bool
    stale_days: int | None


def stale_info(last_seen: str | None, stale_after_days: int, now: datetime) -> StaleInfo:
    days = days_since(last_seen, now)
    if days is None:
        return StaleInfo(is_stale=False, stale_days=None)
    return StaleInfo(is_stale=days > stale_after_days, stale_days=days)


def is_new_asset(first_seen: str | None, highlight_days: int, now: datetime) -> bool:
    parsed = parse_timestamp(first_seen)
    if parsed is None:
        return False
    age_days = (_aware(now) - parsed).total_seconds() / SECONDS_PER_DAY
    return age_days <= highlight_days


def risk_level(score: float, thresholds: RiskThresholds) -> str:
    if score >= thresholds.critical:
        return "critical"
    if score >= thresholds.high:
        return "high"
    return "normal"


def summarise(assets: Iterable[UnifiedAsset], config: ReconcileConfig, now: datetime) -> dict[str, Any]:
    """Dashboard KPIs over a unified catalog."""
    from asset_identity.history import build_usage_data

    thresholds = config.risk.normalised()
    stats = {
        "total": 0,
        "stale": 0,
        "new": 0,
        "high_risk": 0,
        "critical_risk": 0,
        "reallocated_ips": 0,
    }
    for asset in assets:
        stats["total"] += 1
        if stale_info(asset.last_seen, config.stale_after_days, now).is_stale:
            stats["stale"] += 1
        if is_new_asset(asset.first_seen, config.new_asset_highlight_days, now):
            stats["new"] += 1

        level = risk_level(asset.threat_score, thresholds)
        if level == "critical":
            stats["critical_risk"] += 1
        elif level == "high":
            stats["high_risk"] += 1

        usage = build_usage_data(asset.ip_history, config.gap_threshold_days)
        stats["reallocated_ips"] += sum(1 for u in usage if u.reallocation_count)
    return stats
