"""History segmenter — derives usage periods per address.

Observations of the same address are grouped (first-seen address order is
kept), sorted by time, and split into periods wherever the gap between
consecutive observations exceeds the threshold.  An address with more than
one period was re-allocated in between.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from datetime import datetime, timedelta

from asset_identity.lifecycle import parse_timestamp
from asset_identity.models import AddressUsage, HistoryItem, UsagePeriod

logger = logging.getLogger(__name__)

DEFAULT_GAP_THRESHOLD_DAYS = 14


def segment(timestamps: list[tuple[datetime, str]], gap: timedelta) -> list[UsagePeriod]:
    """Split ``(parsed, original)`` pairs into periods.  *timestamps* must be non-empty."""
    ordered = sorted(timestamps, key=lambda pair: pair[0])
    periods: list[UsagePeriod] = []

    start, end = ordered[0], ordered[0]
    for current in ordered[1:]:
        if current[0] - end[0] > gap:
            periods.append(UsagePeriod(start=start[1], end=end[1]))
            start = current
        end = current
    periods.append(UsagePeriod(start=start[1], end=end[1]))
    return periods


def build_usage_data(
    history: Iterable[HistoryItem],
    gap_threshold_days: float = DEFAULT_GAP_THRESHOLD_DAYS,
) -> list[AddressUsage]:
    """Group *history* by address and derive usage periods for each."""
    # Range checks come first: math.isfinite overflows on huge ints
    if gap_threshold_days < 0:
        raise ValueError(f"gap_threshold_days must be >= 0, got {gap_threshold_days}")
    if gap_threshold_days > timedelta.max.days or not math.isfinite(gap_threshold_days):
        raise ValueError(f"gap_threshold_days must be <= {timedelta.max.days}, got {gap_threshold_days}")
    gap = timedelta(days=gap_threshold_days)

    groups: dict[str, list[tuple[datetime, str]]] = {}
    current: dict[str, bool] = {}
    for item in history:
        stamps = groups.setdefault(item.value, [])
        current[item.value] = current.get(item.value, False) or item.is_current

        parsed = parse_timestamp(item.timestamp)
        if parsed is None:
            logger.warning("Skipping unparsable timestamp %r for address %s", item.timestamp, item.value)
            continue
        stamps.append((parsed, item.timestamp))

    usage: list[AddressUsage] = []
    for address, stamps in groups.items():
        if not stamps:
            continue
        usage.append(
            AddressUsage(
                address=address,
                is_current=current[address],
                periods=segment(stamps, gap),
            ),
        )
    return usage
