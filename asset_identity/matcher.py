"""Identity matcher — links governance records to analytics records.

A governance asset matches the first analytics record (catalog order)
whose hostname or name equals the governance hostname (case-insensitive,
trimmed), or whose single IP is one of the governance IPv4 addresses.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from asset_identity.classifier import normalize
from asset_identity.models import AnalyticsAsset, GovernanceAsset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchConflict:
    """An analytics record claimed by more than one governance asset."""

    analytics_id: str
    claimed_by: str
    governance_id: str


def is_candidate(governance: GovernanceAsset, candidate: AnalyticsAsset) -> bool:
    hostname = normalize(governance.identity.hostname)
    if normalize(candidate.hostname) == hostname:
        return True
    if normalize(candidate.name) == hostname:
        return True
    return any(ip == candidate.ip for ip in governance.identity.ipv4_addresses)


def match(governance: GovernanceAsset, analytics: Sequence[AnalyticsAsset]) -> AnalyticsAsset | None:
    """Return the first analytics record matching *governance*, if any."""
    for candidate in analytics:
        if is_candidate(governance, candidate):
            return candidate
    return None


class IdentityMatcher:
    """Matches governance assets against one fixed analytics snapshot.

    Every matched analytics id is recorded in ``consumed`` so the driver can
    promote the rest.  A record matched by a second governance asset is
    reported in ``conflicts``; with ``exclusive=True`` it is skipped instead
    and the scan moves on to the next candidate.
    """

    def __init__(self, analytics: Sequence[AnalyticsAsset], *, exclusive: bool = False) -> None:
        self.analytics = tuple(analytics)
        self.exclusive = exclusive
        self.consumed: dict[str, str] = {}  # analytics id -> governance id
        self.conflicts: list[MatchConflict] = []

    def match(self, governance: GovernanceAsset) -> AnalyticsAsset | None:
        for candidate in self.analytics:
            if not is_candidate(governance, candidate):
                continue

            claimed_by = self.consumed.get(candidate.id)
            if claimed_by is not None and claimed_by != governance.id:
                conflict = MatchConflict(
                    analytics_id=candidate.id,
                    claimed_by=claimed_by,
                    governance_id=governance.id,
                )
                self.conflicts.append(conflict)
                logger.warning(
                    "Analytics asset %s already matched to %s; %s also matches it%s",
                    candidate.id,
                    claimed_by,
                    governance.id,
                    " (skipped)" if self.exclusive else "",
                )
                if self.exclusive:
                    continue
                return candidate

            self.consumed[candidate.id] = governance.id
            return candidate
        return None

    def is_consumed(self, analytics_id: str) -> bool:
        return analytics_id in self.consumed
