"""Record merger — builds one ``UnifiedAsset`` from governance + analytics.

Field precedence:

=============================  ===============================================
Field group                    Source
=============================  ===============================================
hostname, ip, mac, owner       governance, else analytics (or fallback)
name                           analytics, else governance hostname
scores, histories, tools       analytics (or fallback)
device/role/category/status    analytics free text, else governance enum label
first/last seen                analytics, else normalised governance lifecycle
location, network              governance site/locality, else analytics
tags                           ordered case-insensitive union, analytics first
criticality, locality,         governance only
exposure, groups, lifecycle
trust list entries             trust catalog entries targeting the asset id
=============================  ===============================================

Every function here is pure: inputs are never mutated and outputs share no
mutable state with them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace

from asset_identity.classifier import (
    classify_criticality,
    classify_device_type,
    classify_locality,
    classify_role,
    is_private_address,
    normalize,
    normalize_timestamp,
    status_from_lifecycle,
    title_case,
)
from asset_identity.models import (
    AnalyticsAsset,
    AssetGroup,
    AssetIdentity,
    AssetLifecycle,
    AssetMetadata,
    Exposure,
    GovernanceAsset,
    HistoryItem,
    TrustEntry,
    TrustListEntry,
    UnifiedAsset,
)

logger = logging.getLogger(__name__)

UNASSIGNED_GROUP_ID = "grp-unassigned"
UNASSIGNED_OWNER = "Unassigned"
UNSPECIFIED_LOCATION = "Not specified"
NULL_IP = "0.0.0.0"
NULL_MAC = "00:00:00:00:00:00"

TRUSTED_ASSET_TYPES = ("asset", "scanner")


# ===================================================================
# Shape conversion
# ===================================================================
def synthesize_governance(
    analytics: AnalyticsAsset,
    unassigned_group_id: str = UNASSIGNED_GROUP_ID,
) -> GovernanceAsset:
    """Build a governance-shaped record for an analytics-only device."""
    has_public_ip = bool(analytics.ip) and not is_private_address(analytics.ip)
    logger.debug("Synthesizing governance record for analytics asset %s", analytics.id)
    return GovernanceAsset(
        id=f"asset-{analytics.id}",
        identity=AssetIdentity(
            hostname=analytics.hostname,
            fqdn=analytics.hostname,
            ipv4_addresses=[analytics.ip] if analytics.ip else [],
            ipv6_addresses=[],
            mac_addresses=[analytics.mac] if analytics.mac else [],
        ),
        type=classify_device_type(analytics.device_type),
        role=classify_role(analytics.role_tag),
        locality=classify_locality(analytics.network),
        criticality=classify_criticality(analytics.threat_score),
        exposure=Exposure(
            has_public_ip=has_public_ip,
            public_ips=[analytics.ip] if has_public_ip else [],
            has_inbound_internet=False,
            is_nated=False,
        ),
        metadata=AssetMetadata(
            owner=analytics.owner,
            business_unit="",
            site=analytics.location,
            environment="",
            tags=list(analytics.tags or []),
        ),
        lifecycle=AssetLifecycle(
            first_seen=analytics.first_seen,
            last_seen=analytics.last_seen,
            status="unknown",
            created_at=analytics.first_seen,
            updated_at=analytics.last_seen,
        ),
        group_ids=[unassigned_group_id],
    )


def _history_from_values(values: Sequence[str], timestamp: str) -> list[HistoryItem]:
    return [HistoryItem(value=v, timestamp=timestamp, is_current=i == 0) for i, v in enumerate(values)]


def build_fallback_asset(governance: GovernanceAsset) -> AnalyticsAsset:
    """Stand-in analytics record for a governance asset with no telemetry."""
    identity = governance.identity
    hostname = identity.hostname
    first_seen = normalize_timestamp(governance.lifecycle.first_seen)
    last_seen = normalize_timestamp(governance.lifecycle.last_seen)
    return AnalyticsAsset(
        id=governance.id,
        name=hostname,
        owner=governance.metadata.owner or UNASSIGNED_OWNER,
        ip=identity.ipv4_addresses[0] if identity.ipv4_addresses else NULL_IP,
        mac=identity.mac_addresses[0] if identity.mac_addresses else NULL_MAC,
        hostname=hostname,
        device_type=title_case(governance.type),
        role_tag=title_case(governance.role),
        status=status_from_lifecycle(governance.lifecycle.status),
        threat_score=0,
        confidence_score=0,
        blast_radius_score=0,
        first_seen=first_seen,
        last_seen=last_seen,
        category=governance.type,
        location=governance.metadata.site or UNSPECIFIED_LOCATION,
        network=governance.locality,
        interface_type="Ethernet" if governance.type == "network_device" else "Unknown",
        connection_type="unknown",
        ip_history=_history_from_values(identity.ipv4_addresses, first_seen),
        hostname_history=_history_from_values([hostname], first_seen),
        mac_history=_history_from_values(identity.mac_addresses, first_seen),
        management_tools=[],
        tags=[],
    )


# ===================================================================
# Field groups
# ===================================================================
@dataclass(frozen=True)
class IdentityFields:
    name: str
    hostname: str
    owner: str
    ip: str
    mac: str


def merge_identity(
    governance: GovernanceAsset,
    base: AnalyticsAsset,
    analytics: AnalyticsAsset | None,
) -> IdentityFields:
    identity = governance.identity
    return IdentityFields(
        name=(analytics.name if analytics else "") or identity.hostname,
        hostname=identity.hostname or base.hostname,
        owner=governance.metadata.owner or base.owner,
        ip=(identity.ipv4_addresses[0] if identity.ipv4_addresses else "") or base.ip,
        mac=(identity.mac_addresses[0] if identity.mac_addresses else "") or base.mac,
    )


@dataclass(frozen=True)
class ClassificationFields:
    device_type: str
    role_tag: str
    category: str
    status: str


def merge_classification(governance: GovernanceAsset, analytics: AnalyticsAsset | None) -> ClassificationFields:
    """Operational free text wins; otherwise label the governance enums."""
    a = analytics
    return ClassificationFields(
        device_type=(a.device_type if a else "") or title_case(governance.type),
        role_tag=(a.role_tag if a else "") or title_case(governance.role),
        category=(a.category if a else "") or governance.type,
        status=(a.status if a else "") or status_from_lifecycle(governance.lifecycle.status),
    )


def merge_timestamps(governance: GovernanceAsset, analytics: AnalyticsAsset | None) -> tuple[str, str]:
    first_seen = (analytics.first_seen if analytics else "") or normalize_timestamp(governance.lifecycle.first_seen)
    last_seen = (analytics.last_seen if analytics else "") or normalize_timestamp(governance.lifecycle.last_seen)
    return first_seen, last_seen


def merge_placement(governance: GovernanceAsset, base: AnalyticsAsset) -> tuple[str, str]:
    """Return ``(location, network)``."""
    return governance.metadata.site or base.location, governance.locality or base.network


def merge_tags(primary: Iterable[str] | None, secondary: Iterable[str] | None) -> list[str]:
    """Ordered union, de-duplicated case-insensitively; first casing wins."""
    seen: set[str] = set()
    combined: list[str] = []
    for tag in [*(primary or []), *(secondary or [])]:
        if not tag:
            continue
        key = normalize(tag)
        if key in seen:
            continue
        seen.add(key)
        combined.append(tag)
    return combined


def resolve_group_names(group_ids: Iterable[str], groups: Mapping[str, str]) -> list[str]:
    """Map ids to names; ids missing from the catalog are dropped."""
    return [groups[gid] for gid in group_ids if groups.get(gid)]


def select_trust_entries(asset_id: str, trust_entries: Iterable[TrustEntry]) -> list[TrustListEntry]:
    return [
        TrustListEntry(
            id=entry.id,
            type=entry.type,
            scope=entry.scope,
            reason=entry.reason,
            is_active=entry.is_active,
        )
        for entry in trust_entries
        if entry.type in TRUSTED_ASSET_TYPES and entry.value == asset_id
    ]


def group_name_map(groups: Iterable[AssetGroup]) -> dict[str, str]:
    return {group.id: group.name for group in groups}


# ===================================================================
# Merge
# ===================================================================
def merge(
    governance: GovernanceAsset,
    analytics: AnalyticsAsset | None = None,
    groups: Mapping[str, str] | Iterable[AssetGroup] = (),
    trust_entries: Iterable[TrustEntry] = (),
) -> UnifiedAsset:
    """Combine a governance record with its (optional) analytics match."""
    if not isinstance(groups, Mapping):
        groups = group_name_map(groups)

    if analytics is None:
        logger.debug("No analytics match for %s; using fallback record", governance.id)
    base = analytics if analytics is not None else build_fallback_asset(governance)

    ident = merge_identity(governance, base, analytics)
    cls = merge_classification(governance, analytics)
    first_seen, last_seen = merge_timestamps(governance, analytics)
    location, network = merge_placement(governance, base)

    return UnifiedAsset(
        id=governance.id,
        name=ident.name,
        owner=ident.owner,
        ip=ident.ip,
        mac=ident.mac,
        hostname=ident.hostname,
        device_type=cls.device_type,
        role_tag=cls.role_tag,
        status=cls.status,
        threat_score=base.threat_score,
        confidence_score=base.confidence_score,
        blast_radius_score=base.blast_radius_score,
        first_seen=first_seen,
        last_seen=last_seen,
        category=cls.category,
        location=location,
        network=network,
        interface_type=base.interface_type,
        connection_type=base.connection_type,
        ip_history=[replace(item) for item in base.ip_history],
        hostname_history=[replace(item) for item in base.hostname_history],
        mac_history=[replace(item) for item in base.mac_history],
        management_tools=list(base.management_tools),
        tags=merge_tags(base.tags, governance.metadata.tags),
        criticality=governance.criticality,
        locality=governance.locality,
        exposure=replace(governance.exposure, public_ips=list(governance.exposure.public_ips)),
        group_ids=list(governance.group_ids),
        group_names=resolve_group_names(governance.group_ids, groups),
        lifecycle_status=governance.lifecycle.status,
        trust_list_entries=select_trust_entries(governance.id, trust_entries),
        vendor=base.vendor,
        os_name=base.os_name,
        os_version=base.os_version,
    )
