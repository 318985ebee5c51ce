"""Record types for the analytics, governance and unified asset catalogs.

Inputs (``AnalyticsAsset``, ``GovernanceAsset``, ``AssetGroup``,
``TrustEntry``) are plain dataclasses owned by external pipelines and are
treated as read-only.  Outputs (``UnifiedAsset``, ``AddressUsage``) are
frozen: every reconciliation pass builds a fresh snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

AssetType = Literal[
    "server",
    "workstation",
    "network_device",
    "iot",
    "mobile",
    "virtual_machine",
    "container",
    "cloud_instance",
    "unknown",
]

AssetRole = Literal[
    "domain_controller",
    "dns_server",
    "web_server",
    "database_server",
    "file_server",
    "mail_server",
    "application_server",
    "proxy_server",
    "firewall",
    "router",
    "switch",
    "load_balancer",
    "endpoint",
    "scanner",
    "other",
]

Locality = Literal["internal", "external", "dmz", "cloud", "partner", "guest"]
Criticality = Literal["critical", "high", "medium", "low"]
AssetStatus = Literal["active", "stale", "decommissioned", "unknown"]
OperationalStatus = Literal["online", "offline", "unknown"]
TrustType = Literal["asset", "asset_group", "domain", "scanner", "ip_range"]


# ===================================================================
# Shared blocks
# ===================================================================
@dataclass
class HistoryItem:
    """One observation of an address (IP, MAC or hostname)."""

    value: str
    timestamp: str  # ISO 8601
    is_current: bool = False


@dataclass
class Exposure:
    has_public_ip: bool = False
    public_ips: list[str] = field(default_factory=list)
    has_inbound_internet: bool = False
    is_nated: bool = False


# ===================================================================
# Analytics (telemetry) catalog
# ===================================================================
@dataclass
class AnalyticsAsset:
    """Flow-derived device record produced by the telemetry pipeline."""

    id: str
    name: str = ""
    owner: str = ""
    ip: str = ""
    mac: str = ""
    hostname: str = ""
    device_type: str = ""
    role_tag: str = ""
    status: str = ""  # online | offline | unknown
    threat_score: int = 0
    confidence_score: int = 0
    blast_radius_score: int = 0
    first_seen: str = ""
    last_seen: str = ""
    category: str = ""
    location: str = ""
    network: str = ""
    interface_type: str = ""
    connection_type: str = "unknown"  # wired | wireless | unknown
    ip_history: list[HistoryItem] = field(default_factory=list)
    hostname_history: list[HistoryItem] = field(default_factory=list)
    mac_history: list[HistoryItem] = field(default_factory=list)
    management_tools: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    vendor: str | None = None
    os_name: str | None = None
    os_version: str | None = None
    # Enrichments added post-merge
    criticality: str | None = None
    locality: str | None = None
    exposure: Exposure | None = None


# ===================================================================
# Governance catalog
# ===================================================================
@dataclass
class AssetIdentity:
    hostname: str = ""
    fqdn: str = ""
    ipv4_addresses: list[str] = field(default_factory=list)
    ipv6_addresses: list[str] = field(default_factory=list)
    mac_addresses: list[str] = field(default_factory=list)


@dataclass
class AssetMetadata:
    owner: str = ""
    business_unit: str = ""
    site: str = ""
    environment: str = ""  # prod, staging, dev
    tags: list[str] = field(default_factory=list)


@dataclass
class AssetLifecycle:
    first_seen: str = ""
    last_seen: str = ""
    status: AssetStatus = "unknown"
    created_at: str = ""
    updated_at: str = ""


@dataclass
class GovernanceAsset:
    """Policy-oriented device record owned by the governance subsystem."""

    id: str
    identity: AssetIdentity = field(default_factory=AssetIdentity)
    type: AssetType = "unknown"
    role: AssetRole = "other"
    locality: Locality = "internal"
    criticality: Criticality = "low"
    exposure: Exposure = field(default_factory=Exposure)
    metadata: AssetMetadata = field(default_factory=AssetMetadata)
    lifecycle: AssetLifecycle = field(default_factory=AssetLifecycle)
    group_ids: list[str] = field(default_factory=list)


@dataclass
class AssetGroup:
    id: str
    name: str


@dataclass
class TrustEntry:
    id: str
    type: TrustType
    value: str  # asset id, hostname, domain, CIDR or group id
    scope: str = "global"  # global | detection | event
    reason: str = ""
    is_active: bool = True


# ===================================================================
# Outputs
# ===================================================================
@dataclass(frozen=True)
class TrustListEntry:
    """Projection of a ``TrustEntry`` attached to a unified asset."""

    id: str
    type: str
    scope: str
    reason: str
    is_active: bool


@dataclass(frozen=True)
class UnifiedAsset:
    """Canonical per-device record: analytics shape plus governance fields."""

    id: str
    name: str
    owner: str
    ip: str
    mac: str
    hostname: str
    device_type: str
    role_tag: str
    status: str
    threat_score: int
    confidence_score: int
    blast_radius_score: int
    first_seen: str
    last_seen: str
    category: str
    location: str
    network: str
    interface_type: str
    connection_type: str
    ip_history: list[HistoryItem]
    hostname_history: list[HistoryItem]
    mac_history: list[HistoryItem]
    management_tools: list[str]
    tags: list[str]
    criticality: Criticality
    locality: Locality
    exposure: Exposure
    group_ids: list[str]
    group_names: list[str]
    lifecycle_status: AssetStatus
    trust_list_entries: list[TrustListEntry]
    vendor: str | None = None
    os_name: str | None = None
    os_version: str | None = None


@dataclass(frozen=True)
class UsagePeriod:
    start: str
    end: str


@dataclass(frozen=True)
class AddressUsage:
    """Usage periods for one address.  More than one period is a re-allocation."""

    address: str
    is_current: bool
    periods: list[UsagePeriod]

    @property
    def reallocation_count(self) -> int:
        return max(len(self.periods) - 1, 0)
