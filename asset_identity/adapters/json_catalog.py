"""JsonCatalogAdapter — parse catalog payloads into record dataclasses.

Payloads use the dashboard's camelCase keys:

- a JSON array of objects
- or a wrapper object with a ``data`` key holding that array

Both raw bytes/str and already-decoded Python lists are accepted.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from asset_identity.adapters.base import CatalogError, CatalogResult
from asset_identity.locality import NetworkLocality
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
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Field helpers
# ------------------------------------------------------------------


def _require_id(d: dict[str, Any], kind: str) -> str:
    value = d.get("id")
    if value is None or str(value).strip() == "":
        raise CatalogError(f"{kind} record is missing 'id'")
    return str(value)


def _str(d: dict[str, Any], key: str, default: str = "") -> str:
    value = d.get(key)
    return default if value is None else str(value)


def _int(d: dict[str, Any], key: str) -> int:
    try:
        return int(d.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def _flag(d: dict[str, Any], key: str, default: bool = False) -> bool:
    value = d.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _str_list(d: dict[str, Any], key: str) -> list[str]:
    value = d.get(key) or []
    if not isinstance(value, list):
        raise CatalogError(f"'{key}' must be a list")
    return [str(v) for v in value]


def _obj(d: dict[str, Any], key: str) -> dict[str, Any]:
    value = d.get(key) or {}
    if not isinstance(value, dict):
        raise CatalogError(f"'{key}' must be an object")
    return value


# ------------------------------------------------------------------
# Record converters
# ------------------------------------------------------------------


def history_from_dict(d: dict[str, Any]) -> HistoryItem:
    return HistoryItem(
        value=_str(d, "value"),
        timestamp=_str(d, "timestamp"),
        is_current=_flag(d, "isCurrent"),
    )


def _history_list(d: dict[str, Any], key: str) -> list[HistoryItem]:
    value = d.get(key) or []
    if not isinstance(value, list):
        raise CatalogError(f"'{key}' must be a list")
    return [history_from_dict(item) for item in value if isinstance(item, dict)]


def exposure_from_dict(d: dict[str, Any]) -> Exposure:
    return Exposure(
        has_public_ip=_flag(d, "hasPublicIP"),
        public_ips=_str_list(d, "publicIPs"),
        has_inbound_internet=_flag(d, "hasInboundInternet"),
        is_nated=_flag(d, "isNATed"),
    )


def analytics_from_dict(d: dict[str, Any]) -> AnalyticsAsset:
    exposure = d.get("exposure")
    return AnalyticsAsset(
        id=_require_id(d, "analytics"),
        name=_str(d, "name"),
        owner=_str(d, "owner"),
        ip=_str(d, "ip"),
        mac=_str(d, "mac"),
        hostname=_str(d, "hostname"),
        device_type=_str(d, "deviceType"),
        role_tag=_str(d, "roleTag"),
        status=_str(d, "status"),
        threat_score=_int(d, "threatScore"),
        confidence_score=_int(d, "confidenceScore"),
        blast_radius_score=_int(d, "blastRadiusScore"),
        first_seen=_str(d, "firstSeen"),
        last_seen=_str(d, "lastSeen"),
        category=_str(d, "category"),
        location=_str(d, "location"),
        network=_str(d, "network"),
        interface_type=_str(d, "interfaceType"),
        connection_type=_str(d, "connectionType", "unknown"),
        ip_history=_history_list(d, "ipHistory"),
        hostname_history=_history_list(d, "hostnameHistory"),
        mac_history=_history_list(d, "macHistory"),
        management_tools=_str_list(d, "managementTools"),
        tags=_str_list(d, "tags"),
        vendor=d.get("vendor"),
        os_name=d.get("osName"),
        os_version=d.get("osVersion"),
        criticality=d.get("criticality"),
        locality=d.get("locality"),
        exposure=exposure_from_dict(exposure) if isinstance(exposure, dict) else None,
    )


def governance_from_dict(d: dict[str, Any]) -> GovernanceAsset:
    identity = _obj(d, "identity")
    metadata = _obj(d, "metadata")
    lifecycle = _obj(d, "lifecycle")
    return GovernanceAsset(
        id=_require_id(d, "governance"),
        identity=AssetIdentity(
            hostname=_str(identity, "hostname"),
            fqdn=_str(identity, "fqdn"),
            ipv4_addresses=_str_list(identity, "ipv4Addresses"),
            ipv6_addresses=_str_list(identity, "ipv6Addresses"),
            mac_addresses=_str_list(identity, "macAddresses"),
        ),
        type=_str(d, "type", "unknown"),  # type: ignore[arg-type]
        role=_str(d, "role", "other"),  # type: ignore[arg-type]
        locality=_str(d, "locality", "internal"),  # type: ignore[arg-type]
        criticality=_str(d, "criticality", "low"),  # type: ignore[arg-type]
        exposure=exposure_from_dict(_obj(d, "exposure")),
        metadata=AssetMetadata(
            owner=_str(metadata, "owner"),
            business_unit=_str(metadata, "businessUnit"),
            site=_str(metadata, "site"),
            environment=_str(metadata, "environment"),
            tags=_str_list(metadata, "tags"),
        ),
        lifecycle=AssetLifecycle(
            first_seen=_str(lifecycle, "firstSeen"),
            last_seen=_str(lifecycle, "lastSeen"),
            status=_str(lifecycle, "status", "unknown"),  # type: ignore[arg-type]
            created_at=_str(lifecycle, "createdAt"),
            updated_at=_str(lifecycle, "updatedAt"),
        ),
        group_ids=_str_list(d, "groupIds"),
    )


def group_from_dict(d: dict[str, Any]) -> AssetGroup:
    return AssetGroup(id=_require_id(d, "group"), name=_str(d, "name"))


def trust_entry_from_dict(d: dict[str, Any]) -> TrustEntry:
    return TrustEntry(
        id=_require_id(d, "trust entry"),
        type=_str(d, "type"),  # type: ignore[arg-type]
        value=_str(d, "value"),
        scope=_str(d, "scope", "global"),
        reason=_str(d, "reason"),
        is_active=_flag(d, "isActive", True),
    )


def locality_from_dict(d: dict[str, Any]) -> NetworkLocality:
    return NetworkLocality(
        id=_require_id(d, "locality"),
        name=_str(d, "name"),
        type=_str(d, "type", "internal"),
        cidr_blocks=_str_list(d, "cidrBlocks"),
    )


# ------------------------------------------------------------------
# Adapter
# ------------------------------------------------------------------


class JsonCatalogAdapter:
    """Parses JSON catalog payloads into record dataclasses."""

    def parse_governance(self, data: Any) -> CatalogResult:
        return self._parse(data, governance_from_dict, "governance")

    def parse_analytics(self, data: Any) -> CatalogResult:
        return self._parse(data, analytics_from_dict, "analytics")

    def parse_groups(self, data: Any) -> CatalogResult:
        return self._parse(data, group_from_dict, "groups")

    def parse_trust_entries(self, data: Any) -> CatalogResult:
        return self._parse(data, trust_entry_from_dict, "trust entries")

    def parse_history(self, data: Any) -> CatalogResult:
        return self._parse(data, history_from_dict, "history")

    def parse_localities(self, data: Any) -> CatalogResult:
        return self._parse(data, locality_from_dict, "localities")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parse(self, data: Any, convert: Callable[[dict[str, Any]], Any], kind: str) -> CatalogResult:
        try:
            items = self.load_items(data)
            records = []
            for item in items:
                if not isinstance(item, dict):
                    raise CatalogError(f"{kind} entries must be objects")
                records.append(convert(item))
        except (CatalogError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Failed to parse %s catalog: %s", kind, exc)
            return CatalogResult(success=False, error=str(exc))
        return CatalogResult(success=True, records=records, raw_count=len(records))

    @staticmethod
    def load_items(data: Any) -> list[Any]:
        """Decode *data* and unwrap a ``{"data": [...]}`` wrapper if present."""
        if data is None:
            return []
        if isinstance(data, bytes):
            data = data.decode("utf-8-sig")
        if isinstance(data, str):
            text = data.strip()
            if not text:
                raise CatalogError("Empty JSON payload")
            data = json.loads(text)

        if isinstance(data, dict) and isinstance(data.get("data"), list):
            data = data["data"]
        if not isinstance(data, list):
            raise CatalogError("JSON must be an array of objects")
        return data
