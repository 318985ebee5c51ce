"""Flask REST API for asset identity reconciliation.

Blueprint prefix: ``/api/assets``

Every endpoint is stateless: catalogs arrive in the request body and the
response is computed from that snapshot alone.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, jsonify, request

from asset_identity.adapters.base import CatalogError
from asset_identity.adapters.json_catalog import JsonCatalogAdapter
from asset_identity.config import ReconcileConfig
from asset_identity.engine import ReconciliationEngine
from asset_identity.history import build_usage_data
from asset_identity.lifecycle import parse_timestamp, summarise
from asset_identity.locality import LocalityMatch, match_locality_by_ip
from asset_identity.matcher import MatchConflict
from asset_identity.models import AddressUsage, Exposure, HistoryItem, UnifiedAsset

logger = logging.getLogger(__name__)

assets_bp = Blueprint("asset_identity", __name__, url_prefix="/api/assets")

# ---------------------------------------------------------------------------
# Module-level singletons (lazy init)
# ---------------------------------------------------------------------------
_config: ReconcileConfig | None = None
_engine: ReconciliationEngine | None = None
_adapter = JsonCatalogAdapter()


def _get_config() -> ReconcileConfig:
    global _config
    if _config is None:
        _config = ReconcileConfig.from_env()
    return _config


def _get_engine() -> ReconciliationEngine:
    global _engine
    if _engine is None:
        _engine = ReconciliationEngine(_get_config())
    return _engine


def _records(result_kind: str, data: Any) -> list[Any]:
    parse = {
        "governance": _adapter.parse_governance,
        "analytics": _adapter.parse_analytics,
        "groups": _adapter.parse_groups,
        "trustEntries": _adapter.parse_trust_entries,
        "history": _adapter.parse_history,
        "localities": _adapter.parse_localities,
    }[result_kind]
    result = parse(data)
    if not result.success:
        raise CatalogError(f"{result_kind}: {result.error}")
    return result.records


def _run_reconciliation(data: dict[str, Any]):
    return _get_engine().run(
        _records("governance", data.get("governance")),
        _records("analytics", data.get("analytics")),
        _records("groups", data.get("groups")),
        _records("trustEntries", data.get("trustEntries")),
    )


def _json_body() -> dict[str, Any] | None:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@assets_bp.route("/health", methods=["GET"])
def health():
    cfg = _get_config()
    return jsonify(
        {
            "status": "ok",
            "module": "asset_identity",
            "config": {
                "gap_threshold_days": cfg.gap_threshold_days,
                "exclusive_matching": cfg.exclusive_matching,
                "unassigned_group_id": cfg.unassigned_group_id,
            },
        }
    )


# ===================================================================
# RECONCILIATION
# ===================================================================
@assets_bp.route("/reconcile", methods=["POST"])
def reconcile_catalogs():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body is required"}), 400
    try:
        result = _run_reconciliation(data)
    except CatalogError as exc:
        logger.warning("Rejected reconcile payload: %s", exc)
        return jsonify({"error": str(exc)}), 400

    return jsonify(
        {
            "assets": [_asset_to_dict(a) for a in result.assets],
            "stats": result.stats,
            "conflicts": [_conflict_to_dict(c) for c in result.conflicts],
        }
    )


# ===================================================================
# ADDRESS USAGE
# ===================================================================
@assets_bp.route("/usage", methods=["POST"])
def address_usage():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body is required"}), 400

    gap = data.get("gapThresholdDays", _get_config().gap_threshold_days)
    if isinstance(gap, bool) or not isinstance(gap, (int, float)):
        return jsonify({"error": "gapThresholdDays must be a non-negative number"}), 400

    try:
        history = _records("history", data.get("history"))
        usage = build_usage_data(history, gap)
    except ValueError as exc:  # CatalogError included
        return jsonify({"error": str(exc)}), 400

    return jsonify({"usage": [_usage_to_dict(u) for u in usage]})


# ===================================================================
# LOCALITIES
# ===================================================================
@assets_bp.route("/localities/match", methods=["POST"])
def match_locality():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body is required"}), 400
    ip = str(data.get("ip") or "").strip()
    if not ip:
        return jsonify({"error": "ip is required"}), 400
    try:
        localities = _records("localities", data.get("localities"))
    except CatalogError as exc:
        return jsonify({"error": str(exc)}), 400

    found = match_locality_by_ip(ip, localities)
    return jsonify({"match": _locality_match_to_dict(found) if found else None})


# ===================================================================
# LIFECYCLE KPIs
# ===================================================================
@assets_bp.route("/lifecycle/summary", methods=["POST"])
def lifecycle_summary():
    data = _json_body()
    if data is None:
        return jsonify({"error": "JSON object body is required"}), 400
    now = parse_timestamp(data.get("now"))
    if now is None:
        return jsonify({"error": "now must be an ISO 8601 timestamp"}), 400
    try:
        result = _run_reconciliation(data)
    except CatalogError as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"summary": summarise(result.assets, _get_config(), now)})


# ---------------------------------------------------------------------------
# Serialisers
# ---------------------------------------------------------------------------
def _history_to_dict(h: HistoryItem) -> dict[str, Any]:
    return {"value": h.value, "timestamp": h.timestamp, "isCurrent": h.is_current}


def _exposure_to_dict(e: Exposure) -> dict[str, Any]:
    return {
        "hasPublicIP": e.has_public_ip,
        "publicIPs": list(e.public_ips),
        "hasInboundInternet": e.has_inbound_internet,
        "isNATed": e.is_nated,
    }


def _asset_to_dict(a: UnifiedAsset) -> dict[str, Any]:
    return {
        "id": a.id,
        "name": a.name,
        "owner": a.owner,
        "ip": a.ip,
        "mac": a.mac,
        "hostname": a.hostname,
        "deviceType": a.device_type,
        "roleTag": a.role_tag,
        "status": a.status,
        "threatScore": a.threat_score,
        "confidenceScore": a.confidence_score,
        "blastRadiusScore": a.blast_radius_score,
        "firstSeen": a.first_seen,
        "lastSeen": a.last_seen,
        "category": a.category,
        "location": a.location,
        "network": a.network,
        "interfaceType": a.interface_type,
        "connectionType": a.connection_type,
        "vendor": a.vendor,
        "osName": a.os_name,
        "osVersion": a.os_version,
        "ipHistory": [_history_to_dict(h) for h in a.ip_history],
        "hostnameHistory": [_history_to_dict(h) for h in a.hostname_history],
        "macHistory": [_history_to_dict(h) for h in a.mac_history],
        "managementTools": list(a.management_tools),
        "tags": list(a.tags),
        "criticality": a.criticality,
        "locality": a.locality,
        "exposure": _exposure_to_dict(a.exposure),
        "groupIds": list(a.group_ids),
        "groupNames": list(a.group_names),
        "lifecycleStatus": a.lifecycle_status,
        "trustListEntries": [
            {"id": t.id, "type": t.type, "scope": t.scope, "reason": t.reason, "isActive": t.is_active}
            for t in a.trust_list_entries
        ],
    }


def _conflict_to_dict(c: MatchConflict) -> dict[str, Any]:
    return {"analyticsId": c.analytics_id, "claimedBy": c.claimed_by, "governanceId": c.governance_id}


def _usage_to_dict(u: AddressUsage) -> dict[str, Any]:
    return {
        "address": u.address,
        "isCurrent": u.is_current,
        "periods": [{"start": p.start, "end": p.end} for p in u.periods],
        "reallocations": u.reallocation_count,
    }


def _locality_match_to_dict(m: LocalityMatch) -> dict[str, Any]:
    return {"id": m.id, "name": m.name, "type": m.type, "cidr": m.cidr}
