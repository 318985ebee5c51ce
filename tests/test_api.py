"""Tests for catalog payload parsing and the Flask API."""

from __future__ import annotations

import json

import pytest
from flask import Flask

from asset_identity.adapters.base import CatalogError
from asset_identity.adapters.json_catalog import (
    JsonCatalogAdapter,
    analytics_from_dict,
    governance_from_dict,
)

GOVERNANCE = [
    {
        "id": "g-web",
        "identity": {"hostname": "web-01", "ipv4Addresses": ["10.0.0.10"], "macAddresses": []},
        "type": "server",
        "role": "web_server",
        "locality": "dmz",
        "criticality": "critical",
        "exposure": {"hasPublicIP": False, "hasInboundInternet": True, "isNATed": True},
        "metadata": {"owner": "web-team", "site": "HQ", "tags": ["vip", "finance"]},
        "lifecycle": {
            "firstSeen": "2024-01-01T00:00:00Z",
            "lastSeen": "2024-06-01T00:00:00Z",
            "status": "active",
        },
        "groupIds": ["grp-web", "grp-deleted"],
    },
]

ANALYTICS = [
    {
        "id": "101",
        "name": "web-01",
        "hostname": "web-01",
        "ip": "10.0.0.10",
        "mac": "AA:BB:CC:DD:EE:01",
        "deviceType": "Linux Server",
        "roleTag": "Web Server",
        "status": "online",
        "threatScore": 90,
        "firstSeen": "2024-01-02 08:00:00",
        "lastSeen": "2024-06-02 08:00:00",
        "tags": ["VIP", "db"],
        "ipHistory": [
            {"value": "10.0.0.10", "timestamp": "2024-01-02T08:00:00Z", "isCurrent": True},
        ],
    },
    {
        "id": "202",
        "name": "kiosk",
        "hostname": "kiosk",
        "ip": "198.51.100.4",
        "deviceType": "Tablet",
        "threatScore": 45,
        "network": "Guest Cloud",
    },
]

GROUPS = [{"id": "grp-web", "name": "Web Servers"}]
TRUST = [{"id": "t1", "type": "asset", "value": "g-web", "scope": "global", "reason": "LB", "isActive": True}]


# ===================================================================
# JsonCatalogAdapter
# ===================================================================
class TestJsonCatalogAdapter:
    def test_parse_governance(self):
        result = JsonCatalogAdapter().parse_governance(GOVERNANCE)
        assert result.success is True
        gov = result.records[0]
        assert gov.identity.ipv4_addresses == ["10.0.0.10"]
        assert gov.exposure.is_nated is True
        assert gov.metadata.tags == ["vip", "finance"]
        assert gov.lifecycle.status == "active"

    def test_parse_analytics_from_bytes(self):
        result = JsonCatalogAdapter().parse_analytics(json.dumps(ANALYTICS).encode())
        assert result.success is True
        assert result.raw_count == 2
        assert result.records[0].threat_score == 90
        assert result.records[0].ip_history[0].is_current is True
        assert result.records[1].connection_type == "unknown"

    def test_data_wrapper(self):
        result = JsonCatalogAdapter().parse_groups({"data": GROUPS})
        assert result.success is True
        assert result.records[0].name == "Web Servers"

    def test_none_is_empty(self):
        result = JsonCatalogAdapter().parse_trust_entries(None)
        assert result.success is True
        assert result.records == []

    def test_not_array(self):
        result = JsonCatalogAdapter().parse_groups({"key": "value"})
        assert result.success is False
        assert "array" in result.error

    def test_invalid_json(self):
        result = JsonCatalogAdapter().parse_history(b"[{not json")
        assert result.success is False

    def test_empty_payload(self):
        result = JsonCatalogAdapter().parse_history(b"   ")
        assert result.success is False

    def test_non_object_entry(self):
        result = JsonCatalogAdapter().parse_groups(["grp-web"])
        assert result.success is False

    def test_missing_id(self):
        with pytest.raises(CatalogError):
            analytics_from_dict({"name": "no-id"})

    def test_bad_list_field(self):
        with pytest.raises(CatalogError):
            governance_from_dict({"id": "g1", "groupIds": "grp-1"})

    def test_string_flags(self):
        result = JsonCatalogAdapter().parse_history(
            [
                {"value": "10.0.0.5", "timestamp": "2024-01-01T00:00:00Z", "isCurrent": "false"},
                {"value": "10.0.0.6", "timestamp": "2024-01-01T00:00:00Z", "isCurrent": "True"},
            ]
        )
        assert [h.is_current for h in result.records] == [False, True]

        gov = governance_from_dict({"id": "g1", "exposure": {"isNATed": "no", "hasPublicIP": "1"}})
        assert gov.exposure.is_nated is False
        assert gov.exposure.has_public_ip is True

        entry = JsonCatalogAdapter().parse_trust_entries([{"id": "t1", "isActive": "false"}]).records[0]
        assert entry.is_active is False

    def test_missing_flag_uses_default(self):
        entry = JsonCatalogAdapter().parse_trust_entries([{"id": "t1"}]).records[0]
        assert entry.is_active is True

    def test_defaults(self):
        gov = governance_from_dict({"id": "g1"})
        assert gov.type == "unknown"
        assert gov.role == "other"
        assert gov.locality == "internal"
        assert gov.identity.hostname == ""


# ===================================================================
# API endpoints
# ===================================================================
class TestAssetsAPI:
    @pytest.fixture
    def client(self, monkeypatch):
        import asset_identity.api as api_module

        monkeypatch.delenv("ASSET_GAP_THRESHOLD_DAYS", raising=False)
        monkeypatch.delenv("ASSET_EXCLUSIVE_MATCHING", raising=False)
        app = Flask(__name__)
        app.config["TESTING"] = True
        api_module._config = None
        api_module._engine = None
        app.register_blueprint(api_module.assets_bp)
        return app.test_client()

    def test_health(self, client):
        resp = client.get("/api/assets/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["module"] == "asset_identity"
        assert data["config"]["gap_threshold_days"] == 14

    def test_reconcile(self, client):
        resp = client.post(
            "/api/assets/reconcile",
            json={"governance": GOVERNANCE, "analytics": ANALYTICS, "groups": GROUPS, "trustEntries": TRUST},
        )
        assert resp.status_code == 200
        data = resp.get_json()
        assert [a["id"] for a in data["assets"]] == ["g-web", "asset-202"]
        assert data["stats"]["matched"] == 1
        assert data["stats"]["synthesized"] == 1
        assert data["conflicts"] == []

        web = data["assets"][0]
        assert web["tags"] == ["VIP", "db", "finance"]
        assert web["criticality"] == "critical"
        assert web["threatScore"] == 90
        assert web["owner"] == "web-team"
        assert web["location"] == "HQ"
        assert web["groupNames"] == ["Web Servers"]
        assert web["trustListEntries"] == [
            {"id": "t1", "type": "asset", "scope": "global", "reason": "LB", "isActive": True},
        ]
        assert web["exposure"]["isNATed"] is True

        kiosk = data["assets"][1]
        assert kiosk["criticality"] == "medium"
        assert kiosk["locality"] == "cloud"
        assert kiosk["exposure"]["publicIPs"] == ["198.51.100.4"]
        assert kiosk["lifecycleStatus"] == "unknown"
        assert kiosk["groupIds"] == ["grp-unassigned"]

    def test_reconcile_is_idempotent(self, client):
        body = {"governance": GOVERNANCE, "analytics": ANALYTICS, "groups": GROUPS, "trustEntries": TRUST}
        first = client.post("/api/assets/reconcile", json=body).get_json()
        second = client.post("/api/assets/reconcile", json=body).get_json()
        assert first == second

    def test_reconcile_requires_body(self, client):
        resp = client.post("/api/assets/reconcile", data="nope", content_type="text/plain")
        assert resp.status_code == 400

    def test_reconcile_bad_catalog(self, client):
        resp = client.post("/api/assets/reconcile", json={"governance": [{"identity": {}}]})
        assert resp.status_code == 400
        assert "governance" in resp.get_json()["error"]

    def test_usage(self, client):
        history = [
            {"value": "10.0.0.5", "timestamp": "2024-01-01T00:00:00Z", "isCurrent": False},
            {"value": "10.0.0.5", "timestamp": "2024-01-21T00:00:00Z", "isCurrent": True},
            {"value": "10.0.0.6", "timestamp": "2024-01-10T00:00:00Z", "isCurrent": False},
        ]
        resp = client.post("/api/assets/usage", json={"history": history})
        assert resp.status_code == 200
        usage = resp.get_json()["usage"]
        assert usage[0] == {
            "address": "10.0.0.5",
            "isCurrent": True,
            "periods": [
                {"start": "2024-01-01T00:00:00Z", "end": "2024-01-01T00:00:00Z"},
                {"start": "2024-01-21T00:00:00Z", "end": "2024-01-21T00:00:00Z"},
            ],
            "reallocations": 1,
        }
        assert usage[1]["address"] == "10.0.0.6"

    def test_usage_custom_threshold(self, client):
        history = [
            {"value": "10.0.0.5", "timestamp": "2024-01-01T00:00:00Z"},
            {"value": "10.0.0.5", "timestamp": "2024-01-21T00:00:00Z"},
        ]
        resp = client.post("/api/assets/usage", json={"history": history, "gapThresholdDays": 30})
        assert len(resp.get_json()["usage"][0]["periods"]) == 1

    def test_usage_rejects_negative_threshold(self, client):
        resp = client.post("/api/assets/usage", json={"history": [], "gapThresholdDays": -1})
        assert resp.status_code == 400

    @pytest.mark.parametrize("raw_gap", ["1e10", "NaN", "Infinity", "1" + "0" * 400])
    def test_usage_rejects_out_of_range_threshold(self, client, raw_gap):
        body = '{"history": [{"value": "10.0.0.5", "timestamp": "2024-01-01T00:00:00Z"}], "gapThresholdDays": %s}'
        resp = client.post("/api/assets/usage", data=body % raw_gap, content_type="application/json")
        assert resp.status_code == 400
        assert "gap_threshold_days" in resp.get_json()["error"]

    def test_lifecycle_summary_with_negative_env_gap(self, client, monkeypatch):
        monkeypatch.setenv("ASSET_GAP_THRESHOLD_DAYS", "-1")
        resp = client.post(
            "/api/assets/lifecycle/summary",
            json={"governance": GOVERNANCE, "analytics": ANALYTICS, "now": "2024-06-05T00:00:00Z"},
        )
        assert resp.status_code == 200
        assert resp.get_json()["summary"]["total"] == 2

    def test_usage_empty_history(self, client):
        resp = client.post("/api/assets/usage", json={"history": []})
        assert resp.get_json()["usage"] == []

    def test_locality_match(self, client):
        localities = [
            {"id": "loc-1", "name": "Corp", "type": "internal", "cidrBlocks": ["10.0.0.0/8"]},
            {"id": "loc-2", "name": "Lab", "type": "partner", "cidrBlocks": ["10.9.0.0/16"]},
        ]
        resp = client.post("/api/assets/localities/match", json={"ip": "10.9.1.1", "localities": localities})
        assert resp.status_code == 200
        assert resp.get_json()["match"] == {"id": "loc-2", "name": "Lab", "type": "partner", "cidr": "10.9.0.0/16"}

    def test_locality_no_match(self, client):
        resp = client.post("/api/assets/localities/match", json={"ip": "8.8.8.8", "localities": []})
        assert resp.get_json()["match"] is None

    def test_locality_requires_ip(self, client):
        resp = client.post("/api/assets/localities/match", json={"localities": []})
        assert resp.status_code == 400

    def test_lifecycle_summary(self, client):
        resp = client.post(
            "/api/assets/lifecycle/summary",
            json={"governance": GOVERNANCE, "analytics": ANALYTICS, "now": "2024-06-05T00:00:00Z"},
        )
        assert resp.status_code == 200
        summary = resp.get_json()["summary"]
        assert summary["total"] == 2
        assert summary["critical_risk"] == 1

    def test_lifecycle_summary_requires_now(self, client):
        resp = client.post("/api/assets/lifecycle/summary", json={"governance": []})
        assert resp.status_code == 400


# ===================================================================
# App factory
# ===================================================================
class TestAppFactory:
    def test_blueprint_registered(self):
        from run_web import create_app

        app = create_app()
        assert "asset_identity" in app.blueprints
        resp = app.test_client().get("/api/assets/health")
        assert resp.status_code == 200
