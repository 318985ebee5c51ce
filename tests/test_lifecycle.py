"""Tests for lifecycle helpers and network locality resolution."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from asset_identity.config import ReconcileConfig, RiskThresholds
from asset_identity.engine import reconcile
from asset_identity.lifecycle import (
    days_since,
    is_new_asset,
    parse_timestamp,
    risk_level,
    stale_info,
    summarise,
)
from asset_identity.locality import NetworkLocality, match_locality_by_ip
from asset_identity.models import AnalyticsAsset, HistoryItem

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


# ===================================================================
# Timestamps
# ===================================================================
class TestParseTimestamp:
    def test_iso_with_z(self):
        assert parse_timestamp("2024-01-15T10:30:00Z") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_space_separator_naive_is_utc(self):
        assert parse_timestamp("2024-01-15 10:30:00") == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_offset_preserved(self):
        parsed = parse_timestamp("2024-01-15T10:30:00+02:00")
        assert parsed == datetime(2024, 1, 15, 8, 30, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", None, "not a date", "2024-13-01"])
    def test_invalid(self, value):
        assert parse_timestamp(value) is None


# ===================================================================
# Stale / new detection
# ===================================================================
class TestStaleAndNew:
    def test_days_since(self):
        assert days_since("2024-06-20 12:00:00", NOW) == 10
        assert days_since("2024-06-20 13:00:00", NOW) == 9
        assert days_since("garbage", NOW) is None

    def test_stale_after_threshold(self):
        info = stale_info("2024-05-01 12:00:00", 30, NOW)
        assert info.is_stale is True
        assert info.stale_days == 60

    def test_not_stale_at_threshold(self):
        info = stale_info("2024-05-31 12:00:00", 30, NOW)
        assert info.stale_days == 30
        assert info.is_stale is False

    def test_unparsable_is_not_stale(self):
        info = stale_info("", 30, NOW)
        assert info.is_stale is False
        assert info.stale_days is None

    def test_is_new_asset(self):
        assert is_new_asset("2024-06-25T00:00:00Z", 7, NOW) is True
        assert is_new_asset("2024-06-01T00:00:00Z", 7, NOW) is False
        assert is_new_asset("", 7, NOW) is False

    def test_naive_now_treated_as_utc(self):
        assert days_since("2024-06-20 12:00:00", datetime(2024, 6, 30, 12, 0)) == 10


# ===================================================================
# Risk thresholds & KPIs
# ===================================================================
class TestRisk:
    def test_risk_level(self):
        thresholds = RiskThresholds()
        assert risk_level(80, thresholds) == "critical"
        assert risk_level(60, thresholds) == "high"
        assert risk_level(59, thresholds) == "normal"

    def test_normalised_clamps(self):
        t = RiskThresholds(high=0, critical=500).normalised()
        assert (t.high, t.critical) == (1, 100)

    def test_normalised_forces_order(self):
        t = RiskThresholds(high=70, critical=50).normalised()
        assert (t.high, t.critical) == (70, 71)

    def test_normalised_at_ceiling(self):
        t = RiskThresholds(high=99, critical=99).normalised()
        assert (t.high, t.critical) == (99, 100)

    def test_summarise(self):
        analytics = [
            AnalyticsAsset(
                id="a1",
                name="old-box",
                first_seen="2023-01-01 00:00:00",
                last_seen="2024-04-01 00:00:00",
                threat_score=85,
                ip_history=[
                    HistoryItem(value="10.0.0.1", timestamp="2024-01-01T00:00:00Z"),
                    HistoryItem(value="10.0.0.1", timestamp="2024-03-01T00:00:00Z", is_current=True),
                ],
            ),
            AnalyticsAsset(
                id="a2",
                name="new-box",
                first_seen="2024-06-28 00:00:00",
                last_seen="2024-06-30 00:00:00",
                threat_score=65,
            ),
        ]
        assets = reconcile([], analytics)
        stats = summarise(assets, ReconcileConfig(), NOW)
        assert stats == {
            "total": 2,
            "stale": 1,
            "new": 1,
            "high_risk": 1,
            "critical_risk": 1,
            "reallocated_ips": 1,
        }


# ===================================================================
# Network localities
# ===================================================================
class TestLocalityMatch:
    @pytest.fixture
    def localities(self):
        return [
            NetworkLocality(id="loc-corp", name="Corporate", type="internal", cidr_blocks=["10.0.0.0/8"]),
            NetworkLocality(id="loc-dmz", name="DMZ", type="dmz", cidr_blocks=["bogus", "10.1.0.0/16"]),
            NetworkLocality(id="loc-any", name="Internet", type="external", cidr_blocks=["0.0.0.0/0"]),
        ]

    def test_longest_prefix_wins(self, localities):
        found = match_locality_by_ip("10.1.2.3", localities)
        assert found.id == "loc-dmz"
        assert found.cidr == "10.1.0.0/16"

    def test_broader_block(self, localities):
        assert match_locality_by_ip("10.200.0.1", localities).id == "loc-corp"

    def test_default_route(self, localities):
        assert match_locality_by_ip("8.8.8.8", localities).type == "external"

    def test_invalid_ip(self, localities):
        assert match_locality_by_ip("999.0.0.1", localities) is None

    def test_no_localities(self):
        assert match_locality_by_ip("10.0.0.1", []) is None

    def test_tie_keeps_first(self):
        localities = [
            NetworkLocality(id="a", name="A", type="internal", cidr_blocks=["192.168.1.0/24"]),
            NetworkLocality(id="b", name="B", type="guest", cidr_blocks=["192.168.1.0/24"]),
        ]
        assert match_locality_by_ip("192.168.1.7", localities).id == "a"

    def test_cidr_without_prefix_ignored(self):
        localities = [NetworkLocality(id="a", name="A", type="internal", cidr_blocks=["192.168.1.7"])]
        assert match_locality_by_ip("192.168.1.7", localities) is None
