"""
Unit tests for the alert handlers.
"""

from decimal import Decimal

import pytest

from event_forwarder.errors import HandlerError
from event_forwarder.normalization.handlers.alert import (
    alert_watchlist_hit_binary,
    alert_watchlist_hit_host,
    alert_watchlist_hit_process,
    copy_alert_metadata,
)

# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def watchlist_alert():
    return {
        "feed_id": -1,
        "watchlist_name": "Suspicious shells",
        "watchlist_id": "14",
        "report_score": 75,
        "unique_id": "alert-1",
        "alert_severity": Decimal("56.25"),
        "ioc_confidence": Decimal("0.5"),
        "sensor_criticality": 3,
        "alert_type": "watchlist.hit.query.process",
        "status": "Unresolved",
        "ioc_type": "query",
        "ioc_value": "{}",
        "sensor_id": 7,
        "hostname": "WIN-HOST01",
        "comms_ip": -1062731520,
        "md5": "A" * 32,
        "process_unique_id": "guid-1",
        "netconn_count": 4,
    }


@pytest.fixture
def feed_alert():
    return {
        "feed_id": 12,
        "feed_name": "bit9advancedthreats",
        "feed_rating": 3,
        "watchlist_id": "bit9-report-6",
        "report_score": 100,
        "ioc_type": "md5",
        "ioc_value": "B" * 32,
    }


# =============================================================================
# TEST CLASSES
# =============================================================================


class TestCopyAlertMetadata:
    """Tests for the shared alert metadata."""

    def test_watchlist_origin(self, watchlist_alert):
        """Should copy watchlist fields and parse a numeric watchlist id."""
        out = {}
        copy_alert_metadata("alert.watchlist.hit.ingress.process", watchlist_alert, out)
        assert out["watchlist_name"] == "Suspicious shells"
        assert out["watchlist_id"] == 14
        assert "feed_id" not in out
        assert out["id"] == "alert-1"
        assert out["alert_severity"] == Decimal("56.25")
        assert out["ioc_value"] == "{}"

    def test_missing_feed_id_is_watchlist(self, watchlist_alert):
        del watchlist_alert["feed_id"]
        out = {}
        copy_alert_metadata("alert.watchlist.hit.ingress.process", watchlist_alert, out)
        assert out["watchlist_name"] == "Suspicious shells"

    def test_feed_origin(self, feed_alert):
        """Should use the watchlist id as the report id of a feed alert."""
        out = {}
        copy_alert_metadata("alert.watchlist.hit.ingress.process", feed_alert, out)
        assert out["feed_id"] == 12
        assert out["feed_name"] == "bit9advancedthreats"
        assert out["report_id"] == "bit9-report-6"
        assert out["feed_rating"] == 3
        assert "watchlist_name" not in out

    def test_query_alert_has_no_ioc_value(self, watchlist_alert):
        out = {}
        copy_alert_metadata("alert.watchlist.hit.query.process", watchlist_alert, out)
        assert out["ioc_type"] == "query"
        assert "ioc_value" not in out

    @pytest.mark.parametrize("feed_id", [Decimal("1.5"), 2**63])
    def test_invalid_feed_id(self, feed_alert, feed_id):
        """Should reject feed ids that are not 64-bit integers."""
        feed_alert["feed_id"] = feed_id
        with pytest.raises(HandlerError):
            copy_alert_metadata("alert.watchlist.hit.ingress.process", feed_alert, {})

    def test_non_numeric_watchlist_id(self, watchlist_alert):
        watchlist_alert["watchlist_id"] = "abc"
        out = {}
        copy_alert_metadata("alert.watchlist.hit.ingress.process", watchlist_alert, out)
        assert out["watchlist_id"] == 0


class TestAlertHandlers:
    """Tests for the alert type handlers."""

    def test_process(self, watchlist_alert):
        out = alert_watchlist_hit_process("alert.watchlist.hit.ingress.process", watchlist_alert)[0]
        assert out["type"] == "alert.watchlist.hit.ingress.process"
        assert out["process_md5"] == "A" * 32
        assert out["process_guid"] == "guid-1"
        assert out["comms_ip"] == "192.168.1.0"
        assert out["netconn_count"] == 4
        assert "host_type" not in out

    def test_binary_hostnames(self, feed_alert):
        """Should list the primary hostname first, then the others."""
        feed_alert.update(
            {
                "hostname": "WIN-HOST01",
                "other_hostnames": ["WIN-HOST02", 5, "WIN-HOST03"],
                "md5": "B" * 32,
            }
        )
        out = alert_watchlist_hit_binary("alert.watchlist.hit.query.binary", feed_alert)[0]
        assert out["hostnames"] == ["WIN-HOST01", "WIN-HOST02", "WIN-HOST03"]
        assert out["digsig_result"] == "(unknown)"
        assert out["observed_filename"] == {}

    def test_binary_without_hostname(self, feed_alert):
        out = alert_watchlist_hit_binary("alert.watchlist.hit.ingress.binary", feed_alert)[0]
        assert out["hostnames"] == []

    def test_host(self, watchlist_alert):
        out = alert_watchlist_hit_host("alert.watchlist.hit.ingress.host", watchlist_alert)[0]
        assert out["sensor_id"] == 7
        assert out["hostname"] == "WIN-HOST01"
        assert "comms_ip" not in out
