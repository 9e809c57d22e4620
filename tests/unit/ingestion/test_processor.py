"""
Unit tests for the JSON message processor.

Tests the full path from routing key and body to normalized records.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from event_forwarder.errors import HandlerError, MalformedMessageError
from event_forwarder.ingestion.processor import JSONMessageProcessor, ProcessorConfig
from event_forwarder.schemas.message import ReportInfo

# =============================================================================
# TEST CLASSES
# =============================================================================


class TestProcessJSON:
    """Tests for process_json."""

    def test_watchlist_hit(self, processor, watchlist_process_message, encode):
        """Should produce one record per well-formed doc."""
        watchlist_process_message["docs"].insert(1, "not a doc")
        records = processor.process_json(
            "watchlist.hit.process", encode(watchlist_process_message)
        )
        assert len(records) == 3
        assert all(r["schema_version"] == 2 for r in records)
        assert all(r["type"] == "watchlist.hit.process" for r in records)
        # timestamp renamed before dispatch
        assert all(r["event_timestamp"] == 1481127808 for r in records)

    def test_feed_routing_key_canonicalized(self, processor, feed_storage_message, encode):
        records = processor.process_json(
            "feed.12.storage.hit.process", encode(feed_storage_message)
        )
        assert len(records) == 1
        assert records[0]["type"] == "feed.storage.hit.process"
        assert records[0]["alliance_data"][0]["source"] == "bit9advancedthreats"
        assert records[0]["comms_ip"] == "192.168.1.0"

    def test_unregistered_type(self, processor):
        """Should produce no records for types without a handler."""
        assert processor.process_json("sensor.heartbeat", b'{"sensor_id": 7}') == []

    def test_malformed_body(self, processor):
        with pytest.raises(MalformedMessageError):
            processor.process_json("watchlist.hit.process", b"{not json")

    def test_handler_error_propagates(self, processor):
        """Should raise when an alert carries a non-integer feed id."""
        body = b'{"feed_id": 1.5, "unique_id": "alert-1"}'
        with pytest.raises(HandlerError) as exc_info:
            processor.process_json("alert.watchlist.hit.ingress.process", body)
        assert exc_info.value.message_type == "alert.watchlist.hit.ingress.process"

    def test_big_integers_survive(self, processor):
        body = b'{"md5": "' + b"a" * 32 + b'", "size": 123456789012345678901234567890}'
        record = processor.process_json("binarystore.file.added", body)[0]
        assert record["size"] == 123456789012345678901234567890

    @pytest.mark.parametrize(
        "md5,expected",
        [
            ("a" * 32, "A" * 32),
            ("a" * 31, "a" * 31),
        ],
    )
    def test_md5_upper_cased(self, processor, md5, expected):
        """Should upper-case 32 character md5 values only."""
        body = json.dumps({"md5": md5}).encode()
        record = processor.process_json("binaryinfo.observed", body)[0]
        assert record["md5"] == expected

    def test_endpoint_sensor_id_is_string(self, processor):
        """Rewritten sensor ids are strings, so numeric readers fall back to 0."""
        body = json.dumps({"md5": "a" * 32, "endpoint": "WIN-HOST01|7"}).encode()
        record = processor.process_json("binaryinfo.host.observed", body)[0]
        assert record["hostname"] == "WIN-HOST01"
        assert record["sensor_id"] == 0


class TestLinks:
    """Tests for console link enrichment during processing."""

    def test_links_added(self, linking_processor, watchlist_process_message, encode):
        record = linking_processor.process_json(
            "watchlist.hit.process", encode(watchlist_process_message)
        )[0]
        assert record["link_sensor"] == "https://cb.local/#/host/7"
        assert record["link_process_md5"].startswith("https://cb.local/#/binary/")
        assert record["link_process"] == (
            "https://cb.local/#analyze/00000001-0000-0b8c-01d2-4f8fb6a0a5e4/1"
        )

    def test_binary_doc_md5_link_upper_cased(self, linking_processor):
        body = json.dumps(
            {"docs": [{"md5": "a" * 32, "endpoint": "WIN-HOST01|7", "host_count": 1}]}
        ).encode()
        record = linking_processor.process_json("watchlist.storage.hit.binary", body)[0]
        assert record["md5"] == "A" * 32
        assert record["link_md5"] == "https://cb.local/#/binary/" + "A" * 32

    def test_no_links_without_server_url(self, processor, watchlist_process_message, encode):
        record = processor.process_json(
            "watchlist.hit.process", encode(watchlist_process_message)
        )[0]
        assert not [k for k in record if k.startswith("link_")]


class TestProcessMessage:
    """Tests for process_message on decoded records."""

    def test_record_rewritten_in_place(self, processor):
        record = {"timestamp": 5, "md5": "a" * 32}
        processor.process_message(record, "binarystore.file.added")
        assert record == {"event_timestamp": 5, "md5": "A" * 32}

    def test_validation_enabled(self):
        processor = JSONMessageProcessor(ProcessorConfig(validate_output=True))
        records = processor.process_message({"md5": "a" * 32}, "binaryinfo.observed")
        assert records[0]["type"] == "binaryinfo.observed"

    def test_decimal_values_pass_through(self, processor):
        record = {"feed_id": -1, "alert_severity": Decimal("56.25")}
        out = processor.process_message(record, "alert.watchlist.hit.ingress.host")[0]
        assert out["alert_severity"] == Decimal("56.25")


class TestEventMap:
    """Tests for is_enabled."""

    def test_no_map_enables_everything(self, processor):
        assert processor.is_enabled("anything.at.all")

    def test_empty_map_disables_everything(self):
        """Should forward nothing when every type is disabled."""
        processor = JSONMessageProcessor(ProcessorConfig(event_map=frozenset()))
        assert not processor.is_enabled("watchlist.hit.process")
        assert not processor.is_enabled("feed.42.storage.hit.process")

    def test_map_uses_canonical_type(self):
        processor = JSONMessageProcessor(
            ProcessorConfig(event_map=frozenset({"feed.storage.hit.process"}))
        )
        assert processor.is_enabled("feed.42.storage.hit.process")
        assert not processor.is_enabled("watchlist.hit.process")


class TestPostprocess:
    """Tests for postprocess_message."""

    def test_no_client(self, processor):
        record = {"feed_id": 12, "report_id": "r"}
        assert processor.postprocess_message(record) == {"feed_id": 12, "report_id": "r"}

    def test_with_client(self):
        client = MagicMock()
        client.get_report.return_value = ReportInfo(title="Bad stuff", score=90, link="http://r")
        processor = JSONMessageProcessor(ProcessorConfig(report_client=client))

        record = processor.postprocess_message({"feed_id": 12, "report_id": "r"})

        client.get_report.assert_called_once_with(12, "r")
        assert record["report_title"] == "Bad stuff"
        assert record["report_score"] == 90
        assert record["report_link"] == "http://r"

    def test_close_releases_client(self):
        client = MagicMock()
        JSONMessageProcessor(ProcessorConfig(report_client=client)).close()
        client.close.assert_called_once_with()

    def test_close_without_client(self, processor):
        processor.close()


class TestDebugStore:
    """Tests for the debug message dump."""

    def test_malformed_body_dumped(self, tmp_path):
        processor = JSONMessageProcessor(ProcessorConfig(debug=True, debug_store=tmp_path))
        with pytest.raises(MalformedMessageError):
            processor.process_json("watchlist.hit.process", b"{oops")

        dumped = list(tmp_path.iterdir())
        assert len(dumped) == 1
        assert dumped[0].name.startswith("watchlist.hit.process-")
        assert dumped[0].read_bytes() == b"{oops"

    def test_handler_failure_dumped(self, tmp_path):
        processor = JSONMessageProcessor(ProcessorConfig(debug=True, debug_store=tmp_path))
        with pytest.raises(HandlerError):
            processor.process_json("alert.watchlist.hit.ingress.host", b'{"feed_id": 2.5}')

        dumped = list(tmp_path.iterdir())
        assert len(dumped) == 1
        assert json.loads(dumped[0].read_text()) == {"feed_id": 2.5}

    def test_nothing_dumped_without_debug(self, tmp_path):
        processor = JSONMessageProcessor(ProcessorConfig(debug_store=tmp_path))
        with pytest.raises(MalformedMessageError):
            processor.process_json("watchlist.hit.process", b"{oops")
        assert list(tmp_path.iterdir()) == []
