"""
Threat feed hit handlers.

Ingress hits describe a single process and produce one record. Storage
and query hits carry a ``docs`` array; sensor fields live partly on the
outer message and partly in each sub-document.
"""

from __future__ import annotations

from event_forwarder.normalization.alliance import collect_alliance_sources
from event_forwarder.normalization.fields import get_ip_address, get_number, get_string
from event_forwarder.normalization.handlers.common import (
    Record,
    copy_event_counts,
    copy_feed_sensor_metadata,
    copy_parent_metadata,
    copy_process_metadata,
    explode_docs,
    new_output,
)
from event_forwarder.schemas.message import MessageType


def _copy_feed_header(record: Record, out: Record) -> None:
    out["feed_name"] = get_string(record, "feed_name", "")
    out["feed_id"] = get_number(record, "feed_id", 0)
    out["cb_version"] = get_string(record, "cb_version", "")
    out["event_timestamp"] = get_number(record, "event_timestamp", 0)
    out["report_id"] = get_string(record, "report_id", "")
    out["report_score"] = get_number(record, "report_score", 0)


def feed_ingress_hit_process(message_type: str, record: Record) -> list[Record]:
    out = new_output(MessageType.FEED_INGRESS_HIT_PROCESS.value)
    _copy_feed_header(record, out)
    copy_feed_sensor_metadata(record, out)

    out["ioc_type"] = get_string(record, "ioc_type", "")
    out["ioc_value"] = get_string(record, "ioc_value", "")

    # ingress hits only know the process id, the segment id is not assigned yet
    out["process_guid"] = get_string(record, "process_id", "")
    return [out]


def feed_storage_hit_process(message_type: str, record: Record) -> list[Record]:
    """Handles both ``feed.storage.hit.process`` and ``feed.query.hit.process``."""
    outputs = []
    for doc in explode_docs(record):
        out = new_output(message_type)
        _copy_feed_header(record, out)

        if message_type == MessageType.FEED_STORAGE_HIT_PROCESS.value:
            out["alliance_data"] = collect_alliance_sources(record)

        out["sensor_id"] = get_number(record, "sensor_id", 0)
        out["hostname"] = get_string(record, "hostname", "")
        out["group"] = get_string(record, "group", "")
        out["comms_ip"] = get_ip_address(record, "comms_ip", "")
        out["interface_ip"] = get_ip_address(record, "interface_ip", "")
        out["host_type"] = get_string(doc, "host_type", "")
        out["os_type"] = get_string(doc, "os_type", "")

        copy_process_metadata(doc, out)
        copy_parent_metadata(doc, out)
        copy_event_counts(doc, out)
        outputs.append(out)
    return outputs
