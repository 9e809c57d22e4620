"""Binary store and binary observation handlers."""

from __future__ import annotations

from event_forwarder.normalization.fields import get_number, get_object, get_string
from event_forwarder.normalization.handlers.common import Record, new_output
from event_forwarder.schemas.message import MessageType


def binarystore_file_added(message_type: str, record: Record) -> list[Record]:
    out = new_output(message_type)
    out["md5"] = get_string(record, "md5", "")
    out["size"] = get_number(record, "size", 0)
    out["compressed_size"] = get_number(record, "compressed_size", 0)
    out["node_id"] = get_number(record, "node_id", 0)
    out["file_path"] = get_string(record, "file_path", "")
    out["event_timestamp"] = get_number(record, "event_timestamp", 0)
    return [out]


def binaryinfo_observed(message_type: str, record: Record) -> list[Record]:
    """
    Handle the three ``binaryinfo.*observed`` variants.

    Host observations also carry the hostname and sensor id, group
    observations the sensor group.
    """
    out = new_output(message_type)
    out["md5"] = get_string(record, "md5", "")

    if message_type == MessageType.BINARYINFO_HOST_OBSERVED.value:
        out["hostname"] = get_string(record, "hostname", "")
        out["sensor_id"] = get_number(record, "sensor_id", 0)
    elif message_type == MessageType.BINARYINFO_GROUP_OBSERVED.value:
        out["group"] = get_string(record, "group", "")

    out["scores"] = get_object(record, "scores")
    out["watchlists"] = get_object(record, "watchlists")
    out["event_timestamp"] = get_number(record, "event_timestamp", 0)
    return [out]
