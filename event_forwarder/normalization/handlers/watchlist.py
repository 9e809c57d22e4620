"""
Watchlist hit handlers.

Watchlist hits arrive with a ``docs`` array holding one sub-document per
matching process or binary. Each sub-document becomes its own output
record, carrying the watchlist header fields of the enclosing message.
"""

from __future__ import annotations

import logging

from event_forwarder.normalization.fields import get_number, get_object, get_string
from event_forwarder.normalization.handlers.common import (
    Record,
    copy_binary_metadata,
    copy_event_counts,
    copy_parent_metadata,
    copy_process_metadata,
    copy_sensor_metadata,
    copy_watchlist_header,
    explode_docs,
    new_output,
)
from event_forwarder.schemas.message import MessageType

logger = logging.getLogger(__name__)

# per-endpoint details of a binary hit live on the outer message, not in docs
BINARY_ENDPOINT_DETAILS = ("observed_filename", "endpoint", "group")


def watchlist_hit_process(message_type: str, record: Record) -> list[Record]:
    header = copy_watchlist_header(record)
    outputs = []
    for doc in explode_docs(record):
        out = new_output(MessageType.WATCHLIST_HIT_PROCESS.value)
        out.update(header)
        copy_sensor_metadata(doc, out)
        copy_process_metadata(doc, out)
        copy_parent_metadata(doc, out)
        copy_event_counts(doc, out)
        outputs.append(out)
    return outputs


def watchlist_storage_hit_process(message_type: str, record: Record) -> list[Record]:
    """Same as :func:`watchlist_hit_process`; storage hits have no sensor metadata."""
    header = copy_watchlist_header(record)
    outputs = []
    for doc in explode_docs(record):
        out = new_output(MessageType.WATCHLIST_STORAGE_HIT_PROCESS.value)
        out.update(header)
        copy_process_metadata(doc, out)
        copy_parent_metadata(doc, out)
        copy_event_counts(doc, out)
        outputs.append(out)
    return outputs


def watchlist_hit_binary(message_type: str, record: Record) -> list[Record]:
    header = copy_watchlist_header(record)
    outputs = []
    for doc in explode_docs(record):
        out = new_output(MessageType.WATCHLIST_HIT_BINARY.value)
        out.update(header)
        out["host_count"] = get_number(doc, "host_count", 0)
        out["last_seen"] = get_string(doc, "last_seen", "")
        copy_binary_metadata(doc, out)

        for detail in BINARY_ENDPOINT_DETAILS:
            out[detail] = get_object(record, detail)

        outputs.append(out)
    return outputs


def _split_sensor(endpoint: str) -> tuple[str, int] | None:
    parts = endpoint.split("|")
    if len(parts) != 2:
        return None
    hostname, sensor_id = parts
    try:
        return hostname, int(sensor_id)
    except ValueError:
        # keep the hostname; sensor id falls back to 0
        return hostname, 0


def watchlist_storage_hit_binary(message_type: str, record: Record) -> list[Record]:
    header = copy_watchlist_header(record)
    outputs = []
    for doc in explode_docs(record):
        out = new_output(MessageType.WATCHLIST_STORAGE_HIT_BINARY.value)
        out.update(header)
        out["host_count"] = get_number(doc, "host_count", 0)
        out["last_seen"] = get_string(doc, "last_seen", "")
        copy_binary_metadata(doc, out)

        endpoint = get_string(doc, "endpoint", "")
        sensor = _split_sensor(endpoint)
        if sensor is None:
            logger.debug("Could not split endpoint %r into hostname and sensor id", endpoint)
        else:
            out["hostname"], out["sensor_id"] = sensor

        out["group"] = get_string(doc, "group", "")
        out["observed_filename"] = get_string(doc, "observed_filename", "")
        outputs.append(out)
    return outputs
