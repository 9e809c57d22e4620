"""
Field-copy helpers shared by the type handlers.

Each helper reads from a source record (the message itself or one of its
``docs`` sub-documents) and writes defaulted, typed values into an output
record.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from event_forwarder.normalization.fields import (
    get_bool,
    get_ip_address,
    get_number,
    get_string,
    upper_md5,
)
from event_forwarder.schemas.message import SCHEMA_VERSION

Record = dict[str, Any]
Handler = Callable[[str, Record], list[Record]]

EVENT_COUNT_FIELDS = (
    "modload_count",
    "filemod_count",
    "regmod_count",
    "emet_count",
    "netconn_count",
    "crossproc_count",
    "processblock_count",
    "childproc_count",
)


def new_output(message_type: str) -> Record:
    """Start a fresh output record with the canonical envelope."""
    return {"type": message_type, "schema_version": SCHEMA_VERSION}


def explode_docs(record: Record) -> Iterator[Record]:
    """
    Yield the well-formed sub-documents of a ``docs`` array, in order.

    Elements that are not objects are skipped silently, as is a ``docs``
    value that is not a list.
    """
    docs = record.get("docs")
    if not isinstance(docs, list):
        return
    for doc in docs:
        if isinstance(doc, dict):
            yield doc


def copy_watchlist_header(record: Record) -> Record:
    """Fields shared by every document of a watchlist hit."""
    return {
        "watchlist_name": get_string(record, "watchlist_name", ""),
        "watchlist_id": get_number(record, "watchlist_id", 0),
        "cb_version": get_string(record, "cb_version", ""),
        "event_timestamp": get_number(record, "event_timestamp", 0),
    }


def copy_sensor_metadata(source: Record, out: Record) -> None:
    out["sensor_id"] = get_number(source, "sensor_id", 0)
    out["hostname"] = get_string(source, "hostname", "")
    out["group"] = get_string(source, "group", "")
    out["comms_ip"] = get_ip_address(source, "comms_ip", "")
    out["interface_ip"] = get_ip_address(source, "interface_ip", "")
    out["host_type"] = get_string(source, "host_type", "")
    out["os_type"] = get_string(source, "os_type", "")


def copy_feed_sensor_metadata(source: Record, out: Record) -> None:
    # feed messages carry no comms_ip, interface_ip or host_type
    out["sensor_id"] = get_number(source, "sensor_id", 0)
    out["hostname"] = get_string(source, "hostname", "")
    out["group"] = get_string(source, "group", "")
    out["os_type"] = get_string(source, "os_type", "")


def copy_process_metadata(source: Record, out: Record) -> None:
    out["process_md5"] = upper_md5(get_string(source, "process_md5", ""))
    out["process_guid"] = get_string(source, "unique_id", "")
    out["process_name"] = get_string(source, "process_name", "")
    out["cmdline"] = get_string(source, "cmdline", "")
    out["process_pid"] = get_number(source, "process_pid", 0)
    out["username"] = get_string(source, "username", "")
    out["path"] = get_string(source, "path", "")
    out["last_update"] = get_string(source, "last_update", "")
    out["start"] = get_string(source, "start", "")


def copy_parent_metadata(source: Record, out: Record) -> None:
    out["parent_name"] = get_string(source, "parent_name", "")
    out["parent_guid"] = get_string(source, "parent_unique_id", "")
    out["parent_pid"] = get_number(source, "parent_pid", 0)


def copy_event_counts(source: Record, out: Record) -> None:
    """Process event counts at the time of the hit."""
    for field in EVENT_COUNT_FIELDS:
        out[field] = get_number(source, field, 0)


def copy_binary_metadata(source: Record, out: Record) -> None:
    out["digsig_result"] = get_string(source, "digsig_result", "(unknown)")
    out["digsig_result_code"] = get_string(source, "digsig_result_code", "")
    out["product_version"] = get_string(source, "product_version", "")
    out["copied_mod_len"] = get_number(source, "copied_mod_len", 0)
    out["orig_mod_len"] = get_number(source, "orig_mod_len", 0)
    out["is_executable_image"] = get_bool(source, "is_executable_image")
    out["is_64bit"] = get_bool(source, "is_64bit")
    out["md5"] = upper_md5(get_string(source, "md5", ""))
    out["file_version"] = get_string(source, "file_version", "")
    out["internal_name"] = get_string(source, "internal_name", "")
    out["company_name"] = get_string(source, "company_name", "")
    out["original_filename"] = get_string(source, "original_filename", "")
    out["os_type"] = get_string(source, "os_type", "")
    out["file_desc"] = get_string(source, "file_desc", "")
    out["product_name"] = get_string(source, "product_name", "")
    out["legal_copyright"] = get_string(source, "legal_copyright", "")
