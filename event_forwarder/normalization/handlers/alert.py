"""
Alert handlers.

Alerts are raised for both watchlist and feed hits and share one set of
metadata fields. The origin is told apart by ``feed_id``: watchlist
alerts carry ``-1`` (or no feed id at all), feed alerts carry the feed's
numeric id.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from event_forwarder.errors import HandlerError
from event_forwarder.normalization.fields import (
    get_ip_address,
    get_number,
    get_object,
    get_string,
    get_string_list,
    is_number,
)
from event_forwarder.normalization.handlers.common import (
    Record,
    copy_event_counts,
    new_output,
)
from event_forwarder.schemas.message import MessageType

logger = logging.getLogger(__name__)

WATCHLIST_FEED_ID = -1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _parse_feed_id(message_type: str, record: Record) -> int:
    feed_id = get_number(record, "feed_id", WATCHLIST_FEED_ID)
    if isinstance(feed_id, Decimal) or not INT64_MIN <= feed_id <= INT64_MAX:
        raise HandlerError(
            message_type,
            f"Could not parse feed_id from incoming alert message: {feed_id}",
        )
    return feed_id


def _watchlist_id_as_number(record: Record) -> int | Decimal:
    # watchlist ids are strings in alert messages
    value = record.get("watchlist_id")
    if is_number(value):
        return value
    if not isinstance(value, str):
        return 0
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return Decimal(value)
    except InvalidOperation:
        logger.debug("Alert watchlist_id %r is not numeric", value)
        return 0


def copy_alert_metadata(message_type: str, record: Record, out: Record) -> None:
    """
    Copy the metadata shared by every alert type.

    Raises:
        HandlerError: ``feed_id`` is present but not an integer.
    """
    feed_id = _parse_feed_id(message_type, record)
    if feed_id == WATCHLIST_FEED_ID:
        out["watchlist_name"] = get_string(record, "watchlist_name", "")
        out["watchlist_id"] = _watchlist_id_as_number(record)
    else:
        out["feed_name"] = get_string(record, "feed_name", "")
        out["feed_id"] = feed_id
        # for feed alerts the watchlist id is the id of the matching report
        out["report_id"] = get_string(record, "watchlist_id", "")
        out["feed_rating"] = get_number(record, "feed_rating", 0)

    out["report_score"] = get_number(record, "report_score", 0)

    out["id"] = get_string(record, "unique_id", "")
    out["alert_severity"] = get_number(record, "alert_severity", 0)
    out["ioc_confidence"] = get_number(record, "ioc_confidence", 0)
    out["sensor_criticality"] = get_number(record, "sensor_criticality", 0)
    out["alert_type"] = get_string(record, "alert_type", "")
    out["status"] = get_string(record, "status", "")

    out["ioc_type"] = get_string(record, "ioc_type", "")
    # query alerts have no ioc_value
    if message_type != MessageType.ALERT_WATCHLIST_HIT_QUERY_PROCESS.value:
        out["ioc_value"] = get_string(record, "ioc_value", "")


def alert_watchlist_hit_process(message_type: str, record: Record) -> list[Record]:
    out = new_output(message_type)
    copy_alert_metadata(message_type, record, out)
    copy_event_counts(record, out)

    # sensor metadata without host_type
    out["sensor_id"] = get_number(record, "sensor_id", 0)
    out["hostname"] = get_string(record, "hostname", "")
    out["group"] = get_string(record, "group", "")
    out["comms_ip"] = get_ip_address(record, "comms_ip", "")
    out["interface_ip"] = get_ip_address(record, "interface_ip", "")
    out["os_type"] = get_string(record, "os_type", "")

    out["process_name"] = get_string(record, "process_name", "")
    out["process_path"] = get_string(record, "process_path", "")
    out["username"] = get_string(record, "username", "")
    out["process_md5"] = get_string(record, "md5", "")

    out["created_time"] = get_string(record, "created_time", "")
    out["event_timestamp"] = get_number(record, "event_timestamp", 0)
    out["process_guid"] = get_string(record, "process_unique_id", "")
    return [out]


def alert_watchlist_hit_binary(message_type: str, record: Record) -> list[Record]:
    out = new_output(message_type)
    copy_alert_metadata(message_type, record, out)

    out["md5"] = get_string(record, "md5", "")
    out["digsig_result"] = get_string(record, "digsig_result", "(unknown)")
    out["observed_filename"] = get_object(record, "observed_filename")

    hostnames = []
    hostname = get_string(record, "hostname", "")
    if hostname:
        hostnames.append(hostname)
    hostnames.extend(get_string_list(record, "other_hostnames"))
    out["hostnames"] = hostnames

    out["event_timestamp"] = get_number(record, "event_timestamp", 0)
    out["created_time"] = get_string(record, "created_time", "")
    return [out]


def alert_watchlist_hit_host(message_type: str, record: Record) -> list[Record]:
    out = new_output(message_type)
    copy_alert_metadata(message_type, record, out)

    out["event_timestamp"] = get_number(record, "event_timestamp", 0)
    out["created_time"] = get_string(record, "created_time", "")

    # sensor metadata without host_type, comms_ip and interface_ip
    out["sensor_id"] = get_number(record, "sensor_id", 0)
    out["hostname"] = get_string(record, "hostname", "")
    out["group"] = get_string(record, "group", "")
    out["os_type"] = get_string(record, "os_type", "")
    return [out]
