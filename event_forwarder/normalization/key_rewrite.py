"""
Key rewrite pass.

Runs once over every decoded record before it is dispatched to a type
handler. It folds ad-hoc naming conventions into structured fields,
renames legacy keys and drops fields that are never forwarded. The pass
mutates the record in place and is idempotent: a rewritten record has no
keys left to rewrite.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import parse_qs

from event_forwarder.normalization.alliance import (
    ALLIANCE_DATA_KEY,
    AllianceGrouping,
    is_alliance_key,
)
from event_forwarder.normalization.fields import as_int32, ipv4_from_signed, upper_md5

logger = logging.getLogger(__name__)

DROPPED_KEYS = frozenset({"highlights_by_doc", "highlights"})
RENAMED_KEYS = {
    "timestamp": "event_timestamp",
    "computer_name": "hostname",
}
MD5_KEYS = frozenset({"md5", "parent_md5", "process_md5"})
IP_KEYS = frozenset({"comms_ip", "interface_ip"})


def split_endpoint(value: Any) -> tuple[str, str] | None:
    """
    Split an ``endpoint`` value of the form ``"<hostname>|<sensor_id>"``.

    The value may be the string itself or a list whose first element is
    that string. Returns None when no ``|`` separated pair can be found.
    """
    if isinstance(value, list):
        value = value[0] if value else None
    if not isinstance(value, str):
        return None
    parts = value.split("|")
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


def parse_ioc_query(raw_value: Any) -> tuple[str, str] | None:
    """
    Decode the ``ioc_value`` of a query IOC.

    The value is a JSON encoded object with ``index_type`` and a
    URL-encoded ``search_query`` whose ``q`` parameter holds the query
    text. Returns ``(index_type, query)`` or None if any part is missing.
    """
    if not isinstance(raw_value, str):
        return None
    try:
        encoded = json.loads(raw_value)
    except ValueError:
        return None
    if not isinstance(encoded, dict):
        return None

    index_type = encoded.get("index_type")
    search_query = encoded.get("search_query")
    if not isinstance(index_type, str) or not isinstance(search_query, str):
        return None

    query = parse_qs(search_query, keep_blank_values=True).get("q")
    if not query:
        return None
    return index_type, query[0]


def _rewrite_ioc_type(record: dict[str, Any], value: Any) -> None:
    if isinstance(value, dict):
        md5 = value.get("md5")
        if isinstance(md5, str):
            if len(md5) not in (0, 32):
                logger.warning("MD5 length was not valid", extra={"md5_length": len(md5)})
            value["md5"] = md5.upper()
        return

    if value == "query":
        parsed = parse_ioc_query(record.get("ioc_value"))
        if parsed is None:
            logger.debug("Could not decode query IOC value")
            return
        record["ioc_query_index"], record["ioc_query_string"] = parsed


def rewrite_keys(record: dict[str, Any]) -> dict[str, Any]:
    """
    Apply the key rewrite rules to ``record`` in place and return it.

    Rules, by key:

    - ``alliance_<field>_<source>``: grouped under ``alliance_data``
    - ``endpoint``: split into ``hostname`` and ``sensor_id``
    - ``highlights``, ``highlights_by_doc``: removed
    - ``timestamp`` -> ``event_timestamp``, ``computer_name`` -> ``hostname``
    - ``md5``, ``parent_md5``, ``process_md5``: 32 char values upper-cased
    - ``ioc_type``: md5 upper-casing or query IOC decoding
    - ``comms_ip``, ``interface_ip``: signed integers -> dotted quad
    """
    alliance = AllianceGrouping()

    for key, value in list(record.items()):
        if key == ALLIANCE_DATA_KEY and isinstance(value, dict):
            # already grouped by an earlier pass
            continue

        if is_alliance_key(key):
            if not alliance.add(key, value):
                logger.debug("Dropping malformed alliance key %s", key)
            del record[key]

        elif key == "endpoint":
            endpoint = split_endpoint(value)
            if endpoint is None:
                logger.debug("Could not split endpoint value %r", value)
            else:
                record["hostname"], record["sensor_id"] = endpoint
            del record["endpoint"]

        elif key in DROPPED_KEYS:
            del record[key]

        elif key in RENAMED_KEYS:
            record[RENAMED_KEYS[key]] = value
            del record[key]

        elif key in MD5_KEYS:
            record[key] = upper_md5(value)

        elif key == "ioc_type":
            _rewrite_ioc_type(record, value)

        elif key in IP_KEYS:
            ip = as_int32(value)
            if ip is not None:
                record[key] = ipv4_from_signed(ip)

    alliance.merge_into(record)
    return record
