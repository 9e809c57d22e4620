"""Deep links back into the server console for normalized records."""

from __future__ import annotations

import logging
from typing import Any

from event_forwarder.errors import GUIDParseError
from event_forwarder.normalization.fields import as_int32
from event_forwarder.normalization.guid import parse_full_guid

logger = logging.getLogger(__name__)

LINKED_MD5_KEYS = ("md5", "parent_md5", "process_md5")
LINKED_GUID_KEYS = {
    "process_guid": "link_process",
    "parent_guid": "link_parent",
}


def add_links(record: dict[str, Any], base_url: str) -> dict[str, Any]:
    """
    Add ``link_*`` fields to ``record`` in place.

    Nothing is added when ``base_url`` is empty. Fields that cannot be
    linked (non-numeric sensor id, short md5, malformed GUID) are skipped.
    """
    if not base_url:
        return record

    sensor_id = as_int32(record.get("sensor_id"))
    if sensor_id is not None:
        record["link_sensor"] = f"{base_url}#/host/{sensor_id}"

    for key in LINKED_MD5_KEYS:
        md5 = record.get(key)
        if isinstance(md5, str) and len(md5) == 32:
            record[f"link_{key}"] = f"{base_url}#/binary/{md5}"

    for key, link_key in LINKED_GUID_KEYS.items():
        if key not in record:
            continue
        try:
            process_id, segment_id = parse_full_guid(record[key])
        except GUIDParseError as e:
            logger.debug("Skipping %s link: %s", link_key, e)
            continue
        record[link_key] = f"{base_url}#analyze/{process_id}/{segment_id}"

    return record
