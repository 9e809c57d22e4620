"""
Alliance (third-party threat intel) attribution parsing.

Upstream messages flatten per-source attribution into keys named
``alliance_<field>_<source>``, e.g.::

    "alliance_data_bit9advancedthreats": "066eb0b2-f25b-48dc-85ad-ad20b783a25e",
    "alliance_score_bit9advancedthreats": 100,
    "alliance_link_bit9advancedthreats": "https://www.carbonblack.com/cbfeeds/advancedthreat_feed.xhtml#6",
    "alliance_updated_bit9advancedthreats": "2016-12-06T14:30:48.000Z",

Two output shapes are produced from these keys:

- the grouped form built by the key rewrite pass, a mapping of
  ``source -> {field: value}`` (:class:`AllianceGrouping`)
- the list form used by feed storage hits, one
  ``{source, data, score, link, updated}`` record per source
  (:func:`collect_alliance_sources`)
"""

from __future__ import annotations

from typing import Any

from event_forwarder.normalization.fields import get_number, get_string

ALLIANCE_PREFIX = "alliance_"
ALLIANCE_DATA_KEY = "alliance_data"


def is_alliance_key(key: str) -> bool:
    """Return True for any key carrying the alliance marker."""
    return ALLIANCE_PREFIX in key


def parse_alliance_key(key: str) -> tuple[str, str] | None:
    """
    Split an ``alliance_<field>_<source>`` key into ``(field, source)``.

    Only keys that split on ``_`` into exactly three parts are accepted;
    anything else (source names containing underscores, truncated keys)
    returns None.
    """
    parts = key.split("_")
    if len(parts) != 3:
        return None
    _, field, source = parts
    return field, source


class AllianceGrouping:
    """Accumulates flattened alliance keys into a per-source mapping."""

    def __init__(self) -> None:
        self._sources: dict[str, dict[str, Any]] = {}

    def add(self, key: str, value: Any) -> bool:
        """
        Fold one flattened key into the grouping.

        Returns False when the key is not a well-formed three part alliance
        key; the caller still drops it from the record.
        """
        parsed = parse_alliance_key(key)
        if parsed is None:
            return False
        field, source = parsed
        self._sources.setdefault(source, {})[field] = value
        return True

    def merge_into(self, record: dict[str, Any]) -> None:
        """Attach the grouping under ``alliance_data``, merging any existing one."""
        if not self._sources:
            return
        existing = record.get(ALLIANCE_DATA_KEY)
        if isinstance(existing, dict):
            for source, fields in self._sources.items():
                current = existing.get(source)
                if isinstance(current, dict):
                    current.update(fields)
                else:
                    existing[source] = fields
        else:
            record[ALLIANCE_DATA_KEY] = self._sources


def _alliance_data_value(value: Any) -> str:
    # Only the most recent data item is forwarded; the other alliance fields are singletons.
    if isinstance(value, list):
        strings = [item for item in value if isinstance(item, str)]
        return strings[-1] if strings else ""
    if isinstance(value, str):
        return value
    return ""


def _flat_sources(record: dict[str, Any]) -> list[str]:
    sources: list[str] = []
    for key in record:
        if not key.startswith(ALLIANCE_PREFIX):
            continue
        parts = key.split("_")
        if len(parts) < 3:
            continue
        if parts[2] not in sources:
            sources.append(parts[2])
    return sources


def collect_alliance_sources(record: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Build the list form of alliance attribution for a record.

    Reads flattened ``alliance_<field>_<source>`` keys when present, and
    also the grouped ``alliance_data`` mapping left behind by the key
    rewrite pass, so the result is the same whether or not the record was
    rewritten first. Sources keep their first-seen order.
    """
    results: list[dict[str, Any]] = []

    for source in _flat_sources(record):
        entry: dict[str, Any] = {"source": source}
        data_key = f"{ALLIANCE_PREFIX}data_{source}"
        if data_key in record:
            entry["data"] = _alliance_data_value(record[data_key])
        entry["score"] = get_number(record, f"{ALLIANCE_PREFIX}score_{source}", 0)
        entry["link"] = get_string(record, f"{ALLIANCE_PREFIX}link_{source}", "")
        entry["updated"] = get_string(record, f"{ALLIANCE_PREFIX}updated_{source}", "")
        results.append(entry)

    seen = {entry["source"] for entry in results}
    grouped = record.get(ALLIANCE_DATA_KEY)
    if isinstance(grouped, dict):
        for source, fields in grouped.items():
            if source in seen or not isinstance(fields, dict):
                continue
            entry = {"source": source}
            if "data" in fields:
                entry["data"] = _alliance_data_value(fields["data"])
            entry["score"] = get_number(fields, "score", 0)
            entry["link"] = get_string(fields, "link", "")
            entry["updated"] = get_string(fields, "updated", "")
            results.append(entry)

    return results
