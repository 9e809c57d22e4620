"""
Canonical message types and envelope models.

Normalized records stay plain dicts so that the per-type field sets can
vary freely; :class:`CanonicalEvent` describes only the envelope every
record must carry and is used to check handler output.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictInt

SCHEMA_VERSION = 2


class MessageType(str, Enum):
    """Canonical message types with a registered handler."""

    WATCHLIST_HIT_PROCESS = "watchlist.hit.process"
    WATCHLIST_STORAGE_HIT_PROCESS = "watchlist.storage.hit.process"
    WATCHLIST_HIT_BINARY = "watchlist.hit.binary"
    WATCHLIST_STORAGE_HIT_BINARY = "watchlist.storage.hit.binary"

    FEED_INGRESS_HIT_PROCESS = "feed.ingress.hit.process"
    FEED_STORAGE_HIT_PROCESS = "feed.storage.hit.process"
    FEED_QUERY_HIT_PROCESS = "feed.query.hit.process"

    ALERT_WATCHLIST_HIT_INGRESS_PROCESS = "alert.watchlist.hit.ingress.process"
    ALERT_WATCHLIST_HIT_QUERY_PROCESS = "alert.watchlist.hit.query.process"
    ALERT_WATCHLIST_HIT_INGRESS_BINARY = "alert.watchlist.hit.ingress.binary"
    ALERT_WATCHLIST_HIT_QUERY_BINARY = "alert.watchlist.hit.query.binary"
    ALERT_WATCHLIST_HIT_INGRESS_HOST = "alert.watchlist.hit.ingress.host"

    BINARYSTORE_FILE_ADDED = "binarystore.file.added"
    BINARYINFO_OBSERVED = "binaryinfo.observed"
    BINARYINFO_HOST_OBSERVED = "binaryinfo.host.observed"
    BINARYINFO_GROUP_OBSERVED = "binaryinfo.group.observed"


class CanonicalEvent(BaseModel):
    """Envelope shared by every normalized record; extra fields pass through."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1)
    schema_version: StrictInt = SCHEMA_VERSION


class ReportInfo(BaseModel):
    """Report metadata returned by the report lookup API."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    score: int = 0
    link: str = ""
