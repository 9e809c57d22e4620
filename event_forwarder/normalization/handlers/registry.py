"""Static table mapping canonical message types to their handlers."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from event_forwarder.normalization.handlers.alert import (
    alert_watchlist_hit_binary,
    alert_watchlist_hit_host,
    alert_watchlist_hit_process,
)
from event_forwarder.normalization.handlers.binary import (
    binaryinfo_observed,
    binarystore_file_added,
)
from event_forwarder.normalization.handlers.common import Handler
from event_forwarder.normalization.handlers.feed import (
    feed_ingress_hit_process,
    feed_storage_hit_process,
)
from event_forwarder.normalization.handlers.watchlist import (
    watchlist_hit_binary,
    watchlist_hit_process,
    watchlist_storage_hit_binary,
    watchlist_storage_hit_process,
)
from event_forwarder.schemas.message import MessageType

_HANDLERS: dict[MessageType, Handler] = {
    MessageType.WATCHLIST_HIT_PROCESS: watchlist_hit_process,
    MessageType.WATCHLIST_STORAGE_HIT_PROCESS: watchlist_storage_hit_process,
    MessageType.WATCHLIST_HIT_BINARY: watchlist_hit_binary,
    MessageType.WATCHLIST_STORAGE_HIT_BINARY: watchlist_storage_hit_binary,
    MessageType.FEED_INGRESS_HIT_PROCESS: feed_ingress_hit_process,
    MessageType.FEED_STORAGE_HIT_PROCESS: feed_storage_hit_process,
    MessageType.FEED_QUERY_HIT_PROCESS: feed_storage_hit_process,
    MessageType.ALERT_WATCHLIST_HIT_INGRESS_PROCESS: alert_watchlist_hit_process,
    MessageType.ALERT_WATCHLIST_HIT_QUERY_PROCESS: alert_watchlist_hit_process,
    MessageType.ALERT_WATCHLIST_HIT_INGRESS_BINARY: alert_watchlist_hit_binary,
    MessageType.ALERT_WATCHLIST_HIT_QUERY_BINARY: alert_watchlist_hit_binary,
    MessageType.ALERT_WATCHLIST_HIT_INGRESS_HOST: alert_watchlist_hit_host,
    MessageType.BINARYSTORE_FILE_ADDED: binarystore_file_added,
    MessageType.BINARYINFO_OBSERVED: binaryinfo_observed,
    MessageType.BINARYINFO_HOST_OBSERVED: binaryinfo_observed,
    MessageType.BINARYINFO_GROUP_OBSERVED: binaryinfo_observed,
}


def build_handler_table() -> Mapping[str, Handler]:
    """Return a read-only ``canonical type -> handler`` mapping."""
    return MappingProxyType({t.value: handler for t, handler in _HANDLERS.items()})


def registered_types() -> list[str]:
    return sorted(t.value for t in _HANDLERS)
