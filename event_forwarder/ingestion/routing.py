"""Routing key canonicalization."""

from __future__ import annotations

import re

FEED_ROUTING_KEY = re.compile(r"^feed\.(\d+)\.(.*)$")


def canonicalize_routing_key(routing_key: str) -> str:
    """
    Map a transport routing key to its canonical message type.

    Feed hits are published per feed (``feed.<id>.<rest>``); the feed id
    segment is dropped so one handler serves every feed. All other keys
    are returned unchanged.

    Example:
        >>> canonicalize_routing_key("feed.42.storage.hit.process")
        'feed.storage.hit.process'
    """
    match = FEED_ROUTING_KEY.match(routing_key)
    if match:
        return f"feed.{match.group(2)}"
    return routing_key
