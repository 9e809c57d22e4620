"""
Per-type transformation handlers.

Every handler has the signature ``handler(message_type, record) -> list``
and builds fresh output records; the input record is only read.
"""

from event_forwarder.normalization.handlers.registry import (
    build_handler_table,
    registered_types,
)

__all__ = ["build_handler_table", "registered_types"]
