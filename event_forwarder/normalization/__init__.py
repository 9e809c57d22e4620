"""
Normalization layer for endpoint event messages.

This package provides:
- fields: typed, defaulting accessors over decoded records
- key_rewrite: the pre-dispatch key rewrite pass
- alliance: alliance attribution parsing
- handlers: one transformation handler per canonical message type
- links: console deep links for normalized records
"""

from event_forwarder.normalization.key_rewrite import rewrite_keys
from event_forwarder.normalization.links import add_links

__all__ = ["add_links", "rewrite_keys"]
