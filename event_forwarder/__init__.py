"""
Endpoint event normalizer.

Turns messages from the endpoint detection server's message bus into
canonical, flat records ready for forwarding. The main entry point is
:class:`~event_forwarder.ingestion.processor.JSONMessageProcessor`.
"""

from event_forwarder.errors import (
    EventForwarderError,
    HandlerError,
    MalformedMessageError,
)
from event_forwarder.ingestion.processor import JSONMessageProcessor, ProcessorConfig
from event_forwarder.ingestion.routing import canonicalize_routing_key
from event_forwarder.schemas.message import SCHEMA_VERSION, MessageType

__version__ = "0.1.0"

__all__ = [
    "EventForwarderError",
    "HandlerError",
    "JSONMessageProcessor",
    "MalformedMessageError",
    "MessageType",
    "ProcessorConfig",
    "SCHEMA_VERSION",
    "__version__",
    "canonicalize_routing_key",
]
