"""
Message ingestion: routing key canonicalization, body decoding and the
dispatching JSON message processor.
"""

from event_forwarder.ingestion.decoding import decode_message, encode_json
from event_forwarder.ingestion.processor import JSONMessageProcessor, ProcessorConfig
from event_forwarder.ingestion.routing import canonicalize_routing_key

__all__ = [
    "JSONMessageProcessor",
    "ProcessorConfig",
    "canonicalize_routing_key",
    "decode_message",
    "encode_json",
]
