"""
Exception hierarchy for the event forwarder.

Only message-level failures are raised to callers. Field-level problems
(missing or mis-typed values, malformed endpoint strings, bad GUIDs) are
resolved with defaults inside the normalization layer and never surface
here.
"""


class EventForwarderError(Exception):
    """Base class for all forwarder errors."""


class ConfigError(EventForwarderError):
    """Raised when the processor configuration cannot be loaded."""


class MalformedMessageError(EventForwarderError):
    """Raised when a message body cannot be decoded into a record."""

    def __init__(self, routing_key: str, reason: str):
        self.routing_key = routing_key
        self.reason = reason
        super().__init__(f"Could not decode message for '{routing_key}': {reason}")


class HandlerError(EventForwarderError):
    """Raised by a type handler when a message cannot be normalized at all."""

    def __init__(self, message_type: str, reason: str):
        self.message_type = message_type
        self.reason = reason
        super().__init__(f"{message_type}: {reason}")


class GUIDParseError(EventForwarderError):
    """Raised when a process GUID token does not have a recognised shape."""


class ReportLookupError(EventForwarderError):
    """Raised by the report API client when a report cannot be fetched."""
