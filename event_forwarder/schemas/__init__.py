from event_forwarder.schemas.message import (
    SCHEMA_VERSION,
    CanonicalEvent,
    MessageType,
    ReportInfo,
)

__all__ = ["SCHEMA_VERSION", "CanonicalEvent", "MessageType", "ReportInfo"]
