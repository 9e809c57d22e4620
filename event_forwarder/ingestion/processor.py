"""
JSON message processor.

Entry point of the normalization engine. For each delivered message:

    routing key -> canonical type
    body        -> decoded record -> key rewrite -> type handler
                -> 0..N normalized records -> console links

Report enrichment is not part of dispatch; callers run
:meth:`JSONMessageProcessor.postprocess_message` on the records that
need it, outside the hot path.

Usage:
    from event_forwarder.ingestion.processor import JSONMessageProcessor, ProcessorConfig

    processor = JSONMessageProcessor(ProcessorConfig(server_url="https://cb.local/"))
    records = processor.process_json("watchlist.hit.process", body)
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from event_forwarder.enrichment.reports import ReportEnricher, ReportLookup
from event_forwarder.errors import HandlerError, MalformedMessageError
from event_forwarder.ingestion.decoding import decode_message, encode_json
from event_forwarder.ingestion.routing import canonicalize_routing_key
from event_forwarder.monitoring.logging import with_context
from event_forwarder.normalization.handlers import build_handler_table
from event_forwarder.normalization.handlers.common import Handler
from event_forwarder.normalization.key_rewrite import rewrite_keys
from event_forwarder.normalization.links import add_links
from event_forwarder.schemas.message import CanonicalEvent

logger = logging.getLogger(__name__)


@dataclass
class ProcessorConfig:
    """
    Configuration for a processor instance, fixed at construction.

    ``event_map`` holds the enabled canonical types; None enables every
    type and an empty set disables them all.
    """

    server_url: str = ""
    event_map: frozenset[str] | None = None
    debug: bool = False
    debug_store: Path | None = None
    report_client: ReportLookup | None = None
    validate_output: bool = False


class JSONMessageProcessor:
    """
    Normalizes JSON messages from the server's message bus.

    Holds no per-message state, so one instance can be shared by any
    number of worker threads.
    """

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self.event_map = (
            frozenset(self.config.event_map) if self.config.event_map is not None else None
        )
        self._handlers: Mapping[str, Handler] = build_handler_table()
        self._enricher = (
            ReportEnricher(self.config.report_client) if self.config.report_client else None
        )

    @property
    def handlers(self) -> Mapping[str, Handler]:
        return self._handlers

    def is_enabled(self, routing_key: str) -> bool:
        """Return True when the message type is enabled in the event map."""
        if self.event_map is None:
            return True
        return canonicalize_routing_key(routing_key) in self.event_map

    def process_json(self, routing_key: str, body: bytes | str) -> list[dict[str, Any]]:
        """
        Decode and normalize one delivered message.

        Raises:
            MalformedMessageError: the body is not a JSON object.
            HandlerError: the message type's handler rejected the message.
        """
        try:
            record = decode_message(routing_key, body)
        except MalformedMessageError:
            self._dump_debug(routing_key, body)
            raise
        return self.process_message(record, routing_key)

    def process_message(self, record: dict[str, Any], routing_key: str) -> list[dict[str, Any]]:
        """
        Normalize an already decoded record.

        The record is rewritten in place before dispatch. Messages of an
        unregistered type produce no output.
        """
        message_type = canonicalize_routing_key(routing_key)
        rewrite_keys(record)

        handler = self._handlers.get(message_type)
        if handler is None:
            logger.debug(f"No handler registered for {message_type}, dropping message")
            return []

        try:
            outputs = handler(message_type, record)
        except HandlerError as e:
            with_context(logger, routing_key=routing_key, message_type=message_type).warning(
                f"Could not normalize message: {e}"
            )
            if self.config.debug:
                self._dump_debug(routing_key, record)
            raise

        for output in outputs:
            add_links(output, self.config.server_url)
            if self.config.validate_output:
                self._validate(message_type, output)
        return outputs

    def postprocess_message(self, record: dict[str, Any]) -> dict[str, Any]:
        """Attach report metadata to a feed hit record when a report client is set."""
        if self._enricher is None:
            return record
        return self._enricher.postprocess(record)

    def close(self) -> None:
        """Release the report client's connections, if one is configured."""
        if self.config.report_client is not None:
            self.config.report_client.close()

    def _validate(self, message_type: str, output: dict[str, Any]) -> None:
        try:
            CanonicalEvent.model_validate(output)
        except ValidationError as e:
            raise HandlerError(message_type, f"handler produced an invalid record: {e}") from e

    def _dump_debug(self, routing_key: str, payload: Any) -> None:
        """Write an offending message to the debug store for later inspection."""
        if not self.config.debug or self.config.debug_store is None:
            return

        store = Path(self.config.debug_store)
        path = store / f"{routing_key}-{uuid.uuid4().hex}.json"
        try:
            store.mkdir(parents=True, exist_ok=True)
            if isinstance(payload, (bytes, bytearray)):
                path.write_bytes(bytes(payload))
            elif isinstance(payload, str):
                path.write_text(payload, encoding="utf-8")
            else:
                path.write_text(encode_json(payload), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not write debug message to {path}: {e}")
            return
        logger.debug(f"Wrote debug message to {path}")
