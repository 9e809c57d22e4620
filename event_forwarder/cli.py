#!/usr/bin/env python3
"""Command-line interface for the event forwarder normalizer.

Commands:
  - event-forwarder normalize : Normalize captured bus messages to JSON lines
  - event-forwarder types     : List registered message types

Typical usage:
  event-forwarder normalize -k watchlist.hit.process -i message.json
  cat messages.jsonl | event-forwarder normalize -k feed.12.storage.hit.process --jsonl
  event-forwarder types --config forwarder.yaml
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterator, TextIO

from event_forwarder.configs.config import build_processor_config, load_forwarder_config
from event_forwarder.configs.settings import get_settings
from event_forwarder.errors import EventForwarderError
from event_forwarder.ingestion.decoding import encode_json
from event_forwarder.ingestion.processor import JSONMessageProcessor
from event_forwarder.monitoring.logging import LoggingOptions, setup_logging
from event_forwarder.normalization.handlers import registered_types


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="event-forwarder", description="Endpoint event normalizer")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("--config", "-c", default=None, help="Path to forwarder YAML config")
    p.add_argument("--log-level", default=None, help="Override log level")
    p.add_argument("--json-logs", action="store_true", help="Emit JSON logs")
    sub = p.add_subparsers(dest="cmd")

    # normalize
    pn = sub.add_parser("normalize", help="Normalize captured messages")
    pn.add_argument("--routing-key", "-k", required=True, help="Routing key of the messages")
    pn.add_argument("--input", "-i", default="-", help="Message file (default: stdin)")
    pn.add_argument("--jsonl", action="store_true", help="Input holds one message per line")
    pn.add_argument("--server-url", default=None, help="Override console URL for links")
    pn.add_argument(
        "--enrich",
        action="store_true",
        help="Look up report titles for feed hits (needs API token)",
    )
    pn.add_argument(
        "--ignore-event-map",
        action="store_true",
        help="Normalize even if the message type is disabled in the config",
    )

    # types
    pt = sub.add_parser("types", help="List registered message types")
    pt.add_argument("--enabled-only", action="store_true", help="Only show enabled types")

    return p.parse_args(argv)


def _read_messages(stream: TextIO, jsonl: bool) -> Iterator[str]:
    if not jsonl:
        yield stream.read()
        return
    for line in stream:
        if line.strip():
            yield line


def _build_processor(args: argparse.Namespace) -> JSONMessageProcessor:
    settings = get_settings()
    if args.config:
        settings = settings.model_copy(update={"CONFIG_PATH": Path(args.config)})
    if getattr(args, "server_url", None) is not None:
        settings = settings.model_copy(update={"CB_SERVER_URL": args.server_url})

    config = load_forwarder_config(settings.CONFIG_PATH)
    return JSONMessageProcessor(build_processor_config(settings, config))


def _cmd_normalize(args: argparse.Namespace) -> int:
    processor = _build_processor(args)
    try:
        return _normalize(processor, args)
    finally:
        processor.close()


def _normalize(processor: JSONMessageProcessor, args: argparse.Namespace) -> int:
    if not args.ignore_event_map and not processor.is_enabled(args.routing_key):
        print(f"Message type for {args.routing_key} is disabled in the config", file=sys.stderr)
        return 0

    if args.enrich and processor.config.report_client is None:
        print("Error: --enrich needs CB_SERVER_URL and CB_API_TOKEN", file=sys.stderr)
        return 2

    if args.input == "-":
        stream: TextIO = sys.stdin
        close = False
    else:
        stream = open(args.input, "r", encoding="utf-8")
        close = True

    failures = 0
    try:
        for body in _read_messages(stream, args.jsonl):
            try:
                records = processor.process_json(args.routing_key, body)
            except EventForwarderError as e:
                print(f"Error: {e}", file=sys.stderr)
                failures += 1
                continue
            for record in records:
                if args.enrich:
                    record = processor.postprocess_message(record)
                print(encode_json(record))
    finally:
        if close:
            stream.close()

    return 1 if failures else 0


def _cmd_types(args: argparse.Namespace) -> int:
    processor = _build_processor(args)
    for message_type in registered_types():
        enabled = processor.is_enabled(message_type)
        if args.enabled_only and not enabled:
            continue
        print(f"{message_type}\t{'enabled' if enabled else 'disabled'}")
    processor.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the CLI with the given arguments."""
    try:
        return _main_impl(argv)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except EventForwarderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _main_impl(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    if args.version:
        from event_forwarder import __version__

        print(__version__)
        return 0

    settings = get_settings()
    setup_logging(
        LoggingOptions(
            level=args.log_level or settings.LOG_LEVEL,
            json_logs=args.json_logs or settings.JSON_LOGS,
        )
    )

    if args.cmd == "normalize":
        return _cmd_normalize(args)
    if args.cmd == "types":
        return _cmd_types(args)

    print("Error: no command given (try --help)", file=sys.stderr)
    return 2


if __name__ == "__main__":
    sys.exit(main())
