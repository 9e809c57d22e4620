# event_forwarder/configs/config.py
"""
YAML configuration for the JSON message processor.

The ``events`` section selects which message types are forwarded, grouped
the same way as the forwarder's classic ``events_*`` options. Combined
with :class:`~event_forwarder.configs.settings.Settings` it yields the
:class:`~event_forwarder.ingestion.processor.ProcessorConfig` used to
build a processor.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from event_forwarder.configs.settings import Settings, get_settings
from event_forwarder.enrichment.report_api import ReportAPIClient, ReportAPIConfig
from event_forwarder.errors import ConfigError
from event_forwarder.ingestion.processor import ProcessorConfig
from event_forwarder.schemas.message import MessageType

logger = logging.getLogger(__name__)

EVENT_GROUPS: dict[str, tuple[str, ...]] = {
    "events_watchlist": (
        MessageType.WATCHLIST_HIT_PROCESS.value,
        MessageType.WATCHLIST_STORAGE_HIT_PROCESS.value,
        MessageType.WATCHLIST_HIT_BINARY.value,
        MessageType.WATCHLIST_STORAGE_HIT_BINARY.value,
    ),
    "events_feed": (
        MessageType.FEED_INGRESS_HIT_PROCESS.value,
        MessageType.FEED_STORAGE_HIT_PROCESS.value,
        MessageType.FEED_QUERY_HIT_PROCESS.value,
    ),
    "events_alert": (
        MessageType.ALERT_WATCHLIST_HIT_INGRESS_PROCESS.value,
        MessageType.ALERT_WATCHLIST_HIT_QUERY_PROCESS.value,
        MessageType.ALERT_WATCHLIST_HIT_INGRESS_BINARY.value,
        MessageType.ALERT_WATCHLIST_HIT_QUERY_BINARY.value,
        MessageType.ALERT_WATCHLIST_HIT_INGRESS_HOST.value,
    ),
    "events_binary_observed": (
        MessageType.BINARYINFO_OBSERVED.value,
        MessageType.BINARYINFO_HOST_OBSERVED.value,
        MessageType.BINARYINFO_GROUP_OBSERVED.value,
    ),
    "events_binary_upload": (MessageType.BINARYSTORE_FILE_ADDED.value,),
}


class Config:
    """
    Locations of the bundled configuration files.
    """

    # This points to event_forwarder/configs/
    CONFIG_DIR = Path(__file__).parent.resolve()
    FORWARDER_CONFIG_PATH = CONFIG_DIR / "forwarder.yaml"


def load_forwarder_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load the processor YAML configuration."""
    config_path = Path(path) if path else Config.FORWARDER_CONFIG_PATH
    if not config_path.exists():
        raise ConfigError(f"Missing config at {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config at {config_path} must be a mapping")
    return config


def _group_types(group: str, value: Any) -> set[str]:
    known = EVENT_GROUPS[group]
    if value is None or value == 0 or value == "0":
        return set()
    if isinstance(value, str) and value.strip().upper() == "ALL":
        return set(known)

    if isinstance(value, str):
        requested = [v.strip() for v in value.split(",") if v.strip()]
    elif isinstance(value, list):
        requested = [str(v).strip() for v in value]
    else:
        raise ConfigError(f"Invalid value for {group}: {value!r}")

    unknown = [t for t in requested if t not in known]
    if unknown:
        raise ConfigError(f"Unknown message types for {group}: {', '.join(unknown)}")
    return set(requested)


def parse_event_map(config: dict[str, Any]) -> frozenset[str]:
    """
    Build the set of enabled canonical message types.

    Groups missing from the ``events`` section are disabled. A config
    without an ``events`` section enables everything.
    """
    events = config.get("events")
    if events is None:
        return frozenset(t.value for t in MessageType)
    if not isinstance(events, dict):
        raise ConfigError("'events' must be a mapping of events_* groups")

    enabled: set[str] = set()
    for group, value in events.items():
        if group not in EVENT_GROUPS:
            logger.warning(f"Ignoring unknown event group {group}")
            continue
        enabled |= _group_types(group, value)
    return frozenset(enabled)


def build_processor_config(
    settings: Settings | None = None,
    config: dict[str, Any] | None = None,
) -> ProcessorConfig:
    """
    Combine environment settings and the YAML config into a ProcessorConfig.

    A report API client is attached when the settings carry both the
    server URL and an API token.
    """
    settings = settings or get_settings()
    if config is None:
        config = load_forwarder_config(settings.CONFIG_PATH)

    processor_section = config.get("processor") or {}

    report_client = None
    if settings.report_api_enabled:
        report_client = ReportAPIClient(
            ReportAPIConfig(
                base_url=settings.CB_SERVER_URL,
                api_token=settings.CB_API_TOKEN.get_secret_value(),
                ssl_verify=settings.CB_API_SSL_VERIFY,
                request_timeout=settings.CB_API_TIMEOUT,
                max_retries=settings.CB_API_MAX_RETRIES,
            )
        )

    return ProcessorConfig(
        server_url=settings.CB_SERVER_URL,
        event_map=parse_event_map(config),
        debug=settings.DEBUG,
        debug_store=settings.DEBUG_STORE,
        report_client=report_client,
        validate_output=bool(processor_section.get("validate_output", False)),
    )
