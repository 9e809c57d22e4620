from event_forwarder.configs.config import (
    build_processor_config,
    load_forwarder_config,
    parse_event_map,
)
from event_forwarder.configs.settings import Settings, get_settings

__all__ = [
    "Settings",
    "build_processor_config",
    "get_settings",
    "load_forwarder_config",
    "parse_event_map",
]
