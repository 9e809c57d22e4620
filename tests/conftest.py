"""
Shared pytest fixtures for the event forwarder test suite.

Provides sample bus messages and processor instances.
"""

import json
import logging
from typing import Any

import pytest

from event_forwarder.configs.settings import get_settings
from event_forwarder.ingestion.processor import JSONMessageProcessor, ProcessorConfig
from event_forwarder.monitoring.logging import LOGGER_NAME

SERVER_URL = "https://cb.local/"
PROCESS_GUID = "00000001-0000-0b8c-01d2-4f8fb6a0a5e4"
PARENT_GUID = "00000001-0000-0a34-01d2-4f8fb6a09b1c"
MD5 = "a3c6a7dc54e0e4a1b0d94e09d2b97fda"


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging so caplog keeps seeing package records."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Keep environment overrides from leaking between tests."""
    for name in ("EVENT_FORWARDER_CB_SERVER_URL", "EVENT_FORWARDER_CB_API_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def processor():
    """Processor without console links."""
    return JSONMessageProcessor()


@pytest.fixture
def linking_processor():
    """Processor that adds console links."""
    return JSONMessageProcessor(ProcessorConfig(server_url=SERVER_URL))


@pytest.fixture
def create_process_doc():
    """
    Return a function that creates a watchlist/feed process sub-document.

    All defaults can be overridden via keyword arguments.
    """

    def _create_process_doc(**kwargs) -> dict[str, Any]:
        doc = {
            "unique_id": f"{PROCESS_GUID}-00000001",
            "parent_unique_id": f"{PARENT_GUID}-00000001",
            "process_md5": MD5,
            "process_name": "cmd.exe",
            "cmdline": "cmd.exe /c whoami",
            "process_pid": 2956,
            "username": "SYSTEM",
            "path": "c:\\windows\\system32\\cmd.exe",
            "last_update": "2016-12-07T16:23:28.041Z",
            "start": "2016-12-07T16:23:27.931Z",
            "parent_name": "services.exe",
            "parent_pid": 516,
            "sensor_id": 7,
            "hostname": "WIN-HOST01",
            "group": "Default Group",
            "comms_ip": -1062731520,
            "interface_ip": 167772161,
            "host_type": "workstation",
            "os_type": "windows",
            "modload_count": 12,
            "filemod_count": 3,
            "regmod_count": 1,
            "netconn_count": 0,
            "crossproc_count": 2,
            "childproc_count": 1,
        }
        doc.update(kwargs)
        return doc

    return _create_process_doc


@pytest.fixture
def watchlist_process_message(create_process_doc):
    """A watchlist.hit.process message with three process documents."""
    return {
        "watchlist_name": "Suspicious shells",
        "watchlist_id": 14,
        "cb_version": "5.2.0",
        "timestamp": 1481127808,
        "highlights": ["cmd.exe"],
        "docs": [
            create_process_doc(),
            create_process_doc(process_name="powershell.exe", process_pid=3001),
            create_process_doc(process_name="wscript.exe", process_pid=3002),
        ],
    }


@pytest.fixture
def feed_storage_message(create_process_doc):
    """A feed storage hit with flattened alliance attribution."""
    return {
        "feed_name": "bit9advancedthreats",
        "feed_id": 12,
        "cb_version": "5.2.0",
        "event_timestamp": 1481127808,
        "report_id": "bit9-report-6",
        "report_score": 100,
        "sensor_id": 7,
        "hostname": "WIN-HOST01",
        "group": "Default Group",
        "comms_ip": -1062731520,
        "interface_ip": 167772161,
        "alliance_data_bit9advancedthreats": ["066eb0b2-f25b-48dc-85ad-ad20b783a25e"],
        "alliance_score_bit9advancedthreats": 100,
        "alliance_link_bit9advancedthreats": "https://www.carbonblack.com/cbfeeds/advancedthreat_feed.xhtml#6",
        "alliance_updated_bit9advancedthreats": "2016-12-06T14:30:48.000Z",
        "docs": [create_process_doc()],
    }


@pytest.fixture
def encode():
    """Encode a message dict into a bus body."""

    def _encode(message: dict[str, Any]) -> bytes:
        return json.dumps(message).encode("utf-8")

    return _encode
