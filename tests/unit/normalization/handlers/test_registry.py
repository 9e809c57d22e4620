"""
Unit tests for the handler table.
"""

import pytest

from event_forwarder.normalization.handlers import build_handler_table, registered_types
from event_forwarder.schemas.message import MessageType


class TestHandlerTable:
    """Tests for build_handler_table."""

    def test_every_type_registered(self):
        """Should register a handler for each canonical message type."""
        table = build_handler_table()
        assert set(table) == {t.value for t in MessageType}
        assert len(table) == 16

    def test_read_only(self):
        table = build_handler_table()
        with pytest.raises(TypeError):
            table["new.type"] = lambda t, r: []  # type: ignore[index]

    def test_registered_types_sorted(self):
        types = registered_types()
        assert types == sorted(types)
        assert "feed.storage.hit.process" in types
        assert "feed.42.storage.hit.process" not in types
