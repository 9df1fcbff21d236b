"""Tests for logging_config.py."""
import logging
from unittest.mock import MagicMock

import pytest

from logging_config import JSONFormatter, PlainFormatter, SupabaseLogHandler, setup_logging


def _record(message, level=logging.INFO, name="oidc.issuer"):
    return logging.LogRecord(name, level, __file__, 10, message, None, None)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    def test_splits_tag(self):
        entry = JSONFormatter("build").format(_record("[AUTHORIZE] Code issued"))
        assert entry["tag"] == "AUTHORIZE"
        assert entry["message"] == "Code issued"
        assert entry["environment"] == "build"
        assert entry["service"] == "oidc-stub"
        assert entry["logger"] == "oidc.issuer"

    def test_untagged_message(self):
        entry = JSONFormatter().format(_record("plain message"))
        assert entry["tag"] is None
        assert entry["message"] == "plain message"
        assert entry["environment"] == "unknown"


class TestSupabaseLogHandler:
    def test_batches_entries(self):
        supabase = MagicMock()
        handler = SupabaseLogHandler(supabase, batch_size=2, flush_interval=60)
        handler.setFormatter(JSONFormatter("build"))
        try:
            handler.emit(_record("[TOKEN] one"))
            supabase.table.assert_not_called()
            handler.emit(_record("[TOKEN] two"))

            supabase.table.assert_called_once_with("logs")
            entries = supabase.table.return_value.insert.call_args[0][0]
            assert [e["message"] for e in entries] == ["one", "two"]
        finally:
            handler.close()

    def test_close_flushes_remaining(self):
        supabase = MagicMock()
        handler = SupabaseLogHandler(supabase, batch_size=20, flush_interval=60)
        handler.emit(_record("leftover"))
        handler.close()

        entries = supabase.table.return_value.insert.call_args[0][0]
        assert entries[0]["message"] == "leftover"

    def test_shipping_failure_is_not_raised(self, capsys):
        supabase = MagicMock()
        supabase.table.return_value.insert.return_value.execute.side_effect = RuntimeError("offline")
        handler = SupabaseLogHandler(supabase, batch_size=1, flush_interval=60)
        try:
            handler.emit(_record("message"))
        finally:
            handler.close()
        assert "Failed to ship logs" in capsys.readouterr().err


class TestSetupLogging:
    def test_stderr_only_without_client(self, restore_root_logger):
        root = setup_logging(environment="build")
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, PlainFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_adds_supabase_handler(self, restore_root_logger):
        root = setup_logging(environment="build", supabase_client=MagicMock())
        assert any(isinstance(h, SupabaseLogHandler) for h in root.handlers)
