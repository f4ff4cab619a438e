"""Tests for log redaction."""

import logging

import pytest
import structlog

from fluxtalk.utils.logging import _filter_sensitive, setup_logging


class TestFilterSensitive:
    def test_redacts_query_string(self):
        event = {"event": "x", "url": "https://oapi.dingtalk.com/robot/send?access_token=abc&timestamp=1&sign=zz%3D"}
        out = _filter_sensitive(None, "info", event)
        assert "abc" not in out["url"]
        assert "zz" not in out["url"]
        assert "timestamp=1" in out["url"]

    def test_redacts_sensitive_keys(self):
        out = _filter_sensitive(None, "info", {"event": "x", "secret": "s3cr3t"})
        assert out["secret"] == "***REDACTED***"

    def test_keys_inside_words_are_not_redacted(self):
        event = {"event": "x", "note": "design: foo", "rank": "ensign=x"}
        out = _filter_sensitive(None, "info", dict(event))
        assert out == event

    def test_leaves_other_values(self):
        out = _filter_sensitive(None, "info", {"event": "sent", "status": 200, "title": "Sync errors"})
        assert out == {"event": "sent", "status": 200, "title": "Sync errors"}


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        structlog.reset_defaults()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_debug_level_keeps_httpx_quiet(self):
        setup_logging("DEBUG", json_output=True)
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO
        assert len(logging.getLogger().handlers) == 1
