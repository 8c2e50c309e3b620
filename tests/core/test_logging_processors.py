"""Tests for the log processors and logger output stream."""

import io
import json
import sys

from slopcollector.core.logging import (
    REDACTED,
    _merge_scoped_context,
    configure_logging,
    get_logger,
    log_context,
    redact_secrets,
)


class TestRedactSecrets:
    """Tests for redact_secrets."""

    def test_masks_key_fields(self):
        event = redact_secrets(
            None, "info", {"event": "sync", "api_key": "eyJhbGci", "Authorization": "x"}
        )
        assert event["api_key"] == REDACTED
        assert event["Authorization"] == REDACTED
        assert event["event"] == "sync"

    def test_empty_key_left_alone(self):
        event = redact_secrets(None, "info", {"event": "sync", "api_key": None})
        assert event["api_key"] is None

    def test_masks_bearer_token_inside_strings(self):
        event = redact_secrets(
            None, "warning", {"event": "request_failed", "error": "401 for Bearer abc.def-123"}
        )
        assert event["error"] == f"401 for Bearer {REDACTED}"

    def test_other_values_untouched(self):
        event = redact_secrets(None, "info", {"event": "sync", "tables": 5, "url": "https://x"})
        assert event == {"event": "sync", "tables": 5, "url": "https://x"}


class TestLogContext:
    """Tests for log_context."""

    def test_fields_merged_inside_block(self):
        with log_context(project_id="p1"):
            event = _merge_scoped_context(None, "info", {"event": "e"})
        assert event == {"event": "e", "project_id": "p1"}

    def test_nested_blocks_accumulate(self):
        with log_context(project_id="p1"), log_context(job_id="j1"):
            event = _merge_scoped_context(None, "info", {"event": "e"})
        assert event["project_id"] == "p1"
        assert event["job_id"] == "j1"

    def test_explicit_field_wins(self):
        with log_context(project_id="p1"):
            event = _merge_scoped_context(None, "info", {"event": "e", "project_id": "p2"})
        assert event["project_id"] == "p2"

    def test_context_cleared_after_block(self):
        with log_context(project_id="p1"):
            pass
        assert _merge_scoped_context(None, "info", {"event": "e"}) == {"event": "e"}


class TestLogStream:
    """Tests for where configured loggers write."""

    def test_logger_follows_replaced_stderr(self, monkeypatch):
        first = io.StringIO()
        monkeypatch.setattr(sys, "stderr", first)
        configure_logging(log_level="INFO", log_format="json")
        logger = get_logger("slopcollector.stream_check")
        logger.info("first_event")
        first.close()

        second = io.StringIO()
        monkeypatch.setattr(sys, "stderr", second)
        logger.warning("second_event", api_key="secret")

        line = json.loads(second.getvalue().strip())
        assert line["event"] == "second_event"
        assert line["api_key"] == REDACTED
