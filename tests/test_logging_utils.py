"""
tests/test_logging_utils.py

Structured log lines and credential masking.
"""

from __future__ import annotations

import json
import logging

import pytest

from app.logging_utils import REDACTED, log_event, redact_fields


def test_log_event_emits_sorted_json(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.logging_utils")
    with caplog.at_level(logging.INFO, logger="tests.logging_utils"):
        log_event(logger, logging.INFO, "run_state", state="done", source="DHC", total=3)

    (record,) = caplog.records
    assert json.loads(record.getMessage()) == {"event": "run_state", "source": "DHC", "state": "done", "total": 3}


def test_log_event_skips_disabled_levels(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.logging_utils.quiet")
    with caplog.at_level(logging.WARNING, logger="tests.logging_utils.quiet"):
        log_event(logger, logging.DEBUG, "run_state", state="persist")

    assert caplog.records == []


def test_sensitive_fields_are_masked(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.logging_utils.secrets")
    with caplog.at_level(logging.INFO, logger="tests.logging_utils.secrets"):
        log_event(logger, logging.INFO, "proxy", proxy_url="http://u:p@h:1", proxy_enabled=True)

    assert "u:p@h" not in caplog.text
    assert json.loads(caplog.records[0].getMessage())["proxy_url"] == REDACTED


def test_redact_keeps_missing_values() -> None:
    assert redact_fields({"password": None, "name": "x"}) == {"password": None, "name": "x"}
