"""Unit tests for structured logging.

Tests cover:
- get_logger returns a structlog logger and keeps its name
- JSON output with ISO timestamps
- Sanitization of sensitive fields
- Per-run context merged into events
"""

import json
import logging

import pytest

from onboarding_hub.utils.logging import (
    REDACTED_VALUE,
    get_logger,
    run_context,
    sanitize_for_logging,
)


def last_event(caplog: pytest.LogCaptureFixture) -> dict:
    return json.loads(caplog.records[-1].message)


@pytest.mark.unit
def test_get_logger_returns_bound_logger() -> None:
    logger = get_logger("test_module")

    assert hasattr(logger, "bind")
    assert hasattr(logger, "info")
    assert hasattr(logger, "error")


@pytest.mark.unit
def test_json_output_structure(caplog: pytest.LogCaptureFixture) -> None:
    """Events carry timestamp, level, logger and event name."""
    caplog.set_level(logging.INFO)

    get_logger("onboarding.test").info("onboarding.linker.index_built", company_count=2)

    log_data = last_event(caplog)
    assert log_data["event"] == "onboarding.linker.index_built"
    assert log_data["level"] == "info"
    assert log_data["logger"] == "onboarding.test"
    assert log_data["company_count"] == 2
    assert "T" in log_data["timestamp"]


@pytest.mark.unit
def test_non_ascii_values_kept(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    get_logger("onboarding.test").info("onboarding.test.thai", name="แอคมี")

    assert "แอคมี" in caplog.records[-1].message


@pytest.mark.unit
@pytest.mark.parametrize(
    "key",
    ["password", "database_password", "access_token", "client_secret", "DATABASE_URL", "database_uri"],
)
def test_sanitize_for_logging_redacts(key: str) -> None:
    sanitized = sanitize_for_logging({key: "value", "user": "admin"})

    assert sanitized[key] == REDACTED_VALUE
    assert sanitized["user"] == "admin"


@pytest.mark.unit
def test_sanitize_for_logging_handles_nested_dicts() -> None:
    data = {"user": "admin", "auth": {"Password": "secret123", "TOKEN": "abc123"}}

    sanitized = sanitize_for_logging(data)

    assert sanitized["user"] == "admin"
    assert sanitized["auth"] == {"Password": REDACTED_VALUE, "TOKEN": REDACTED_VALUE}


@pytest.mark.unit
def test_sanitization_in_logged_output(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    get_logger("onboarding.test").info(
        "configuration.loaded", database_password="hunter2", database_host="localhost"
    )

    log_data = last_event(caplog)
    assert log_data["database_password"] == REDACTED_VALUE
    assert log_data["database_host"] == "localhost"


@pytest.mark.unit
def test_run_context_tags_events_from_any_logger(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    with run_context(workbook="onboarding.xlsx", dry_run=True) as run_id:
        get_logger("onboarding.linker").info("first_event", row_index=1)
        get_logger("onboarding.loader").info("second_event", row_index=2)

    events = [json.loads(record.message) for record in caplog.records[-2:]]
    assert [e["event"] for e in events] == ["first_event", "second_event"]
    assert all(e["run_id"] == run_id for e in events)
    assert all(e["workbook"] == "onboarding.xlsx" for e in events)
    assert all(e["dry_run"] is True for e in events)


@pytest.mark.unit
def test_run_context_is_cleared_on_exit(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    with run_context(run_id="run_123") as run_id:
        assert run_id == "run_123"
    get_logger("onboarding.test").info("after_run")

    assert "run_id" not in last_event(caplog)


@pytest.mark.unit
def test_run_context_generates_distinct_ids() -> None:
    with run_context() as first:
        pass
    with run_context() as second:
        pass

    assert len(first) == 32
    assert first != second


@pytest.mark.unit
def test_log_levels_respected(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)

    logger = get_logger("onboarding.test")
    logger.debug("debug_message")
    logger.warning("warning_message")
    logger.error("error_message")

    levels = [json.loads(r.message).get("level") for r in caplog.records]
    assert {"debug", "warning", "error"} <= set(levels)
