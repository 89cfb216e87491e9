"""Tests for structured logging configuration."""

import json
import logging

from skill_seekers.utils.logger import add_log_level, configure_logging, get_logger, job_context


def test_configure_logging_default_level() -> None:
    """Test logging configuration with default INFO level."""
    configure_logging()

    assert logging.getLogger().level == logging.INFO
    logger = get_logger("test")
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")


def test_configure_logging_custom_level() -> None:
    """Test logging configuration with custom DEBUG level."""
    configure_logging("DEBUG")

    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_unknown_level_falls_back_to_info() -> None:
    """Test that an unknown level name is treated as INFO."""
    configure_logging("CHATTY")

    assert logging.getLogger().level == logging.INFO


def test_httpx_request_logs_are_quietened() -> None:
    """Test that per-request httpx logs stay below the job events."""
    configure_logging("DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING


def test_add_log_level() -> None:
    """Test the level processor."""
    assert add_log_level(None, "warning", {"event": "x"}) == {"event": "x", "level": "WARNING"}


def test_events_are_rendered_as_json(capsys) -> None:
    """Test that bound context ends up in the JSON line."""
    configure_logging()

    get_logger("skill_seekers.test").bind(job_id="job-1234abcd").info("job_started", progress=0)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "job_started"
    assert payload["job_id"] == "job-1234abcd"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "skill_seekers.test"


def test_job_context_binds_identifiers(capsys) -> None:
    """Test that events inside a job context carry the job identifiers."""
    configure_logging()

    with job_context("job-5678ef90", "scrape_pdf"):
        get_logger("skill_seekers.test").info("pdf_decoded", pages=3)
    get_logger("skill_seekers.test").info("after_job")

    first, second = (json.loads(line) for line in capsys.readouterr().out.strip().splitlines()[-2:])
    assert first["job_id"] == "job-5678ef90"
    assert first["job_type"] == "scrape_pdf"
    assert "job_id" not in second


def test_exceptions_are_rendered_into_the_json_line(capsys) -> None:
    """Test that exc_info becomes a formatted traceback next to an ISO timestamp."""
    configure_logging()

    try:
        raise RuntimeError("connection reset")
    except RuntimeError as e:
        get_logger("skill_seekers.test").error("job_task_failed", exc_info=e)

    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["level"] == "ERROR"
    assert "RuntimeError: connection reset" in payload["exception"]
    assert "T" in payload["timestamp"]
