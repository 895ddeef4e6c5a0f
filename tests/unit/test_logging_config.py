"""
Unit tests for logging setup and redaction.
"""

import re
import sys
from datetime import datetime, timezone

import pytest
from loguru import logger

from jiratui.logging_config import configure_logging, log_filename, redact


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_redact_masks_emails_and_secrets():
    text = 'user bob@example.com password=hunter2 "token": "abc123" Authorization: Basic'

    redacted = redact(text)

    assert "bob@example.com" not in redacted
    assert "hunter2" not in redacted
    assert "abc123" not in redacted
    assert "<redacted-email>" in redacted
    assert redacted.count("<redacted>") == 3


def test_redact_leaves_plain_text_alone():
    assert redact("Fetching projects (cloud)") == "Fetching projects (cloud)"
    assert redact("") == ""


def test_log_filename_is_utc_minute_stamp():
    stamp = datetime(2024, 3, 9, 7, 5, tzinfo=timezone.utc)
    assert log_filename(stamp) == "2024-03-09T07_05Z.log"


def test_file_sink_writes_redacted_lines(tmp_path, restore_logger):
    log_path = configure_logging(level="DEBUG", log_file=tmp_path / "run.log")

    logger.info("Login for alice@example.com with secret=s3cr3t")
    logger.remove()

    content = log_path.read_text()
    assert re.match(r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z\] INFO Login for", content)
    assert "[T]" not in content
    assert "alice@example.com" not in content
    assert "s3cr3t" not in content


def test_level_filters_debug(tmp_path, restore_logger):
    log_path = configure_logging(level="INFO", log_dir=tmp_path)

    logger.debug("HTTP request GET https://jira.example.com/rest/api/2/myself")
    logger.warning("HTTP non-OK response")
    logger.remove()

    assert log_path.parent == tmp_path
    content = log_path.read_text()
    assert "HTTP request GET" not in content
    assert "WARNING HTTP non-OK response" in content
