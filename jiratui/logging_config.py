"""
Loguru setup: one timestamped log file per run, secrets redacted.

The terminal belongs to the UI, so nothing is logged to stderr unless asked.
"""

import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from jiratui.config.settings import settings

_EMAIL = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_SECRET_PAIR = re.compile(
    r"(\"?(?:token|password|authorization|auth|pwd|secret)\"?\s*[:=]\s*)(\"[^\"]+\"|[^\s\"']+)",
    re.IGNORECASE,
)

LOG_FORMAT = "[{time:YYYY-MM-DD!UTC}T{time:HH:mm:ss.SSS!UTC}Z] {level} {message}"


def redact(text: str) -> str:
    """Mask e-mail addresses and key=value / key: value secrets."""
    if not text:
        return ""
    text = _EMAIL.sub("<redacted-email>", text)
    return _SECRET_PAIR.sub(lambda m: f"{m.group(1)}<redacted>", text)


def _redact_record(record) -> None:
    record["message"] = redact(record["message"])


def log_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H_%MZ.log")


def configure_logging(
    level: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
    log_file: Optional[Union[str, Path]] = None,
    stderr: bool = False,
) -> Path:
    """
    Replace loguru's default handler with the application sinks.

    Args:
        level: Minimum level (defaults to settings.log_level)
        log_dir: Directory for the timestamped file (defaults to settings.log_dir)
        log_file: Explicit file path, overrides log_dir
        stderr: Also log to stderr

    Returns:
        Path of the log file
    """
    level = (level or settings.log_level).upper()
    if log_file is None:
        log_file = Path(log_dir or settings.log_dir) / log_filename()
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(patcher=_redact_record)
    logger.add(log_path, level=level, format=LOG_FORMAT, encoding="utf-8")
    if stderr:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    return log_path
