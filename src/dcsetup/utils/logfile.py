# ABOUTME: Logging setup for setup runs: diagnostic log file plus console output
# ABOUTME: File lines look like "[2026-01-08T14:30:22.123Z] ERROR: message"
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from dcsetup.utils.sanitize import sanitize_error

LOGGER_NAME = "dcsetup"

# ABOUTME: Marks handlers installed here so a second configure_logging() replaces them
_HANDLER_MARK = "_dcsetup_handler"


class DiagnosticFormatter(logging.Formatter):
    """One line per event, ISO-8601 UTC timestamp, 'ERROR: ' on errors."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        prefix = "ERROR: " if record.levelno >= logging.ERROR else ""
        message = record.getMessage().replace("\n", " ")
        return f"[{self.formatTime(record)}] {prefix}{message}"


class _BelowErrorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def _mark(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_MARK, True)
    return handler


def configure_logging(log_file: Path | None, verbose: bool = False) -> logging.Logger:
    """Attach console and diagnostic-file handlers to the dcsetup logger.

    ABOUTME: Info and warnings go to stdout, errors to stderr, message text only
    ABOUTME: The file gets everything down to DEBUG, appended
    ABOUTME: If the log file can't be opened, console logging still works

    Args:
        log_file: Diagnostic log path, or None for console only
        verbose: Also show DEBUG messages on the console

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = True

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    console_level = logging.DEBUG if verbose else logging.INFO
    plain = logging.Formatter("%(message)s")

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(console_level)
    stdout_handler.addFilter(_BelowErrorFilter())
    stdout_handler.setFormatter(plain)
    logger.addHandler(_mark(stdout_handler))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(plain)
    logger.addHandler(_mark(stderr_handler))

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            logger.warning(
                f"Could not open diagnostic log, logging to console only: {sanitize_error(e)}"
            )
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(DiagnosticFormatter())
            logger.addHandler(_mark(file_handler))

    return logger
