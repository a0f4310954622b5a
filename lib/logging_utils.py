"""Logging for the tunnel provisioning run.

Every run writes a rotating log file under /var/log/tunnel_tools/ and mirrors
progress to the console:

- INFO and below go to stdout as ``[+] message`` (green)
- WARNING and above go to stderr as ``[!] message`` (yellow) or
  ``[✗] message`` (red)

Colours are only emitted when the stream is a terminal. If the log directory
cannot be created the file handler is replaced by a plain stderr handler.
"""

from __future__ import annotations

from logging import (
    Filter, Logger, LogRecord, Formatter, StreamHandler, getLogger, INFO, WARNING, ERROR
)
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO
import sys
import subprocess

BYTES_PER_MB = 1024 * 1024

DEFAULT_LOG_MAX_BYTES = 5 * BYTES_PER_MB  # 5 MB
DEFAULT_LOG_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = INFO
DEFAULT_LOG_DIR = "/var/log/tunnel_tools"

# Format: timestamp - severity - logger - message
STANDARD_LOG_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)s - %(message)s"
STANDARD_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
RED = "\033[0;31m"
NO_COLOR = "\033[0m"


class ConsoleFormatter(Formatter):
    """Single-line console format with a severity marker and optional colour."""

    MARKERS = {
        INFO: ("[+]", GREEN),
        WARNING: ("[!]", YELLOW),
        ERROR: ("[✗]", RED),
    }

    def __init__(self, use_color: bool = False):
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: LogRecord) -> str:
        message = super().format(record)
        level = ERROR if record.levelno >= ERROR else WARNING if record.levelno >= WARNING else INFO
        marker, color = self.MARKERS[level]
        line = f"{marker} {message}"
        if self.use_color:
            return f"{color}{line}{NO_COLOR}"
        return line


class _MaxLevelFilter(Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: LogRecord) -> bool:
        return record.levelno <= self.max_level


def _stream_is_tty(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def _ensure_fallback_handler(logger: Logger, level: int = INFO) -> None:
    """Add a stderr handler as fallback if no handlers are configured."""
    if logger.handlers:
        return

    handler = StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(get_standard_formatter())
    logger.addHandler(handler)


def get_standard_formatter() -> Formatter:
    return Formatter(STANDARD_LOG_FORMAT, STANDARD_DATE_FORMAT)


def get_rotating_logger(
    name: str,
    log_file: str,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = DEFAULT_LOG_BACKUP_COUNT,
    level: int = DEFAULT_LOG_LEVEL
) -> Logger:
    """Return a logger configured with a rotating file handler.

    Args:
        name: Logger name
        log_file: Path to log file
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        level: Logging level

    Returns:
        Configured Logger instance with rotating file handler
    """
    logger = getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        logger.propagate = False

    log_path = Path(log_file)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Error creating log directory {log_path.parent}: {e}", file=sys.stderr)
        _ensure_fallback_handler(logger, level)
        return logger

    log_file_path = str(log_path.resolve())
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == log_file_path:
            return logger

    try:
        handler = RotatingFileHandler(log_file_path, maxBytes=max_bytes, backupCount=backup_count)
        handler.setLevel(level)
        handler.setFormatter(get_standard_formatter())
        logger.addHandler(handler)
    except OSError as e:
        print(f"Error opening log file {log_file_path}: {e}", file=sys.stderr)
        _ensure_fallback_handler(logger, level)
        return logger

    return logger


def add_console_handlers(
    logger: Logger,
    level: int = DEFAULT_LOG_LEVEL,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None
) -> None:
    """Attach the stdout/stderr console pair to a logger once."""
    if any(isinstance(h.formatter, ConsoleFormatter) for h in logger.handlers):
        return

    out_stream = stdout or sys.stdout
    err_stream = stderr or sys.stderr

    out_handler = StreamHandler(out_stream)
    out_handler.setLevel(level)
    out_handler.addFilter(_MaxLevelFilter(WARNING - 1))
    out_handler.setFormatter(ConsoleFormatter(use_color=_stream_is_tty(out_stream)))
    logger.addHandler(out_handler)

    err_handler = StreamHandler(err_stream)
    err_handler.setLevel(max(level, WARNING))
    err_handler.setFormatter(ConsoleFormatter(use_color=_stream_is_tty(err_stream)))
    logger.addHandler(err_handler)


def get_service_logger(
    service_name: str,
    log_dir: Optional[str] = None,
    level: int = DEFAULT_LOG_LEVEL,
    console_output: bool = True
) -> Logger:
    """Get the logger for a provisioning run.

    Child loggers (``<service_name>.web``, ``<service_name>.tunnel`` ...)
    propagate into it, so step modules only need ``getLogger``.

    Example:
        logger = get_service_logger('tunnel_setup')
        logger.info('Installing packages...')
        logger.warning('Skipping UFW setup.')
    """
    log_file = Path(log_dir or DEFAULT_LOG_DIR) / f"{service_name}.log"

    logger = get_rotating_logger(service_name, str(log_file), level=level)

    if console_output:
        # Drop the bare stderr fallback, the console pair covers it
        for handler in list(logger.handlers):
            if (type(handler) is StreamHandler
                    and getattr(handler, "stream", None) is sys.stderr
                    and not isinstance(handler.formatter, ConsoleFormatter)):
                logger.removeHandler(handler)
        add_console_handlers(logger, level)

    return logger


def log_subprocess_result(
    logger: Logger,
    action: str,
    result: subprocess.CompletedProcess[str],
    success_level: int = INFO,
    failure_level: int = WARNING
) -> bool:
    """Log concise command result details and return success state."""
    if result.returncode == 0:
        logger.log(success_level, f"✓ {action}")
        return True

    logger.log(failure_level, f"⚠ {action} failed: {describe_failure(result)}")
    return False


def describe_failure(result: subprocess.CompletedProcess[str]) -> str:
    """Summarise a failed command as its first stderr lines or its exit code."""
    stderr_raw = result.stderr or ""
    if isinstance(stderr_raw, bytes):
        stderr_raw = stderr_raw.decode(errors="replace")
    stderr = stderr_raw.strip().splitlines()
    if not stderr:
        return f"exit code {result.returncode}"
    details = " | ".join(stderr[:3])
    if len(stderr) > 3:
        details += " | ..."
    return details
