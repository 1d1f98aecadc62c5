"""Structured logging for the extraction core.

Provides consistent logging with:
- Timestamps
- Log levels (DEBUG, INFO, WARNING, ERROR)
- Per-email context (message id, sender)
- State-machine transitions
- key=value structured data
- Optional file output for later analysis
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class ExtractionLogger:
    """Structured logger for email extractions."""

    def __init__(self, name: str = "marketmail", verbose: bool = False, log_dir: str | Path | None = None):
        """Initialize the extraction logger.

        Args:
            name: Logger name.
            verbose: If True, show DEBUG level logs.
            log_dir: Directory for the log file. If None, no file logging.
        """
        self.logger = logging.getLogger(name)
        self.verbose = verbose
        self._log_file: Path | None = None

        # Configure if not already configured
        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(ConsoleFormatter())
            console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            self.logger.addHandler(console_handler)

        if log_dir:
            self._add_file_handler(Path(log_dir))

        self.logger.setLevel(logging.DEBUG)

    def _add_file_handler(self, log_dir: Path):
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._log_file = log_dir / f"marketmail_{timestamp}.log"

        # File handler captures everything including DEBUG
        file_handler = logging.FileHandler(self._log_file, encoding="utf-8")
        file_handler.setFormatter(FileFormatter())
        file_handler.setLevel(logging.DEBUG)
        self.logger.addHandler(file_handler)

    def set_verbose(self, verbose: bool):
        """Update verbose setting."""
        self.verbose = verbose
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    def _ts(self) -> str:
        """Get current timestamp."""
        return datetime.now().strftime("%H:%M:%S")

    def start_extraction(self, sender: str | None, message_id: str | None = None) -> float:
        """Log the start of one email extraction and return its start time."""
        self.info("Extracting email", sender=sender, message_id=message_id)
        return time.monotonic()

    def end_extraction(self, started: float, success: bool, **data):
        """Log the end of one email extraction with its elapsed time."""
        elapsed = f"{time.monotonic() - started:.2f}s"
        status = "SUCCESS" if success else "FAILED"
        self.logger.info(f"  Done: {_with_data(status, data)} [{elapsed}]")

    def transition(self, source: str, target: str, reason: str = ""):
        """Log a state-machine transition (DEBUG level)."""
        message = f"{source} -> {target}"
        if reason:
            message += f" ({reason})"
        self.debug(message)

    def debug(self, message: str, **data):
        """Log debug message (only in verbose mode)."""
        self.logger.debug(f"[{self._ts()}] {_with_data(message, data)}")

    def info(self, message: str, **data):
        self.logger.info(f"  {_with_data(message, data)}")

    def warning(self, message: str, **data):
        self.logger.warning(f"[{self._ts()}] WARN: {_with_data(message, data)}")

    def error(self, message: str, exc: Exception | None = None, **data):
        """Log error message, with the exception type and text when given."""
        if exc is not None:
            data["exc"] = f"{type(exc).__name__}: {exc}"
        self.logger.error(f"[{self._ts()}] ERROR: {_with_data(message, data)}")

    def milestone(self, message: str, **data):
        """Log a strategy switch (always visible)."""
        self.logger.info(f"  -> {_with_data(message, data)}")


class ConsoleFormatter(logging.Formatter):
    """Console output: the message as built by ExtractionLogger."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class FileFormatter(logging.Formatter):
    """File output: millisecond timestamp and short level name per line."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created)
        return f"{created:%Y-%m-%d %H:%M:%S}.{int(record.msecs):03d} [{record.levelname[:4]}] {record.getMessage()}"


def _with_data(message: str, data: dict[str, Any]) -> str:
    rendered = _format_data(data)
    return f"{message} | {rendered}" if rendered else message


def _format_data(data: dict[str, Any]) -> str:
    """Render key=value pairs, skipping None and shortening long strings."""
    parts = []
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, str) and len(value) > 50:
            value = value[:47] + "..."
        parts.append(f"{key}={value}")
    return ", ".join(parts)



# Global logger instance
_logger: ExtractionLogger | None = None


def get_logger(verbose: bool = False, log_dir: str | Path | None = None) -> ExtractionLogger:
    """Get or create the global extraction logger.

    Args:
        verbose: If True, show DEBUG level logs in console.
        log_dir: Directory for the log file. Only honoured on first creation
                 or when no file handler exists yet.
    """
    global _logger
    if _logger is None:
        _logger = ExtractionLogger(verbose=verbose, log_dir=log_dir)
    else:
        if verbose and not _logger.verbose:
            _logger.set_verbose(True)
        if log_dir and _logger._log_file is None:
            _logger._add_file_handler(Path(log_dir))
    return _logger


def reset_logger():
    """Reset the global logger (for testing)."""
    global _logger
    if _logger:
        for handler in _logger.logger.handlers[:]:
            handler.close()
            _logger.logger.removeHandler(handler)
    _logger = None
