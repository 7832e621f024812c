#!/usr/bin/env python3
"""
wscount Logging Configuration

Centralized logging setup shared by the client, the echo server and the CLI.
Development mode logs colored level names to the console; production mode
logs plain lines. Both also write to logs/wscount.log.

Usage:
    from shared.log import get_logger

    logger = get_logger(__name__)
    logger.info("Connecting...")
    logger.warning("Connection failed", extra={"endpoint": "ws://localhost:8080/"})
"""

from __future__ import annotations
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from shared.message import InboundMessage


# ========================================
#           LOGGING FORMATTERS
# ========================================

class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    # ANSI Color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'       # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            # other handlers share the record
            record.levelname = levelname


class GenericFormatter(logging.Formatter):
    """Prefixes the line with connection/message context passed through ``extra``"""

    def format(self, record: logging.LogRecord) -> str:
        context = []

        if hasattr(record, 'endpoint'):
            context.append(f"endpoint={record.endpoint}")
        if hasattr(record, 'msg_type'):
            context.append(f"type={record.msg_type}")
        if hasattr(record, 'msg_len'):
            context.append(f"len={record.msg_len}")

        message = super().format(record)
        if context:
            return f"[{' '.join(context)}] {message}"
        return message


# ========================================
#           LOGGING CONFIGURATION
# ========================================

LOG_DIR_ENV = "WSCOUNT_LOG_DIR"

_loggers_configured = set()
# level picked by configure_root_logging, applied to loggers created later
_app_level: Optional[str] = None


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger for the given module.

    Args:
        name: Usually __name__ from the calling module
        level: Override log level ("DEBUG", "INFO", "WARNING", "ERROR")

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure each logger once
    if name not in _loggers_configured:
        _configure_logger(logger, level or _app_level)
        _loggers_configured.add(name)
    elif level:
        logger.setLevel(_get_log_level(level))

    return logger


def _configure_logger(logger: logging.Logger, level: Optional[str] = None) -> None:
    """Configure a logger with appropriate handlers and formatters"""

    logger.setLevel(_get_log_level(level))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    if _is_development():
        _add_file_handler(logger)
        _add_console_handler(logger, colored=True)
    else:
        _add_console_handler(logger, colored=False)
        _add_file_handler(logger)

    # Prevent duplicate messages from parent loggers
    logger.propagate = False


def _get_log_level(level: Optional[str] = None) -> int:
    """Determine appropriate log level"""

    if level:
        return getattr(logging, level.upper(), logging.INFO)

    return logging.DEBUG if _is_development() else logging.INFO


def _is_development() -> bool:
    """Detect if we're in development mode"""
    env = os.getenv('PYTHON_ENV', '').lower()
    if env in ['prod', 'production']:
        return False
    return env in ['dev', 'development'] or 'pytest' in sys.modules


def _add_console_handler(logger: logging.Logger, colored: bool = True) -> None:
    """Add console handler with appropriate formatter"""

    fmt = '[%(levelname)-8s][%(asctime)s][%(name)-5s]: %(message)s'
    handler = logging.StreamHandler(sys.stdout)

    if colored and _supports_color():
        formatter: logging.Formatter = ColoredFormatter(fmt=fmt, datefmt='%H:%M:%S')
    else:
        formatter = GenericFormatter(fmt=fmt, datefmt='%Y-%m-%d %H:%M:%S')

    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _add_file_handler(logger: logging.Logger) -> None:
    """Add file handler under $WSCOUNT_LOG_DIR (default ./logs)"""

    log_dir = Path(os.getenv(LOG_DIR_ENV, "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_dir / "wscount.log", encoding="utf-8")
    handler.setFormatter(GenericFormatter(
        fmt='%(asctime)s | %(name)-30s | %(levelname)-8s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))
    logger.addHandler(handler)


def _supports_color() -> bool:
    """Check if terminal supports color output"""

    # stdout must be a terminal
    if not (hasattr(sys.stdout, "isatty") and sys.stdout.isatty()):
        return False

    if os.getenv("TERM", "") == "dumb":
        return False

    if sys.platform == "win32":
        # On modern Windows terminals, ANSI colors are supported
        return os.getenv("ANSICON") is not None or os.getenv("WT_SESSION") is not None or os.getenv("TERM_PROGRAM") == "vscode"

    return True

# ========================================
#           CONVENIENCE FUNCTIONS
# ========================================

def configure_root_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the entire application.
    Call this once at application startup.
    """
    root_logger = logging.getLogger()
    _configure_logger(root_logger, level)
    set_log_level(level)


def set_log_level(level: Optional[str]) -> None:
    """Apply ``level`` to every logger handed out by get_logger, now and later.

    Module loggers do not propagate, so the root level alone does not reach them.
    None restores the environment default.
    """
    global _app_level
    _app_level = level
    resolved = _get_log_level(level)
    for name in _loggers_configured:
        logging.getLogger(name).setLevel(resolved)


def log_inbound_message(message: "InboundMessage", logger: Optional[logging.Logger] = None) -> None:
    """
    Default inbound sink: log one record per received message.

    The record fields travel in ``extra`` so formatters and handlers can pick
    them up; the message line carries the full record.

    Example:
        client = MessagingClient(url, sink=log_inbound_message)
    """
    logger = logger or get_logger("wscount.inbound")
    record = message.to_record()
    logger.info(
        "Received %s",
        record,
        extra={"msg_type": record["messageType"], "msg_len": record["messageLength"]},
    )
