"""
CLI helper utilities.

This module provides shared utilities for CLI commands including:
- Logging setup
- Context flag parsing
- Summary output
"""

import json
import logging
import os
import sys
import tempfile
from datetime import datetime, timezone
from logging import Handler
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from ...constants import LoggingConfig
from ...core.errors import ConfigError

# Type alias for log levels
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JSONFormatter(logging.Formatter):
    """A lightweight JSON formatter for structured logging."""

    _RESERVED_FIELDS = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "process",
        "processName",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
            LoggingConfig.JSON_DATE_FORMAT
        )
        payload: Dict[str, Any] = {
            "timestamp": timestamp,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        # Include any extra fields supplied via LoggerAdapter/extra
        for key, value in record.__dict__.items():
            if key in self._RESERVED_FIELDS or key.startswith("_"):
                continue
            if key in payload:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except TypeError:
                payload[key] = str(value)

        return json.dumps(payload, ensure_ascii=False)


_MANAGED_HANDLERS: List[Handler] = []


def _clear_managed_handlers() -> None:
    """Remove handlers that were added by this module."""
    global _MANAGED_HANDLERS
    root_logger = logging.getLogger()
    for handler in _MANAGED_HANDLERS:
        root_logger.removeHandler(handler)
        handler.close()
    _MANAGED_HANDLERS = []


def _coerce_positive_int(value: Any, default: int) -> int:
    """Convert config-provided values to positive integers."""
    try:
        numeric = int(value)
        return numeric if numeric > 0 else default
    except (TypeError, ValueError):
        return default


def _create_file_handler(
    path: str,
    rotation_enabled: bool,
    max_bytes: int,
    backup_count: int
) -> Handler:
    """Create a file or rotating file handler."""
    if rotation_enabled and max_bytes > 0:
        return RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=max(backup_count, 1),
            encoding='utf-8'
        )
    return logging.FileHandler(path, encoding='utf-8')


def setup_logging(
    level: LogLevel = LoggingConfig.DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    *,
    config: Optional[Dict[str, Any]] = None,
    include_console: bool = True,
) -> Optional[str]:
    """
    Setup logging configuration with fallback locations.

    Console output goes to stderr so that documents printed to stdout stay
    parseable. If the log file location fails (permission denied, disk
    full, etc.), these fallbacks are tried in order:
    1. Requested location
    2. System temp directory
    3. User home directory
    4. Console-only (final fallback)

    Args:
        level: Log level used when the config does not set one.
        log_file: Log file path; wins over ``config['file']``.
        config: Optional logging configuration dictionary
            (``level``, ``file``, ``format``, ``rotation``).
        include_console: If False, skip adding a console handler.

    Returns:
        The actual log file path used, or None if logging to console only.
    """
    config_dict = dict(config or {})

    resolved_level = str(config_dict.get('level') or level or LoggingConfig.DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, resolved_level.upper(), logging.INFO)

    file_path = log_file if log_file is not None else config_dict.get('file')

    format_style = str(config_dict.get('format', LoggingConfig.DEFAULT_FORMAT_STYLE)).lower()
    if format_style not in LoggingConfig.SUPPORTED_FORMATS:
        format_style = LoggingConfig.DEFAULT_FORMAT_STYLE

    formatter: logging.Formatter
    if format_style == 'json':
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt=config_dict.get('pattern') or LoggingConfig.LOG_FORMAT,
            datefmt=config_dict.get('date_format', LoggingConfig.DATE_FORMAT),
        )

    rotation_cfg = config_dict.get('rotation') if isinstance(config_dict.get('rotation'), dict) else {}
    rotation_enabled = rotation_cfg.get('enabled')
    if rotation_enabled is None:
        rotation_enabled = bool(file_path) and LoggingConfig.ROTATION_ENABLED
    max_bytes = _coerce_positive_int(
        rotation_cfg.get('max_mb', LoggingConfig.MAX_LOG_FILE_MB), LoggingConfig.MAX_LOG_FILE_MB
    ) * 1024 * 1024
    backup_count = _coerce_positive_int(
        rotation_cfg.get('backup_count', LoggingConfig.LOG_BACKUP_COUNT), LoggingConfig.LOG_BACKUP_COUNT
    )

    handlers: List[Handler] = []
    actual_log_file = None

    if include_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    if file_path:
        log_filename = os.path.basename(file_path) or "fluree-migrate.log"
        fallback_locations = [
            file_path,
            os.path.join(tempfile.gettempdir(), log_filename),
            os.path.join(Path.home(), log_filename),
        ]
        file_handler = None
        for fallback_path in fallback_locations:
            try:
                log_dir = os.path.dirname(fallback_path)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)
                file_handler = _create_file_handler(
                    fallback_path,
                    rotation_enabled=bool(rotation_enabled),
                    max_bytes=max_bytes,
                    backup_count=backup_count,
                )
                file_handler.setFormatter(formatter)
                handlers.append(file_handler)
                actual_log_file = fallback_path
                if fallback_path != file_path:
                    print(f"Note: Using fallback log file: {fallback_path}", file=sys.stderr)
                break
            except OSError as exc:
                print(f"  Could not create log at {fallback_path}: {exc}", file=sys.stderr)
                continue
        if not file_handler:
            print("Warning: Could not write log file to any location", file=sys.stderr)
            print(f"  Requested: {file_path}", file=sys.stderr)
            print("  Logging to console only", file=sys.stderr)

    if not handlers:
        # As a failsafe, ensure we still have console output
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    _clear_managed_handlers()
    root_logger = logging.getLogger()
    logging.captureWarnings(True)
    root_logger.setLevel(log_level)

    for handler in handlers:
        root_logger.addHandler(handler)
        _MANAGED_HANDLERS.append(handler)

    logger = logging.getLogger(__name__)
    if actual_log_file:
        logger.info(f"Logging to: {actual_log_file}")

    return actual_log_file


def parse_context_flags(values: Optional[Sequence[str]]) -> Dict[str, str]:
    """
    Parse ``--context prefix=IRI`` flags.

    Raises:
        ConfigError: If an entry has no ``=`` or an empty prefix.
    """
    context: Dict[str, str] = {}
    for value in values or []:
        prefix, sep, iri = value.partition('=')
        if not sep or not prefix.strip() or not iri.strip():
            raise ConfigError(
                f"Invalid --context value {value!r}; expected prefix=IRI (e.g. schema=http://schema.org/)"
            )
        context[prefix.strip()] = iri.strip()
    return context


def print_header(title: str, width: int = 60) -> None:
    """Print a formatted header with the given title to stderr."""
    print("\n" + "=" * width, file=sys.stderr)
    print(title, file=sys.stderr)
    print("=" * width, file=sys.stderr)


def print_footer(width: int = 60) -> None:
    """Print a footer line to stderr."""
    print("=" * width + "\n", file=sys.stderr)


def format_count_summary(
    items: Dict[str, int],
    prefix: str = "  "
) -> str:
    """Format a dictionary of counts for display, largest first."""
    lines = []
    for name, count in sorted(items.items(), key=lambda x: (-x[1], x[0])):
        lines.append(f"{prefix}{name}: {count}")
    return "\n".join(lines)


def split_warnings(warnings: Sequence[Any], limit: int) -> Tuple[List[Any], int]:
    """First ``limit`` warnings and how many were left out."""
    shown = list(warnings[:limit])
    return shown, max(len(warnings) - limit, 0)
