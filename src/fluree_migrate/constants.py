"""
Centralized configuration constants for the Fluree v2 to v3 migration tool.

This module provides a single source of truth for all configuration constants,
default values, and limits used throughout the application.
"""

from enum import IntEnum
from typing import Final

# ============================================================================
# Exit Codes
# ============================================================================

class ExitCode(IntEnum):
    """Standard exit codes for CLI commands.

    Following Unix conventions:
    - 0: Success (warnings do not change the exit code)
    - 1: General error, including output sink failures
    - 2: Schema error
    - 3+: Specific error categories
    """
    SUCCESS = 0
    ERROR = 1
    SCHEMA_ERROR = 2
    CONFIG_ERROR = 3
    API_ERROR = 4
    FILE_NOT_FOUND = 5
    PERMISSION_DENIED = 6
    CANCELLED = 7


# ============================================================================
# API Configuration
# ============================================================================

class APIConfig:
    """Ledger HTTP API configuration constants."""

    DEFAULT_TIMEOUT_SECONDS: Final[int] = 30
    """Default HTTP request timeout."""

    TRANSACT_TIMEOUT_SECONDS: Final[int] = 120
    """Timeout for transactions against the target ledger."""

    MAX_RETRY_ATTEMPTS: Final[int] = 5
    """Attempts for transient failures (timeouts, 429, 5xx gateway errors)."""

    RETRY_MULTIPLIER: Final[int] = 2
    """Exponential backoff multiplier (seconds)."""

    RETRY_MIN_SECONDS: Final[int] = 2
    """Minimum backoff between retries."""

    RETRY_MAX_SECONDS: Final[int] = 60
    """Maximum backoff between retries."""

    TRANSIENT_STATUS_CODES: Final[tuple] = (429, 502, 503, 504)
    """HTTP status codes treated as transient."""


class SourceQueryConfig:
    """v2 query endpoint paths and paging."""

    MULTI_QUERY_PATH: Final[str] = "multi-query"
    """Relative path of the v2 multi-query endpoint."""

    QUERY_PATH: Final[str] = "query"
    """Relative path of the v2 query endpoint."""

    PAGE_SIZE: Final[int] = 2000
    """Entities fetched per collection query."""

    FUEL: Final[int] = 9999999999
    """Query fuel budget passed to the v2 query engine."""

    SCHEMA_LIMIT: Final[int] = 9999999
    """Row limit for the schema multi-query."""

    SUBJECT_PARTITION_BITS: Final[int] = 44
    """v2 subject ids carry their collection id above this bit."""


class TargetAPIConfig:
    """v3 HTTP API paths."""

    CREATE_PATH: Final[str] = "fluree/create"
    """Ledger creation endpoint."""

    TRANSACT_PATH: Final[str] = "fluree/transact"
    """Transaction endpoint."""


# ============================================================================
# Migration Defaults
# ============================================================================

class MigrationDefaults:
    """Defaults for IRI inference, partitioning and output naming."""

    BASE_SUFFIX: Final[str] = "/ids/"
    """Appended to the source URL when no base IRI is configured."""

    VOCAB_SUFFIX: Final[str] = "/terms/"
    """Appended to the source URL when no vocab IRI is configured."""

    BATCH_SIZE: Final[int] = 2000
    """Entities per data partition (file or transaction)."""

    VOCAB_FILENAME: Final[str] = "0_vocab.jsonld"
    """File name of the vocabulary artifact."""

    DATA_FILENAME_TEMPLATE: Final[str] = "{index}_data.jsonld"
    """File name template for data partitions (index starts at 1)."""

    SHAPE_SUFFIX: Final[str] = "Shape"
    """Appended to a class name to form its NodeShape IRI."""

    IRI_PREFIX_TERMINATORS: Final[tuple] = ("/", "#", ":")
    """A configured base/vocab prefix must end with one of these."""


# ============================================================================
# Logging
# ============================================================================

class LoggingConfig:
    """Logging configuration."""

    DEFAULT_LOG_LEVEL: Final[str] = "INFO"
    """Default logging level."""

    LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    """Default log format string."""

    DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
    """Default date format for logs."""

    DEFAULT_FORMAT_STYLE: Final[str] = "text"
    """Human-readable formatter style."""

    JSON_DATE_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%S.%fZ"
    """ISO-8601 timestamp format for structured logs."""

    SUPPORTED_FORMATS: Final[tuple[str, ...]] = ("text", "json")
    """Supported formatter styles."""

    MAX_LOG_FILE_MB: Final[int] = 10
    """Maximum log file size before rotation (MB)."""

    LOG_BACKUP_COUNT: Final[int] = 5
    """Number of backup log files to keep."""

    ROTATION_ENABLED: Final[bool] = True
    """Rotate log files by default when a log file is configured."""
