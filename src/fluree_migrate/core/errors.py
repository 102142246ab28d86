"""
Exception hierarchy for the migration tool.

Fatal conditions are exceptions; non-fatal conditions (schema relaxations,
transformation problems) are recorded as diagnostics instead, see
``shared.models.diagnostics``.

Hierarchy:
    MigrationError
    ├── ConfigError          malformed IRI/URL configuration, raised before any fetch
    ├── SchemaError          structurally invalid v2 schema
    ├── LedgerAPIError       HTTP failure talking to a ledger
    │   ├── SourceFetchError     ... the v2 source
    │   └── TargetAPIError       ... the v3 target (also a SinkError)
    └── SinkError            output could not be written or transacted
"""

from typing import Optional


class MigrationError(Exception):
    """Base class for fatal migration errors."""


class ConfigError(MigrationError):
    """Raised for invalid configuration values (IRIs, URLs, batch sizes)."""


class SchemaError(MigrationError):
    """Raised when the v2 schema cannot be turned into a valid SchemaModel.

    Attributes:
        subject: Collection or predicate name the error is about, if known.
    """

    def __init__(self, message: str, subject: Optional[str] = None):
        self.subject = subject
        self.message = message
        super().__init__(f"{subject}: {message}" if subject else message)


class LedgerAPIError(MigrationError):
    """Exception raised for ledger HTTP API errors."""

    def __init__(self, status_code: int, error_code: str, message: str):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        super().__init__(f"[{error_code}] {message} (HTTP {status_code})")


class SourceFetchError(LedgerAPIError):
    """The v2 source ledger could not be queried."""


class SinkError(MigrationError):
    """Output could not be written, printed or transacted."""


class TargetAPIError(LedgerAPIError, SinkError):
    """The v3 target ledger rejected or failed a request."""


class TransientAPIError(Exception):
    """Exception for transient API errors (timeouts, 429, 5xx) that should be retried."""

    def __init__(self, status_code: int, retry_after: int = 5, message: str = ""):
        self.status_code = status_code
        self.retry_after = retry_after
        self.message = message
        super().__init__(f"Transient error (HTTP {status_code}): {message}")
