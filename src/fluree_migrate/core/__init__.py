"""
Core migration components.

- errors: exception hierarchy
- iri: IRI resolution
- platform/: ledger HTTP clients and credential providers
- services/: orchestration and output sinks
"""

from .errors import (
    ConfigError,
    LedgerAPIError,
    MigrationError,
    SchemaError,
    SinkError,
    SourceFetchError,
    TargetAPIError,
    TransientAPIError,
)
from .iri import IRIResolver

__all__ = [
    'ConfigError',
    'LedgerAPIError',
    'MigrationError',
    'SchemaError',
    'SinkError',
    'SourceFetchError',
    'TargetAPIError',
    'TransientAPIError',
    'IRIResolver',
]
