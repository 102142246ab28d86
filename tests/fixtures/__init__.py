"""
Centralized test fixtures for the migration test suite.

This package provides reusable fixtures for testing, including:
- Raw v2 schemas and schema query responses
- v2 entity query rows
- Mock HTTP responses
- Configuration samples

Usage:
    from fixtures import PERSON_SCHEMA, PERSON_ROWS, SOURCE_URL

Or use the pytest fixtures in conftest.py which import from here.
"""

from .schema_fixtures import (
    SOURCE_URL,
    PARTITION,
    PERSON_COLLECTION_ID,
    ACCOUNT_COLLECTION_ID,
    ADA_ID,
    BOB_ID,
    ACCOUNT_ID,
    PERSON_SCHEMA,
    PERSON_SCHEMA_RESPONSE,
    CRM_SCHEMA,
    ALL_DATATYPE_NAMES,
    schema_with,
)
from .record_fixtures import (
    PERSON_ROWS,
    CRM_PERSON_ROW,
    CRM_ACCOUNT_ROW,
)
from .http_fixtures import (
    mock_response,
    sent_body,
    sent_url,
)
from .config_fixtures import (
    SAMPLE_MIGRATION_CONFIG,
    CAMEL_CASE_CONFIG,
    MINIMAL_MIGRATION_CONFIG,
)

__all__ = [
    # Schema
    'SOURCE_URL',
    'PARTITION',
    'PERSON_COLLECTION_ID',
    'ACCOUNT_COLLECTION_ID',
    'ADA_ID',
    'BOB_ID',
    'ACCOUNT_ID',
    'PERSON_SCHEMA',
    'PERSON_SCHEMA_RESPONSE',
    'CRM_SCHEMA',
    'ALL_DATATYPE_NAMES',
    'schema_with',
    # Records
    'PERSON_ROWS',
    'CRM_PERSON_ROW',
    'CRM_ACCOUNT_ROW',
    # HTTP
    'mock_response',
    'sent_body',
    'sent_url',
    # Config
    'SAMPLE_MIGRATION_CONFIG',
    'CAMEL_CASE_CONFIG',
    'MINIMAL_MIGRATION_CONFIG',
]
