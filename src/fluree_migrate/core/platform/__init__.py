"""
Platform clients for v2 source and v3 target ledgers.

- auth: CredentialProvider implementations for the 401 challenge
- http_client: shared request, retry and error handling
- source_client: v2 schema and entity queries
- target_client: v3 ledger creation and transactions
"""

from .auth import CredentialProvider, PromptCredentialProvider, StaticCredentialProvider
from .http_client import LedgerHTTPClient
from .source_client import FlureeSourceClient, SCHEMA_QUERY, collection_query
from .target_client import FlureeTargetClient, transaction_body

__all__ = [
    'CredentialProvider',
    'PromptCredentialProvider',
    'StaticCredentialProvider',
    'LedgerHTTPClient',
    'FlureeSourceClient',
    'SCHEMA_QUERY',
    'collection_query',
    'FlureeTargetClient',
    'transaction_body',
]
