"""
v2 source ledger client.

Reads the schema with one multi-query and entity data with offset-paged
per-collection queries.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ...constants import APIConfig, SourceQueryConfig
from ...shared.models import EntityRecord
from ..errors import SourceFetchError
from .auth import CredentialProvider
from .http_client import LedgerHTTPClient

logger = logging.getLogger(__name__)

# Predicates present at block 1 are the genesis system predicates
SCHEMA_QUERY: Dict[str, Any] = {
    "collections": {
        "select": {"?collection": ["*"]},
        "where": [["?collection", "_collection/name", "?name"]],
        "opts": {"compact": True, "limit": SourceQueryConfig.SCHEMA_LIMIT},
    },
    "initial_predicates": {
        "select": "?pred",
        "where": [["?pred", "_predicate/name", "?pN"]],
        "block": 1,
        "opts": {"limit": SourceQueryConfig.SCHEMA_LIMIT},
    },
    "current_predicates": {
        "select": {"?pred": ["*"]},
        "where": [["?pred", "_predicate/name", "?pN"]],
        "opts": {"compact": True, "limit": SourceQueryConfig.SCHEMA_LIMIT},
    },
}


def collection_query(collection: str, offset: int, limit: int = SourceQueryConfig.PAGE_SIZE) -> Dict[str, Any]:
    """Query selecting one page of a collection's subjects."""
    return {
        "select": ["*"],
        "from": collection,
        "opts": {
            "compact": True,
            "limit": limit,
            "fuel": SourceQueryConfig.FUEL,
            "offset": offset,
        },
    }


def _flatten_ids(values: Any) -> List[Any]:
    ids: List[Any] = []
    for value in values or []:
        if isinstance(value, list):
            ids.extend(_flatten_ids(value))
        elif isinstance(value, Mapping):
            ids.append(value.get("_id"))
        else:
            ids.append(value)
    return ids


class FlureeSourceClient(LedgerHTTPClient):
    """
    Client for a v2 ledger's query endpoints.

    Args:
        ledger_url: v2 ledger URL, e.g. ``http://localhost:8090/fdb/acme/crm``.
        api_key: Bearer credential, if known up front.
        credential_provider: Asked for a credential on HTTP 401.

    Example:
        >>> client = FlureeSourceClient("http://localhost:8090/fdb/acme/crm")
        >>> schema = client.fetch_schema()
        >>> for record in client.iter_entities("person"):
        ...     print(record.subject_id)
    """

    service = "source"
    error_class = SourceFetchError

    def __init__(
        self,
        ledger_url: str,
        api_key: Optional[str] = None,
        credential_provider: Optional[CredentialProvider] = None,
        timeout: int = APIConfig.DEFAULT_TIMEOUT_SECONDS,
        page_size: int = SourceQueryConfig.PAGE_SIZE,
    ):
        super().__init__(ledger_url, api_key=api_key, credential_provider=credential_provider, timeout=timeout)
        self.page_size = page_size

    def fetch_schema(self) -> Dict[str, List[Any]]:
        """
        Fetch the raw schema.

        Returns:
            ``{"collections": [...], "predicates": [...], "initial_predicates": [...]}``

        Raises:
            SourceFetchError: If the request fails or the response is not a schema.
        """
        logger.info(f"Fetching v2 schema from {self.base_url}")
        result = self.post(SourceQueryConfig.MULTI_QUERY_PATH, SCHEMA_QUERY, "Fetch schema")

        if not isinstance(result, Mapping) or not isinstance(result.get("current_predicates"), list):
            raise SourceFetchError(
                status_code=200,
                error_code="InvalidResponse",
                message="Schema query response has no current_predicates list",
            )

        schema = {
            "collections": list(result.get("collections") or []),
            "predicates": list(result["current_predicates"]),
            "initial_predicates": _flatten_ids(result.get("initial_predicates")),
        }
        logger.info(
            f"Fetched {len(schema['collections'])} collections and {len(schema['predicates'])} predicates "
            f"({len(schema['initial_predicates'])} system predicates)"
        )
        return schema

    def fetch_page(self, collection: str, offset: int) -> List[Dict[str, Any]]:
        """Fetch one page of a collection's subjects."""
        result = self.post(
            SourceQueryConfig.QUERY_PATH,
            collection_query(collection, offset, self.page_size),
            f"Query {collection} (offset {offset})",
        )
        if not isinstance(result, list):
            raise SourceFetchError(
                status_code=200,
                error_code="InvalidResponse",
                message=f"Query for collection '{collection}' did not return a list",
            )
        return result

    def iter_entities(self, collection: str) -> Iterator[EntityRecord]:
        """
        Lazily page through a collection's subjects.

        Yields:
            EntityRecord per subject, in source order.

        Raises:
            SourceFetchError: If a page cannot be fetched or a row has no ``_id``.
        """
        offset = 0
        while True:
            page = self.fetch_page(collection, offset)
            logger.debug(f"Collection {collection}: {len(page)} subjects at offset {offset}")
            for row in page:
                try:
                    yield EntityRecord.from_query_result(row, collection=collection)
                except ValueError as e:
                    raise SourceFetchError(status_code=200, error_code="InvalidResponse", message=str(e))
            if len(page) < self.page_size:
                break
            offset += self.page_size
