"""
v3 target ledger client.

Creates the ledger (optionally) and transacts JSON-LD documents through
the v3 HTTP API.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from ...constants import APIConfig, TargetAPIConfig
from ..errors import TargetAPIError
from .auth import CredentialProvider
from .http_client import LedgerHTTPClient

logger = logging.getLogger(__name__)


def transaction_body(ledger: str, context: Mapping[str, Any], insert: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Request body shared by ``fluree/create`` and ``fluree/transact``."""
    return {"ledger": ledger, "@context": dict(context), "insert": insert}


class FlureeTargetClient(LedgerHTTPClient):
    """
    Client for a v3 server.

    Args:
        server_url: v3 server URL, e.g. ``http://localhost:58090``.
        api_key: Bearer credential, if known up front.
        credential_provider: Asked for a credential on HTTP 401.
    """

    service = "target"
    error_class = TargetAPIError

    def __init__(
        self,
        server_url: str,
        api_key: Optional[str] = None,
        credential_provider: Optional[CredentialProvider] = None,
        timeout: int = APIConfig.TRANSACT_TIMEOUT_SECONDS,
    ):
        super().__init__(server_url, api_key=api_key, credential_provider=credential_provider, timeout=timeout)

    def create_ledger(self, ledger: str, context: Mapping[str, Any], insert: List[Dict[str, Any]]) -> Any:
        """
        Create a ledger with its first transaction.

        Raises:
            TargetAPIError: If the server rejects the request.
        """
        logger.info(f"Creating ledger '{ledger}' with {len(insert)} nodes")
        return self.post(
            TargetAPIConfig.CREATE_PATH,
            transaction_body(ledger, context, insert),
            f"Create ledger {ledger}",
        )

    def transact(self, ledger: str, context: Mapping[str, Any], insert: List[Dict[str, Any]]) -> Any:
        """
        Insert nodes into an existing ledger.

        Raises:
            TargetAPIError: If the server rejects the request.
        """
        logger.info(f"Transacting {len(insert)} nodes into '{ledger}'")
        return self.post(
            TargetAPIConfig.TRANSACT_PATH,
            transaction_body(ledger, context, insert),
            f"Transact into {ledger}",
        )
