"""
Base HTTP client for ledger APIs.

Centralizes what the source and target clients share:
- JSON POST requests with uniform timeout/connection error handling
- Retry of transient failures (timeouts, connection errors, 429, 502-504)
  with exponential backoff via tenacity
- The 401 challenge: ask the CredentialProvider once and retry the same
  request once with ``Authorization: Bearer <credential>``
"""

import json
import logging
from typing import Any, Dict, Optional, Type

import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ...constants import APIConfig
from ..errors import LedgerAPIError, TransientAPIError
from .auth import CredentialProvider

logger = logging.getLogger(__name__)


def _is_transient_error(exception: BaseException) -> bool:
    """Check if exception is a transient error that should be retried."""
    if isinstance(exception, TransientAPIError):
        return True
    if isinstance(exception, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
        return True
    return False


class LedgerHTTPClient:
    """
    JSON-over-HTTP client for one ledger server.

    Subclasses set ``service`` (used in prompts and messages) and
    ``error_class`` (the LedgerAPIError subclass raised on failure).

    Attributes:
        base_url: Server or ledger URL without trailing slash.
        api_key: Current bearer credential, if any.
    """

    service: str = "ledger"
    error_class: Type[LedgerAPIError] = LedgerAPIError

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        credential_provider: Optional[CredentialProvider] = None,
        timeout: int = APIConfig.DEFAULT_TIMEOUT_SECONDS,
    ):
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.credential_provider = credential_provider
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get_headers(self) -> Dict[str, str]:
        """Get HTTP headers, with authorization when a credential is known."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def post(
        self,
        path: str,
        payload: Any,
        operation_name: str,
        timeout: Optional[int] = None,
    ) -> Any:
        """
        POST a JSON payload and return the decoded JSON response.

        Args:
            path: Path relative to ``base_url``.
            payload: JSON-serializable request body.
            operation_name: Description of the operation (for logging and errors).
            timeout: Request timeout in seconds (default: client timeout).

        Returns:
            Decoded JSON response ({} for an empty body).

        Raises:
            LedgerAPIError: (``error_class``) on HTTP errors, a refused or
                rejected credential, or when transient failures persist.
        """
        try:
            return self._post_with_retry(path, payload, operation_name, timeout or self.timeout)
        except TransientAPIError as e:
            raise self.error_class(
                status_code=e.status_code,
                error_code="RetriesExhausted",
                message=f"{operation_name} failed after {APIConfig.MAX_RETRY_ATTEMPTS} attempts: {e.message}",
            )

    @retry(
        stop=stop_after_attempt(APIConfig.MAX_RETRY_ATTEMPTS),
        wait=wait_exponential(
            multiplier=APIConfig.RETRY_MULTIPLIER,
            min=APIConfig.RETRY_MIN_SECONDS,
            max=APIConfig.RETRY_MAX_SECONDS,
        ),
        retry=retry_if_exception(_is_transient_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _post_with_retry(self, path: str, payload: Any, operation_name: str, timeout: int) -> Any:
        url = self._url(path)
        body = json.dumps(payload)

        response = self._make_request("POST", url, operation_name, timeout=timeout, data=body,
                                      headers=self._get_headers())
        if response.status_code == 401:
            self._authorize(url, operation_name)
            response = self._make_request("POST", url, operation_name, timeout=timeout, data=body,
                                          headers=self._get_headers())
            if response.status_code == 401:
                raise self.error_class(
                    status_code=401,
                    error_code="Unauthorized",
                    message=f"{operation_name}: the {self.service} ledger rejected the supplied credential",
                )
        return self._handle_response(response, operation_name)

    def _authorize(self, url: str, operation_name: str) -> None:
        """Obtain a credential after a 401 challenge."""
        if self.credential_provider is None:
            raise self.error_class(
                status_code=401,
                error_code="Unauthorized",
                message=f"{operation_name}: the {self.service} ledger requires an API key",
            )
        logger.info(f"{operation_name}: {self.service} ledger returned 401, requesting credential")
        credential = self.credential_provider.get_credential(self.service, url)
        if not credential:
            raise self.error_class(
                status_code=401,
                error_code="CredentialRefused",
                message=f"{operation_name}: no credential supplied for the {self.service} ledger",
            )
        self.api_key = credential

    def _make_request(
        self,
        method: str,
        url: str,
        operation_name: str,
        timeout: int = APIConfig.DEFAULT_TIMEOUT_SECONDS,
        **kwargs
    ) -> requests.Response:
        """
        Make HTTP request with consistent error handling.

        Timeouts and connection errors are raised as TransientAPIError so
        the retry policy sees them; other request failures are fatal.

        Raises:
            TransientAPIError: On timeout or connection failure.
            LedgerAPIError: (``error_class``) on any other request failure.
        """
        try:
            logger.debug(f"{operation_name}: {method} {url}")
            return requests.request(method, url, timeout=timeout, **kwargs)

        except requests.exceptions.Timeout:
            logger.warning(f"{operation_name}: Request timeout after {timeout}s")
            raise TransientAPIError(408, message=f"{operation_name} timed out after {timeout} seconds")

        except requests.exceptions.ConnectionError as e:
            logger.warning(f"{operation_name}: Connection error: {e}")
            raise TransientAPIError(503, message=f"{operation_name} failed to connect to {url}: {e}")

        except requests.exceptions.RequestException as e:
            logger.error(f"{operation_name}: Request error: {e}")
            raise self.error_class(
                status_code=500,
                error_code="RequestError",
                message=f"{operation_name} request failed: {e}",
            )

    def _handle_response(self, response: requests.Response, operation_name: str) -> Any:
        """Handle API response and raise appropriate errors."""
        if 200 <= response.status_code < 300:
            if not response.text:
                return {}
            try:
                return response.json()
            except ValueError as e:
                logger.error(f"{operation_name}: Failed to parse JSON response: {e}")
                logger.debug(f"Response text: {response.text[:500]}")
                raise self.error_class(
                    status_code=response.status_code,
                    error_code="InvalidResponse",
                    message=f"Server returned invalid JSON: {e}",
                )

        if response.status_code in APIConfig.TRANSIENT_STATUS_CODES:
            retry_after = self._retry_after(response)
            logger.warning(f"{operation_name}: HTTP {response.status_code}. Retry after {retry_after}s")
            raise TransientAPIError(response.status_code, retry_after, response.text[:200] or response.reason or "")

        try:
            error_data = response.json()
        except ValueError:
            error_data = None
        if isinstance(error_data, dict):
            error_message = error_data.get("message") or error_data.get("error") or response.text
            error_code = str(error_data.get("error") or error_data.get("errorCode") or "Unknown")
        else:
            error_message = response.text
            error_code = "Unknown"

        logger.error(f"{operation_name}: HTTP {response.status_code}: {error_message}")
        raise self.error_class(
            status_code=response.status_code,
            error_code=error_code,
            message=f"{operation_name}: {error_message}",
        )

    @staticmethod
    def _retry_after(response: requests.Response) -> int:
        try:
            return int(response.headers.get("Retry-After", 5))
        except (TypeError, ValueError):
            return 5
