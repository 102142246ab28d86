"""
Credential providers for ledger HTTP clients.

A ledger that answers HTTP 401 is retried once with a credential obtained
from the client's CredentialProvider. Providers keep interactive I/O out of
the migration core: the CLI wires a prompting provider, library callers and
tests a static one.

Classes:
    CredentialProvider: Interface returning a credential or None (refused)
    StaticCredentialProvider: Returns a fixed credential
    PromptCredentialProvider: Asks on the terminal without echo
"""

import getpass
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CredentialProvider(ABC):
    """Supplies a credential after a ledger rejected a request with 401."""

    @abstractmethod
    def get_credential(self, service: str, url: str) -> Optional[str]:
        """
        Get a credential for a ledger.

        Args:
            service: Which ledger asks (``source`` or ``target``).
            url: URL of the rejected request.

        Returns:
            The API key to send as a bearer token, or None to refuse.
        """


class StaticCredentialProvider(CredentialProvider):
    """Returns the same credential every time (None always refuses).

    Example:
        >>> StaticCredentialProvider("my-api-key").get_credential("source", "http://localhost:8090")
        'my-api-key'
    """

    def __init__(self, credential: Optional[str] = None):
        self._credential = credential

    def get_credential(self, service: str, url: str) -> Optional[str]:
        if self._credential is None:
            logger.debug(f"No static credential configured for {service}")
        return self._credential


class PromptCredentialProvider(CredentialProvider):
    """Prompts for an API key without echoing it.

    An empty answer or closed input refuses the challenge.
    """

    def __init__(self, prompt: Callable[[str], str] = getpass.getpass):
        self._prompt = prompt

    def get_credential(self, service: str, url: str) -> Optional[str]:
        logger.info(f"The {service} ledger requires authentication ({url})")
        try:
            answer = self._prompt(f"API key for the {service} ledger: ")
        except EOFError:
            logger.warning("No input available for the credential prompt")
            return None
        answer = answer.strip()
        return answer or None
