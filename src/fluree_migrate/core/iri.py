"""
IRI resolution for migrated classes, properties and entities.

The resolver is pure and deterministic: the same source URL and base/vocab
configuration always produce the same IRIs, so references between the
vocabulary and the data documents stay stable across runs.

Usage:
    resolver = IRIResolver("http://localhost:8090/fdb/acme/crm")
    resolver.class_iri("Person")        # http://localhost:8090/fdb/acme/crm/terms/Person
    resolver.entity_iri("351843720888321")
"""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from ..constants import MigrationDefaults
from .errors import ConfigError

logger = logging.getLogger(__name__)

# Characters that may not appear anywhere in an IRI (RFC 3987 excluded set)
_INVALID_IRI_CHARS = re.compile(r'[\s<>"{}|\\^`]')
_SCHEME = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*:')


class IRIResolver:
    """
    Computes base/vocab prefixes and per-entity/per-property IRIs.

    Attributes:
        source_url: v2 ledger URL without trailing slash.
        base_iri: Prefix for entity IRIs.
        vocab_iri: Prefix for class and property IRIs.
    """

    def __init__(
        self,
        source_url: str,
        base: Optional[str] = None,
        vocab: Optional[str] = None,
    ):
        """
        Initialize and validate the resolver.

        Args:
            source_url: v2 ledger URL (``http(s)://host/fdb/network/db``).
            base: Configured base IRI; wins over the source-derived default.
            vocab: Configured vocab IRI; wins over the source-derived default.

        Raises:
            ConfigError: If the source URL or a configured prefix is malformed.
        """
        self.source_url = self.validate_source_url(source_url)

        if base:
            self.base_iri = self.validate_prefix(base, "base")
        else:
            self.base_iri = f"{self.source_url}{MigrationDefaults.BASE_SUFFIX}"

        if vocab:
            self.vocab_iri = self.validate_prefix(vocab, "vocab")
        else:
            self.vocab_iri = f"{self.source_url}{MigrationDefaults.VOCAB_SUFFIX}"

        logger.debug(f"Resolved base IRI {self.base_iri} and vocab IRI {self.vocab_iri}")

    @staticmethod
    def validate_source_url(url: str) -> str:
        """Validate an http(s) ledger URL and strip trailing slashes."""
        if not url or not isinstance(url, str):
            raise ConfigError("Source URL is required")

        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise ConfigError(f"Source URL must use http or https: {url}")
        if not parsed.netloc:
            raise ConfigError(f"Source URL has no host: {url}")
        if _INVALID_IRI_CHARS.search(url):
            raise ConfigError(f"Source URL contains invalid characters: {url}")
        return url.rstrip("/")

    @staticmethod
    def validate_prefix(value: str, label: str) -> str:
        """
        Validate a configured IRI prefix.

        A prefix must be an absolute IRI (has a scheme), contain no characters
        excluded from IRIs, and end with ``/``, ``#`` or ``:`` so that
        appending a local name yields a well-formed IRI.

        Raises:
            ConfigError: If the prefix is malformed.
        """
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"{label} IRI must be a non-empty string")

        value = value.strip()
        if not _SCHEME.match(value):
            raise ConfigError(f"{label} IRI must be absolute (e.g. https://example.com/{label}/): {value}")
        if _INVALID_IRI_CHARS.search(value):
            raise ConfigError(f"{label} IRI contains characters not allowed in an IRI: {value}")

        parsed = urlparse(value)
        if parsed.scheme in ("http", "https") and not parsed.netloc:
            raise ConfigError(f"{label} IRI has no host: {value}")
        if not value.endswith(MigrationDefaults.IRI_PREFIX_TERMINATORS):
            raise ConfigError(
                f"{label} IRI must end with one of "
                f"{', '.join(repr(t) for t in MigrationDefaults.IRI_PREFIX_TERMINATORS)}: {value}"
            )
        return value

    def class_iri(self, name: str) -> str:
        return f"{self.vocab_iri}{name}"

    def property_iri(self, name: str) -> str:
        return f"{self.vocab_iri}{name}"

    def entity_iri(self, subject_id: str) -> str:
        return f"{self.base_iri}{subject_id}"

    def shape_iri(self, class_name: str) -> str:
        return f"{self.vocab_iri}{class_name}{MigrationDefaults.SHAPE_SUFFIX}"

    def term_iri(self, predicate: str) -> str:
        """Best-effort IRI for a predicate that is not in the schema."""
        local = predicate.rsplit("/", 1)[-1]
        return self.property_iri(local)

    def is_entity_iri(self, iri: str) -> bool:
        return iri.startswith(self.base_iri) and len(iri) > len(self.base_iri)

    def ledger_name(self) -> str:
        """Ledger name derived from the source URL (last two path segments).

        ``http://localhost:8090/fdb/acme/crm`` → ``acme/crm``
        """
        segments = [s for s in urlparse(self.source_url).path.split("/") if s]
        if len(segments) >= 2:
            return f"{segments[-2]}/{segments[-1]}"
        if segments:
            return segments[-1]
        return urlparse(self.source_url).netloc

    def __repr__(self) -> str:
        return f"IRIResolver(base={self.base_iri!r}, vocab={self.vocab_iri!r})"
