"""
Migration configuration.

MigrationConfig holds every value a run consumes. It is loaded from a JSON
file and/or built from CLI flags (flags win), then validated before any
network activity.

Example config.json:
    {
        "source_url": "http://localhost:8090/fdb/acme/crm",
        "vocab": "https://example.com/terms/",
        "shacl": true,
        "closed_shapes": true,
        "output_dir": "./migrated",
        "logging": {"level": "INFO", "file": "logs/migrate.log"}
    }
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .constants import MigrationDefaults
from .core.errors import ConfigError
from .core.iri import IRIResolver
from .formats.jsonld.namespaces import PREFIXES

logger = logging.getLogger(__name__)

# camelCase spellings accepted in config files
_ALIASES = {
    "sourceUrl": "source_url",
    "source": "source_url",
    "sourceApiKey": "source_api_key",
    "closedShapes": "closed_shapes",
    "targetUrl": "target_url",
    "target": "target_url",
    "targetApiKey": "target_api_key",
    "createLedger": "create_ledger",
    "outputDir": "output_dir",
    "output": "output_dir",
    "batchSize": "batch_size",
    "strictSchema": "strict_schema",
    "extraContext": "extra_context",
    "context": "extra_context",
}

SINK_TARGET = "target"
SINK_FILE = "file"
SINK_STDOUT = "stdout"


@dataclass
class MigrationConfig:
    """Configuration for one migration run."""
    source_url: str = ""
    source_api_key: Optional[str] = None
    base: Optional[str] = None
    vocab: Optional[str] = None
    shacl: bool = False
    closed_shapes: bool = False
    target_url: Optional[str] = None
    target_api_key: Optional[str] = None
    create_ledger: bool = False
    ledger: Optional[str] = None
    output_dir: Optional[str] = None
    batch_size: int = MigrationDefaults.BATCH_SIZE
    strict_schema: bool = True
    extra_context: Dict[str, str] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'MigrationConfig':
        """Create MigrationConfig from a dictionary (optionally nested under ``migration``)."""
        migration_config = config_dict.get('migration', config_dict)
        if not isinstance(migration_config, dict):
            raise ConfigError(f"Configuration must be a JSON object, got {type(migration_config).__name__}")

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in migration_config.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown configuration key '{key}'")
                continue
            values[name] = value

        if 'logging' not in values and isinstance(config_dict.get('logging'), dict):
            values['logging'] = config_dict['logging']
        if values.get('extra_context') is None:
            values.pop('extra_context', None)
        if values.get('logging') is None:
            values.pop('logging', None)
        return cls(**values)

    @classmethod
    def from_file(cls, config_path: str) -> 'MigrationConfig':
        """Load configuration from a JSON file."""
        if not config_path:
            raise ConfigError("config_path cannot be empty")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_dict = json.load(f)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file {config_path} at line {e.lineno}, column {e.colno}: {e.msg}"
            )
        except UnicodeDecodeError as e:
            raise ConfigError(f"Encoding error reading {config_path}: {e}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading {config_path}")

        if not isinstance(config_dict, dict):
            raise ConfigError(f"Configuration file must contain a JSON object, got {type(config_dict).__name__}")

        return cls.from_dict(config_dict)

    def with_overrides(self, **overrides: Any) -> 'MigrationConfig':
        """Copy with every non-None override applied (CLI flags win over the file)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """Convert to a dictionary; API keys are masked unless ``redact`` is False."""
        result = asdict(self)
        if redact:
            for key in ('source_api_key', 'target_api_key'):
                if result[key]:
                    result[key] = '***'
        return result

    @property
    def sink_kind(self) -> str:
        """Which output sink the run uses."""
        if self.target_url:
            return SINK_TARGET
        if self.output_dir:
            return SINK_FILE
        return SINK_STDOUT

    @property
    def emit_shapes(self) -> bool:
        return self.shacl or self.closed_shapes

    def validate(self) -> 'MigrationConfig':
        """
        Validate the configuration.

        Returns:
            self, for chaining.

        Raises:
            ConfigError: On a malformed URL, IRI prefix, batch size,
                context entry or contradictory sink options.
        """
        IRIResolver.validate_source_url(self.source_url)
        if self.base:
            IRIResolver.validate_prefix(self.base, "base")
        if self.vocab:
            IRIResolver.validate_prefix(self.vocab, "vocab")

        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size < 1:
            raise ConfigError(f"batch_size must be a positive integer, got {self.batch_size!r}")

        if self.target_url:
            parsed = urlparse(self.target_url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ConfigError(f"Target URL must be an http(s) URL with a host: {self.target_url}")
            if self.output_dir:
                raise ConfigError("Choose one output: a target URL or an output directory, not both")
        elif self.create_ledger:
            raise ConfigError("create_ledger requires a target URL")

        if not isinstance(self.extra_context, dict):
            raise ConfigError("extra_context must be an object of prefix to IRI")
        for prefix, iri in self.extra_context.items():
            if prefix in PREFIXES:
                raise ConfigError(f"Context prefix '{prefix}' is reserved")
            if not isinstance(iri, str):
                raise ConfigError(f"Context prefix '{prefix}' must map to an IRI string")
            IRIResolver.validate_prefix(iri, f"context '{prefix}'")

        if self.closed_shapes and not self.shacl:
            logger.info("closed_shapes requested; SHACL shapes will be emitted")
        return self
