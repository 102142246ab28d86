"""
Non-fatal diagnostics recorded during a migration.

Schema relaxations and transformation problems never abort a run. They are
collected, logged as they occur, and summarised at the end of the run.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, List, Optional


@dataclass
class SchemaWarning:
    """A schema facet that was accepted in a relaxed form.

    Example:
        >>> SchemaWarning("friends", "unique=true on a multi-valued predicate; unique relaxed to false")
    """
    subject: str
    message: str

    def __str__(self) -> str:
        return f"{self.subject}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "SchemaWarning", "subject": self.subject, "message": self.message}


@dataclass
class TransformWarning:
    """Base class for problems found while transforming one entity record.

    Attributes:
        subject_id: Source subject the warning is about.
        message: Human-readable description.
        predicate: Predicate involved, if any.
    """
    kind: ClassVar[str] = "TransformWarning"

    subject_id: str
    message: str
    predicate: Optional[str] = None

    def __str__(self) -> str:
        location = f"{self.subject_id}/{self.predicate}" if self.predicate else self.subject_id
        return f"[{self.kind}] {location}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "kind": self.kind,
            "subject": self.subject_id,
            "message": self.message,
        }
        if self.predicate:
            result["predicate"] = self.predicate
        return result


@dataclass
class UnresolvedTypeWarning(TransformWarning):
    """No collection could be determined; the entity was emitted without @type."""
    kind: ClassVar[str] = "UnresolvedTypeWarning"


@dataclass
class UnknownPropertyWarning(TransformWarning):
    """Predicate absent from the schema; value emitted under a best-effort IRI."""
    kind: ClassVar[str] = "UnknownPropertyWarning"


@dataclass
class UnresolvedReferenceWarning(TransformWarning):
    """A ref value points at a subject never seen in the migrated entity set."""
    kind: ClassVar[str] = "UnresolvedReferenceWarning"

    target: Optional[str] = None


@dataclass
class MalformedValueWarning(TransformWarning):
    """A value could not be coerced to its datatype and was skipped."""
    kind: ClassVar[str] = "MalformedValueWarning"


@dataclass
class CardinalityWarning(TransformWarning):
    """A single-valued predicate carried several values; all were kept."""
    kind: ClassVar[str] = "CardinalityWarning"


@dataclass
class WarningLog:
    """Ordered collection of diagnostics with per-kind counts."""
    schema_warnings: List[SchemaWarning] = field(default_factory=list)
    transform_warnings: List[TransformWarning] = field(default_factory=list)

    def extend_schema(self, warnings: Iterable[SchemaWarning]) -> None:
        self.schema_warnings.extend(warnings)

    def extend_transform(self, warnings: Iterable[TransformWarning]) -> None:
        self.transform_warnings.extend(warnings)

    def counts(self) -> Dict[str, int]:
        """Number of warnings per kind."""
        counts: Dict[str, int] = {}
        if self.schema_warnings:
            counts["SchemaWarning"] = len(self.schema_warnings)
        for warning in self.transform_warnings:
            counts[warning.kind] = counts.get(warning.kind, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self.schema_warnings) + len(self.transform_warnings)

    def __bool__(self) -> bool:
        return len(self) > 0
