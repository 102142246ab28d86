"""
Entity records and JSON-LD documents.

EntityRecord is the raw input of the data transformation: one v2 subject with
its predicate values. EntityDocument is one transformed JSON-LD node, and
JsonLdDocument is a partition of nodes sharing one ``@context``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .diagnostics import TransformWarning
from .schema import Datatype


@dataclass
class EntityRecord:
    """
    One v2 subject and its predicate values.

    Attributes:
        subject_id: v2 subject id as a string.
        values: Predicate name (local or ``collection/predicate``) to a raw
            value or a list of raw values.
        collection: v2 collection the record was queried from, if known.
        asserted_types: Datatype tags recorded with the values at write time.
            Used to coerce values of predicates missing from the schema.

    Example:
        >>> EntityRecord("351843720888321", {"name": "Ada", "friends": [{"_id": 351843720888322}]},
        ...              collection="person")
    """
    subject_id: str
    values: Dict[str, Any] = field(default_factory=dict)
    collection: Optional[str] = None
    asserted_types: Dict[str, Datatype] = field(default_factory=dict)

    @classmethod
    def from_query_result(
        cls,
        result: Mapping[str, Any],
        collection: Optional[str] = None,
    ) -> "EntityRecord":
        """Create a record from a compact v2 query result row.

        Args:
            result: Row such as ``{"_id": 123, "name": "Ada"}``.
            collection: The collection the row was selected from.

        Raises:
            ValueError: If the row has no ``_id``.
        """
        if "_id" not in result or result["_id"] is None:
            raise ValueError(f"Query result has no _id: {dict(result)!r}")
        values = {key: value for key, value in result.items() if key != "_id"}
        return cls(subject_id=str(result["_id"]), values=values, collection=collection)


@dataclass
class EntityDocument:
    """One transformed JSON-LD node and the warnings raised while building it."""
    subject_id: str
    node: Dict[str, Any]
    warnings: List[TransformWarning] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.warnings)


@dataclass
class JsonLdDocument:
    """
    A JSON-LD document: shared ``@context`` plus an ordered ``@graph``.

    Example:
        >>> doc = JsonLdDocument({"@vocab": "http://ex.org/terms/"}, [{"@id": "http://ex.org/ids/1"}])
        >>> doc.to_dict()["@graph"][0]["@id"]
        'http://ex.org/ids/1'
    """
    context: Dict[str, Any]
    graph: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-LD dictionary form."""
        return {"@context": self.context, "@graph": self.graph}

    def __len__(self) -> int:
        return len(self.graph)
