"""
Shared data models for the migration pipeline.

This package contains the data classes passed between the schema builder,
shape generator, vocabulary emitter, data transformer and orchestrator.

Usage:
    from fluree_migrate.shared.models import SchemaModel, ClassDef, PropertyDef, Datatype
    from fluree_migrate.shared.models import EntityRecord, JsonLdDocument
    from fluree_migrate.shared.models import ShapeSet, NodeShape, PropertyShape
"""

from .schema import (
    Datatype,
    ClassDef,
    PropertyDef,
    SchemaModel,
)
from .records import (
    EntityRecord,
    EntityDocument,
    JsonLdDocument,
)
from .shapes import (
    ShapeSet,
    NodeShape,
    PropertyShape,
)
from .diagnostics import (
    SchemaWarning,
    TransformWarning,
    UnresolvedTypeWarning,
    UnknownPropertyWarning,
    UnresolvedReferenceWarning,
    MalformedValueWarning,
    CardinalityWarning,
    WarningLog,
)

__all__ = [
    # Schema
    "Datatype",
    "ClassDef",
    "PropertyDef",
    "SchemaModel",
    # Records and documents
    "EntityRecord",
    "EntityDocument",
    "JsonLdDocument",
    # Shapes
    "ShapeSet",
    "NodeShape",
    "PropertyShape",
    # Diagnostics
    "SchemaWarning",
    "TransformWarning",
    "UnresolvedTypeWarning",
    "UnknownPropertyWarning",
    "UnresolvedReferenceWarning",
    "MalformedValueWarning",
    "CardinalityWarning",
    "WarningLog",
]
