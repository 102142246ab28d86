"""
Typed schema model for a v2 ledger.

The v2 schema is a flat namespace of predicate records keyed by
``collection/predicate`` names. This module defines the strongly typed
representation used by every downstream component:

- Datatype: closed enumeration of v2 predicate types
- ClassDef: one v2 collection
- PropertyDef: one (schema-global) v2 predicate
- SchemaModel: arena of classes and properties keyed by name

ClassDef and PropertyDef refer to each other by name, never by object
reference, so mutually referencing collections do not form ownership cycles.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


class Datatype(str, Enum):
    """v2 predicate types.

    Values are the literal ``_predicate/type`` strings used by v2.
    """
    STRING = "string"
    BOOLEAN = "boolean"
    INT = "int"
    LONG = "long"
    BIGINT = "bigint"
    FLOAT = "float"
    DOUBLE = "double"
    BIGDEC = "bigdec"
    INSTANT = "instant"
    REF = "ref"
    TAG = "tag"
    JSON = "json"
    GEOJSON = "geojson"
    BYTES = "bytes"
    URI = "uri"
    UUID = "uuid"

    def __str__(self) -> str:
        return self.value

    @property
    def is_ref(self) -> bool:
        return self is Datatype.REF

    @classmethod
    def parse(cls, value: str) -> "Datatype":
        """Parse a v2 type string (case-insensitive).

        Raises:
            ValueError: If the type is not a known v2 predicate type.
        """
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown predicate type: {value!r}")


@dataclass(frozen=True)
class PropertyDef:
    """
    A v2 predicate in the target vocabulary.

    Attributes:
        name: Standardized property name (lowerCamelCase), unique in the schema.
        source_name: Local predicate name in v2 (``first_name`` for ``person/first_name``).
        iri: Property IRI in the vocab namespace.
        datatype: Asserted v2 type.
        multi_valued: v2 ``multi`` facet.
        unique: v2 ``unique`` facet (relaxed to False when multi-valued).
        indexed: v2 ``index`` facet.
        target_class: Name of the referenced ClassDef, ``ref`` only.
        target_unresolved: The v2 ``restrictCollection`` could not be resolved.
        doc: v2 ``doc`` string.
    """
    name: str
    source_name: str
    iri: str
    datatype: Datatype
    multi_valued: bool = False
    unique: bool = False
    indexed: bool = False
    target_class: Optional[str] = None
    target_unresolved: bool = False
    doc: Optional[str] = None

    @property
    def is_ref(self) -> bool:
        return self.datatype.is_ref


@dataclass(frozen=True)
class ClassDef:
    """
    A v2 collection in the target vocabulary.

    Attributes:
        name: Standardized class name (UpperCamelCase), unique in the schema.
        source_name: v2 collection name.
        iri: Class IRI in the vocab namespace.
        properties: Names of the owned PropertyDefs, in source order.
        doc: v2 ``_collection/doc`` string.
        source_id: v2 ``_collection`` subject id, if known.
    """
    name: str
    source_name: str
    iri: str
    properties: Tuple[str, ...] = ()
    doc: Optional[str] = None
    source_id: Optional[int] = None


@dataclass(frozen=True)
class SchemaModel:
    """
    Arena of classes and properties keyed by their standardized names.

    Built once per run by SchemaModelBuilder and read-only afterwards.
    """
    classes: Dict[str, ClassDef] = field(default_factory=dict)
    properties: Dict[str, PropertyDef] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for class_def in self.classes.values():
            for prop_name in class_def.properties:
                if prop_name not in self.properties:
                    raise ValueError(
                        f"Class '{class_def.name}' references unknown property '{prop_name}'"
                    )

    def get_class(self, name: str) -> Optional[ClassDef]:
        return self.classes.get(name)

    def get_property(self, name: str) -> Optional[PropertyDef]:
        return self.properties.get(name)

    def class_by_source_name(self, source_name: str) -> Optional[ClassDef]:
        """Look up a class by its v2 collection name."""
        for class_def in self.classes.values():
            if class_def.source_name == source_name:
                return class_def
        return None

    def property_by_source_name(self, source_name: str) -> Optional[PropertyDef]:
        """Look up a property by its v2 local predicate name."""
        for prop in self.properties.values():
            if prop.source_name == source_name:
                return prop
        return None

    def properties_of(self, class_name: str) -> List[PropertyDef]:
        """Properties owned by a class, in source order."""
        class_def = self.classes[class_name]
        return [self.properties[name] for name in class_def.properties]

    def domain_of(self, property_name: str) -> List[str]:
        """Names of the classes that own a property, sorted."""
        return sorted(
            class_def.name
            for class_def in self.classes.values()
            if property_name in class_def.properties
        )

    def sorted_classes(self) -> List[ClassDef]:
        return [self.classes[name] for name in sorted(self.classes)]

    def sorted_properties(self) -> List[PropertyDef]:
        return [self.properties[name] for name in sorted(self.properties)]

    def __iter__(self) -> Iterator[ClassDef]:
        return iter(self.sorted_classes())

    def __len__(self) -> int:
        return len(self.classes)
