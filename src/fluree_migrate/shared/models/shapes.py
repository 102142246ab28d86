"""
SHACL shape data types.

One NodeShape per class, each owning one PropertyShape per property of that
class. These are plain data; serialization to JSON-LD happens in the
vocabulary emitter.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class PropertyShape:
    """
    SHACL property shape.

    Attributes:
        path: Property IRI (``sh:path``).
        name: Property name, used for ordering.
        datatype: Literal datatype IRI (``sh:datatype``), non-ref properties.
        class_iri: Target class IRI (``sh:class``), resolved ref properties.
        node_kind: ``sh:nodeKind`` IRI, ref properties.
        min_count: ``sh:minCount``, omitted when None.
        max_count: ``sh:maxCount``, None when multi-valued.
        unique_lang: ``sh:uniqueLang true`` for unique string-like properties.
    """
    path: str
    name: str
    datatype: Optional[str] = None
    class_iri: Optional[str] = None
    node_kind: Optional[str] = None
    min_count: Optional[int] = None
    max_count: Optional[int] = None
    unique_lang: bool = False


@dataclass(frozen=True)
class NodeShape:
    """
    SHACL node shape for one class.

    Attributes:
        iri: Shape IRI.
        name: Class name the shape targets.
        target_class: Class IRI (``sh:targetClass``).
        closed: ``sh:closed``.
        ignored_properties: ``sh:ignoredProperties`` (only when closed).
        properties: Property shapes in class property order.
    """
    iri: str
    name: str
    target_class: str
    closed: bool = False
    ignored_properties: Tuple[str, ...] = ()
    properties: Tuple[PropertyShape, ...] = ()

    def property_paths(self) -> List[str]:
        return [shape.path for shape in self.properties]


@dataclass(frozen=True)
class ShapeSet:
    """All node shapes of a schema, keyed by class name."""
    shapes: Dict[str, NodeShape] = field(default_factory=dict)
    closed: bool = False

    def get(self, class_name: str) -> Optional[NodeShape]:
        return self.shapes.get(class_name)

    def sorted_shapes(self) -> List[NodeShape]:
        return [self.shapes[name] for name in sorted(self.shapes)]

    def __iter__(self) -> Iterator[NodeShape]:
        return iter(self.sorted_shapes())

    def __len__(self) -> int:
        return len(self.shapes)
