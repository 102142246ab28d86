"""
Vocabulary document emission.

Serializes a SchemaModel (and optionally its ShapeSet) to one JSON-LD
document: RDFS/OWL class and property declarations followed by SHACL
node shapes. Output order is fixed (classes, properties, shapes, each sorted
by name) and ``render`` uses sorted keys, so identical models render to
identical bytes.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

from ...shared.models import (
    ClassDef,
    Datatype,
    JsonLdDocument,
    NodeShape,
    PropertyDef,
    PropertyShape,
    SchemaModel,
    ShapeSet,
)
from .namespaces import PREFIXES, context_prefixes, rdf_datatype

logger = logging.getLogger(__name__)

BASE_PREFIXES = ("rdf", "rdfs", "owl", "xsd")


def _ref(iri: str) -> Dict[str, str]:
    return {"@id": iri}


class VocabularyEmitter:
    """
    Emits the vocabulary JSON-LD document.

    Args:
        extra_context: Additional prefix definitions merged into ``@context``.
            Built-in prefixes are never overridden.

    Example:
        >>> emitter = VocabularyEmitter()
        >>> text = emitter.render(model, shapes)
        >>> text == emitter.render(model, shapes)
        True
    """

    def __init__(self, extra_context: Optional[Mapping[str, Any]] = None):
        self.extra_context = dict(extra_context or {})

    def emit(self, model: SchemaModel, shapes: Optional[ShapeSet] = None) -> JsonLdDocument:
        """
        Build the vocabulary document.

        Args:
            model: Schema model to declare.
            shapes: Shapes to append, if SHACL output is requested.

        Returns:
            JsonLdDocument with classes, properties and shapes in ``@graph``.
        """
        graph: List[Dict[str, Any]] = []
        graph.extend(self._class_node(class_def) for class_def in model.sorted_classes())
        graph.extend(self._property_node(model, prop) for prop in model.sorted_properties())
        if shapes is not None:
            graph.extend(self._shape_node(shape) for shape in shapes.sorted_shapes())

        logger.info(
            f"Emitted vocabulary: {len(model.classes)} classes, {len(model.properties)} properties, "
            f"{len(shapes) if shapes is not None else 0} shapes"
        )
        return JsonLdDocument(context=self._context(model, shapes), graph=graph)

    def render(self, model: SchemaModel, shapes: Optional[ShapeSet] = None) -> str:
        """Emit and serialize the vocabulary document deterministically."""
        return render_document(self.emit(model, shapes))

    def _context(self, model: SchemaModel, shapes: Optional[ShapeSet]) -> Dict[str, Any]:
        names = list(BASE_PREFIXES)
        if shapes is not None:
            names.append("sh")
        if any(prop.datatype is Datatype.GEOJSON for prop in model.properties.values()):
            names.append("geo")

        context: Dict[str, Any] = context_prefixes(names)
        for prefix, iri in sorted(self.extra_context.items()):
            if prefix in PREFIXES:
                logger.debug(f"Ignoring extra context entry '{prefix}': built-in prefix")
                continue
            context[prefix] = iri
        return context

    @staticmethod
    def _class_node(class_def: ClassDef) -> Dict[str, Any]:
        node: Dict[str, Any] = {
            "@id": class_def.iri,
            "@type": "owl:Class",
            "rdfs:label": class_def.name,
        }
        if class_def.doc:
            node["rdfs:comment"] = class_def.doc
        return node

    @staticmethod
    def _property_node(model: SchemaModel, prop: PropertyDef) -> Dict[str, Any]:
        node: Dict[str, Any] = {
            "@id": prop.iri,
            "@type": "owl:ObjectProperty" if prop.is_ref else "owl:DatatypeProperty",
            "rdfs:label": prop.name,
        }
        if prop.doc:
            node["rdfs:comment"] = prop.doc

        domain = [_ref(model.classes[name].iri) for name in model.domain_of(prop.name)]
        if domain:
            node["rdfs:domain"] = domain[0] if len(domain) == 1 else domain

        if prop.is_ref:
            if prop.target_class:
                node["rdfs:range"] = _ref(model.classes[prop.target_class].iri)
        else:
            node["rdfs:range"] = _ref(rdf_datatype(prop.datatype))
        return node

    @staticmethod
    def _property_shape_node(shape: PropertyShape) -> Dict[str, Any]:
        node: Dict[str, Any] = {"sh:path": _ref(shape.path)}
        if shape.datatype:
            node["sh:datatype"] = _ref(shape.datatype)
        if shape.class_iri:
            node["sh:class"] = _ref(shape.class_iri)
        if shape.node_kind:
            node["sh:nodeKind"] = _ref(shape.node_kind)
        if shape.min_count is not None:
            node["sh:minCount"] = shape.min_count
        if shape.max_count is not None:
            node["sh:maxCount"] = shape.max_count
        if shape.unique_lang:
            node["sh:uniqueLang"] = True
        return node

    def _shape_node(self, shape: NodeShape) -> Dict[str, Any]:
        node: Dict[str, Any] = {
            "@id": shape.iri,
            "@type": "sh:NodeShape",
            "sh:targetClass": _ref(shape.target_class),
            "sh:property": [self._property_shape_node(p) for p in shape.properties],
        }
        if shape.closed:
            node["sh:closed"] = True
            node["sh:ignoredProperties"] = {"@list": [_ref(iri) for iri in shape.ignored_properties]}
        return node


def render_document(document: JsonLdDocument) -> str:
    """Serialize a JSON-LD document with sorted keys and fixed indentation."""
    return json.dumps(document.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"
