"""
SHACL shape generation.

One NodeShape per class, one PropertyShape per property of the class.
Generation is total over a valid SchemaModel.
"""

import logging
from typing import Dict

from ...core.iri import IRIResolver
from ...shared.models import NodeShape, PropertyDef, PropertyShape, SchemaModel, ShapeSet
from .namespaces import STRING_LIKE, TYPE_DISCRIMINATOR, curie, rdf_datatype

logger = logging.getLogger(__name__)

NODE_KIND_IRI = "sh:IRI"


class ShapeGenerator:
    """
    Generates SHACL shapes from a SchemaModel.

    Example:
        >>> shapes = ShapeGenerator(resolver, closed=True).generate(model)
        >>> shapes.get("Person").closed
        True
    """

    def __init__(self, resolver: IRIResolver, closed: bool = False):
        self.resolver = resolver
        self.closed = closed

    def generate(self, model: SchemaModel) -> ShapeSet:
        shapes: Dict[str, NodeShape] = {}
        for class_def in model.sorted_classes():
            properties = sorted(model.properties_of(class_def.name), key=lambda p: p.name)
            shapes[class_def.name] = NodeShape(
                iri=self.resolver.shape_iri(class_def.name),
                name=class_def.name,
                target_class=class_def.iri,
                closed=self.closed,
                ignored_properties=(curie(TYPE_DISCRIMINATOR),) if self.closed else (),
                properties=tuple(self._property_shape(model, prop) for prop in properties),
            )

        logger.info(f"Generated {len(shapes)} {'closed ' if self.closed else ''}node shapes")
        return ShapeSet(shapes=shapes, closed=self.closed)

    @staticmethod
    def _property_shape(model: SchemaModel, prop: PropertyDef) -> PropertyShape:
        max_count = None if prop.multi_valued else 1
        if prop.is_ref:
            target = model.get_class(prop.target_class) if prop.target_class else None
            return PropertyShape(
                path=prop.iri,
                name=prop.name,
                class_iri=target.iri if target else None,
                node_kind=NODE_KIND_IRI,
                max_count=max_count,
            )
        return PropertyShape(
            path=prop.iri,
            name=prop.name,
            datatype=rdf_datatype(prop.datatype),
            max_count=max_count,
            unique_lang=prop.unique and prop.datatype in STRING_LIKE,
        )
