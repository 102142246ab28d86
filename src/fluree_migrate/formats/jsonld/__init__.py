"""
JSON-LD package - v2 schema and data to JSON-LD conversion components.

Components:
- naming: v2 collection/predicate name standardization
- namespaces: RDF namespaces and v2 datatype mappings
- schema_builder: raw v2 schema to SchemaModel
- shape_generator: SchemaModel to SHACL shapes
- vocabulary_emitter: SchemaModel (+ shapes) to the vocabulary document
- values: raw v2 value coercion
- data_transformer: EntityRecords to JSON-LD entity nodes
"""

from .naming import (
    case_normalize,
    split_predicate_name,
    standardize_class_name,
    standardize_property_name,
)
from .namespaces import DATATYPE_TO_RDF, GEO, PREFIXES, TYPE_DISCRIMINATOR, curie, rdf_datatype
from .schema_builder import SchemaModelBuilder, build_schema_model
from .shape_generator import ShapeGenerator
from .vocabulary_emitter import VocabularyEmitter, render_document
from .values import coerce_value, instant_to_iso_string, ref_subject_id
from .data_transformer import DataTransformer

__all__ = [
    # Naming
    'case_normalize',
    'split_predicate_name',
    'standardize_class_name',
    'standardize_property_name',
    # Namespaces
    'DATATYPE_TO_RDF',
    'GEO',
    'PREFIXES',
    'TYPE_DISCRIMINATOR',
    'curie',
    'rdf_datatype',
    # Schema
    'SchemaModelBuilder',
    'build_schema_model',
    'ShapeGenerator',
    'VocabularyEmitter',
    'render_document',
    # Data
    'coerce_value',
    'instant_to_iso_string',
    'ref_subject_id',
    'DataTransformer',
]
