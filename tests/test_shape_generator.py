"""
Tests for SHACL shape generation.

Run with: pytest tests/test_shape_generator.py -v
"""

import pytest

from fluree_migrate.core.iri import IRIResolver
from fluree_migrate.formats.jsonld import SchemaModelBuilder, ShapeGenerator
from fluree_migrate.formats.jsonld.shape_generator import NODE_KIND_IRI

from fixtures import SOURCE_URL, schema_with


TERMS = f"{SOURCE_URL}/terms/"


@pytest.mark.unit
class TestShapeGenerator:
    """One NodeShape per class, one PropertyShape per property."""

    def test_one_shape_per_class(self, resolver, crm_model):
        shapes = ShapeGenerator(resolver).generate(crm_model)
        assert sorted(shapes.shapes) == ["BankAccount", "Person"]
        assert len(shapes) == 2

    def test_node_shape_fields(self, resolver, person_model):
        shape = ShapeGenerator(resolver).generate(person_model).get("Person")

        assert shape.iri == f"{TERMS}PersonShape"
        assert shape.target_class == f"{TERMS}Person"
        assert not shape.closed
        assert shape.ignored_properties == ()

    def test_property_shapes_cover_class_properties(self, resolver, crm_model):
        shapes = ShapeGenerator(resolver).generate(crm_model)
        for class_def in crm_model.sorted_classes():
            expected = sorted(crm_model.get_property(name).iri for name in class_def.properties)
            assert sorted(shapes.get(class_def.name).property_paths()) == expected

    def test_property_shapes_sorted_by_name(self, resolver, person_model):
        shape = ShapeGenerator(resolver).generate(person_model).get("Person")
        assert [p.name for p in shape.properties] == ["friends", "name"]

    def test_literal_property_shape(self, resolver, person_model):
        shape = ShapeGenerator(resolver).generate(person_model).get("Person")
        name = shape.properties[1]

        assert name.path == f"{TERMS}name"
        assert name.datatype == "xsd:string"
        assert name.class_iri is None
        assert name.max_count == 1
        assert name.min_count is None

    def test_ref_property_shape(self, resolver, person_model):
        shape = ShapeGenerator(resolver).generate(person_model).get("Person")
        friends = shape.properties[0]

        assert friends.class_iri == f"{TERMS}Person"
        assert friends.node_kind == NODE_KIND_IRI
        assert friends.datatype is None
        assert friends.max_count is None

    def test_unique_strings_get_unique_lang(self, resolver, crm_model):
        shape = ShapeGenerator(resolver).generate(crm_model).get("Person")
        by_name = {p.name: p for p in shape.properties}

        assert by_name["handle"].unique_lang
        assert not by_name["name"].unique_lang
        assert not by_name["age"].unique_lang

    def test_closed_shapes_ignore_rdf_type(self, resolver, person_model):
        shapes = ShapeGenerator(resolver, closed=True).generate(person_model)
        shape = shapes.get("Person")

        assert shapes.closed
        assert shape.closed
        assert shape.ignored_properties == ("rdf:type",)

    def test_unresolved_ref_has_no_class(self):
        resolver = IRIResolver(SOURCE_URL)
        raw = schema_with({"name": "person/employer", "type": "ref", "restrictCollection": "company"})
        model, _ = SchemaModelBuilder(resolver, strict=False).build(raw)
        employer = ShapeGenerator(resolver).generate(model).get("Person").properties[0]

        assert employer.class_iri is None
        assert employer.node_kind == NODE_KIND_IRI

    def test_class_without_properties(self, resolver):
        model, _ = SchemaModelBuilder(resolver).build(schema_with(collections=[{"name": "tag_group"}]))
        shape = ShapeGenerator(resolver).generate(model).get("TagGroup")
        assert shape.properties == ()
