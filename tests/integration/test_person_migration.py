"""
End-to-end migration of the person ledger.

Runs the orchestrator against a mocked v2 server, writes files, then loads
the vocabulary and data documents with rdflib and validates the data
against the generated shapes with pyshacl.

Run with: pytest -m integration tests/integration/test_person_migration.py -v
"""

import json
from unittest.mock import patch

import pytest
from pyshacl import validate
from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.namespace import OWL, RDF, RDFS, SH, XSD

from fluree_migrate.config import MigrationConfig
from fluree_migrate.core.services import MigrationOrchestrator, MigrationState

from fixtures import ADA_ID, BOB_ID, PERSON_ROWS, PERSON_SCHEMA_RESPONSE, SOURCE_URL, mock_response


TERMS = Namespace(f"{SOURCE_URL}/terms/")
IDS = Namespace(f"{SOURCE_URL}/ids/")


def _run(tmp_path, rows=None, **config_values):
    """Migrate the person ledger into tmp_path and return (result, vocab, data documents)."""
    config = MigrationConfig(source_url=SOURCE_URL, output_dir=str(tmp_path), **config_values)
    responses = [
        mock_response(200, PERSON_SCHEMA_RESPONSE),
        mock_response(200, PERSON_ROWS if rows is None else rows),
    ]
    with patch("requests.request", side_effect=responses):
        result = MigrationOrchestrator.from_config(config, show_progress=False).run()

    vocab = json.loads((tmp_path / "0_vocab.jsonld").read_text(encoding="utf-8"))
    data = [
        json.loads(path.read_text(encoding="utf-8"))
        for path in sorted(tmp_path.glob("*_data.jsonld"))
    ]
    return result, vocab, data


def _graph(*documents):
    graph = Graph()
    for document in documents:
        graph.parse(data=json.dumps(document), format="json-ld")
    return graph


@pytest.mark.integration
class TestPersonMigration:
    """The two-person ledger with a friends reference."""

    def test_run_succeeds(self, tmp_path):
        result, _, data = _run(tmp_path)

        assert result.state == MigrationState.DONE
        assert result.entities == 2
        assert not result.warnings
        assert len(data) == 1

    def test_data_nodes(self, tmp_path):
        _, _, data = _run(tmp_path)

        assert data[0]["@graph"] == [
            {
                "@id": f"{IDS}{ADA_ID}",
                "@type": f"{TERMS}Person",
                "name": "Ada",
                "friends": [f"{IDS}{BOB_ID}"],
            },
            {
                "@id": f"{IDS}{BOB_ID}",
                "@type": f"{TERMS}Person",
                "name": "Bob",
            },
        ]

    def test_vocabulary_triples(self, tmp_path):
        _, vocab, _ = _run(tmp_path)
        graph = _graph(vocab)

        assert (TERMS.Person, RDF.type, OWL.Class) in graph
        assert (TERMS.Person, RDFS.label, Literal("Person")) in graph
        assert (TERMS.name, RDF.type, OWL.DatatypeProperty) in graph
        assert (TERMS.name, RDFS.range, XSD.string) in graph
        assert (TERMS.friends, RDF.type, OWL.ObjectProperty) in graph
        assert (TERMS.friends, RDFS.domain, TERMS.Person) in graph
        assert (TERMS.friends, RDFS.range, TERMS.Person) in graph

    def test_data_triples(self, tmp_path):
        _, _, data = _run(tmp_path)
        graph = _graph(*data)
        ada = IDS[str(ADA_ID)]
        bob = IDS[str(BOB_ID)]

        assert (ada, RDF.type, TERMS.Person) in graph
        assert (ada, TERMS.name, Literal("Ada")) in graph
        assert (ada, TERMS.friends, bob) in graph
        assert (bob, TERMS.name, Literal("Bob")) in graph

    def test_every_reference_targets_a_migrated_subject(self, tmp_path):
        _, _, data = _run(tmp_path)
        graph = _graph(*data)
        subjects = set(graph.subjects(RDF.type, TERMS.Person))

        for _, _, target in graph.triples((None, TERMS.friends, None)):
            assert target in subjects

    def test_configured_iris(self, tmp_path):
        _, vocab, data = _run(
            tmp_path,
            base="https://example.com/ids/",
            vocab="https://example.com/terms/",
        )
        graph = _graph(vocab, *data)
        ada = URIRef(f"https://example.com/ids/{ADA_ID}")

        assert (ada, RDF.type, URIRef("https://example.com/terms/Person")) in graph
        assert (URIRef("https://example.com/terms/Person"), RDF.type, OWL.Class) in graph
        assert not any(str(s).startswith(SOURCE_URL) for s in graph.subjects())

    def test_batches(self, tmp_path):
        result, _, data = _run(tmp_path, batch_size=1)

        assert result.partitions == 2
        assert [doc["@graph"][0]["name"] for doc in data] == ["Ada", "Bob"]
        assert data[0]["@context"] == data[1]["@context"]

    def test_missing_friend_is_reported(self, tmp_path):
        result, _, data = _run(tmp_path, rows=PERSON_ROWS[:1])

        assert result.success
        warning = result.warnings.transform_warnings[0]
        assert warning.kind == "UnresolvedReferenceWarning"
        assert warning.target == str(BOB_ID)
        assert data[0]["@graph"][0]["friends"] == [f"{IDS}{BOB_ID}"]


@pytest.mark.integration
class TestShapeValidation:
    """Migrated data validated against the generated SHACL shapes."""

    def test_shapes_in_vocabulary(self, tmp_path):
        _, vocab, _ = _run(tmp_path, closed_shapes=True)
        graph = _graph(vocab)
        shape = TERMS.PersonShape

        assert (shape, RDF.type, SH.NodeShape) in graph
        assert (shape, SH.targetClass, TERMS.Person) in graph
        assert (shape, SH.closed, Literal(True)) in graph

    def test_clean_data_conforms(self, tmp_path):
        _, vocab, data = _run(tmp_path, closed_shapes=True)
        conforms, _, report = validate(_graph(*data), shacl_graph=_graph(vocab), inference="none")
        assert conforms, report

    def test_closed_shape_rejects_unknown_predicate(self, tmp_path):
        rows = [dict(PERSON_ROWS[0], nickname="Addy"), PERSON_ROWS[1]]
        result, vocab, data = _run(tmp_path, rows=rows, closed_shapes=True)

        assert result.warnings.counts() == {"UnknownPropertyWarning": 1}
        conforms, _, report = validate(_graph(*data), shacl_graph=_graph(vocab), inference="none")
        assert not conforms
        assert "nickname" in report

    def test_open_shape_accepts_unknown_predicate(self, tmp_path):
        rows = [dict(PERSON_ROWS[0], nickname="Addy"), PERSON_ROWS[1]]
        _, vocab, data = _run(tmp_path, rows=rows, shacl=True)

        conforms, _, report = validate(_graph(*data), shacl_graph=_graph(vocab), inference="none")
        assert conforms, report

    def test_cardinality_violation(self, tmp_path):
        rows = [dict(PERSON_ROWS[0], name=["Ada", "Augusta"]), PERSON_ROWS[1]]
        result, vocab, data = _run(tmp_path, rows=rows, shacl=True)

        assert result.warnings.counts() == {"CardinalityWarning": 1}
        conforms, _, _ = validate(_graph(*data), shacl_graph=_graph(vocab), inference="none")
        assert not conforms
