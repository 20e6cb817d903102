"""Tests for Wikidata lookups and the shape validation collaborator."""

import sys
from unittest.mock import patch

import pytest

from rdf_workbench.errors import ConfigurationError, MultipleMatchError, NotFoundError
from rdf_workbench.shapes import PyShExValidator, ValidationReport, validate_shapes
from rdf_workbench.store import add_data_property, add_object_property, create_in_memory
from rdf_workbench.wikidata import INCHIKEY_PROPERTY, WikidataClient

from conftest import EX, http_response, sparql_xml

RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"
WD = "http://www.wikidata.org/entity/"
ASPIRIN = "BSYNRYMUTXBXSQ-UHFFFAOYSA-N"


@pytest.fixture
def client(session):
    return WikidataClient(endpoint_url="http://wd.example/sparql", session=session)


class TestWikidataClient:
    def test_get_entity_id(self, client, session):
        session.post.return_value = http_response(content=sparql_xml(["entity"], [{"entity": WD + "Q18216"}]))
        assert client.get_entity_id(ASPIRIN) == WD + "Q18216"
        query = session.post.call_args.kwargs["data"]["query"]
        assert f"<{INCHIKEY_PROPERTY}>" in query
        assert f'"{ASPIRIN}"' in query

    def test_has_entity(self, client, session):
        session.post.return_value = http_response(content=sparql_xml(["entity"], []))
        assert client.has_entity(ASPIRIN) is False

    def test_no_entity(self, client, session):
        session.post.return_value = http_response(content=sparql_xml(["entity"], []))
        with pytest.raises(NotFoundError):
            client.get_entity_id(ASPIRIN)

    def test_too_many_entities(self, client, session):
        session.post.return_value = http_response(
            content=sparql_xml(["entity"], [{"entity": WD + "Q1"}, {"entity": WD + "Q2"}])
        )
        with pytest.raises(MultipleMatchError):
            client.get_entity_id(ASPIRIN)

    def test_empty_key(self, client):
        with pytest.raises(ValueError):
            client.has_entity("")

    def test_get_entity_ids_batches(self, client, session):
        session.post.return_value = http_response(
            content=sparql_xml(["key", "entity"], [{"key": ASPIRIN, "entity": WD + "Q18216"}])
        )
        mapping = client.get_entity_ids([ASPIRIN, "UNKNOWN-KEY"])
        assert mapping == {ASPIRIN: WD + "Q18216"}
        assert session.post.call_count == 1
        assert "VALUES ?key" in session.post.call_args.kwargs["data"]["query"]

    def test_get_entity_ids_without_keys(self, client, session):
        assert client.get_entity_ids([]) == {}
        session.post.assert_not_called()


class RecordingValidator:
    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls = []

    def validate(self, graph, schema, shape, focus):
        self.calls.append((schema, shape, focus))
        ok = focus not in self.failing
        return ok, f"{focus}: {'OK' if ok else 'FAIL'}"


@pytest.fixture
def people():
    store = create_in_memory()
    add_object_property(store, EX + "alice", RDF_TYPE, EX + "Person")
    add_object_property(store, EX + "bob", RDF_TYPE, EX + "Person")
    add_object_property(store, EX + "acme", RDF_TYPE, EX + "Company")
    return store


class TestValidateShapes:
    def test_all_focus_nodes_conform(self, people):
        validator = RecordingValidator()
        report = validate_shapes(people, "schema", EX + "PersonShape", EX + "Person", validator)
        assert report.conforms
        assert sorted(report.focus_nodes) == [EX + "alice", EX + "bob"]
        assert {call[2] for call in validator.calls} == {EX + "alice", EX + "bob"}

    def test_one_failure_fails_report(self, people):
        report = validate_shapes(
            people, "schema", EX + "PersonShape", EX + "Person", RecordingValidator(failing=[EX + "bob"])
        )
        assert not report.conforms
        assert "FAIL" in report.text
        assert "does not conform" in report.dump()

    def test_no_focus_nodes(self, people):
        report = validate_shapes(people, "schema", EX + "Shape", EX + "Planet", RecordingValidator())
        assert report == ValidationReport(True, f"No focus nodes of type <{EX}Planet>.", [])

    def test_pyshex_missing(self, people):
        with patch.dict(sys.modules, {"pyshex": None}):
            with pytest.raises(ConfigurationError, match="PyShEx"):
                PyShExValidator().validate(people.graph, "schema", EX + "Shape", EX + "alice")


PERSON_SHEX = """
PREFIX ex: <http://example.org/>
ex:PersonShape { ex:name LITERAL }
"""


class TestPyShExValidator:
    def test_evaluates_each_focus_node(self, people):
        pytest.importorskip("pyshex")
        add_data_property(people, EX + "alice", EX + "name", "Alice")

        report = validate_shapes(people, PERSON_SHEX, EX + "PersonShape", EX + "Person", PyShExValidator())

        assert not report.conforms
        assert f"{EX}alice: OK" in report.text
        assert f"{EX}bob: FAIL" in report.text

    def test_conforming_graph(self, people):
        pytest.importorskip("pyshex")
        add_data_property(people, EX + "alice", EX + "name", "Alice")
        add_data_property(people, EX + "bob", EX + "name", "Bob")

        ok, text = PyShExValidator().validate(people.graph, PERSON_SHEX, EX + "PersonShape", EX + "bob")

        assert ok
        assert text.startswith(f"{EX}bob: OK")
