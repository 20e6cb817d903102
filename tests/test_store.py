"""Tests for store handles: creation, mutation, transactions, import and serialization."""

import logging
import warnings

import pytest

from rdf_workbench.errors import ConfigurationError, ParseError, TransactionError
from rdf_workbench.store import (
    DiskDatasetStore,
    StoreKind,
    TripleKind,
    TxnMode,
    add_data_property,
    add_object_property,
    add_prefix,
    add_property_in_language,
    add_triple,
    add_typed_data_property,
    as_ntriples,
    as_rdf_xml,
    as_turtle,
    bulk_import,
    create_in_memory,
    create_on_disk,
    import_file,
    import_from_string,
    serialize,
    size,
)

from conftest import EX, SAMPLE_RDF_XML, SAMPLE_TURTLE

TRIG = """
@prefix ex: <http://example.org/> .

ex:a ex:name "Alpha" .

ex:g1 {
    ex:b ex:name "Beta" .
}
"""


class TestCreation:
    def test_memory_kinds(self):
        assert create_in_memory().kind is StoreKind.MEMORY
        assert create_in_memory(ontology=True).kind is StoreKind.MEMORY_ONTOLOGY

    def test_plain_memory_has_no_prefixes(self):
        assert "owl" not in dict(create_in_memory().namespaces())

    def test_ontology_store_binds_owl(self):
        prefixes = dict(create_in_memory(ontology=True).namespaces())
        assert prefixes["owl"] == "http://www.w3.org/2002/07/owl#"

    def test_on_disk_creates_directory(self, tmp_path):
        target = tmp_path / "ds"
        store = create_on_disk(target)
        assert store.kind is StoreKind.DISK_DATASET
        assert target.is_dir()
        assert size(store) == 0

    def test_on_disk_rejects_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(ConfigurationError):
            create_on_disk(path)

    def test_str_reports_triples(self):
        store = create_in_memory()
        add_object_property(store, EX + "a", EX + "knows", EX + "b")
        assert str(store) == "RDFStore: 1 triples"


class TestMutation:
    def test_triples_are_a_set(self):
        store = create_in_memory()
        add_object_property(store, EX + "a", EX + "knows", EX + "b")
        add_object_property(store, EX + "a", EX + "knows", EX + "b")
        assert size(store) == 1

    def test_size_grows_by_distinct_triples(self, memory_store):
        before = size(memory_store)
        add_object_property(memory_store, EX + "new1", EX + "knows", EX + "a")
        add_data_property(memory_store, EX + "new1", EX + "name", "New")
        add_data_property(memory_store, EX + "new2", EX + "name", "Newer")
        add_data_property(memory_store, EX + "new2", EX + "name", "Newer")
        assert size(memory_store) == before + 3

    def test_literal_kinds(self):
        store = create_in_memory()
        add_data_property(store, EX + "a", EX + "name", "Alpha")
        add_typed_data_property(store, EX + "a", EX + "age", "42", "http://www.w3.org/2001/XMLSchema#integer")
        add_property_in_language(store, EX + "a", EX + "label", "Alfa", "it")
        text = as_ntriples(store)
        assert '"Alpha"' in text
        assert '"42"^^<http://www.w3.org/2001/XMLSchema#integer>' in text
        assert '"Alfa"@it' in text

    def test_typed_literal_expands_known_curie(self):
        store = create_in_memory(ontology=True)
        add_typed_data_property(store, EX + "a", EX + "age", "7", "xsd:integer")
        assert "<http://www.w3.org/2001/XMLSchema#integer>" in as_ntriples(store)

    def test_blank_nodes(self):
        store = create_in_memory()
        add_triple(store, "_:n1", EX + "knows", "_:n2", TripleKind.OBJECT_REFERENCE)
        assert "_:n1" in as_ntriples(store)

    def test_typed_literal_needs_datatype(self):
        with pytest.raises(ValueError):
            add_triple(create_in_memory(), EX + "a", EX + "p", "1", "typed-literal")

    def test_language_literal_needs_tag(self):
        with pytest.raises(ValueError):
            add_triple(create_in_memory(), EX + "a", EX + "p", "x", TripleKind.LANGUAGE_LITERAL)

    def test_rejects_non_store(self):
        with pytest.raises(ConfigurationError):
            add_data_property(object(), EX + "a", EX + "name", "x")

    def test_add_prefix_used_in_turtle(self):
        store = create_in_memory()
        add_object_property(store, EX + "a", EX + "knows", EX + "b")
        add_prefix(store, "ex", EX)
        assert "ex:knows" in as_turtle(store)

    def test_later_prefix_registration_wins(self):
        store = create_in_memory()
        add_prefix(store, "ex", "http://one.example/")
        add_prefix(store, "ex", EX)
        assert dict(store.namespaces())["ex"] == EX


class TestDiskTransactions:
    def test_writes_persist(self, tmp_path):
        store = create_on_disk(tmp_path)
        add_data_property(store, EX + "a", EX + "name", "Alpha")
        assert (tmp_path / "dataset.trig").exists()
        assert size(create_on_disk(tmp_path)) == 1

    def test_abort_discards(self, tmp_path):
        store = create_on_disk(tmp_path)
        store.begin(TxnMode.WRITE)
        add_data_property(store, EX + "a", EX + "name", "Alpha")
        store.abort()
        assert size(store) == 0

    def test_end_discards_uncommitted_write(self, tmp_path, caplog):
        store = create_on_disk(tmp_path)
        store.begin("write")
        add_data_property(store, EX + "a", EX + "name", "Alpha")
        with caplog.at_level(logging.WARNING):
            store.end()
        assert "uncommitted" in caplog.text
        assert size(store) == 0

    def test_size_ends_open_transaction(self, tmp_path):
        store = create_on_disk(tmp_path)
        add_data_property(store, EX + "a", EX + "name", "Alpha")
        store.begin(TxnMode.READ)
        assert size(store) == 1
        assert not store.in_transaction

    def test_begin_twice_is_an_error(self, tmp_path):
        store = create_on_disk(tmp_path)
        store.begin(TxnMode.READ)
        with pytest.raises(TransactionError):
            store.begin(TxnMode.READ)
        store.end()

    def test_commit_without_write(self, tmp_path):
        store = create_on_disk(tmp_path)
        with pytest.raises(TransactionError):
            store.commit()

    def test_write_inside_read_transaction(self, tmp_path):
        store = create_on_disk(tmp_path)
        store.begin(TxnMode.READ)
        with pytest.raises(TransactionError):
            add_data_property(store, EX + "a", EX + "name", "Alpha")
        store.end()

    def test_writes_use_current_default_graph_api(self, tmp_path):
        store = create_on_disk(tmp_path)
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            add_data_property(store, EX + "a", EX + "name", "Alpha")
        assert not [w for w in caught if "default_context" in str(w.message)]
        assert size(store) == 1

    def test_context_manager_commits(self, tmp_path):
        store = create_on_disk(tmp_path)
        with store.transaction(TxnMode.WRITE):
            add_data_property(store, EX + "a", EX + "name", "Alpha")
            add_data_property(store, EX + "b", EX + "name", "Beta")
        assert not store.in_transaction
        assert size(DiskDatasetStore(tmp_path)) == 2

    def test_context_manager_aborts_on_error(self, tmp_path):
        store = create_on_disk(tmp_path)
        with pytest.raises(RuntimeError):
            with store.transaction(TxnMode.WRITE):
                add_data_property(store, EX + "a", EX + "name", "Alpha")
                raise RuntimeError("boom")
        assert not store.in_transaction
        assert size(store) == 0


class TestImport:
    def test_default_format_is_rdf_xml(self):
        store = bulk_import(create_in_memory(), SAMPLE_RDF_XML.encode("utf-8"))
        assert size(store) == 2

    def test_import_from_string(self):
        store = import_from_string(create_in_memory(), '<http://example.org/a> <http://example.org/p> "x" .', "N-TRIPLE")
        assert size(store) == 1

    def test_malformed_turtle(self):
        with pytest.raises(ParseError):
            bulk_import(create_in_memory(), "ex:a ex:b", "TURTLE")

    def test_malformed_rdf_xml(self):
        with pytest.raises(ParseError):
            bulk_import(create_in_memory(), "<rdf:RDF><broken", None)

    def test_unknown_format_lists_supported(self):
        with pytest.raises(ConfigurationError, match="Supported are"):
            bulk_import(create_in_memory(), "", "JSON-LD")

    def test_trig_only_for_disk(self):
        with pytest.raises(ConfigurationError):
            bulk_import(create_in_memory(), TRIG, "TRIG")

    def test_trig_into_disk_dataset(self, tmp_path):
        store = create_on_disk(tmp_path)
        bulk_import(store, TRIG, "TRIG")
        assert not store.in_transaction
        assert size(create_on_disk(tmp_path)) == 2

    def test_import_file_relative_to_workspace(self, tmp_path):
        (tmp_path / "data.rdf").write_text(SAMPLE_RDF_XML, encoding="utf-8")
        store = import_file(create_in_memory(), "data.rdf", workspace_root=tmp_path)
        assert size(store) == 2

    def test_import_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            import_file(create_in_memory(), tmp_path / "missing.ttl", "TURTLE")


class TestSerialize:
    def test_formats(self, memory_store):
        assert b"http://example.org/a" in serialize(memory_store, "N-TRIPLE")
        assert "rdf:RDF" in as_rdf_xml(memory_store)
        assert serialize(memory_store, "N3")

    def test_unknown_format(self, memory_store):
        with pytest.raises(ConfigurationError):
            serialize(memory_store, "PDF")

    def test_trig_only_for_disk(self, memory_store):
        with pytest.raises(ConfigurationError):
            serialize(memory_store, "TRIG")

    def test_disk_dataset_formats(self, tmp_path):
        store = create_on_disk(tmp_path)
        bulk_import(store, TRIG, "TRIG")
        assert b"g1" in serialize(store, "TRIG")
        turtle = serialize(store, "TURTLE")
        assert b"Alpha" in turtle
        assert b"Beta" in turtle


ROUND_TRIP_FORMATS = ["RDF/XML", "TURTLE", "N3"]


class TestRoundTrip:
    @pytest.mark.parametrize("fmt", ROUND_TRIP_FORMATS)
    def test_memory_store(self, memory_store, fmt):
        copy = bulk_import(create_in_memory(), serialize(memory_store, fmt), fmt)
        assert size(copy) == size(memory_store)

    @pytest.mark.parametrize("fmt", ROUND_TRIP_FORMATS)
    def test_disk_dataset(self, tmp_path, fmt):
        original = bulk_import(create_on_disk(tmp_path / "original"), SAMPLE_TURTLE, "TURTLE")
        copy = bulk_import(create_on_disk(tmp_path / "copy"), serialize(original, fmt), fmt)
        assert size(copy) == size(original)
        assert size(create_on_disk(tmp_path / "copy")) == size(original)
