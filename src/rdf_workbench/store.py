"""
Triple store handles over three backing representations.

- memory: a plain rdflib Graph with no namespace bindings.
- memory-ontology: an rdflib Graph pre-bound to the rdf/rdfs/owl/xsd namespaces.
- disk-dataset: an rdflib Dataset persisted as TriG in a directory, with an
  explicit read/write transaction protocol.

Handles are not thread-safe; callers must serialize access to one handle.
"""

from __future__ import annotations

import io
import logging
import os
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import IO, FrozenSet, Iterator, List, Optional, Tuple, Union
from xml.sax import SAXException

from rdflib import BNode, Dataset, Graph, Literal, URIRef
from rdflib.exceptions import ParserError
from rdflib.plugins.parsers.notation3 import BadSyntax
from rdflib.term import Node

from rdf_workbench import formats
from rdf_workbench.errors import ConfigurationError, ParseError, TransactionError

logger = logging.getLogger(__name__)

DATASET_FILE = "dataset.trig"

Source = Union[bytes, str, IO[bytes], IO[str]]


class StoreKind(str, Enum):
    MEMORY = "memory"
    MEMORY_ONTOLOGY = "memory-ontology"
    DISK_DATASET = "disk-dataset"


class TripleKind(str, Enum):
    OBJECT_REFERENCE = "object-reference"
    PLAIN_LITERAL = "plain-literal"
    TYPED_LITERAL = "typed-literal"
    LANGUAGE_LITERAL = "language-literal"


class TxnMode(str, Enum):
    READ = "read"
    WRITE = "write"


ALL_KINDS: FrozenSet[StoreKind] = frozenset(StoreKind)
MUTABLE_KINDS = ALL_KINDS
SERIALIZABLE_KINDS = ALL_KINDS
QUERYABLE_KINDS = ALL_KINDS


class Store:
    """Common interface of all store handles; `kind` tags the backing variant."""

    kind: StoreKind

    def __init__(self, name: str) -> None:
        self.name = name

    @property
    def graph(self) -> Graph:
        """The graph that SPARQL queries and serialization run against."""

        raise NotImplementedError

    @property
    def target_graph(self) -> Graph:
        """The graph that new triples are added to."""

        return self.graph

    def namespaces(self) -> List[Tuple[str, str]]:
        return [(prefix, str(ns)) for prefix, ns in self.graph.namespaces()]

    @contextmanager
    def reading(self) -> Iterator[Graph]:
        yield self.graph

    @contextmanager
    def writing(self) -> Iterator[Graph]:
        yield self.target_graph

    def __str__(self) -> str:
        return f"RDFStore: {len(self.graph)} triples"


class MemoryStore(Store):
    def __init__(self, ontology: bool = False, name: str = "memory") -> None:
        super().__init__(name)
        self.kind = StoreKind.MEMORY_ONTOLOGY if ontology else StoreKind.MEMORY
        self._graph = Graph(bind_namespaces="core" if ontology else "none")

    @property
    def graph(self) -> Graph:
        return self._graph


class DiskDatasetStore(Store):
    """
    A Dataset stored as `dataset.trig` under a directory.

    Every read or write must happen inside a transaction. Beginning a
    transaction while one is open raises TransactionError. `end()` closes
    the open transaction; for an uncommitted write this discards its changes.
    `commit()` atomically replaces the file on disk.
    """

    kind = StoreKind.DISK_DATASET

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()
        if self.path.exists() and not self.path.is_dir():
            raise ConfigurationError(f"Dataset location '{self.path}' is not a directory.")
        super().__init__(str(self.path))
        self.path.mkdir(parents=True, exist_ok=True)
        self._txn: Optional[TxnMode] = None
        self._dataset = self._load()

    @property
    def dataset_file(self) -> Path:
        return self.path / DATASET_FILE

    def _load(self) -> Dataset:
        dataset = Dataset(default_union=True)
        if self.dataset_file.exists():
            try:
                dataset.parse(source=str(self.dataset_file), format=formats.TRIG)
            except BadSyntax as exc:
                raise ParseError(f"Corrupt dataset file '{self.dataset_file}': {exc}") from exc
        return dataset

    @property
    def graph(self) -> Graph:
        return self._dataset

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def target_graph(self) -> Graph:
        # rdflib < 7.1 only has the deprecated default_context
        graph = getattr(self._dataset, "default_graph", None)
        return graph if graph is not None else self._dataset.default_context

    # -- transactions -------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._txn is not None

    @property
    def transaction_mode(self) -> Optional[TxnMode]:
        return self._txn

    def begin(self, mode: Union[TxnMode, str] = TxnMode.READ) -> None:
        mode = TxnMode(mode)
        if self._txn is not None:
            raise TransactionError(
                f"A {self._txn.value} transaction is already open on '{self.name}'."
            )
        self._txn = mode
        logger.debug("Began %s transaction on %s", mode.value, self.name)

    def commit(self) -> None:
        if self._txn is not TxnMode.WRITE:
            raise TransactionError(f"No write transaction open on '{self.name}'.")
        tmp = self.dataset_file.with_suffix(".trig.tmp")
        self._dataset.serialize(destination=str(tmp), format=formats.TRIG, encoding="utf-8")
        os.replace(tmp, self.dataset_file)
        self._txn = None
        logger.debug("Committed transaction on %s", self.name)

    def abort(self) -> None:
        if self._txn is None:
            raise TransactionError(f"No transaction open on '{self.name}'.")
        if self._txn is TxnMode.WRITE:
            self._dataset = self._load()
        self._txn = None
        logger.debug("Aborted transaction on %s", self.name)

    def end(self) -> None:
        """Close the open transaction, if any."""

        if self._txn is None:
            return
        if self._txn is TxnMode.WRITE:
            logger.warning(
                "Ending uncommitted write transaction on %s; changes are discarded.", self.name
            )
            self.abort()
        else:
            self._txn = None

    @contextmanager
    def transaction(self, mode: Union[TxnMode, str] = TxnMode.READ) -> Iterator["DiskDatasetStore"]:
        """Run a block inside a transaction; writes commit on success and abort on error."""

        mode = TxnMode(mode)
        self.begin(mode)
        try:
            yield self
            if mode is TxnMode.WRITE:
                self.commit()
        except BaseException:
            if self._txn is not None:
                self.abort()
            raise
        finally:
            self.end()

    @contextmanager
    def reading(self) -> Iterator[Graph]:
        if self._txn is not None:
            yield self.graph
            return
        with self.transaction(TxnMode.READ):
            yield self.graph

    @contextmanager
    def writing(self) -> Iterator[Graph]:
        if self._txn is TxnMode.WRITE:
            yield self.target_graph
            return
        if self._txn is TxnMode.READ:
            raise TransactionError(f"Cannot write to '{self.name}' inside a read transaction.")
        with self.transaction(TxnMode.WRITE):
            yield self.target_graph

    def __str__(self) -> str:
        return f"RDFStore (disk dataset {self.path}): {len(self._dataset)} triples"


def require_kind(store: object, supported: FrozenSet[StoreKind], operation: str) -> Store:
    """Return `store` if its kind supports `operation`, else raise ConfigurationError."""

    kind = getattr(store, "kind", None)
    if not isinstance(store, Store) or kind not in supported:
        raise ConfigurationError(
            f"Cannot {operation} on store of kind '{getattr(kind, 'value', kind)}'."
        )
    return store


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def create_in_memory(ontology: bool = False) -> MemoryStore:
    return MemoryStore(ontology=ontology)


def create_on_disk(path: Union[str, Path]) -> DiskDatasetStore:
    """Open the dataset at `path`, creating the directory if needed."""

    return DiskDatasetStore(path)


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


def _resource(value: str) -> Node:
    if value.startswith("_:"):
        return BNode(value[2:])
    return URIRef(value)


def _datatype(graph: Graph, datatype: str) -> URIRef:
    if "://" not in datatype and ":" in datatype:
        try:
            return graph.namespace_manager.expand_curie(datatype)
        except ValueError:
            pass
    return URIRef(datatype)


def add_triple(
    store: Store,
    subject: str,
    predicate: str,
    obj: str,
    kind: Union[TripleKind, str] = TripleKind.OBJECT_REFERENCE,
    datatype: Optional[str] = None,
    language: Optional[str] = None,
) -> None:
    """
    Add one triple. `subject` and object references starting with "_:" are
    blank nodes; typed literals need `datatype`, language literals `language`.
    """

    require_kind(store, MUTABLE_KINDS, "add triples")
    kind = TripleKind(kind)
    with store.writing() as graph:
        if kind is TripleKind.OBJECT_REFERENCE:
            o: Node = _resource(obj)
        elif kind is TripleKind.PLAIN_LITERAL:
            o = Literal(obj)
        elif kind is TripleKind.TYPED_LITERAL:
            if not datatype:
                raise ValueError("A typed literal needs a datatype.")
            o = Literal(obj, datatype=_datatype(graph, datatype))
        else:
            if not language:
                raise ValueError("A language literal needs a language tag.")
            o = Literal(obj, lang=language)
        graph.add((_resource(subject), URIRef(predicate), o))


def add_object_property(store: Store, subject: str, predicate: str, obj: str) -> None:
    add_triple(store, subject, predicate, obj, TripleKind.OBJECT_REFERENCE)


def add_data_property(store: Store, subject: str, predicate: str, value: str) -> None:
    add_triple(store, subject, predicate, value, TripleKind.PLAIN_LITERAL)


def add_typed_data_property(
    store: Store, subject: str, predicate: str, value: str, datatype: str
) -> None:
    add_triple(store, subject, predicate, value, TripleKind.TYPED_LITERAL, datatype=datatype)


def add_property_in_language(
    store: Store, subject: str, predicate: str, value: str, language: str
) -> None:
    add_triple(store, subject, predicate, value, TripleKind.LANGUAGE_LITERAL, language=language)


def add_prefix(store: Store, prefix: str, namespace: str) -> None:
    """Register `prefix` for `namespace`; a later registration of the same prefix wins."""

    require_kind(store, MUTABLE_KINDS, "add prefixes")
    with store.writing():
        store.graph.bind(prefix, namespace, override=True, replace=True)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def size(store: Store) -> int:
    """
    Number of distinct triples.

    For a disk dataset any open transaction is ended first and the count is
    taken in a fresh read transaction.
    """

    require_kind(store, QUERYABLE_KINDS, "count triples")
    if isinstance(store, DiskDatasetStore):
        store.end()
        store.begin(TxnMode.READ)
        try:
            return len(store.graph)
        finally:
            store.end()
    return len(store.graph)


def serialize(store: Store, fmt: Optional[str] = "TURTLE") -> bytes:
    """Serialize as RDF/XML, Turtle, N-Triples, N3, or (disk datasets only) TriG."""

    require_kind(store, SERIALIZABLE_KINDS, "serialize")
    rdf_format = formats.resolve_format(fmt)
    with store.reading() as graph:
        if isinstance(store, DiskDatasetStore):
            if rdf_format == formats.TRIG:
                return store.dataset.serialize(format=formats.TRIG, encoding="utf-8")
            graph = _union_graph(store)
        elif rdf_format == formats.TRIG:
            raise ConfigurationError("TRIG serialization is only supported for disk datasets.")
        return graph.serialize(format=rdf_format, encoding="utf-8")


def _union_graph(store: DiskDatasetStore) -> Graph:
    union = Graph(bind_namespaces="none")
    for prefix, namespace in store.dataset.namespaces():
        union.bind(prefix, namespace)
    union += store.dataset.triples((None, None, None))
    return union


def as_turtle(store: Store) -> str:
    return serialize(store, "TURTLE").decode("utf-8")


def as_n3(store: Store) -> str:
    return serialize(store, "N3").decode("utf-8")


def as_rdf_xml(store: Store) -> str:
    return serialize(store, "RDF/XML").decode("utf-8")


def as_ntriples(store: Store) -> str:
    return serialize(store, "N-TRIPLE").decode("utf-8")


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


def bulk_import(store: Store, source: Source, fmt: Optional[str] = None) -> Store:
    """
    Parse `source` (bytes, text, or a file object) into `store`.

    `fmt` defaults to RDF/XML. TriG is accepted only for disk datasets and is
    loaded in its own write transaction, committed on success.
    """

    require_kind(store, MUTABLE_KINDS, "import content")
    rdf_format = formats.resolve_format(fmt)

    if rdf_format == formats.TRIG:
        if not isinstance(store, DiskDatasetStore):
            raise ConfigurationError("TRIG import is only supported for disk datasets.")
        with store.transaction(TxnMode.WRITE):
            _parse(store.dataset, source, rdf_format)
        return store

    with store.writing() as graph:
        _parse(graph, source, rdf_format)
    return store


def _parse(graph: Graph, source: Source, rdf_format: str) -> None:
    try:
        if isinstance(source, (bytes, str)):
            graph.parse(data=source, format=rdf_format)
        else:
            graph.parse(source=source, format=rdf_format)
    except (BadSyntax, ParserError, SAXException, ValueError) as exc:
        raise ParseError(f"Error while parsing {rdf_format} content: {exc}") from exc


def import_from_string(store: Store, content: str, fmt: Optional[str] = None) -> Store:
    return bulk_import(store, content, fmt)


def import_file(
    store: Store,
    path: Union[str, Path],
    fmt: Optional[str] = None,
    workspace_root: Union[str, Path, None] = None,
) -> Store:
    """Import a local file; relative paths resolve against `workspace_root`."""

    file_path = Path(path)
    if workspace_root is not None and not file_path.is_absolute():
        file_path = Path(workspace_root) / file_path
    if not file_path.is_file():
        raise ConfigurationError(f"RDF file not found: '{file_path}'.")
    with file_path.open("rb") as fh:
        return bulk_import(store, io.BytesIO(fh.read()), fmt)


__all__ = [
    "StoreKind",
    "TripleKind",
    "TxnMode",
    "Store",
    "MemoryStore",
    "DiskDatasetStore",
    "require_kind",
    "create_in_memory",
    "create_on_disk",
    "add_triple",
    "add_object_property",
    "add_data_property",
    "add_typed_data_property",
    "add_property_in_language",
    "add_prefix",
    "size",
    "serialize",
    "as_turtle",
    "as_n3",
    "as_rdf_xml",
    "as_ntriples",
    "bulk_import",
    "import_from_string",
    "import_file",
]
