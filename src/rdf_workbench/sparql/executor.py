"""Local SPARQL execution and conversion of SPARQL results into ResultTables."""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Tuple

from pyparsing import ParseBaseException
from rdflib.plugins.sparql import prepareQuery
from rdflib.plugins.sparql.parser import parseQuery
from rdflib.query import Result, ResultException

from rdf_workbench.errors import ConfigurationError, ParseError
from rdf_workbench.store import QUERYABLE_KINDS, Store, require_kind
from rdf_workbench.table import ResultTable, convert_bindings

logger = logging.getLogger(__name__)

# Characters not allowed inside a SPARQL IRIREF.
_IRI_FORBIDDEN = set('<>"{}|^`\\ \t\r\n')


def query_prefixes(sparql: str) -> List[Tuple[str, str]]:
    """
    Return the PREFIX declarations of `sparql` in declaration order.

    Only the query's own prologue counts; no default namespaces are added.
    """

    try:
        parsed = parseQuery(sparql)
    except ParseBaseException as exc:
        raise ParseError(f"Could not parse SPARQL query: {exc}") from exc

    prefixes: List[Tuple[str, str]] = []
    for decl in parsed[0]:
        if getattr(decl, "name", None) == "PrefixDecl":
            # missing params read back as None through attribute access
            prefixes.append((decl.prefix or "", str(decl.iri)))
    return prefixes


def sparql_iri(value: str) -> str:
    """Return `value` as a SPARQL IRI reference, rejecting unsafe characters."""

    if not value or any(ch in _IRI_FORBIDDEN for ch in value):
        raise ParseError(f"Not a valid IRI for use in a SPARQL query: {value!r}")
    return f"<{value}>"


def result_to_table(result: Result, prefixes: Optional[List[Tuple[str, str]]]) -> ResultTable:
    if result.type != "SELECT":
        raise ConfigurationError(f"Only SELECT results can be tabulated, got {result.type}.")
    return convert_bindings(result.bindings, prefixes, result.vars)


def query_local(store: Store, sparql: str) -> ResultTable:
    """
    Run a SELECT query against `store`.

    The query prologue supplies the prefixes used to compact URIs in the
    returned table. For disk datasets the query runs inside a read
    transaction unless one is already open.
    """

    require_kind(store, QUERYABLE_KINDS, "run SPARQL queries")
    prefixes = query_prefixes(sparql)
    with store.reading() as graph:
        try:
            prepared = prepareQuery(sparql, initNs=dict(graph.namespaces()))
        except ParseBaseException as exc:
            raise ParseError(f"Could not parse SPARQL query: {exc}") from exc
        except Exception as exc:
            # algebra translation reports undeclared prefixes as a bare Exception
            raise ParseError(f"Invalid SPARQL query: {exc}") from exc
        result = graph.query(prepared)
        # bindings are materialized before the read scope closes
        return result_to_table(result, prefixes)


def parse_results(payload: bytes, content_type: Optional[str] = None) -> Result:
    """Parse a SPARQL results document; JSON when the content type says so, else XML."""

    fmt = "json" if content_type and "json" in content_type.lower() else "xml"
    try:
        return Result.parse(io.BytesIO(payload), format=fmt)
    except (SyntaxError, ResultException, ValueError, KeyError) as exc:
        raise ParseError(f"Could not parse SPARQL {fmt} results: {exc}") from exc


def convert_raw_xml(xml_bytes: bytes, original_query: Optional[str] = None) -> ResultTable:
    """
    Convert an already downloaded SPARQL-XML payload into a ResultTable.

    Prefixes come from `original_query` when given; a query that cannot be
    parsed yields an empty prefix map rather than an error.
    """

    prefixes: List[Tuple[str, str]] = []
    if original_query is not None:
        try:
            prefixes = query_prefixes(original_query)
        except ParseError as exc:
            logger.warning("Could not read prefixes from the original query: %s", exc)
    return result_to_table(parse_results(xml_bytes), prefixes)


__all__ = [
    "query_prefixes",
    "sparql_iri",
    "result_to_table",
    "query_local",
    "parse_results",
    "convert_raw_xml",
]
