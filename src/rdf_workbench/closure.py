"""
Non-reasoning closure over equivalence-like predicates.

The walk follows a predicate in both directions using only SPARQL queries,
so `owl:equivalentClass` is navigated as if it were symmetric. Each newly
reached resource costs two queries; there is no batching.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Set

from rdflib.namespace import OWL

from rdf_workbench.sparql.executor import query_local, sparql_iri
from rdf_workbench.table import ResultTable

logger = logging.getLogger(__name__)

OWL_SAME_AS = str(OWL.sameAs)
OWL_EQUIVALENT_CLASS = str(OWL.equivalentClass)

QueryRunner = Callable[[Any, str], ResultTable]


def _resources(table: ResultTable) -> Set[str]:
    if not table.has_column("resource"):
        return set()
    return {value for value in table.column("resource") if value is not None}


def one_hop(store: Any, resource: str, predicate: str, run_query: QueryRunner = query_local) -> Set[str]:
    """
    Resources linked to `resource` by `predicate`, in either direction.

    Only IRIs are returned; blank-node and literal neighbours are dropped.
    """

    res = sparql_iri(resource)
    pred = sparql_iri(predicate)
    forward = f"SELECT ?resource WHERE {{ {res} {pred} ?resource . FILTER(isIRI(?resource)) }}"
    backward = f"SELECT ?resource WHERE {{ ?resource {pred} {res} . FILTER(isIRI(?resource)) }}"
    return _resources(run_query(store, forward)) | _resources(run_query(store, backward))


def closure(store: Any, seed: str, predicate: str, run_query: QueryRunner = query_local) -> Set[str]:
    """
    All resources reachable from `seed` over `predicate`, excluding `seed`.

    `run_query(store, sparql)` defaults to local execution; any callable with
    the same shape (e.g. a remote endpoint runner) works.
    """

    visited: Set[str] = {seed}
    frontier = one_hop(store, seed, predicate, run_query) - visited
    while frontier:
        discovered: Set[str] = set()
        for node in sorted(frontier):
            logger.debug("Expanding %s over %s", node, predicate)
            discovered |= one_hop(store, node, predicate, run_query)
        visited |= frontier
        frontier = discovered - visited
    return visited - {seed}


def all_owl_same_as(store: Any, resource: str, run_query: QueryRunner = query_local) -> Set[str]:
    return closure(store, resource, OWL_SAME_AS, run_query)


def all_owl_equivalent_class(store: Any, resource: str, run_query: QueryRunner = query_local) -> Set[str]:
    return closure(store, resource, OWL_EQUIVALENT_CLASS, run_query)


__all__ = [
    "OWL_SAME_AS",
    "OWL_EQUIVALENT_CLASS",
    "one_hop",
    "closure",
    "all_owl_same_as",
    "all_owl_equivalent_class",
]
