from __future__ import annotations

from typing import Any, List, Optional, Sequence

from rdflib import Literal

from rdf_workbench.closure import QueryRunner
from rdf_workbench.errors import MultipleMatchError, NotFoundError
from rdf_workbench.sparql.executor import query_local, sparql_iri


def exactly_one(values: Sequence[Optional[str]], description: str) -> str:
    """Return the single non-empty value, or raise NotFoundError / MultipleMatchError."""

    present = [v for v in values if v is not None]
    if not present:
        raise NotFoundError(f"No {description}.")
    if len(present) > 1:
        raise MultipleMatchError(f"Too many matches ({len(present)}) for {description}.")
    return present[0]


def get_for_predicate(
    store: Any, resource: str, predicate: str, run_query: QueryRunner = query_local
) -> List[str]:
    """Distinct objects of `resource` for `predicate`, resources and literals alike."""

    sparql = (
        "SELECT DISTINCT ?object WHERE { "
        f"{sparql_iri(resource)} {sparql_iri(predicate)} ?object "
        "}"
    )
    table = run_query(store, sparql)
    if not table.has_column("object"):
        return []
    return [v for v in table.column("object") if v is not None]


def find_one(
    store: Any, predicate: str, value: str, run_query: QueryRunner = query_local
) -> str:
    """The single subject whose `predicate` has the plain literal `value`."""

    sparql = (
        "SELECT DISTINCT ?entity WHERE { "
        f"?entity {sparql_iri(predicate)} {Literal(value).n3()} "
        "}"
    )
    table = run_query(store, sparql)
    values = table.column("entity") if table.has_column("entity") else []
    return exactly_one(values, f"resource with <{predicate}> \"{value}\"")


__all__ = [
    "exactly_one",
    "get_for_predicate",
    "find_one",
]
