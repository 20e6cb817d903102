"""
Shape Expression (ShEx) validation of store content.

Evaluation is delegated to a `ShapeValidator`; this module only selects the
focus nodes and aggregates the per-node outcomes into one report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Tuple

from rdflib import Graph

from rdf_workbench.errors import ConfigurationError
from rdf_workbench.sparql.executor import query_local, sparql_iri
from rdf_workbench.store import QUERYABLE_KINDS, Store, require_kind


class ShapeValidator(Protocol):
    def validate(self, graph: Graph, schema: str, shape: str, focus: str) -> Tuple[bool, str]:
        """Return (conforms, diagnostics) for one focus node."""


@dataclass
class ValidationReport:
    conforms: bool
    text: str
    focus_nodes: List[str] = field(default_factory=list)

    def dump(self) -> str:
        status = "conforms" if self.conforms else "does not conform"
        return f"Validation {status} ({len(self.focus_nodes)} focus nodes)\n{self.text}"


class PyShExValidator:
    """ShapeValidator backed by PyShEx (install the `shex` extra)."""

    def validate(self, graph: Graph, schema: str, shape: str, focus: str) -> Tuple[bool, str]:
        try:
            from pyshex import ShExEvaluator
        except ImportError as exc:
            raise ConfigurationError(
                "PyShEx is not installed; install rdf-workbench[shex]."
            ) from exc

        results = ShExEvaluator(rdf=graph, schema=schema, focus=focus, start=shape).evaluate()
        conforms = all(r.result for r in results)
        lines = [
            f"{r.focus}: {'OK' if r.result else 'FAIL'}" + (f" - {r.reason}" if r.reason else "")
            for r in results
        ]
        return conforms, "\n".join(lines)


def validate_shapes(
    store: Store,
    schema_source: str,
    shape_uri: str,
    focus_type_uri: str,
    validator: ShapeValidator,
) -> ValidationReport:
    """Validate every instance of `focus_type_uri` in `store` against `shape_uri`."""

    require_kind(store, QUERYABLE_KINDS, "validate shapes")
    table = query_local(
        store,
        f"SELECT DISTINCT ?node WHERE {{ ?node a {sparql_iri(focus_type_uri)} . FILTER(isIRI(?node)) }}",
    )
    focus_nodes = [v for v in table.column("node") if v is not None] if table.has_column("node") else []
    if not focus_nodes:
        return ValidationReport(True, f"No focus nodes of type <{focus_type_uri}>.", [])

    conforms = True
    messages: List[str] = []
    with store.reading() as graph:
        for node in focus_nodes:
            ok, text = validator.validate(graph, schema_source, shape_uri, node)
            conforms = conforms and ok
            messages.append(text)
    return ValidationReport(conforms, "\n".join(messages), focus_nodes)


__all__ = [
    "ShapeValidator",
    "ValidationReport",
    "PyShExValidator",
    "validate_shapes",
]
