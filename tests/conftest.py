"""Shared fixtures: sample RDF, SPARQL result documents and mocked HTTP."""

from typing import Dict, Iterable, List, Optional
from unittest.mock import Mock

import pytest

from rdf_workbench.store import bulk_import, create_in_memory

EX = "http://example.org/"

SAMPLE_TURTLE = """
@prefix ex: <http://example.org/> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .

ex:a owl:sameAs ex:b .
ex:c owl:sameAs ex:b .
ex:c owl:sameAs ex:d .
ex:a owl:sameAs "not a resource" .
ex:x owl:sameAs ex:y .

ex:C1 owl:equivalentClass ex:C2 .
ex:C3 owl:equivalentClass ex:C2 .

ex:a ex:name "Alpha" .
ex:b ex:name "Beta" .
ex:a ex:label "A"@en .
ex:a ex:knows ex:b .
"""

SAMPLE_RDF_XML = """<?xml version="1.0"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns:ex="http://example.org/">
  <rdf:Description rdf:about="http://example.org/a">
    <ex:name>Alpha</ex:name>
    <ex:knows rdf:resource="http://example.org/b"/>
  </rdf:Description>
</rdf:RDF>
"""


def sparql_xml(variables: List[str], rows: Iterable[Dict[str, str]]) -> bytes:
    """Build a SPARQL XML results document; values starting with http are URIs."""

    head = "".join(f'<variable name="{v}"/>' for v in variables)
    results = []
    for row in rows:
        bindings = []
        for name, value in row.items():
            if value.startswith("http"):
                term = f"<uri>{value}</uri>"
            else:
                term = f"<literal>{value}</literal>"
            bindings.append(f'<binding name="{name}">{term}</binding>')
        results.append(f"<result>{''.join(bindings)}</result>")
    return (
        '<?xml version="1.0"?>'
        '<sparql xmlns="http://www.w3.org/2005/sparql-results#">'
        f"<head>{head}</head><results>{''.join(results)}</results></sparql>"
    ).encode("utf-8")


def http_response(
    status_code: int = 200,
    content: bytes = b"",
    headers: Optional[Dict[str, str]] = None,
    reason: str = "OK",
) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.content = content
    response.headers = headers or {}
    response.reason = reason
    response.url = "http://mocked"
    return response


@pytest.fixture
def memory_store():
    store = create_in_memory()
    bulk_import(store, SAMPLE_TURTLE, "TURTLE")
    return store


@pytest.fixture
def session():
    return Mock()
