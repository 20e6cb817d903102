"""
Wikidata entity lookups by an identifying literal key (InChIKey by default).

Queries go through the generic result downloader and are tabulated with
`convert_raw_xml`, so the entity columns hold full entity URIs.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

import requests
from rdflib import Literal

from rdf_workbench.config import READ_TIME_OUT_MS
from rdf_workbench.lookup import exactly_one
from rdf_workbench.sparql.client import sparql_remote_raw
from rdf_workbench.sparql.endpoints import WIKIDATA_SPARQL_URL
from rdf_workbench.sparql.executor import convert_raw_xml, sparql_iri
from rdf_workbench.table import ResultTable

logger = logging.getLogger(__name__)

INCHIKEY_PROPERTY = "http://www.wikidata.org/prop/direct/P235"


class WikidataClient:
    def __init__(
        self,
        endpoint_url: str = WIKIDATA_SPARQL_URL,
        key_property: str = INCHIKEY_PROPERTY,
        timeout_ms: int = READ_TIME_OUT_MS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.key_property = key_property
        self.timeout_ms = timeout_ms
        self.session = session

    def _select(self, query: str) -> ResultTable:
        raw = sparql_remote_raw(
            self.endpoint_url, query, timeout_ms=self.timeout_ms, session=self.session
        )
        return convert_raw_xml(raw, query)

    def _entities_for(self, key: str) -> ResultTable:
        if not key:
            raise ValueError("You must give a key.")
        query = (
            "SELECT ?entity WHERE { "
            f"?entity {sparql_iri(self.key_property)} {Literal(key).n3()} . "
            "}"
        )
        return self._select(query)

    def has_entity(self, key: str) -> bool:
        return self._entities_for(key).row_count > 0

    def get_entity_id(self, key: str) -> str:
        """The one entity carrying `key`; NotFoundError or MultipleMatchError otherwise."""

        table = self._entities_for(key)
        values = table.column("entity") if table.has_column("entity") else []
        return exactly_one(values, f"Wikidata entity with key {key}")

    def get_entity_ids(self, keys: Iterable[str]) -> Dict[str, str]:
        """Map each known key to its entity; unknown keys are left out."""

        key_list = [k for k in keys if k]
        if not key_list:
            return {}
        values = " ".join(Literal(k).n3() for k in key_list)
        query = (
            "SELECT ?key ?entity WHERE { "
            f"VALUES ?key {{ {values} }} "
            f"?entity {sparql_iri(self.key_property)} ?key . "
            "}"
        )
        table = self._select(query)
        mappings: Dict[str, str] = {}
        for row in table.to_rows():
            if "key" in row and "entity" in row:
                if row["key"] in mappings:
                    logger.warning("Key %s maps to more than one entity", row["key"])
                mappings[row["key"]] = row["entity"]
        return mappings


__all__ = [
    "INCHIKEY_PROPERTY",
    "WikidataClient",
]
