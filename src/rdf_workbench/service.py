"""
Process-scoped facade over the store, query, closure and import functions.

Build one `RDFService` at startup and pass it around; it owns the HTTP
session and the loaded settings, and every method delegates to the module
level function of the same purpose.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set, Union

import requests

from rdf_workbench import closure as closure_mod
from rdf_workbench import store as store_mod
from rdf_workbench.config import Settings, load_settings
from rdf_workbench.fetch import fetch_bytes, import_url
from rdf_workbench.http import configure_session
from rdf_workbench.lookup import find_one, get_for_predicate
from rdf_workbench.shapes import PyShExValidator, ShapeValidator, ValidationReport, validate_shapes
from rdf_workbench.sparql.client import query_remote, sparql_remote_raw
from rdf_workbench.sparql.endpoints import get_wikidata_endpoint, resolve_endpoint
from rdf_workbench.sparql.executor import convert_raw_xml, query_local
from rdf_workbench.store import Source, Store
from rdf_workbench.table import ResultTable
from rdf_workbench.wikidata import INCHIKEY_PROPERTY, WikidataClient

logger = logging.getLogger(__name__)


class RDFService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        self.session = session if session is not None else configure_session(
            self.settings.http.user_agent
        )

    # -- stores -------------------------------------------------------------

    def create_in_memory(self, ontology: bool = False) -> Store:
        return store_mod.create_in_memory(ontology)

    def create_on_disk(self, path: Union[str, Path]) -> Store:
        target = Path(path)
        if not target.is_absolute():
            target = self.settings.workspace_root / target
        return store_mod.create_on_disk(target)

    def add_triple(self, store: Store, subject: str, predicate: str, obj: str, **kwargs) -> None:
        store_mod.add_triple(store, subject, predicate, obj, **kwargs)

    def add_prefix(self, store: Store, prefix: str, namespace: str) -> None:
        store_mod.add_prefix(store, prefix, namespace)

    def size(self, store: Store) -> int:
        return store_mod.size(store)

    def serialize(self, store: Store, fmt: Optional[str] = "TURTLE") -> bytes:
        return store_mod.serialize(store, fmt)

    def bulk_import(self, store: Store, source: Source, fmt: Optional[str] = None) -> Store:
        return store_mod.bulk_import(store, source, fmt)

    def import_from_string(self, store: Store, content: str, fmt: Optional[str] = None) -> Store:
        return store_mod.import_from_string(store, content, fmt)

    def import_file(self, store: Store, path: Union[str, Path], fmt: Optional[str] = None) -> Store:
        return store_mod.import_file(store, path, fmt, workspace_root=self.settings.workspace_root)

    # -- HTTP -----------------------------------------------------------------

    def fetch_bytes(self, url: str, headers: Optional[Mapping[str, str]] = None) -> bytes:
        return fetch_bytes(url, headers=headers, http_config=self.settings.http, session=self.session)

    def import_url(
        self, store: Store, url: str, extra_headers: Optional[Mapping[str, str]] = None
    ) -> Store:
        logger.info("Importing %s into %s", url, store.name)
        return import_url(
            store, url, extra_headers, http_config=self.settings.http, session=self.session
        )

    # -- queries --------------------------------------------------------------

    def query_local(self, store: Store, sparql: str) -> ResultTable:
        return query_local(store, sparql)

    def query_remote(
        self, endpoint: str, sparql: str, timeout_ms: Optional[int] = None
    ) -> ResultTable:
        """Query a configured endpoint id or a literal endpoint URL."""

        url = resolve_endpoint(self.settings, endpoint).sparql_url
        return query_remote(url, sparql, timeout_ms=self._timeout(timeout_ms), session=self.session)

    def sparql_remote_raw(
        self, endpoint: str, sparql: str, timeout_ms: Optional[int] = None
    ) -> bytes:
        url = resolve_endpoint(self.settings, endpoint).sparql_url
        return sparql_remote_raw(url, sparql, timeout_ms=self._timeout(timeout_ms), session=self.session)

    def convert_raw_xml(self, xml_bytes: bytes, original_query: Optional[str] = None) -> ResultTable:
        return convert_raw_xml(xml_bytes, original_query)

    def _timeout(self, timeout_ms: Optional[int]) -> int:
        return timeout_ms if timeout_ms is not None else self.settings.http.query_timeout_ms

    def _remote_runner(self, endpoint: str):
        url = resolve_endpoint(self.settings, endpoint).sparql_url
        timeout_ms = self.settings.http.query_timeout_ms

        def run(_store, sparql: str) -> ResultTable:
            return query_remote(url, sparql, timeout_ms=timeout_ms, session=self.session)

        return run

    # -- closure and lookups --------------------------------------------------

    def closure(self, store: Optional[Store], seed: str, predicate: str, endpoint: Optional[str] = None) -> Set[str]:
        """
        Closure over `predicate` from `seed`.

        With `endpoint` set the walk queries that SPARQL endpoint and `store`
        is ignored.
        """

        if endpoint is not None:
            return closure_mod.closure(None, seed, predicate, self._remote_runner(endpoint))
        return closure_mod.closure(store, seed, predicate)

    def all_owl_same_as(self, store: Optional[Store], resource: str, endpoint: Optional[str] = None) -> Set[str]:
        return self.closure(store, resource, closure_mod.OWL_SAME_AS, endpoint)

    def all_owl_equivalent_class(
        self, store: Optional[Store], resource: str, endpoint: Optional[str] = None
    ) -> Set[str]:
        return self.closure(store, resource, closure_mod.OWL_EQUIVALENT_CLASS, endpoint)

    def get_for_predicate(self, store: Store, resource: str, predicate: str) -> List[str]:
        return get_for_predicate(store, resource, predicate)

    def find_one(self, store: Store, predicate: str, value: str) -> str:
        return find_one(store, predicate, value)

    def wikidata(self, key_property: str = INCHIKEY_PROPERTY) -> WikidataClient:
        return WikidataClient(
            endpoint_url=get_wikidata_endpoint(self.settings).sparql_url,
            key_property=key_property,
            timeout_ms=self.settings.http.query_timeout_ms,
            session=self.session,
        )

    def get_entity_ids(self, keys: Iterable[str]) -> Dict[str, str]:
        return self.wikidata().get_entity_ids(keys)

    # -- shapes ---------------------------------------------------------------

    def validate_shapes(
        self,
        store: Store,
        schema_source: str,
        shape_uri: str,
        focus_type_uri: str,
        validator: Optional[ShapeValidator] = None,
    ) -> ValidationReport:
        return validate_shapes(
            store, schema_source, shape_uri, focus_type_uri, validator or PyShExValidator()
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RDFService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["RDFService"]
