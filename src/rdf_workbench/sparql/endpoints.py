from __future__ import annotations

from dataclasses import dataclass
from typing import List

from rdf_workbench.config import EndpointConfig, Settings
from rdf_workbench.errors import ConfigurationError

WIKIDATA_ENDPOINT_ID = "wikidata"
WIKIDATA_SPARQL_URL = "https://query.wikidata.org/sparql"


@dataclass
class Endpoint:
    """Resolved endpoint with id, label and SPARQL URL."""

    id: str
    label: str
    sparql_url: str


def _to_endpoint(cfg: EndpointConfig) -> Endpoint:
    return Endpoint(id=cfg["id"], label=cfg["label"], sparql_url=cfg["sparql_url"])


def get_endpoints(settings: Settings) -> List[Endpoint]:
    return [_to_endpoint(e) for e in settings.endpoints]


def resolve_endpoint(settings: Settings, id_or_url: str) -> Endpoint:
    """
    Resolve a configured endpoint id, or accept a literal http(s) URL.

    Unknown ids raise ConfigurationError listing the configured ones.
    """

    if id_or_url.startswith(("http://", "https://")):
        return Endpoint(id=id_or_url, label=id_or_url, sparql_url=id_or_url)
    cfg = settings.endpoint(id_or_url)
    if cfg is None:
        known = ", ".join(e["id"] for e in settings.endpoints) or "none"
        raise ConfigurationError(
            f"Unknown SPARQL endpoint '{id_or_url}'. Configured endpoints: {known}."
        )
    return _to_endpoint(cfg)


def get_wikidata_endpoint(settings: Settings) -> Endpoint:
    """The configured `wikidata` endpoint, or the public Wikidata Query Service."""

    cfg = settings.endpoint(WIKIDATA_ENDPOINT_ID)
    if cfg is None:
        return Endpoint(id=WIKIDATA_ENDPOINT_ID, label="Wikidata", sparql_url=WIKIDATA_SPARQL_URL)
    return _to_endpoint(cfg)


__all__ = [
    "WIKIDATA_ENDPOINT_ID",
    "WIKIDATA_SPARQL_URL",
    "Endpoint",
    "get_endpoints",
    "resolve_endpoint",
    "get_wikidata_endpoint",
]
