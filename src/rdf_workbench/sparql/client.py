from __future__ import annotations

import logging
import time
from typing import Optional

import requests

from rdf_workbench.config import READ_TIME_OUT_MS
from rdf_workbench.http import status_error, wrap_request_error
from rdf_workbench.sparql.executor import parse_results, query_prefixes, result_to_table
from rdf_workbench.table import ResultTable

logger = logging.getLogger(__name__)

SPARQL_XML = "application/sparql-results+xml"
SPARQL_RESULTS_ACCEPT = "application/sparql-results+xml, application/sparql-results+json;q=0.9"


def post_query(
    endpoint_url: str,
    query: str,
    timeout_ms: int = READ_TIME_OUT_MS,
    session: Optional[requests.Session] = None,
    accept: str = SPARQL_RESULTS_ACCEPT,
) -> requests.Response:
    """
    POST `query` as the `query` form parameter and return the 200 response.

    Any other status raises NetworkError with the status code and reason;
    transport failures are wrapped, DNS failures as HostResolutionError.
    There is no retry.
    """

    http = session if session is not None else requests
    logger.debug("POST %s (timeout %d ms)", endpoint_url, timeout_ms)
    start = time.perf_counter()
    try:
        resp = http.post(
            endpoint_url,
            data={"query": query},
            headers={"Accept": accept},
            timeout=timeout_ms / 1000.0,
        )
    except requests.RequestException as exc:
        raise wrap_request_error(exc, endpoint_url) from exc

    if resp.status_code != 200:
        raise status_error(resp, endpoint_url)
    logger.debug(
        "SPARQL endpoint %s answered in %.1f ms", endpoint_url, (time.perf_counter() - start) * 1000.0
    )
    return resp


def sparql_remote_raw(
    endpoint_url: str,
    query: str,
    timeout_ms: int = READ_TIME_OUT_MS,
    session: Optional[requests.Session] = None,
) -> bytes:
    """Return the raw result document; pair with `convert_raw_xml`."""

    resp = post_query(endpoint_url, query, timeout_ms=timeout_ms, session=session, accept=SPARQL_XML)
    return resp.content


def query_remote(
    endpoint_url: str,
    query: str,
    timeout_ms: int = READ_TIME_OUT_MS,
    session: Optional[requests.Session] = None,
) -> ResultTable:
    """Run a SELECT query on a SPARQL endpoint and tabulate the bindings."""

    prefixes = query_prefixes(query)
    resp = post_query(endpoint_url, query, timeout_ms=timeout_ms, session=session)
    result = parse_results(resp.content, resp.headers.get("Content-Type"))
    return result_to_table(result, prefixes)


__all__ = [
    "SPARQL_XML",
    "SPARQL_RESULTS_ACCEPT",
    "post_query",
    "sparql_remote_raw",
    "query_remote",
]
