"""Download bytes over HTTP and import remote RDF documents into a store."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import urljoin

import requests

from rdf_workbench.config import HttpConfig
from rdf_workbench.errors import NetworkError
from rdf_workbench.http import status_error, wrap_request_error
from rdf_workbench.store import Store, bulk_import

logger = logging.getLogger(__name__)

RDF_ACCEPT = "application/xml, application/rdf+xml"
REDIRECT_STATUSES = (301, 302, 303)


def _get(
    http,
    url: str,
    headers: Mapping[str, str],
    timeout: Tuple[float, float],
) -> requests.Response:
    logger.debug("GET %s", url)
    try:
        return http.get(url, headers=dict(headers), timeout=timeout, allow_redirects=False)
    except requests.RequestException as exc:
        raise wrap_request_error(exc, url) from exc


def fetch_bytes(
    url: str,
    headers: Optional[Mapping[str, str]] = None,
    http_config: Optional[HttpConfig] = None,
    session: Optional[requests.Session] = None,
) -> bytes:
    """
    GET `url` and return the body.

    A 301/302/303 answer is followed once, to its Location, with the same
    headers. A second redirect is not followed and, like any other non-2xx
    status, raises NetworkError.
    """

    http_config = http_config or HttpConfig()
    http = session if session is not None else requests
    request_headers: Dict[str, str] = {"User-Agent": http_config.user_agent}
    request_headers.update(headers or {})

    response = _get(http, url, request_headers, http_config.fetch_timeout)
    if response.status_code in REDIRECT_STATUSES:
        location = response.headers.get("Location")
        if not location:
            raise NetworkError(
                f"HTTP {response.status_code} from {url} without a Location header",
                status_code=response.status_code,
                reason=response.reason,
                url=url,
            )
        target = urljoin(url, location)
        logger.info("Following HTTP %d redirect from %s to %s", response.status_code, url, target)
        url = target
        response = _get(http, url, request_headers, http_config.fetch_timeout)

    if not 200 <= response.status_code < 300:
        raise status_error(response, url)
    return response.content


def import_url(
    store: Store,
    url: str,
    extra_headers: Optional[Mapping[str, str]] = None,
    http_config: Optional[HttpConfig] = None,
    session: Optional[requests.Session] = None,
) -> Store:
    """Fetch an RDF/XML document from `url` and import it into `store`."""

    headers: Dict[str, str] = {"Accept": RDF_ACCEPT}
    headers.update(extra_headers or {})
    content = fetch_bytes(url, headers=headers, http_config=http_config, session=session)
    return bulk_import(store, content, None)


__all__ = [
    "RDF_ACCEPT",
    "REDIRECT_STATUSES",
    "fetch_bytes",
    "import_url",
]
