from __future__ import annotations

import logging
import socket
from typing import Iterator, Optional, Set
from urllib.parse import urlparse

import requests
from urllib3.exceptions import NameResolutionError

from rdf_workbench.config import DEFAULT_USER_AGENT
from rdf_workbench.errors import HostResolutionError, NetworkError

logger = logging.getLogger(__name__)


def configure_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """
    Session used for all HTTP traffic of one service.

    No retry adapter is mounted: a failed request is reported to the caller
    as-is.
    """

    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: Set[int] = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        for nxt in (current.__cause__, current.__context__, getattr(current, "reason", None)):
            if isinstance(nxt, BaseException):
                pending.append(nxt)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))


def is_name_resolution_failure(exc: BaseException) -> bool:
    return any(isinstance(e, (NameResolutionError, socket.gaierror)) for e in _causes(exc))


def wrap_request_error(exc: requests.RequestException, url: str) -> NetworkError:
    """
    Translate a requests exception into the matching NetworkError.

    DNS failures become HostResolutionError naming the host; use with
    `raise wrap_request_error(exc, url) from exc` to keep the cause.
    """

    if is_name_resolution_failure(exc):
        host = urlparse(url).hostname or url
        return HostResolutionError(host, url=url)
    if isinstance(exc, requests.Timeout):
        return NetworkError(f"Timed out while contacting {url}: {exc}", url=url)
    return NetworkError(f"Error while contacting {url}: {exc}", url=url)


def status_error(response: requests.Response, url: Optional[str] = None) -> NetworkError:
    target = url or response.url
    return NetworkError(
        f"Expected HTTP 200 from {target}, but got a {response.status_code}: {response.reason}",
        status_code=response.status_code,
        reason=response.reason,
        url=target,
    )


__all__ = [
    "configure_session",
    "is_name_resolution_failure",
    "wrap_request_error",
    "status_error",
]
