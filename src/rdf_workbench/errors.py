from __future__ import annotations

from typing import Optional


class RDFError(RuntimeError):
    """Base class for all errors raised by rdf_workbench."""


class ConfigurationError(RDFError):
    """Raised for unsupported store kinds, unknown formats or invalid configuration."""


class ParseError(RDFError):
    """Raised when RDF, SPARQL or SPARQL result content cannot be parsed."""


class NetworkError(RDFError):
    """
    Raised for non-200 HTTP responses, timeouts and other I/O failures.

    `status_code` and `reason` are set when the server answered; otherwise the
    underlying exception is available as `__cause__`.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.url = url


class HostResolutionError(NetworkError):
    """Raised when the host of a URL cannot be resolved."""

    def __init__(self, host: str, url: Optional[str] = None) -> None:
        super().__init__(f"Unknown or unresponsive host: {host}", url=url)
        self.host = host


class NotFoundError(RDFError):
    """Raised when a lookup expecting exactly one result found none."""


class MultipleMatchError(RDFError):
    """Raised when a lookup expecting exactly one result found several."""


class TransactionError(RDFError):
    """Raised for misuse of the transaction protocol of a disk-backed dataset."""


__all__ = [
    "RDFError",
    "ConfigurationError",
    "ParseError",
    "NetworkError",
    "HostResolutionError",
    "NotFoundError",
    "MultipleMatchError",
    "TransactionError",
]
