"""
RDF knowledge-graph toolkit.

Store handles over in-memory graphs and a disk-backed transactional dataset,
local and remote SPARQL SELECT execution into sparse result tables, closure
over equivalence predicates such as owl:sameAs, and import of remote RDF
documents over HTTP.
"""

from rdf_workbench.errors import (
    ConfigurationError,
    HostResolutionError,
    MultipleMatchError,
    NetworkError,
    NotFoundError,
    ParseError,
    RDFError,
    TransactionError,
)
from rdf_workbench.service import RDFService
from rdf_workbench.table import ResultTable

__version__ = "0.1.0"

__all__ = [
    "RDFService",
    "ResultTable",
    "RDFError",
    "ConfigurationError",
    "ParseError",
    "NetworkError",
    "HostResolutionError",
    "NotFoundError",
    "MultipleMatchError",
    "TransactionError",
]
