"""
SPARQL execution: local queries against store handles, remote queries against
HTTP endpoints, and conversion of result documents into ResultTables.
"""

from rdf_workbench.sparql.client import query_remote, sparql_remote_raw
from rdf_workbench.sparql.executor import convert_raw_xml, query_local, query_prefixes

__all__ = [
    "query_local",
    "query_remote",
    "sparql_remote_raw",
    "convert_raw_xml",
    "query_prefixes",
]
