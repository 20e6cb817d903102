"""Display compaction of RDF terms using a namespace prefix map."""

from __future__ import annotations

from collections import abc
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from rdflib import BNode, Literal, URIRef
from rdflib.term import Node

PrefixMap = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def prefix_entries(prefixes: Optional[PrefixMap]) -> List[Tuple[str, str]]:
    """Return the (prefix, namespace) pairs of `prefixes` in iteration order."""

    if prefixes is None:
        return []
    if isinstance(prefixes, abc.Mapping):
        return [(str(k), str(v)) for k, v in prefixes.items()]
    return [(str(k), str(v)) for k, v in prefixes]


def split_uri(uri: str, prefixes: Optional[PrefixMap]) -> Tuple[Optional[str], str]:
    """
    Split `uri` into (prefix, local part) using the first matching namespace.

    Entries are scanned in iteration order and the first namespace that is a
    string prefix of `uri` wins, even when a later entry would match a longer
    namespace. Returns (None, uri) when nothing matches.
    """

    for prefix, namespace in prefix_entries(prefixes):
        if namespace and uri.startswith(namespace):
            return prefix, uri[len(namespace):]
    return None, uri


def compact_term(term: Node, prefixes: Optional[PrefixMap]) -> str:
    """Render `term` as a display string."""

    if isinstance(term, BNode):
        return str(term)
    if isinstance(term, URIRef):
        uri = str(term)
        if not uri:
            # anonymous resource without a URI
            return str(hash(term))
        prefix, local = split_uri(uri, prefixes)
        if prefix is None:
            return uri
        return f"{prefix}:{local}"
    if isinstance(term, Literal):
        # lexical form only, language and datatype dropped
        return str(term)
    return str(term)


__all__ = [
    "PrefixMap",
    "prefix_entries",
    "split_uri",
    "compact_term",
]
