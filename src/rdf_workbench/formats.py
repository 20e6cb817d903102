"""Mapping between user-facing RDF format names and rdflib plugin names."""

from __future__ import annotations

from typing import Dict, Optional

from rdf_workbench.errors import ConfigurationError

RDF_XML = "xml"
TURTLE = "turtle"
N_TRIPLES = "nt"
N3 = "n3"
TRIG = "trig"

DEFAULT_FORMAT = RDF_XML

# Keys are upper-cased before lookup.
_ALIASES: Dict[str, str] = {
    "RDF/XML": RDF_XML,
    "RDFXML": RDF_XML,
    "XML": RDF_XML,
    "APPLICATION/RDF+XML": RDF_XML,
    "TURTLE": TURTLE,
    "TTL": TURTLE,
    "TEXT/TURTLE": TURTLE,
    "N-TRIPLE": N_TRIPLES,
    "N-TRIPLES": N_TRIPLES,
    "NTRIPLES": N_TRIPLES,
    "NT": N_TRIPLES,
    "N3": N3,
    "NOTATION3": N3,
    "TEXT/N3": N3,
    "TRIG": TRIG,
}

SUPPORTED_NAMES = ("RDF/XML", "N-TRIPLE", "TURTLE", "N3", "TRIG")


def resolve_format(name: Optional[str]) -> str:
    """
    Return the rdflib format for `name`; `None` means RDF/XML.

    Raises ConfigurationError naming the supported formats for anything else.
    """

    if name is None:
        return DEFAULT_FORMAT
    fmt = _ALIASES.get(name.strip().upper())
    if fmt is None:
        supported = ", ".join(f'"{n}"' for n in SUPPORTED_NAMES)
        raise ConfigurationError(
            f"Unknown file format '{name}'. Supported are {supported}."
        )
    return fmt


__all__ = [
    "RDF_XML",
    "TURTLE",
    "N_TRIPLES",
    "N3",
    "TRIG",
    "DEFAULT_FORMAT",
    "SUPPORTED_NAMES",
    "resolve_format",
]
