"""Stable constants shared across the checker, store and CLI layers."""

from __future__ import annotations

from typing import Final

# Vocabulary namespaces used by the local-decisions data model.
BESLUIT: Final[str] = "http://data.vlaanderen.be/ns/besluit#"
MANDAAT: Final[str] = "http://data.vlaanderen.be/ns/mandaat#"
DCTERMS: Final[str] = "http://purl.org/dc/terms/"
SCHEMA: Final[str] = "http://schema.org/"
SKOS: Final[str] = "http://www.w3.org/2004/02/skos/core#"
RDF: Final[str] = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"

# Chain predicates.
PREVIOUS_ITEM_PREDICATE: Final[str] = f"{BESLUIT}aangebrachtNa"
PRECEDES_TREATMENT_PREDICATE: Final[str] = f"{BESLUIT}gebeurtNa"

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

DEFAULT_SPARQL_ENDPOINT: Final[str] = "http://localhost:4403/sparql"
DEFAULT_REPAIR_GRAPH: Final[str] = "http://mu.semte.ch/graphs/public"

__all__ = [
    "BESLUIT",
    "CONFIG_SCHEMA_VERSION",
    "DCTERMS",
    "DEFAULT_REPAIR_GRAPH",
    "DEFAULT_SPARQL_ENDPOINT",
    "MANDAAT",
    "PRECEDES_TREATMENT_PREDICATE",
    "PREVIOUS_ITEM_PREDICATE",
    "RDF",
    "SCHEMA",
    "SKOS",
]
