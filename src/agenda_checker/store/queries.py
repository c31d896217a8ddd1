"""SELECT query builders for the agenda-ordering store."""

from __future__ import annotations

from agenda_checker.constants import BESLUIT, DCTERMS, MANDAAT, RDF, SCHEMA, SKOS
from agenda_checker.domain.models import iri
from agenda_checker.store.sparql_client import escape_string_literal

PREFIXES = (
    f"PREFIX besluit: <{BESLUIT}>\n"
    f"PREFIX mandaat: <{MANDAAT}>\n"
    f"PREFIX dct: <{DCTERMS}>\n"
    f"PREFIX schema: <{SCHEMA}>\n"
    f"PREFIX skos: <{SKOS}>\n"
    f"PREFIX rdf: <{RDF}>\n"
)


def governing_bodies_query(search: str) -> str:
    """Bodies whose label matches ``search`` case-insensitively."""

    pattern = escape_string_literal(search)
    return (
        PREFIXES
        + "SELECT DISTINCT ?parentBody ?label WHERE {\n"
        "  ?childBody rdf:type besluit:Bestuursorgaan ;\n"
        "             mandaat:isTijdspecialisatieVan ?parentBody .\n"
        "  ?parentBody skos:prefLabel ?label .\n"
        f'  FILTER(REGEX(STR(?label), "{pattern}", "i"))\n'
        "}\n"
        "ORDER BY ?label ?parentBody"
    )


def meetings_for_unit_query(unit_uri: str) -> str:
    return (
        PREFIXES
        + "SELECT DISTINCT ?meeting ?date WHERE {\n"
        "  ?meeting rdf:type besluit:Zitting ;\n"
        "           besluit:isGehoudenDoor ?childBody .\n"
        f"  ?childBody mandaat:isTijdspecialisatieVan {iri(unit_uri)} .\n"
        "  OPTIONAL { ?meeting besluit:geplandeStart ?date }\n"
        "}\n"
        "ORDER BY ?date ?meeting"
    )


def agenda_rows_query(meeting_uri: str) -> str:
    """Every fact used by the ordering check; all but ``?item`` optional."""

    return (
        PREFIXES
        + "SELECT DISTINCT ?item ?position ?previousItem ?title ?treatment "
        "?previousTreatment WHERE {\n"
        f"  {iri(meeting_uri)} besluit:behandelt ?item .\n"
        "  OPTIONAL { ?item schema:position ?position }\n"
        "  OPTIONAL { ?item besluit:aangebrachtNa ?previousItem }\n"
        "  OPTIONAL { ?item dct:title ?title }\n"
        "  OPTIONAL {\n"
        "    ?treatment dct:subject ?item .\n"
        "    OPTIONAL { ?treatment besluit:gebeurtNa ?previousTreatment }\n"
        "  }\n"
        "}"
    )


__all__ = [
    "PREFIXES",
    "agenda_rows_query",
    "governing_bodies_query",
    "iri",
    "meetings_for_unit_query",
]
