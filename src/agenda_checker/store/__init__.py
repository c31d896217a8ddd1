"""SPARQL store access: HTTP client, queries, lookups and the agenda row source."""

from agenda_checker.store.agenda import SparqlAgendaRowSource, rows_from_bindings
from agenda_checker.store.lookups import (
    GoverningBody,
    Meeting,
    find_governing_bodies,
    find_meetings_for_unit,
    list_agenda,
)
from agenda_checker.store.sparql_client import (
    SparqlClient,
    SparqlClientError,
    SparqlResultError,
    parse_select_results,
)

__all__ = [
    "GoverningBody",
    "Meeting",
    "SparqlAgendaRowSource",
    "SparqlClient",
    "SparqlClientError",
    "SparqlResultError",
    "find_governing_bodies",
    "find_meetings_for_unit",
    "list_agenda",
    "parse_select_results",
    "rows_from_bindings",
]
