"""Governing body, meeting and agenda lookups used by the interactive CLI."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from agenda_checker.domain.models import AgendaItemRow
from agenda_checker.ordering.reconstructor import sort_by_position
from agenda_checker.store.queries import governing_bodies_query, meetings_for_unit_query
from agenda_checker.store.sparql_client import SparqlClient, SparqlResultError


@dataclass(frozen=True, slots=True)
class GoverningBody:
    uri: str
    label: str


@dataclass(frozen=True, slots=True)
class Meeting:
    uri: str
    date: str | None = None

    @property
    def label(self) -> str:
        if self.date is None:
            return self.uri
        return f"{self.date} - {self.uri}"


def find_governing_bodies(client: SparqlClient, search: str) -> list[GoverningBody]:
    """Bodies whose preferred label matches ``search`` (regex, case-insensitive)."""

    bodies: list[GoverningBody] = []
    seen: set[str] = set()
    for index, row in enumerate(client.select(governing_bodies_query(search))):
        uri = row.get("parentBody")
        if uri is None:
            raise SparqlResultError(f"bindings[{index}]: missing parentBody")
        if uri in seen:
            continue
        seen.add(uri)
        bodies.append(GoverningBody(uri=uri, label=row.get("label", uri)))
    return bodies


def find_meetings_for_unit(client: SparqlClient, unit_uri: str) -> list[Meeting]:
    """Meetings held by a time-specialisation of ``unit_uri``, oldest first."""

    try:
        query = meetings_for_unit_query(unit_uri)
    except ValueError as exc:
        raise SparqlResultError(f"unit: {exc}") from exc
    meetings: list[Meeting] = []
    for index, row in enumerate(client.select(query)):
        uri = row.get("meeting")
        if uri is None:
            raise SparqlResultError(f"bindings[{index}]: missing meeting")
        meetings.append(Meeting(uri=uri, date=row.get("date")))
    return meetings


def list_agenda(rows: Iterable[AgendaItemRow]) -> list[str]:
    """Render rows in position order as ``<position> - <item> - <title>``."""

    lines = []
    for row in sort_by_position(tuple(rows)):
        position = "?" if row.position is None else str(row.position)
        title = "" if row.title is None else row.title
        lines.append(f"{position} - {row.item} - {title}")
    return lines


__all__ = [
    "GoverningBody",
    "Meeting",
    "find_governing_bodies",
    "find_meetings_for_unit",
    "list_agenda",
]
