"""
agenda-checker - unit tests for store lookups and the agenda row source

File: tests/unit/store/test_lookups.py

Purpose
- Validate binding-to-domain conversion for governing bodies, meetings and
  agenda rows using a stubbed client.
"""

from __future__ import annotations

import pytest

from agenda_checker.domain.models import AgendaItemRow
from agenda_checker.ordering.checker import RowSource
from agenda_checker.store.agenda import SparqlAgendaRowSource
from agenda_checker.store.lookups import (
    GoverningBody,
    Meeting,
    find_governing_bodies,
    find_meetings_for_unit,
    list_agenda,
)
from agenda_checker.store.sparql_client import SparqlResultError

pytestmark = [pytest.mark.unit]


class _StubClient:
    def __init__(self, rows: list[dict[str, str]]) -> None:
        self.rows = rows
        self.queries: list[str] = []

    def select(self, query: str) -> list[dict[str, str]]:
        self.queries.append(query)
        return self.rows


def test_governing_bodies_are_deduplicated_in_result_order() -> None:
    client = _StubClient(
        [
            {"parentBody": "http://ex/gr", "label": "Gemeenteraad Gent"},
            {"parentBody": "http://ex/cbs", "label": "College Gent"},
            {"parentBody": "http://ex/gr", "label": "Gemeenteraad Gent"},
        ]
    )

    bodies = find_governing_bodies(client, "gent")  # type: ignore[arg-type]

    assert bodies == [
        GoverningBody(uri="http://ex/gr", label="Gemeenteraad Gent"),
        GoverningBody(uri="http://ex/cbs", label="College Gent"),
    ]
    assert '"gent"' in client.queries[0]


def test_meetings_keep_optional_dates() -> None:
    client = _StubClient(
        [
            {"meeting": "http://ex/z1", "date": "2024-01-10T19:00:00Z"},
            {"meeting": "http://ex/z2"},
        ]
    )

    meetings = find_meetings_for_unit(client, "http://ex/gr")  # type: ignore[arg-type]

    assert meetings == [
        Meeting(uri="http://ex/z1", date="2024-01-10T19:00:00Z"),
        Meeting(uri="http://ex/z2"),
    ]
    assert meetings[0].label == "2024-01-10T19:00:00Z - http://ex/z1"
    assert meetings[1].label == "http://ex/z2"


def test_meeting_binding_without_meeting_is_a_result_error() -> None:
    client = _StubClient([{"date": "2024-01-10"}])

    with pytest.raises(SparqlResultError, match="missing meeting"):
        find_meetings_for_unit(client, "http://ex/gr")  # type: ignore[arg-type]


def test_list_agenda_renders_rows_in_position_order() -> None:
    rows = [
        AgendaItemRow(item="http://ex/I1", position=1, title="Varia"),
        AgendaItemRow(item="http://ex/Ix"),
        AgendaItemRow(item="http://ex/I0", position=0, title="Opening"),
    ]

    assert list_agenda(rows) == [
        "0 - http://ex/I0 - Opening",
        "1 - http://ex/I1 - Varia",
        "? - http://ex/Ix - ",
    ]


def test_row_source_converts_bindings() -> None:
    client = _StubClient(
        [
            {"item": "http://ex/I0", "position": "0", "treatment": "http://ex/T0"},
            {"item": "http://ex/I1", "position": "1", "previousItem": "http://ex/I0"},
        ]
    )
    source = SparqlAgendaRowSource(client)  # type: ignore[arg-type]

    rows = source.fetch_agenda_rows("http://ex/zitting/1")

    assert isinstance(source, RowSource)
    assert rows == (
        AgendaItemRow(item="http://ex/I0", position=0, treatment="http://ex/T0"),
        AgendaItemRow(item="http://ex/I1", position=1, previous_item="http://ex/I0"),
    )
    assert "<http://ex/zitting/1> besluit:behandelt ?item" in client.queries[0]


def test_row_source_rejects_unparsable_position() -> None:
    client = _StubClient([{"item": "http://ex/I0", "position": "first"}])
    source = SparqlAgendaRowSource(client)  # type: ignore[arg-type]

    with pytest.raises(SparqlResultError, match=r"bindings\[0\]"):
        source.fetch_agenda_rows("http://ex/zitting/1")


def test_row_source_rejects_invalid_meeting_iri() -> None:
    source = SparqlAgendaRowSource(_StubClient([]))  # type: ignore[arg-type]

    with pytest.raises(SparqlResultError, match="meeting"):
        source.fetch_agenda_rows("not an iri")
