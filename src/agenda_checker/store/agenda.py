"""
agenda-checker - SPARQL-backed agenda row source.

File: src/agenda_checker/store/agenda.py

Purpose
- Fetch the unordered rows of one meeting for the ordering checker.

Functional requirements
- A missing binding becomes ``None`` on the row, never an empty string.
- Bindings that cannot form a row (unparsable position, missing item)
  raise ``SparqlResultError``.
"""

from __future__ import annotations

import logging

from agenda_checker.domain.models import AgendaItemRow
from agenda_checker.store.queries import agenda_rows_query
from agenda_checker.store.sparql_client import BindingRow, SparqlClient, SparqlResultError

logger = logging.getLogger(__name__)


class SparqlAgendaRowSource:
    """``RowSource`` implementation querying a SPARQL endpoint."""

    def __init__(self, client: SparqlClient) -> None:
        self._client = client

    def fetch_agenda_rows(self, meeting_uri: str) -> tuple[AgendaItemRow, ...]:
        try:
            query = agenda_rows_query(meeting_uri)
        except ValueError as exc:
            raise SparqlResultError(f"meeting: {exc}") from exc
        bindings = self._client.select(query)
        rows = rows_from_bindings(bindings)
        logger.debug("fetched agenda rows", extra={"row_count": len(rows)})
        return rows


def rows_from_bindings(bindings: list[BindingRow]) -> tuple[AgendaItemRow, ...]:
    rows: list[AgendaItemRow] = []
    for index, binding in enumerate(bindings):
        try:
            rows.append(AgendaItemRow.from_dict(binding))
        except ValueError as exc:
            raise SparqlResultError(f"bindings[{index}]: {exc}") from exc
    return tuple(rows)


__all__ = ["SparqlAgendaRowSource", "rows_from_bindings"]
