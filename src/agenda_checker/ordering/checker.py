"""
agenda-checker - agenda ordering checker facade.

File: src/agenda_checker/ordering/checker.py

Purpose
- Tie the row source, chain reconstructor, validator and repair builder
  together behind one call used by the CLI.

Functional requirements
- Fetch first, then run the synchronous validation pass. The pass itself
  never blocks or yields.
- The repair statement is only generated, never executed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from agenda_checker.constants import DEFAULT_REPAIR_GRAPH, PRECEDES_TREATMENT_PREDICATE
from agenda_checker.domain.models import (
    AgendaItemRow,
    Diagnostic,
    JSONValue,
    RepairInstance,
    render_diagnostic,
)
from agenda_checker.observability.logging import correlation_scope
from agenda_checker.ordering.reconstructor import sort_by_position
from agenda_checker.ordering.validator import validate_rows

logger = logging.getLogger(__name__)


@runtime_checkable
class RowSource(Protocol):
    """Supplies the unordered agenda rows of one meeting."""

    def fetch_agenda_rows(self, meeting_uri: str) -> Sequence[AgendaItemRow]: ...


@dataclass(frozen=True, slots=True)
class OrderingReport:
    """Result of checking one agenda."""

    agenda_id: str
    rows: tuple[AgendaItemRow, ...]
    findings: tuple[Diagnostic, ...]
    repairs: tuple[RepairInstance, ...]
    repair_statement: str | None
    duration_ms: int = 0

    @property
    def diagnostics(self) -> tuple[str, ...]:
        return tuple(render_diagnostic(item) for item in self.findings)

    @property
    def is_consistent(self) -> bool:
        return not self.findings

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "agenda_id": self.agenda_id,
            "consistent": self.is_consistent,
            "item_count": len(self.rows),
            "diagnostics": [item.to_dict() for item in self.findings],
            "repairs": [item.to_dict() for item in self.repairs],
            "repair_statement": self.repair_statement,
            "duration_ms": self.duration_ms,
        }


def check_rows(
    agenda_id: str,
    rows: Sequence[AgendaItemRow],
    *,
    graph: str = DEFAULT_REPAIR_GRAPH,
    precedes_treatment_predicate: str = PRECEDES_TREATMENT_PREDICATE,
) -> OrderingReport:
    """Run the synchronous pass over already-fetched rows."""

    started_ns = time.monotonic_ns()
    ordered = sort_by_position(rows)
    outcome = validate_rows(ordered, precedes_treatment_predicate=precedes_treatment_predicate)
    statement = outcome.repairs.build_repair_statement(graph)
    return OrderingReport(
        agenda_id=agenda_id,
        rows=ordered,
        findings=outcome.diagnostics,
        repairs=outcome.repairs.instances,
        repair_statement=statement,
        duration_ms=max(0, (time.monotonic_ns() - started_ns) // 1_000_000),
    )


def validate_ordering(
    agenda_id: str,
    *,
    row_source: RowSource,
    graph: str = DEFAULT_REPAIR_GRAPH,
    precedes_treatment_predicate: str = PRECEDES_TREATMENT_PREDICATE,
) -> OrderingReport:
    """Fetch the rows of ``agenda_id`` and check their ordering."""

    with correlation_scope(meeting_uri=agenda_id):
        rows = tuple(row_source.fetch_agenda_rows(agenda_id))
        report = check_rows(
            agenda_id,
            rows,
            graph=graph,
            precedes_treatment_predicate=precedes_treatment_predicate,
        )
        _log_report(report)
    return report


class AgendaOrderingChecker:
    """Async checker wrapper; the fetch runs off the event loop."""

    checker_id = "agenda_ordering_checker"

    def __init__(
        self,
        row_source: RowSource,
        *,
        graph: str = DEFAULT_REPAIR_GRAPH,
        precedes_treatment_predicate: str = PRECEDES_TREATMENT_PREDICATE,
    ) -> None:
        if not isinstance(row_source, RowSource):
            raise ValueError("row_source: must implement RowSource")
        self._row_source = row_source
        self._graph = graph
        self._predicate = precedes_treatment_predicate

    async def check(self, agenda_id: str) -> OrderingReport:
        with correlation_scope(meeting_uri=agenda_id):
            rows = await asyncio.to_thread(self._row_source.fetch_agenda_rows, agenda_id)
            report = check_rows(
                agenda_id,
                tuple(rows),
                graph=self._graph,
                precedes_treatment_predicate=self._predicate,
            )
            _log_report(report)
        return report


def _log_report(report: OrderingReport) -> None:
    logger.info(
        "checked agenda ordering",
        extra={
            "item_count": len(report.rows),
            "diagnostic_count": len(report.findings),
            "repair_count": len(report.repairs),
        },
    )
    for finding in report.findings:
        logger.debug(render_diagnostic(finding), extra={"kind": finding.kind.value})


__all__ = [
    "AgendaOrderingChecker",
    "OrderingReport",
    "RowSource",
    "check_rows",
    "validate_ordering",
]
