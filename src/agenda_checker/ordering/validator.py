"""
agenda-checker - ordering consistency validator.

File: src/agenda_checker/ordering/validator.py

Purpose
- Walk a position-ordered agenda once and compare the declared
  ``previous item`` and ``previous treatment`` links with the links implied
  by position adjacency.

Behaviour
- Two rolling references (preceding item, preceding treatment) start empty
  and advance after every row, whether or not the row passed. Problems are
  reported against the data as fetched, never against a corrected chain.
- Only a missing previous-treatment link produces a repair instance. Item
  chain problems are reported but left to manual repair.
- Never raises on bad data; every problem becomes a ``Diagnostic``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from agenda_checker.constants import PRECEDES_TREATMENT_PREDICATE
from agenda_checker.domain.models import Diagnostic, ProblemKind, RepairInstance
from agenda_checker.ordering.problems import ProblemCollector

if TYPE_CHECKING:
    from collections.abc import Sequence

    from agenda_checker.domain.models import AgendaItemRow


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Diagnostics in encounter order plus the collector holding repairs."""

    diagnostics: tuple[Diagnostic, ...]
    repairs: ProblemCollector

    @property
    def is_consistent(self) -> bool:
        return not self.diagnostics


def validate_rows(
    ordered_rows: Sequence[AgendaItemRow],
    *,
    precedes_treatment_predicate: str = PRECEDES_TREATMENT_PREDICATE,
    collector: ProblemCollector | None = None,
) -> ValidationOutcome:
    """Validate rows already sorted by ``sort_by_position``."""

    repairs = collector if collector is not None else ProblemCollector()
    diagnostics: list[Diagnostic] = []
    preceding_item: str | None = None
    preceding_treatment: str | None = None

    for row in ordered_rows:
        diagnostic = _check_row(row, preceding_item, preceding_treatment)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
            # Without a treatment on this row there is no subject to link from.
            if (
                diagnostic.kind is ProblemKind.MISSING_PREVIOUS_TREATMENT
                and row.treatment is not None
            ):
                repairs.record(
                    RepairInstance(
                        subject=row.treatment,
                        predicate=precedes_treatment_predicate,
                        correct_object=_require(preceding_treatment),
                        current_object=None,
                    ),
                    kind=diagnostic.kind,
                )
        preceding_item = row.item
        preceding_treatment = row.treatment

    return ValidationOutcome(diagnostics=tuple(diagnostics), repairs=repairs)


def _check_row(
    row: AgendaItemRow,
    preceding_item: str | None,
    preceding_treatment: str | None,
) -> Diagnostic | None:
    if row.position is None:
        return _diagnostic(ProblemKind.NO_POSITION, row)

    if row.position == 0:
        if row.previous_item is not None or row.previous_treatment is not None:
            return _diagnostic(ProblemKind.UNEXPECTED_PREDECESSOR_AT_START, row)
        return None

    if row.previous_item is None:
        return _diagnostic(ProblemKind.MISSING_PREVIOUS_ITEM, row, expected=preceding_item)
    if row.previous_item != preceding_item:
        return _diagnostic(
            ProblemKind.WRONG_PREVIOUS_ITEM,
            row,
            expected=preceding_item,
            actual=row.previous_item,
        )

    if row.previous_treatment is not None:
        if row.previous_treatment != preceding_treatment:
            return _diagnostic(
                ProblemKind.WRONG_PREVIOUS_TREATMENT,
                row,
                expected=preceding_treatment,
                actual=row.previous_treatment,
            )
        return None

    if preceding_treatment is not None:
        return _diagnostic(
            ProblemKind.MISSING_PREVIOUS_TREATMENT,
            row,
            expected=preceding_treatment,
        )
    return None


def _diagnostic(
    kind: ProblemKind,
    row: AgendaItemRow,
    *,
    expected: str | None = None,
    actual: str | None = None,
) -> Diagnostic:
    return Diagnostic(
        kind=kind,
        item=row.item,
        position=row.position,
        title=row.title,
        treatment=row.treatment,
        expected=expected,
        actual=actual,
        declared_previous_item=row.previous_item,
        declared_previous_treatment=row.previous_treatment,
    )


def _require(value: str | None) -> str:
    if value is None:
        raise ValueError("repair instance requires a preceding treatment")
    return value


__all__ = ["ValidationOutcome", "validate_rows"]
