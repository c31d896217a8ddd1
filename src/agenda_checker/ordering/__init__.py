"""
agenda-checker ordering package public API.

File: src/agenda_checker/ordering/__init__.py

Purpose
- Export the chain reconstructor, validator, problem collector, repair
  builder and the checker facade.
"""

from agenda_checker.ordering.checker import (
    AgendaOrderingChecker,
    OrderingReport,
    RowSource,
    check_rows,
    validate_ordering,
)
from agenda_checker.ordering.problems import ProblemCollector
from agenda_checker.ordering.reconstructor import sort_by_position
from agenda_checker.ordering.repair import build_repair_statement, render_triple
from agenda_checker.ordering.validator import ValidationOutcome, validate_rows

__all__ = [
    "AgendaOrderingChecker",
    "OrderingReport",
    "ProblemCollector",
    "RowSource",
    "ValidationOutcome",
    "build_repair_statement",
    "check_rows",
    "render_triple",
    "sort_by_position",
    "validate_ordering",
    "validate_rows",
]
