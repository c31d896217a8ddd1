"""Domain models: agenda rows, diagnostics and repair instances."""

from agenda_checker.domain.models import (
    AgendaItemRow,
    Diagnostic,
    ProblemKind,
    RepairInstance,
    render_diagnostic,
)

__all__ = [
    "AgendaItemRow",
    "Diagnostic",
    "ProblemKind",
    "RepairInstance",
    "render_diagnostic",
]
