"""Order agenda rows by their declared position."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from agenda_checker.domain.models import AgendaItemRow


def sort_by_position(rows: Iterable[AgendaItemRow]) -> tuple[AgendaItemRow, ...]:
    """Return rows ascending by position, rows without a position last.

    The sort is stable: rows sharing a position (or both lacking one) keep
    their input order. Nothing is dropped or de-duplicated.
    """

    return tuple(sorted(rows, key=_position_key))


def _position_key(row: AgendaItemRow) -> tuple[bool, int]:
    if row.position is None:
        return (True, 0)
    return (False, row.position)


__all__ = ["sort_by_position"]
