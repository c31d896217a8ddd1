"""Render accumulated repair instances as a single SPARQL update."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agenda_checker.domain.models import iri

if TYPE_CHECKING:
    from collections.abc import Sequence

    from agenda_checker.domain.models import RepairInstance


def build_repair_statement(instances: Sequence[RepairInstance], *, graph: str) -> str | None:
    """Return ``DELETE DATA ...; INSERT DATA ...`` for ``instances`` or ``None``.

    The deletion clause lists the current object of every instance that has
    one and is left out entirely when none do. The insertion clause lists the
    correct object of every instance. Deletion comes first so a functional
    predicate never carries both the stale and the corrected value.

    Raises ``ValueError`` when the graph or any term is not a usable IRI.
    """

    if not instances:
        return None
    if not isinstance(graph, str) or not graph.strip():
        raise ValueError("graph: must be a non-empty IRI")

    stale = [
        render_triple(item.subject, item.predicate, item.current_object)
        for item in instances
        if item.current_object is not None
    ]
    corrected = [
        render_triple(item.subject, item.predicate, item.correct_object) for item in instances
    ]

    insert_clause = _data_clause("INSERT", graph, corrected)
    if not stale:
        return insert_clause
    return f"{_data_clause('DELETE', graph, stale)}; {insert_clause}"


def render_triple(subject: str, predicate: str, obj: str) -> str:
    return f"{iri(subject)} {iri(predicate)} {iri(obj)}."


def _data_clause(verb: str, graph: str, triples: Sequence[str]) -> str:
    return f"{verb} DATA {{ GRAPH {iri(graph)} {{ {' '.join(triples)} }} }}"


__all__ = ["build_repair_statement", "render_triple"]
