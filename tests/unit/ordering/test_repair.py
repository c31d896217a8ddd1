"""
agenda-checker - unit tests for the repair statement builder and collector

File: tests/unit/ordering/test_repair.py

Purpose
- Validate the SPARQL update text derived from accumulated repair instances.

What this test file should cover
- Absent statement for no instances.
- Insert-only statements when no instance carries a current object.
- Delete clause ordering and triple rendering.
- Rejection of terms that would break the update syntax.
- Collector kind guarding.
"""

from __future__ import annotations

import pytest

from agenda_checker.domain.models import ProblemKind, RepairInstance
from agenda_checker.ordering.problems import ProblemCollector
from agenda_checker.ordering.repair import build_repair_statement, render_triple

pytestmark = [pytest.mark.unit]

GRAPH = "http://mu.semte.ch/graphs/public"
PRED = "http://data.vlaanderen.be/ns/besluit#gebeurtNa"


def test_no_instances_yields_no_statement() -> None:
    assert build_repair_statement([], graph=GRAPH) is None


def test_insert_only_statement_for_missing_links() -> None:
    instances = [
        RepairInstance(subject="http://ex/t1", predicate=PRED, correct_object="http://ex/t0"),
        RepairInstance(subject="http://ex/t3", predicate=PRED, correct_object="http://ex/t2"),
    ]

    statement = build_repair_statement(instances, graph=GRAPH)

    assert statement == (
        f"INSERT DATA {{ GRAPH <{GRAPH}> {{ "
        f"<http://ex/t1> <{PRED}> <http://ex/t0>. "
        f"<http://ex/t3> <{PRED}> <http://ex/t2>. }} }}"
    )


def test_delete_clause_precedes_insert_clause_when_current_objects_exist() -> None:
    instances = [
        RepairInstance(
            subject="http://ex/t1",
            predicate=PRED,
            correct_object="http://ex/t0",
            current_object="http://ex/stale",
        ),
        RepairInstance(subject="http://ex/t2", predicate=PRED, correct_object="http://ex/t1"),
    ]

    statement = build_repair_statement(instances, graph=GRAPH)

    assert statement == (
        f"DELETE DATA {{ GRAPH <{GRAPH}> {{ <http://ex/t1> <{PRED}> <http://ex/stale>. }} }}; "
        f"INSERT DATA {{ GRAPH <{GRAPH}> {{ "
        f"<http://ex/t1> <{PRED}> <http://ex/t0>. <http://ex/t2> <{PRED}> <http://ex/t1>. }} }}"
    )


def test_blank_graph_is_rejected() -> None:
    instance = RepairInstance(subject="http://ex/a", predicate=PRED, correct_object="http://ex/b")

    with pytest.raises(ValueError, match="graph"):
        build_repair_statement([instance], graph="  ")


def test_render_triple_wraps_bare_iris_once() -> None:
    assert render_triple("<http://ex/s>", "http://ex/p", "http://ex/o") == (
        "<http://ex/s> <http://ex/p> <http://ex/o>."
    )
    assert render_triple("<http://ex/x>", "<http://ex/p>", "<http://ex/y>") == (
        "<http://ex/x> <http://ex/p> <http://ex/y>."
    )


@pytest.mark.parametrize(
    "bad_term",
    [
        "http://ex/t1> <http://ex/p> <http://ex/x",
        "http://ex/with space",
        "http://ex/\"quoted\"",
        "http://ex/line\nbreak",
    ],
)
def test_statement_rejects_terms_that_are_not_iris(bad_term: str) -> None:
    instance = RepairInstance(subject=bad_term, predicate=PRED, correct_object="http://ex/t0")

    with pytest.raises(ValueError, match="not a valid IRI"):
        build_repair_statement([instance], graph=GRAPH)


def test_statement_rejects_graph_that_is_not_an_iri() -> None:
    instance = RepairInstance(subject="http://ex/t1", predicate=PRED, correct_object="http://ex/t0")

    with pytest.raises(ValueError, match="not a valid IRI"):
        build_repair_statement([instance], graph="http://ex/g> } ; DROP ALL ; {")


def test_collector_preserves_record_order() -> None:
    collector = ProblemCollector()
    first = RepairInstance(subject="http://ex/b", predicate=PRED, correct_object="http://ex/a")
    second = RepairInstance(subject="http://ex/a", predicate=PRED, correct_object="http://ex/z")

    collector.record(first)
    collector.record(second, kind=ProblemKind.MISSING_PREVIOUS_TREATMENT)

    assert collector.instances == (first, second)
    assert len(collector) == 2
    assert collector.kind is ProblemKind.MISSING_PREVIOUS_TREATMENT


def test_collector_rejects_other_problem_kinds() -> None:
    collector = ProblemCollector()
    instance = RepairInstance(subject="http://ex/b", predicate=PRED, correct_object="http://ex/a")

    with pytest.raises(ValueError, match="cannot record"):
        collector.record(instance, kind=ProblemKind.WRONG_PREVIOUS_ITEM)
    assert not collector.has_repairs()


def test_collector_statement_matches_pure_builder() -> None:
    instance = RepairInstance(subject="http://ex/b", predicate=PRED, correct_object="http://ex/a")
    collector = ProblemCollector(instances=[instance])

    assert collector.build_repair_statement(GRAPH) == build_repair_statement([instance], graph=GRAPH)
