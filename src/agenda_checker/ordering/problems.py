"""Accumulator for repairable problems found during one validation run."""

from __future__ import annotations

from typing import TYPE_CHECKING

from agenda_checker.domain.models import ProblemKind, RepairInstance
from agenda_checker.ordering.repair import build_repair_statement

if TYPE_CHECKING:
    from collections.abc import Iterable


class ProblemCollector:
    """Ordered, append-only collection of repair instances for one problem kind."""

    __slots__ = ("_instances", "_kind")

    def __init__(
        self,
        kind: ProblemKind = ProblemKind.MISSING_PREVIOUS_TREATMENT,
        instances: Iterable[RepairInstance] = (),
    ) -> None:
        if not isinstance(kind, ProblemKind):
            raise ValueError(f"kind: expected ProblemKind, got {type(kind).__name__}")
        self._kind = kind
        self._instances: list[RepairInstance] = []
        for instance in instances:
            self.record(instance)

    @property
    def kind(self) -> ProblemKind:
        return self._kind

    @property
    def instances(self) -> tuple[RepairInstance, ...]:
        return tuple(self._instances)

    def record(self, instance: RepairInstance, *, kind: ProblemKind | None = None) -> None:
        if kind is not None and kind is not self._kind:
            raise ValueError(
                f"collector for {self._kind.value} cannot record {kind.value} instances"
            )
        if not isinstance(instance, RepairInstance):
            raise ValueError(f"expected RepairInstance, got {type(instance).__name__}")
        self._instances.append(instance)

    def has_repairs(self) -> bool:
        return bool(self._instances)

    def build_repair_statement(self, graph: str) -> str | None:
        return build_repair_statement(self._instances, graph=graph)

    def __len__(self) -> int:
        return len(self._instances)


__all__ = ["ProblemCollector"]
