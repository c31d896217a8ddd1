"""Dataclass domain models for agenda-ordering checks with strict validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import NoReturn

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

_MAX_TEXT = 8192
_IRI_FORBIDDEN = frozenset('<>"{}|^`\\ \n\r\t')


class ProblemKind(StrEnum):
    """Closed taxonomy of ordering problems found on an agenda."""

    NO_POSITION = "NoPosition"
    UNEXPECTED_PREDECESSOR_AT_START = "UnexpectedPredecessorAtStart"
    MISSING_PREVIOUS_ITEM = "MissingPreviousItem"
    WRONG_PREVIOUS_ITEM = "WrongPreviousItem"
    WRONG_PREVIOUS_TREATMENT = "WrongPreviousTreatment"
    MISSING_PREVIOUS_TREATMENT = "MissingPreviousTreatment"


@dataclass(frozen=True, slots=True)
class AgendaItemRow:
    """One fetched fact-set about a single agenda item.

    Every field except ``item`` is optional in the store. ``None`` means the
    assertion is absent; an empty string is a present (if odd) value.
    """

    item: str
    position: int | None = None
    previous_item: str | None = None
    title: str | None = None
    treatment: str | None = None
    previous_treatment: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.item, str) or not self.item.strip():
            _fail("AgendaItemRow.item", "must be a non-empty string")
        if self.position is not None:
            if isinstance(self.position, bool) or not isinstance(self.position, int):
                _fail(
                    "AgendaItemRow.position",
                    f"expected integer, got {type(self.position).__name__}",
                )
            if self.position < 0:
                _fail("AgendaItemRow.position", "must be >= 0")
        for name in ("previous_item", "title", "treatment", "previous_treatment"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                _fail(f"AgendaItemRow.{name}", f"expected string, got {type(value).__name__}")

    @classmethod
    def from_dict(cls, payload: Mapping[str, object]) -> AgendaItemRow:
        """Build a row from a mapping keyed by the query variable names."""

        return cls(
            item=_required_str(payload.get("item"), "AgendaItemRow.item"),
            position=_optional_position(payload.get("position")),
            previous_item=_optional_str(payload.get("previousItem"), "previousItem"),
            title=_optional_str(payload.get("title"), "title"),
            treatment=_optional_str(payload.get("treatment"), "treatment"),
            previous_treatment=_optional_str(
                payload.get("previousTreatment"), "previousTreatment"
            ),
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "item": self.item,
            "position": self.position,
            "previousItem": self.previous_item,
            "title": self.title,
            "treatment": self.treatment,
            "previousTreatment": self.previous_treatment,
        }


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured description of one ordering problem.

    ``expected`` and ``actual`` carry the position-implied and the declared
    predecessor for the chain the problem is about.
    """

    kind: ProblemKind
    item: str
    position: int | None = None
    title: str | None = None
    treatment: str | None = None
    expected: str | None = None
    actual: str | None = None
    declared_previous_item: str | None = None
    declared_previous_treatment: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ProblemKind):
            _fail("Diagnostic.kind", f"expected ProblemKind, got {type(self.kind).__name__}")

    @property
    def is_repairable(self) -> bool:
        return self.kind is ProblemKind.MISSING_PREVIOUS_TREATMENT

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "kind": self.kind.value,
            "item": self.item,
            "position": self.position,
            "title": self.title,
            "treatment": self.treatment,
            "expected": self.expected,
            "actual": self.actual,
            "declared_previous_item": self.declared_previous_item,
            "declared_previous_treatment": self.declared_previous_treatment,
            "message": render_diagnostic(self),
        }


@dataclass(frozen=True, slots=True)
class RepairInstance:
    """One assertion that is missing (or wrong) and how it should read."""

    subject: str
    predicate: str
    correct_object: str
    current_object: str | None = None

    def __post_init__(self) -> None:
        _required_str(self.subject, "RepairInstance.subject")
        _required_str(self.predicate, "RepairInstance.predicate")
        _required_str(self.correct_object, "RepairInstance.correct_object")
        if self.current_object is not None:
            _required_str(self.current_object, "RepairInstance.current_object")

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "subject": self.subject,
            "predicate": self.predicate,
            "correct_object": self.correct_object,
            "current_object": self.current_object,
        }


def render_diagnostic(diagnostic: Diagnostic) -> str:
    """Render a diagnostic as ``<Kind>: <sentence>`` for terminal output."""

    kind = diagnostic.kind
    subject = _describe_item(diagnostic)

    if kind is ProblemKind.NO_POSITION:
        detail = f"{subject} has no position; its place in the chain cannot be verified"
    elif kind is ProblemKind.UNEXPECTED_PREDECESSOR_AT_START:
        declared: list[str] = []
        if diagnostic.declared_previous_item is not None:
            declared.append(f"previous item {_term(diagnostic.declared_previous_item)}")
        if diagnostic.declared_previous_treatment is not None:
            declared.append(
                f"previous treatment {_term(diagnostic.declared_previous_treatment)}"
            )
        detail = (
            f"{subject} is the first item but declares {' and '.join(declared)}; "
            "expected no predecessor"
        )
    elif kind is ProblemKind.MISSING_PREVIOUS_ITEM:
        detail = f"{subject} has no previous item; expected {_term(diagnostic.expected)}"
    elif kind is ProblemKind.WRONG_PREVIOUS_ITEM:
        detail = (
            f"{subject} has previous item {_term(diagnostic.actual)}; "
            f"expected {_term(diagnostic.expected)}"
        )
    elif kind is ProblemKind.WRONG_PREVIOUS_TREATMENT:
        detail = (
            f"treatment {_term(diagnostic.treatment)} of {subject} has previous treatment "
            f"{_term(diagnostic.actual)}; expected {_term(diagnostic.expected)}"
        )
    elif diagnostic.treatment is None:
        detail = (
            f"{subject} has no treatment, so no previous treatment; "
            f"expected a treatment following {_term(diagnostic.expected)}"
        )
    else:
        detail = (
            f"treatment {_term(diagnostic.treatment)} of {subject} has no previous treatment; "
            f"expected {_term(diagnostic.expected)}"
        )
    return f"{kind.value}: {detail}"


def iri(value: str) -> str:
    """Render ``value`` as an IRI reference, rejecting characters IRIs forbid."""

    text = value.strip()
    if text.startswith("<") and text.endswith(">"):
        text = text[1:-1]
    if not text or any(ch in text for ch in _IRI_FORBIDDEN):
        raise ValueError(f"not a valid IRI: {value!r}")
    return f"<{text}>"


def _describe_item(diagnostic: Diagnostic) -> str:
    parts = [f"agenda item {_term(diagnostic.item)}"]
    if diagnostic.position is not None:
        parts.append(f"at position {diagnostic.position}")
    if diagnostic.title is not None:
        parts.append(f"({diagnostic.title!r})")
    return " ".join(parts)


def _term(value: str | None) -> str:
    if value is None:
        return "none"
    return f"<{value}>"


def _required_str(value: object, path: str) -> str:
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    if not value.strip():
        _fail(path, "must not be empty")
    if len(value) > _MAX_TEXT:
        _fail(path, f"must be <= {_MAX_TEXT} characters")
    return value


def _optional_str(value: object, path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        _fail(path, f"expected string, got {type(value).__name__}")
    return value


def _optional_position(value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        _fail("position", "expected integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            _fail("position", f"not an integer literal: {value!r}")
    _fail("position", f"expected integer, got {type(value).__name__}")


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


__all__ = [
    "AgendaItemRow",
    "Diagnostic",
    "JSONScalar",
    "JSONValue",
    "ProblemKind",
    "RepairInstance",
    "iri",
    "render_diagnostic",
]
