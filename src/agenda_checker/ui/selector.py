"""Interactive list picker for governing bodies and meetings.

File: src/agenda_checker/ui/selector.py

A small ``textual`` app showing an ``OptionList``. Enter picks the
highlighted entry, escape cancels.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import OptionList, Static
from textual.widgets.option_list import Option

from agenda_checker.store.lookups import (
    GoverningBody,
    Meeting,
    find_governing_bodies,
    find_meetings_for_unit,
)
from agenda_checker.store.sparql_client import SparqlClient

T = TypeVar("T")

Chooser = Callable[[str, Sequence[tuple[str, str]]], str]


class SelectionError(RuntimeError):
    """Nothing to choose from."""


class SelectionCancelled(SelectionError):
    """The user closed the picker without choosing."""


class SelectionApp(App[str | None]):
    """Single-choice picker returning the value of the selected entry."""

    DEFAULT_CSS = """
    #selector-box {
        height: auto;
        max-height: 100%;
        padding: 1 2;
    }
    #selector-title {
        text-style: bold;
        padding: 0 0 1 0;
    }
    #selector-options {
        height: auto;
        max-height: 20;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    def __init__(self, title: str, choices: Sequence[tuple[str, str]]) -> None:
        super().__init__()
        self._prompt_title = title
        self._choice_values = [value for _, value in choices]
        self._choice_labels = [label for label, _ in choices]

    def compose(self) -> ComposeResult:
        with Vertical(id="selector-box"):
            yield Static(self._prompt_title, id="selector-title")
            yield OptionList(
                *(Option(label, id=str(i)) for i, label in enumerate(self._choice_labels)),
                id="selector-options",
            )

    def on_mount(self) -> None:
        self.query_one("#selector-options", OptionList).focus()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.exit(self._choice_values[event.option_index])

    def action_cancel(self) -> None:
        self.exit(None)


def choose(title: str, choices: Sequence[tuple[str, str]]) -> str:
    """Show ``choices`` as ``(label, value)`` pairs and return the picked value."""

    if not choices:
        raise SelectionError(f"{title}: nothing to choose from")
    result = SelectionApp(title, choices).run()
    if result is None:
        raise SelectionCancelled(f"{title}: selection cancelled")
    return result


def prompt_governing_body(
    client: SparqlClient, search: str, *, chooser: Chooser = choose
) -> GoverningBody:
    bodies = find_governing_bodies(client, search)
    if not bodies:
        raise SelectionError(f"no governing body matches {search!r}")
    picked = chooser(
        "Choose a governing body",
        [(f"{body.label} ({body.uri})", body.uri) for body in bodies],
    )
    return _by_uri(bodies, picked, lambda body: body.uri)


def prompt_meeting(client: SparqlClient, search: str, *, chooser: Chooser = choose) -> Meeting:
    """Pick a governing body matching ``search``, then one of its meetings."""

    body = prompt_governing_body(client, search, chooser=chooser)
    meetings = find_meetings_for_unit(client, body.uri)
    if not meetings:
        raise SelectionError(f"governing body {body.label!r} has no meetings")
    picked = chooser(
        f"Choose a meeting of {body.label}",
        [(meeting.label, meeting.uri) for meeting in meetings],
    )
    return _by_uri(meetings, picked, lambda meeting: meeting.uri)


def _by_uri(entries: Sequence[T], uri: str, key: Callable[[T], str]) -> T:
    for entry in entries:
        if key(entry) == uri:
            return entry
    raise SelectionError(f"unknown selection {uri!r}")


__all__ = [
    "Chooser",
    "SelectionApp",
    "SelectionCancelled",
    "SelectionError",
    "choose",
    "prompt_governing_body",
    "prompt_meeting",
]
