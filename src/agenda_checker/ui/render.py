"""Terminal output for agenda-check.

Diagnostics and repair statements are printed verbatim so they can be piped
into other tools. ``rich`` only adds styling on an interactive terminal, and
``NO_COLOR`` or ``--no-color`` turn it off.
"""

from __future__ import annotations

import os
import sys

from rich.console import Console


def _color_allowed(no_color_flag: bool) -> bool:
    if no_color_flag or os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


class CLIRenderer:
    """Writes report lines, styling status lines when color is allowed."""

    def __init__(self, *, no_color: bool = False) -> None:
        self._console = (
            Console(highlight=False, soft_wrap=True) if _color_allowed(no_color) else None
        )

    def heading(self, text: str) -> None:
        self._styled(text, "bold")

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}")

    def text(self, line: str) -> None:
        print(line)

    def section(self, title: str) -> None:
        print()
        self._styled(title, "bold")

    def ok(self, label: str) -> None:
        self._styled(f"OK  {label}", "green")

    def fail(self, label: str) -> None:
        self._styled(f"FAIL  {label}", "red")

    def _styled(self, line: str, style: str) -> None:
        if self._console is None:
            print(line)
        else:
            self._console.print(line, style=style, markup=False)


def create_renderer(*, no_color: bool = False) -> CLIRenderer:
    return CLIRenderer(no_color=no_color)


__all__ = ["CLIRenderer", "create_renderer"]
