"""Module entrypoint for ``python -m agenda_checker``."""

from __future__ import annotations

from agenda_checker.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
