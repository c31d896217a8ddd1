"""Command-line interface router for agenda-check."""

from __future__ import annotations

import argparse
import json
import sys
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from agenda_checker.config import (
    ConfigLoadError,
    ConfigValidationError,
    effective_config,
    load_config,
    resolve_sparql_credentials,
)
from agenda_checker.observability import correlation_scope, setup_logging, shutdown_logging
from agenda_checker.ordering import OrderingReport, validate_ordering
from agenda_checker.store import (
    SparqlAgendaRowSource,
    SparqlClient,
    find_meetings_for_unit,
    list_agenda,
)
from agenda_checker.ui.render import CLIRenderer, create_renderer
from agenda_checker.ui.selector import SelectionError, prompt_governing_body, prompt_meeting

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """User-facing failure; ``run_cli`` prints it and returns ``exit_code``."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Return the ``agenda-check`` parser; each leaf command sets ``handler``."""

    parser = argparse.ArgumentParser(
        prog="agenda-check",
        description=(
            "agenda-check: verify the ordering chains of meeting agendas.\n\n"
            "Common workflows:\n"
            "  agenda-check find gov-unit Gent     Pick a governing body\n"
            "  agenda-check find agenda Gent       Show a meeting agenda\n"
            "  agenda-check check Gent             Check a picked meeting\n"
            "  agenda-check check --meeting IRI    Check a known meeting\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./agenda-check.toml if present).",
    )
    common.add_argument("--profile", default=None, help="Optional config profile overlay name.")
    common.add_argument(
        "--endpoint",
        default=None,
        help="SPARQL endpoint URL (overrides sparql.endpoint).",
    )
    common.add_argument("--json", action="store_true", help="Emit deterministic JSON output")
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log debug details to stderr.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Plain output even on a terminal (NO_COLOR has the same effect).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # find ----------------------------------------------------------------
    find_parser = subparsers.add_parser(
        "find",
        help="Look up governing bodies, meetings and agendas",
        description=(
            "Interactively look up data in the store.\n\n"
            "Examples:\n"
            "  agenda-check find gov-unit Gent\n"
            "  agenda-check find meetings Gent\n"
            "  agenda-check find agenda Gent\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    find_subparsers = find_parser.add_subparsers(dest="find_target", required=True)

    gov_unit_parser = find_subparsers.add_parser(
        "gov-unit",
        parents=[common],
        help="Pick a governing body by label and print its IRI",
    )
    gov_unit_parser.add_argument("search", help="Case-insensitive label regex")
    gov_unit_parser.set_defaults(handler=_cmd_find_gov_unit)

    meetings_parser = find_subparsers.add_parser(
        "meetings",
        parents=[common],
        help="Pick a governing body and list its meetings",
    )
    meetings_parser.add_argument("search", help="Case-insensitive label regex")
    meetings_parser.set_defaults(handler=_cmd_find_meetings)

    agenda_parser = find_subparsers.add_parser(
        "agenda",
        parents=[common],
        help="Pick a meeting and print its agenda in position order",
    )
    agenda_parser.add_argument("search", help="Case-insensitive label regex")
    agenda_parser.set_defaults(handler=_cmd_find_agenda)

    # check ---------------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Validate the agenda ordering chains of a meeting",
        description=(
            "Validate the previous-item and previous-treatment chains of a meeting.\n"
            "A repair statement is printed when one can be derived; it is never executed.\n\n"
            "Exit codes: 0 consistent, 1 problems found, 3 store error.\n"
            "A schema:position that is not a non-negative integer literal (e.g. \"1.0\")\n"
            "is treated as a store error and stops the run before any check.\n\n"
            "Examples:\n"
            "  agenda-check check Gent\n"
            "  agenda-check check --meeting http://data.lblod.info/id/zittingen/1\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    check_parser.add_argument(
        "search",
        nargs="?",
        default=None,
        help="Governing body label regex used to pick the meeting",
    )
    check_parser.add_argument("--meeting", default=None, help="Meeting IRI to check directly")
    check_parser.set_defaults(handler=_cmd_check)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Print the config agenda-check would run with",
        description=(
            "Print defaults merged with agenda-check.toml, the selected profile,\n"
            "AGENDA_CHECK_* env vars and flags. Credential-looking keys are masked.\n\n"
            "Examples:\n"
            "  agenda-check config\n"
            "  agenda-check config --json\n"
            "  agenda-check config --profile debug\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Run one command and return its exit code (0 ok, 1 problems, 2 usage)."""

    args = build_parser().parse_args(list(argv) if argv is not None else None)
    try:
        return int(args.handler(args))
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        shutdown_logging()


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_find_gov_unit(args: argparse.Namespace) -> int:
    config = _prepare(args, "find gov-unit")
    client = _build_client(config)
    try:
        body = _select(lambda: prompt_governing_body(client, args.search))
    finally:
        client.close()

    if args.json:
        _emit_json({"command": "find gov-unit", "uri": body.uri, "label": body.label})
        return 0
    print(body.uri)
    return 0


def _cmd_find_meetings(args: argparse.Namespace) -> int:
    config = _prepare(args, "find meetings")
    client = _build_client(config)
    try:
        body = _select(lambda: prompt_governing_body(client, args.search))
        with correlation_scope(unit_uri=body.uri):
            meetings = find_meetings_for_unit(client, body.uri)
    finally:
        client.close()

    if args.json:
        _emit_json(
            {
                "command": "find meetings",
                "unit": body.uri,
                "meetings": [{"uri": m.uri, "date": m.date} for m in meetings],
            }
        )
        return 0

    renderer = _get_renderer(args)
    renderer.heading(f"Meetings of {body.label}")
    if not meetings:
        renderer.text("(none)")
    for meeting in meetings:
        renderer.text(meeting.label)
    return 0


def _cmd_find_agenda(args: argparse.Namespace) -> int:
    config = _prepare(args, "find agenda")
    client = _build_client(config)
    try:
        meeting = _select(lambda: prompt_meeting(client, args.search))
        with correlation_scope(meeting_uri=meeting.uri):
            rows = SparqlAgendaRowSource(client).fetch_agenda_rows(meeting.uri)
    finally:
        client.close()

    lines = list_agenda(rows)
    if args.json:
        _emit_json({"command": "find agenda", "meeting": meeting.uri, "agenda": lines})
        return 0

    renderer = _get_renderer(args)
    renderer.heading(f"Agenda of {meeting.label}")
    for line in lines:
        renderer.text(line)
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    config = _prepare(args, "check")
    meeting_uri = _blank_to_none(args.meeting)
    search = _blank_to_none(args.search)
    if meeting_uri is None and search is None:
        raise CLIError("check needs a search string or --meeting IRI", exit_code=2)

    repair = config["repair"]
    client = _build_client(config)
    try:
        if meeting_uri is None:
            meeting_uri = _select(lambda: prompt_meeting(client, search or "")).uri
        report = validate_ordering(
            meeting_uri,
            row_source=SparqlAgendaRowSource(client),
            graph=repair["graph"],
            precedes_treatment_predicate=repair["precedes_treatment_predicate"],
        )
    finally:
        client.close()

    exit_code = 0 if report.is_consistent else 1
    if args.json:
        _emit_json({"command": "check", **report.to_dict()})
        return exit_code

    _render_report(_get_renderer(args), report)
    return exit_code


def _cmd_config(args: argparse.Namespace) -> int:
    config = _prepare(args, "config")
    profile = _blank_to_none(args.profile)
    redacted = effective_config(config)

    if args.json:
        _emit_json({"command": "config", "active_profile": profile, "config": redacted})
        return 0

    renderer = _get_renderer(args)
    renderer.kv("Active profile", profile or "(default)")
    renderer.text(json.dumps(redacted, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=args.no_color)


def _render_report(renderer: CLIRenderer, report: OrderingReport) -> None:
    if report.is_consistent:
        renderer.ok(f"{report.agenda_id}: {len(report.rows)} agenda items, ordering consistent")
        return

    renderer.fail(f"{report.agenda_id}: {len(report.findings)} ordering problem(s)")
    for line in report.diagnostics:
        renderer.text(line)
    if report.repair_statement is not None:
        renderer.section("Repair statement (not executed):")
        renderer.text(report.repair_statement)


# ---------------------------------------------------------------------------
# Helpers - config, logging, store
# ---------------------------------------------------------------------------



def _prepare(args: argparse.Namespace, command: str) -> dict[str, Any]:
    """Load config and start logging for one command invocation."""

    try:
        config = load_config(
            _blank_to_none(args.config_path),
            profile=_blank_to_none(args.profile),
            cli_overrides={"sparql.endpoint": _blank_to_none(args.endpoint)},
        )
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc

    setup_logging(
        config["observability"],
        run_id=uuid.uuid4().hex,
        level="DEBUG" if args.verbose else None,
    ).debug("starting command", extra={"command": command})
    return config


def _build_client(config: Mapping[str, Any]) -> SparqlClient:
    try:
        auth = resolve_sparql_credentials(config)
    except ConfigLoadError as exc:
        raise CLIError(str(exc), exit_code=2) from exc
    sparql = config["sparql"]
    return SparqlClient(
        endpoint=sparql["endpoint"],
        timeout_seconds=sparql["timeout_seconds"],
        max_retries=sparql["max_retries"],
        auth=auth,
    )


def _select(pick: Callable[[], T]) -> T:
    try:
        return pick()
    except SelectionError as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


__all__ = ["CLIError", "build_parser", "run_cli"]
