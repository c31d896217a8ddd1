"""
agenda-checker - integration tests for the check workflow

File: tests/integration/test_cli_check_flow.py

Purpose
- Drive ``agenda-check check`` end to end through config loading, the
  ``requests`` transport, binding parsing, validation and rendering.
  Only ``requests.Session.post`` is replaced.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import requests

from agenda_checker.main import ExitCode, cli_entrypoint

pytestmark = [pytest.mark.integration]

MEETING = "http://data.lblod.info/id/zittingen/42"


class _Response:
    def __init__(self, status_code: int, payload: Any) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = json.dumps(payload)

    def json(self) -> Any:
        return self._payload


def _term(value: str, kind: str = "uri") -> dict[str, str]:
    return {"type": kind, "value": value}


def _results(*rows: dict[str, dict[str, str]]) -> dict[str, Any]:
    return {"head": {"vars": []}, "results": {"bindings": list(rows)}}


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "agenda-check.toml"
    path.write_text(
        '[sparql]\nendpoint = "http://triplestore.test/sparql"\nmax_retries = 0\n',
        encoding="utf-8",
    )
    return path


def test_check_end_to_end_over_http(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    config_file: Path,
) -> None:
    calls: list[dict[str, Any]] = []
    payload = _results(
        {
            "item": _term("http://ex/I0"),
            "position": _term("0", "literal"),
            "title": _term("Opening", "literal"),
            "treatment": _term("http://ex/T0"),
        },
        {
            "item": _term("http://ex/I1"),
            "position": _term("1", "literal"),
            "previousItem": _term("http://ex/I0"),
            "treatment": _term("http://ex/T1"),
        },
    )

    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _Response:
        calls.append({"url": url, **kwargs})
        return _Response(200, payload)

    monkeypatch.setattr(requests.Session, "post", fake_post)
    monkeypatch.setenv("AGENDA_CHECK_SPARQL_USERNAME", "dba")
    monkeypatch.setenv("AGENDA_CHECK_SPARQL_PASSWORD", "dba-pw")

    code = cli_entrypoint(["check", "--meeting", MEETING, "--config", str(config_file)])

    out = capsys.readouterr().out
    assert code == ExitCode.ORDERING_PROBLEMS
    assert calls[0]["url"] == "http://triplestore.test/sparql"
    assert calls[0]["auth"] == ("dba", "dba-pw")
    assert f"<{MEETING}> besluit:behandelt ?item" in calls[0]["data"]["query"]
    assert out.count("MissingPreviousTreatment:") == 1
    assert (
        "INSERT DATA { GRAPH <http://mu.semte.ch/graphs/public> { <http://ex/T1> "
        "<http://data.vlaanderen.be/ns/besluit#gebeurtNa> <http://ex/T0>. } }"
    ) in out


def test_http_error_maps_to_store_exit_code(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    config_file: Path,
) -> None:
    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _Response:
        return _Response(503, {"error": "overloaded"})

    monkeypatch.setattr(requests.Session, "post", fake_post)

    code = cli_entrypoint(["check", "--meeting", MEETING, "--config", str(config_file)])

    assert code == ExitCode.STORE_ERROR
    assert "HTTP 503" in capsys.readouterr().err


def test_unparsable_position_maps_to_store_exit_code(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    config_file: Path,
) -> None:
    payload = _results({"item": _term("http://ex/I0"), "position": _term("first", "literal")})

    def fake_post(self: requests.Session, url: str, **kwargs: Any) -> _Response:
        return _Response(200, payload)

    monkeypatch.setattr(requests.Session, "post", fake_post)

    code = cli_entrypoint(["check", "--meeting", MEETING, "--config", str(config_file)])

    assert code == ExitCode.STORE_ERROR
    assert "not an integer literal" in capsys.readouterr().err
