"""Unit tests for the process exit-code contract in ``agenda_checker.main``."""

from __future__ import annotations

from pathlib import Path

import pytest

from agenda_checker.main import ExitCode, cli_entrypoint
from agenda_checker.store.sparql_client import SparqlClientError, SparqlResultError
from agenda_checker.ui import cli

pytestmark = [pytest.mark.unit]


class _FailingClient:
    def __init__(self, error: BaseException) -> None:
        self.error = error

    def select(self, query: str) -> list[dict[str, str]]:
        raise self.error

    def close(self) -> None:
        return None


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "agenda-check.toml"
    path.write_text("", encoding="utf-8")
    return path


def test_exit_code_values_are_stable() -> None:
    assert [int(code) for code in ExitCode] == [0, 1, 2, 3, 4]


@pytest.mark.parametrize(
    "error",
    [SparqlClientError("endpoint unreachable"), SparqlResultError("bindings[0]: bad position")],
)
def test_store_errors_exit_three(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    config_file: Path,
    error: SparqlClientError,
) -> None:
    monkeypatch.setattr(cli, "_build_client", lambda config: _FailingClient(error))

    code = cli_entrypoint(["check", "--meeting", "http://ex/zitting/1", "--config", str(config_file)])

    assert code == ExitCode.STORE_ERROR
    assert str(error) in capsys.readouterr().err


def test_unexpected_errors_exit_four_with_traceback(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    config_file: Path,
) -> None:
    monkeypatch.setattr(cli, "_build_client", lambda config: _FailingClient(KeyError("boom")))

    code = cli_entrypoint(["check", "--meeting", "http://ex/zitting/1", "--config", str(config_file)])

    assert code == ExitCode.INTERNAL_ERROR
    assert "Traceback" in capsys.readouterr().err


def test_argparse_usage_error_is_normalized() -> None:
    assert cli_entrypoint(["no-such-command"]) == ExitCode.CONFIG_ERROR


def test_help_exits_success(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["--help"]) == ExitCode.SUCCESS
    assert "agenda-check" in capsys.readouterr().out


def test_wrapped_store_error_is_found_through_the_cause_chain(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    config_file: Path,
) -> None:
    try:
        raise SparqlClientError("HTTP 503")
    except SparqlClientError as inner:
        wrapped = RuntimeError("fetch failed")
        wrapped.__cause__ = inner
    monkeypatch.setattr(cli, "_build_client", lambda config: _FailingClient(wrapped))

    code = cli_entrypoint(["check", "--meeting", "http://ex/zitting/1", "--config", str(config_file)])

    assert code == ExitCode.STORE_ERROR
    assert "error: fetch failed" in capsys.readouterr().err
