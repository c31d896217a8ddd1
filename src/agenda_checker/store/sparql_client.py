"""
agenda-checker - SPARQL HTTP client.

File: src/agenda_checker/store/sparql_client.py

Purpose
- Execute SELECT queries against a SPARQL endpoint and return bindings as
  plain ``{variable: value}`` rows.

Functional requirements
- Unbound (OPTIONAL) variables are left out of a row, so absence stays
  distinguishable from an empty literal.
- Retry 429 and 5xx responses with exponential backoff.
- Never executes updates; repair statements are only printed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Final

import requests

from agenda_checker.constants import DEFAULT_SPARQL_ENDPOINT
from agenda_checker.observability.logging import redact_text

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON: Final[str] = "application/sparql-results+json"
_RETRYABLE_STATUS: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

BindingRow = dict[str, str]


class SparqlClientError(RuntimeError):
    """Transport, HTTP status or payload failure talking to the endpoint."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SparqlResultError(SparqlClientError):
    """Bindings were returned but do not have the expected shape."""


@dataclass(slots=True)
class SparqlClient:
    """Small blocking SPARQL-over-HTTP client built on ``requests``."""

    endpoint: str = DEFAULT_SPARQL_ENDPOINT
    timeout_seconds: float = 30.0
    max_retries: int = 2
    auth: tuple[str, str] | None = None
    session: requests.Session = field(default_factory=requests.Session)
    sleep: Callable[[float], None] = time.sleep

    def select(self, query: str) -> list[BindingRow]:
        """Run a SELECT query and return its solutions in endpoint order."""

        payload = self._post(query)
        return parse_select_results(payload)

    def _post(self, query: str) -> Mapping[str, object]:
        attempts = max(0, self.max_retries) + 1
        for attempt in range(attempts):
            started = time.monotonic()
            try:
                response = self.session.post(
                    self.endpoint,
                    data={"query": query},
                    headers={"Accept": SPARQL_RESULTS_JSON},
                    auth=self.auth,
                    timeout=self.timeout_seconds,
                )
            except requests.RequestException as exc:
                raise SparqlClientError(
                    f"SPARQL endpoint {redact_text(self.endpoint)} unreachable: {exc}"
                ) from exc

            logger.debug(
                "sparql request finished",
                extra={
                    "endpoint": self.endpoint,
                    "status_code": response.status_code,
                    "attempt": attempt + 1,
                    "elapsed_ms": int((time.monotonic() - started) * 1000),
                },
            )

            if response.status_code in _RETRYABLE_STATUS and attempt < attempts - 1:
                delay = 0.5 * (2**attempt)
                logger.warning(
                    "retrying SPARQL query after HTTP %s",
                    response.status_code,
                    extra={"delay_seconds": delay},
                )
                self.sleep(delay)
                continue

            if response.status_code != 200:
                raise SparqlClientError(
                    f"SPARQL endpoint returned HTTP {response.status_code}: "
                    f"{_truncate(response.text, 300)}",
                    status_code=response.status_code,
                )
            try:
                parsed = response.json()
            except ValueError as exc:
                raise SparqlClientError("SPARQL endpoint returned invalid JSON") from exc
            if not isinstance(parsed, Mapping):
                raise SparqlResultError("SPARQL result root must be an object")
            return parsed

        raise SparqlClientError("SPARQL query retries exhausted")

    def close(self) -> None:
        self.session.close()


def parse_select_results(payload: Mapping[str, object]) -> list[BindingRow]:
    """Flatten SPARQL JSON results into rows of lexical values."""

    results = payload.get("results")
    if not isinstance(results, Mapping):
        raise SparqlResultError("SPARQL result is missing 'results'")
    bindings = results.get("bindings")
    if not isinstance(bindings, Sequence) or isinstance(bindings, (str, bytes)):
        raise SparqlResultError("SPARQL result is missing 'results.bindings'")

    rows: list[BindingRow] = []
    for index, solution in enumerate(bindings):
        if not isinstance(solution, Mapping):
            raise SparqlResultError(f"bindings[{index}]: expected object")
        row: BindingRow = {}
        for name, term in solution.items():
            if not isinstance(term, Mapping) or not isinstance(term.get("value"), str):
                raise SparqlResultError(f"bindings[{index}].{name}: expected RDF term object")
            row[str(name)] = term["value"]
        rows.append(row)
    return rows


def escape_string_literal(value: str) -> str:
    """Escape ``value`` for use inside a double-quoted SPARQL string literal."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")


def _truncate(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}...[truncated {len(text) - max_chars} chars]"


__all__ = [
    "BindingRow",
    "SPARQL_RESULTS_JSON",
    "SparqlClient",
    "SparqlClientError",
    "SparqlResultError",
    "escape_string_literal",
    "parse_select_results",
]
