"""Queue-backed structured logging for agenda-check.

Records are handed to a ``QueueListener`` thread so a slow sink never stalls
a SPARQL round trip. The terminal receives ``text`` or ``json`` lines as
configured; the optional per-run file under ``<log_dir>/<run_id>/`` always
receives JSON lines. Every line carries the run id and whatever fields are
bound with ``correlation_scope``. Credentials are masked before anything is
written unless ``redact_secrets`` is off.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import queue
import re
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

LOGGER_NAME: Final[str] = "agenda_checker"
LOG_FILENAME: Final[str] = "agenda-check.jsonl"

_REDACTED: Final[str] = "***REDACTED***"
_QUEUE_SIZE: Final[int] = 4096
_SENSITIVE_KEY_TERMS: Final[tuple[str, ...]] = (
    "secret",
    "token",
    "password",
    "passwd",
    "authorization",
    "credential",
    "cookie",
)
_ASSIGNMENT: Final[re.Pattern[str]] = re.compile(
    r"(?i)\b(token|password|passwd|secret|authorization)\b\s*([:=])\s*([^\s,;]+)"
)
_AUTH_SCHEME: Final[re.Pattern[str]] = re.compile(r"(?i)\b(basic|bearer)\s+[A-Za-z0-9._~+/-]+=*")
_URL_USERINFO: Final[re.Pattern[str]] = re.compile(r"(?i)\b([a-z][a-z0-9+.-]*://)[^/\s:@]+:[^/\s@]+@")

# Attributes present on every LogRecord; anything else arrived through ``extra``.
_RECORD_ATTRS: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "correlation",
}

_CORRELATION: contextvars.ContextVar[tuple[tuple[str, str], ...]] = contextvars.ContextVar(
    "agenda_checker_correlation", default=()
)


@dataclass(frozen=True, slots=True)
class _ActiveLogging:
    logger: logging.Logger
    handler: _ContextQueueHandler
    listener: logging.handlers.QueueListener
    sinks: tuple[logging.Handler, ...]


_active: _ActiveLogging | None = None


def setup_logging(
    observability: Mapping[str, object] | None = None,
    *,
    run_id: str,
    logger_name: str = LOGGER_NAME,
    level: int | str | None = None,
) -> logging.Logger:
    """Configure logging from an ``[observability]`` section.

    ``level`` overrides ``log_level`` (``--verbose``). Calling this again
    replaces the previous setup after draining it.
    """

    shutdown_logging()
    settings = dict(observability or {})
    resolved_level = _parse_level(level if level is not None else settings.get("log_level", "WARNING"))
    redact = bool(settings.get("redact_secrets", True))
    log_format = settings.get("log_format", "text")
    if log_format not in _FORMATTERS:
        raise ValueError(f"unsupported log format {log_format!r}")

    terminal = logging.StreamHandler()
    terminal.setFormatter(_FORMATTERS[log_format](run_id, redact=redact))
    sinks: list[logging.Handler] = [terminal]

    if settings.get("log_to_file"):
        path = run_log_path(str(settings.get("log_dir", "logs")), run_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_sink = logging.FileHandler(path, encoding="utf-8")
        file_sink.setFormatter(_JsonLineFormatter(run_id, redact=redact))
        sinks.append(file_sink)

    for sink in sinks:
        sink.setLevel(resolved_level)

    handler = _ContextQueueHandler(queue.Queue(maxsize=_QUEUE_SIZE))
    listener = logging.handlers.QueueListener(handler.queue, *sinks, respect_handler_level=True)

    logger = logging.getLogger(logger_name)
    logger.setLevel(resolved_level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    listener.start()

    global _active
    _active = _ActiveLogging(logger, handler, listener, tuple(sinks))
    return logger


def shutdown_logging() -> None:
    """Drain queued records into the sinks and close them."""

    global _active
    active, _active = _active, None
    if active is None:
        return
    active.listener.stop()
    active.logger.removeHandler(active.handler)
    active.handler.close()
    for sink in active.sinks:
        sink.flush()
        sink.close()


def run_log_path(log_dir: str | Path, run_id: str) -> Path:
    return Path(log_dir) / run_id / LOG_FILENAME


def get_correlation_context() -> dict[str, str]:
    return dict(_CORRELATION.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind correlation fields for records logged inside the block.

    A ``None`` value unbinds that field until the block exits.
    """

    state = get_correlation_context()
    for key, value in fields.items():
        if value is None:
            state.pop(key, None)
        else:
            state[key] = value
    token = _CORRELATION.set(tuple(state.items()))
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def redact_text(text: str) -> str:
    """Mask credentials embedded in free text."""

    text = _ASSIGNMENT.sub(lambda m: f"{m.group(1)}{m.group(2)}{_REDACTED}", text)
    text = _AUTH_SCHEME.sub(lambda m: f"{m.group(1)} {_REDACTED}", text)
    return _URL_USERINFO.sub(lambda m: f"{m.group(1)}{_REDACTED}@", text)


class _ContextQueueHandler(logging.handlers.QueueHandler):
    """Snapshots correlation on the caller's thread; drops records when full."""

    def __init__(self, log_queue: queue.Queue[logging.LogRecord]) -> None:
        super().__init__(log_queue)
        self.dropped = 0

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        record.correlation = get_correlation_context()
        return super().prepare(record)  # type: ignore[no-any-return]

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self.dropped += 1


class _RecordFormatter(logging.Formatter):
    def __init__(self, run_id: str, *, redact: bool) -> None:
        super().__init__()
        self._run_id = run_id
        self._redact = redact

    def _clean(self, value: object, key: str | None = None) -> object:
        if not self._redact:
            return value
        if key is not None and _is_sensitive_key(key):
            return _REDACTED
        if isinstance(value, str):
            return redact_text(value)
        if isinstance(value, Mapping):
            return {str(k): self._clean(v, str(k)) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._clean(item) for item in value]
        return value

    def _context(self, record: logging.LogRecord) -> dict[str, str]:
        context = {"run_id": self._run_id}
        context.update(getattr(record, "correlation", {}))
        return context

    def _fields(self, record: logging.LogRecord) -> dict[str, object]:
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        cleaned = self._clean(extras)
        return cleaned if isinstance(cleaned, dict) else {}


class _JsonLineFormatter(_RecordFormatter):
    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": self._clean(record.getMessage()),
            **self._context(record),
        }
        fields = self._fields(record)
        if fields:
            event["fields"] = fields
        if record.exc_info is not None:
            event["exception"] = self._clean(self.formatException(record.exc_info))
        return json.dumps(
            event, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=repr
        )


class _TextFormatter(_RecordFormatter):
    def format(self, record: logging.LogRecord) -> str:
        pairs: dict[str, object] = {**self._context(record), **self._fields(record)}
        parts = [record.levelname.lower(), record.name, str(self._clean(record.getMessage()))]
        parts.extend(f"{key}={pairs[key]}" for key in sorted(pairs))
        line = " ".join(parts)
        if record.exc_info is not None:
            line = f"{line}\n{self._clean(self.formatException(record.exc_info))}"
        return line


_FORMATTERS: Final[dict[object, type[_RecordFormatter]]] = {
    "json": _JsonLineFormatter,
    "text": _TextFormatter,
}


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return not lowered.endswith("_env") and any(term in lowered for term in _SENSITIVE_KEY_TERMS)


def _parse_level(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    parsed = logging.getLevelName(str(value).strip().upper())
    if not isinstance(parsed, int):
        raise ValueError(f"unsupported logging level {value!r}")
    return parsed


__all__ = [
    "LOGGER_NAME",
    "LOG_FILENAME",
    "correlation_scope",
    "get_correlation_context",
    "redact_text",
    "run_log_path",
    "setup_logging",
    "shutdown_logging",
]
