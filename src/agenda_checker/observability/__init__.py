"""Observability package: structured logging with correlation and redaction."""

from agenda_checker.observability.logging import (
    correlation_scope,
    get_correlation_context,
    redact_text,
    run_log_path,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "correlation_scope",
    "get_correlation_context",
    "redact_text",
    "run_log_path",
    "setup_logging",
    "shutdown_logging",
]
