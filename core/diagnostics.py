"""Diagnostics routines for the core subsystem."""

from __future__ import annotations

from rich.logging import RichHandler

from diagnostics.models import DiagnosticResult, DiagnosticStatus


def probe() -> DiagnosticResult:
    """Run a core probe to validate logging readiness.

    Returns:
        Diagnostic result indicating core readiness.
    """

    name = "core"
    from core import logging as core_logging

    logger = core_logging.logger
    if logger is None:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details="Core logger failed to initialize",
        )
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.WARN,
            details="Core logger has no rich console handler",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details="Rich logging enabled",
    )
