"""Tests for core diagnostics."""

from __future__ import annotations

from diagnostics.models import DiagnosticStatus
from core.diagnostics import probe


def test_core_probe() -> None:
    """Core probe should pass when rich logging is configured."""

    result = probe()
    assert result.status is DiagnosticStatus.PASS


def test_core_probe_warns_without_rich_handler(monkeypatch) -> None:
    """Core probe should warn when the console handler was removed."""

    from core import logging as core_logging

    monkeypatch.setattr(core_logging.logger, "handlers", [])

    result = probe()
    assert result.status is DiagnosticStatus.WARN
