"""Models for diagnostics results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DiagnosticStatus(str, Enum):
    """Status for diagnostics checks."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"

    @property
    def blocks_startup(self) -> bool:
        return self is DiagnosticStatus.FAIL


@dataclass(frozen=True)
class DiagnosticResult:
    """Outcome of one probe (config, core, vision or storage)."""

    name: str
    status: DiagnosticStatus
    details: str

    def as_line(self) -> str:
        return f"[{self.status.value}] {self.name}: {self.details}"
