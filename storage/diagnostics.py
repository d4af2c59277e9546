"""Diagnostics routines for the storage subsystem."""

from __future__ import annotations

import json
from pathlib import Path

from diagnostics.models import DiagnosticResult, DiagnosticStatus
from storage.history import DEFAULT_HISTORY_FILE, history_path_from_config
from vision.detections import DetectionResult


def probe(base_dir: Path | None = None) -> DiagnosticResult:
    """Run a storage probe to validate the history location.

    Args:
        base_dir: Optional base directory for offline testing.

    Returns:
        Diagnostic result indicating storage readiness.
    """

    name = "storage"
    try:
        if base_dir is None:
            from config import ConfigController

            config = ConfigController.get_instance().get_config()
            history_path = history_path_from_config(config)
        else:
            history_path = base_dir / "var" / DEFAULT_HISTORY_FILE

        history_dir = history_path.parent
        history_dir.mkdir(parents=True, exist_ok=True)

        sentinel = history_dir / "diagnostics_probe.txt"
        sentinel.write_text("ok", encoding="utf-8")
        sentinel.unlink(missing_ok=True)

        if history_path.exists():
            payload = json.loads(history_path.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                return DiagnosticResult(
                    name=name,
                    status=DiagnosticStatus.WARN,
                    details=f"History file is not a list and will be reset: {history_path}",
                )
            try:
                for item in payload:
                    DetectionResult.from_dict(item)
            except (ValueError, TypeError, KeyError) as exc:
                return DiagnosticResult(
                    name=name,
                    status=DiagnosticStatus.WARN,
                    details=f"History file has invalid entries and will be reset: {exc}",
                )
            details = f"History readable with {len(payload)} entries at {history_path}"
        else:
            details = f"History directory writable at {history_dir}"
        return DiagnosticResult(name=name, status=DiagnosticStatus.PASS, details=details)
    except OSError as exc:
        details = f"Filesystem access failed: {exc}"
        return DiagnosticResult(name=name, status=DiagnosticStatus.FAIL, details=details)
    except json.JSONDecodeError as exc:
        details = f"History file is corrupt and will be reset: {exc}"
        return DiagnosticResult(name=name, status=DiagnosticStatus.WARN, details=details)
