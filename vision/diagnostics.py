"""Diagnostics routines for the vision pipeline."""

from __future__ import annotations

import importlib.util

from diagnostics.models import DiagnosticResult, DiagnosticStatus


SELF_TEST_SIZE = (320, 240)
SELF_TEST_LAMP = (160, 120, 40)


def probe(available_modules: set[str] | None = None) -> DiagnosticResult:
    """Check imaging dependencies and run a synthetic red-lamp self test.

    Args:
        available_modules: Optional override set for offline testing.

    Returns:
        Diagnostic result indicating vision readiness.
    """

    name = "vision"
    missing: list[str] = []
    for module_name in ("numpy", "PIL"):
        if available_modules is not None:
            is_available = module_name in available_modules
        else:
            is_available = importlib.util.find_spec(module_name) is not None
        if not is_available:
            missing.append(module_name)
    if missing:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Missing vision deps: {', '.join(missing)}",
        )

    from vision.detections import SignalState
    from vision.detectors import ScanSignalDetector
    from vision.distance import DistanceEstimator
    from vision.frames import draw_disk, frame_from_rgb, solid_frame
    from vision.signal_scanner import ScanSettings, SignalScanner

    width, height = SELF_TEST_SIZE
    center_x, center_y, radius = SELF_TEST_LAMP
    canvas = draw_disk(solid_frame(width, height, (0, 0, 0)), center_x, center_y, radius, (255, 0, 0))
    detector = ScanSignalDetector(
        DistanceEstimator(reference_height_m=0.15, focal_length_px=1000.0, min_diameter_m=0.02),
        scanner=SignalScanner(ScanSettings(step_x=20, step_y=20, max_radius=60)),
    )
    result = detector.detect(frame_from_rgb(canvas))
    if result.signal_state is not SignalState.RED:
        return DiagnosticResult(
            name=name,
            status=DiagnosticStatus.FAIL,
            details=f"Self test expected a red lamp, got {result.signal_state.value}",
        )
    return DiagnosticResult(
        name=name,
        status=DiagnosticStatus.PASS,
        details=f"Self test detected red lamp at {result.distance:.1f}m",
    )
