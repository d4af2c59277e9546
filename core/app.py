"""Application runtime entry points and lifecycle helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from config.calibration import Calibration
from interaction.alert_hal import AlertOutputBackend, LoggingAlertBackend
from services.alarm_controller import AlarmController, AlarmSettings
from services.alert_effects import AlertEffectLoop
from services.detection_pipeline import DetectionPipeline
from storage.history import DetectionHistory, history_path_from_config
from vision.detections import DetectionResult
from vision.detectors import build_detector
from vision.frames import frame_from_image


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    """Configuration for one command-line run.

    Attributes:
        images: Still images to analyze, in order.
        detector_mode: Optional detector override (``scan`` or ``hue``).
        show_history: Print the persisted history after analysis.
        alarms_only: Restrict the printed history to alarm events.
        clear_history: Empty the history before anything else.
    """

    images: list[Path] = field(default_factory=list)
    detector_mode: str | None = None
    show_history: bool = False
    alarms_only: bool = False
    clear_history: bool = False


@dataclass
class Runtime:
    """Explicitly owned pipeline components."""

    calibration: Calibration
    alarm: AlarmController
    alert_effects: AlertEffectLoop
    history: DetectionHistory
    pipeline: DetectionPipeline

    def shutdown(self) -> None:
        self.pipeline.stop()
        self.alert_effects.stop()
        self.alarm.unregister_edge_handler(self.alert_effects.handle_edge)


def build_runtime(
    config: Mapping[str, Any],
    *,
    detector_mode: str | None = None,
    alert_backend: AlertOutputBackend | None = None,
    history_path: Path | None = None,
) -> Runtime:
    """Wire the detector, alarm latch, alert loop and history together.

    Raises:
        CalibrationMissing: if the calibration block is incomplete.
    """

    calibration = Calibration.from_config(config)
    detector = build_detector(calibration, config, mode=detector_mode)

    alarm_settings = AlarmSettings.from_config(config, calibration.critical_distance_m)
    alarm = AlarmController(alarm_settings)
    alert_effects = AlertEffectLoop(
        alert_backend or LoggingAlertBackend(),
        pulse_period_s=alarm_settings.pulse_period_s,
    )
    alarm.register_edge_handler(alert_effects.handle_edge)

    history = DetectionHistory(
        history_path or history_path_from_config(config),
        capacity=calibration.history_capacity,
        alarm_distance_m=calibration.critical_distance_m,
    )
    pipeline = DetectionPipeline(detector, alarm, history)
    LOGGER.info(
        "Runtime ready (detector=%s, critical=%.1fm, history=%s)",
        getattr(detector, "name", type(detector).__name__),
        calibration.critical_distance_m,
        history.path,
    )
    return Runtime(
        calibration=calibration,
        alarm=alarm,
        alert_effects=alert_effects,
        history=history,
        pipeline=pipeline,
    )


def format_result(result: DetectionResult) -> str:
    box = result.bounding_box
    where = f" box=({box.left:.0f},{box.top:.0f},{box.width:.0f},{box.height:.0f})" if box else ""
    return (
        f"{result.timestamp.isoformat()} {result.signal_state.value:<7} "
        f"conf={result.confidence:.2f} dist={result.distance:.1f}m{where}"
    )


def analyze_images(runtime: Runtime, images: Sequence[Path]) -> list[DetectionResult]:
    """Push still images through the pipeline in order."""

    results: list[DetectionResult] = []
    runtime.pipeline.start()
    for image_path in images:
        try:
            frame = frame_from_image(image_path)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Skipping unreadable image %s: %s", image_path, exc)
            continue
        result = runtime.pipeline.submit(frame)
        if result is None:
            continue
        results.append(result)
        print(f"{image_path}: {format_result(result)} alarm={runtime.alarm.state.value}")
    return results


def print_history(history: DetectionHistory, alarms_only: bool = False) -> None:
    entries = history.alarmed_detections() if alarms_only else history.history()
    stats = history.stats()
    print(f"Total: {stats.total}  Red: {stats.red_signals}  Alarms: {stats.alarms}")
    if not entries:
        print("No alarm events recorded" if alarms_only else "No detections recorded")
        return
    for entry in entries:
        print(format_result(entry))


def run(app_config: AppConfig, config: Mapping[str, Any]) -> int:
    """Run the application with the provided configuration.

    Args:
        app_config: Command-line options.
        config: Loaded YAML configuration.

    Returns:
        Process exit code (0 for success).
    """

    runtime = build_runtime(config, detector_mode=app_config.detector_mode)
    try:
        if app_config.clear_history:
            runtime.history.clear()
        if app_config.images:
            analyze_images(runtime, app_config.images)
        if app_config.show_history:
            print_history(runtime.history, alarms_only=app_config.alarms_only)
    finally:
        runtime.shutdown()
    return 0
