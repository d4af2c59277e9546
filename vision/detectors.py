"""Signal detectors turning one camera frame into one detection result."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import numpy as np
from PIL import Image, ImageFilter

from config.calibration import Calibration
from core.errors import ConversionFailed, NoCandidateFound
from core.logging import logger
from vision.color_space import ColorSpaceConverter
from vision.detections import (
    SIGNAL_COLOR_RANGES,
    BoundingBox,
    ColorRange,
    DetectionResult,
    SignalState,
    unknown_result,
)
from vision.distance import DistanceEstimator
from vision.frames import YuvFrame
from vision.hue import in_range, rgb_to_hsv
from vision.region_validator import INNER_RADIUS_FACTOR, disk_pixels
from vision.signal_scanner import ScanSettings, SignalScanner


DETECTOR_MODES = ("scan", "hue")


class Detector(Protocol):
    """Anything that can analyze a frame."""

    def detect(self, frame: YuvFrame) -> DetectionResult:
        """Return the detection for one frame; never raises."""


class _FrameDetector:
    """Shared conversion and failure handling for pixel-based detectors."""

    name = "frame"

    def __init__(
        self,
        estimator: DistanceEstimator,
        converter: ColorSpaceConverter | None = None,
    ) -> None:
        self.estimator = estimator
        self.converter = converter or ColorSpaceConverter()

    def detect(self, frame: YuvFrame) -> DetectionResult:
        try:
            pixels = self.converter.convert(frame)
            return self._analyze(pixels)
        except ConversionFailed as exc:
            logger.warning("[%s] Frame conversion failed: %s", self.name.upper(), exc)
        except NoCandidateFound:
            logger.debug("[%s] No signal found", self.name.upper())
        except Exception as exc:  # noqa: BLE001 - a bad frame must not stop the pipeline
            logger.exception("[%s] Detection error: %s", self.name.upper(), exc)
        return unknown_result()

    def _analyze(self, pixels: np.ndarray) -> DetectionResult:
        raise NotImplementedError


class ScanSignalDetector(_FrameDetector):
    """Strict RGB-threshold grid scan for red lamps."""

    name = "scan"

    def __init__(
        self,
        estimator: DistanceEstimator,
        scanner: SignalScanner | None = None,
        converter: ColorSpaceConverter | None = None,
    ) -> None:
        super().__init__(estimator, converter)
        self.scanner = scanner or SignalScanner()

    def _analyze(self, pixels: np.ndarray) -> DetectionResult:
        best: DetectionResult | None = None
        for candidate in self.scanner.scan(pixels):
            estimate = self.estimator.estimate(candidate.diameter)
            if estimate is None:
                logger.debug(
                    "[SCAN] Rejected candidate at (%s,%s) r=%spx: below minimum diameter",
                    candidate.center_x,
                    candidate.center_y,
                    candidate.radius,
                )
                continue
            result = DetectionResult(
                signal_state=SignalState.RED,
                confidence=candidate.confidence,
                distance=estimate.distance,
                bounding_box=candidate.bounding_box,
            )
            if best is None or result.confidence > best.confidence:
                best = result
        if best is None:
            raise NoCandidateFound("No region passed every validation stage")
        return best


@dataclass(frozen=True)
class HueMatch:
    state: SignalState
    confidence: float
    center_x: int
    center_y: int
    radius: int


class HueSignalDetector(_FrameDetector):
    """HSV colour-range classifier for red, yellow and green lamps.

    The frame is lightly blurred, then the scan grid is swept; at each disk
    every configured colour range is tried. A disk matches when at least 80%
    of its pixels fall in the range, 70% are bright, 90% of the inner disk
    matches and the colour variance clears the floor.
    """

    name = "hue"

    MATCH_MIN = 0.8
    BRIGHT_MIN = 0.7
    BRIGHT_VALUE = 200.0
    CENTER_MATCH_MIN = 0.9
    MAX_RESULTS = 3

    def __init__(
        self,
        estimator: DistanceEstimator,
        settings: ScanSettings | None = None,
        color_ranges: tuple[tuple[SignalState, ColorRange], ...] = SIGNAL_COLOR_RANGES,
        converter: ColorSpaceConverter | None = None,
    ) -> None:
        super().__init__(estimator, converter)
        self.settings = settings or ScanSettings()
        self.color_ranges = color_ranges
        self._grid = SignalScanner(self.settings)

    def detect_all(self, frame: YuvFrame) -> list[DetectionResult]:
        """Return up to ``MAX_RESULTS`` matches, most confident first."""

        try:
            return self._ranked(self.converter.convert(frame))
        except ConversionFailed as exc:
            logger.warning("[HUE] Frame conversion failed: %s", exc)
        except NoCandidateFound:
            logger.debug("[HUE] No signal found")
        return []

    def _analyze(self, pixels: np.ndarray) -> DetectionResult:
        return self._ranked(pixels)[0]

    def _ranked(self, pixels: np.ndarray) -> list[DetectionResult]:
        blurred = np.asarray(Image.fromarray(pixels).filter(ImageFilter.GaussianBlur(radius=1)))
        height, width = blurred.shape[:2]

        results: list[DetectionResult] = []
        for x, y in self._grid.grid(width, height):
            for radius in self.settings.radii():
                match = self._match_region(blurred, x, y, radius)
                if match is None:
                    continue
                estimate = self.estimator.estimate(2.0 * radius)
                if estimate is None:
                    continue
                results.append(
                    DetectionResult(
                        signal_state=match.state,
                        confidence=match.confidence,
                        distance=estimate.distance,
                        bounding_box=BoundingBox.around(x, y, radius),
                    )
                )

        if not results:
            raise NoCandidateFound("No region matched a signal colour range")
        results.sort(key=lambda item: item.confidence, reverse=True)
        top = results[: self.MAX_RESULTS]
        logger.debug("[HUE] %s matches, keeping %s", len(results), len(top))
        return top

    def _match_region(self, pixels: np.ndarray, x: int, y: int, radius: int) -> HueMatch | None:
        samples = disk_pixels(pixels, x, y, radius)
        if len(samples) == 0:
            return None
        hsv = rgb_to_hsv(samples)
        bright = float(np.count_nonzero(hsv[:, 2] > self.BRIGHT_VALUE)) / len(samples)
        if bright < self.BRIGHT_MIN:
            return None

        inner_hsv: np.ndarray | None = None
        variance: float | None = None
        best: HueMatch | None = None
        for state, color_range in self.color_ranges:
            color_match = float(np.count_nonzero(in_range(hsv, color_range))) / len(samples)
            if color_match < self.MATCH_MIN:
                continue

            if inner_hsv is None:
                inner_hsv = rgb_to_hsv(disk_pixels(pixels, x, y, radius * INNER_RADIUS_FACTOR))
            if len(inner_hsv) == 0:
                return None
            center_match = float(np.count_nonzero(in_range(inner_hsv, color_range))) / len(inner_hsv)
            if center_match < self.CENTER_MATCH_MIN:
                continue

            if variance is None:
                variance = float(samples.astype(np.float64).var(axis=0).mean())
            if variance < self.settings.variance_floor:
                return None

            confidence = color_match * 0.6 + bright * 0.3 + 0.1
            if state is SignalState.RED and color_match > 0.4:
                confidence *= 1.2
            confidence = min(1.0, max(0.0, confidence))
            if best is None or confidence > best.confidence:
                best = HueMatch(state, confidence, x, y, radius)
        return best


@dataclass(frozen=True)
class DetectorSettings:
    mode: str = "scan"

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "DetectorSettings":
        detector_cfg = config.get("detector") if isinstance(config, Mapping) else None
        if not isinstance(detector_cfg, Mapping):
            return cls()
        mode = str(detector_cfg.get("mode", "scan")).strip().lower()
        if mode not in DETECTOR_MODES:
            logger.warning("[DETECTOR] Unknown mode %r, using scan", mode)
            mode = "scan"
        return cls(mode=mode)


def build_detector(
    calibration: Calibration,
    config: Mapping[str, Any],
    mode: str | None = None,
) -> _FrameDetector:
    """Create the configured detector variant."""

    selected = mode or DetectorSettings.from_config(config).mode
    estimator = DistanceEstimator.from_calibration(calibration)
    settings = ScanSettings.from_config(config)
    if selected == "hue":
        return HueSignalDetector(estimator, settings=settings)
    if selected != "scan":
        raise ValueError(f"Unknown detector mode: {selected}")
    return ScanSignalDetector(estimator, scanner=SignalScanner(settings))
