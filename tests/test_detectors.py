"""End-to-end detector tests on synthetic frames."""

from __future__ import annotations

import pytest

from config.calibration import Calibration
from vision.detections import SignalState
from vision.detectors import HueSignalDetector, ScanSignalDetector, build_detector
from vision.distance import DistanceEstimator
from vision.frames import FramePlane, YuvFrame, draw_disk, frame_from_rgb, solid_frame


def _estimator(min_diameter_m: float = 0.02) -> DistanceEstimator:
    return DistanceEstimator(reference_height_m=0.15, focal_length_px=1000.0, min_diameter_m=min_diameter_m)


def _calibration() -> Calibration:
    return Calibration(
        critical_distance_m=100.0,
        min_diameter_m=0.02,
        reference_height_m=0.15,
        focal_length_px=1000.0,
        history_capacity=1000,
    )


def _lamp_frame(color, radius: int = 40, background=(0, 0, 0)) -> YuvFrame:
    canvas = draw_disk(solid_frame(640, 480, background), 280, 230, radius, color)
    return frame_from_rgb(canvas)


def test_scan_detects_close_red_lamp() -> None:
    result = ScanSignalDetector(_estimator()).detect(_lamp_frame((255, 0, 0)))

    assert result.signal_state is SignalState.RED
    assert result.confidence == pytest.approx(0.98)
    assert result.distance == 10.0
    box = result.bounding_box
    assert (box.left, box.top, box.width, box.height) == (235.0, 185.0, 90.0, 90.0)


def test_scan_detects_red_lamp_on_gray_background() -> None:
    result = ScanSignalDetector(_estimator()).detect(_lamp_frame((255, 0, 0), background=(128, 128, 128)))

    assert result.signal_state is SignalState.RED


def test_scan_returns_unknown_for_gray_frame() -> None:
    result = ScanSignalDetector(_estimator()).detect(frame_from_rgb(solid_frame(640, 480, (128, 128, 128))))

    assert result.is_unknown
    assert result.confidence == 0.0
    assert result.distance == 1000.0


def test_scan_ignores_green_lamp() -> None:
    result = ScanSignalDetector(_estimator()).detect(_lamp_frame((0, 255, 100)))

    assert result.is_unknown


def test_scan_drops_candidates_below_minimum_diameter() -> None:
    detector = ScanSignalDetector(_estimator(min_diameter_m=5.0))

    assert detector.detect(_lamp_frame((255, 0, 0))).is_unknown


def test_malformed_frame_maps_to_unknown() -> None:
    frame = YuvFrame(width=4, height=4, planes=(FramePlane(b"\x00" * 16, row_stride=4),))

    assert ScanSignalDetector(_estimator()).detect(frame).is_unknown


def test_hue_detects_green_lamp() -> None:
    result = HueSignalDetector(_estimator()).detect(_lamp_frame((0, 255, 100), radius=43))

    assert result.signal_state is SignalState.GREEN
    assert 0.8 < result.confidence <= 1.0
    assert result.distance == 10.0
    box = result.bounding_box
    assert (box.left, box.top) == (235.0, 185.0)


def test_hue_boosts_red_confidence() -> None:
    result = HueSignalDetector(_estimator()).detect(_lamp_frame((255, 0, 0), radius=43))

    assert result.signal_state is SignalState.RED
    assert result.confidence > 0.9


def test_hue_returns_unknown_without_lamp() -> None:
    result = HueSignalDetector(_estimator()).detect(frame_from_rgb(solid_frame(640, 480, (20, 20, 20))))

    assert result.is_unknown


def test_build_detector_selects_mode() -> None:
    calibration = _calibration()

    assert isinstance(build_detector(calibration, {}), ScanSignalDetector)
    assert isinstance(build_detector(calibration, {"detector": {"mode": "hue"}}), HueSignalDetector)
    assert isinstance(build_detector(calibration, {"detector": {"mode": "hue"}}, mode="scan"), ScanSignalDetector)
    with pytest.raises(ValueError):
        build_detector(calibration, {}, mode="neural")


def test_hue_detect_all_ranks_lamps() -> None:
    canvas = solid_frame(640, 480, (0, 0, 0))
    draw_disk(canvas, 130, 130, 43, (0, 255, 100))
    draw_disk(canvas, 430, 330, 43, (255, 0, 0))

    results = HueSignalDetector(_estimator()).detect_all(frame_from_rgb(canvas))

    assert [result.signal_state for result in results] == [SignalState.RED, SignalState.GREEN]
    assert results[0].confidence >= results[1].confidence


def test_hue_detect_all_keeps_three_best() -> None:
    canvas = solid_frame(640, 480, (0, 0, 0))
    for center in ((130, 130), (330, 130), (130, 330)):
        draw_disk(canvas, center[0], center[1], 43, (255, 0, 0))
    draw_disk(canvas, 430, 330, 43, (0, 255, 100))

    results = HueSignalDetector(_estimator()).detect_all(frame_from_rgb(canvas))

    assert len(results) == HueSignalDetector.MAX_RESULTS
    assert all(result.signal_state is SignalState.RED for result in results)


def test_hue_detect_all_is_empty_without_lamp() -> None:
    frame = frame_from_rgb(solid_frame(640, 480, (20, 20, 20)))

    assert HueSignalDetector(_estimator()).detect_all(frame) == []
