"""Tests for detection value types."""

from __future__ import annotations

from datetime import datetime, timezone
import math

import pytest

from vision.detections import BoundingBox, DetectionResult, SignalState, unknown_result


def test_result_clamps_distance() -> None:
    assert DetectionResult(SignalState.RED, 0.9, 2.0).distance == 10.0
    assert DetectionResult(SignalState.RED, 0.9, 5000.0).distance == 1000.0
    assert DetectionResult(SignalState.RED, 0.9, math.inf).distance == 1000.0


@pytest.mark.parametrize("confidence", [-0.1, 1.01])
def test_result_rejects_confidence_out_of_range(confidence: float) -> None:
    with pytest.raises(ValueError):
        DetectionResult(SignalState.RED, confidence, 50.0)


def test_result_rejects_nan_distance() -> None:
    with pytest.raises(ValueError):
        DetectionResult(SignalState.RED, 0.5, math.nan)


def test_unknown_result() -> None:
    result = unknown_result()

    assert result.is_unknown
    assert result.confidence == 0.0
    assert result.distance == 1000.0
    assert result.bounding_box is None
    assert result.timestamp.tzinfo is not None


def test_record_form_uses_camel_case_keys() -> None:
    stamp = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
    result = DetectionResult(
        SignalState.RED,
        0.98,
        42.0,
        bounding_box=BoundingBox(235, 185, 90, 90),
        timestamp=stamp,
    )

    record = result.to_dict()

    assert record == {
        "signalState": "red",
        "confidence": 0.98,
        "distance": 42.0,
        "boundingBox": {"left": 235.0, "top": 185.0, "width": 90.0, "height": 90.0},
        "timestamp": "2024-05-01T12:30:00+00:00",
    }
    assert DetectionResult.from_dict(record) == result


def test_from_dict_accepts_legacy_tags() -> None:
    record = {
        "signalState": "SignalState.red",
        "confidence": 0.9,
        "distance": 30.0,
        "boundingBox": None,
        "timestamp": "2024-05-01T12:30:00+00:00",
    }

    assert DetectionResult.from_dict(record).signal_state is SignalState.RED


@pytest.mark.parametrize(
    "tag, expected",
    [
        ("green", SignalState.GREEN),
        ("SignalState.yellow", SignalState.YELLOW),
        ("blue", SignalState.UNKNOWN),
        (None, SignalState.UNKNOWN),
    ],
)
def test_from_tag(tag, expected) -> None:
    assert SignalState.from_tag(tag) is expected


def test_bounding_box_validation() -> None:
    with pytest.raises(ValueError):
        BoundingBox(-1, 0, 10, 10)
    with pytest.raises(ValueError):
        BoundingBox(0, 0, math.nan, 10)


def test_bounding_box_around_clips_at_origin() -> None:
    box = BoundingBox.around(10, 100, 15)

    assert (box.left, box.top, box.width, box.height) == (0.0, 85.0, 30.0, 30.0)
