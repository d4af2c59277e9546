"""Vision package exports."""

from vision.detections import BoundingBox, ColorRange, DetectionResult, SignalState, unknown_result
from vision.frames import FramePlane, YuvFrame

__all__ = [
    "BoundingBox",
    "ColorRange",
    "DetectionResult",
    "FramePlane",
    "SignalState",
    "YuvFrame",
    "unknown_result",
]
