"""Detection value types shared by detectors, the alarm latch and history.

Bounding boxes are expressed in source-frame pixel coordinates as
``(left, top, width, height)``. Distances are meters and always lie in
``[MIN_DISTANCE_M, MAX_DISTANCE_M]``; ``MAX_DISTANCE_M`` doubles as the
"far or unknown" sentinel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import math
from typing import Any, Mapping


MIN_DISTANCE_M = 10.0
MAX_DISTANCE_M = 1000.0


def clamp_distance(distance: float) -> float:
    """Clamp a distance in meters to the supported range."""

    return max(MIN_DISTANCE_M, min(MAX_DISTANCE_M, float(distance)))


class SignalState(str, Enum):
    """Aspect shown by a signal lamp."""

    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: object) -> "SignalState":
        """Parse a persisted tag, accepting ``"red"`` and ``"SignalState.red"``."""

        if not isinstance(tag, str):
            return cls.UNKNOWN
        value = tag.rsplit(".", 1)[-1].strip().lower()
        for state in cls:
            if state.value == value:
                return state
        return cls.UNKNOWN


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box around a detected lamp."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("left", "top", "width", "height"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value < 0.0:
                raise ValueError(f"BoundingBox.{name} must be a non-negative number, got {value}")
            object.__setattr__(self, name, value)

    @classmethod
    def around(cls, center_x: float, center_y: float, radius: float) -> "BoundingBox":
        """Square box of side ``2 * radius`` centred on a point, clipped at zero."""

        left = max(0.0, float(center_x) - radius)
        top = max(0.0, float(center_y) - radius)
        return cls(left=left, top=top, width=2.0 * radius, height=2.0 * radius)

    def to_dict(self) -> dict[str, float]:
        return {
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BoundingBox":
        if not isinstance(payload, Mapping):
            raise TypeError(f"boundingBox must be an object, got {type(payload).__name__}")
        return cls(
            left=float(payload["left"]),
            top=float(payload["top"]),
            width=float(payload["width"]),
            height=float(payload["height"]),
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of analyzing one frame."""

    signal_state: SignalState
    confidence: float
    distance: float
    bounding_box: BoundingBox | None = None
    timestamp: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        confidence = float(self.confidence)
        if not 0.0 <= confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {confidence}")
        distance = float(self.distance)
        if math.isnan(distance):
            raise ValueError("distance must be a number")
        object.__setattr__(self, "signal_state", SignalState(self.signal_state))
        object.__setattr__(self, "confidence", confidence)
        object.__setattr__(self, "distance", clamp_distance(distance))

    @property
    def is_unknown(self) -> bool:
        return self.signal_state is SignalState.UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        """Return the persisted record form."""

        return {
            "signalState": self.signal_state.value,
            "confidence": self.confidence,
            "distance": self.distance,
            "boundingBox": self.bounding_box.to_dict() if self.bounding_box else None,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "DetectionResult":
        if not isinstance(payload, Mapping):
            raise TypeError(f"history record must be an object, got {type(payload).__name__}")
        box_payload = payload.get("boundingBox")
        return cls(
            signal_state=SignalState.from_tag(payload.get("signalState")),
            confidence=float(payload["confidence"]),
            distance=float(payload["distance"]),
            bounding_box=BoundingBox.from_dict(box_payload) if box_payload else None,
            timestamp=datetime.fromisoformat(payload["timestamp"]),
        )


def unknown_result(timestamp: datetime | None = None) -> DetectionResult:
    """Return the "no detection" result: unknown, zero confidence, far sentinel."""

    return DetectionResult(
        signal_state=SignalState.UNKNOWN,
        confidence=0.0,
        distance=MAX_DISTANCE_M,
        timestamp=timestamp if timestamp is not None else _utc_now(),
    )


@dataclass(frozen=True)
class ColorRange:
    """HSV acceptance region; hue in degrees, saturation and value in 0-255."""

    hue_min: float
    hue_max: float
    saturation_min: float
    saturation_max: float
    value_min: float
    value_max: float


RED_LOW_HUE = ColorRange(0.0, 8.0, 200.0, 255.0, 220.0, 255.0)
RED_HIGH_HUE = ColorRange(352.0, 360.0, 200.0, 255.0, 220.0, 255.0)
YELLOW_HUE = ColorRange(40.0, 65.0, 170.0, 255.0, 210.0, 255.0)
GREEN_HUE = ColorRange(95.0, 160.0, 150.0, 255.0, 200.0, 255.0)

SIGNAL_COLOR_RANGES: tuple[tuple[SignalState, ColorRange], ...] = (
    (SignalState.RED, RED_LOW_HUE),
    (SignalState.RED, RED_HIGH_HUE),
    (SignalState.YELLOW, YELLOW_HUE),
    (SignalState.GREEN, GREEN_HUE),
)
