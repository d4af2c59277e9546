"""Camera calibration constants required before the pipeline may start."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Mapping

from core.errors import CalibrationMissing


_FLOAT_KEYS = (
    "critical_distance_m",
    "min_diameter_m",
    "reference_height_m",
    "focal_length_px",
)
_INT_KEYS = ("history_capacity",)


@dataclass(frozen=True)
class Calibration:
    """Calibration profile for one camera and signal type."""

    critical_distance_m: float
    min_diameter_m: float
    reference_height_m: float
    focal_length_px: float
    history_capacity: int

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Calibration":
        """Build a calibration from the ``calibration`` block.

        Raises:
            CalibrationMissing: if any value is absent, non-numeric, non-finite
                or not strictly positive.
        """

        block = config.get("calibration") if isinstance(config, Mapping) else None
        if not isinstance(block, Mapping):
            raise CalibrationMissing(_FLOAT_KEYS + _INT_KEYS)

        values: dict[str, Any] = {}
        invalid: list[str] = []
        for key in _FLOAT_KEYS:
            value = _positive_float(block.get(key))
            if value is None:
                invalid.append(key)
            else:
                values[key] = value
        for key in _INT_KEYS:
            value = _positive_int(block.get(key))
            if value is None:
                invalid.append(key)
            else:
                values[key] = value

        if invalid:
            raise CalibrationMissing(invalid)
        return cls(**values)


def _positive_float(raw: object) -> float | None:
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0.0:
        return None
    return value


def _positive_int(raw: object) -> int | None:
    value = _positive_float(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)
