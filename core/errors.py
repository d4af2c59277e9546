"""Error taxonomy for the signal detection pipeline."""

from __future__ import annotations

from typing import Iterable


class SignalDetectionError(RuntimeError):
    """Base class for pipeline errors."""


class ConversionFailed(SignalDetectionError):
    """Raised when a frame cannot be converted to an RGB buffer."""


class NoCandidateFound(SignalDetectionError):
    """Raised when a scan finished without any region passing validation."""


class PersistenceFailure(SignalDetectionError):
    """Raised when the detection history cannot be read or written."""


class CalibrationMissing(SignalDetectionError):
    """Raised at startup when calibration constants are absent or invalid."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = tuple(keys)
        super().__init__(f"Missing or invalid calibration values: {', '.join(self.keys)}")
