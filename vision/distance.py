"""Pinhole-camera distance and real-size estimation."""

from __future__ import annotations

from dataclasses import dataclass

from vision.detections import MAX_DISTANCE_M, clamp_distance


@dataclass(frozen=True)
class DistanceEstimate:
    distance: float
    real_diameter: float


class DistanceEstimator:
    """Convert observed pixel sizes into meters for one calibrated camera."""

    def __init__(
        self,
        reference_height_m: float,
        focal_length_px: float,
        min_diameter_m: float,
    ) -> None:
        self.reference_height_m = float(reference_height_m)
        self.focal_length_px = float(focal_length_px)
        self.min_diameter_m = float(min_diameter_m)

    @classmethod
    def from_calibration(cls, calibration) -> "DistanceEstimator":
        return cls(
            reference_height_m=calibration.reference_height_m,
            focal_length_px=calibration.focal_length_px,
            min_diameter_m=calibration.min_diameter_m,
        )

    def distance(self, pixel_height: float) -> float:
        """Distance in meters, clamped; non-positive sizes map to the far sentinel."""

        if pixel_height <= 0:
            return MAX_DISTANCE_M
        return clamp_distance(self.reference_height_m * self.focal_length_px / pixel_height)

    def real_diameter(self, pixel_diameter: float, distance: float | None = None) -> float:
        if distance is None:
            distance = self.distance(pixel_diameter)
        return pixel_diameter * distance / self.focal_length_px

    def estimate(self, pixel_diameter: float) -> DistanceEstimate | None:
        """Return distance and size, or ``None`` when the lamp is below the minimum size."""

        distance = self.distance(pixel_diameter)
        real_diameter = self.real_diameter(pixel_diameter, distance)
        if real_diameter < self.min_diameter_m:
            return None
        return DistanceEstimate(distance=distance, real_diameter=real_diameter)
