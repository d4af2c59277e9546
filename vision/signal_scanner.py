"""Coarse grid sweep that finds circular red lamp candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np

from core.logging import logger
from vision.detections import BoundingBox
from vision.region_validator import DEFAULT_VARIANCE_FLOOR, RegionValidator


@dataclass(frozen=True)
class ScanSettings:
    """Grid and acceptance settings for the scan."""

    step_x: int = 50
    step_y: int = 50
    min_radius: int = 15
    max_radius: int = 80
    radius_step: int = 10
    variance_floor: float = DEFAULT_VARIANCE_FLOOR
    strict: bool = True
    confidence: float = 0.98

    def __post_init__(self) -> None:
        if self.step_x <= 0 or self.step_y <= 0 or self.radius_step <= 0:
            raise ValueError("Scan steps must be positive")
        if not 0 < self.min_radius <= self.max_radius:
            raise ValueError(
                f"Invalid radius band [{self.min_radius}, {self.max_radius}]"
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Scan confidence must be within [0, 1], got {self.confidence}")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "ScanSettings":
        scanner_cfg = config.get("scanner") if isinstance(config, Mapping) else None
        if not isinstance(scanner_cfg, Mapping):
            return cls()
        defaults = cls()
        return cls(
            step_x=int(scanner_cfg.get("step_x", defaults.step_x)),
            step_y=int(scanner_cfg.get("step_y", defaults.step_y)),
            min_radius=int(scanner_cfg.get("min_radius", defaults.min_radius)),
            max_radius=int(scanner_cfg.get("max_radius", defaults.max_radius)),
            radius_step=int(scanner_cfg.get("radius_step", defaults.radius_step)),
            variance_floor=float(scanner_cfg.get("variance_floor", defaults.variance_floor)),
            strict=bool(scanner_cfg.get("strict", defaults.strict)),
            confidence=float(scanner_cfg.get("confidence", defaults.confidence)),
        )

    def radii(self) -> range:
        return range(self.min_radius, self.max_radius + 1, self.radius_step)


@dataclass(frozen=True)
class ScanCandidate:
    """Circular region that passed every validation stage."""

    center_x: int
    center_y: int
    radius: int
    confidence: float

    @property
    def diameter(self) -> float:
        return 2.0 * self.radius

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.around(self.center_x, self.center_y, self.radius)


@dataclass
class ScanStats:
    checked: int = 0
    red: int = 0
    circular: int = 0
    bright: int = 0
    varied: int = 0


class SignalScanner:
    """Sweep a grid of centres and radii over an RGB buffer.

    Checks run cheapest first (redness, circularity, brightness) and stop at
    the first failure; the variance check only runs on survivors and only in
    strict mode.
    """

    def __init__(
        self,
        settings: ScanSettings | None = None,
        validator: RegionValidator | None = None,
    ) -> None:
        self.settings = settings or ScanSettings()
        self.validator = validator or RegionValidator(self.settings.variance_floor)

    def grid(self, width: int, height: int) -> list[tuple[int, int]]:
        """Return the grid centres in scan order (row-major)."""

        margin = self.settings.max_radius
        return [
            (x, y)
            for y in range(margin, height - margin, self.settings.step_y)
            for x in range(margin, width - margin, self.settings.step_x)
        ]

    def scan(self, pixels: np.ndarray) -> list[ScanCandidate]:
        height, width = pixels.shape[:2]
        stats = ScanStats()
        candidates: list[ScanCandidate] = []
        validator = self.validator

        for x, y in self.grid(width, height):
            for radius in self.settings.radii():
                stats.checked += 1
                if not validator.is_red(pixels, x, y, radius):
                    continue
                stats.red += 1
                if not validator.is_circular(pixels, x, y, radius):
                    continue
                stats.circular += 1
                if not validator.is_bright(pixels, x, y, radius):
                    continue
                stats.bright += 1
                if self.settings.strict and not validator.has_variance(pixels, x, y, radius):
                    continue
                stats.varied += 1
                candidates.append(
                    ScanCandidate(
                        center_x=x,
                        center_y=y,
                        radius=radius,
                        confidence=self.settings.confidence,
                    )
                )

        logger.debug(
            "[SCANNER] checked=%s red=%s circular=%s bright=%s accepted=%s",
            stats.checked,
            stats.red,
            stats.circular,
            stats.bright,
            len(candidates),
        )
        return candidates
