"""Checks applied to a circular pixel region of an RGB buffer.

Every check is a pure function of the buffer and the disk geometry. Disks are
the pixels with ``dx*dx + dy*dy <= r*r`` around the centre, clipped to the
buffer bounds; an empty disk yields ratios of zero.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np


RED_MIN = 180
RED_MAX_OTHER = 100
RED_DOMINANCE = 80
STRONG_RED_MIN = 200
STRONG_RED_MAX_OTHER = 80
RED_RATIO_MIN = 0.6
STRONG_RED_RATIO_MIN = 0.3

INNER_RADIUS_FACTOR = 0.6
INNER_RED_MIN = 160
INNER_RED_MAX_OTHER = 120
INNER_RED_RATIO_MIN = 0.5

BRIGHT_RED_MIN = 180
BRIGHT_MEAN_MIN = 120
BRIGHT_RATIO_MIN = 0.4
BRIGHT_MEAN_RATIO_MIN = 0.6

DEFAULT_VARIANCE_FLOOR = 300.0


def _round_half_away(value: float) -> int:
    return int(math.floor(value + 0.5)) if value >= 0 else -int(math.floor(-value + 0.5))


def disk_pixels(pixels: np.ndarray, center_x: int, center_y: int, radius: float) -> np.ndarray:
    """Return the ``(N, 3)`` int32 samples inside a disk, clipped to the buffer."""

    height, width = pixels.shape[:2]
    reach = _round_half_away(radius)
    x0 = max(center_x - reach, 0)
    x1 = min(center_x + reach + 1, width)
    y0 = max(center_y - reach, 0)
    y1 = min(center_y + reach + 1, height)
    if x0 >= x1 or y0 >= y1:
        return np.empty((0, 3), dtype=np.int32)

    dy, dx = np.ogrid[y0 - center_y:y1 - center_y, x0 - center_x:x1 - center_x]
    mask = dx * dx + dy * dy <= radius * radius
    return pixels[y0:y1, x0:x1][mask].astype(np.int32)


def _ratio(matches: np.ndarray, total: int) -> float:
    return float(np.count_nonzero(matches)) / total if total else 0.0


@dataclass(frozen=True)
class RedRatios:
    red: float
    strong_red: float


@dataclass(frozen=True)
class BrightnessRatios:
    bright: float
    mean_bright: float


class RegionValidator:
    """Colour purity, shape, brightness and variance checks for lamp candidates."""

    def __init__(self, variance_floor: float = DEFAULT_VARIANCE_FLOOR) -> None:
        self.variance_floor = float(variance_floor)

    # ------------------------------------------------------------ redness
    def red_ratios(self, pixels: np.ndarray, center_x: int, center_y: int, radius: int) -> RedRatios:
        samples = disk_pixels(pixels, center_x, center_y, radius)
        r, g, b = samples[:, 0], samples[:, 1], samples[:, 2]
        red = (
            (r >= RED_MIN)
            & (g <= RED_MAX_OTHER)
            & (b <= RED_MAX_OTHER)
            & (r >= g + RED_DOMINANCE)
            & (r >= b + RED_DOMINANCE)
        )
        strong = (r >= STRONG_RED_MIN) & (g <= STRONG_RED_MAX_OTHER) & (b <= STRONG_RED_MAX_OTHER)
        total = len(samples)
        return RedRatios(red=_ratio(red, total), strong_red=_ratio(strong, total))

    def is_red(self, pixels: np.ndarray, center_x: int, center_y: int, radius: int) -> bool:
        ratios = self.red_ratios(pixels, center_x, center_y, radius)
        return ratios.red >= RED_RATIO_MIN or ratios.strong_red >= STRONG_RED_RATIO_MIN

    # -------------------------------------------------------- circularity
    def inner_red_ratio(self, pixels: np.ndarray, center_x: int, center_y: int, radius: int) -> float:
        """Share of reddish pixels in the inner disk of radius ``0.6 * radius``."""

        samples = disk_pixels(pixels, center_x, center_y, radius * INNER_RADIUS_FACTOR)
        r, g, b = samples[:, 0], samples[:, 1], samples[:, 2]
        reddish = (
            (r >= INNER_RED_MIN)
            & (g <= INNER_RED_MAX_OTHER)
            & (b <= INNER_RED_MAX_OTHER)
            & (r > g)
            & (r > b)
        )
        return _ratio(reddish, len(samples))

    def is_circular(self, pixels: np.ndarray, center_x: int, center_y: int, radius: int) -> bool:
        # A lamp concentrates colour toward its centre; large red surfaces do not.
        return self.inner_red_ratio(pixels, center_x, center_y, radius) >= INNER_RED_RATIO_MIN

    # --------------------------------------------------------- brightness
    def brightness_ratios(
        self, pixels: np.ndarray, center_x: int, center_y: int, radius: int
    ) -> BrightnessRatios:
        samples = disk_pixels(pixels, center_x, center_y, radius)
        total = len(samples)
        bright = samples[:, 0] >= BRIGHT_RED_MIN
        mean_bright = samples.sum(axis=1) >= BRIGHT_MEAN_MIN * 3
        return BrightnessRatios(bright=_ratio(bright, total), mean_bright=_ratio(mean_bright, total))

    def is_bright(self, pixels: np.ndarray, center_x: int, center_y: int, radius: int) -> bool:
        ratios = self.brightness_ratios(pixels, center_x, center_y, radius)
        return ratios.bright >= BRIGHT_RATIO_MIN or ratios.mean_bright >= BRIGHT_MEAN_RATIO_MIN

    # ----------------------------------------------------------- variance
    def color_variance(self, pixels: np.ndarray, center_x: int, center_y: int, radius: int) -> float:
        """Mean of the per-channel population variances over the disk."""

        samples = disk_pixels(pixels, center_x, center_y, radius)
        if len(samples) == 0:
            return 0.0
        return float(samples.astype(np.float64).var(axis=0).mean())

    def has_variance(self, pixels: np.ndarray, center_x: int, center_y: int, radius: int) -> bool:
        return self.color_variance(pixels, center_x, center_y, radius) >= self.variance_floor
