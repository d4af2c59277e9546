"""HSV helpers for hue-based lamp classification."""

from __future__ import annotations

import numpy as np

from vision.detections import ColorRange


def rgb_to_hsv(samples: np.ndarray) -> np.ndarray:
    """Convert ``(N, 3)`` RGB samples to HSV.

    Hue is in degrees ``[0, 360)``; saturation and value are scaled to ``0-255``.
    """

    rgb = np.asarray(samples, dtype=np.float64) / 255.0
    r, g, b = rgb[:, 0], rgb[:, 1], rgb[:, 2]
    maximum = rgb.max(axis=1)
    minimum = rgb.min(axis=1)
    delta = maximum - minimum
    safe_delta = np.where(delta == 0.0, 1.0, delta)

    hue = np.zeros_like(maximum)
    red_max = (maximum == r) & (delta != 0.0)
    green_max = (maximum == g) & (delta != 0.0) & ~red_max
    blue_max = (delta != 0.0) & ~red_max & ~green_max
    hue[red_max] = np.mod((g[red_max] - b[red_max]) / safe_delta[red_max], 6.0)
    hue[green_max] = (b[green_max] - r[green_max]) / safe_delta[green_max] + 2.0
    hue[blue_max] = (r[blue_max] - g[blue_max]) / safe_delta[blue_max] + 4.0
    hue = hue * 60.0
    hue[hue < 0.0] += 360.0

    saturation = np.where(maximum == 0.0, 0.0, delta / np.where(maximum == 0.0, 1.0, maximum))
    return np.stack([hue, saturation * 255.0, maximum * 255.0], axis=1)


def in_range(hsv: np.ndarray, color_range: ColorRange) -> np.ndarray:
    """Boolean mask of HSV samples inside an acceptance region."""

    hue, saturation, value = hsv[:, 0], hsv[:, 1], hsv[:, 2]
    return (
        (hue >= color_range.hue_min)
        & (hue <= color_range.hue_max)
        & (saturation >= color_range.saturation_min)
        & (saturation <= color_range.saturation_max)
        & (value >= color_range.value_min)
        & (value <= color_range.value_max)
    )
