"""Planar 4:2:0 frame containers and helpers to build them from images."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image


@dataclass(frozen=True)
class FramePlane:
    """One color plane: raw bytes plus its own row and pixel strides."""

    data: bytes
    row_stride: int
    pixel_stride: int = 1

    def as_array(self) -> np.ndarray:
        return np.frombuffer(self.data, dtype=np.uint8)


@dataclass(frozen=True)
class YuvFrame:
    """Camera frame in YUV 4:2:0 layout.

    Three planes are fully planar (Y, U, V). Two planes are semi-planar, with
    the second plane carrying interleaved U/V samples (NV12 order) and a pixel
    stride of 2.
    """

    width: int
    height: int
    planes: tuple[FramePlane, ...]

    @property
    def is_semi_planar(self) -> bool:
        return len(self.planes) == 2


def _plane_bytes(samples: np.ndarray) -> FramePlane:
    contiguous = np.ascontiguousarray(samples, dtype=np.uint8)
    return FramePlane(data=contiguous.tobytes(), row_stride=int(contiguous.shape[1]))


def frame_from_rgb(rgb: Any) -> YuvFrame:
    """Encode an ``(H, W, 3)`` RGB array as a planar 4:2:0 frame.

    Chroma planes keep the top-left sample of each 2x2 block.
    """

    array = np.asarray(rgb, dtype=np.uint8)
    if array.ndim != 3 or array.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) RGB array, got shape {array.shape}")
    height, width = array.shape[:2]
    ycbcr = np.asarray(Image.fromarray(array).convert("YCbCr"))
    luma = ycbcr[:, :, 0]
    chroma_u = ycbcr[::2, ::2, 1]
    chroma_v = ycbcr[::2, ::2, 2]
    return YuvFrame(
        width=int(width),
        height=int(height),
        planes=(_plane_bytes(luma), _plane_bytes(chroma_u), _plane_bytes(chroma_v)),
    )


def frame_from_image(path: Path) -> YuvFrame:
    """Load an image file and encode it as a planar 4:2:0 frame."""

    with Image.open(path) as image:
        rgb = np.asarray(image.convert("RGB"))
    return frame_from_rgb(rgb)


def solid_frame(width: int, height: int, color: tuple[int, int, int]) -> np.ndarray:
    """Return an RGB array filled with one color."""

    canvas = np.zeros((height, width, 3), dtype=np.uint8)
    canvas[:, :] = color
    return canvas


def draw_disk(
    canvas: np.ndarray,
    center_x: int,
    center_y: int,
    radius: int,
    color: tuple[int, int, int],
) -> np.ndarray:
    """Paint a filled disk onto an RGB array in place and return it."""

    height, width = canvas.shape[:2]
    ys, xs = np.ogrid[:height, :width]
    mask = (xs - center_x) ** 2 + (ys - center_y) ** 2 <= radius * radius
    canvas[mask] = color
    return canvas
