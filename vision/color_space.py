"""YUV 4:2:0 to RGB conversion for camera frames."""

from __future__ import annotations

import numpy as np

from core.errors import ConversionFailed
from vision.frames import FramePlane, YuvFrame


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.where(values >= 0.0, np.floor(values + 0.5), np.ceil(values - 0.5))


def _to_channel(values: np.ndarray) -> np.ndarray:
    return np.clip(_round_half_away(values), 0, 255).astype(np.uint8)


class ColorSpaceConverter:
    """Convert planar or semi-planar 4:2:0 frames to a dense RGB buffer.

    The output is an ``(height, width, 3)`` ``uint8`` array at luma
    resolution. Chroma is sampled at ``(x // 2, y // 2)`` using each chroma
    plane's own strides. Pixels whose sample index falls outside a plane are
    left black instead of failing the frame.
    """

    def convert(self, frame: YuvFrame) -> np.ndarray:
        self._validate(frame)
        width = frame.width
        height = frame.height

        luma_plane = frame.planes[0]
        luma = luma_plane.as_array()
        ys, xs = np.mgrid[0:height, 0:width]
        luma_index = ys * luma_plane.row_stride + xs * luma_plane.pixel_stride

        half_y = ys // 2
        half_x = xs // 2
        if frame.is_semi_planar:
            uv_plane = frame.planes[1]
            chroma_u = chroma_v = uv_plane.as_array()
            u_index = half_y * uv_plane.row_stride + half_x * uv_plane.pixel_stride
            v_index = u_index + 1
        else:
            u_plane, v_plane = frame.planes[1], frame.planes[2]
            chroma_u = u_plane.as_array()
            chroma_v = v_plane.as_array()
            u_index = half_y * u_plane.row_stride + half_x * u_plane.pixel_stride
            v_index = half_y * v_plane.row_stride + half_x * v_plane.pixel_stride

        valid = (
            (luma_index < luma.size)
            & (u_index < chroma_u.size)
            & (v_index < chroma_v.size)
        )

        y_values = luma[luma_index[valid]].astype(np.float64)
        u_values = chroma_u[u_index[valid]].astype(np.float64)
        v_values = chroma_v[v_index[valid]].astype(np.float64)

        red = y_values + v_values * 1436.0 / 1024.0 - 179.0
        green = (
            y_values
            - u_values * 46549.0 / 131072.0
            + 44.0
            - v_values * 93604.0 / 131072.0
            + 91.0
        )
        blue = y_values + u_values * 1814.0 / 1024.0 - 227.0

        rgb = np.zeros((height, width, 3), dtype=np.uint8)
        rgb[valid] = np.stack(
            [_to_channel(red), _to_channel(green), _to_channel(blue)],
            axis=-1,
        )
        return rgb

    @staticmethod
    def _validate(frame: YuvFrame) -> None:
        if frame.width <= 0 or frame.height <= 0:
            raise ConversionFailed(f"Frame has no pixels ({frame.width}x{frame.height})")
        if len(frame.planes) not in (2, 3):
            raise ConversionFailed(f"Expected 2 or 3 planes, got {len(frame.planes)}")
        for index, plane in enumerate(frame.planes):
            if not isinstance(plane, FramePlane) or not plane.data:
                raise ConversionFailed(f"Plane {index} is missing or empty")
            if plane.row_stride <= 0 or plane.pixel_stride <= 0:
                raise ConversionFailed(
                    f"Plane {index} has invalid strides "
                    f"(row={plane.row_stride}, pixel={plane.pixel_stride})"
                )
