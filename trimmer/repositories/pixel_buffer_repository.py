from __future__ import annotations
from typing import Tuple

import cv2
import numpy as np

from ..models.pixel_buffer import BOTTOM_LEFT, TOP_LEFT, BytesLike, PixelBuffer
from ..models.trim_rect import TrimRect


class PixelBufferRepository:
    """
    Low-level operations on PixelBuffer entities.
    Everything returning a buffer allocates a new one.
    """

    @staticmethod
    def create_buffer(data: BytesLike, width: int, height: int, origin: str = TOP_LEFT) -> PixelBuffer:
        return PixelBuffer.from_bytes(data, width, height, origin=origin)

    @staticmethod
    def flip_rows(buffer: PixelBuffer) -> PixelBuffer:
        """Reverse row order into a fresh array; the input is left untouched."""
        flipped = cv2.flip(np.ascontiguousarray(buffer.pixels), 0)
        origin = TOP_LEFT if buffer.origin == BOTTOM_LEFT else BOTTOM_LEFT
        return PixelBuffer(pixels=flipped, origin=origin)

    @staticmethod
    def alpha_top_left(buffer: PixelBuffer) -> np.ndarray:
        """(H, W) alpha view with row 0 at the top, whatever the storage origin."""
        alpha = buffer.alpha
        return alpha[::-1] if buffer.origin == BOTTOM_LEFT else alpha

    @staticmethod
    def retrieve_pixel(buffer: PixelBuffer, x: int, y: int) -> Tuple[int, int, int, int]:
        """RGBA at (x, y), origin top-left."""
        if not (0 <= x < buffer.width and 0 <= y < buffer.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {buffer.width}x{buffer.height} buffer")
        row = buffer.height - 1 - y if buffer.origin == BOTTOM_LEFT else y
        r, g, b, a = buffer.pixels[row, x]
        return int(r), int(g), int(b), int(a)

    @staticmethod
    def scan_alpha_bounds(alpha: np.ndarray, threshold: int) -> Tuple[int, int, int, int] | None:
        """
        Bounds of pixels with alpha > threshold as (min_x, min_y, max_x, max_y),
        max exclusive. None when no pixel qualifies.
        """
        mask = alpha > threshold
        rows = np.flatnonzero(mask.any(axis=1))
        if rows.size == 0:
            return None
        cols = np.flatnonzero(mask.any(axis=0))
        return int(cols[0]), int(rows[0]), int(cols[-1]) + 1, int(rows[-1]) + 1

    @classmethod
    def crop(cls, buffer: PixelBuffer, rect: TrimRect) -> PixelBuffer:
        """Copy of the rect region (top-left coordinates); result is top-left."""
        pixels = buffer.pixels[::-1] if buffer.origin == BOTTOM_LEFT else buffer.pixels
        region = pixels[rect.min_y:rect.max_y, rect.min_x:rect.max_x].copy()
        return PixelBuffer(pixels=region, origin=TOP_LEFT)
