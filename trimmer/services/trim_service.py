from __future__ import annotations
import logging
import os
from typing import Union

import numpy as np
from dotenv import load_dotenv

from ..models.errors import EmptyTrimError, InvalidDimensions
from ..models.pixel_buffer import PixelBuffer
from ..models.trim_rect import EMPTY_RECT, TrimRect, TrimResult
from ..repositories.pixel_buffer_repository import PixelBufferRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

BufferInput = Union[PixelBuffer, bytes, bytearray, memoryview, np.ndarray]


class TrimService:
    """
    Bounding-box trimmer. Pure: no rendering, no I/O.
    """

    def __init__(self, default_threshold: int | None = None):
        if default_threshold is None:
            default_threshold = int(os.getenv("TRIM_ALPHA_THRESHOLD", "0"))
        self.default_threshold = self._check_threshold(default_threshold)
        self.buffer_repository = PixelBufferRepository()

    @staticmethod
    def _check_threshold(alpha_threshold) -> int:
        if not 0 <= alpha_threshold < 255:
            raise ValueError(f"Alpha threshold must be in [0, 255), got {alpha_threshold}")
        return alpha_threshold

    def _as_buffer(self, buffer: BufferInput, width: int, height: int) -> PixelBuffer:
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Width and height must be positive, got {width}x{height}")

        if isinstance(buffer, PixelBuffer):
            pixel_buffer = buffer
        elif isinstance(buffer, np.ndarray) and buffer.ndim == 3:
            pixel_buffer = PixelBuffer(pixels=buffer)
        else:
            data = buffer.tobytes() if isinstance(buffer, np.ndarray) else buffer
            return self.buffer_repository.create_buffer(data, width, height)

        if (pixel_buffer.width, pixel_buffer.height) != (width, height):
            raise InvalidDimensions(
                f"Buffer is {pixel_buffer.width}x{pixel_buffer.height}, caller declared {width}x{height}"
            )
        return pixel_buffer

    def compute_trim(
        self,
        buffer: BufferInput,
        width: int,
        height: int,
        alpha_threshold: int | None = None,
    ) -> TrimResult:
        """
        Smallest rectangle holding every pixel with alpha > alpha_threshold.

        Args:
            buffer: RGBA pixels (PixelBuffer, raw bytes or ndarray).
            width, height: Declared size of the buffer.
            alpha_threshold: Defaults to the service threshold (0 -> any alpha counts).

        Returns:
            TrimResult(rect, had_content). A fully transparent buffer gives
            (EMPTY_RECT, False) instead of raising.
        """
        threshold = self.default_threshold if alpha_threshold is None else self._check_threshold(alpha_threshold)
        pixel_buffer = self._as_buffer(buffer, width, height)

        alpha = self.buffer_repository.alpha_top_left(pixel_buffer)
        bounds = self.buffer_repository.scan_alpha_bounds(alpha, threshold)
        if bounds is None:
            logger.debug("No pixel above alpha %d in %dx%d buffer", threshold, width, height)
            return TrimResult(EMPTY_RECT, False)

        return TrimResult(TrimRect(*bounds), True)

    def crop_to_trim(self, buffer: PixelBuffer, rect: TrimRect) -> PixelBuffer:
        """New top-left buffer holding only the trimmed region."""
        if rect.is_empty:
            raise EmptyTrimError("Cannot crop to a zero-area rectangle")
        if rect.min_x < 0 or rect.min_y < 0 or rect.max_x > buffer.width or rect.max_y > buffer.height:
            raise InvalidDimensions(f"{rect} lies outside the {buffer.width}x{buffer.height} buffer")
        return self.buffer_repository.crop(buffer, rect)
