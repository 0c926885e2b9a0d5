from __future__ import annotations
from dataclasses import dataclass
from typing import Union
import numpy as np

from .errors import InvalidDimensions

TOP_LEFT = "top-left"
BOTTOM_LEFT = "bottom-left"

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass
class PixelBuffer:
    """
    Owned RGBA pixels produced by one extraction call.
    Rows are stored in memory order; `origin` says which image row comes first.
    """
    pixels: np.ndarray  # Shape (H, W, 4), dtype uint8, RGBA order.
    origin: str = TOP_LEFT  # TOP_LEFT or BOTTOM_LEFT

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise InvalidDimensions(f"Expected (H, W, 4) pixels, got shape {self.pixels.shape}")
        height, width = self.pixels.shape[:2]
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Pixel buffer must be non-empty, got {width}x{height}")
        if self.origin not in (TOP_LEFT, BOTTOM_LEFT):
            raise ValueError(f"Unknown origin: {self.origin!r}")
        if self.pixels.dtype != np.uint8:
            self.pixels = self.pixels.astype(np.uint8)

    @classmethod
    def from_bytes(cls, data: BytesLike, width: int, height: int, origin: str = TOP_LEFT) -> "PixelBuffer":
        """Copy a flat RGBA byte sequence into a new buffer."""
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"Width and height must be positive, got {width}x{height}")
        expected = width * height * 4
        if len(data) != expected:
            raise InvalidDimensions(
                f"Buffer holds {len(data)} bytes, expected {expected} for {width}x{height} RGBA"
            )
        arr = np.frombuffer(bytes(data), dtype=np.uint8).reshape(height, width, 4).copy()
        return cls(pixels=arr, origin=origin)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[:, :, 3]

    @property
    def data(self) -> bytes:
        return np.ascontiguousarray(self.pixels).tobytes()

    def __len__(self) -> int:
        return self.pixels.size
