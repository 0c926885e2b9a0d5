from __future__ import annotations
from typing import Set

import numpy as np
from PIL import Image as PILImage

from ..models.pixel_buffer import TOP_LEFT
from ..models.render_handles import OffscreenTarget
from ..models.static_image import StaticImage
from .render_backend import RenderBackend


class PillowRasterBackend(RenderBackend):
    """
    2D raster surface for static images (the canvas path).
    Surfaces are transparent RGBA PIL images; readback is top row first.
    """
    native_origin = TOP_LEFT

    def __init__(self, available: bool = True):
        self._available = available
        self._live: Set[int] = set()

    @property
    def live_handle_count(self) -> int:
        return len(self._live)

    def is_available(self) -> bool:
        return self._available

    def create_offscreen_target(self, width: int, height: int) -> OffscreenTarget:
        surface = PILImage.new("RGBA", (width, height), (0, 0, 0, 0))
        target = OffscreenTarget(width=width, height=height, surface=surface)
        self._live.add(target.handle_id)
        return target

    def release_offscreen_target(self, target: OffscreenTarget) -> None:
        if target.surface is not None:
            target.surface.close()
        target.surface = None
        target.released = True
        self._live.discard(target.handle_id)

    def draw_image(self, target: OffscreenTarget, image: StaticImage) -> None:
        """Draw *image* stretched over the whole surface, source-over."""
        src = PILImage.fromarray(np.ascontiguousarray(image.pixels, dtype=np.uint8))
        try:
            if src.size != (target.width, target.height):
                resized = src.resize((target.width, target.height), PILImage.Resampling.BILINEAR)
                src.close()
                src = resized
            target.surface.alpha_composite(src)
        finally:
            src.close()

    def read_pixels(self, target: OffscreenTarget) -> bytes:
        if target.released:
            raise RuntimeError(f"Off-screen target #{target.handle_id} was already released")
        return target.surface.tobytes()
