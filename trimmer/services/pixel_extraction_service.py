from __future__ import annotations
import logging
import math
import time
from typing import Tuple, Union

from ..models.errors import CapabilityUnavailable, InvalidDimensions, RasterizationFailed, TrimmerError
from ..models.pixel_buffer import BOTTOM_LEFT, PixelBuffer
from ..models.scene_node import SceneNode
from ..models.static_image import StaticImage
from ..repositories.pillow_raster_backend import PillowRasterBackend
from ..repositories.pixel_buffer_repository import PixelBufferRepository
from ..repositories.render_backend import RenderBackend, offscreen_target, transient_camera
from ..repositories.software_scene_backend import SoftwareSceneBackend

logger = logging.getLogger(__name__)

VisualSource = Union[SceneNode, StaticImage]


class PixelExtractionService:
    """
    Rasterizes a visual off-screen and hands back an owned RGBA buffer.

    • Scene nodes go through `scene_backend` (camera + render target).
    • Static images go through `raster_backend` (2D surface).
    • Temporary targets/cameras never outlive a call.
    """

    def __init__(
        self,
        scene_backend: RenderBackend | None = None,
        raster_backend: RenderBackend | None = None,
    ):
        self.scene_backend = scene_backend or SoftwareSceneBackend()
        self.raster_backend = raster_backend or PillowRasterBackend()
        self.buffer_repository = PixelBufferRepository()

    def backend_for(self, source: VisualSource) -> RenderBackend:
        if isinstance(source, SceneNode):
            return self.scene_backend
        if isinstance(source, StaticImage):
            return self.raster_backend
        raise TypeError(f"Unsupported visual source: {type(source).__name__}")

    def is_available(self, source: VisualSource) -> bool:
        """Capability check; call before extracting if you need to branch early."""
        return self.backend_for(source).is_available()

    @staticmethod
    def nominal_size(source: VisualSource, width=None, height=None) -> Tuple[int, int]:
        """Requested (or source) size, floored. Raises InvalidDimensions when not positive."""
        width = source.width if width is None else width
        height = source.height if height is None else height
        w, h = math.floor(width), math.floor(height)
        if w <= 0 or h <= 0:
            raise InvalidDimensions(f"Cannot extract pixels at {width}x{height}")
        return w, h

    def rasterize_to_buffer(self, source: VisualSource, width: int, height: int) -> bytes | None:
        """
        Raw RGBA readback in the backend's native row order,
        or None when the backend cannot rasterize.
        """
        backend = self.backend_for(source)
        if not backend.is_available():
            logger.warning("%s cannot rasterize off-screen in this host", type(backend).__name__)
            return None

        try:
            if isinstance(source, SceneNode):
                data = self._rasterize_node(backend, source, width, height)
            else:
                data = self._rasterize_image(backend, source, width, height)
        except TrimmerError:
            raise
        except Exception as err:
            raise RasterizationFailed(
                f"{type(backend).__name__} failed to rasterize {width}x{height} visual: {err}"
            ) from err

        expected = width * height * 4
        if len(data) != expected:
            raise RasterizationFailed(
                f"{type(backend).__name__} read back {len(data)} bytes, expected {expected} for {width}x{height} RGBA"
            )
        return data

    def extract_pixels(
        self,
        source: VisualSource,
        width: float | None = None,
        height: float | None = None,
        flip_vertically: bool = True,
    ) -> PixelBuffer | None:
        """
        Args:
            source: SceneNode or StaticImage to rasterize. Not modified.
            width, height: Output size; defaults to the source's size. Floored.
            flip_vertically: Return rows top-first. A bottom-left readback is
                reversed into a new buffer; False keeps the native row order.

        Returns:
            PixelBuffer, or None when the host cannot rasterize (degraded mode).

        Raises:
            InvalidDimensions: non-positive size.
            RasterizationFailed: the backend failed; temporaries were released.
        """
        if isinstance(source, SceneNode) and not source.is_valid:
            raise ValueError("Cannot extract pixels from a destroyed node")
        w, h = self.nominal_size(source, width, height)

        started = time.perf_counter()
        data = self.rasterize_to_buffer(source, w, h)
        if data is None:
            return None

        backend = self.backend_for(source)
        buffer = self.buffer_repository.create_buffer(data, w, h, origin=backend.native_origin)
        if flip_vertically and buffer.origin == BOTTOM_LEFT:
            buffer = self.buffer_repository.flip_rows(buffer)

        logger.debug("Extracted %dx%d pixels in %.2f ms", w, h, (time.perf_counter() - started) * 1000)
        return buffer

    def require_pixels(self, source: VisualSource, width=None, height=None,
                       flip_vertically: bool = True) -> PixelBuffer:
        """Like extract_pixels, but unavailability raises CapabilityUnavailable."""
        buffer = self.extract_pixels(source, width, height, flip_vertically=flip_vertically)
        if buffer is None:
            raise CapabilityUnavailable(
                f"{type(self.backend_for(source)).__name__} cannot rasterize off-screen"
            )
        return buffer

    # ---------- private helpers ----------
    @staticmethod
    def _rasterize_node(backend: RenderBackend, node: SceneNode, width: int, height: int) -> bytes:
        # zoom so that the node's own height spans the whole target
        node_height = math.floor(node.height)
        if node_height <= 0:
            raise InvalidDimensions(f"Cannot frame a node of height {node.height}")
        zoom_ratio = backend.view_height / node_height
        with offscreen_target(backend, width, height) as target:
            with transient_camera(backend, node, target, zoom_ratio) as camera:
                backend.render(camera, node)
                return backend.read_pixels(target)

    @staticmethod
    def _rasterize_image(backend: RenderBackend, image: StaticImage, width: int, height: int) -> bytes:
        with offscreen_target(backend, width, height) as target:
            backend.draw_image(target, image)
            return backend.read_pixels(target)
