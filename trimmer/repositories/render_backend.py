"""
Rendering capability consumed by the pixel extractor.

A backend owns off-screen targets and transient cameras. The extractor
never calls create/release pairs by hand: it goes through the
`offscreen_target` and `transient_camera` context managers below, which
release on every exit path.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator
import logging

from ..models.pixel_buffer import BOTTOM_LEFT
from ..models.render_handles import Camera, OffscreenTarget
from ..models.scene_node import SceneNode
from ..models.static_image import StaticImage

logger = logging.getLogger(__name__)


class RenderBackend(ABC):
    """
    Off-screen rasterization capability of a host rendering engine.
    Backends are not thread-safe; serialize calls that share one.
    """

    # Row order of read_pixels() output.
    native_origin: str = BOTTOM_LEFT
    # Design viewport height that camera zoom ratios are relative to.
    view_height: float = 640.0

    def is_available(self) -> bool:
        """Whether off-screen rasterization + readback works in this host."""
        return True

    @abstractmethod
    def create_offscreen_target(self, width: int, height: int) -> OffscreenTarget:
        ...

    @abstractmethod
    def release_offscreen_target(self, target: OffscreenTarget) -> None:
        ...

    @abstractmethod
    def read_pixels(self, target: OffscreenTarget) -> bytes:
        """Raw RGBA bytes of the whole target, rows in `native_origin` order."""

    # Scene-node path. Image-only backends leave these unimplemented.
    def create_camera(self, node: SceneNode, target: OffscreenTarget, zoom_ratio: float) -> Camera:
        raise NotImplementedError(f"{type(self).__name__} cannot render scene nodes")

    def release_camera(self, camera: Camera) -> None:
        raise NotImplementedError(f"{type(self).__name__} cannot render scene nodes")

    def render(self, camera: Camera, node: SceneNode) -> None:
        raise NotImplementedError(f"{type(self).__name__} cannot render scene nodes")

    # Static-image path.
    def draw_image(self, target: OffscreenTarget, image: StaticImage) -> None:
        raise NotImplementedError(f"{type(self).__name__} cannot draw static images")


@contextmanager
def offscreen_target(backend: RenderBackend, width: int, height: int) -> Iterator[OffscreenTarget]:
    target = backend.create_offscreen_target(width, height)
    logger.debug("Acquired off-screen target #%d (%dx%d)", target.handle_id, width, height)
    try:
        yield target
    finally:
        backend.release_offscreen_target(target)
        logger.debug("Released off-screen target #%d", target.handle_id)


@contextmanager
def transient_camera(
    backend: RenderBackend,
    node: SceneNode,
    target: OffscreenTarget,
    zoom_ratio: float,
) -> Iterator[Camera]:
    camera = backend.create_camera(node, target, zoom_ratio)
    logger.debug("Acquired camera #%d (zoom=%.4f)", camera.handle_id, zoom_ratio)
    try:
        yield camera
    finally:
        backend.release_camera(camera)
        logger.debug("Released camera #%d", camera.handle_id)
