import numpy as np
import pytest

from trimmer.models.pixel_buffer import BOTTOM_LEFT
from trimmer.models.render_handles import Camera, OffscreenTarget
from trimmer.repositories.render_backend import RenderBackend


def make_rgba(width, height, opaque=(), alpha=255, fill_alpha=0):
    """(H, W, 4) array; pixels listed in `opaque` as (x, y) get `alpha`."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = 200
    pixels[..., 3] = fill_alpha
    for x, y in opaque:
        pixels[y, x, 3] = alpha
    return pixels


class RecordingBackend(RenderBackend):
    """
    Fake engine: "renders" a canned top-left image and records every
    acquire/release. `fail_on` names the step that should raise.
    """
    native_origin = BOTTOM_LEFT

    def __init__(self, pixels=None, available=True, fail_on=None):
        self.pixels = pixels
        self.available = available
        self.fail_on = fail_on
        self.events = []
        self.live = set()

    def is_available(self):
        return self.available

    def _maybe_fail(self, step):
        if self.fail_on == step:
            raise RuntimeError(f"{step} exploded")

    def create_offscreen_target(self, width, height):
        self._maybe_fail("create_target")
        target = OffscreenTarget(width=width, height=height)
        self.live.add(target.handle_id)
        self.events.append("create_target")
        return target

    def release_offscreen_target(self, target):
        target.released = True
        self.live.discard(target.handle_id)
        self.events.append("release_target")

    def create_camera(self, node, target, zoom_ratio):
        self._maybe_fail("create_camera")
        camera = Camera(node=node, target=target, zoom_ratio=zoom_ratio)
        self.live.add(camera.handle_id)
        self.events.append("create_camera")
        self.last_camera = camera
        return camera

    def release_camera(self, camera):
        camera.released = True
        self.live.discard(camera.handle_id)
        self.events.append("release_camera")

    def render(self, camera, node):
        self._maybe_fail("render")
        self.events.append("render")

    def draw_image(self, target, image):
        self._maybe_fail("draw")
        self.events.append("draw")

    def read_pixels(self, target):
        self._maybe_fail("read")
        self.events.append("read")
        # bottom row first, like a GL readback
        return np.ascontiguousarray(self.pixels[::-1]).tobytes()


@pytest.fixture
def rgba():
    return make_rgba


@pytest.fixture
def recording_backend():
    return RecordingBackend
