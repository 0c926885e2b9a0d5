# repositories/software_scene_backend.py
"""
CPU rendering backend for SceneNode trees.

• Off-screen targets are plain (H, W, 4) uint8 arrays.
• Sprites are scaled with OpenCV and blended source-over (straight alpha).
• read_pixels() returns the bottom row first, like a GL framebuffer readback.
"""
from __future__ import annotations
import os
from typing import Set

import cv2
import numpy as np
from dotenv import load_dotenv

from ..models.pixel_buffer import BOTTOM_LEFT
from ..models.render_handles import Camera, OffscreenTarget
from ..models.scene_node import SceneNode
from .render_backend import RenderBackend

# Load environment variables
load_dotenv()

CAMERA_NODE_NAME = "__trim_camera__"


class SoftwareSceneBackend(RenderBackend):
    native_origin = BOTTOM_LEFT

    def __init__(self, view_height: float | None = None, available: bool = True):
        if view_height is None:
            view_height = float(os.getenv("RENDER_VIEW_HEIGHT", "640"))
        if view_height <= 0:
            raise ValueError(f"view_height must be positive, got {view_height}")
        self.view_height = float(view_height)
        self._available = available
        self._live: Set[int] = set()

    @property
    def live_handle_count(self) -> int:
        """Targets + cameras created and not yet released."""
        return len(self._live)

    def is_available(self) -> bool:
        return self._available

    # ---------- targets ----------
    def create_offscreen_target(self, width: int, height: int) -> OffscreenTarget:
        if width <= 0 or height <= 0:
            raise ValueError(f"Render target must be non-empty, got {width}x{height}")
        target = OffscreenTarget(width=width, height=height,
                                 surface=np.zeros((height, width, 4), dtype=np.uint8))
        self._live.add(target.handle_id)
        return target

    def release_offscreen_target(self, target: OffscreenTarget) -> None:
        target.surface = None
        target.released = True
        self._live.discard(target.handle_id)

    def read_pixels(self, target: OffscreenTarget) -> bytes:
        if target.released:
            raise RuntimeError(f"Off-screen target #{target.handle_id} was already released")
        return np.ascontiguousarray(target.surface[::-1]).tobytes()

    # ---------- cameras ----------
    def create_camera(self, node: SceneNode, target: OffscreenTarget, zoom_ratio: float) -> Camera:
        camera_node = node.add_child(SceneNode(width=0, height=0, name=CAMERA_NODE_NAME))
        camera = Camera(node=node, target=target, zoom_ratio=zoom_ratio, camera_node=camera_node)
        self._live.add(camera.handle_id)
        return camera

    def release_camera(self, camera: Camera) -> None:
        camera_node = camera.camera_node
        if camera_node is not None and camera_node.parent is not None:
            camera_node.parent.remove_child(camera_node)
        camera.camera_node = None
        camera.released = True
        self._live.discard(camera.handle_id)

    def render(self, camera: Camera, node: SceneNode) -> None:
        """
        Clear the camera's target and draw *node* alone, centred on its content box.
        The node's own position in the scene is ignored.
        """
        target = camera.target
        if target.released:
            raise RuntimeError(f"Off-screen target #{target.handle_id} was already released")

        surface = target.surface
        surface[...] = camera.clear_color

        # world units -> target pixels
        scale = camera.zoom_ratio * target.height / self.view_height
        ax, ay = node.anchor
        cx = (0.5 - ax) * node.width
        cy = (0.5 - ay) * node.height
        left = cx - target.width / (2 * scale)
        top = cy + target.height / (2 * scale)

        self._draw_node(surface, node, 0.0, 0.0, left, top, scale, 255.0)

    # ---------- private helpers ----------
    def _draw_node(self, surface, node: SceneNode, ox, oy, left, top, scale, parent_opacity):
        if not node.visible or node.name == CAMERA_NODE_NAME:
            return
        opacity = parent_opacity * node.opacity / 255.0

        if node.sprite is not None and node.width > 0 and node.height > 0:
            ax, ay = node.anchor
            x0 = ox - ax * node.width
            y0 = oy - ay * node.height
            px0 = int(round((x0 - left) * scale))
            px1 = int(round((x0 + node.width - left) * scale))
            py0 = int(round((top - (y0 + node.height)) * scale))  # y grows up in the scene
            py1 = int(round((top - y0) * scale))
            self._blit(surface, node.sprite, px0, py0, px1, py1, opacity)

        for child in node.children:
            px, py = child.position
            self._draw_node(surface, child, ox + px, oy + py, left, top, scale, opacity)

    @classmethod
    def _blit(cls, surface, sprite, px0, py0, px1, py1, opacity):
        if sprite.ndim != 3 or sprite.shape[2] != 4:
            raise ValueError(f"Sprite must be (H, W, 4) RGBA, got shape {sprite.shape}")
        dw, dh = px1 - px0, py1 - py0
        if dw <= 0 or dh <= 0:
            return

        src = sprite
        if src.shape[:2] != (dh, dw):
            src = cv2.resize(sprite, (dw, dh), interpolation=cv2.INTER_LINEAR)

        h, w = surface.shape[:2]
        xa, xb = max(px0, 0), min(px1, w)
        ya, yb = max(py0, 0), min(py1, h)
        if xa >= xb or ya >= yb:
            return

        src = src[ya - py0:yb - py0, xa - px0:xb - px0]
        surface[ya:yb, xa:xb] = cls._over(src, surface[ya:yb, xa:xb], opacity)

    @staticmethod
    def _over(src: np.ndarray, dst: np.ndarray, opacity: float) -> np.ndarray:
        """Source-over blend of straight-alpha RGBA tiles."""
        s = src.astype("float32") / 255.0
        d = dst.astype("float32") / 255.0

        sa = s[..., 3:4] * (opacity / 255.0)
        da = d[..., 3:4]
        out_a = sa + da * (1.0 - sa)

        rgb = (s[..., :3] * sa + d[..., :3] * da * (1.0 - sa)) / np.maximum(out_a, 1e-6)
        rgb = np.where(out_a > 0, rgb, 0.0)

        out = np.concatenate([rgb, out_a], axis=-1)
        return np.clip(np.rint(out * 255.0), 0, 255).astype("uint8")
