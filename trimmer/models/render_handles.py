from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Tuple
import itertools

_ids = itertools.count(1)


@dataclass
class OffscreenTarget:
    """Handle to a temporary render target owned by a RenderBackend."""
    width: int
    height: int
    surface: Any = None  # backend-specific storage
    handle_id: int = field(default_factory=lambda: next(_ids))
    released: bool = False


@dataclass
class Camera:
    """Transient camera attached to a node and rendering into a target."""
    node: Any
    target: OffscreenTarget
    camera_node: Any = None  # helper node the backend attached under `node`
    zoom_ratio: float = 1.0
    clear_color: Tuple[int, int, int, int] = (0, 0, 0, 0)
    handle_id: int = field(default_factory=lambda: next(_ids))
    released: bool = False
