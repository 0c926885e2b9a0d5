from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import numpy as np


@dataclass(eq=False)
class SceneNode:
    """
    Minimal scene-graph node.

    Position is the anchor point's offset inside the parent's local space
    (y grows upwards). `sprite` is drawn stretched over the node's content
    box; children are drawn after it, in order.
    """
    width: float
    height: float
    sprite: Optional[np.ndarray] = None  # (h, w, 4) uint8 RGBA, top row first
    position: Tuple[float, float] = (0.0, 0.0)
    anchor: Tuple[float, float] = (0.5, 0.5)
    opacity: int = 255  # 0-255, multiplies sprite alpha
    visible: bool = True
    name: str = ""
    destroyed: bool = False
    children: List["SceneNode"] = field(default_factory=list)
    parent: Optional["SceneNode"] = field(default=None, repr=False, compare=False)

    def add_child(self, child: "SceneNode") -> "SceneNode":
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove_child(self, child: "SceneNode") -> None:
        self.children.remove(child)
        child.parent = None

    def destroy(self) -> None:
        for child in list(self.children):
            child.destroy()
        if self.parent is not None:
            self.parent.remove_child(self)
        self.destroyed = True

    @property
    def is_valid(self) -> bool:
        return not self.destroyed
