from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Tuple


@dataclass
class DisplayFrame:
    """
    Display metadata of an image asset (what a sprite frame is to a texture).
    `rect` is the shown sub-region (x, y, w, h) in texture pixels, origin top-left.
    """
    original_size: Tuple[int, int]  # (width, height) of the untrimmed asset
    rect: Tuple[int, int, int, int] | None = None
    trimmed: bool = False
    texture: Any = None  # StaticImage or any engine texture handle, never modified

    def __post_init__(self):
        if self.rect is None:
            self.rect = (0, 0, *self.original_size)

    @property
    def full_rect(self) -> Tuple[int, int, int, int]:
        return (0, 0, *self.original_size)
