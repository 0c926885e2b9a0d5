from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple, Tuple


class Margins(NamedTuple):
    left: int
    right: int
    top: int
    bottom: int


@dataclass(frozen=True)
class TrimRect:
    """
    Minimal enclosing rectangle of opaque pixels, origin top-left.
    Max bounds are exclusive: [min_x, max_x) x [min_y, max_y).
    """
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_xywh(self) -> Tuple[int, int, int, int]:
        return self.min_x, self.min_y, self.width, self.height

    def margins(self, original_width: int, original_height: int) -> Margins:
        """Transparent border removed on each side, relative to the pre-trim size."""
        return Margins(
            left=self.min_x,
            right=original_width - self.max_x,
            top=self.min_y,
            bottom=original_height - self.max_y,
        )


EMPTY_RECT = TrimRect(0, 0, 0, 0)


class TrimResult(NamedTuple):
    rect: TrimRect
    had_content: bool  # False -> fully transparent input, rect is EMPTY_RECT
