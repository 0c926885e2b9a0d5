from __future__ import annotations
import logging

from ..models.display_frame import DisplayFrame
from ..models.errors import EmptyTrimError
from ..models.trim_rect import Margins, TrimRect, TrimResult
from ..repositories.display_frame_repository import DisplayFrameRepository

logger = logging.getLogger(__name__)


class TrimApplicationService:
    """
    Business logic for mapping a trim rectangle onto an image's display frame.
    The texture itself is never modified.
    """

    def __init__(self):
        self.repository = DisplayFrameRepository()

    def get_margins(self, frame: DisplayFrame, rect: TrimRect) -> Margins:
        original_width, original_height = self.repository.retrieve_original_size(frame)
        return rect.margins(original_width, original_height)

    def apply_trim(self, frame: DisplayFrame, result: TrimResult) -> TrimRect:
        """
        Replace the frame's display rect with the trimmed one and flag it as trimmed.

        Raises:
            EmptyTrimError: the result had no content; the frame is left untouched.
            ValueError: the rect does not fit inside the frame's original size.
        """
        rect, had_content = result
        if not had_content or rect.is_empty:
            raise EmptyTrimError("Visual has no opaque pixel; refusing a zero-area trim")

        original_width, original_height = self.repository.retrieve_original_size(frame)
        if rect.min_x < 0 or rect.min_y < 0 or rect.max_x > original_width or rect.max_y > original_height:
            raise ValueError(
                f"Trim rect {rect.as_xywh()} exceeds original size {original_width}x{original_height}"
            )

        old_rect = self.repository.retrieve_rect(frame)
        self.repository.apply_display_rect(frame, rect.as_xywh())
        self.repository.set_trimmed_flag(frame, True)
        logger.debug("Display rect %s -> %s", old_rect, frame.rect)
        return rect

    def reset_trim(self, frame: DisplayFrame) -> None:
        """Show the full asset again."""
        self.repository.apply_display_rect(frame, frame.full_rect)
        self.repository.set_trimmed_flag(frame, False)
