from typing import Tuple

from ..models.display_frame import DisplayFrame


class DisplayFrameRepository:
    """
    Simple access layer for DisplayFrame attributes (the asset-system side).
    """

    @staticmethod
    def retrieve_original_size(frame: DisplayFrame) -> Tuple[int, int]:
        return frame.original_size

    @staticmethod
    def retrieve_rect(frame: DisplayFrame) -> Tuple[int, int, int, int]:
        return frame.rect

    @staticmethod
    def apply_display_rect(frame: DisplayFrame, rect: Tuple[int, int, int, int]) -> None:
        frame.rect = tuple(int(v) for v in rect)

    @staticmethod
    def set_trimmed_flag(frame: DisplayFrame, trimmed: bool) -> None:
        frame.trimmed = bool(trimmed)
