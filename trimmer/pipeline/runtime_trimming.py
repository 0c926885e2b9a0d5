"""
Runtime Trimming Pipeline
Rasterize a visual, find its opaque bounding box and, optionally, apply it
to the visual's display frame.
"""
from __future__ import annotations
from dataclasses import dataclass
import logging
import os
import time

from dotenv import load_dotenv

from ..models.display_frame import DisplayFrame
from ..models.pixel_buffer import PixelBuffer
from ..models.trim_rect import Margins, TrimRect
from ..services.pixel_extraction_service import PixelExtractionService, VisualSource
from ..services.trim_application_service import TrimApplicationService
from ..services.trim_service import TrimService

# env‑vars
load_dotenv()
ALPHA_THRESHOLD = int(os.getenv("TRIM_ALPHA_THRESHOLD", "0"))
FLIP_VERTICALLY = os.getenv("TRIM_FLIP_VERTICALLY", "true").strip().lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)


@dataclass
class TrimReport:
    """Outcome of one trim_visual call."""
    rect: TrimRect
    had_content: bool
    margins: Margins
    source_size: tuple  # (width, height) that was rasterized
    extract_ms: float
    applied: bool = False
    buffer: PixelBuffer | None = None

    @property
    def trimmed_size(self) -> tuple:
        return self.rect.width, self.rect.height


def trim_visual(
    source: VisualSource,
    frame: DisplayFrame | None = None,
    *,
    extraction_service: PixelExtractionService | None = None,
    trim_service: TrimService | None = None,
    application_service: TrimApplicationService | None = None,
    alpha_threshold: int = ALPHA_THRESHOLD,
    flip_vertically: bool = FLIP_VERTICALLY,
    apply: bool = True,
    keep_buffer: bool = False,
) -> TrimReport | None:
    """
    Extract → compute trim → (apply).

    Margins are measured against the frame's original size when a frame is
    given, otherwise against the rasterized size. A fully transparent visual
    is reported but never applied.

    Returns:
        TrimReport, or None when the host cannot rasterize.
    """
    extraction_service = extraction_service or PixelExtractionService()
    trim_service = trim_service or TrimService()
    application_service = application_service or TrimApplicationService()

    started = time.perf_counter()
    buffer = extraction_service.extract_pixels(source, flip_vertically=flip_vertically)
    extract_ms = (time.perf_counter() - started) * 1000
    if buffer is None:
        logger.warning("Off-screen rasterization unavailable; nothing trimmed")
        return None

    rect, had_content = trim_service.compute_trim(buffer, buffer.width, buffer.height, alpha_threshold)

    if frame is not None:
        margins = application_service.get_margins(frame, rect)
    else:
        margins = rect.margins(buffer.width, buffer.height)

    report = TrimReport(
        rect=rect,
        had_content=had_content,
        margins=margins,
        source_size=(buffer.width, buffer.height),
        extract_ms=extract_ms,
        buffer=buffer if keep_buffer else None,
    )

    if not had_content:
        logger.warning("Visual is fully transparent (alpha <= %d); trim skipped", alpha_threshold)
    elif apply and frame is not None:
        application_service.apply_trim(frame, (rect, had_content))
        report.applied = True

    log_trim_report(report)
    return report


def log_trim_report(report: TrimReport) -> None:
    """Log the margins and trimmed size of one report."""
    m = report.margins
    width, height = report.trimmed_size
    logger.info(
        "Trim info: left=%d right=%d top=%d bottom=%d | trimmed %dx%d | extracted in %.2f ms%s",
        m.left, m.right, m.top, m.bottom, width, height, report.extract_ms,
        " | applied" if report.applied else "",
    )
