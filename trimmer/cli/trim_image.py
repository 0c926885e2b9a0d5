import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..models.display_frame import DisplayFrame
from ..models.errors import TrimmerError
from ..pipeline.runtime_trimming import ALPHA_THRESHOLD, FLIP_VERTICALLY, trim_visual
from ..services.image_service import ImageService
from ..services.pixel_extraction_service import PixelExtractionService
from ..services.trim_service import TrimService

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="trimmer-trim",
        description="Report (and optionally crop) the transparent padding around images.",
    )
    parser.add_argument("paths", nargs="+", type=Path, help="image files to inspect")
    parser.add_argument("--threshold", type=int, default=ALPHA_THRESHOLD,
                        help="alpha values above this count as content (default: %(default)s)")
    parser.add_argument("--crop-dir", type=Path, default=os.getenv("CROPPED_DIR_PATH") or None,
                        help="write the cropped PNGs into this directory")
    parser.add_argument("--flip", action=argparse.BooleanOptionalAction, default=FLIP_VERTICALLY,
                        help="return rows top-first; --no-flip keeps the rasterizer's native row order")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )
    args = parse_args(argv)

    image_service = ImageService()
    extraction_service = PixelExtractionService()
    trim_service = TrimService()

    status = 0
    for path in args.paths:
        try:
            image = image_service.load(path)
        except (OSError, TimeoutError, ValueError) as err:
            logger.error("Cannot load %s: %s", path, err)
            status = 1
            continue

        frame = DisplayFrame(original_size=(image.width, image.height), texture=image)
        try:
            report = trim_visual(
                image,
                frame,
                extraction_service=extraction_service,
                trim_service=trim_service,
                alpha_threshold=args.threshold,
                flip_vertically=args.flip,
                keep_buffer=args.crop_dir is not None,
            )
        except TrimmerError as err:
            logger.error("Cannot trim %s: %s", path, err)
            status = 1
            continue

        if report is None:
            logger.error("Off-screen rasterization is unavailable")
            return 1

        print(f"{path}:")
        if not report.had_content:
            print("    fully transparent, skipped")
            continue
        m = report.margins
        print(f"    - left:   {m.left}")
        print(f"    - right:  {m.right}")
        print(f"    - top:    {m.top}")
        print(f"    - bottom: {m.bottom}")
        print(f"    trimmed size: {report.rect.width}x{report.rect.height}")

        if args.crop_dir is not None:
            cropped = trim_service.crop_to_trim(report.buffer, report.rect)
            out_path = Path(args.crop_dir) / f"{path.stem}_trimmed.png"
            image_service.save(image_service.buffer_to_image(cropped, out_path))
            print(f"    saved: {out_path}")

    return status


if __name__ == "__main__":
    sys.exit(main())
