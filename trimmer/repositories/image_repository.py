from __future__ import annotations
from pathlib import Path
from typing import Tuple, Union
from io import BytesIO
import base64
import os
import re
import signal

import cv2
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..models.static_image import StaticImage

# Load environment variables
load_dotenv()

_DATA_URL_RE = re.compile(r"^data:image/(?P<fmt>[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)


class ImageRepository:
    """
    Handles file I/O and encoding for StaticImage entities.
    Pixels are always RGBA uint8 once they leave this class.
    """
    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> StaticImage:
        if path is None:
            return StaticImage(pixels)
        return StaticImage(pixels=pixels, path=Path(path))

    @staticmethod
    def to_rgba(arr: np.ndarray, bgr: bool = False) -> np.ndarray:
        """Promote gray / RGB(A) / BGR(A) arrays to RGBA uint8."""
        if arr.dtype != np.uint8:
            # 16-bit PNGs -> 8-bit
            arr = (arr / 257).astype(np.uint8) if arr.dtype == np.uint16 else arr.astype(np.uint8)
        if arr.ndim == 2:
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        channels = arr.shape[2]
        if channels == 3:
            return cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA if bgr else cv2.COLOR_RGB2RGBA)
        if channels == 4:
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA) if bgr else arr.copy()
        raise ValueError(f"Unsupported channel count: {channels}")

    @classmethod
    def load(cls, path: Union[str, Path], timeout: int = None) -> StaticImage:
        path = Path(path)
        if timeout is None:
            timeout = int(os.getenv("IMAGE_LOAD_TIMEOUT", "5"))

        # ─── timeout wrapper ──────────────────────────────────────────────
        def _handler(signum, frame):
            raise TimeoutError(f"cv2.imread timed-out after {timeout}s: {path}")

        previous = signal.signal(signal.SIGALRM, _handler)
        signal.alarm(timeout)
        try:
            arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        finally:
            signal.alarm(0)  # always disarm
            signal.signal(signal.SIGALRM, previous)
        # ──────────────────────────────────────────────────────────────────

        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")

        return StaticImage(pixels=cls.to_rgba(arr, bgr=True), path=path)

    @staticmethod
    def save(image: StaticImage) -> None:
        if image.path is None:
            raise ValueError("Image has no path to save to")
        Path(image.path).parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(np.ascontiguousarray(image.pixels)).save(image.path)

    @staticmethod
    def encode_data_url(pixels: np.ndarray, fmt: str = "png") -> str:
        """Encode RGBA pixels as a data URL. JPEG drops the alpha channel."""
        pil_image = PILImage.fromarray(np.ascontiguousarray(pixels))
        if fmt == "jpeg":
            pil_image = pil_image.convert("RGB")

        buffer = BytesIO()
        pil_image.save(buffer, format=fmt.upper(), **({"quality": 95} if fmt == "jpeg" else {}))
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/{fmt};base64,{encoded}"

    @staticmethod
    def decode_data_url_bytes(data_url: str) -> Tuple[str, bytes]:
        """Split a base64 image data URL into (mime type, raw bytes)."""
        match = _DATA_URL_RE.match(data_url.strip())
        if match is None:
            raise ValueError("Not a base64 image data URL")
        raw = base64.b64decode(match.group("payload"), validate=True)
        return f"image/{match.group('fmt')}", raw

    @classmethod
    def decode_data_url(cls, data_url: str) -> StaticImage:
        _, raw = cls.decode_data_url_bytes(data_url)
        with PILImage.open(BytesIO(raw)) as pil_image:
            pixels = np.asarray(pil_image.convert("RGBA")).copy()
        return StaticImage(pixels=pixels)
