from pathlib import Path
from typing import Tuple, Union
import logging
import math

import numpy as np

from ..models.pixel_buffer import TOP_LEFT, PixelBuffer
from ..models.static_image import StaticImage
from ..repositories.image_repository import ImageRepository
from ..repositories.pixel_buffer_repository import PixelBufferRepository

logger = logging.getLogger(__name__)

_DATA_URL_FORMATS = {".png": "png", ".jpg": "jpeg", ".jpeg": "jpeg"}


class ImageService:
    """I/O and pixel-lookup helpers.  No trimming logic here."""
    def __init__(self):
        self.image_repository = ImageRepository()
        self.buffer_repository = PixelBufferRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> StaticImage:
        return self.image_repository.create_image(self.image_repository.to_rgba(pixels), path)

    def load(self, path: Union[str, Path]) -> StaticImage:
        """Load a single image from disk as RGBA."""
        return self.image_repository.load(path)

    def save(self, image: StaticImage) -> None:
        self.image_repository.save(image)

    def buffer_to_image(self, buffer: PixelBuffer, path: Union[str, Path] = None) -> StaticImage:
        """Top-left copy of a pixel buffer as a StaticImage."""
        if buffer.origin != TOP_LEFT:
            buffer = self.buffer_repository.flip_rows(buffer)
        return self.image_repository.create_image(buffer.pixels.copy(), path)

    def get_pixel_color(self, source: Union[PixelBuffer, StaticImage], x: float, y: float) -> Tuple[int, int, int, int]:
        """
        Color of one pixel, origin top-left, starting at (0, 0).
        Fractional coordinates are floored.

        Returns:
            (r, g, b, a) ints in 0-255.
        """
        if isinstance(source, StaticImage):
            source = PixelBuffer(pixels=source.pixels)
        return self.buffer_repository.retrieve_pixel(source, math.floor(x), math.floor(y))

    def image_to_data_url(self, image: Union[StaticImage, str, Path]) -> str | None:
        """
        Base64 data URL of a png/jpg/jpeg image (file path or loaded image).
        Returns None (with a warning) for any other extension.
        """
        if isinstance(image, StaticImage):
            suffix = image.path.suffix.lower() if image.path else ".png"
        else:
            suffix = Path(image).suffix.lower()

        fmt = _DATA_URL_FORMATS.get(suffix)
        if fmt is None:
            logger.warning("Not a jpg/jpeg or png resource: %s", suffix or "<no extension>")
            return None

        if not isinstance(image, StaticImage):
            image = self.load(image)
        return self.image_repository.encode_data_url(image.pixels, fmt)

    def data_url_to_image(self, data_url: str) -> StaticImage:
        return self.image_repository.decode_data_url(data_url)

    def data_url_to_bytes(self, data_url: str) -> Tuple[str, bytes]:
        """(mime type, raw encoded bytes) of a base64 image data URL."""
        return self.image_repository.decode_data_url_bytes(data_url)
