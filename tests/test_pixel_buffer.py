import numpy as np
import pytest

from trimmer.models.errors import InvalidDimensions
from trimmer.models.pixel_buffer import BOTTOM_LEFT, TOP_LEFT, PixelBuffer
from trimmer.repositories.pixel_buffer_repository import PixelBufferRepository


def _numbered(width, height):
    return np.arange(width * height * 4, dtype=np.uint32).astype(np.uint8).reshape(height, width, 4)


def test_from_bytes_keeps_row_major_rgba_order():
    data = bytes(range(2 * 3 * 4))
    buffer = PixelBuffer.from_bytes(data, 2, 3)
    assert (buffer.width, buffer.height) == (2, 3)
    assert len(buffer) == 24
    assert tuple(buffer.pixels[1, 0]) == (8, 9, 10, 11)
    assert buffer.data == data


@pytest.mark.parametrize("width,height,length", [(2, 2, 15), (2, 2, 17), (0, 2, 0), (2, -1, 8)])
def test_from_bytes_rejects_inconsistent_sizes(width, height, length):
    with pytest.raises(InvalidDimensions):
        PixelBuffer.from_bytes(bytes(length), width, height)


def test_wrong_shape_is_rejected():
    with pytest.raises(InvalidDimensions):
        PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(InvalidDimensions):
        PixelBuffer(np.zeros((0, 2, 4), dtype=np.uint8))


def test_flip_is_an_involution():
    repo = PixelBufferRepository()
    buffer = PixelBuffer(_numbered(3, 5))
    twice = repo.flip_rows(repo.flip_rows(buffer))
    assert np.array_equal(twice.pixels, buffer.pixels)
    assert twice.origin == buffer.origin == TOP_LEFT


def test_flip_reverses_rows_into_a_new_buffer():
    repo = PixelBufferRepository()
    original = _numbered(4, 3)
    buffer = PixelBuffer(original.copy())
    flipped = repo.flip_rows(buffer)

    assert flipped.origin == BOTTOM_LEFT
    assert np.array_equal(flipped.pixels, original[::-1])
    assert np.array_equal(buffer.pixels, original)
    assert not np.shares_memory(flipped.pixels, buffer.pixels)


def test_flip_single_row_buffer():
    repo = PixelBufferRepository()
    buffer = PixelBuffer(_numbered(5, 1))
    assert np.array_equal(repo.flip_rows(buffer).pixels, buffer.pixels)


def test_retrieve_pixel_uses_top_left_coordinates():
    repo = PixelBufferRepository()
    pixels = _numbered(3, 2)
    top_left = PixelBuffer(pixels.copy())
    bottom_left = PixelBuffer(pixels[::-1].copy(), origin=BOTTOM_LEFT)

    expected = tuple(int(v) for v in pixels[1, 2])
    assert repo.retrieve_pixel(top_left, 2, 1) == expected
    assert repo.retrieve_pixel(bottom_left, 2, 1) == expected

    with pytest.raises(IndexError):
        repo.retrieve_pixel(top_left, 3, 0)
