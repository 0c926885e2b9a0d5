import numpy as np
import pytest

from trimmer.models.errors import EmptyTrimError, InvalidDimensions
from trimmer.models.pixel_buffer import BOTTOM_LEFT, PixelBuffer
from trimmer.models.trim_rect import EMPTY_RECT, TrimRect
from trimmer.services.trim_service import TrimService


@pytest.fixture
def trim_service():
    return TrimService(default_threshold=0)


def test_two_opaque_pixels_give_two_by_two_region(trim_service, rgba):
    buffer = PixelBuffer(rgba(4, 4, opaque=[(1, 1), (2, 2)]))
    rect, had_content = trim_service.compute_trim(buffer, 4, 4)
    assert had_content is True
    assert rect == TrimRect(1, 1, 3, 3)
    assert (rect.width, rect.height) == (2, 2)


def test_fully_opaque_buffer_is_a_noop_trim(trim_service, rgba):
    buffer = PixelBuffer(rgba(10, 10, fill_alpha=255))
    result = trim_service.compute_trim(buffer, 10, 10)
    assert result.rect == TrimRect(0, 0, 10, 10)
    assert result.had_content
    assert result.rect.margins(10, 10) == (0, 0, 0, 0)


def test_fully_transparent_buffer_is_flagged_not_raised(trim_service, rgba):
    result = trim_service.compute_trim(PixelBuffer(rgba(7, 3)), 7, 3)
    assert result.rect == EMPTY_RECT
    assert result.had_content is False


@pytest.mark.parametrize("x0,y0", [(0, 0), (4, 0), (0, 2), (3, 1), (4, 2)])
def test_single_pixel(trim_service, rgba, x0, y0):
    rect, had_content = trim_service.compute_trim(PixelBuffer(rgba(5, 3, opaque=[(x0, y0)])), 5, 3)
    assert had_content
    assert rect == TrimRect(x0, y0, x0 + 1, y0 + 1)


def test_rgb_values_are_ignored(trim_service):
    pixels = np.zeros((3, 3, 4), dtype=np.uint8)
    pixels[..., :3] = 255  # bright but transparent
    pixels[2, 0] = (0, 0, 0, 1)  # black but barely visible
    rect, had_content = trim_service.compute_trim(PixelBuffer(pixels), 3, 3)
    assert had_content
    assert rect == TrimRect(0, 2, 1, 3)


def test_threshold_is_strictly_greater_than(trim_service, rgba):
    pixels = rgba(6, 6, opaque=[(0, 0), (5, 5)], alpha=16)
    pixels[2, 3, 3] = 17
    pixels[3, 2, 3] = 200

    rect, _ = trim_service.compute_trim(pixels, 6, 6, alpha_threshold=16)
    assert rect == TrimRect(2, 2, 4, 4)

    rect, _ = trim_service.compute_trim(pixels, 6, 6, alpha_threshold=15)
    assert rect == TrimRect(0, 0, 6, 6)

    rect, had_content = trim_service.compute_trim(pixels, 6, 6, alpha_threshold=200)
    assert (rect, had_content) == (EMPTY_RECT, False)


def test_default_threshold_comes_from_the_service(rgba):
    pixels = rgba(4, 4, opaque=[(1, 1)], alpha=10)
    assert TrimService(default_threshold=10).compute_trim(pixels, 4, 4).had_content is False
    assert TrimService(default_threshold=9).compute_trim(pixels, 4, 4).had_content is True


@pytest.mark.parametrize("threshold", [-1, 255, 300])
def test_out_of_range_threshold_is_rejected(trim_service, rgba, threshold):
    with pytest.raises(ValueError):
        trim_service.compute_trim(rgba(2, 2), 2, 2, alpha_threshold=threshold)


def test_raw_bytes_are_accepted(trim_service, rgba):
    data = rgba(3, 2, opaque=[(2, 1)]).tobytes()
    assert trim_service.compute_trim(data, 3, 2).rect == TrimRect(2, 1, 3, 2)
    assert trim_service.compute_trim(bytearray(data), 3, 2).rect == TrimRect(2, 1, 3, 2)


def test_raw_bytes_with_wrong_length_are_rejected(trim_service, rgba):
    data = rgba(3, 2).tobytes()
    with pytest.raises(InvalidDimensions):
        trim_service.compute_trim(data, 2, 2)


def test_declared_size_must_match_buffer(trim_service, rgba):
    with pytest.raises(InvalidDimensions):
        trim_service.compute_trim(PixelBuffer(rgba(4, 4)), 4, 5)
    with pytest.raises(InvalidDimensions):
        trim_service.compute_trim(PixelBuffer(rgba(4, 4)), 0, 4)


def test_bottom_left_buffer_reports_top_left_coordinates(trim_service, rgba):
    top_left = rgba(4, 5, opaque=[(1, 0), (2, 1)])
    bottom_left = PixelBuffer(top_left[::-1].copy(), origin=BOTTOM_LEFT)
    rect, _ = trim_service.compute_trim(bottom_left, 4, 5)
    assert rect == TrimRect(1, 0, 3, 2)


def test_crop_then_trim_is_idempotent(trim_service, rgba):
    buffer = PixelBuffer(rgba(8, 6, opaque=[(2, 1), (5, 4), (3, 3)]))
    rect, _ = trim_service.compute_trim(buffer, 8, 6)
    cropped = trim_service.crop_to_trim(buffer, rect)

    assert (cropped.width, cropped.height) == (rect.width, rect.height)
    again, had_content = trim_service.compute_trim(cropped, cropped.width, cropped.height)
    assert had_content
    assert again == TrimRect(0, 0, cropped.width, cropped.height)


def test_crop_returns_a_fresh_buffer(trim_service, rgba):
    buffer = PixelBuffer(rgba(4, 4, opaque=[(1, 1)]))
    cropped = trim_service.crop_to_trim(buffer, TrimRect(1, 1, 2, 2))
    cropped.pixels[0, 0, 3] = 0
    assert buffer.pixels[1, 1, 3] == 255


def test_crop_refuses_empty_rect(trim_service, rgba):
    with pytest.raises(EmptyTrimError):
        trim_service.crop_to_trim(PixelBuffer(rgba(4, 4)), EMPTY_RECT)
