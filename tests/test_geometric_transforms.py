"""
Unit tests for geometric_transforms module.

Tests rotation, mirroring, percentage resize and cropping.
"""

import pytest

from OR_Libs.errors import EmptySelectionError
from OR_Libs.ImageEditingLib.geometric_transforms import (
    crop,
    flip_horizontal,
    resize,
    rotate,
    rotated_size,
    scaled_size,
)
from OR_Libs.ImageEditingLib.image_models import CropRect
from OR_Libs.ImageEditingLib.raster_buffer import RasterBuffer


class TestRotate:
    """Tests for rotate and rotated_size."""

    @pytest.mark.parametrize("degrees, expected", [
        (0, (6, 4)),
        (90, (4, 6)),
        (180, (6, 4)),
        (270, (4, 6)),
        (-90, (4, 6)),
    ])
    def test_right_angle_sizes(self, degrees, expected):
        assert rotated_size(6, 4, degrees) == expected

    def test_forty_five_degrees_grows_box(self):
        width, height = rotated_size(100, 100, 45)
        assert width == height == 141

    def test_quarter_turn_is_clockwise(self, small_buffer):
        rotated = rotate(small_buffer, 90)

        # Bottom-left (blue) moves to top-left, top-left (red) to top-right
        assert rotated.to_colors() == [
            (0, 0, 255, 255),
            (255, 0, 0, 255),
            (255, 255, 255, 255),
            (0, 255, 0, 255),
        ]

    def test_four_quarter_turns_restore_image(self, gradient_buffer):
        result = gradient_buffer
        for _ in range(4):
            result = rotate(result, 90)

        assert result.size == gradient_buffer.size
        assert result == gradient_buffer

    def test_uncovered_corners_are_white(self):
        buffer = RasterBuffer.blank(20, 20, (0, 0, 0, 255))

        rotated = rotate(buffer, 45)

        assert rotated.pixel(0, 0) == (255, 255, 255, 255)
        center = rotated.pixel(rotated.width // 2, rotated.height // 2)
        assert center == (0, 0, 0, 255)

    def test_does_not_mutate_input(self, gradient_buffer):
        before = gradient_buffer.copy()
        rotate(gradient_buffer, 30)
        assert gradient_buffer == before


class TestFlipHorizontal:
    """Tests for flip_horizontal."""

    def test_mirrors_columns(self, small_buffer, sample_rgba_colors):
        red, green, blue, white = sample_rgba_colors
        assert flip_horizontal(small_buffer).to_colors() == [green, red, white, blue]

    def test_is_involution(self, gradient_buffer):
        assert flip_horizontal(flip_horizontal(gradient_buffer)) == gradient_buffer


class TestResize:
    """Tests for resize and scaled_size."""

    def test_half_size(self, gradient_buffer):
        assert resize(gradient_buffer, 50).size == (3, 2)

    def test_never_below_one_pixel(self):
        assert scaled_size(3, 3, 0.2) == (1, 1)

    def test_not_cumulative_from_original(self, gradient_buffer):
        resize(gradient_buffer, 50)
        assert resize(gradient_buffer, 80) == resize(gradient_buffer, 80)
        assert resize(gradient_buffer, 80).size == (4, 3)

    def test_hundred_percent_keeps_size(self, gradient_buffer):
        assert resize(gradient_buffer, 100).size == gradient_buffer.size

    @pytest.mark.parametrize("percentage", [0, -10])
    def test_rejects_non_positive(self, gradient_buffer, percentage):
        with pytest.raises(ValueError):
            resize(gradient_buffer, percentage)


class TestCrop:
    """Tests for crop."""

    def test_exact_rect_dimensions(self, gradient_buffer):
        result = crop(gradient_buffer, CropRect(1, 1, 3, 2))

        assert result.size == (3, 2)
        assert result.pixel(0, 0) == gradient_buffer.pixel(1, 1)
        assert result.pixel(2, 1) == gradient_buffer.pixel(3, 2)

    @pytest.mark.parametrize("rect", [CropRect(1, 1, 0, 2), CropRect(1, 1, 2, 0)])
    def test_empty_rect_rejected(self, gradient_buffer, rect):
        with pytest.raises(EmptySelectionError):
            crop(gradient_buffer, rect)

    def test_rect_outside_buffer_rejected(self, gradient_buffer):
        with pytest.raises(ValueError):
            crop(gradient_buffer, CropRect(4, 0, 5, 2))

    def test_result_is_independent(self, gradient_buffer):
        result = crop(gradient_buffer, CropRect(0, 0, 2, 2))
        result.data[:] = 0
        assert gradient_buffer.pixel(0, 0) == (0, 0, 0, 255)
        assert gradient_buffer.pixel(1, 1) == (40, 60, 40, 255)
