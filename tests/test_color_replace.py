"""Tests for per-pixel color substitution."""
import numpy as np

from enhancement import replace_color

from conftest import solid_pixels


class TestReplaceColor:
    def test_exact_match_replaced(self):
        out, count = replace_color(solid_pixels((224, 224, 224)), (224, 224, 224), (255, 255, 255), 0)
        assert count == 32 * 24
        assert tuple(out[0, 0]) == (255, 255, 255)

    def test_one_channel_outside_tolerance_is_kept(self):
        pixels = solid_pixels((224, 224, 244))
        out, count = replace_color(pixels, (224, 224, 224), (255, 255, 255), 10)
        assert count == 0
        assert np.array_equal(out, pixels)

    def test_within_tolerance_on_every_channel(self):
        out, count = replace_color(solid_pixels((230, 218, 224)), (224, 224, 224), (0, 0, 0), 6)
        assert count == 32 * 24
        assert tuple(out[0, 0]) == (0, 0, 0)

    def test_only_matching_pixels_change(self):
        pixels = solid_pixels((10, 10, 10))
        pixels[0, 0] = (224, 224, 224)
        out, count = replace_color(pixels, (224, 224, 224), (1, 2, 3), 0)
        assert count == 1
        assert tuple(out[0, 0]) == (1, 2, 3)
        assert tuple(out[1, 1]) == (10, 10, 10)

    def test_alpha_untouched(self):
        out, count = replace_color(solid_pixels((224, 224, 224, 90)), (224, 224, 224), (255, 0, 0), 0)
        assert count == 32 * 24
        assert tuple(out[0, 0]) == (255, 0, 0, 90)

    def test_gray_input_expanded_to_rgb(self):
        out, count = replace_color(solid_pixels(224), (224, 224, 224), (255, 0, 0), 0)
        assert out.shape == (24, 32, 3)
        assert tuple(out[0, 0]) == (255, 0, 0)

    def test_input_not_modified(self):
        pixels = solid_pixels((224, 224, 224))
        replace_color(pixels, (224, 224, 224), (0, 0, 0), 0)
        assert tuple(pixels[0, 0]) == (224, 224, 224)
