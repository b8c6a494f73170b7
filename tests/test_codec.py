"""Tests for the bitmap codec."""
import numpy as np
import pytest

from enhancement.codec import (
    convert_format,
    decode,
    encode_jpeg,
    encode_png,
    flatten_alpha,
    generate_preview,
    get_image_info,
    reencode_png,
    sniff_format,
)
from schemas import ImageFormat

from conftest import solid_pixels


class TestSniffFormat:
    def test_png(self, make_png):
        assert sniff_format(make_png().data) == ImageFormat.PNG

    def test_jpeg(self):
        assert sniff_format(encode_jpeg(solid_pixels((10, 20, 30))).data) == ImageFormat.JPEG

    def test_unknown(self):
        assert sniff_format(b"GIF89a...") is None
        assert sniff_format(b"") is None


class TestDecodeEncode:
    def test_rgb_channel_order_preserved(self):
        pixels = solid_pixels((255, 0, 0))
        decoded = decode(encode_png(pixels))
        assert decoded.shape == (24, 32, 3)
        assert tuple(decoded[0, 0]) == (255, 0, 0)

    def test_gray_stays_single_channel(self):
        image = encode_png(solid_pixels(77))
        assert image.channels == 1
        assert decode(image).ndim == 2

    def test_rgba_keeps_alpha(self):
        image = encode_png(solid_pixels((1, 2, 3, 128)))
        assert image.channels == 4
        assert image.has_alpha
        assert tuple(decode(image)[5, 5]) == (1, 2, 3, 128)

    def test_garbage_raises_value_error(self):
        with pytest.raises(ValueError):
            decode(b"definitely not an image")

    def test_empty_raises_value_error(self):
        with pytest.raises(ValueError):
            decode(b"")

    def test_reencode_png_is_pixel_identical(self, make_png):
        original = make_png((12, 34, 56))
        again = reencode_png(original)
        assert np.array_equal(decode(original), decode(again))


class TestFlattenAlpha:
    def test_transparent_becomes_white(self):
        flat = flatten_alpha(solid_pixels((0, 0, 0, 0)))
        assert flat.shape == (24, 32, 3)
        assert tuple(flat[0, 0]) == (255, 255, 255)

    def test_opaque_keeps_color(self):
        flat = flatten_alpha(solid_pixels((10, 20, 30, 255)))
        assert tuple(flat[0, 0]) == (10, 20, 30)

    def test_no_alpha_is_unchanged(self):
        pixels = solid_pixels((10, 20, 30))
        assert flatten_alpha(pixels) is pixels


class TestConvertFormat:
    def test_png_to_jpeg(self, make_png):
        jpeg = convert_format(make_png(), ImageFormat.JPEG, quality=80)
        assert jpeg.format == ImageFormat.JPEG
        assert (jpeg.width, jpeg.height) == (32, 24)

    def test_jpeg_drops_alpha(self):
        jpeg = encode_jpeg(solid_pixels((0, 0, 0, 0)))
        assert jpeg.channels == 3


class TestPreviewAndInfo:
    def test_preview_shrinks_to_fit(self, make_png):
        preview = generate_preview(make_png(width=800, height=400), max_width=400, max_height=600)
        assert (preview.width, preview.height) == (400, 200)

    def test_preview_never_enlarges(self, make_png):
        preview = generate_preview(make_png(width=40, height=20), max_width=400, max_height=600)
        assert (preview.width, preview.height) == (40, 20)

    def test_image_info(self):
        image = encode_png(solid_pixels((1, 2, 3, 4), width=10, height=5))
        info = get_image_info(image)
        assert (info.width, info.height, info.channels) == (10, 5, 4)
        assert info.format == "png"
        assert info.has_alpha
        assert info.size == image.byte_size
