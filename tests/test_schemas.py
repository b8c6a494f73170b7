"""Tests for the shared data model."""
import pytest
from pydantic import ValidationError

from schemas import (
    A4_HEIGHT_PT,
    A4_WIDTH_PT,
    BoundsResult,
    ColorMode,
    ColorReplaceParams,
    ImageFormat,
    PageBounds,
    ProcessingParams,
    RasterImage,
    RenderOptions,
    SharpenParams,
)
from schemas.errors import ExportError, ProcessingError, RenderError


class TestPageBounds:
    def test_derived_sizes(self):
        b = PageBounds(x0=10, y0=20, x1=622, y1=812)
        assert b.width_pt == 612
        assert b.height_pt == 792
        assert b.area_pt2 == 612 * 792

    def test_from_tuple(self):
        b = PageBounds.from_tuple((0, 0, 595.28, 841.89))
        assert b.width_pt == 595.28
        assert b.height_pt == 841.89

    def test_zero_width_rejected(self):
        with pytest.raises(ValidationError):
            PageBounds(x0=5, y0=0, x1=5, y1=100)

    def test_inverted_rect_rejected(self):
        with pytest.raises(ValidationError):
            PageBounds(x0=0, y0=100, x1=100, y1=0)

    def test_frozen(self, a4_bounds):
        with pytest.raises(ValidationError):
            a4_bounds.x1 = 10

    def test_a4(self):
        b = PageBounds.a4()
        assert (b.width_pt, b.height_pt) == (A4_WIDTH_PT, A4_HEIGHT_PT)

    def test_to_dict(self, letter_bounds):
        d = letter_bounds.to_dict()
        assert d["width_pt"] == 612
        assert d["height_pt"] == 792


class TestBoundsResult:
    def test_ok(self, letter_bounds):
        r = BoundsResult.ok(2, letter_bounds)
        assert not r.is_fallback
        assert r.bounds == letter_bounds

    def test_fallback_uses_a4(self):
        r = BoundsResult.fallback(1, "broken page")
        assert r.is_fallback
        assert r.reason == "broken page"
        assert r.bounds == PageBounds.a4()


class TestRenderOptions:
    def test_defaults(self):
        opts = RenderOptions()
        assert opts.dpi == 150
        assert opts.color_mode == ColorMode.RGB
        assert opts.format == ImageFormat.PNG

    def test_scale_is_dpi_over_72(self):
        assert RenderOptions(dpi=144).scale == 2.0
        assert RenderOptions(dpi=72).scale == 1.0

    def test_channels(self):
        assert RenderOptions(color_mode=ColorMode.GRAY).channels == 1
        assert RenderOptions(color_mode=ColorMode.RGB).channels == 3

    @pytest.mark.parametrize("dpi", [0, -10])
    def test_non_positive_dpi_rejected(self, dpi):
        with pytest.raises(ValidationError):
            RenderOptions(dpi=dpi)

    def test_quality_range(self):
        with pytest.raises(ValidationError):
            RenderOptions(format=ImageFormat.JPEG, quality=0)


class TestProcessingParams:
    def test_defaults_are_noop(self):
        assert ProcessingParams().is_noop()

    @pytest.mark.parametrize("update", [
        {"gamma": 1.5},
        {"grayscale": True},
        {"contrast": 1.2},
        {"brightness": -5},
        {"denoise": True},
        {"sharpen": SharpenParams(sigma=1.0)},
        {"threshold": 128},
        {"color_replace": ColorReplaceParams(enabled=True)},
    ])
    def test_any_active_stage_is_not_noop(self, update):
        assert not ProcessingParams(**update).is_noop()

    def test_out_of_range_values_accepted(self):
        # Clamping happens in the enhancement chain, not at construction
        params = ProcessingParams(contrast=5.0, gamma=10.0)
        assert params.contrast == 5.0


class TestProcessedPage:
    def test_image_for_export_prefers_processed(self, make_page, make_png):
        processed = make_png((0, 0, 0))
        page = make_page(processed=processed)
        assert page.image_for_export is processed

    def test_image_for_export_falls_back_on_empty(self, make_page):
        empty = RasterImage(data=b"", width=0, height=0, channels=3)
        page = make_page(processed=empty)
        assert page.image_for_export is page.original_image

    def test_image_for_export_without_processed(self, make_page):
        page = make_page()
        assert page.image_for_export is page.original_image


class TestErrors:
    def test_render_error_carries_page_index(self):
        e = RenderError(4, "boom")
        assert e.page_index == 4
        assert "page 4" in str(e)

    def test_processing_error_carries_stage(self):
        e = ProcessingError("sharpen", "bad sigma")
        assert e.stage == "sharpen"

    def test_export_error_message_names_page(self):
        e = ExportError("corrupt", page_index=2)
        assert e.page_index == 2
        assert str(e) == "Failed to embed image for page 2: corrupt"

    def test_export_error_without_page(self):
        e = ExportError("No pages provided for export")
        assert e.page_index is None
        assert str(e) == "No pages provided for export"
