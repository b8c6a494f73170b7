"""Tests for page bounds extraction."""
import pytest

from rasterizer import DocumentHandle, extract_all_bounds, extract_bounds, get_page_bounds, open_document
from schemas import PageBounds
from schemas.errors import BoundsError, BoundsFallbackWarning, DecodeError

from conftest import A4, LETTER, PASSWORD


class FakeHandle(DocumentHandle):
    """In-memory handle; pages listed in ``broken`` fail to report bounds."""

    def __init__(self, rects, broken=()):
        self.rects = rects
        self.broken = set(broken)

    @property
    def needs_password(self):
        return False

    @property
    def is_locked(self):
        return False

    def authenticate(self, password):
        return True

    def page_count(self):
        return len(self.rects)

    def page_bounds(self, page_index):
        if page_index in self.broken:
            raise RuntimeError("corrupt page object")
        return self.rects[page_index]

    def render_page_to_bitmap(self, page_index, scale_x, scale_y, color_mode):
        raise NotImplementedError


class TestGetPageBounds:
    def test_reads_rect(self):
        handle = FakeHandle([(0, 0, 612, 792)])
        b = get_page_bounds(handle, 0)
        assert (b.width_pt, b.height_pt) == (612, 792)

    def test_failure_raises_bounds_error(self):
        handle = FakeHandle([(0, 0, 612, 792)], broken={0})
        with pytest.raises(BoundsError) as exc:
            get_page_bounds(handle, 0)
        assert exc.value.page_index == 0

    def test_degenerate_rect_raises_bounds_error(self):
        handle = FakeHandle([(0, 0, 0, 792)])
        with pytest.raises(BoundsError):
            get_page_bounds(handle, 0)


class TestExtractBounds:
    def test_page_order_preserved(self):
        handle = FakeHandle([(0, 0, 612, 792), (0, 0, 595.28, 841.89), (0, 0, 1224, 792)])
        results = extract_bounds(handle)
        assert [r.page_index for r in results] == [0, 1, 2]
        assert [r.bounds.width_pt for r in results] == [612, 595.28, 1224]
        assert not any(r.is_fallback for r in results)

    def test_bad_page_falls_back_to_a4(self):
        handle = FakeHandle([(0, 0, 612, 792), (0, 0, 612, 792), (0, 0, 612, 792)], broken={1})
        results = extract_bounds(handle)

        assert len(results) == 3
        assert results[1].is_fallback
        assert "corrupt page object" in results[1].reason
        assert results[1].bounds == PageBounds.a4()
        # Neighbouring pages are unaffected
        assert results[0].bounds.width_pt == 612
        assert results[2].bounds.width_pt == 612

    def test_extract_all_bounds_warns_per_fallback(self):
        handle = FakeHandle([(0, 0, 612, 792), (0, 0, 0, 0)], broken={0})
        with pytest.warns(BoundsFallbackWarning) as record:
            bounds = extract_all_bounds(handle)
        assert len(bounds) == 2
        assert {w.message.page_index for w in record} == {0, 1}

    def test_real_document(self, mixed_pdf):
        with open_document(mixed_pdf) as handle:
            bounds = extract_all_bounds(handle)
        assert len(bounds) == 3
        assert bounds[0].width_pt == pytest.approx(A4[0], abs=1e-3)
        assert bounds[0].height_pt == pytest.approx(A4[1], abs=1e-3)
        assert bounds[1].width_pt == pytest.approx(LETTER[0])
        assert bounds[2].width_pt == pytest.approx(1224.0)

    def test_locked_document_has_no_page_count(self, encrypted_pdf):
        with open_document(encrypted_pdf) as handle:
            with pytest.raises(DecodeError):
                extract_bounds(handle)
            assert handle.authenticate(PASSWORD)
            assert len(extract_bounds(handle)) == 3
