"""Shared test fixtures and configuration."""
import numpy as np
import pymupdf
import pytest

from enhancement.codec import encode_png
from schemas import PageBounds, ProcessedPage, RenderOptions

A4 = (595.28, 841.89)
LETTER = (612.0, 792.0)
PASSWORD = "s3cret"


def build_pdf(sizes, password=None) -> bytes:
    """Build a PDF with one page per (width, height), each carrying a label and a box."""
    doc = pymupdf.open()
    for i, (width, height) in enumerate(sizes):
        page = doc.new_page(width=width, height=height)
        page.insert_text((36, 72), f"Page {i + 1}", fontsize=24)
        page.draw_rect(pymupdf.Rect(36, 100, width - 36, 200), color=(0, 0, 0), fill=(0.2, 0.4, 0.8))
    if password:
        data = doc.tobytes(
            encryption=pymupdf.PDF_ENCRYPT_AES_256,
            user_pw=password,
            owner_pw=password + "-owner",
        )
    else:
        data = doc.tobytes()
    doc.close()
    return data


def build_empty_pdf() -> bytes:
    """Hand-assembled PDF whose page tree has no kids."""
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [] /Count 0 >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n%s\nendobj\n" % (number, body)
    xref = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%EOF\n" % (len(objects) + 1, xref)
    return bytes(out)


def solid_pixels(color, width=32, height=24) -> np.ndarray:
    """uint8 array filled with ``color`` (int for gray, tuple for RGB/RGBA)."""
    if isinstance(color, int):
        return np.full((height, width), color, dtype=np.uint8)
    return np.full((height, width, len(color)), color, dtype=np.uint8)


@pytest.fixture
def a4_pdf():
    return build_pdf([A4])


@pytest.fixture
def empty_pdf():
    return build_empty_pdf()


@pytest.fixture
def mixed_pdf():
    """Three pages: A4, Letter and a landscape tabloid."""
    return build_pdf([A4, LETTER, (1224.0, 792.0)])


@pytest.fixture
def encrypted_pdf():
    """Three-page AES-256 encrypted document opened with PASSWORD."""
    return build_pdf([A4, A4, LETTER], password=PASSWORD)


@pytest.fixture
def a4_bounds():
    return PageBounds(x0=0, y0=0, x1=A4[0], y1=A4[1])


@pytest.fixture
def letter_bounds():
    return PageBounds(x0=0, y0=0, x1=LETTER[0], y1=LETTER[1])


@pytest.fixture
def make_png():
    """Factory: solid-color PNG RasterImage."""
    def _make(color=(200, 100, 50), width=32, height=24):
        return encode_png(solid_pixels(color, width, height))
    return _make


@pytest.fixture
def make_page(make_png):
    """Factory: ProcessedPage with a small solid PNG."""
    def _make(page_index=0, bounds=None, image=None, processed=None, dpi=72):
        bounds = bounds or PageBounds(x0=0, y0=0, x1=A4[0], y1=A4[1])
        return ProcessedPage(
            page_index=page_index,
            bounds=bounds,
            original_image=image or make_png(),
            render_options=RenderOptions(dpi=dpi),
            processed_image=processed,
        )
    return _make
