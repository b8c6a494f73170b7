"""PDF remaster rasterizer - page geometry and page-to-bitmap rendering."""

from .bounds import extract_all_bounds, extract_bounds, get_page_bounds
from .document import DocumentHandle, PyMuPDFDocument, open_document
from .rasterize import (
    calculate_pixel_size,
    preview_dpi,
    render_page,
    render_page_batch,
    render_preview,
)

__all__ = [
    "DocumentHandle",
    "PyMuPDFDocument",
    "open_document",
    "extract_all_bounds",
    "extract_bounds",
    "get_page_bounds",
    "calculate_pixel_size",
    "preview_dpi",
    "render_page",
    "render_page_batch",
    "render_preview",
]
