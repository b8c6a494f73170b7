"""Exporter - rebuild a raster-backed PDF with the original page sizes."""

from .pdf_export import (
    export_in_batches,
    export_pdf,
    export_single_page,
    merge_pdfs,
    validate_pages,
)

__all__ = [
    "export_in_batches",
    "export_pdf",
    "export_single_page",
    "merge_pdfs",
    "validate_pages",
]
