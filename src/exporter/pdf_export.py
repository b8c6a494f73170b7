"""Rebuild a raster-backed PDF whose pages match the source page sizes.

Every output page is created at exactly ``(bounds.width_pt, bounds.height_pt)``
taken from the extracted bounds; the rendered pixel size never feeds back into
page geometry. The image is stretched over the full page rectangle.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

import pymupdf

from enhancement.codec import decode, encode_png, flatten_alpha, sniff_format
from schemas import ExportMetadata, ImageFormat, PageValidation, ProcessedPage, RasterImage
from schemas.errors import ExportError
from schemas.settings import PipelineSettings, get_settings

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _pdf_date(value: datetime) -> str:
    """Format a datetime as a PDF date string (D:YYYYMMDDHHmmSS+HH'mm')."""
    stamp = value.strftime("D:%Y%m%d%H%M%S")
    offset = value.utcoffset()
    if offset is None:
        return stamp
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{stamp}{sign}{minutes // 60:02d}'{minutes % 60:02d}'"


def _flatten_for_export(image: RasterImage) -> bytes:
    """Composite PNG alpha onto white; anything else is passed through as is."""
    if sniff_format(image.data) != ImageFormat.PNG:
        return image.data
    try:
        pixels = decode(image)
    except ValueError as e:
        logger.debug(f"Could not decode PNG for alpha flattening: {e}")
        return image.data
    if pixels.ndim == 3 and pixels.shape[2] == 4:
        return encode_png(flatten_alpha(pixels)).data
    return image.data


def _insert(page, rect, data: bytes, expected: ImageFormat) -> None:
    actual = sniff_format(data)
    if actual != expected:
        raise ValueError(f"data is not a {expected.value} image")
    page.insert_image(rect, stream=data, keep_proportion=False)


def _embed_page_image(page, rect, image: RasterImage, page_index: int) -> ImageFormat:
    """
    Draw ``image`` over ``rect``, trying PNG first and JPEG second.

    Raises:
        ExportError: If neither attempt succeeds
    """
    data = _flatten_for_export(image)
    try:
        _insert(page, rect, data, ImageFormat.PNG)
        return ImageFormat.PNG
    except Exception as png_error:
        logger.warning(f"PNG embed failed for page {page_index}, trying JPEG: {png_error}")

    try:
        _insert(page, rect, data, ImageFormat.JPEG)
        return ImageFormat.JPEG
    except Exception as jpeg_error:
        logger.error(f"Failed to embed page {page_index} as both PNG and JPEG: {jpeg_error}")
        raise ExportError(str(jpeg_error), page_index=page_index) from jpeg_error


def _apply_metadata(
    doc: "pymupdf.Document",
    metadata: ExportMetadata,
    settings: PipelineSettings,
) -> None:
    now = datetime.now().astimezone()
    doc.set_metadata({
        "title": metadata.title or "",
        "author": metadata.author or "",
        "subject": metadata.subject or "",
        "keywords": ", ".join(metadata.keywords),
        "creator": metadata.creator or settings.export.creator,
        "producer": metadata.producer or settings.export.producer,
        "creationDate": _pdf_date(metadata.creation_date or now),
        "modDate": _pdf_date(metadata.modification_date or now),
    })


def export_pdf(
    pages: Sequence[ProcessedPage],
    metadata: Optional[ExportMetadata] = None,
    settings: Optional[PipelineSettings] = None,
) -> bytes:
    """
    Build a PDF with one image-filled page per ProcessedPage.

    Pages are written in ascending ``page_index`` order. Each page uses the
    processed image when present, else the original.

    Args:
        pages: Pages to export
        metadata: Optional document metadata, set once on the document

    Returns:
        PDF bytes

    Raises:
        ExportError: If there are no pages or any page cannot be embedded;
            no partial document is returned
    """
    settings = settings or get_settings()
    if not pages:
        raise ExportError("No pages provided for export")

    ordered = sorted(pages, key=lambda p: p.page_index)
    logger.info(f"Starting PDF export with {len(ordered)} pages")

    doc = pymupdf.open()
    try:
        for i, page in enumerate(ordered):
            width_pt = page.bounds.width_pt
            height_pt = page.bounds.height_pt
            logger.debug(f"Adding page {i + 1}: {width_pt} x {height_pt} pt")

            out_page = doc.new_page(width=width_pt, height=height_pt)
            rect = pymupdf.Rect(0, 0, width_pt, height_pt)
            fmt = _embed_page_image(out_page, rect, page.image_for_export, page.page_index)
            logger.debug(f"Page {i + 1} embedded as {fmt.value}")

        if metadata is not None:
            _apply_metadata(doc, metadata, settings)

        try:
            result = doc.tobytes(garbage=3, deflate=True)
        except Exception as e:
            raise ExportError(f"Failed to write PDF: {e}") from e
    finally:
        doc.close()

    logger.info(f"PDF export completed: {len(result)} bytes")
    return result


def export_in_batches(
    pages: Sequence[ProcessedPage],
    batch_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    metadata: Optional[ExportMetadata] = None,
    settings: Optional[PipelineSettings] = None,
) -> List[bytes]:
    """
    Export large documents as several intermediate PDFs of ``batch_size`` pages.

    Returns:
        One PDF per batch, in page order
    """
    settings = settings or get_settings()
    batch_size = batch_size or settings.export.batch_size
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    ordered = sorted(pages, key=lambda p: p.page_index)
    total_batches = (len(ordered) + batch_size - 1) // batch_size
    logger.info(f"Exporting {len(ordered)} pages in {total_batches} batches of {batch_size}")

    results: List[bytes] = []
    for batch_index, start in enumerate(range(0, len(ordered), batch_size)):
        batch = ordered[start:start + batch_size]
        results.append(export_pdf(batch, metadata=metadata, settings=settings))
        if on_progress:
            on_progress(batch_index + 1, total_batches)
        logger.debug(f"Batch {batch_index + 1} completed: {len(results[-1])} bytes")

    return results


def merge_pdfs(
    pdf_chunks: Sequence[bytes],
    metadata: Optional[ExportMetadata] = None,
    settings: Optional[PipelineSettings] = None,
) -> bytes:
    """Concatenate PDFs in order into a single document, then set metadata."""
    if not pdf_chunks:
        raise ExportError("No PDFs provided to merge")

    merged = pymupdf.open()
    try:
        for i, chunk in enumerate(pdf_chunks):
            try:
                src = pymupdf.open(stream=chunk, filetype="pdf")
            except Exception as e:
                raise ExportError(f"Failed to read PDF chunk {i}: {e}") from e
            with src:
                logger.debug(f"Merging PDF {i + 1}: {src.page_count} pages")
                merged.insert_pdf(src)
        if metadata is not None:
            _apply_metadata(merged, metadata, settings or get_settings())
        return merged.tobytes(garbage=3, deflate=True)
    finally:
        merged.close()


def export_single_page(page: ProcessedPage, output_format: str = "PDF") -> bytes:
    """Export one page as a one-page PDF, or return its image bytes."""
    if output_format.upper() == "PDF":
        return export_pdf([page])
    image = page.image_for_export
    if image.byte_size == 0:
        raise ExportError("No image data available", page_index=page.page_index)
    return image.data


def validate_pages(
    pages: Sequence[ProcessedPage],
    settings: Optional[PipelineSettings] = None,
) -> PageValidation:
    """
    Check page records before export.

    Errors: empty input, negative index, empty original image.
    Warnings: very large pages, empty processed image (original will be used).
    """
    settings = settings or get_settings()
    max_dim = settings.export.max_page_dimension_pt
    errors: List[str] = []
    warnings: List[str] = []

    if not pages:
        return PageValidation(valid=False, errors=["No pages provided for export"])

    for i, page in enumerate(pages):
        if page.page_index < 0:
            errors.append(f"Invalid page index for page {i}: {page.page_index}")

        width_pt, height_pt = page.bounds.width_pt, page.bounds.height_pt
        if width_pt > max_dim or height_pt > max_dim:
            warnings.append(f"Very large page dimensions for page {i}: {width_pt} x {height_pt} pt")

        if page.original_image.byte_size == 0:
            errors.append(f"Empty original image data for page {i}")

        if page.processed_image is not None and page.processed_image.byte_size == 0:
            warnings.append(f"Empty processed image data for page {i}, will use original")

    return PageValidation(valid=not errors, errors=errors, warnings=warnings)
