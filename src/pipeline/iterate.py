"""Lazy render -> enhance iteration and whole-document export.

``iter_processed_pages`` yields one ProcessedPage at a time and checks the
cancellation token between pages. It does not schedule work concurrently;
callers that want parallelism drive several handles themselves.
"""
import logging
from typing import Callable, Iterator, Optional, Protocol, Sequence

import enhancement
import exporter
import rasterizer
from rasterizer import DocumentHandle
from schemas import (
    ExportMetadata,
    PageBounds,
    ProcessedPage,
    ProcessingParams,
    RenderOptions,
)
from schemas.errors import ExportError, PipelineCancelled
from schemas.settings import PipelineSettings, get_settings
from telemetry import Telemetry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


def iter_processed_pages(
    handle: DocumentHandle,
    bounds: Sequence[PageBounds],
    options: RenderOptions,
    params: Optional[ProcessingParams] = None,
    page_indices: Optional[Sequence[int]] = None,
    cancel: Optional[CancelToken] = None,
    on_progress: Optional[ProgressCallback] = None,
    settings: Optional[PipelineSettings] = None,
    telemetry: Optional[Telemetry] = None,
) -> Iterator[ProcessedPage]:
    """
    Render and enhance pages one at a time.

    Args:
        handle: Unlocked document handle
        bounds: Bounds of every page, indexed by page number
        options: Render options applied to every page
        params: Enhancement parameters; ``None`` or a no-op set skips enhancement
        page_indices: Pages to produce (default: all, in order)
        cancel: Object with ``is_set()``; checked before each page
        on_progress: Called with (done, total) after each page

    Yields:
        ProcessedPage records, in ``page_indices`` order

    Raises:
        PipelineCancelled: If ``cancel`` is set before a page starts
        RenderError / ProcessingError: From the failing page
    """
    settings = settings or get_settings()
    telemetry = telemetry or Telemetry()
    indices = list(range(len(bounds))) if page_indices is None else list(page_indices)
    enhance = params is not None and not params.is_noop()
    total = len(indices)

    for done, page_index in enumerate(indices):
        if cancel is not None and cancel.is_set():
            logger.info(f"Cancelled before page {page_index} ({done}/{total} done)")
            raise PipelineCancelled(f"Cancelled after {done} of {total} pages")

        page_bounds = bounds[page_index]
        with telemetry.span("render"):
            original = rasterizer.render_page(handle, page_index, page_bounds, options, settings)

        processed = None
        if enhance:
            with telemetry.span("enhance"):
                processed = enhancement.process_image(original, params)

        yield ProcessedPage(
            page_index=page_index,
            bounds=page_bounds,
            original_image=original,
            render_options=options,
            processed_image=processed,
            processing_params=params if enhance else None,
        )

        if on_progress:
            on_progress(done + 1, total)


def export_document(
    handle: DocumentHandle,
    bounds: Sequence[PageBounds],
    options: RenderOptions,
    params: Optional[ProcessingParams] = None,
    metadata: Optional[ExportMetadata] = None,
    page_indices: Optional[Sequence[int]] = None,
    batch_size: Optional[int] = None,
    cancel: Optional[CancelToken] = None,
    on_progress: Optional[ProgressCallback] = None,
    settings: Optional[PipelineSettings] = None,
    telemetry: Optional[Telemetry] = None,
) -> bytes:
    """
    Render, enhance and rebuild a document in one call.

    Documents longer than ``batch_size`` pages are exported in chunks and
    merged. Cancellation discards everything produced so far.

    Raises:
        PipelineCancelled: If ``cancel`` is set between pages
        ExportError: If a page cannot be embedded
    """
    settings = settings or get_settings()
    telemetry = telemetry or Telemetry()
    batch_size = batch_size or settings.export.batch_size

    with telemetry.span("pages"):
        pages = list(iter_processed_pages(
            handle, bounds, options, params,
            page_indices=page_indices,
            cancel=cancel,
            on_progress=on_progress,
            settings=settings,
            telemetry=telemetry,
        ))

    if not pages:
        raise ExportError("No pages provided for export")

    with telemetry.span("export"):
        if len(pages) <= batch_size:
            return exporter.export_pdf(pages, metadata, settings)

        chunks = exporter.export_in_batches(pages, batch_size, settings=settings)
        if cancel is not None and cancel.is_set():
            raise PipelineCancelled("Cancelled during export")
        with telemetry.span("merge"):
            return exporter.merge_pdfs(chunks, metadata, settings)
