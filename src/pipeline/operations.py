"""Core operations exposed to callers (CLI, services, notebooks).

Each operation is a thin mapping onto one component: open + bound,
authenticate, render, preview, enhance, feasibility check, export.
"""
import logging
import warnings
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import enhancement
import exporter
import rasterizer
from estimator import estimate_memory
from rasterizer import DocumentHandle
from schemas import (
    ExportMetadata,
    Feasibility,
    PageBounds,
    ProcessedPage,
    ProcessingParams,
    RasterImage,
    RenderOptions,
)
from schemas.errors import DecodeError, ExportError, FeasibilityWarning
from schemas.settings import PipelineSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class OpenResult:
    """Result of opening a document.

    ``bounds`` is empty until the document is unlocked.
    """
    handle: DocumentHandle
    needs_password: bool
    bounds: List[PageBounds] = field(default_factory=list)


@dataclass
class AuthResult:
    ok: bool
    bounds: List[PageBounds] = field(default_factory=list)


def open_and_bound(data: bytes, filename: str = "document.pdf") -> OpenResult:
    """
    Open a document and, when it is not locked, extract every page's bounds.

    Raises:
        DecodeError: If the bytes are not a readable document or it has no pages
    """
    handle = rasterizer.open_document(data, filename)
    if handle.is_locked:
        logger.info(f"{filename} requires a password")
        return OpenResult(handle=handle, needs_password=True)

    if handle.page_count() == 0:
        handle.close()
        raise DecodeError(f"{filename} has no readable pages")

    bounds = rasterizer.extract_all_bounds(handle)
    logger.info(f"Opened {filename}: {len(bounds)} pages")
    return OpenResult(handle=handle, needs_password=False, bounds=bounds)


def authenticate(handle: DocumentHandle, password: str) -> AuthResult:
    """
    Try a password on a locked handle.

    A wrong password returns ``ok=False`` and leaves the handle open so the
    caller can retry. On success the bounds of every page are returned.

    Raises:
        DecodeError: If the unlocked document has no pages
    """
    if not handle.authenticate(password):
        logger.warning("Authentication failed: wrong password")
        return AuthResult(ok=False)

    if handle.page_count() == 0:
        raise DecodeError("Document has no readable pages")

    bounds = rasterizer.extract_all_bounds(handle)
    logger.info(f"Authenticated document: {len(bounds)} pages")
    return AuthResult(ok=True, bounds=bounds)


def render_page(
    handle: DocumentHandle,
    page_index: int,
    bounds: PageBounds,
    options: RenderOptions,
    settings: Optional[PipelineSettings] = None,
) -> RasterImage:
    return rasterizer.render_page(handle, page_index, bounds, options, settings)


def render_preview(
    handle: DocumentHandle,
    page_index: int,
    bounds: PageBounds,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    settings: Optional[PipelineSettings] = None,
) -> RasterImage:
    return rasterizer.render_preview(handle, page_index, bounds, max_width, max_height, settings)


def process_image(image: RasterImage, params: Optional[ProcessingParams] = None) -> RasterImage:
    return enhancement.process_image(image, params)


def check_feasibility(
    bounds_list: Sequence[PageBounds],
    options: RenderOptions,
    budget_mb: Optional[float] = None,
    settings: Optional[PipelineSettings] = None,
) -> Feasibility:
    """
    Estimate memory for a batch render.

    An infeasible result is advisory: a FeasibilityWarning is emitted and the
    result returned, nothing is aborted.
    """
    result = estimate_memory(bounds_list, options, budget_mb, settings)
    if not result.feasible:
        logger.warning(
            f"Estimated memory {result.estimated_mb}MB exceeds budget {result.budget_mb}MB: "
            f"{'; '.join(result.suggestions) or 'no suggestions'}"
        )
        warnings.warn(
            FeasibilityWarning(result.estimated_mb, result.budget_mb, result.suggestions),
            stacklevel=2,
        )
    return result


def export_pdf(
    pages: Sequence[ProcessedPage],
    metadata: Optional[ExportMetadata] = None,
    settings: Optional[PipelineSettings] = None,
) -> bytes:
    """
    Validate pages and rebuild the PDF.

    Raises:
        ExportError: On invalid input or a page that cannot be embedded
    """
    settings = settings or get_settings()
    validation = exporter.validate_pages(pages, settings)
    for message in validation.warnings:
        logger.warning(message)
    if not validation.valid:
        raise ExportError("; ".join(validation.errors))
    return exporter.export_pdf(pages, metadata, settings)
