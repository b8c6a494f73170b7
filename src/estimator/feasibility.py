"""Memory and output-size estimation for batch renders and exports.

Nothing here raises on a bad estimate: results are recommendations and the
caller decides whether to proceed.
"""
import logging
import math
from typing import List, Optional, Sequence

from rasterizer.rasterize import calculate_pixel_size
from schemas import ColorMode, Feasibility, PageBounds, ProcessedPage, RenderOptions
from schemas.settings import PipelineSettings, get_settings

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


def estimate_page_memory(
    bounds: PageBounds,
    options: RenderOptions,
    settings: Optional[PipelineSettings] = None,
) -> int:
    """
    Estimate transient memory for rendering one page.

    bytes = width_px * height_px * (channels + 1) * overhead_factor

    One extra byte per pixel is always reserved for an alpha slot; the
    overhead factor (1.5 by default) covers compressed and temporary copies.

    Returns:
        Estimated bytes, floored
    """
    settings = settings or get_settings()
    width_px, height_px = calculate_pixel_size(bounds, options.dpi)
    bytes_per_pixel = options.channels + 1
    raw = width_px * height_px * bytes_per_pixel
    return math.floor(raw * settings.estimator.memory_overhead_factor)


def estimate_memory(
    bounds_list: Sequence[PageBounds],
    options: RenderOptions,
    budget_mb: Optional[float] = None,
    settings: Optional[PipelineSettings] = None,
) -> Feasibility:
    """
    Check whether rendering ``bounds_list`` at ``options`` fits a memory budget.

    Args:
        bounds_list: Bounds of every page in the batch
        options: Render options for the batch
        budget_mb: Memory budget in MB (default from settings, 500)

    Returns:
        Feasibility with estimated MB (2 decimals) and, when infeasible,
        ordered suggestions: lower DPI, batch the work, switch to grayscale
    """
    settings = settings or get_settings()
    cfg = settings.estimator
    budget_mb = cfg.memory_budget_mb if budget_mb is None else budget_mb

    total_bytes = sum(estimate_page_memory(b, options, settings) for b in bounds_list)
    estimated_mb = total_bytes / BYTES_PER_MB
    feasible = estimated_mb <= budget_mb

    suggestions: List[str] = []
    if not feasible:
        if options.dpi > cfg.suggest_dpi_above:
            suggestions.append(
                f"Consider reducing DPI from {options.dpi:g} to {cfg.suggest_dpi_above:g} or lower"
            )
        if len(bounds_list) > cfg.suggest_batching_above_pages:
            suggestions.append("Consider batch processing for large documents")
        if options.color_mode == ColorMode.RGB:
            suggestions.append("Consider using grayscale to reduce memory usage")

    result = Feasibility(
        estimated_mb=round(estimated_mb, 2),
        feasible=feasible,
        budget_mb=budget_mb,
        suggestions=suggestions,
    )
    logger.debug(
        f"Memory estimate for {len(bounds_list)} pages @ {options.dpi:g} DPI: "
        f"{result.estimated_mb}MB (budget {budget_mb}MB, feasible={feasible})"
    )
    return result


def estimate_output_size(
    pages: Sequence[ProcessedPage],
    settings: Optional[PipelineSettings] = None,
) -> int:
    """
    Estimate the exported PDF size in bytes.

    (sum of embedded image sizes + per-page structure overhead) * container overhead
    """
    settings = settings or get_settings()
    cfg = settings.export

    total = len(pages) * cfg.page_overhead_bytes
    total += sum(page.image_for_export.byte_size for page in pages)
    total = math.floor(total * cfg.container_overhead_factor)

    logger.debug(f"Estimated output size: {total / BYTES_PER_MB:.2f} MB")
    return total
