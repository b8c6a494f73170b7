"""Page rasterization at a caller-chosen pixel density.

The scale factor is ``dpi / 72`` on both axes. The resulting pixel size is
informational only: physical page size always comes from ``PageBounds``.
"""
import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

from enhancement.codec import convert_format
from schemas import ColorMode, ImageFormat, PageBounds, RasterImage, RenderOptions
from schemas.errors import PasswordError, RenderError
from schemas.settings import PipelineSettings, get_settings

from .document import DocumentHandle

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def calculate_pixel_size(bounds: PageBounds, dpi: float) -> Tuple[int, int]:
    """
    Pixel size of a page rendered at ``dpi``.

    Args:
        bounds: Page bounds in points
        dpi: Target pixel density

    Returns:
        (width_px, height_px), each floored
    """
    scale = dpi / 72
    return math.floor(bounds.width_pt * scale), math.floor(bounds.height_pt * scale)


def render_page(
    handle: DocumentHandle,
    page_index: int,
    bounds: PageBounds,
    options: RenderOptions,
    settings: Optional[PipelineSettings] = None,
) -> RasterImage:
    """
    Render one page to an encoded bitmap.

    Args:
        handle: Unlocked document handle
        page_index: 0-indexed page
        bounds: The page's extracted bounds (logged, never altered)
        options: DPI, color mode and output format

    Returns:
        PNG raster, or JPEG when ``options.format`` is JPEG

    Raises:
        PasswordError: If the document is still locked
        RenderError: If the page cannot be rendered or encoded
    """
    settings = settings or get_settings()
    scale = options.scale
    width_px, height_px = calculate_pixel_size(bounds, options.dpi)
    logger.info(
        f"Rendering page {page_index}: {bounds.width_pt} x {bounds.height_pt} pt "
        f"@ {options.dpi} DPI (~{width_px} x {height_px} px)"
    )

    try:
        image = handle.render_page_to_bitmap(page_index, scale, scale, options.color_mode)
        if options.format == ImageFormat.JPEG:
            quality = options.quality or settings.render.jpeg_quality
            image = convert_format(image, ImageFormat.JPEG, quality=quality)
    except PasswordError:
        raise
    except Exception as e:
        raise RenderError(page_index, str(e)) from e

    return image


def render_page_batch(
    handle: DocumentHandle,
    pages: Sequence[Tuple[int, PageBounds]],
    options: RenderOptions,
    on_progress: Optional[ProgressCallback] = None,
) -> List[RasterImage]:
    """
    Render several pages sequentially, in the order given.

    The first RenderError stops the batch and propagates.
    """
    results: List[RasterImage] = []
    logger.info(f"Starting batch render of {len(pages)} pages at {options.dpi} DPI")

    for i, (page_index, bounds) in enumerate(pages):
        results.append(render_page(handle, page_index, bounds, options))
        if on_progress:
            on_progress(i + 1, len(pages))

    logger.info(f"Batch render completed: {len(results)} pages")
    return results


def preview_dpi(
    bounds: PageBounds,
    max_width: float,
    max_height: float,
    settings: Optional[PipelineSettings] = None,
) -> float:
    """
    DPI at which a page fits inside ``max_width`` x ``max_height`` pixels.

    Scale is capped at 2x and the result never drops below 72 DPI.
    """
    settings = settings or get_settings()
    scale = min(
        max_width / bounds.width_pt,
        max_height / bounds.height_pt,
        settings.render.preview_max_scale,
    )
    return max(72 * scale, settings.render.preview_min_dpi)


def render_preview(
    handle: DocumentHandle,
    page_index: int,
    bounds: PageBounds,
    max_width: Optional[int] = None,
    max_height: Optional[int] = None,
    settings: Optional[PipelineSettings] = None,
) -> RasterImage:
    """Render a low-resolution RGB PNG preview that fits the given box."""
    settings = settings or get_settings()
    max_width = max_width or settings.render.preview_max_width
    max_height = max_height or settings.render.preview_max_height

    dpi = preview_dpi(bounds, max_width, max_height, settings)
    logger.debug(f"Rendering preview for page {page_index}: DPI={dpi:.1f}")
    options = RenderOptions(dpi=dpi, color_mode=ColorMode.RGB, format=ImageFormat.PNG)
    return render_page(handle, page_index, bounds, options, settings)
