"""Purpose-driven defaults for DPI, export batching and enhancement."""
from typing import Optional, Union

from schemas import (
    ExportPurpose,
    ExportSettings,
    PageBounds,
    ProcessingParams,
    RenderPurpose,
    SharpenParams,
)
from schemas.settings import PipelineSettings, get_settings

# purpose -> (DPI for large pages, DPI for regular pages)
RECOMMENDED_DPI = {
    RenderPurpose.PREVIEW: (72, 96),
    RenderPurpose.WEB: (96, 120),
    RenderPurpose.PRINT: (150, 200),
    RenderPurpose.ARCHIVE: (200, 300),
}
DEFAULT_DPI = 150


def recommended_dpi(
    bounds: PageBounds,
    purpose: Union[RenderPurpose, str],
    settings: Optional[PipelineSettings] = None,
) -> int:
    """
    Recommend a render DPI for a page.

    Pages larger than roughly A3 (area above 500000 pt^2) get a lower DPI.
    Unknown purposes get 150.
    """
    settings = settings or get_settings()
    try:
        purpose = RenderPurpose(purpose)
    except ValueError:
        return DEFAULT_DPI

    is_large_page = bounds.area_pt2 > settings.estimator.large_page_area_pt2
    large_dpi, regular_dpi = RECOMMENDED_DPI[purpose]
    return large_dpi if is_large_page else regular_dpi


def recommended_export_settings(
    purpose: Union[ExportPurpose, str],
    page_count: int,
) -> ExportSettings:
    """Export batching / compression / metadata defaults for a purpose."""
    try:
        purpose = ExportPurpose(purpose)
    except ValueError:
        return ExportSettings(compress=False, batch_size=50, include_metadata=True)

    if purpose == ExportPurpose.PRINT:
        return ExportSettings(
            compress=False,
            batch_size=25 if page_count > 100 else 50,
            include_metadata=True,
        )
    if purpose == ExportPurpose.WEB:
        return ExportSettings(compress=True, batch_size=50, include_metadata=False)
    if purpose == ExportPurpose.ARCHIVE:
        return ExportSettings(
            compress=False,
            batch_size=20 if page_count > 200 else 50,
            include_metadata=True,
        )
    # email
    return ExportSettings(
        compress=True,
        batch_size=max(1, min(20, page_count)),
        include_metadata=False,
    )


def recommended_processing_params(purpose: Union[RenderPurpose, str]) -> ProcessingParams:
    """Mild contrast boost and sharpening; archives are also converted to grayscale."""
    return ProcessingParams(
        grayscale=str(getattr(purpose, "value", purpose)) == RenderPurpose.ARCHIVE.value,
        contrast=1.1,
        brightness=0,
        threshold=0,
        sharpen=SharpenParams(sigma=1.0, flat=1.5, jagged=2.0),
        denoise=False,
        gamma=1.0,
    )
