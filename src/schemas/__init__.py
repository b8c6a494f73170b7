"""PDF remaster schemas - data model shared by every pipeline stage."""
from .enums import ColorMode, ExportPurpose, ImageFormat, RenderPurpose, STAGE_NAMES
from .geometry import A4_HEIGHT_PT, A4_WIDTH_PT, BoundsResult, PageBounds
from .options import (
    POINTS_PER_INCH,
    ColorReplaceParams,
    ProcessingParams,
    RenderOptions,
    SharpenParams,
)
from .pages import ProcessedPage, RasterImage
from .reports import ExportMetadata, ExportSettings, Feasibility, ImageInfo, PageValidation

__all__ = [
    # Enums
    "ColorMode",
    "ExportPurpose",
    "ImageFormat",
    "RenderPurpose",
    "STAGE_NAMES",
    # Geometry
    "A4_WIDTH_PT",
    "A4_HEIGHT_PT",
    "BoundsResult",
    "PageBounds",
    # Options
    "POINTS_PER_INCH",
    "ColorReplaceParams",
    "ProcessingParams",
    "RenderOptions",
    "SharpenParams",
    # Pages
    "ProcessedPage",
    "RasterImage",
    # Reports
    "ExportMetadata",
    "ExportSettings",
    "Feasibility",
    "ImageInfo",
    "PageValidation",
]
