"""Raster images and the per-page records handed to the exporter."""
from dataclasses import dataclass
from typing import Optional

from .enums import ImageFormat
from .geometry import PageBounds
from .options import ProcessingParams, RenderOptions


@dataclass(frozen=True)
class RasterImage:
    """An encoded bitmap.

    Instances are never mutated once handed to the next pipeline stage; every
    stage builds a new one.
    """
    data: bytes
    width: int
    height: int
    channels: int
    format: ImageFormat = ImageFormat.PNG

    @property
    def byte_size(self) -> int:
        return len(self.data)

    @property
    def has_alpha(self) -> bool:
        return self.channels in (2, 4)


@dataclass(frozen=True)
class ProcessedPage:
    """Everything the exporter needs for one output page."""
    page_index: int  # 0-indexed, position in the source document
    bounds: PageBounds
    original_image: RasterImage
    render_options: RenderOptions
    processed_image: Optional[RasterImage] = None
    processing_params: Optional[ProcessingParams] = None

    @property
    def image_for_export(self) -> RasterImage:
        """Processed image if there is a usable one, else the original."""
        if self.processed_image is not None and self.processed_image.byte_size > 0:
            return self.processed_image
        return self.original_image
