"""Shared enums used across render, processing and export schemas."""
from enum import Enum


class ColorMode(str, Enum):
    """Sampling mode used when rasterizing a page."""
    RGB = "RGB"
    GRAY = "Gray"


class ImageFormat(str, Enum):
    PNG = "PNG"
    JPEG = "JPEG"


class RenderPurpose(str, Enum):
    """What a render is for; drives DPI recommendations."""
    PREVIEW = "preview"
    WEB = "web"
    PRINT = "print"
    ARCHIVE = "archive"


class ExportPurpose(str, Enum):
    PRINT = "print"
    WEB = "web"
    ARCHIVE = "archive"
    EMAIL = "email"


# Enhancement stage names, in the order the chain applies them
STAGE_NAMES = (
    "gamma",
    "grayscale",
    "linear",
    "denoise",
    "sharpen",
    "threshold",
    "color_replace",
)
