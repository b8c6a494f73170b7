"""Enhancement - fixed-order bitmap transforms applied between render and export.

Public API:
    process_image: Run the enhancement chain on one raster
    validate_and_correct_params: Clamp out-of-range parameters with warnings
    replace_color: Per-pixel color substitution on a decoded array
    reencode_png: PNG round trip with no pixel changes
"""

from .analysis import auto_adjust_contrast, calculate_quality_score, smart_sharpen
from .chain import apply_chain, batch_process, process_image, validate_and_correct_params
from .codec import (
    convert_format,
    decode,
    encode_jpeg,
    encode_png,
    flatten_alpha,
    generate_preview,
    get_image_info,
    reencode_png,
    sniff_format,
)
from .color_replace import replace_color

__all__ = [
    "apply_chain",
    "batch_process",
    "process_image",
    "validate_and_correct_params",
    "replace_color",
    "auto_adjust_contrast",
    "calculate_quality_score",
    "smart_sharpen",
    "convert_format",
    "decode",
    "encode_jpeg",
    "encode_png",
    "flatten_alpha",
    "generate_preview",
    "get_image_info",
    "reencode_png",
    "sniff_format",
]
