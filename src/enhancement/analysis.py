"""Content-aware helpers built on the chain's operators.

These pick enhancement parameters from image statistics: a rough quality
score, histogram-driven contrast adjustment and quality-driven sharpening.
"""
import logging
from typing import Dict, Tuple

import numpy as np

from schemas import RasterImage
from schemas.errors import ProcessingError

from . import operators
from .codec import decode, encode_png

logger = logging.getLogger(__name__)

# Quality score normalization
VARIANCE_DIVISOR = 10.0
STDEV_DIVISOR = 2.0
SHARPNESS_WEIGHT = 0.6
CONTRAST_WEIGHT = 0.4
FALLBACK_QUALITY_SCORE = 50

# Auto-contrast clamp
AUTO_CONTRAST_RANGE = (0.5, 2.0)

# (max score, sigma, flat, jagged): low quality gets the strongest sharpening
SMART_SHARPEN_TIERS = (
    (30, 2.0, 1.0, 2.0),
    (60, 1.5, 1.5, 2.5),
    (101, 1.0, 2.0, 3.0),
)


def calculate_quality_score(image: RasterImage) -> int:
    """
    Estimate image quality on a 0-100 scale.

    Combines luma variance (sharpness proxy) and the first channel's standard
    deviation (contrast proxy). Returns 50 when the image cannot be analysed.
    """
    try:
        pixels = decode(image)
        color, _ = operators.split_alpha(pixels)
        gray = operators.luma(color).astype(np.float64)
        variance = float(gray.var())

        first_channel = color if color.ndim == 2 else color[:, :, 0]
        contrast = float(first_channel.astype(np.float64).std())
    except Exception as e:
        logger.error(f"Failed to calculate quality score: {e}")
        return FALLBACK_QUALITY_SCORE

    sharpness_score = min(100.0, variance / VARIANCE_DIVISOR)
    contrast_score = min(100.0, contrast / STDEV_DIVISOR)
    score = sharpness_score * SHARPNESS_WEIGHT + contrast_score * CONTRAST_WEIGHT

    logger.debug(
        f"Quality analysis: sharpness={sharpness_score:.1f}, "
        f"contrast={contrast_score:.1f}, overall={score:.1f}"
    )
    return int(round(score))


def auto_adjust_contrast(
    image: RasterImage,
    target_mean: float = 128.0,
) -> Tuple[RasterImage, Dict[str, float]]:
    """
    Shift mean brightness toward ``target_mean``.

    Returns:
        (adjusted PNG, {"contrast": ..., "brightness": ...} actually applied)
    """
    try:
        pixels = decode(image)
        color, _ = operators.split_alpha(pixels)
        current_mean = float(color.mean())

        brightness = target_mean - current_mean
        low, high = AUTO_CONTRAST_RANGE
        contrast = max(low, min(high, 1.0 + (target_mean - current_mean) / 255.0))

        logger.info(f"Auto-adjust: current mean={current_mean:.1f}, target={target_mean}")
        adjusted = encode_png(operators.apply_linear(pixels, contrast, brightness))
    except Exception as e:
        raise ProcessingError("auto_contrast", str(e)) from e

    return adjusted, {"contrast": contrast, "brightness": brightness}


def smart_sharpen(image: RasterImage) -> Tuple[RasterImage, Dict[str, float]]:
    """
    Sharpen with parameters chosen from the image's quality score.

    Returns:
        (sharpened PNG, {"sigma": ..., "flat": ..., "jagged": ...})
    """
    score = calculate_quality_score(image)
    for max_score, sigma, flat, jagged in SMART_SHARPEN_TIERS:
        if score < max_score:
            break

    logger.info(f"Smart sharpen for quality {score}: sigma={sigma}, flat={flat}, jagged={jagged}")
    try:
        sharpened = encode_png(operators.sharpen(decode(image), sigma, flat, jagged))
    except Exception as e:
        raise ProcessingError("sharpen", str(e)) from e

    return sharpened, {"sigma": sigma, "flat": flat, "jagged": jagged}
