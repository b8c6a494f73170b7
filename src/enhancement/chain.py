"""Fixed-order enhancement chain.

Stage order (never reordered):
    gamma -> grayscale -> linear -> denoise -> sharpen -> threshold -> color_replace

Each stage runs only when its parameters make it a non-no-op, so the default
ProcessingParams produce exactly the PNG re-encoding of the input.
"""
import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from schemas import ColorReplaceParams, ProcessingParams, RasterImage, SharpenParams
from schemas.errors import ProcessingError

from . import operators
from .codec import decode, encode_png
from .color_replace import replace_color

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

# --- Parameter ranges ---
CONTRAST_RANGE = (0.1, 3.0)
BRIGHTNESS_RANGE = (-100.0, 100.0)
THRESHOLD_RANGE = (0.0, 255.0)
GAMMA_RANGE = (0.1, 3.0)
SHARPEN_SIGMA_RANGE = (0.0, 10.0)
TOLERANCE_RANGE = (0.0, 50.0)


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(high, value))


def _clamp_color(color: Sequence[float]) -> Tuple[int, int, int]:
    r, g, b = (max(0, min(255, int(np.floor(v)))) for v in color)
    return (r, g, b)


def validate_and_correct_params(params: ProcessingParams) -> Tuple[ProcessingParams, List[str]]:
    """
    Clamp out-of-range parameters.

    Values are corrected, never rejected. Each correction adds a warning.

    Args:
        params: Parameters as supplied by the caller

    Returns:
        (corrected params, list of warning messages)
    """
    warnings: List[str] = []
    scalar_checks = (
        ("contrast", "Contrast", CONTRAST_RANGE),
        ("brightness", "Brightness", BRIGHTNESS_RANGE),
        ("threshold", "Threshold", THRESHOLD_RANGE),
        ("gamma", "Gamma", GAMMA_RANGE),
    )

    updates = {}
    for field, label, bounds in scalar_checks:
        value = getattr(params, field)
        clamped = _clamp(value, bounds)
        if clamped != value:
            warnings.append(f"{label} {value} out of range [{bounds[0]}, {bounds[1]}], clamped")
            updates[field] = clamped

    sigma = params.sharpen.sigma
    clamped_sigma = _clamp(sigma, SHARPEN_SIGMA_RANGE)
    if clamped_sigma != sigma:
        warnings.append(
            f"Sharpen sigma {sigma} out of range "
            f"[{SHARPEN_SIGMA_RANGE[0]}, {SHARPEN_SIGMA_RANGE[1]}], clamped"
        )
        updates["sharpen"] = SharpenParams(
            sigma=clamped_sigma,
            flat=params.sharpen.flat,
            jagged=params.sharpen.jagged,
        )

    replace = params.color_replace
    if replace.enabled:
        tolerance = _clamp(replace.tolerance, TOLERANCE_RANGE)
        if tolerance != replace.tolerance:
            warnings.append(
                f"Color tolerance {replace.tolerance} out of range "
                f"[{TOLERANCE_RANGE[0]}, {TOLERANCE_RANGE[1]}], clamped"
            )
        updates["color_replace"] = ColorReplaceParams(
            enabled=True,
            target_color=_clamp_color(replace.target_color),
            replace_color=_clamp_color(replace.replace_color),
            tolerance=tolerance,
        )

    corrected = params.model_copy(update=updates) if updates else params
    return corrected, warnings


def _run_stage(stage: str, func: Callable[[], np.ndarray]) -> np.ndarray:
    try:
        return func()
    except Exception as e:
        raise ProcessingError(stage, str(e)) from e


def apply_chain(pixels: np.ndarray, params: ProcessingParams) -> np.ndarray:
    """
    Run the enhancement stages on a decoded array.

    Args:
        pixels: Decoded uint8 array
        params: Already-validated parameters

    Returns:
        New array; ``pixels`` itself is never modified
    """
    if params.gamma != 1.0:
        pixels = _run_stage("gamma", lambda: operators.apply_gamma(pixels, params.gamma))
        logger.debug(f"Applied gamma correction: {params.gamma}")

    if params.grayscale:
        pixels = _run_stage("grayscale", lambda: operators.to_grayscale(pixels))
        logger.debug("Applied grayscale conversion")

    if params.contrast != 1.0 or params.brightness != 0:
        pixels = _run_stage(
            "linear",
            lambda: operators.apply_linear(pixels, params.contrast, params.brightness),
        )
        logger.debug(f"Applied linear adjustment: contrast={params.contrast}, brightness={params.brightness}")

    if params.denoise:
        pixels = _run_stage("denoise", lambda: operators.denoise(pixels))
        logger.debug("Applied denoising (gaussian blur)")

    sharpen = params.sharpen
    if sharpen.sigma > 0:
        pixels = _run_stage(
            "sharpen",
            lambda: operators.sharpen(pixels, sharpen.sigma, sharpen.flat, sharpen.jagged),
        )
        logger.debug(f"Applied sharpening: sigma={sharpen.sigma}")

    if params.threshold > 0:
        pixels = _run_stage(
            "threshold",
            lambda: operators.apply_threshold(pixels, params.threshold, params.grayscale),
        )
        logger.debug(f"Applied threshold: {params.threshold}")

    replace = params.color_replace
    if replace.enabled:
        pixels, _ = _run_stage(
            "color_replace",
            lambda: replace_color(pixels, replace.target_color, replace.replace_color, replace.tolerance),
        )

    return pixels


def process_image(
    image: RasterImage,
    params: Optional[ProcessingParams] = None,
    validate: bool = True,
) -> RasterImage:
    """
    Apply the enhancement chain to one encoded image.

    Args:
        image: PNG or JPEG raster
        params: Enhancement parameters (defaults to the no-op configuration)
        validate: Clamp out-of-range parameters first (warnings are logged)

    Returns:
        New PNG RasterImage

    Raises:
        ProcessingError: Naming the stage that failed ("decode" and "encode"
            included); no partial result is returned
    """
    params = params or ProcessingParams()
    if validate:
        params, warnings = validate_and_correct_params(params)
        for message in warnings:
            logger.warning(message)

    pixels = _run_stage("decode", lambda: decode(image))
    pixels = apply_chain(pixels, params)
    return _run_stage("encode", lambda: encode_png(pixels))


def batch_process(
    images: Sequence[RasterImage],
    params: Optional[ProcessingParams] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> List[RasterImage]:
    """Process several images in order; the first failure propagates."""
    params = params or ProcessingParams()
    params, warnings = validate_and_correct_params(params)
    for message in warnings:
        logger.warning(message)

    results: List[RasterImage] = []
    logger.info(f"Starting batch processing of {len(images)} images")
    for i, image in enumerate(images):
        results.append(process_image(image, params, validate=False))
        if on_progress:
            on_progress(i + 1, len(images))

    logger.info(f"Batch processing completed: {len(results)} images")
    return results
