"""Pixel-level color substitution.

A pixel matches when each of its R, G and B values is within ``tolerance`` of
the target, checked independently per channel. Matching pixels get the
replacement RGB; alpha is left as is. No blending, no colorspace conversion.
"""
import logging
from typing import Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def _as_rgb(pixels: np.ndarray) -> np.ndarray:
    """Expand gray input to RGB so every pixel has three color samples."""
    if pixels.ndim == 2:
        return np.stack([pixels, pixels, pixels], axis=2)
    return pixels.copy()


def replace_color(
    pixels: np.ndarray,
    target_color: Sequence[int],
    replace_color: Sequence[int],
    tolerance: float,
) -> Tuple[np.ndarray, int]:
    """
    Substitute every pixel close to ``target_color`` with ``replace_color``.

    Args:
        pixels: uint8 gray, RGB or RGBA array (not modified)
        target_color: (r, g, b) to match
        replace_color: (r, g, b) to write
        tolerance: Maximum absolute difference allowed on each channel

    Returns:
        (new RGB or RGBA array, number of replaced pixels)
    """
    out = _as_rgb(pixels)
    rgb = out[:, :, :3].astype(np.int16)
    target = np.asarray(target_color, dtype=np.int16).reshape(1, 1, 3)

    mask = np.all(np.abs(rgb - target) <= tolerance, axis=2)
    replaced = int(mask.sum())

    out[:, :, :3][mask] = np.asarray(replace_color, dtype=np.uint8)

    logger.debug(
        f"Color replace: target RGB{tuple(target_color)} +/-{tolerance} -> "
        f"RGB{tuple(replace_color)}, {replaced} pixels replaced"
    )
    return out, replaced
