"""Per-stage bitmap operators for the enhancement chain.

Every operator takes a uint8 RGB(A) or gray array and returns a new array;
inputs are never modified. Alpha, when present, passes through untouched.
"""
import cv2
import numpy as np

# --- Operator constants ---
# Denoise: fixed light gaussian blur
DENOISE_SIGMA = 0.5

# Sharpen: detail magnitudes at or below this use the "flat" gain
SHARPEN_FLAT_THRESHOLD = 2.0

# Sharpen: per-pixel clamp on the applied detail (libvips defaults of
# 10 / 20 L* units, rescaled to 8-bit)
SHARPEN_MAX_BRIGHTEN = 25.0
SHARPEN_MAX_DARKEN = 51.0


def split_alpha(pixels: np.ndarray):
    """Split into (color, alpha). alpha is None for images without one."""
    if pixels.ndim == 3 and pixels.shape[2] == 4:
        return pixels[:, :, :3], pixels[:, :, 3]
    return pixels, None


def merge_alpha(color: np.ndarray, alpha) -> np.ndarray:
    if alpha is None:
        return color
    if color.ndim == 2:
        color = np.stack([color, color, color], axis=2)
    return np.dstack([color, alpha])


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.round(values), 0, 255).astype(np.uint8)


def luma(color: np.ndarray) -> np.ndarray:
    """Single-channel luminance of a gray or RGB array."""
    if color.ndim == 2:
        return color.copy()
    return cv2.cvtColor(np.ascontiguousarray(color), cv2.COLOR_RGB2GRAY)


def apply_gamma(pixels: np.ndarray, gamma: float) -> np.ndarray:
    """Gamma correction: out = 255 * (in / 255) ** (1 / gamma)."""
    color, alpha = split_alpha(pixels)
    levels = np.arange(256, dtype=np.float64) / 255.0
    lut = _to_uint8(255.0 * np.power(levels, 1.0 / gamma))
    corrected = cv2.LUT(np.ascontiguousarray(color), lut)
    return merge_alpha(corrected, alpha)


def to_grayscale(pixels: np.ndarray) -> np.ndarray:
    """
    Convert to grayscale.

    Without alpha the result is single-channel; with alpha the gray value is
    replicated into RGB so the alpha channel can be kept.
    """
    color, alpha = split_alpha(pixels)
    return merge_alpha(luma(color), alpha)


def apply_linear(pixels: np.ndarray, contrast: float, brightness: float) -> np.ndarray:
    """out = in * contrast + brightness, rounded and clamped to 0..255."""
    color, alpha = split_alpha(pixels)
    adjusted = _to_uint8(color.astype(np.float32) * contrast + brightness)
    return merge_alpha(adjusted, alpha)


def denoise(pixels: np.ndarray) -> np.ndarray:
    """Light gaussian blur."""
    color, alpha = split_alpha(pixels)
    blurred = cv2.GaussianBlur(np.ascontiguousarray(color), (0, 0), DENOISE_SIGMA)
    return merge_alpha(blurred, alpha)


def sharpen(pixels: np.ndarray, sigma: float, flat: float, jagged: float) -> np.ndarray:
    """
    Unsharp-mask sharpening.

    Pipeline:
        detail = in - GaussianBlur(in, sigma)
        gain   = flat where |detail| <= SHARPEN_FLAT_THRESHOLD, else jagged
        out    = in + clamp(detail * gain, -MAX_DARKEN, +MAX_BRIGHTEN)

    Args:
        pixels: Input array
        sigma: Gaussian sigma of the mask (> 0)
        flat: Gain applied to flat (low-detail) areas
        jagged: Gain applied to edges

    Returns:
        Sharpened array with the same shape
    """
    color, alpha = split_alpha(pixels)
    source = color.astype(np.float32)
    blurred = cv2.GaussianBlur(source, (0, 0), sigma)
    detail = source - blurred
    gain = np.where(np.abs(detail) <= SHARPEN_FLAT_THRESHOLD, flat, jagged).astype(np.float32)
    delta = np.clip(detail * gain, -SHARPEN_MAX_DARKEN, SHARPEN_MAX_BRIGHTEN)
    return merge_alpha(_to_uint8(source + delta), alpha)


def apply_threshold(pixels: np.ndarray, threshold: float, grayscale: bool) -> np.ndarray:
    """
    Binarize: values >= threshold become 255, the rest 0.

    With ``grayscale`` the image is reduced to luminance and thresholded as a
    single channel; otherwise each color channel is thresholded on its own.
    """
    color, alpha = split_alpha(pixels)
    if grayscale:
        color = luma(color)
    binary = np.where(color >= threshold, 255, 0).astype(np.uint8)
    return merge_alpha(binary, alpha)
