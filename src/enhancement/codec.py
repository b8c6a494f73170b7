"""Bitmap codec: encoded PNG/JPEG bytes <-> NumPy pixel arrays.

Arrays are uint8 in RGB channel order: (H, W) for gray, (H, W, 3) for RGB
and (H, W, 4) for RGBA. OpenCV's BGR ordering never leaves this module.
"""
import logging
from typing import Optional, Union

import cv2
import numpy as np

from schemas import ImageFormat, ImageInfo, RasterImage

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"

DEFAULT_JPEG_QUALITY = 90


def sniff_format(data: bytes) -> Optional[ImageFormat]:
    """Identify PNG or JPEG from the leading bytes; None if neither."""
    if data.startswith(PNG_SIGNATURE):
        return ImageFormat.PNG
    if data.startswith(JPEG_SIGNATURE):
        return ImageFormat.JPEG
    return None


def channel_count(pixels: np.ndarray) -> int:
    return 1 if pixels.ndim == 2 else pixels.shape[2]


def decode(image: Union[RasterImage, bytes]) -> np.ndarray:
    """
    Decode PNG/JPEG bytes to an 8-bit RGB(A) or gray array.

    Raises:
        ValueError: If the bytes cannot be decoded
    """
    data = image.data if isinstance(image, RasterImage) else image
    if not data:
        raise ValueError("Cannot decode empty image data")

    buf = np.frombuffer(data, dtype=np.uint8)
    pixels = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    if pixels is None:
        raise ValueError("Image data is not a decodable PNG or JPEG")

    if pixels.dtype == np.uint16:
        pixels = (pixels >> 8).astype(np.uint8)

    if pixels.ndim == 3 and pixels.shape[2] == 1:
        pixels = pixels[:, :, 0]
    elif pixels.ndim == 3 and pixels.shape[2] == 3:
        pixels = cv2.cvtColor(pixels, cv2.COLOR_BGR2RGB)
    elif pixels.ndim == 3 and pixels.shape[2] == 4:
        pixels = cv2.cvtColor(pixels, cv2.COLOR_BGRA2RGBA)

    return pixels


def _to_bgr(pixels: np.ndarray) -> np.ndarray:
    channels = channel_count(pixels)
    if channels == 3:
        return cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
    if channels == 4:
        return cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
    return pixels


def encode_png(pixels: np.ndarray) -> RasterImage:
    """Losslessly encode an RGB(A) or gray array as PNG."""
    ok, buf = cv2.imencode(".png", _to_bgr(pixels))
    if not ok:
        raise ValueError("PNG encoding failed")
    height, width = pixels.shape[:2]
    return RasterImage(
        data=buf.tobytes(),
        width=width,
        height=height,
        channels=channel_count(pixels),
        format=ImageFormat.PNG,
    )


def flatten_alpha(pixels: np.ndarray) -> np.ndarray:
    """Composite an RGBA array onto white; other arrays are returned unchanged."""
    if channel_count(pixels) != 4:
        return pixels
    color = pixels[:, :, :3].astype(np.float32)
    alpha = pixels[:, :, 3:4].astype(np.float32) / 255.0
    flat = color * alpha + 255.0 * (1.0 - alpha)
    return np.clip(np.round(flat), 0, 255).astype(np.uint8)


def encode_jpeg(pixels: np.ndarray, quality: int = DEFAULT_JPEG_QUALITY) -> RasterImage:
    """Lossy JPEG encode. Alpha is flattened onto white first."""
    pixels = flatten_alpha(pixels)
    ok, buf = cv2.imencode(".jpg", _to_bgr(pixels), [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        raise ValueError("JPEG encoding failed")
    height, width = pixels.shape[:2]
    return RasterImage(
        data=buf.tobytes(),
        width=width,
        height=height,
        channels=channel_count(pixels),
        format=ImageFormat.JPEG,
    )


def reencode_png(image: Union[RasterImage, bytes]) -> RasterImage:
    """Decode and re-encode as PNG with no pixel changes."""
    return encode_png(decode(image))


def convert_format(
    image: RasterImage,
    fmt: ImageFormat,
    quality: int = DEFAULT_JPEG_QUALITY,
) -> RasterImage:
    """
    Re-encode an image in another format.

    Args:
        image: Source raster
        fmt: Target format
        quality: JPEG quality (1-100), ignored for PNG

    Returns:
        New RasterImage in ``fmt``
    """
    pixels = decode(image)
    if fmt == ImageFormat.PNG:
        return encode_png(pixels)
    if fmt == ImageFormat.JPEG:
        return encode_jpeg(pixels, quality)
    raise ValueError(f"Unsupported format: {fmt}")


def generate_preview(image: RasterImage, max_width: int = 400, max_height: int = 600) -> RasterImage:
    """
    Shrink an image to fit inside ``max_width`` x ``max_height``.

    Never enlarges; aspect ratio is preserved. Output is PNG.
    """
    pixels = decode(image)
    height, width = pixels.shape[:2]
    scale = min(max_width / width, max_height / height, 1.0)
    if scale < 1.0:
        new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
        pixels = cv2.resize(pixels, new_size, interpolation=cv2.INTER_AREA)
    return encode_png(pixels)


def get_image_info(image: RasterImage) -> ImageInfo:
    """Basic facts about an encoded image."""
    pixels = decode(image)
    height, width = pixels.shape[:2]
    channels = channel_count(pixels)
    fmt = sniff_format(image.data)
    return ImageInfo(
        width=width,
        height=height,
        channels=channels,
        format=fmt.value.lower() if fmt else "unknown",
        size=image.byte_size,
        has_alpha=channels == 4,
    )
