"""
Pillow-backed image codec: bytes <-> RGBA images <-> raw pixel buffers.
"""
from io import BytesIO

import numpy as np
import structlog
from PIL import Image, UnidentifiedImageError

from app.config import settings
from .errors import BufferAccessFailure, DecodeFailure

log = structlog.get_logger(__name__)


def decode_image(image_bytes: bytes) -> Image.Image:
    """
    Decode PNG/JPEG/... bytes into a fully loaded RGBA image.

    Raises:
        DecodeFailure: If the bytes are empty or not a valid image.
    """
    if not image_bytes:
        raise DecodeFailure("Empty image payload")
    try:
        image = Image.open(BytesIO(image_bytes))
        # Force Pillow to read the whole stream now, so truncated data fails here.
        image.load()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise DecodeFailure(f"Could not decode image: {e}") from e

    if image.mode != "RGBA":
        image = image.convert("RGBA")
    log.debug("Image decoded", size=image.size)
    return image


def to_pixels(image: Image.Image) -> np.ndarray:
    """
    Materialize an image as a new (H, W, 4) uint8 RGBA array.

    Raises:
        BufferAccessFailure: If the pixel data cannot be read.
    """
    try:
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        pixels = np.array(rgba, dtype=np.uint8)
    except (OSError, ValueError, SyntaxError) as e:
        raise BufferAccessFailure(f"Could not read pixels: {e}") from e

    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise BufferAccessFailure(f"Expected RGBA buffer (H,W,4), got {pixels.shape}")
    return pixels


def from_pixels(pixels: np.ndarray) -> Image.Image:
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected RGBA buffer (H,W,4), got {pixels.shape}")
    return Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8), mode="RGBA")


def encode_png(image: Image.Image) -> bytes:
    """Lossless PNG, alpha preserved."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def encode_jpeg(image: Image.Image, quality: int = settings.JPEG_QUALITY) -> bytes:
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()
