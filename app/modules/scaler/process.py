# app/modules/scaler/process.py
"""
Physical-size scaling: millimetres at a given DPI to pixels, aspect-safe
resizing and transparent padding.
"""
import math

import structlog
from PIL import Image

from .config import MM_PER_INCH, settings

log = structlog.get_logger(__name__)


def mm_to_pixels(mm: float, dpi: int = settings.DEFAULT_DPI) -> int:
    return int(math.floor(mm / MM_PER_INCH * dpi + 0.5))


def mm_to_pixels_exact(mm: float, dpi: int = settings.DEFAULT_DPI) -> float:
    """Unrounded conversion, for stroke widths that are rounded later as radii."""
    return mm / MM_PER_INCH * dpi


def fit_size(src_w: int, src_h: int, target_w: int, target_h: int) -> tuple[int, int]:
    """Largest size with the source aspect ratio that fits inside the target box."""
    scale = min(target_w / src_w, target_h / src_h)
    return max(1, int(round(src_w * scale))), max(1, int(round(src_h * scale)))


def center_crop_box(src_w: int, src_h: int, target_w: int, target_h: int) -> tuple[int, int, int, int]:
    """Centered (left, top, right, bottom) crop of the longer dimension to the target aspect ratio."""
    target_aspect = target_w / target_h
    if src_w / src_h > target_aspect:
        crop_w = max(1, min(src_w, int(round(src_h * target_aspect))))
        left = (src_w - crop_w) // 2
        return left, 0, left + crop_w, src_h
    crop_h = max(1, min(src_h, int(round(src_w / target_aspect))))
    top = (src_h - crop_h) // 2
    return 0, top, src_w, top + crop_h


def pad_transparent(image: Image.Image, padding: int) -> Image.Image:
    """Returns a new RGBA canvas with `padding` fully transparent pixels on every side."""
    if padding < 0:
        raise ValueError(f"padding must be >= 0, got {padding}")
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    width, height = image.size
    canvas = Image.new("RGBA", (width + 2 * padding, height + 2 * padding), (0, 0, 0, 0))
    canvas.paste(image, (padding, padding))
    return canvas


def resize_to_print(
    image: Image.Image,
    target_width_mm: float,
    target_height_mm: float,
    dpi: int = settings.DEFAULT_DPI,
    crop_to_fit: bool = False,
    stroke_allowance_px: int = 0,
) -> Image.Image:
    """
    Resizes an image to a physical print size, then pads it for stroking.

    crop_to_fit=True fills the target exactly after a centered crop; otherwise
    the whole image is fitted inside the target with its aspect ratio kept.
    """
    target_w = mm_to_pixels(target_width_mm, dpi)
    target_h = mm_to_pixels(target_height_mm, dpi)
    if target_w <= 0 or target_h <= 0:
        raise ValueError(
            f"Target size {target_width_mm}x{target_height_mm}mm at {dpi} DPI is smaller than one pixel"
        )

    if image.mode != "RGBA":
        image = image.convert("RGBA")
    src_w, src_h = image.size

    if crop_to_fit:
        box = center_crop_box(src_w, src_h, target_w, target_h)
        resized = image.crop(box).resize((target_w, target_h), Image.LANCZOS)
    else:
        resized = image.resize(fit_size(src_w, src_h, target_w, target_h), Image.LANCZOS)

    log.info(
        "Scaler: Resized for print",
        source_size=(src_w, src_h),
        target_px=(target_w, target_h),
        output_size=resized.size,
        crop_to_fit=crop_to_fit,
        padding=stroke_allowance_px,
    )
    return pad_transparent(resized, stroke_allowance_px)
