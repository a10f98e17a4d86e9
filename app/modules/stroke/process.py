# app/modules/stroke/process.py
import structlog
from PIL import Image

from app.core import codec
from app.core.errors import BufferAccessFailure
from app.models.options import StrokeStyle
from . import utils

log = structlog.get_logger(__name__)


def run(input_image: Image.Image, style: StrokeStyle) -> Image.Image:
    """
    Paints an inner solid stroke and an outer semi-transparent stroke around
    the silhouette of a cut-out image.

    The canvas must already carry enough transparent border for the outer
    radius. If the pixels cannot be read, the input image is returned as is.
    """
    try:
        pixels = codec.to_pixels(input_image)
    except BufferAccessFailure:
        log.warning("Stroke: Pixel buffer unavailable, returning image unchanged.", exc_info=True)
        return input_image

    log.info(
        "Stroke: Painting dual stroke",
        size=input_image.size,
        inner_radius=style.inner_radius,
        outer_radius=style.outer_radius,
    )
    stroked = utils.paint_dual_stroke(
        pixels,
        inner_rgb=style.inner_color.rgb,
        inner_radius=style.inner_radius,
        outer_rgb=style.outer_color.rgb,
        outer_alpha=style.outer_color.alpha,
        outer_radius=style.outer_radius,
    )
    return codec.from_pixels(stroked)
