# app/services/pipeline.py
import uuid
from typing import Union

import structlog
from PIL import Image

from app.core import codec
from app.core.debug_utils import save_debug_image
from app.core.model_manager import ModelManager
from app.models.options import Color, PrintOptions, RemovalOptions, StrokeOptions, StrokeStyle
from app.models.stages import Stage
from app.modules.mask import process as mask_process
from app.modules.remover.u2net import process as u2net_process
from app.modules.scaler import process as scaler_process
from app.modules.stroke import process as stroke_process
from app.modules.stroke import settings as stroke_settings

log = structlog.get_logger(__name__)


class BackgroundRemovalPipeline:
    """
    Orchestrates decode -> inference -> mask post-processing -> [scale] -> [stroke] -> encode.

    Every method is synchronous and blocking; async hosts should offload calls
    with asyncio.to_thread. Any stage failure propagates, nothing partial is returned.
    """

    def __init__(self, model_manager: ModelManager):
        self.model_manager = model_manager
        log.info("Pipeline initialized")

    def remove_background(self, image_bytes: bytes, options: RemovalOptions = RemovalOptions()) -> bytes:
        """Returns RGBA PNG bytes with the background made transparent."""
        run_id = uuid.uuid4().hex[:12]
        cutout = self._cut_out(run_id, image_bytes, options)
        return self._encode(run_id, cutout)

    def remove_background_with_stroke(self, image_bytes: bytes, stroke: StrokeOptions) -> bytes:
        """Cut-out plus dual stroke, on a canvas padded so the stroke never clips."""
        run_id = uuid.uuid4().hex[:12]
        style = stroke.to_style()
        cutout = self._cut_out(run_id, image_bytes, RemovalOptions())

        padding = max(stroke_settings.PADDING_PX, style.outer_radius)
        padded = scaler_process.pad_transparent(cutout, padding)
        log.info("Stage complete", stage=Stage.SCALED.value, run_id=run_id, padding=padding)

        stroked = self._stroke(run_id, padded, style)
        return self._encode(run_id, stroked)

    def remove_background_scale_and_stroke(self, image_bytes: bytes, options: PrintOptions) -> bytes:
        """Cut-out resized to a physical print size, padded, then stroked."""
        run_id = uuid.uuid4().hex[:12]
        style = StrokeStyle(
            inner_color=options.inner_color,
            inner_width=scaler_process.mm_to_pixels_exact(options.inner_width_mm, options.dpi),
            outer_color=options.outer_color.with_opacity(options.outer_opacity),
            outer_width=scaler_process.mm_to_pixels_exact(options.outer_width_mm, options.dpi),
        )
        cutout = self._cut_out(run_id, image_bytes, RemovalOptions())

        scaled = scaler_process.resize_to_print(
            cutout,
            options.target_width_mm,
            options.target_height_mm,
            dpi=options.dpi,
            crop_to_fit=options.crop_to_fit,
            stroke_allowance_px=style.outer_radius,
        )
        log.info("Stage complete", stage=Stage.SCALED.value, run_id=run_id, size=scaled.size)
        save_debug_image(run_id, "5_scaled", scaled)

        stroked = self._stroke(run_id, scaled, style)
        return self._encode(run_id, stroked)

    def add_opaque_background(self, image_bytes: bytes, color: Union[Color, str]) -> bytes:
        """Composites the image over a solid color and returns JPEG bytes."""
        color = Color.parse(color)
        image = codec.decode_image(image_bytes)
        background = Image.new("RGB", image.size, color.rgb)
        background.paste(image, mask=image.split()[3])
        log.info("Background added", size=image.size, color=color.rgb)
        return codec.encode_jpeg(background)

    def _cut_out(self, run_id: str, image_bytes: bytes, options: RemovalOptions) -> Image.Image:
        log.info("Starting background removal", run_id=run_id, **options.model_dump())
        image = codec.decode_image(image_bytes)
        log.info("Stage complete", stage=Stage.DECODED.value, run_id=run_id, size=image.size)
        save_debug_image(run_id, "0_original", image)

        model_mask = u2net_process.run(image, self.model_manager)
        log.info("Stage complete", stage=Stage.INFERRED.value, run_id=run_id, mask_shape=model_mask.shape)
        save_debug_image(run_id, "1_model_mask", model_mask)

        cutout = mask_process.run(image, model_mask, options, run_id=run_id)
        log.info("Stage complete", stage=Stage.ALPHA_COMPOSITED.value, run_id=run_id)
        return cutout

    def _stroke(self, run_id: str, image: Image.Image, style: StrokeStyle) -> Image.Image:
        stroked = stroke_process.run(image, style)
        log.info("Stage complete", stage=Stage.STROKED.value, run_id=run_id)
        save_debug_image(run_id, "6_stroked", stroked)
        return stroked

    def _encode(self, run_id: str, image: Image.Image) -> bytes:
        data = codec.encode_png(image)
        log.info("Stage complete", stage=Stage.ENCODED.value, run_id=run_id, bytes=len(data))
        return data
