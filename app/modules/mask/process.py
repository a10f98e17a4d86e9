# app/modules/mask/process.py
import numpy as np
import structlog
from PIL import Image

from app.core import codec
from app.core.debug_utils import save_debug_image
from app.models.options import RemovalOptions
from app.models.stages import Stage
from . import utils

log = structlog.get_logger(__name__)


def run(input_image: Image.Image, model_mask: np.ndarray, options: RemovalOptions, run_id: str = "mask") -> Image.Image:
    """
    Applies a model-resolution probability mask to the full-resolution image.

    Stages: resample -> edge refinement (optional) -> smoothing + feathered alpha.
    """
    pixels = codec.to_pixels(input_image)
    height, width = pixels.shape[:2]

    mode = "bilinear" if options.smooth_mask else "nearest"
    log.info("Mask: Resampling", source_shape=model_mask.shape, target_size=(width, height), mode=mode)
    mask = utils.resample_mask(model_mask, width, height, mode=mode)
    log.info("Stage complete", stage=Stage.MASK_RESAMPLED.value, run_id=run_id)
    save_debug_image(run_id, "2_mask_resampled", mask)

    if options.enhance_edges:
        log.info("Mask: Refining edges...")
        mask = utils.refine_mask_edges(mask, pixels)
        log.info("Stage complete", stage=Stage.MASK_REFINED.value, run_id=run_id)
        save_debug_image(run_id, "3_mask_refined", mask)
    else:
        log.info("Mask: Edge refinement skipped.")

    log.info("Mask: Compositing alpha", threshold=options.threshold, smooth=options.smooth_mask)
    rgba = utils.apply_mask(pixels, mask, threshold=options.threshold, smooth=options.smooth_mask)
    save_debug_image(run_id, "4_alpha", rgba[..., 3])

    return codec.from_pixels(rgba)
