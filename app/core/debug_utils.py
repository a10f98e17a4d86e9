# app/core/debug_utils.py

import numpy as np
import structlog
from PIL import Image
from pathlib import Path

from app.config import settings

log = structlog.get_logger(__name__)


def save_debug_image(run_id: str, step_name: str, image_data):
    """
    Saves an intermediate result to a debug folder if DEBUG_SAVE_IMAGES is enabled.
    Handles PIL Images, float mask grids in [0, 1] and uint8 pixel buffers.
    """
    if not settings.DEBUG_SAVE_IMAGES:
        return None

    debug_dir = Path(settings.OUTPUT_DIR) / "debug" / str(run_id)
    filepath = debug_dir / f"{step_name}.png"

    pil_image = None
    if isinstance(image_data, Image.Image):
        pil_image = image_data
    elif isinstance(image_data, np.ndarray):
        if np.issubdtype(image_data.dtype, np.floating):
            # Mask grids: rescale from 0-1 range to 0-255
            image_data = (np.clip(image_data, 0.0, 1.0) * 255).astype(np.uint8)
        pil_image = Image.fromarray(image_data)

    if pil_image is None:
        log.warning("Unsupported debug image type", step=step_name, type=type(image_data).__name__)
        return None

    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        pil_image.save(filepath, "PNG")
    except OSError as e:
        # Don't crash the main pipeline if a debug save fails
        log.warning("Failed to save debug image", step=step_name, error=str(e))
        return None
    return filepath
