# app/modules/remover/u2net/process.py
import numpy as np
import structlog
from PIL import Image

from app.core.errors import UninitializedInference
from app.core.model_manager import ModelManager
from app.core.process_lock import inference_lock
from app.models.stages import Stage
from . import utils

log = structlog.get_logger(__name__)


def run(input_image: Image.Image, model_manager: ModelManager) -> np.ndarray:
    """
    Predicts the foreground probability grid for an image at model resolution.

    Returns:
        float32 array (S, S) in [0, 1], S = model_manager.input_size
    """
    if not model_manager.is_initialized:
        raise UninitializedInference("Inference session is not initialized")

    size = model_manager.input_size
    log.info("U2Net: Pre-normalizing", input_size=input_image.size, model_size=size)
    tensor = utils.preprocess(input_image, size)
    log.info("Stage complete", stage=Stage.PRE_NORMALIZED.value, tensor_shape=tensor.shape)

    with inference_lock:
        log.info("U2Net: Inference lock acquired")
        outputs = model_manager.infer(tensor)
    log.info("U2Net: Inference complete")

    return utils.extract_probability_grid(outputs, size)
