"""
Pre- and post-processing around the segmentation model call.
"""
from typing import Any

import numpy as np
import torch
from PIL import Image
from torchvision import transforms
from torchvision.transforms import InterpolationMode

from app.core.errors import UnexpectedInferenceOutput
from .config import settings


def resize_for_inference(image: Image.Image, size: int) -> Image.Image:
    """Squashes the image to the model's square input size with bicubic resampling."""
    resize = transforms.Resize((size, size), interpolation=InterpolationMode.BICUBIC, antialias=True)
    return resize(image.convert("RGB"))


def normalize(image: Image.Image) -> np.ndarray:
    """
    Converts an RGB image into a (1, 3, H, W) float32 CHW tensor:
    (pixel / 255 - mean_c) / std_c.
    """
    to_tensor = transforms.Compose([
        transforms.ToTensor(),
        transforms.Normalize(mean=list(settings.NORMALIZE_MEAN), std=list(settings.NORMALIZE_STD)),
    ])
    tensor = to_tensor(image.convert("RGB")).unsqueeze(0)
    return tensor.numpy().astype(np.float32, copy=False)


def preprocess(image: Image.Image, size: int) -> np.ndarray:
    return normalize(resize_for_inference(image, size))


def extract_probability_grid(outputs: Any, size: int) -> np.ndarray:
    """
    Pulls the (size, size) foreground probability grid out of raw model outputs.

    Accepts a tensor/array or a list/tuple whose first element is one, shaped
    (size, size) or with leading singleton axes such as (1, 1, size, size).
    """
    if isinstance(outputs, (list, tuple)):
        if len(outputs) == 0:
            raise UnexpectedInferenceOutput("Model returned no outputs")
        outputs = outputs[0]

    if isinstance(outputs, torch.Tensor):
        outputs = outputs.detach().cpu().float().numpy()
    if not isinstance(outputs, np.ndarray):
        raise UnexpectedInferenceOutput(f"Model output is not a tensor: {type(outputs).__name__}")

    grid = outputs
    while grid.ndim > 2 and grid.shape[0] == 1:
        grid = grid[0]
    if grid.shape != (size, size):
        raise UnexpectedInferenceOutput(
            f"Expected a ({size}, {size}) probability grid, got output shape {tuple(outputs.shape)}"
        )
    if not np.issubdtype(grid.dtype, np.number):
        raise UnexpectedInferenceOutput(f"Unexpected output dtype: {grid.dtype}")

    grid = grid.astype(np.float32)
    if not np.isfinite(grid).all():
        raise UnexpectedInferenceOutput("NaN or infinite values in predicted mask.")
    return np.clip(grid, 0.0, 1.0)
