from io import BytesIO

import numpy as np
import pytest
from PIL import Image


class FakeModelManager:
    """Stands in for the ONNX/TorchScript session: returns a fixed mask."""

    def __init__(self, mask=None, input_size: int = 320, outputs=None, initialized: bool = True):
        self.input_size = input_size
        self.is_initialized = initialized
        self.mask = np.ones((input_size, input_size), dtype=np.float32) if mask is None else mask
        self.outputs = outputs
        self.seen_shapes = []

    def infer(self, tensor: np.ndarray):
        self.seen_shapes.append(tensor.shape)
        if self.outputs is not None:
            return self.outputs
        return [self.mask[None, None, :, :]]


def _png_bytes(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def fake_model_manager():
    return FakeModelManager


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def red_png() -> bytes:
    """400x300 opaque red image."""
    return _png_bytes(Image.new("RGB", (400, 300), (255, 0, 0)))


@pytest.fixture
def square_canvas() -> np.ndarray:
    """40x40 transparent canvas with a centered opaque 10x10 square at [15, 25)."""
    pixels = np.zeros((40, 40, 4), dtype=np.uint8)
    pixels[15:25, 15:25] = (10, 20, 30, 255)
    return pixels
