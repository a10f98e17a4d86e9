"""
Owner of the long-lived segmentation inference session.
Supports ONNX models via onnxruntime and TorchScript models via torch.
"""
import asyncio
from pathlib import Path
from typing import Any, Optional

import numpy as np
import onnxruntime as ort
import structlog
import torch

from app.config import settings
from .errors import UninitializedInference

log = structlog.get_logger(__name__)


class ModelManager:
    """Manages the segmentation model session with an explicit create/destroy lifecycle."""

    def __init__(self, model_path: Optional[str] = None, input_size: Optional[int] = None):
        self.model_path = Path(model_path or settings.MODEL_PATH)
        self.input_size = input_size or settings.MODEL_INPUT_SIZE
        use_cuda = settings.DEVICE == "cuda" and torch.cuda.is_available()
        self.device = torch.device("cuda" if use_cuda else "cpu")
        self.backend: Optional[str] = None
        self.session: Any = None
        self.input_name: Optional[str] = None
        self.is_initialized = False
        log.info("ModelManager created", model_path=str(self.model_path), input_size=self.input_size)

    async def initialize(self):
        if self.is_initialized:
            return
        log.info("Starting model initialization...")
        await asyncio.to_thread(self._load)
        self.is_initialized = True
        log.info("Segmentation model initialized", backend=self.backend, device=str(self.device))

    def _load(self):
        if not self.model_path.exists():
            raise FileNotFoundError(
                f"Segmentation model not found at {self.model_path}. "
                f"Please run 'python download_models.py'."
            )

        if self.model_path.suffix.lower() == ".onnx":
            log.info("Loading ONNX model...", providers=settings.ORT_PROVIDERS)
            self.session = ort.InferenceSession(str(self.model_path), providers=settings.ORT_PROVIDERS)
            self.input_name = self.session.get_inputs()[0].name
            self.backend = "onnx"
        else:
            log.info("Loading TorchScript model...")
            model = torch.jit.load(str(self.model_path), map_location="cpu")
            model.eval()
            self.session = model.to(self.device)
            self.backend = "torchscript"

    def infer(self, tensor: np.ndarray) -> Any:
        """
        Runs the model on a (1, 3, S, S) float32 tensor and returns its raw outputs.

        Not safe for concurrent calls; callers hold the inference lock.
        """
        if not self.is_initialized or self.session is None:
            raise UninitializedInference("Inference session is not initialized")

        if self.backend == "onnx":
            return self.session.run(None, {self.input_name: tensor.astype(np.float32, copy=False)})

        with torch.no_grad():
            return self.session(torch.from_numpy(tensor).to(self.device))

    async def cleanup(self):
        log.info("Cleaning up ModelManager...")
        self.session = None
        self.input_name = None
        self.backend = None
        if self.device.type == "cuda":
            torch.cuda.empty_cache()
        self.is_initialized = False
        log.info("ModelManager cleanup complete")
