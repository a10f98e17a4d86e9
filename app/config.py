"""
Application configuration using Pydantic Settings.
"""
import tempfile
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8001
    WORKERS: int = 1  # Single worker keeps one inference session per process

    # Storage settings
    OUTPUT_DIR: str = "outputs"

    # Global switch to enable/disable saving of intermediate debug images.
    DEBUG_SAVE_IMAGES: bool = False

    # Model settings
    MODEL_PATH: str = "models/u2netp.onnx"
    MODEL_URL: str = "https://github.com/danielgatis/rembg/releases/download/v0.0.0/u2netp.onnx"
    MODEL_INPUT_SIZE: int = 320
    DEVICE: str = "cpu"  # or "cuda", TorchScript models only
    ORT_PROVIDERS: list[str] = ["CPUExecutionProvider"]

    # Inference lock
    LOCK_DIR: str = f"{tempfile.gettempdir()}/silhouette_locks"
    LOCK_TIMEOUT: float = 120.0

    # Encoding
    JPEG_QUALITY: int = 95

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Create global settings instance
settings = Settings()
