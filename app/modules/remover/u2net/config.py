# app/modules/remover/u2net/config.py
from pydantic_settings import BaseSettings


class U2NetSettings(BaseSettings):
    """Configuration for U2-Net style salient object models."""

    # ImageNet normalization used by U2-Net and its lightweight variants.
    NORMALIZE_MEAN: tuple[float, float, float] = (0.485, 0.456, 0.406)
    NORMALIZE_STD: tuple[float, float, float] = (0.229, 0.224, 0.225)


settings = U2NetSettings()
