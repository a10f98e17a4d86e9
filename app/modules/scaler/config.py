from pydantic_settings import BaseSettings

MM_PER_INCH = 25.4


class ScalerSettings(BaseSettings):
    """Configuration for print-size scaling."""

    DEFAULT_DPI: int = 300


settings = ScalerSettings()
