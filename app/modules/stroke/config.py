from pydantic_settings import BaseSettings


class StrokeSettings(BaseSettings):
    """Configuration for the silhouette stroke engine."""

    # Pixels with alpha at or above this value belong to the subject.
    OPAQUE_ALPHA_CUTOFF: int = 128

    # Minimum transparent border added around the cut-out before stroking.
    PADDING_PX: int = 20


settings = StrokeSettings()
