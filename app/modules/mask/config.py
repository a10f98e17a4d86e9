from pydantic_settings import BaseSettings


class MaskSettings(BaseSettings):
    """Configuration for mask refinement and alpha compositing."""

    # --- EDGE REFINEMENT ---
    # Mean RGB gradient (0-255 scale) above which a pixel counts as an image edge.
    EDGE_GRADIENT_THRESHOLD: float = 30.0
    # How far an ambiguous mask value is pushed toward 0 or 1 on an edge.
    EDGE_PUSH: float = 0.1
    # Only mask values strictly inside this band are refined.
    EDGE_BAND_LOW: float = 0.3
    EDGE_BAND_HIGH: float = 0.7

    # --- SMOOTHING ---
    SMOOTH_KERNEL_SIZE: int = 3

    # --- ALPHA ---
    # Half width of the linear alpha ramp around the threshold.
    FEATHER_HALF_WIDTH: float = 0.05


settings = MaskSettings()
