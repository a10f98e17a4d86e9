"""
Helper functions for turning a low-resolution probability mask into an alpha channel.
All functions return new arrays and never modify their inputs.
"""
import numpy as np
from scipy.ndimage import uniform_filter

from .config import settings

RESAMPLE_MODES = ("nearest", "bilinear")


def resample_mask(mask: np.ndarray, target_width: int, target_height: int, mode: str = "bilinear") -> np.ndarray:
    """
    Maps a (h_m, w_m) probability grid onto a (target_height, target_width) grid.

    Nearest picks mask[floor(y*h_m/H), floor(x*w_m/W)]. Bilinear blends the four
    samples around (x*w_m/W, y*h_m/H), clamping the far neighbour at the last
    row/column instead of wrapping.
    """
    if mask.ndim != 2 or mask.size == 0:
        raise ValueError(f"Expected non-empty 2D mask, got shape={mask.shape}")
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"Invalid target size: {(target_width, target_height)}")
    if mode not in RESAMPLE_MODES:
        raise ValueError(f"Unknown resample mode '{mode}', expected one of {RESAMPLE_MODES}")

    src = np.asarray(mask, dtype=np.float64)
    mask_h, mask_w = src.shape

    if mode == "nearest":
        rows = (np.arange(target_height) * mask_h) // target_height
        cols = (np.arange(target_width) * mask_w) // target_width
        return src[rows[:, None], cols[None, :]].astype(np.float32)

    src_x = np.arange(target_width) * mask_w / target_width
    src_y = np.arange(target_height) * mask_h / target_height
    x1 = np.floor(src_x).astype(np.intp)
    y1 = np.floor(src_y).astype(np.intp)
    x2 = np.minimum(x1 + 1, mask_w - 1)
    y2 = np.minimum(y1 + 1, mask_h - 1)
    wx = (src_x - x1)[None, :]
    wy = (src_y - y1)[:, None]

    top_left = src[y1[:, None], x1[None, :]]
    top_right = src[y1[:, None], x2[None, :]]
    bottom_left = src[y2[:, None], x1[None, :]]
    bottom_right = src[y2[:, None], x2[None, :]]

    out = (
        top_left * (1 - wx) * (1 - wy)
        + top_right * wx * (1 - wy)
        + bottom_left * (1 - wx) * wy
        + bottom_right * wx * wy
    )
    return out.astype(np.float32)


def refine_mask_edges(
    mask: np.ndarray,
    pixels: np.ndarray,
    gradient_threshold: float = settings.EDGE_GRADIENT_THRESHOLD,
    push: float = settings.EDGE_PUSH,
    band_low: float = settings.EDGE_BAND_LOW,
    band_high: float = settings.EDGE_BAND_HIGH,
) -> np.ndarray:
    """
    Sharpens ambiguous mask values that sit on strong image edges.

    For every interior pixel the gradient is the RGB mean of |right-left| + |down-up|.
    Where it exceeds gradient_threshold and the mask value lies strictly inside
    (band_low, band_high), the value moves by `push` toward 1 if the 3x3 mask
    mean is above 0.5, else toward 0. Border pixels and values outside the band
    are returned untouched. Single pass: decisions read only the input mask.
    """
    if mask.ndim != 2:
        raise ValueError(f"Expected 2D mask, got shape={mask.shape}")
    if pixels.ndim != 3 or pixels.shape[2] < 3 or pixels.shape[:2] != mask.shape:
        raise ValueError(f"Pixel buffer {pixels.shape} does not match mask {mask.shape}")

    refined = np.array(mask, dtype=np.float32, copy=True)
    h, w = mask.shape
    if h < 3 or w < 3:
        return refined

    rgb = pixels[..., :3].astype(np.int16)
    horizontal = np.abs(rgb[1:-1, 2:] - rgb[1:-1, :-2])
    vertical = np.abs(rgb[2:, 1:-1] - rgb[:-2, 1:-1])
    magnitude = (horizontal + vertical).sum(axis=2) / 3.0

    src = np.asarray(mask, dtype=np.float64)
    center = src[1:-1, 1:-1]
    neighbourhood = sum(src[dy:h - 2 + dy, dx:w - 2 + dx] for dy in range(3) for dx in range(3)) / 9.0

    target = (magnitude > gradient_threshold) & (center > band_low) & (center < band_high)
    pushed = np.clip(np.where(neighbourhood > 0.5, center + push, center - push), 0.0, 1.0)

    interior = refined[1:-1, 1:-1]
    interior[target] = pushed[target]
    return refined


def smooth_mask(mask: np.ndarray, kernel_size: int = settings.SMOOTH_KERNEL_SIZE) -> np.ndarray:
    """
    Box blur with the window truncated at the borders.

    Each output is the mean of the in-bounds samples only, so a uniform field
    stays uniform right up to the edges.
    """
    if mask.ndim != 2:
        raise ValueError(f"Expected 2D mask, got shape={mask.shape}")
    if kernel_size < 1 or kernel_size % 2 == 0:
        raise ValueError(f"kernel_size must be a positive odd integer, got {kernel_size}")

    src = np.asarray(mask, dtype=np.float64)
    sums = uniform_filter(src, size=kernel_size, mode="constant", cval=0.0)
    counts = uniform_filter(np.ones_like(src), size=kernel_size, mode="constant", cval=0.0)
    return (sums / counts).astype(np.float32)


def feather_alpha(
    mask: np.ndarray,
    threshold: float = 0.5,
    half_width: float = settings.FEATHER_HALF_WIDTH,
) -> np.ndarray:
    """
    Converts a probability mask into uint8 alpha with a linear ramp of
    width 2*half_width centred on the threshold.
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be in [0, 1], got {threshold}")

    v = np.asarray(mask, dtype=np.float64)
    # Round half up so the ramp midpoint lands on 128.
    ramp = np.floor((v - threshold + half_width) / (2 * half_width) * 255.0 + 0.5)
    alpha = np.clip(ramp, 0, 255)
    alpha = np.where(v > threshold + half_width, 255, alpha)
    alpha = np.where(v < threshold - half_width, 0, alpha)
    return alpha.astype(np.uint8)


def apply_mask(pixels: np.ndarray, mask: np.ndarray, threshold: float = 0.5, smooth: bool = True) -> np.ndarray:
    """Returns a new RGBA buffer with the original RGB and alpha derived from the mask."""
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected RGBA buffer (H,W,4), got {pixels.shape}")
    if mask.shape != pixels.shape[:2]:
        raise ValueError(f"Mask shape {mask.shape} does not match image {pixels.shape[:2]}")

    if smooth:
        mask = smooth_mask(mask, settings.SMOOTH_KERNEL_SIZE)

    out = pixels.copy()
    out[..., 3] = feather_alpha(mask, threshold)
    return out
