"""
Helper functions for the dual silhouette stroke.
"""
import cv2
import numpy as np

from .config import settings


def detect_edges(pixels: np.ndarray, cutoff: int = settings.OPAQUE_ALPHA_CUTOFF) -> np.ndarray:
    """
    Marks opaque pixels that touch the buffer boundary or an 8-connected
    transparent neighbour. The returned boolean array is read-only.
    """
    opaque = (pixels[..., 3] >= cutoff).astype(np.uint8)
    # Out-of-bounds neighbours count as transparent, so border pixels erode away.
    interior = cv2.erode(
        opaque,
        np.ones((3, 3), np.uint8),
        borderType=cv2.BORDER_CONSTANT,
        borderValue=0,
    )
    edges = (opaque == 1) & (interior == 0)
    edges.setflags(write=False)
    return edges


def disk_kernel(radius: int) -> np.ndarray:
    """Structuring element covering every offset with dx^2 + dy^2 <= radius^2."""
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    offsets = np.arange(-radius, radius + 1)
    dist_sq = offsets[None, :] ** 2 + offsets[:, None] ** 2
    return (dist_sq <= radius * radius).astype(np.uint8)


def stroke_zone(edges: np.ndarray, radius: int) -> np.ndarray:
    """All in-bounds pixels within `radius` (Euclidean) of at least one edge point."""
    if not edges.any():
        return np.zeros(edges.shape, dtype=bool)
    grown = cv2.dilate(edges.astype(np.uint8), disk_kernel(radius))
    return grown.astype(bool)


def paint_dual_stroke(
    pixels: np.ndarray,
    inner_rgb: tuple[int, int, int],
    inner_radius: int,
    outer_rgb: tuple[int, int, int],
    outer_alpha: int,
    outer_radius: int,
    cutoff: int = settings.OPAQUE_ALPHA_CUTOFF,
) -> np.ndarray:
    """
    Returns a new RGBA buffer with an outer then an inner stroke painted into
    the transparent area around the silhouette.

    Outer: pixels transparent in the original whose current alpha is still
    below outer_alpha take the outer color. Inner: pixels transparent in the
    original take the inner color at alpha 255, overriding the outer stroke.
    Pixels opaque in the original are never written.
    """
    edges = detect_edges(pixels, cutoff)
    transparent = pixels[..., 3] < cutoff
    result = pixels.copy()

    outer = stroke_zone(edges, outer_radius) & transparent & (result[..., 3] < outer_alpha)
    result[outer, :3] = outer_rgb
    result[outer, 3] = outer_alpha

    inner = stroke_zone(edges, inner_radius) & transparent
    result[inner, :3] = inner_rgb
    result[inner, 3] = 255
    return result
