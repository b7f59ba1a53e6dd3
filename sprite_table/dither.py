# sprite_table/dither.py
from __future__ import annotations

"""
1-bit conversion with optional dithering.

Methods:
  none       : direct threshold
  floyd      : Floyd-Steinberg error diffusion on luma, raster order
  bayerN     : ordered dispersed-dot dithering, N in {4, 8, 16}
  clusterN   : ordered clustered-dot dithering, N in {6, 8, 16}

Index 1 is the lit side of the threshold; index 0 is the dark side and also
every transparent pixel.
"""

from functools import lru_cache
from typing import Optional

import numpy as np

from .constants import MONO_THRESHOLD
from .core_types import ConfigError, DitherMethod, U8Image
from .utils import luma


# ---------- threshold matrices ------------------------------------------------


@lru_cache(maxsize=None)
def bayer_matrix(n: int) -> np.ndarray:
    """
    Recursive dispersed-dot matrix of size n (power of two), ranks 0..n*n-1.

        M(2n) = [[4M,     4M + 2],
                 [4M + 3, 4M + 1]]
    """
    if n < 2 or n & (n - 1):
        raise ValueError(f"bayer matrix size must be a power of two >= 2, got {n}")
    m = np.array([[0, 2], [3, 1]], dtype=np.int32)
    while m.shape[0] < n:
        m = np.block([[4 * m, 4 * m + 2], [4 * m + 3, 4 * m + 1]])
    return m


@lru_cache(maxsize=None)
def cluster_matrix(n: int) -> np.ndarray:
    """
    Clustered-dot matrix of size n, ranks 0..n*n-1.

    Cells are ranked by distance from the cell centre so that, as the
    threshold rises, one dot grows outward. Equal distances are ordered by
    angle, then by raster position.
    """
    if n < 2:
        raise ValueError(f"cluster matrix size must be >= 2, got {n}")
    ys, xs = np.mgrid[0:n, 0:n]
    c = (n - 1) / 2.0
    dx = xs - c
    dy = ys - c
    dist = np.round(np.hypot(dx, dy), 6)
    angle = np.round(np.mod(np.arctan2(dy, dx), 2 * np.pi), 6)
    raster = ys * n + xs
    order = np.lexsort((raster.ravel(), angle.ravel(), dist.ravel()))
    ranks = np.empty(n * n, dtype=np.int32)
    ranks[order] = np.arange(n * n, dtype=np.int32)
    return ranks.reshape(n, n)


def _ordered_matrix(method: DitherMethod) -> np.ndarray:
    if method.startswith("bayer"):
        return bayer_matrix(int(method[len("bayer") :]))
    if method.startswith("cluster"):
        return cluster_matrix(int(method[len("cluster") :]))
    raise ConfigError(f"not an ordered dithering method: {method}")


def threshold_map(method: DitherMethod, height: int, width: int) -> np.ndarray:
    """Per-pixel luma thresholds in [0, 255] tiled from the method's matrix."""
    m = _ordered_matrix(method)
    n = m.shape[0]
    levels = (m.astype(np.float32) + 0.5) * (255.0 / float(n * n))
    ys = np.arange(height) % n
    xs = np.arange(width) % n
    return levels[ys[:, None], xs[None, :]]


# ---------- diffusion -----------------------------------------------------------

_FS_NEIGHBOURS = ((1, 0, 7 / 16), (-1, 1, 3 / 16), (0, 1, 5 / 16), (1, 1, 1 / 16))


def floyd_steinberg(lum: np.ndarray, transparent: np.ndarray) -> np.ndarray:
    """
    Raster-order Floyd-Steinberg on a luma plane. Transparent pixels are set
    to 0 and neither emit nor receive error.
    """
    height, width = lum.shape
    work = lum.astype(np.float32, copy=True)
    out = np.zeros((height, width), dtype=np.uint8)
    for y in range(height):
        for x in range(width):
            if transparent[y, x]:
                continue
            value = float(work[y, x])
            lit = value > MONO_THRESHOLD
            out[y, x] = 1 if lit else 0
            err = value - (255.0 if lit else 0.0)
            for dx, dy, w in _FS_NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if 0 <= ny < height and 0 <= nx < width and not transparent[ny, nx]:
                    work[ny, nx] += err * w
    return out


# ---------- entry point -----------------------------------------------------------


def dither_mono(
    rgb: U8Image,
    transparent: np.ndarray,
    method: DitherMethod = "none",
    *,
    use_trans: bool = False,
) -> np.ndarray:
    """
    Convert an RGB grid to 1-bit indices (uint8 0/1).

    With method "none" and transparency enabled every opaque pixel is lit;
    without transparency the plain luma threshold decides.
    """
    height, width = rgb.shape[:2]
    if method == "none":
        if use_trans:
            out = np.ones((height, width), dtype=np.uint8)
        else:
            out = (luma(rgb) > MONO_THRESHOLD).astype(np.uint8)
    elif method == "floyd":
        out = floyd_steinberg(luma(rgb), transparent)
    else:
        out = (luma(rgb) > threshold_map(method, height, width)).astype(np.uint8)
    out[transparent] = 0
    return out


def mono_index(
    rgb: tuple,
    x: int = 0,
    y: int = 0,
    method: DitherMethod = "none",
    trans_rgb: Optional[tuple] = None,
) -> int:
    """Single-pixel form of dither_mono for the position-only methods."""
    if method == "floyd":
        raise ConfigError("floyd dithering needs the whole image, not one pixel")
    if trans_rgb is not None and tuple(rgb[:3]) == tuple(trans_rgb):
        return 0
    px = np.array([[rgb[:3]]], dtype=np.uint8)
    if method == "none":
        return 1 if trans_rgb is not None else int(luma(px)[0, 0] > MONO_THRESHOLD)
    thr = threshold_map(method, y + 1, x + 1)[y, x]
    return int(luma(px)[0, 0] > thr)


__all__ = [
    "bayer_matrix",
    "cluster_matrix",
    "threshold_map",
    "floyd_steinberg",
    "dither_mono",
    "mono_index",
]
