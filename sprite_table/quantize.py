# sprite_table/quantize.py
from __future__ import annotations

"""
Colour quantization: RGB pixels -> palette index / packed colour per bpc.

  bpc 1 : 0/1 via dither_mono (optional dithering)
  bpc 2 : nearest of up to 3 palette colours, index 1..3
  bpc 4 : nearest of up to 15 palette colours, index 1..15
  bpc 8 : direct GGGRRRBB truncation, no palette

Index 0 always stands for a transparent pixel when transparency is enabled.
"""

from typing import Optional

import numpy as np

from .core_types import (
    ConfigError,
    ExportConfig,
    IndexGrid,
    Palette,
    RGBTuple,
    U8Image,
    U8Mask,
)
from .dither import dither_mono, mono_index
from .utils import nearest_palette_indices_rgb_distance


def pack_grb332(rgb: U8Image) -> np.ndarray:
    """Pack (..., 3) RGB into GGGRRRBB bytes by bit truncation."""
    r = rgb[..., 0].astype(np.uint8)
    g = rgb[..., 1].astype(np.uint8)
    b = rgb[..., 2].astype(np.uint8)
    return ((g >> 5) << 5 | (r >> 5) << 2 | (b >> 6)).astype(np.uint8)


def transparent_mask(
    rgb: U8Image, alpha: Optional[U8Mask], trans_rgb: Optional[RGBTuple]
) -> np.ndarray:
    """
    Boolean (H, W): pixel equals the transparency colour exactly, or is fully
    transparent in the source alpha. All False when transparency is off.
    """
    height, width = rgb.shape[:2]
    if trans_rgb is None:
        return np.zeros((height, width), dtype=bool)
    key = np.array(trans_rgb, dtype=np.uint8)
    mask = np.all(rgb == key[None, None, :], axis=-1)
    if alpha is not None:
        mask |= alpha == 0
    return mask


def _palette_indices(rgb: U8Image, palette: Palette) -> np.ndarray:
    height, width = rgb.shape[:2]
    if not palette.items:
        raise ConfigError("palette is empty")
    # match unique colours only, then scatter back
    uniques, inverse = np.unique(rgb.reshape(-1, 3), axis=0, return_inverse=True)
    nearest = nearest_palette_indices_rgb_distance(uniques, palette.rgb_array)
    return (nearest[inverse.reshape(-1)] + 1).astype(np.uint8).reshape(height, width)


def quantize_pixel(
    rgb: RGBTuple,
    bpc: int,
    palette: Optional[Palette] = None,
    trans_rgb: Optional[RGBTuple] = None,
) -> int:
    """Quantize one pixel without dithering. Pure."""
    if trans_rgb is not None and tuple(rgb[:3]) == tuple(trans_rgb):
        return 0
    if bpc == 1:
        return mono_index(rgb, trans_rgb=trans_rgb)
    px = np.array([[rgb[:3]]], dtype=np.uint8)
    if bpc in (2, 4):
        if palette is None:
            raise ConfigError(f"{bpc}-bit quantization needs a palette")
        return int(_palette_indices(px, palette)[0, 0])
    if bpc == 8:
        return int(pack_grb332(px)[0, 0])
    raise ConfigError(f"unsupported bits-per-color: {bpc}")


def quantize_image(
    rgb: U8Image,
    alpha: Optional[U8Mask],
    config: ExportConfig,
    palette: Optional[Palette] = None,
) -> IndexGrid:
    """
    Quantize a whole RGB grid to uint8 indices for config.bpc.

    Dithering is applied only for 1-bit output; other depths ignore it.
    """
    transparent = transparent_mask(rgb, alpha, config.trans_rgb)
    bpc = config.bpc
    if bpc == 1:
        out = dither_mono(rgb, transparent, config.dither, use_trans=config.use_trans)
    elif bpc in (2, 4):
        if palette is None:
            raise ConfigError(f"{bpc}-bit quantization needs a palette")
        out = _palette_indices(rgb, palette)
    elif bpc == 8:
        out = pack_grb332(rgb)
    else:
        raise ConfigError(f"unsupported bits-per-color: {bpc}")
    out = np.ascontiguousarray(out, dtype=np.uint8)
    out[transparent] = 0
    return out


__all__ = ["pack_grb332", "transparent_mask", "quantize_pixel", "quantize_image"]
