# sprite_table/palette_data.py
from __future__ import annotations

"""
Palette definitions and builders.

Exports:
  build_builtin_palette(bpc) -> Palette
  build_custom_palette(pixels, count) -> Palette
  build_palette(config, region_rgb) -> Optional[Palette]
  encode_palette_entry(rgb) -> (byte0, byte1)   # V9938 0RRR0BBB, 00000GGG
"""

from typing import List, Optional, Tuple

import numpy as np
from PIL import Image

from .constants import MSX1_2BIT_SUBSET, MSX1_PALETTE
from .core_types import (
    ExportConfig,
    Palette,
    PaletteItem,
    RGBTuple,
    U8Image,
    coerce_to_rgb_tuple,
    parse_color,
    int_to_rgb,
    rgb_to_hex,
)


def _items_from_pairs(hex_name_pairs: List[Tuple[str, str]]) -> Tuple[PaletteItem, ...]:
    return tuple(
        PaletteItem(rgb=int_to_rgb(parse_color(hx)), name=name)
        for hx, name in hex_name_pairs
    )


def build_builtin_palette(bpc: int) -> Palette:
    """MSX1 table for 4-bit output; its black/grey/white subset for 2-bit."""
    items = _items_from_pairs(MSX1_PALETTE)
    if bpc == 2:
        by_name = {it.name: it for it in items}
        items = tuple(by_name[name] for name in MSX1_2BIT_SUBSET)
    return Palette(source="msx1", items=items)


def build_custom_palette(pixels: U8Image, count: int) -> Palette:
    """
    Median-cut reduction of the given opaque pixels to at most `count` colours.

    Pillow's median cut is deterministic for a given pixel order, so the same
    region always yields the same palette. Entries keep Pillow's index order.
    """
    flat = np.asarray(pixels, dtype=np.uint8).reshape(-1, 3)
    if flat.shape[0] == 0:
        return Palette(
            source="custom",
            items=(PaletteItem(rgb=(0, 0, 0), name="#000000"),),
        )

    strip = Image.fromarray(flat.reshape(1, -1, 3))
    quantized = strip.quantize(
        colors=max(1, int(count)),
        method=Image.Quantize.MEDIANCUT,
        dither=Image.Dither.NONE,
    )
    flat_pal = quantized.getpalette() or []
    used = np.unique(np.array(quantized, dtype=np.uint8))

    items: List[PaletteItem] = []
    seen = set()
    for idx in used.tolist():
        rgb: RGBTuple = coerce_to_rgb_tuple(flat_pal[idx * 3 : idx * 3 + 3])
        if rgb in seen:
            continue
        seen.add(rgb)
        items.append(PaletteItem(rgb=rgb, name=rgb_to_hex(rgb)))
    return Palette(source="custom", items=tuple(items[:count]))


def build_palette(config: ExportConfig, region_rgb: U8Image) -> Optional[Palette]:
    """
    Build the palette for a run. None for 1-bit and 8-bit output, which
    never look colours up in a table.
    """
    if config.bpc not in (2, 4):
        return None
    if config.palette == "custom":
        return build_custom_palette(region_rgb, config.pal_count)
    return build_builtin_palette(config.bpc)


def encode_palette_entry(rgb: RGBTuple) -> Tuple[int, int]:
    """
    Encode a colour for the V9938 palette registers:
      byte 0 = 0RRR0BBB, byte 1 = 00000GGG (3 bits per channel).
    """

    def to_3bit(component: int) -> int:
        return max(0, min(7, round(component * 7 / 255)))

    r3, g3, b3 = (to_3bit(c) for c in rgb)
    return (r3 << 4) | b3, g3


__all__ = [
    "build_builtin_palette",
    "build_custom_palette",
    "build_palette",
    "encode_palette_entry",
]
