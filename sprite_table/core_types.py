# sprite_table/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, exceptions and lightweight helpers.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBTuple = Tuple[int, int, int]
XY = Tuple[int, int]

U8Image = NDArray[np.uint8]  # (H, W, 3)
U8Mask = NDArray[np.uint8]  # (H, W)
IndexGrid = NDArray[np.uint8]  # (H, W) palette indices / packed colours

OutputFormat = Literal["auto", "c", "asm", "bin"]
PaletteSource = Literal["msx1", "custom"]
SelectionMode = Literal["explicit", "auto", "best"]
DitherMethod = Literal[
    "none",
    "floyd",
    "bayer4",
    "bayer8",
    "bayer16",
    "cluster6",
    "cluster8",
    "cluster16",
]
DataFormat = Literal[
    "dec",
    "hexa",
    "hexa0x",
    "hexaH",
    "hexa$",
    "hexa&H",
    "hexa&",
    "hexa#",
    "bin",
    "bin0b",
    "binB",
]


# Exceptions


class SpriteTableError(Exception):
    """Base class for every error raised by sprite_table."""


class ConfigError(SpriteTableError):
    """Invalid or contradictory run configuration."""


class ImageLoadError(SpriteTableError):
    """Input image missing or not decodable."""


class CompressionError(SpriteTableError):
    """A block cannot be represented by the requested compressor."""


class OutputWriteError(SpriteTableError):
    """Output file could not be written."""


# Value objects


@dataclass(frozen=True)
class PaletteItem:
    """Palette entry: colour plus a human-readable name."""

    rgb: RGBTuple
    name: str


@dataclass(frozen=True)
class Palette:
    """
    Ordered colour table for 2/4-bit output.

    Entry i of `items` is emitted as index i + 1; index 0 is reserved and is
    the transparent colour whenever transparency is enabled.
    """

    source: PaletteSource
    items: Tuple[PaletteItem, ...]

    @property
    def size(self) -> int:
        """Number of addressable indices including the reserved slot 0."""
        return len(self.items) + 1

    @property
    def rgb_array(self) -> U8Image:
        """uint8 [N,3] colours of items in index order (slot 0 excluded)."""
        return np.array([it.rgb for it in self.items], dtype=np.uint8).reshape(-1, 3)


@dataclass(frozen=True)
class FontInfo:
    """Glyph size and character range for the optional font header."""

    width: int
    height: int
    first: int
    last: int


@dataclass(frozen=True)
class ExportConfig:
    """
    Immutable run configuration.

    `compressor` is the concrete variant name ("none", "crop16", ...). When
    `selection` is "auto" or "best" it holds the requested placeholder until
    the selector replaces it with dataclasses.replace().
    """

    in_file: Path
    out_file: Optional[Path] = None
    out_format: OutputFormat = "auto"
    table_name: str = "table"
    pos: XY = (0, 0)
    size: XY = (0, 0)
    gap: XY = (0, 0)
    num: XY = (1, 1)
    bpc: int = 8
    use_trans: bool = False
    trans_color: int = 0x000000
    palette: PaletteSource = "msx1"
    pal_count: int = -1
    compressor: str = "none"
    selection: SelectionMode = "explicit"
    dither: DitherMethod = "none"
    data_format: DataFormat = "hexa"
    skip_empty: bool = False
    add_index: bool = False
    add_header: bool = False
    font: Optional[FontInfo] = None
    add_defines: bool = False
    title: bool = True
    copy_file: Optional[Path] = None
    debug: bool = False

    @property
    def trans_rgb(self) -> Optional[RGBTuple]:
        """Transparency colour as an RGB tuple, or None when disabled."""
        if not self.use_trans:
            return None
        return int_to_rgb(self.trans_color)

    @property
    def whole_image(self) -> bool:
        return self.size[0] == 0 or self.size[1] == 0


@dataclass(frozen=True)
class Block:
    """One extracted sprite/tile: geometry plus its quantized index grid."""

    number: int
    x: int
    y: int
    indices: IndexGrid  # (height, width)

    @property
    def width(self) -> int:
        return int(self.indices.shape[1])

    @property
    def height(self) -> int:
        return int(self.indices.shape[0])

    def is_empty(self) -> bool:
        return not bool(np.any(self.indices))


# Small helpers


def int_to_rgb(value: int) -> RGBTuple:
    """0xRRGGBB integer to an RGB tuple."""
    return ((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


def rgb_to_hex(rgb: RGBTuple) -> str:
    """RGB tuple to lowercase hex string '#rrggbb'."""
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def parse_color(text: str) -> int:
    """
    Parse a 24-bit colour: '0xRRGGBB', '#rrggbb', '#rgb' or a decimal integer.
    """
    s = text.strip().lower()
    if s.startswith("#"):
        if len(s) == 4:
            s = "#" + "".join(ch * 2 for ch in s[1:])
        if len(s) != 7:
            raise ValueError(f"bad colour {text!r}: expected '#rrggbb' or '#rgb'")
        value = int(s[1:], 16)
    else:
        value = int(s, 0)
    if not 0 <= value <= 0xFFFFFF:
        raise ValueError(f"colour {text!r} is out of the 24-bit range")
    return value


def coerce_to_rgb_tuple(value: Union[Sequence[int], NDArray[np.generic]]) -> RGBTuple:
    """Coerce a 3-length sequence or array row to an (int, int, int) tuple."""
    if len(value) < 3:  # type: ignore[arg-type]
        raise ValueError("sequence too small for RGB")
    return (int(value[0]), int(value[1]), int(value[2]))


def assert_u8_image_rgb(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,3) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 3:
        raise TypeError("expected uint8 (H,W,3) image")
    return image  # type: ignore[return-value]


def assert_u8_mask_2d(mask_array: np.ndarray) -> U8Mask:
    """Validate a uint8 (H,W) mask and return it typed as U8Mask."""
    if mask_array.dtype != np.uint8 or mask_array.ndim != 2:
        raise TypeError("expected uint8 (H,W) mask")
    return mask_array  # type: ignore[return-value]


__all__ = [
    # aliases
    "RGBTuple",
    "XY",
    "U8Image",
    "U8Mask",
    "IndexGrid",
    "OutputFormat",
    "PaletteSource",
    "SelectionMode",
    "DitherMethod",
    "DataFormat",
    # exceptions
    "SpriteTableError",
    "ConfigError",
    "ImageLoadError",
    "CompressionError",
    "OutputWriteError",
    # value objects
    "PaletteItem",
    "Palette",
    "FontInfo",
    "ExportConfig",
    "Block",
    # helpers
    "int_to_rgb",
    "rgb_to_hex",
    "parse_color",
    "coerce_to_rgb_tuple",
    "assert_u8_image_rgb",
    "assert_u8_mask_2d",
]
