# sprite_table/compress/__init__.py
from __future__ import annotations

"""
Compressor family.

Provides:
  CompressorSpec            : one named variant with explicit parameters
  COMPRESSORS               : name -> CompressorSpec (closed set)
  get_compressor(name)      : lookup, raises ConfigError for unknown names
  compatibility_issue(...)  : None if usable, else a human-readable reason
  encode_block(spec, block, sink, bpc) -> bytes written

Variants:
  none                          packed indices
  crop16 / crop32 / crop256     bounding-box crop, 4/5/8-bit header fields
  cropline16 / 32 / 256         per-row crop, 4/5/8-bit header fields
  rle0                          transparent-run RLE (7-bit lengths)
  rle4 / rle8                   value RLE with 4/8-bit counts
"""

from dataclasses import dataclass
from typing import Dict, Literal, Optional, Tuple

from ..core_types import Block, ConfigError
from ..sinks import Sink
from .crop import encode_crop, encode_cropline
from .raw import encode_none
from .rle import encode_rle0, encode_rle4, encode_rle8

Family = Literal["none", "crop", "rle"]


@dataclass(frozen=True)
class CompressorSpec:
    name: str
    family: Family
    code: int  # stable id written in the optional header table
    max_size: int = 0  # crop: largest block side
    field_bits: int = 0  # crop: header field width
    per_line: bool = False  # crop: one span per row
    count_bits: int = 0  # rle: run length width

    @property
    def needs_transparency(self) -> bool:
        return self.family == "crop" or self.name == "rle0"

    @property
    def label(self) -> str:
        if self.family == "none":
            return "None"
        if self.family == "crop":
            kind = "CropLine" if self.per_line else "Crop"
            return f"{kind}{self.max_size}"
        return f"RLE{self.name[3:]}"


COMPRESSORS: Dict[str, CompressorSpec] = {
    spec.name: spec
    for spec in (
        CompressorSpec("none", "none", 0),
        CompressorSpec("crop16", "crop", 1, max_size=16, field_bits=4),
        CompressorSpec("crop32", "crop", 2, max_size=32, field_bits=5),
        CompressorSpec("crop256", "crop", 3, max_size=256, field_bits=8),
        CompressorSpec("cropline16", "crop", 9, max_size=16, field_bits=4, per_line=True),
        CompressorSpec("cropline32", "crop", 10, max_size=32, field_bits=5, per_line=True),
        CompressorSpec("cropline256", "crop", 11, max_size=256, field_bits=8, per_line=True),
        CompressorSpec("rle0", "rle", 16, count_bits=7),
        CompressorSpec("rle4", "rle", 32, count_bits=4),
        CompressorSpec("rle8", "rle", 48, count_bits=8),
    )
}


def get_compressor(name: str) -> CompressorSpec:
    try:
        return COMPRESSORS[name]
    except KeyError:
        raise ConfigError(f"unknown compressor: {name}") from None


def compatibility_issue(
    spec: CompressorSpec,
    bpc: int,
    use_trans: bool,
    block_size: Optional[Tuple[int, int]] = None,
) -> Optional[str]:
    """
    Why `spec` cannot run with these parameters, or None when it can.

    rle4 at 8 bpc is reported too; explicit requests promote it to rle8.
    """
    if spec.needs_transparency and not use_trans:
        return f"{spec.label} needs a transparency color"
    if spec.family == "rle" and bpc in (1, 2):
        return f"{spec.label} works only with 4 and 8-bit color"
    if spec.name == "rle4" and bpc == 8:
        return "RLE4 has no advantage with 8-bit color"
    if spec.family == "crop" and block_size is not None:
        w, h = block_size
        if w > spec.max_size or h > spec.max_size:
            return f"{spec.label} handles at most {spec.max_size}x{spec.max_size} sprites"
    return None


def encode_block(spec: CompressorSpec, block: Block, sink: Sink, bpc: int) -> int:
    """Encode one block with the given variant; returns bytes written."""
    if spec.family == "none":
        return encode_none(block, sink, bpc)
    if spec.family == "crop":
        encoder = encode_cropline if spec.per_line else encode_crop
        return encoder(block, sink, bpc, spec.max_size, spec.field_bits)
    if spec.name == "rle0":
        return encode_rle0(block, sink, bpc, spec.count_bits)
    if spec.name == "rle4":
        return encode_rle4(block, sink, bpc, spec.count_bits)
    return encode_rle8(block, sink, bpc, spec.count_bits)


__all__ = [
    "CompressorSpec",
    "COMPRESSORS",
    "get_compressor",
    "compatibility_issue",
    "encode_block",
]
