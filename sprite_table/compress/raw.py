# sprite_table/compress/raw.py
from __future__ import annotations

"""
Uncompressed output: indices packed at bpc bits, row-major, padded to a byte
at the end of each block. Size is exactly ceil(w * h * bpc / 8).
"""

from typing import List, Sequence

from ..core_types import Block
from ..sinks import Sink
from .bits import pack_indices

# Longest text line for streams that do not split on row boundaries.
MAX_LINE_BYTES = 16


def write_packed(sink: Sink, data: Sequence[int], width: int, bpc: int) -> None:
    """
    Emit packed bytes as text lines, one pixel row per line when rows are
    byte-aligned, otherwise in fixed chunks. 1-bpp lines carry bit patterns.
    """
    if not data:
        return
    row_bits = width * bpc
    row_bytes = row_bits // 8
    aligned = row_bits % 8 == 0 and 0 < row_bytes <= MAX_LINE_BYTES
    step = row_bytes if aligned else MAX_LINE_BYTES
    for start in range(0, len(data), step):
        sink.write_data_line(data[start : start + step], bits=(bpc == 1))


def encode_none(block: Block, sink: Sink, bpc: int) -> int:
    before = sink.total_bytes
    data: List[int] = pack_indices(block.indices, bpc)
    write_packed(sink, data, block.width, bpc)
    return sink.total_bytes - before


__all__ = ["MAX_LINE_BYTES", "write_packed", "encode_none"]
