# sprite_table/compress/crop.py
from __future__ import annotations

"""
Crop compressors.

cropN     : one bounding box per block.
            header = (x, y, width - 1, height - 1), field_bits each
            then the cropped rectangle packed at bpc bits.
croplineN : one span per row.
            header = (x_start, length - 1), field_bits each
            then the span packed at bpc bits (each row byte-aligned).

Size fields hold size - 1, so a zero-size box or zero-length span has no
direct encoding. An all-transparent block (or row) is written instead as
the empty record: every header field at its maximum value and no pixel data.
That header is the encoding of "zero size" (cropN) and "zero length"
(croplineN). A box starting at the last column with full width cannot
occur, so the record never collides with a real box.
"""

from typing import List, Optional, Tuple

import numpy as np

from ..core_types import Block, CompressionError
from ..sinks import Sink
from .bits import pack_fields, pack_indices
from .raw import write_packed


def bounding_box(indices: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
    """(x, y, width, height) of the non-transparent area, or None if empty."""
    ys, xs = np.nonzero(indices)
    if ys.size == 0:
        return None
    x0, x1 = int(xs.min()), int(xs.max())
    y0, y1 = int(ys.min()), int(ys.max())
    return (x0, y0, x1 - x0 + 1, y1 - y0 + 1)


def row_span(row: np.ndarray) -> Optional[Tuple[int, int]]:
    """(x_start, length) of the non-transparent span of one row, or None."""
    xs = np.nonzero(row)[0]
    if xs.size == 0:
        return None
    return (int(xs[0]), int(xs[-1]) - int(xs[0]) + 1)


def crop_header(box: Optional[Tuple[int, int, int, int]], field_bits: int) -> List[int]:
    """Header bytes for a bounding box; None gives the empty record."""
    top = (1 << field_bits) - 1
    if box is None:
        return pack_fields([top, top, top, top], field_bits)
    x, y, w, h = box
    return pack_fields([x, y, w - 1, h - 1], field_bits)


def line_header(span: Optional[Tuple[int, int]], field_bits: int) -> List[int]:
    """Header bytes for a row span; None gives the empty record."""
    top = (1 << field_bits) - 1
    if span is None:
        return pack_fields([top, top], field_bits)
    x, length = span
    return pack_fields([x, length - 1], field_bits)


def _check_fits(block: Block, max_size: int) -> None:
    if block.width > max_size or block.height > max_size:
        raise CompressionError(
            f"sprite {block.number} is {block.width}x{block.height}; "
            f"crop{max_size} handles at most {max_size}x{max_size}"
        )


def encode_crop(block: Block, sink: Sink, bpc: int, max_size: int, field_bits: int) -> int:
    _check_fits(block, max_size)
    before = sink.total_bytes
    box = bounding_box(block.indices)
    if box is None:
        sink.write_bytes_line(crop_header(None, field_bits), "empty")
        return sink.total_bytes - before

    x, y, w, h = box
    sink.write_bytes_line(
        crop_header(box, field_bits), f"x:{x} y:{y} w:{w} h:{h}"
    )
    data = pack_indices(block.indices[y : y + h, x : x + w], bpc)
    write_packed(sink, data, w, bpc)
    return sink.total_bytes - before


def encode_cropline(
    block: Block, sink: Sink, bpc: int, max_size: int, field_bits: int
) -> int:
    _check_fits(block, max_size)
    before = sink.total_bytes
    for row_idx in range(block.height):
        row = block.indices[row_idx]
        span = row_span(row)
        if span is None:
            sink.write_bytes_line(line_header(None, field_bits), f"line {row_idx}: empty")
            continue
        x, length = span
        sink.write_bytes_line(
            line_header(span, field_bits), f"line {row_idx}: x:{x} len:{length}"
        )
        write_packed(sink, pack_indices(row[x : x + length], bpc), length, bpc)
    return sink.total_bytes - before


__all__ = [
    "bounding_box",
    "row_span",
    "crop_header",
    "line_header",
    "encode_crop",
    "encode_cropline",
]
