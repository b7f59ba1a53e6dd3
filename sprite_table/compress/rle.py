# sprite_table/compress/rle.py
from __future__ import annotations

"""
Run-length compressors. Runs cross row boundaries (block read row-major).

rle0 : transparent runs only
         0LLLLLLL              skip L transparent pixels     (1..127)
         1LLLLLLL <L indices>  draw L pixels, packed at bpc  (1..127)
rle4 : (count << 4) | value      one byte per run, count 1..15, value < 16
rle8 : count, value              two bytes per run, count 1..255
"""

from typing import Iterator, List, Tuple

import numpy as np

from ..core_types import Block, CompressionError
from ..sinks import Sink
from .bits import pack_bits
from .raw import MAX_LINE_BYTES

RLE0_DRAW_FLAG = 0x80


def iter_runs(values: np.ndarray) -> Iterator[Tuple[int, int]]:
    """Yield (value, length) for each maximal run of equal values."""
    flat = np.asarray(values).ravel()
    if flat.size == 0:
        return
    edges = np.flatnonzero(flat[1:] != flat[:-1]) + 1
    starts = np.concatenate(([0], edges))
    ends = np.concatenate((edges, [flat.size]))
    for s, e in zip(starts.tolist(), ends.tolist()):
        yield int(flat[s]), e - s


def split_run(length: int, max_run: int) -> Iterator[int]:
    """Split one run into consecutive chunks no longer than max_run."""
    while length > 0:
        chunk = min(length, max_run)
        yield chunk
        length -= chunk


def max_run(count_bits: int) -> int:
    """Longest run a count field of count_bits can hold."""
    return (1 << count_bits) - 1


def encode_rle0(block: Block, sink: Sink, bpc: int, count_bits: int = 7) -> int:
    before = sink.total_bytes
    flat = block.indices.ravel()
    opaque = (flat != 0).astype(np.uint8)
    pos = 0
    for is_opaque, length in iter_runs(opaque):
        for chunk in split_run(length, max_run(count_bits)):
            if is_opaque:
                pixels = pack_bits(flat[pos : pos + chunk].tolist(), bpc)
                sink.write_bytes_line([RLE0_DRAW_FLAG | chunk] + pixels, f"draw {chunk}")
            else:
                sink.write_1byte_line(chunk, f"skip {chunk}")
            pos += chunk
    return sink.total_bytes - before


def _write_tokens(sink: Sink, tokens: List[int], per_line: int) -> None:
    for start in range(0, len(tokens), per_line):
        sink.write_data_line(tokens[start : start + per_line])


def encode_rle4(block: Block, sink: Sink, bpc: int, count_bits: int = 4) -> int:
    before = sink.total_bytes
    tokens: List[int] = []
    for value, length in iter_runs(block.indices):
        if value > 0x0F:
            raise CompressionError(
                f"sprite {block.number}: value {value} does not fit rle4's 4-bit field"
            )
        for chunk in split_run(length, max_run(count_bits)):
            tokens.append((chunk << count_bits) | value)
    _write_tokens(sink, tokens, MAX_LINE_BYTES)
    return sink.total_bytes - before


def encode_rle8(block: Block, sink: Sink, bpc: int, count_bits: int = 8) -> int:
    before = sink.total_bytes
    tokens: List[int] = []
    for value, length in iter_runs(block.indices):
        for chunk in split_run(length, max_run(count_bits)):
            tokens.extend((chunk, value))
    _write_tokens(sink, tokens, MAX_LINE_BYTES)
    return sink.total_bytes - before


__all__ = [
    "RLE0_DRAW_FLAG",
    "iter_runs",
    "split_run",
    "max_run",
    "encode_rle0",
    "encode_rle4",
    "encode_rle8",
]
