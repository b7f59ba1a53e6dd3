# sprite_table/compress/bits.py
from __future__ import annotations

"""
Bit packing shared by every compressor: values are written MSB-first and the
stream is padded with zero bits to a whole byte.
"""

from typing import Iterable, List, Sequence

import numpy as np


def pack_bits(values: Iterable[int], bits: int) -> List[int]:
    """Pack each value into `bits` bits, MSB-first, zero-padded to bytes."""
    if bits not in (1, 2, 4, 5, 8):
        raise ValueError(f"unsupported field width: {bits}")
    arr = np.fromiter((int(v) for v in values), dtype=np.int64)
    if arr.size == 0:
        return []
    limit = (1 << bits) - 1
    if np.any((arr < 0) | (arr > limit)):
        raise ValueError(f"value does not fit in {bits} bits")
    if bits == 8:
        return arr.tolist()
    # expand to a bit plane then let numpy regroup into bytes
    shifts = np.arange(bits - 1, -1, -1, dtype=np.int64)
    plane = ((arr[:, None] >> shifts[None, :]) & 1).astype(np.uint8).ravel()
    return np.packbits(plane).astype(int).tolist()


def pack_indices(indices: np.ndarray, bpc: int) -> List[int]:
    """Pack a block (or any array) of indices row-major at bpc bits."""
    return pack_bits(np.asarray(indices).ravel().tolist(), bpc)


def pack_fields(fields: Sequence[int], bits: int) -> List[int]:
    """Pack header fields of equal width into the fewest whole bytes."""
    return pack_bits(fields, bits)


__all__ = ["pack_bits", "pack_indices", "pack_fields"]
