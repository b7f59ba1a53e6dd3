# sprite_table/grid.py
from __future__ import annotations

"""
Block geometry.

  block_rects(image_size, pos, size, gap, num) -> [BlockRect, ...]   row-major
  region_bounds(rects, image_size) -> (x0, y0, x1, y1)              clipped union
  extract_block(indices, rect) -> Block
  iter_blocks(indices, rects, skip_empty) -> Iterator[Block]
"""

from typing import Iterator, List, NamedTuple, Tuple

import numpy as np

from .core_types import XY, Block, IndexGrid


class BlockRect(NamedTuple):
    number: int
    x: int
    y: int
    width: int
    height: int


def block_rects(image_size: XY, pos: XY, size: XY, gap: XY, num: XY) -> List[BlockRect]:
    """
    Rectangles of every block, numbered row-major (row * num_x + col).

    A zero size on either axis selects a single block spanning from pos to
    the image edge; num is then ignored.
    """
    img_w, img_h = image_size
    pos_x, pos_y = pos
    if size[0] == 0 or size[1] == 0:
        return [BlockRect(0, pos_x, pos_y, max(0, img_w - pos_x), max(0, img_h - pos_y))]

    w, h = size
    pitch_x = w + gap[0]
    pitch_y = h + gap[1]
    num_x, num_y = num
    return [
        BlockRect(row * num_x + col, pos_x + col * pitch_x, pos_y + row * pitch_y, w, h)
        for row in range(num_y)
        for col in range(num_x)
    ]


def region_bounds(rects: List[BlockRect], image_size: XY) -> Tuple[int, int, int, int]:
    """Union of all rects clipped to the image, as (x0, y0, x1, y1) exclusive."""
    img_w, img_h = image_size
    if not rects:
        return (0, 0, 0, 0)
    x0 = max(0, min(r.x for r in rects))
    y0 = max(0, min(r.y for r in rects))
    x1 = min(img_w, max(r.x + r.width for r in rects))
    y1 = min(img_h, max(r.y + r.height for r in rects))
    return (x0, y0, max(x0, x1), max(y0, y1))


def extract_block(indices: IndexGrid, rect: BlockRect) -> Block:
    """
    Copy a block's indices out of the quantized grid. Area outside the image
    reads as index 0.
    """
    img_h, img_w = indices.shape
    out = np.zeros((rect.height, rect.width), dtype=np.uint8)
    sx0 = max(0, rect.x)
    sy0 = max(0, rect.y)
    sx1 = min(img_w, rect.x + rect.width)
    sy1 = min(img_h, rect.y + rect.height)
    if sx1 > sx0 and sy1 > sy0:
        out[sy0 - rect.y : sy1 - rect.y, sx0 - rect.x : sx1 - rect.x] = indices[
            sy0:sy1, sx0:sx1
        ]
    return Block(number=rect.number, x=rect.x, y=rect.y, indices=out)


def iter_blocks(
    indices: IndexGrid, rects: List[BlockRect], skip_empty: bool = False
) -> Iterator[Block]:
    """Yield blocks in row-major order, omitting all-transparent ones if asked."""
    for rect in rects:
        block = extract_block(indices, rect)
        if skip_empty and block.is_empty():
            continue
        yield block


__all__ = ["BlockRect", "block_rects", "region_bounds", "extract_block", "iter_blocks"]
