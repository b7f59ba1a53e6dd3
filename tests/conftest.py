"""Shared fixtures for sprite_table tests."""
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from sprite_table.core_types import Block, ExportConfig


MAGENTA = (255, 0, 255)


@pytest.fixture
def make_config():
    """Factory for ExportConfig with a dummy input path."""
    def _make(**kwargs):
        kwargs.setdefault("in_file", Path("sheet.png"))
        return ExportConfig(**kwargs)
    return _make


@pytest.fixture
def solid_rgb():
    """Factory for a (H, W, 3) uint8 image filled with one colour."""
    def _make(width, height, colour=(255, 255, 255)):
        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[...] = colour
        return img
    return _make


@pytest.fixture
def opaque_alpha():
    """Factory for a fully opaque (H, W) alpha plane."""
    def _make(width, height):
        return np.full((height, width), 255, dtype=np.uint8)
    return _make


@pytest.fixture
def make_block():
    """Factory building a Block from a nested list or array of indices."""
    def _make(indices, number=0):
        arr = np.asarray(indices, dtype=np.uint8)
        return Block(number=number, x=0, y=0, indices=arr)
    return _make


@pytest.fixture
def sheet_png(tmp_path):
    """Write a 32x32 sprite sheet: four 16x16 cells, top-left cell all magenta.

    The other cells are white with a black 4x4 square in the middle.
    """
    img = np.zeros((32, 32, 3), dtype=np.uint8)
    img[...] = (255, 255, 255)
    img[0:16, 0:16] = MAGENTA
    for cy in (0, 16):
        for cx in (0, 16):
            if (cx, cy) == (0, 0):
                continue
            img[cy + 6:cy + 10, cx + 6:cx + 10] = (0, 0, 0)
    path = tmp_path / "sheet.png"
    Image.fromarray(img).save(path)
    return path
