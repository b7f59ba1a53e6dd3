# sprite_table/constants.py
from __future__ import annotations

"""
Global tables and tunables used across the project.

- MSX1 palette (built-in), 2-bit subset
- Compressor benchmark order and auto-selection thresholds
- Output format extensions
"""

from typing import Dict, List, Tuple

VERSION = "1.0.0"

# =========================
# Built-in palette (hex, name)
# Index 0 of the target palette is transparent, so entries start at 1.
# =========================
MSX1_PALETTE: List[Tuple[str, str]] = [
    ("#000000", "Black"),
    ("#3eb849", "Medium Green"),
    ("#74d07d", "Light Green"),
    ("#5955e0", "Dark Blue"),
    ("#8076f1", "Light Blue"),
    ("#b95e51", "Dark Red"),
    ("#65dbef", "Cyan"),
    ("#db6559", "Medium Red"),
    ("#ff897d", "Light Red"),
    ("#ccc35e", "Dark Yellow"),
    ("#ded087", "Light Yellow"),
    ("#3aa241", "Dark Green"),
    ("#b766b5", "Magenta"),
    ("#cccccc", "Gray"),
    ("#ffffff", "White"),
]

# Names of the MSX1 entries used for the 2-bit built-in palette.
MSX1_2BIT_SUBSET: List[str] = ["Black", "Gray", "White"]

# Palette entry count defaults when --palcount is omitted.
DEFAULT_PAL_COUNT: Dict[int, int] = {2: 3, 4: 15}

SUPPORTED_BPC = (1, 2, 4, 8)

# Alpha at or below this is treated as fully transparent.
ALPHA_THRESHOLD = 127

# Luma threshold for 1-bit conversion without transparency or dithering.
MONO_THRESHOLD = 127.5

# =========================
# Compression
# =========================

# Benchmark order for "best"; ties resolve to the earliest entry.
BEST_CANDIDATES: List[str] = [
    "none",
    "crop16",
    "cropline16",
    "crop32",
    "cropline32",
    "crop256",
    "cropline256",
    "rle0",
    "rle4",
    "rle8",
]

# Crop size tiers used by "auto", smallest first.
CROP_TIERS: Tuple[int, ...] = (16, 32, 256)

# =========================
# Output
# =========================

TEXT_EXTENSIONS: Dict[str, Tuple[str, ...]] = {
    "c": (".h", ".inc"),
    "asm": (".s", ".asm"),
    "bin": (".bin", ".raw"),
}

DEFAULT_EXTENSION: Dict[str, str] = {"c": ".h", "asm": ".asm", "bin": ".bin"}

DITHER_METHODS: List[str] = [
    "none",
    "floyd",
    "bayer4",
    "bayer8",
    "bayer16",
    "cluster6",
    "cluster8",
    "cluster16",
]

DATA_FORMATS: List[str] = [
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
