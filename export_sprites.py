#!/usr/bin/env python3
"""
export_sprites.py
Cut a sprite sheet into fixed-size blocks and export them as an indexed-colour
sprite table for 8-bit targets (MSX and similar).

Usage:
  python export_sprites.py INPUT [-o OUTPUT] --size X Y --num X Y --bpc [1|2|4|8]
      --trans COLOR --compress [none|crop16|...|rle8|auto|best] --format [auto|c|asm|bin]

Output formats:
  c   : C header with `const unsigned char` tables
  asm : assembler source with `.db` / `.dw` directives
  bin : raw bytes, little-endian words
  auto: chosen from the output extension (.h/.inc, .s/.asm, .bin/.raw);
        any other extension re-saves the image through Pillow

Compression:
  none, crop16/32/256, cropline16/32/256, rle0, rle4, rle8
  auto : fixed rule table from sprite size, transparency and bpc
  best : every compatible variant is measured, the smallest wins

Notes:
  Palette, quantization and compressors live in the sprite_table package.
  Logging helpers come from sprite_table.utils.
"""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import numpy as np

from sprite_table.compress import COMPRESSORS
from sprite_table.constants import DATA_FORMATS, DITHER_METHODS, VERSION
from sprite_table.core_types import ConfigError, ExportConfig, OutputWriteError, SpriteTableError
from sprite_table.image_io import load_image_rgba, save_image
from sprite_table.options import build_config, resolve_config, resolve_output
from sprite_table.pipeline import count_empty_blocks, prepare_image, write_table
from sprite_table.selection import effective_compressor
from sprite_table.sinks import make_sink
from sprite_table.utils import (
    # formatting
    format_total_duration_compact,
    format_seconds_compact,
    # pretty logging
    print_banner,
    log,
    debug_log,
    error,
    print_config_line,
    key_value_pairs_to_string,
    enable_line_buffered_stdout,
    # sizes
    packed_size,
)

# CLI args


def parse_cli_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments for sprite export.

    --bpc is a plain int here; resolve_config rejects unsupported values so the
    failure goes through the same [error] path as every other fatal problem.
    """
    parser = argparse.ArgumentParser(
        prog="export_sprites",
        description="Export sprite sheet blocks as compressed indexed-colour tables.",
    )
    parser.add_argument("input", type=str, help="Input image")
    parser.add_argument("-o", "--out", type=str, default=None, help="Output file")
    parser.add_argument(
        "--format",
        choices=["auto", "c", "asm", "bin"],
        default="auto",
        help='Output format. "auto" picks from the output extension.',
    )
    parser.add_argument("--name", type=str, default="table", help="Table name")
    parser.add_argument("--pos", type=int, nargs=2, default=[0, 0], metavar=("X", "Y"), help="Start position")
    parser.add_argument("--size", type=int, nargs=2, default=[0, 0], metavar=("X", "Y"), help="Sprite size (0 = whole image)")
    parser.add_argument("--gap", type=int, nargs=2, default=[0, 0], metavar=("X", "Y"), help="Gap between sprites")
    parser.add_argument("--num", type=int, nargs=2, default=[1, 1], metavar=("X", "Y"), help="Sprite count")
    parser.add_argument("--bpc", type=int, default=8, help="Bits per color: 1, 2, 4 or 8")
    parser.add_argument(
        "--trans",
        type=str,
        default=None,
        metavar="COLOR",
        help="Transparency color (0xRRGGBB, #rrggbb or decimal)",
    )
    parser.add_argument("--pal", choices=["msx1", "custom"], default="msx1", help="Palette for 2/4-bit color")
    parser.add_argument("--palcount", type=int, default=-1, help="Palette entry count (custom palette)")
    parser.add_argument(
        "--compress",
        choices=list(COMPRESSORS) + ["auto", "best"],
        default="none",
        help="Compressor variant, or auto / best selection.",
    )
    parser.add_argument("--dither", choices=DITHER_METHODS, default="none", help="Dithering (1-bit only)")
    parser.add_argument("--data", choices=DATA_FORMATS, default="hexa", help="Numeric literal style")
    parser.add_argument("--skip", action="store_true", help="Skip empty sprites (needs --trans)")
    parser.add_argument("--idx", action="store_true", help="Add sprite index table")
    parser.add_argument(
        "--copy",
        nargs="?",
        const="",
        default=None,
        metavar="FILE",
        help="Add copyright notice. Omit FILE to use <input>.txt.",
    )
    parser.add_argument("--head", action="store_true", help="Add header table")
    parser.add_argument(
        "--font",
        nargs=4,
        default=None,
        metavar=("X", "Y", "FIRST", "LAST"),
        help="Add font header (characters literal or 0xNN)",
    )
    parser.add_argument("--def", dest="define", action="store_true", help="Add size defines")
    parser.add_argument("--notitle", action="store_true", help="Remove the title banner")
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser.parse_args(argv)


def _read_notice(config: ExportConfig) -> Optional[str]:
    if config.copy_file is None:
        return None
    try:
        return config.copy_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read copyright file {config.copy_file}: {exc}") from exc


def _write_output(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise OutputWriteError(f"failed to write {path}: {exc}") from exc


# Per-run processing


def export_file(config: ExportConfig) -> int:
    """
    Run one export end-to-end:
      load -> convert or (prepare -> select compressor -> write) -> report.
    Returns the number of bytes of sprite data written (0 for conversions).
    """
    t_start = time.perf_counter()
    out_path, out_format = resolve_output(config)
    print_banner(config.in_file.name)

    rgb, alpha = load_image_rgba(config.in_file)
    height, width = rgb.shape[:2]
    t_loaded = time.perf_counter()

    if config.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Loaded", f"{width}x{height}"),
                    ("Alpha=0", int(np.count_nonzero(alpha == 0))),
                    ("Output", f"{out_path.name} ({out_format})"),
                ]
            )
        )

    if out_format == "convert":
        save_image(out_path, rgb, alpha)
        log(f"Convert {config.in_file.name} to {out_path.name}")
        log(f"Total time {format_total_duration_compact(time.perf_counter() - t_start)}")
        return 0

    notice = _read_notice(config)
    prepared = prepare_image(rgb, alpha, config)
    t_prepared = time.perf_counter()

    print_config_line(
        "blocks",
        [
            ("Size", f"{prepared.block_size[0]}x{prepared.block_size[1]}"),
            ("Count", f"{config.num[0]}x{config.num[1]}"),
            ("Bpc", config.bpc),
            ("Trans", config.use_trans),
        ],
        debug=False,
    )
    if config.debug and prepared.palette is not None:
        debug_log(
            key_value_pairs_to_string(
                [("Palette", prepared.palette.source), ("Entries", prepared.palette.size)]
            )
        )

    spec = effective_compressor(config, prepared)
    config = replace(config, compressor=spec.name)
    t_selected = time.perf_counter()

    sink = make_sink(out_format, config.data_format)
    total = write_table(prepared, config, spec, sink, notice)
    _write_output(out_path, sink.getvalue())
    t_written = time.perf_counter()

    log(f"Compressor: {spec.label}")
    log(f"Wrote {out_path.name} | format={out_format} | sprite data={total:,} bytes")
    if config.debug:
        bw, bh = prepared.block_size
        raw = packed_size(bw * bh, config.bpc) * len(prepared.rects)
        debug_log(
            key_value_pairs_to_string(
                [("Uncompressed", raw), ("Written", total), ("Empty blocks", count_empty_blocks(prepared))]
            )
        )
        debug_log(
            f"Total {format_total_duration_compact(t_written - t_start)}  "
            f"(load={format_seconds_compact(t_loaded - t_start)}, "
            f"prepare={format_seconds_compact(t_prepared - t_loaded)}, "
            f"select={format_seconds_compact(t_selected - t_prepared)}, "
            f"write={format_seconds_compact(t_written - t_selected)})"
        )
    log(f"Succeed! Total time {format_total_duration_compact(t_written - t_start)}")
    return total


# Entry point


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    enable_line_buffered_stdout()
    args = parse_cli_args(argv)
    print_config_line("run", [("Version", VERSION), ("Compress", args.compress)], debug=False)
    try:
        config = resolve_config(build_config(args))
        if config.debug:
            debug_log(
                key_value_pairs_to_string(
                    [
                        ("Selection", config.selection),
                        ("Palette", config.palette),
                        ("Pal count", config.pal_count),
                        ("Dither", config.dither),
                    ]
                )
            )
        export_file(config)
    except SpriteTableError as exc:
        error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
