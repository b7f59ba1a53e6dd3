# sprite_table/options.py
from __future__ import annotations

"""
Run configuration: argparse namespace -> ExportConfig, then the recoverable
corrections (each announced with a warning) and output resolution.

Exports:
- build_config(args) -> ExportConfig
- resolve_config(config) -> ExportConfig
- resolve_output(config) -> (Path, "c" | "asm" | "bin" | "convert")
- parse_font_char(text) -> int
"""

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Optional, Tuple

from .constants import DEFAULT_EXTENSION, DEFAULT_PAL_COUNT, SUPPORTED_BPC, TEXT_EXTENSIONS
from .core_types import ConfigError, ExportConfig, FontInfo, parse_color
from .utils import warn

SELECTION_KEYWORDS = ("auto", "best")


def parse_font_char(text: str) -> int:
    """A single character is taken literally; longer text is hexadecimal (0xNN)."""
    if len(text) == 1:
        return ord(text)
    try:
        value = int(text, 16)
    except ValueError:
        raise ConfigError(f"bad font character {text!r}: use one character or 0xNN") from None
    if not 0 <= value <= 0xFF:
        raise ConfigError(f"font character {text!r} is out of range")
    return value


def build_config(args: argparse.Namespace) -> ExportConfig:
    """Translate parsed CLI arguments into an ExportConfig (no corrections yet)."""
    in_file = Path(args.input)

    use_trans = args.trans is not None
    trans_color = 0
    if use_trans:
        try:
            trans_color = parse_color(args.trans)
        except ValueError as exc:
            raise ConfigError(str(exc)) from None

    compress = args.compress
    if compress in SELECTION_KEYWORDS:
        selection, compressor = compress, "none"
    else:
        selection, compressor = "explicit", compress

    font: Optional[FontInfo] = None
    if args.font is not None:
        fx, fy, first, last = args.font
        try:
            font = FontInfo(int(fx), int(fy), parse_font_char(first), parse_font_char(last))
        except ValueError:
            raise ConfigError(f"bad font size: {fx} {fy}") from None

    copy_file: Optional[Path] = None
    if args.copy is not None:
        copy_file = Path(args.copy) if args.copy else in_file.with_suffix(".txt")

    return ExportConfig(
        in_file=in_file,
        out_file=Path(args.out) if args.out else None,
        out_format=args.format,
        table_name=args.name,
        pos=tuple(args.pos),
        size=tuple(args.size),
        gap=tuple(args.gap),
        num=tuple(args.num),
        bpc=args.bpc,
        use_trans=use_trans,
        trans_color=trans_color,
        palette=args.pal,
        pal_count=args.palcount,
        compressor=compressor,
        selection=selection,
        dither=args.dither,
        data_format=args.data,
        skip_empty=args.skip,
        add_index=args.idx,
        add_header=args.head,
        font=font,
        add_defines=args.define,
        title=not args.notitle,
        copy_file=copy_file,
        debug=args.debug,
    )


def resolve_config(config: ExportConfig) -> ExportConfig:
    """
    Validate fatal problems and apply recoverable corrections.

    Fatal (ConfigError): unsupported bpc, non-positive block counts, negative
    size or gap, missing copyright file.
    Corrected with a warning: palette count above the bpc ceiling, dithering
    at bpc != 1, skip-empty without transparency (no-op).
    Warned only: a header table with a block side above 256.
    """
    if config.bpc not in SUPPORTED_BPC:
        raise ConfigError(
            f"invalid bits-per-color value ({config.bpc}). "
            "Only 1, 2, 4 or 8-bit colors are supported"
        )
    if config.num[0] < 1 or config.num[1] < 1:
        raise ConfigError(f"block count must be at least 1x1, got {config.num[0]}x{config.num[1]}")
    if min(config.size) < 0 or min(config.gap) < 0:
        raise ConfigError("block size and gap cannot be negative")
    if config.copy_file is not None and not config.copy_file.is_file():
        raise ConfigError(f"copyright file not found ({config.copy_file})")

    changes = {}

    pal_count = config.pal_count
    if pal_count == -1:
        pal_count = DEFAULT_PAL_COUNT.get(config.bpc, 15)
    if config.bpc in (2, 4):
        ceiling = (1 << config.bpc) - 1
        if pal_count > ceiling:
            warn(
                f"palette count is {pal_count} but can't be more than {ceiling} with "
                f"{config.bpc}-bit color (color index 0 is always transparent). "
                f"Continue with {ceiling} as value."
            )
            pal_count = ceiling
        elif pal_count < 1:
            warn(f"palette count is {pal_count}; continue with 1 as value.")
            pal_count = 1
    changes["pal_count"] = pal_count

    if config.dither != "none" and config.bpc != 1:
        warn(
            f"dithering only works with 1-bit color format (current is {config.bpc}-bit). "
            "Dithering value will be ignored."
        )
        changes["dither"] = "none"

    if config.skip_empty and not config.use_trans:
        warn("skip has no effect without transparency color.")

    if config.whole_image:
        warn("size X or Y is 0. The whole image will be exported.")

    if config.add_header and max(config.size) > 256:
        warn(
            f"sprite size {config.size[0]}x{config.size[1]} does not fit the header table "
            "(one byte per side, 0 = 256). Stored sizes are truncated to 8 bits."
        )

    return replace(config, **changes)


def resolve_output(config: ExportConfig) -> Tuple[Path, str]:
    """
    Output path and concrete format. Under "auto" the extension decides;
    an unknown extension means plain image conversion ("convert").
    """
    if config.out_format != "auto":
        out = config.out_file or config.in_file.with_suffix(DEFAULT_EXTENSION[config.out_format])
        return out, config.out_format

    if config.out_file is None:
        raise ConfigError("output file is required if format is set to 'auto'")
    suffix = config.out_file.suffix.lower()
    for fmt, extensions in TEXT_EXTENSIONS.items():
        if suffix in extensions:
            return config.out_file, fmt
    return config.out_file, "convert"


__all__ = ["parse_font_char", "build_config", "resolve_config", "resolve_output"]
