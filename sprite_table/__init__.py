# sprite_table/__init__.py
"""
sprite_table package.

Purpose:
  Cut sprite sheets into blocks and export them as compressed indexed-colour
  tables for 8-bit targets. See export_sprites.py for the CLI.

Public API:
  prepare_image        : decoded image -> palette + quantized index grid.
  write_table          : emit the full artifact into a sink.
  effective_compressor : resolve auto / best / explicit compressor selection.
  make_sink            : C, assembler, binary or counting sink.
  compress             : compressor variants and encoders.
  core_types           : shared types, config and errors.
  palette_data         : built-in MSX palettes and custom median-cut palettes.
  utils                : shared helpers (bit sizes, lookups, logging).

Quick start:
  from sprite_table import ExportConfig, prepare_image, effective_compressor, write_table
"""

__version__ = "1.0.0"

# Re-export namespaces for convenience.
from . import compress
from . import core_types
from . import palette_data
from . import utils

from .core_types import ExportConfig, SpriteTableError  # noqa: E402
from .pipeline import prepare_image, write_table, measure_total_bytes  # noqa: E402
from .selection import effective_compressor  # noqa: E402
from .sinks import make_sink  # noqa: E402

__all__ = [
    "__version__",
    "compress",
    "core_types",
    "palette_data",
    "utils",
    "ExportConfig",
    "SpriteTableError",
    "prepare_image",
    "write_table",
    "measure_total_bytes",
    "effective_compressor",
    "make_sink",
]
