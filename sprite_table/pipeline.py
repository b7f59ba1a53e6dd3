# sprite_table/pipeline.py
from __future__ import annotations

"""
Pipeline: decoded image -> palette -> quantized indices -> blocks -> sink.

  prepare_image(rgb, alpha, config) -> PreparedImage   (once per run)
  write_table(prepared, config, spec, sink, notice)     (full artifact)
  measure_total_bytes(prepared, config, spec) -> int    (counting pass)

PreparedImage is never mutated after construction, so any number of
write_table / measure passes can run over the same instance.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from .compress import CompressorSpec, encode_block
from .core_types import (
    XY,
    Block,
    ExportConfig,
    IndexGrid,
    Palette,
    U8Image,
    U8Mask,
    assert_u8_image_rgb,
    assert_u8_mask_2d,
)
from .grid import BlockRect, block_rects, iter_blocks, region_bounds
from .palette_data import build_palette, encode_palette_entry
from .quantize import quantize_image, transparent_mask
from .sinks import CountingSink, Sink


@dataclass(frozen=True)
class PreparedImage:
    image_size: XY
    indices: IndexGrid
    rects: List[BlockRect]
    palette: Optional[Palette]

    @property
    def block_size(self) -> XY:
        """Size of every block (all blocks share one size)."""
        if not self.rects:
            return (0, 0)
        return (self.rects[0].width, self.rects[0].height)


def prepare_image(rgb: U8Image, alpha: Optional[U8Mask], config: ExportConfig) -> PreparedImage:
    """Build the palette from the addressed region and quantize the image."""
    rgb = assert_u8_image_rgb(rgb)
    if alpha is not None:
        alpha = assert_u8_mask_2d(alpha)
    height, width = rgb.shape[:2]
    image_size = (width, height)
    rects = block_rects(image_size, config.pos, config.size, config.gap, config.num)

    x0, y0, x1, y1 = region_bounds(rects, image_size)
    region_rgb = rgb[y0:y1, x0:x1]
    region_alpha = alpha[y0:y1, x0:x1] if alpha is not None else None
    opaque = ~transparent_mask(region_rgb, region_alpha, config.trans_rgb)
    palette = build_palette(config, region_rgb[opaque].reshape(-1, 3))

    indices = quantize_image(rgb, alpha, config, palette)
    indices.setflags(write=False)
    return PreparedImage(image_size=image_size, indices=indices, rects=rects, palette=palette)


def effective_skip_empty(config: ExportConfig) -> bool:
    return config.skip_empty and config.use_trans


def iter_export_blocks(prepared: PreparedImage, config: ExportConfig) -> Iterator[Block]:
    return iter_blocks(prepared.indices, prepared.rects, effective_skip_empty(config))


def sprite_offsets(prepared: PreparedImage, config: ExportConfig, spec: CompressorSpec) -> List[int]:
    """Byte offset of every emitted sprite relative to the sprite table start."""
    offsets: List[int] = []
    counter = CountingSink()
    for block in iter_export_blocks(prepared, config):
        offsets.append(counter.total_bytes)
        encode_block(spec, block, counter, config.bpc)
    return offsets


def _define_name(table: str) -> str:
    return f"{table.upper()}_SIZE"


def _end_table(sink: Sink, config: ExportConfig, name: str, comment: str) -> None:
    size = sink.total_bytes - sink.table_start
    sink.write_table_end(comment)
    if config.add_defines:
        sink.write_define(_define_name(name), size)


def _write_palette_table(sink: Sink, config: ExportConfig, palette: Palette) -> None:
    name = f"{config.table_name}_palette"
    sink.write_table_begin(name, f"Custom palette ({len(palette.items)} colors)")
    for i, item in enumerate(palette.items, start=1):
        b0, b1 = encode_palette_entry(item.rgb)
        sink.write_2bytes_line(b0, b1, f"[{i}] {item.name}")
    _end_table(sink, config, name, "")


def _write_header_table(
    sink: Sink, config: ExportConfig, prepared: PreparedImage, spec: CompressorSpec, count: int
) -> None:
    name = f"{config.table_name}_header"
    w, h = prepared.block_size
    sink.write_table_begin(name, "Sprite table header")
    # one byte per side: 256 is stored as 0
    sink.write_2bytes_line(w & 0xFF, h & 0xFF, "Sprite size (0 = 256)")
    sink.write_1word_line(count, "Sprite count")
    sink.write_2bytes_line(config.bpc, spec.code, f"Bits per color / Compressor ({spec.label})")
    _end_table(sink, config, name, "")


def _write_font_table(sink: Sink, config: ExportConfig) -> None:
    font = config.font
    if font is None:
        return
    name = f"{config.table_name}_font"
    sink.write_table_begin(name, "Font header")
    sink.write_2bytes_line(font.width, font.height, "Font size")
    sink.write_2bytes_line(font.first, font.last, "First/last character")
    _end_table(sink, config, name, "")


def _write_index_table(sink: Sink, config: ExportConfig, offsets: List[int]) -> None:
    name = f"{config.table_name}_index"
    sink.write_table_begin(name, f"Sprite index table ({len(offsets)} entries)")
    for i, offset in enumerate(offsets):
        sink.write_1word_line(offset, f"Sprite {i}")
    _end_table(sink, config, name, "")


def write_table(
    prepared: PreparedImage,
    config: ExportConfig,
    spec: CompressorSpec,
    sink: Sink,
    notice: Optional[str] = None,
) -> int:
    """
    Emit the whole artifact into sink and return sink.total_bytes.

    Order: title, header comment, notice, [palette], [header], [font],
    [index], sprite table.
    """
    if config.title:
        sink.write_title()
    sink.write_header(config)
    if notice:
        sink.write_comment(notice)

    if prepared.palette is not None and prepared.palette.source == "custom":
        _write_palette_table(sink, config, prepared.palette)

    offsets: List[int] = []
    if config.add_header or config.add_index:
        offsets = sprite_offsets(prepared, config, spec)
    if config.add_header:
        _write_header_table(sink, config, prepared, spec, len(offsets))
    _write_font_table(sink, config)
    if config.add_index:
        _write_index_table(sink, config, offsets)

    w, h = prepared.block_size
    sink.write_table_begin(
        config.table_name,
        f"Sprites: {w}x{h}, {config.bpc}-bit, {spec.label} compression",
    )
    for block in iter_export_blocks(prepared, config):
        sink.write_sprite_header(block.number)
        encode_block(spec, block, sink, config.bpc)
    _end_table(sink, config, config.table_name, f"Total size: {sink.total_bytes - sink.table_start} bytes")
    return sink.total_bytes


def measure_total_bytes(prepared: PreparedImage, config: ExportConfig, spec: CompressorSpec) -> int:
    """Run the full pipeline into a counting sink; nothing is persisted."""
    return write_table(prepared, config, spec, CountingSink())


def count_empty_blocks(prepared: PreparedImage) -> int:
    return sum(
        1 for block in iter_blocks(prepared.indices, prepared.rects) if block.is_empty()
    )


__all__ = [
    "PreparedImage",
    "prepare_image",
    "effective_skip_empty",
    "iter_export_blocks",
    "sprite_offsets",
    "write_table",
    "measure_total_bytes",
    "count_empty_blocks",
]
