# sprite_table/sinks.py
from __future__ import annotations

"""
Output sinks.

One interface, three implementations:
  TextSink     : C or assembler source (differ only in literal/comment syntax)
  BinarySink   : raw bytes, no framing; words are little-endian
  CountingSink : byte counter only, used by the "best" benchmark and offset tables

Every sink keeps `total_bytes` equal to the number of data bytes emitted.
Framing calls (headers, comments, table delimiters) never count.
"""

from typing import List, Sequence

from .constants import VERSION
from .core_types import ConfigError, DataFormat, ExportConfig


class Sink:
    """Record emitter + byte counter. Framing defaults to no-ops."""

    def __init__(self) -> None:
        self.total_bytes = 0
        self.table_start = 0

    # framing

    def write_title(self) -> None:
        pass

    def write_header(self, config: ExportConfig) -> None:
        pass

    def write_comment(self, text: str) -> None:
        pass

    def write_table_begin(self, name: str, comment: str) -> None:
        self.table_start = self.total_bytes

    def write_sprite_header(self, number: int) -> None:
        pass

    def write_table_end(self, comment: str = "") -> None:
        pass

    def write_define(self, name: str, value: int) -> None:
        pass

    # records

    def write_bytes_line(self, values: Sequence[int], comment: str = "") -> None:
        """One record of raw bytes with an inline comment."""
        data = [int(v) & 0xFF for v in values]
        self._emit_bytes_line(data, comment)
        self.total_bytes += len(data)

    def write_words_line(self, values: Sequence[int], comment: str = "") -> None:
        """One record of 16-bit words with an inline comment."""
        data = [int(v) & 0xFFFF for v in values]
        self._emit_words_line(data, comment)
        self.total_bytes += 2 * len(data)

    def write_1byte_line(self, a: int, comment: str = "") -> None:
        self.write_bytes_line([a], comment)

    def write_2bytes_line(self, a: int, b: int, comment: str = "") -> None:
        self.write_bytes_line([a, b], comment)

    def write_4bytes_line(self, a: int, b: int, c: int, d: int, comment: str = "") -> None:
        self.write_bytes_line([a, b, c, d], comment)

    def write_1word_line(self, a: int, comment: str = "") -> None:
        self.write_words_line([a], comment)

    def write_2words_line(self, a: int, b: int, comment: str = "") -> None:
        self.write_words_line([a, b], comment)

    # continuous streams

    def write_line_begin(self) -> None:
        pass

    def write_1byte_data(self, data: int) -> None:
        self._emit_data(int(data) & 0xFF, bits=False)
        self.total_bytes += 1

    def write_8bits_data(self, data: int) -> None:
        """Like write_1byte_data; text sinks may add a bit-pattern comment."""
        self._emit_data(int(data) & 0xFF, bits=True)
        self.total_bytes += 1

    def write_line_end(self) -> None:
        pass

    def write_data_line(self, data: Sequence[int], bits: bool = False) -> None:
        """Convenience: one continuous line of bytes."""
        self.write_line_begin()
        for value in data:
            if bits:
                self.write_8bits_data(value)
            else:
                self.write_1byte_data(value)
        self.write_line_end()

    # backend hooks

    def _emit_bytes_line(self, data: List[int], comment: str) -> None:
        pass

    def _emit_words_line(self, data: List[int], comment: str) -> None:
        pass

    def _emit_data(self, value: int, bits: bool) -> None:
        pass

    def getvalue(self) -> bytes:
        return b""


class CountingSink(Sink):
    """Counts bytes, emits nothing."""


class BinarySink(Sink):
    """Raw byte stream; all framing is dropped."""

    def __init__(self) -> None:
        super().__init__()
        self._out = bytearray()

    def _emit_bytes_line(self, data: List[int], comment: str) -> None:
        self._out.extend(data)

    def _emit_words_line(self, data: List[int], comment: str) -> None:
        for word in data:
            self._out.append(word & 0x00FF)
            self._out.append(word >> 8)

    def _emit_data(self, value: int, bits: bool) -> None:
        self._out.append(value)

    def getvalue(self) -> bytes:
        return bytes(self._out)


# Literal styles: (byte format, word format) per language.
# Anything not listed for a language falls back to its "hexa" entry.
_C_LITERALS = {
    "dec": ("{:3d}", "{:5d}"),
    "hexa": ("0x{:02X}", "0x{:04X}"),
    "bin": ("0b{:08b}", "0b{:016b}"),
    "bin0b": ("0b{:08b}", "0b{:016b}"),
    "binB": ("0b{:08b}", "0b{:016b}"),
}

_ASM_LITERALS = {
    "dec": ("{:3d}", "{:5d}"),
    "hexa": ("0x{:02X}", "0x{:04X}"),
    "hexa0x": ("0x{:02X}", "0x{:04X}"),
    "hexaH": ("0{:02X}h", "0{:04X}h"),
    "hexa$": ("${:02X}", "${:04X}"),
    "hexa&H": ("&H{:02X}", "&H{:04X}"),
    "hexa&": ("&{:02X}", "&{:04X}"),
    "hexa#": ("#{:02X}", "#{:04X}"),
    "bin": ("{:08b}b", "{:016b}b"),
    "binB": ("{:08b}b", "{:016b}b"),
    "bin0b": ("0b{:08b}", "0b{:016b}"),
}


class TextSink(Sink):
    """
    C or assembler source writer.

    language "c"  : `const unsigned char name[] = { ... };`, `//` comments
    language "asm": `name:` label with `.db` / `.dw` lines, `;` comments
    """

    def __init__(self, language: str = "c", data_format: DataFormat = "hexa") -> None:
        super().__init__()
        if language not in ("c", "asm"):
            raise ConfigError(f"unknown text language: {language}")
        self.language = language
        table = _C_LITERALS if language == "c" else _ASM_LITERALS
        self._byte_fmt, self._word_fmt = table.get(data_format, table["hexa"])
        self._comment = "//" if language == "c" else ";"
        self._chunks: List[str] = []
        self._line: List[str] = []

    # formatting

    def number(self, value: int, nbytes: int = 1) -> str:
        fmt = self._byte_fmt if nbytes == 1 else self._word_fmt
        return fmt.format(value)

    def _put(self, text: str) -> None:
        self._chunks.append(text)

    def _record(self, directive: str, items: List[str], comment: str) -> None:
        if self.language == "c":
            body = "".join(f"{it}, " for it in items)
            line = f"\t{body}"
            if comment:
                line += f"// {comment}"
            self._put(line.rstrip() + "\n")
        else:
            line = f"\t{directive} {', '.join(items)}"
            if comment:
                line += f" ; {comment}"
            self._put(line + "\n")

    # framing

    def write_title(self) -> None:
        c = self._comment
        rule = "_" * 60
        self._put(
            f"{c}{rule}\n"
            f"{c}  sprite_table v{VERSION}\n"
            f"{c}  indexed-colour sprite data for 8-bit targets\n"
            f"{c}{rule}\n"
        )

    def write_header(self, config: ExportConfig) -> None:
        c = self._comment
        trans = f"#{config.trans_color:06X}" if config.use_trans else "none"
        lines = [
            f"Sprite table generated by sprite_table (v{VERSION})",
            f"- Input file:     {config.in_file.name}",
            f"- Start position: {config.pos[0]}, {config.pos[1]}",
            f"- Sprite size:    {config.size[0]}, {config.size[1]}",
            f"- Sprite count:   {config.num[0]}, {config.num[1]}",
            f"- Color count:    {1 << config.bpc} (Transparent: {trans})",
            f"- Compressor:     {config.compressor}",
            f"- Skip empty:     {'TRUE' if config.skip_empty else 'FALSE'}",
        ]
        self._put("".join(f"{c} {line}\n" for line in lines))

    def write_comment(self, text: str) -> None:
        c = self._comment
        for line in text.splitlines() or [""]:
            self._put(f"{c} {line}".rstrip() + "\n")

    def write_table_begin(self, name: str, comment: str) -> None:
        super().write_table_begin(name, comment)
        c = self._comment
        if self.language == "c":
            self._put(f"\n{c} {comment}\nconst unsigned char {name}[] =\n{{\n")
        else:
            self._put(f"\n{c} {comment}\n{name}:\n")

    def write_sprite_header(self, number: int) -> None:
        offset = self.total_bytes - self.table_start
        self._put(f"{self._comment} Sprite[{number}] (offset:{offset})\n")

    def write_table_end(self, comment: str = "") -> None:
        if self.language == "c":
            self._put("};\n")
        if comment:
            self._put(f"{self._comment} {comment}\n")

    def write_define(self, name: str, value: int) -> None:
        if self.language == "c":
            self._put(f"#define {name} {value}\n")
        else:
            self._put(f"{name} = {value}\n")

    # records

    def _emit_bytes_line(self, data: List[int], comment: str) -> None:
        self._record(".db", [self.number(v) for v in data], comment)

    def _emit_words_line(self, data: List[int], comment: str) -> None:
        self._record(".dw", [self.number(v, 2) for v in data], comment)

    def write_line_begin(self) -> None:
        self._line = []

    def _emit_data(self, value: int, bits: bool) -> None:
        text = self.number(value)
        if bits and self.language == "c":
            pattern = "".join("#" if value & (0x80 >> i) else "." for i in range(8))
            text += f", /* {pattern} */"
            self._line.append(text)
            return
        self._line.append(text + ("," if self.language == "c" else ""))

    def write_line_end(self) -> None:
        if self.language == "c":
            self._put("\t" + " ".join(self._line) + "\n")
        else:
            self._put("\t.db " + ", ".join(self._line) + "\n")
        self._line = []

    def getvalue(self) -> bytes:
        return "".join(self._chunks).encode("utf-8")


def make_sink(out_format: str, data_format: DataFormat = "hexa") -> Sink:
    """Sink for a resolved output format: "c", "asm", "bin" or "count"."""
    if out_format in ("c", "asm"):
        return TextSink(out_format, data_format)
    if out_format == "bin":
        return BinarySink()
    if out_format == "count":
        return CountingSink()
    raise ConfigError(f"no sink for output format: {out_format}")


__all__ = ["Sink", "CountingSink", "BinarySink", "TextSink", "make_sink"]
