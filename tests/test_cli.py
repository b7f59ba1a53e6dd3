"""End-to-end tests for the export_sprites command line."""
import numpy as np
from PIL import Image

from export_sprites import main, parse_cli_args
from sprite_table.options import build_config, parse_font_char, resolve_output


# ============================================================================
# Argument handling
# ============================================================================

class TestBuildConfig:

    def test_defaults(self):
        config = build_config(parse_cli_args(["in.png"]))
        assert config.bpc == 8
        assert config.use_trans is False
        assert config.selection == "explicit"
        assert config.compressor == "none"
        assert config.title is True

    def test_selection_keywords(self):
        assert build_config(parse_cli_args(["in.png", "--compress", "best"])).selection == "best"
        auto = build_config(parse_cli_args(["in.png", "--compress", "auto"]))
        assert auto.selection == "auto"

    def test_transparency(self):
        config = build_config(parse_cli_args(["in.png", "--trans", "0xFF00FF"]))
        assert config.use_trans is True
        assert config.trans_rgb == (255, 0, 255)

    def test_font(self):
        config = build_config(parse_cli_args(["in.png", "--font", "8", "8", " ", "0x7F"]))
        assert (config.font.first, config.font.last) == (0x20, 0x7F)

    def test_font_char_forms(self):
        assert parse_font_char("A") == 0x41
        assert parse_font_char("0x41") == 0x41

    def test_copy_default_file(self):
        config = build_config(parse_cli_args(["art/sheet.png", "--copy"]))
        assert config.copy_file.name == "sheet.txt"


class TestResolveOutput:

    def test_extension_detection(self):
        for out, fmt in [("a.h", "c"), ("a.inc", "c"), ("a.s", "asm"), ("a.asm", "asm"),
                         ("a.bin", "bin"), ("a.raw", "bin"), ("a.png", "convert")]:
            config = build_config(parse_cli_args(["in.png", "-o", out]))
            assert resolve_output(config)[1] == fmt

    def test_default_path_for_explicit_format(self):
        config = build_config(parse_cli_args(["dir/in.png", "--format", "asm"]))
        path, fmt = resolve_output(config)
        assert fmt == "asm"
        assert path.name == "in.asm"


# ============================================================================
# Runs
# ============================================================================

class TestMain:

    def test_binary_export(self, tmp_path):
        src = tmp_path / "white.png"
        Image.fromarray(np.full((16, 16, 3), 255, dtype=np.uint8)).save(src)
        out = tmp_path / "white.bin"
        code = main([str(src), "-o", str(out), "--size", "16", "16", "--bpc", "1"])
        assert code == 0
        assert out.read_bytes() == bytes([0xFF] * 32)

    def test_c_export_with_best(self, sheet_png, tmp_path, capsys):
        out = tmp_path / "sheet.h"
        code = main([str(sheet_png), "-o", str(out), "--size", "16", "16", "--num", "2", "2",
                     "--bpc", "4", "--trans", "#ff00ff", "--compress", "best", "--skip",
                     "--idx", "--def", "--name", "sheet"])
        assert code == 0
        text = out.read_text()
        assert "const unsigned char sheet[] =" in text
        assert "const unsigned char sheet_index[] =" in text
        assert "#define SHEET_SIZE" in text
        assert text.count("Sprite[") == 3
        assert "Succeed!" in capsys.readouterr().out

    def test_asm_export_with_copyright(self, sheet_png, tmp_path):
        (tmp_path / "sheet.txt").write_text("(c) Test Author")
        out = tmp_path / "sheet.asm"
        code = main([str(sheet_png), "-o", str(out), "--size", "16", "16", "--num", "2", "2",
                     "--bpc", "2", "--trans", "0xFF00FF", "--compress", "auto", "--copy",
                     "--notitle"])
        assert code == 0
        text = out.read_text()
        assert "; (c) Test Author" in text
        assert "sheet:" not in text
        assert "table:" in text

    def test_convert(self, sheet_png, tmp_path):
        out = tmp_path / "copy.bmp"
        assert main([str(sheet_png), "-o", str(out)]) == 0
        with Image.open(out) as im:
            assert im.size == (32, 32)

    def test_missing_input(self, tmp_path, capsys):
        code = main([str(tmp_path / "nope.png"), "-o", str(tmp_path / "x.bin")])
        assert code == 1
        assert "[error]" in capsys.readouterr().err

    def test_auto_format_needs_output(self, sheet_png, capsys):
        assert main([str(sheet_png)]) == 1
        assert "output file is required" in capsys.readouterr().err

    def test_invalid_bpc(self, sheet_png, tmp_path, capsys):
        assert main([str(sheet_png), "-o", str(tmp_path / "x.h"), "--bpc", "3"]) == 1
        assert "bits-per-color" in capsys.readouterr().err

    def test_missing_copyright_file(self, sheet_png, tmp_path):
        code = main([str(sheet_png), "-o", str(tmp_path / "x.h"), "--copy",
                     str(tmp_path / "absent.txt")])
        assert code == 1
