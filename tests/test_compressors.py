"""Tests for bit packing and the crop / RLE compressor family."""
import math

import numpy as np
import pytest

from sprite_table.compress import (
    COMPRESSORS,
    compatibility_issue,
    encode_block,
    get_compressor,
)
from sprite_table.compress.bits import pack_bits, pack_fields
from sprite_table.compress.crop import bounding_box, crop_header, line_header
from sprite_table.compress.rle import encode_rle0, encode_rle4, iter_runs, max_run, split_run
from sprite_table.core_types import CompressionError, ConfigError
from sprite_table.sinks import BinarySink


def encode(name, block, bpc):
    sink = BinarySink()
    written = encode_block(get_compressor(name), block, sink, bpc)
    data = sink.getvalue()
    assert written == len(data) == sink.total_bytes
    return data


def unpack(data, bpc, count):
    """MSB-first inverse of pack_bits."""
    bits = np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))
    out = []
    for i in range(count):
        value = 0
        for b in bits[i * bpc:(i + 1) * bpc]:
            value = (value << 1) | int(b)
        out.append(value)
    return out


def decode_rle0(data, bpc, total):
    out, pos, runs = [], 0, []
    while len(out) < total:
        token = data[pos]
        pos += 1
        length = token & 0x7F
        runs.append(length)
        if token & 0x80:
            nbytes = math.ceil(length * bpc / 8)
            out.extend(unpack(data[pos:pos + nbytes], bpc, length))
            pos += nbytes
        else:
            out.extend([0] * length)
    assert pos == len(data)
    return out, runs


def decode_rle4(data):
    out, runs = [], []
    for token in data:
        runs.append(token >> 4)
        out.extend([token & 0x0F] * (token >> 4))
    return out, runs


def decode_rle8(data):
    out, runs = [], []
    for count, value in zip(data[0::2], data[1::2]):
        runs.append(count)
        out.extend([value] * count)
    return out, runs


# ============================================================================
# Bit packing
# ============================================================================

class TestPackBits:

    def test_msb_first(self):
        assert pack_bits([1, 0, 1, 1, 0, 0, 0, 1], 1) == [0b10110001]
        assert pack_bits([1, 2, 3, 0], 2) == [0b01101100]
        assert pack_bits([0xA, 0x5], 4) == [0xA5]

    def test_padding(self):
        assert pack_bits([1], 1) == [0x80]
        assert pack_bits([0xF], 4) == [0xF0]

    def test_five_bit_fields(self):
        # 00011 00101 11111 11111 -> 3 bytes
        assert pack_fields([3, 5, 31, 31], 5) == [0b00011001, 0b01111111, 0b11110000]

    def test_value_range(self):
        with pytest.raises(ValueError):
            pack_bits([4], 2)

    def test_unsupported_width(self):
        with pytest.raises(ValueError):
            pack_bits([1], 3)


# ============================================================================
# none
# ============================================================================

class TestNone:

    @pytest.mark.parametrize("w,h,bpc", [(16, 16, 1), (8, 8, 2), (5, 3, 4), (7, 7, 1), (3, 5, 8)])
    def test_size_law(self, make_block, w, h, bpc):
        rng = np.random.default_rng(w * h + bpc)
        block = make_block(rng.integers(0, 1 << bpc, size=(h, w)))
        data = encode("none", block, bpc)
        assert len(data) == math.ceil(w * h * bpc / 8)
        assert unpack(data, bpc, w * h) == block.indices.ravel().tolist()


# ============================================================================
# Crop
# ============================================================================

class TestCrop:

    def test_opaque_16x16_one_bit(self, make_block):
        block = make_block(np.ones((16, 16)))
        data = encode("crop16", block, 1)
        assert data[:2] == bytes([0x00, 0xFF])
        assert len(data) == 2 + 32
        assert set(data[2:]) == {0xFF}

    def test_bounding_box(self, make_block):
        grid = np.zeros((16, 16), dtype=np.uint8)
        grid[3:7, 5:8] = 2
        assert bounding_box(grid) == (5, 3, 3, 4)
        data = encode("crop16", make_block(grid), 4)
        assert data[:2] == bytes([0x53, 0x23])
        assert len(data) == 2 + 6  # 3x4 pixels at 4 bits

    def test_header_fields_in_range(self, make_block):
        rng = np.random.default_rng(11)
        for _ in range(20):
            grid = (rng.random((16, 16)) > 0.7).astype(np.uint8)
            box = bounding_box(grid)
            if box is None:
                continue
            assert all(0 <= f <= 15 for f in (box[0], box[1], box[2] - 1, box[3] - 1))

    def test_empty_block(self, make_block):
        for name, header in [("crop16", [0xFF, 0xFF]),
                             ("crop32", [0xFF, 0xFF, 0xF0]),
                             ("crop256", [0xFF] * 4)]:
            data = encode(name, make_block(np.zeros((8, 8))), 2)
            assert list(data) == header

    def test_zero_size_header_is_all_max(self):
        # no box means zero size, which w - 1 / h - 1 cannot express
        assert crop_header(None, 4) == [0xFF, 0xFF]
        assert line_header(None, 4) == [0xFF]
        assert line_header(None, 8) == [0xFF, 0xFF]
        # the last column cannot start a full-width box
        assert crop_header((15, 0, 16, 16), 4) != crop_header(None, 4)

    def test_header_sizes(self):
        box = (1, 2, 3, 4)
        assert len(crop_header(box, 4)) == 2
        assert len(crop_header(box, 5)) == 3
        assert len(crop_header(box, 8)) == 4

    def test_block_too_large(self, make_block):
        with pytest.raises(CompressionError):
            encode("crop16", make_block(np.ones((17, 8))), 1)


class TestCropLine:

    def test_rows(self, make_block):
        grid = np.zeros((3, 8), dtype=np.uint8)
        grid[0, 2:5] = 1
        grid[2, 7] = 1
        data = encode("cropline16", make_block(grid), 1)
        # row 0: x=2 len=3, 1 byte of pixels; row 1: empty; row 2: x=7 len=1
        assert list(data) == [0x22, 0xE0, 0xFF, 0x70, 0x80]

    def test_cropline256_header(self, make_block):
        grid = np.zeros((1, 20), dtype=np.uint8)
        grid[0, 10:12] = 3
        data = encode("cropline256", make_block(grid), 4)
        assert list(data) == [10, 1, 0x33]


# ============================================================================
# RLE
# ============================================================================

class TestRuns:

    def test_iter_runs(self):
        assert list(iter_runs(np.array([1, 1, 2, 2, 2, 0]))) == [(1, 2), (2, 3), (0, 1)]

    def test_split_run(self):
        assert list(split_run(300, 127)) == [127, 127, 46]

    def test_max_run_follows_registry(self):
        assert max_run(get_compressor("rle0").count_bits) == 127
        assert max_run(get_compressor("rle4").count_bits) == 15
        assert max_run(get_compressor("rle8").count_bits) == 255


class TestRle:

    @pytest.fixture
    def sprite(self, make_block):
        grid = np.zeros((16, 16), dtype=np.uint8)
        grid[2:14, 3:12] = 5
        grid[8, :] = 9
        return make_block(grid)

    def test_rle0_decodes(self, sprite):
        data = encode("rle0", sprite, 4)
        out, runs = decode_rle0(data, 4, 256)
        assert out == sprite.indices.ravel().tolist()
        assert max(runs) <= 127

    def test_rle0_long_transparent_run(self, make_block):
        block = make_block(np.zeros((16, 16)))
        data = encode("rle0", block, 8)
        assert list(data) == [127, 127, 2]

    def test_rle4_decodes(self, sprite):
        out, runs = decode_rle4(encode("rle4", sprite, 4))
        assert out == sprite.indices.ravel().tolist()
        assert max(runs) <= 15
        assert min(runs) >= 1

    def test_rle8_decodes(self, make_block):
        rng = np.random.default_rng(5)
        grid = rng.integers(0, 3, size=(32, 32)) * 80
        grid[:20, :] = 200
        block = make_block(grid)
        out, runs = decode_rle8(encode("rle8", block, 8))
        assert out == block.indices.ravel().tolist()
        assert max(runs) <= 255

    def test_count_bits_drive_split(self, make_block):
        block = make_block(np.zeros((16, 16)))
        sink = BinarySink()
        encode_rle0(block, sink, 8, count_bits=5)
        assert list(sink.getvalue()) == [31] * 8 + [8]

        sink = BinarySink()
        encode_rle4(make_block(np.full((1, 20), 3)), sink, 4, count_bits=3)
        # (count << 3) | value with count capped at 7
        assert list(sink.getvalue()) == [0x3B, 0x3B, 0x33]

    def test_rle4_value_overflow(self, make_block):
        with pytest.raises(CompressionError):
            encode("rle4", make_block([[200, 200]]), 8)


# ============================================================================
# Registry and compatibility
# ============================================================================

class TestRegistry:

    def test_unknown_name(self):
        with pytest.raises(ConfigError):
            get_compressor("zip")

    def test_codes_unique(self):
        codes = [spec.code for spec in COMPRESSORS.values()]
        assert len(codes) == len(set(codes))

    def test_labels(self):
        assert get_compressor("cropline32").label == "CropLine32"
        assert get_compressor("rle0").label == "RLE0"


class TestCompatibility:

    def test_crop_needs_transparency(self):
        assert compatibility_issue(get_compressor("crop16"), 1, False, (16, 16))
        assert compatibility_issue(get_compressor("crop16"), 1, True, (16, 16)) is None

    def test_rle0_needs_transparency(self):
        assert compatibility_issue(get_compressor("rle0"), 4, False)

    def test_rle_not_for_low_bpc(self):
        for name in ("rle0", "rle4", "rle8"):
            assert compatibility_issue(get_compressor(name), 2, True)

    def test_rle4_at_eight_bit(self):
        assert compatibility_issue(get_compressor("rle4"), 8, False)

    def test_crop_block_size(self):
        assert compatibility_issue(get_compressor("crop16"), 1, True, (32, 32))
        assert compatibility_issue(get_compressor("crop32"), 1, True, (32, 32)) is None
