"""Tests for 1-bit conversion and dithering matrices."""
import numpy as np
import pytest

from sprite_table.core_types import ConfigError
from sprite_table.dither import (
    bayer_matrix,
    cluster_matrix,
    dither_mono,
    floyd_steinberg,
    mono_index,
    threshold_map,
)


# ============================================================================
# Threshold matrices
# ============================================================================

class TestBayerMatrix:

    def test_base_case(self):
        assert bayer_matrix(2).tolist() == [[0, 2], [3, 1]]

    @pytest.mark.parametrize("n", [4, 8, 16])
    def test_is_permutation(self, n):
        m = bayer_matrix(n)
        assert m.shape == (n, n)
        assert sorted(m.ravel().tolist()) == list(range(n * n))

    def test_recursion(self):
        """Top-left quadrant of M(4) is 4 * M(2)."""
        m4 = bayer_matrix(4)
        assert (m4[:2, :2] == 4 * bayer_matrix(2)).all()

    def test_rejects_non_power_of_two(self):
        with pytest.raises(ValueError):
            bayer_matrix(6)


class TestClusterMatrix:

    @pytest.mark.parametrize("n", [6, 8, 16])
    def test_is_permutation(self, n):
        m = cluster_matrix(n)
        assert sorted(m.ravel().tolist()) == list(range(n * n))

    def test_dot_grows_from_centre(self):
        """Centre cells rank below corner cells."""
        m = cluster_matrix(8)
        centre = m[3:5, 3:5].max()
        corners = min(m[0, 0], m[0, 7], m[7, 0], m[7, 7])
        assert centre < corners

    def test_deterministic(self):
        assert (cluster_matrix(6) == cluster_matrix(6)).all()


class TestThresholdMap:

    def test_tiles_matrix(self):
        thr = threshold_map("bayer4", 8, 8)
        assert thr.shape == (8, 8)
        assert (thr[:4, :4] == thr[4:, 4:]).all()

    def test_levels_inside_byte_range(self):
        thr = threshold_map("cluster16", 16, 16)
        assert thr.min() > 0
        assert thr.max() < 255

    def test_unknown_method(self):
        with pytest.raises(ConfigError):
            threshold_map("floyd", 4, 4)


# ============================================================================
# Conversion
# ============================================================================

class TestDitherMono:

    def test_no_dither_threshold(self, solid_rgb):
        img = solid_rgb(4, 2, (255, 255, 255))
        img[1] = (0, 0, 0)
        out = dither_mono(img, np.zeros((2, 4), dtype=bool))
        assert out[0].tolist() == [1, 1, 1, 1]
        assert out[1].tolist() == [0, 0, 0, 0]

    def test_no_dither_with_transparency_lights_every_opaque_pixel(self, solid_rgb):
        img = solid_rgb(3, 1, (0, 0, 0))
        transparent = np.array([[False, True, False]])
        out = dither_mono(img, transparent, use_trans=True)
        assert out.tolist() == [[1, 0, 1]]

    def test_bayer_half_grey_is_half_lit(self, solid_rgb):
        img = solid_rgb(8, 8, (128, 128, 128))
        out = dither_mono(img, np.zeros((8, 8), dtype=bool), "bayer8")
        assert int(out.sum()) == 32

    def test_transparent_pixels_stay_zero(self, solid_rgb):
        img = solid_rgb(4, 4, (255, 255, 255))
        transparent = np.zeros((4, 4), dtype=bool)
        transparent[0, 0] = True
        for method in ("none", "floyd", "bayer4", "cluster6"):
            out = dither_mono(img, transparent, method)
            assert out[0, 0] == 0


class TestFloydSteinberg:

    def test_mid_grey_is_roughly_half_lit(self):
        lum = np.full((8, 8), 128.0, dtype=np.float32)
        out = floyd_steinberg(lum, np.zeros((8, 8), dtype=bool))
        assert 24 <= int(out.sum()) <= 40

    def test_extremes(self):
        white = floyd_steinberg(np.full((4, 4), 255.0), np.zeros((4, 4), dtype=bool))
        black = floyd_steinberg(np.zeros((4, 4)), np.zeros((4, 4), dtype=bool))
        assert white.all()
        assert not black.any()


class TestMonoIndex:

    def test_matches_threshold(self):
        assert mono_index((255, 255, 255)) == 1
        assert mono_index((10, 10, 10)) == 0

    def test_transparent_colour(self):
        assert mono_index((255, 0, 255), trans_rgb=(255, 0, 255)) == 0
        assert mono_index((0, 0, 0), trans_rgb=(255, 0, 255)) == 1

    def test_matches_whole_image_for_ordered_method(self, solid_rgb):
        img = solid_rgb(4, 4, (100, 100, 100))
        grid = dither_mono(img, np.zeros((4, 4), dtype=bool), "bayer4")
        for y in range(4):
            for x in range(4):
                assert mono_index((100, 100, 100), x, y, "bayer4") == grid[y, x]

    def test_floyd_needs_whole_image(self):
        with pytest.raises(ConfigError):
            mono_index((0, 0, 0), method="floyd")
