import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from mp4_ascii.quantizer import DEFAULT_PALETTE, GlyphPalette, GlyphQuantizer, glyph, glyph_index


class GlyphTests(unittest.TestCase):
    def test_modulo_mapping_for_every_sample(self):
        for chars in ("ab", "abc", "01234", DEFAULT_PALETTE.chars):
            palette = GlyphPalette(chars)
            for s in range(256):
                self.assertEqual(glyph(s, palette), chars[s % (len(chars) - 1)])

    def test_zero_is_darkest(self):
        for chars in ("ab", "xyz", DEFAULT_PALETTE.chars):
            palette = GlyphPalette(chars)
            self.assertEqual(glyph(0, palette), chars[0])

    def test_linear_mapping_is_monotonic(self):
        palette = GlyphPalette("01234")
        indices = [glyph_index(s, len(palette), "linear") for s in range(256)]
        self.assertEqual(indices[0], 0)
        self.assertEqual(indices[255], 3)
        self.assertEqual(indices, sorted(indices))

    def test_default_palette_ramp(self):
        self.assertEqual(len(DEFAULT_PALETTE), 96)
        self.assertEqual(DEFAULT_PALETTE[0], " ")
        self.assertEqual(DEFAULT_PALETTE[-1], "$")

    def test_palette_needs_two_glyphs(self):
        with self.assertRaises(ValueError):
            GlyphPalette("a")
        with self.assertRaises(ValueError):
            GlyphPalette("ab\n")

    def test_unknown_mode_rejected(self):
        with self.assertRaises(ValueError):
            GlyphQuantizer(mode="gamma")


class QuantizePlaneTests(unittest.TestCase):
    def test_two_by_two_scenario(self):
        palette = GlyphPalette("abcde")
        quantizer = GlyphQuantizer(palette)
        rows = quantizer.quantize_plane(np.array([0, 50, 128, 255], dtype=np.uint8), 2, 2, 2)
        # 模 4: 0, 2, 0, 3
        self.assertEqual(rows, ["ac", "ad"])

    def test_stride_padding_is_skipped(self):
        quantizer = GlyphQuantizer(GlyphPalette("abcde"))
        buf = np.array([0, 1, 9, 9,
                        2, 3, 9, 9], dtype=np.uint8)
        rows = quantizer.quantize_plane(buf, 2, 2, 4)
        self.assertEqual(rows, ["ab", "cd"])

    def test_last_row_without_padding(self):
        quantizer = GlyphQuantizer(GlyphPalette("abcde"))
        buf = np.array([0, 1, 7, 7, 2, 3], dtype=np.uint8)
        self.assertEqual(quantizer.quantize_plane(buf, 2, 2, 4), ["ab", "cd"])

    def test_two_dimensional_plane_uses_its_rows(self):
        quantizer = GlyphQuantizer(GlyphPalette("abcde"))
        plane = np.zeros((3, 32), dtype=np.uint8)
        plane[:, :3] = [[0, 1, 2], [3, 4, 5], [6, 7, 8]]
        self.assertEqual(quantizer.quantize_plane(plane, 3, 3), ["abc", "dab", "cda"])

    def test_short_buffer_rejected(self):
        quantizer = GlyphQuantizer()
        with self.assertRaises(ValueError):
            quantizer.quantize_plane(np.zeros(10, dtype=np.uint8), 4, 4, 4)

    def test_grid_shape(self):
        quantizer = GlyphQuantizer()
        plane = np.random.randint(0, 256, size=(48, 64), dtype=np.uint8)
        rows = quantizer.quantize_plane(plane, 64, 48)
        self.assertEqual(len(rows), 48)
        self.assertTrue(all(len(r) == 64 for r in rows))


if __name__ == "__main__":
    unittest.main()
