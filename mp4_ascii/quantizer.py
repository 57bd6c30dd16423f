# -*- coding: utf-8 -*-
"""亮度 -> 字符 的量化"""
from dataclasses import dataclass

import numpy as np

# 用于生成字符画的像素，越往后视觉上越明显
PIXELS = "  ..,,--''``::!!11+*<>()\\/{}[]abcdefghijklmnopqrstuvwxyz 234567890ABCDEFGHIJKLMNOPQRSTUVWXYZ&@#$"

# modulo: palette[s % (N-1)]，亮度和字符不是单调关系
# linear: palette[s * (N-1) // 256]，亮度单调递增
MAPPING_MODES = ("modulo", "linear")


@dataclass(frozen=True)
class GlyphPalette:
    chars: str

    def __post_init__(self):
        if len(self.chars) < 2:
            raise ValueError("字符表至少需要 2 个字符")
        if not self.chars.isprintable():
            raise ValueError("字符表只能包含可打印字符")

    def __len__(self):
        return len(self.chars)

    def __getitem__(self, index):
        return self.chars[index]


DEFAULT_PALETTE = GlyphPalette(PIXELS)


def glyph_index(sample, size, mode="modulo"):
    """单个 8 位亮度值对应的字符下标"""
    if mode == "modulo":
        return int(sample) % (size - 1)
    if mode == "linear":
        return int(sample) * (size - 1) // 256
    raise ValueError(f"未知的映射方式: {mode}")


def glyph(sample, palette=DEFAULT_PALETTE, mode="modulo"):
    return palette[glyph_index(sample, len(palette), mode)]


class GlyphQuantizer:
    def __init__(self, palette=DEFAULT_PALETTE, mode="modulo"):
        if mode not in MAPPING_MODES:
            raise ValueError(f"未知的映射方式: {mode}")
        self.palette = palette
        self.mode = mode
        # 256 项查找表，每帧只做一次索引
        self._table = np.array(
            [glyph(s, palette, mode) for s in range(256)], dtype="<U1")

    def quantize_plane(self, plane, width, height, linesize=None):
        """按行跨度(linesize)读取亮度平面，返回 height 行、每行 width 个字符"""
        samples = np.asarray(plane, dtype=np.uint8)
        if samples.ndim == 2:
            if samples.shape[0] < height or samples.shape[1] < width:
                raise ValueError(
                    f"亮度平面 {samples.shape} 小于 {width}x{height}")
            rows = samples[:height, :width]
        else:
            linesize = linesize or width
            if linesize < width:
                raise ValueError(f"行跨度 {linesize} 小于宽度 {width}")
            flat = samples.reshape(-1)
            needed = height * linesize
            if flat.size < needed - (linesize - width):
                raise ValueError(f"亮度平面只有 {flat.size} 字节，不足 {width}x{height}")
            if flat.size < needed:
                # 最后一行可以没有对齐填充
                flat = np.concatenate(
                    [flat, np.zeros(needed - flat.size, dtype=np.uint8)])
            rows = flat[:needed].reshape(height, linesize)[:, :width]

        glyphs = self._table[rows]
        return ["".join(row) for row in glyphs]

    def quantize(self, picture):
        return self.quantize_plane(
            picture.luma, picture.width, picture.height, picture.linesizes[0])
