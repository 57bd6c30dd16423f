# -*- coding: utf-8 -*-
"""播放参数，默认 64x48 / 30FPS / 最多 100000 帧"""
from dataclasses import dataclass

from .quantizer import DEFAULT_PALETTE, MAPPING_MODES, GlyphPalette
from .renderer import PACING_MODES

ASCII_WIDTH = 64      # 字符画宽度
ASCII_HEIGHT = 48     # 字符画高度
FPS = 30              # 最大刷新率
MAX_FRAMES = 100000   # 最多处理的帧数


@dataclass(frozen=True)
class PlayerConfig:
    width: int = ASCII_WIDTH
    height: int = ASCII_HEIGHT
    palette: GlyphPalette = DEFAULT_PALETTE
    mapping: str = "modulo"
    max_fps: float = FPS
    pacing: str = "deadline"
    max_frames: int = MAX_FRAMES
    skip_corrupt: bool = False
    plain: bool = False

    def validate(self):
        """检查参数是否合理，不合理时抛出 ValueError"""
        if self.width < 0 or self.height < 0:
            raise ValueError(f"目标尺寸不能为负数: {self.width}x{self.height}")
        if self.max_fps <= 0:
            raise ValueError(f"FPS 必须大于 0: {self.max_fps}")
        if self.max_frames < 0:
            raise ValueError(f"最大帧数不能为负数: {self.max_frames}")
        if self.mapping not in MAPPING_MODES:
            raise ValueError(f"未知的映射方式: {self.mapping}")
        if self.pacing not in PACING_MODES:
            raise ValueError(f"未知的限速方式: {self.pacing}")
        return self

    @classmethod
    def from_args(cls, args):
        palette = GlyphPalette(args.palette) if args.palette is not None else DEFAULT_PALETTE
        return cls(
            width=args.width,
            height=args.height,
            palette=palette,
            mapping=args.mapping,
            max_fps=args.fps,
            pacing=args.pacing,
            max_frames=args.max_frames,
            skip_corrupt=args.skip_corrupt,
            plain=args.plain,
        ).validate()
