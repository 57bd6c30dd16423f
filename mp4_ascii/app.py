# -*- coding: utf-8 -*-
import argparse
import logging

from .config import ASCII_HEIGHT, ASCII_WIDTH, FPS, MAX_FRAMES, PlayerConfig
from .decoder import VideoDecoder
from .errors import DecodeFailure, PlayerError, ScalingFailure
from .logging_setup import configure_logging
from .quantizer import MAPPING_MODES, GlyphQuantizer
from .renderer import PACING_MODES, FrameClock, PlainRenderer, TerminalRenderer
from .resampler import Resampler

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


class AsciiPlayer:
    def __init__(self, decoder, resampler, quantizer, renderer, clock,
                 max_frames=MAX_FRAMES, skip_corrupt=False):
        self.decoder = decoder
        self.resampler = resampler
        self.quantizer = quantizer
        self.renderer = renderer
        self.clock = clock
        self.max_frames = max_frames
        self.skip_corrupt = skip_corrupt
        self.frames_rendered = 0
        self.frames_skipped = 0

    @classmethod
    def from_config(cls, path, config):
        renderer = PlainRenderer() if config.plain else TerminalRenderer()
        return cls(
            decoder=VideoDecoder(path),
            resampler=Resampler(config.width, config.height),
            quantizer=GlyphQuantizer(config.palette, config.mapping),
            renderer=renderer,
            clock=FrameClock(config.max_fps, config.pacing),
            max_frames=config.max_frames,
            skip_corrupt=config.skip_corrupt,
        )

    def _next_grid(self):
        """解码 -> 缩放 -> 量化；返回 (是否还有帧, 字符网格或 None)"""
        try:
            picture = self.decoder.next_picture()
            if picture is None:
                return False, None
            resampled = self.resampler.resample(picture)
            return True, self.quantizer.quantize(resampled)
        except (DecodeFailure, ScalingFailure) as e:
            if not self.skip_corrupt:
                raise
            self.frames_skipped += 1
            logger.warning("跳过损坏的帧: %s", e)
            return True, None

    def play(self):
        """播放主循环，返回渲染的帧数"""
        # 先打开解码器，找不到视频流时不会碰终端
        self.decoder.open()
        try:
            logger.info("开始播放，最多 %d 帧", self.max_frames)
            with self.renderer:
                self.clock.reset()
                for _ in range(self.max_frames):
                    more, grid = self._next_grid()
                    if not more:
                        break
                    if grid is None:
                        continue
                    self.renderer.render(grid)
                    self.frames_rendered += 1
                    self.clock.wait()
        finally:
            logger.info("releasing all the resources")
            self.decoder.close()
        return self.frames_rendered


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mp4-ascii", description="在终端里用字符画播放视频")
    parser.add_argument("path", help="视频文件路径")
    parser.add_argument("--width", type=int, default=ASCII_WIDTH,
                        help=f"字符画宽度，0 表示沿用源宽度 (默认 {ASCII_WIDTH})")
    parser.add_argument("--height", type=int, default=ASCII_HEIGHT,
                        help=f"字符画高度，0 表示沿用源高度 (默认 {ASCII_HEIGHT})")
    parser.add_argument("--fps", type=float, default=FPS,
                        help=f"最大刷新率 (默认 {FPS})")
    parser.add_argument("--max-frames", type=int, default=MAX_FRAMES,
                        help=f"最多播放的帧数 (默认 {MAX_FRAMES})")
    parser.add_argument("--palette", default=None,
                        help="自定义字符表，从暗到亮，至少 2 个字符")
    parser.add_argument("--mapping", choices=MAPPING_MODES, default="modulo",
                        help="亮度映射方式 (默认 modulo)")
    parser.add_argument("--pacing", choices=PACING_MODES, default="deadline",
                        help="限速方式 (默认 deadline)")
    parser.add_argument("--plain", action="store_true",
                        help="不用 curses，直接输出 ANSI 转义序列")
    parser.add_argument("--skip-corrupt", action="store_true",
                        help="遇到无法解码或缩放的帧时跳过而不是退出")
    parser.add_argument("--log-file", default=None, help="同时把日志写入文件")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        config = PlayerConfig.from_args(args)
    except ValueError as e:
        logger.error("参数错误: %s", e)
        return EXIT_FAILURE

    logger.info("initializing all the containers, codecs and protocols.")
    player = AsciiPlayer.from_config(args.path, config)
    try:
        frames = player.play()
    except PlayerError as e:
        logger.error("%s", e)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.info("播放中断")
        return EXIT_OK

    logger.info("播放结束，共 %d 帧", frames)
    return EXIT_OK
