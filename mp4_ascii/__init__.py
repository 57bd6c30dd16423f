# -*- coding: utf-8 -*-
from .app import AsciiPlayer, main
from .config import PlayerConfig
from .decoder import RawPicture, VideoDecoder
from .errors import (AllocationFailure, DecodeFailure, PlayerError,
                     ScalingFailure, StreamDiscoveryFailure)
from .quantizer import DEFAULT_PALETTE, GlyphPalette, GlyphQuantizer, glyph
from .renderer import FrameClock, PlainRenderer, TerminalRenderer, format_rows
from .resampler import ResampledPicture, Resampler

__version__ = "0.1.0"

__all__ = [
    "AllocationFailure",
    "AsciiPlayer",
    "DEFAULT_PALETTE",
    "DecodeFailure",
    "FrameClock",
    "GlyphPalette",
    "GlyphQuantizer",
    "PlainRenderer",
    "PlayerConfig",
    "PlayerError",
    "RawPicture",
    "ResampledPicture",
    "Resampler",
    "ScalingFailure",
    "StreamDiscoveryFailure",
    "TerminalRenderer",
    "VideoDecoder",
    "format_rows",
    "glyph",
    "main",
]
