# -*- coding: utf-8 -*-
"""把任意分辨率、任意格式的解码帧缩放成固定大小的 yuv420p 帧"""
import logging
from dataclasses import dataclass, field

import cv2
import numpy as np

from .errors import ScalingFailure

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "yuv420p"
ALIGN = 32  # 行对齐字节数

# 平面 YUV 格式的色度下采样 (横向 log2, 纵向 log2)
CHROMA_SHIFT = {
    "yuv420p": (1, 1),
    "yuv422p": (1, 0),
    "yuv440p": (0, 1),
    "yuv444p": (0, 0),
}

# 打包格式只能近似出亮度
PACKED_TO_GRAY = {
    "bgr24": (3, cv2.COLOR_BGR2GRAY),
    "rgb24": (3, cv2.COLOR_RGB2GRAY),
    "bgra": (4, cv2.COLOR_BGRA2GRAY),
    "rgba": (4, cv2.COLOR_RGBA2GRAY),
}

NEUTRAL_CHROMA = 128


@dataclass
class ResampledPicture:
    width: int
    height: int
    planes: list
    linesizes: list
    pix_fmt: str = OUTPUT_FORMAT
    buffer: np.ndarray = field(default=None, repr=False)

    @property
    def luma(self):
        return self.planes[0]


def aligned_linesize(width, align=ALIGN):
    return (width + align - 1) // align * align


def image_alloc(width, height, align=ALIGN):
    """分配一整块 yuv420p 缓冲区，每个平面的行跨度按 align 字节对齐"""
    chroma_w, chroma_h = (width + 1) // 2, (height + 1) // 2
    linesizes = [aligned_linesize(width, align),
                 aligned_linesize(chroma_w, align),
                 aligned_linesize(chroma_w, align)]
    rows = [height, chroma_h, chroma_h]

    buffer = np.zeros(sum(ls * r for ls, r in zip(linesizes, rows)), dtype=np.uint8)
    planes = []
    offset = 0
    for linesize, count in zip(linesizes, rows):
        size = linesize * count
        planes.append(buffer[offset:offset + size].reshape(count, linesize))
        offset += size
    return buffer, planes, linesizes


def _ceil_shift(value, shift):
    return -((-value) >> shift)


def _plane_view(picture, index, width, height, channels=1):
    """按行跨度取出一个平面的有效区域 (height, width[, channels])"""
    try:
        data = np.asarray(picture.planes[index], dtype=np.uint8)
        linesize = int(picture.linesizes[index])
    except (IndexError, TypeError, ValueError) as e:
        raise ScalingFailure(f"第 {index} 个平面不可用: {e}") from e

    row_bytes = width * channels
    if data.ndim == 1:
        if linesize < row_bytes or data.size < (height - 1) * linesize + row_bytes:
            raise ScalingFailure(
                f"第 {index} 个平面大小与 {width}x{height} (linesize={linesize}) 不符")
        data = np.ascontiguousarray(data)
        rows = np.lib.stride_tricks.as_strided(
            data, shape=(height, row_bytes), strides=(linesize, 1))
        view = rows.reshape(height, width, channels) if channels > 1 else rows
    else:
        if data.shape[0] < height or data.shape[1] < width:
            raise ScalingFailure(
                f"第 {index} 个平面 {data.shape} 小于 {width}x{height}")
        view = data[:height, :width]
        if channels > 1 and (view.ndim != 3 or view.shape[2] != channels):
            raise ScalingFailure(f"打包帧需要 {channels} 个通道, 实际形状 {data.shape}")
    return np.ascontiguousarray(view)


class Resampler:
    def __init__(self, width=64, height=48, interpolation=cv2.INTER_CUBIC, align=ALIGN):
        self.width = width
        self.height = height
        self.interpolation = interpolation
        self.align = align
        self._warned = set()

    def target_size(self, picture):
        """目标宽高为 0 时沿用源尺寸"""
        return (self.width or picture.width, self.height or picture.height)

    def _resize(self, plane, size):
        try:
            return cv2.resize(plane, size, interpolation=self.interpolation)
        except cv2.error as e:
            raise ScalingFailure(f"缩放失败: {e}") from e

    def _warn_format(self, pix_fmt):
        if pix_fmt not in self._warned:
            self._warned.add(pix_fmt)
            logger.warning(
                "Warning: 源格式 %s 不是平面 YUV，生成的可能不是真正的灰度图（例如只是 R 分量）",
                pix_fmt)

    def resample(self, picture):
        if picture is None:
            raise ScalingFailure("输入帧为空")
        if self.width < 0 or self.height < 0:
            raise ScalingFailure(f"无效的目标尺寸 {self.width}x{self.height}")
        if picture.width <= 0 or picture.height <= 0:
            raise ScalingFailure(f"无效的源尺寸 {picture.width}x{picture.height}")

        pix_fmt = picture.pix_fmt
        if pix_fmt not in CHROMA_SHIFT and pix_fmt != "gray" and pix_fmt not in PACKED_TO_GRAY:
            raise ScalingFailure(f"不支持从 {pix_fmt} 转换到 {OUTPUT_FORMAT}")

        width, height = self.target_size(picture)
        chroma_size = ((width + 1) // 2, (height + 1) // 2)
        buffer, planes, linesizes = image_alloc(width, height, self.align)

        if pix_fmt in CHROMA_SHIFT:
            shift_x, shift_y = CHROMA_SHIFT[pix_fmt]
            src_cw = _ceil_shift(picture.width, shift_x)
            src_ch = _ceil_shift(picture.height, shift_y)
            luma = _plane_view(picture, 0, picture.width, picture.height)
            planes[0][:, :width] = self._resize(luma, (width, height))
            for index in (1, 2):
                chroma = _plane_view(picture, index, src_cw, src_ch)
                planes[index][:, :chroma_size[0]] = self._resize(chroma, chroma_size)
        else:
            if pix_fmt == "gray":
                luma = _plane_view(picture, 0, picture.width, picture.height)
            else:
                self._warn_format(pix_fmt)
                channels, code = PACKED_TO_GRAY[pix_fmt]
                packed = _plane_view(picture, 0, picture.width, picture.height, channels)
                try:
                    luma = cv2.cvtColor(packed, code)
                except cv2.error as e:
                    raise ScalingFailure(f"颜色转换失败: {e}") from e
            planes[0][:, :width] = self._resize(luma, (width, height))
            planes[1][:, :chroma_size[0]] = NEUTRAL_CHROMA
            planes[2][:, :chroma_size[0]] = NEUTRAL_CHROMA

        return ResampledPicture(width=width, height=height, planes=planes,
                                linesizes=linesizes, buffer=buffer)
