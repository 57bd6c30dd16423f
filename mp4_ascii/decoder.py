# -*- coding: utf-8 -*-
"""解码引擎：OpenCV 负责解封装和解码，这里只把结果包装成 RawPicture"""
import json
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field

import cv2
import numpy as np

from .errors import AllocationFailure, DecodeFailure, StreamDiscoveryFailure

logger = logging.getLogger(__name__)


@dataclass
class RawPicture:
    width: int
    height: int
    pix_fmt: str
    planes: list
    linesizes: list


@dataclass
class StreamInfo:
    index: int
    codec_type: str
    codec_name: str = None
    time_base: str = None
    r_frame_rate: str = None
    start_time: str = None
    duration: str = None
    width: int = 0
    height: int = 0
    channels: int = 0
    sample_rate: str = None
    bit_rate: str = None


@dataclass
class MediaInfo:
    format_name: str = None
    duration: str = None
    bit_rate: str = None
    streams: list = field(default_factory=list)

    @property
    def video_streams(self):
        return [s for s in self.streams if s.codec_type == "video"]


def parse_probe_output(text):
    """解析 ffprobe -print_format json 的输出"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StreamDiscoveryFailure(f"无法解析流信息: {e}") from e

    fmt = data.get("format", {})
    streams = []
    for i, s in enumerate(data.get("streams", [])):
        streams.append(StreamInfo(
            index=s.get("index", i),
            codec_type=s.get("codec_type", "unknown"),
            codec_name=s.get("codec_name"),
            time_base=s.get("time_base"),
            r_frame_rate=s.get("r_frame_rate"),
            start_time=s.get("start_time"),
            duration=s.get("duration"),
            width=int(s.get("width", 0)),
            height=int(s.get("height", 0)),
            channels=int(s.get("channels", 0)),
            sample_rate=s.get("sample_rate"),
            bit_rate=s.get("bit_rate"),
        ))
    return MediaInfo(
        format_name=fmt.get("format_name"),
        duration=fmt.get("duration"),
        bit_rate=fmt.get("bit_rate"),
        streams=streams,
    )


def probe_streams(path, ffprobe="ffprobe"):
    cmd = [ffprobe, "-v", "error", "-print_format", "json",
           "-show_format", "-show_streams", str(path)]
    try:
        p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    except OSError as e:
        raise StreamDiscoveryFailure(f"无法运行 {ffprobe}: {e}") from e
    if p.returncode != 0:
        raise StreamDiscoveryFailure(f"ERROR could not get the stream info: {p.stderr.strip()}")
    return parse_probe_output(p.stdout)


def log_media_info(info):
    logger.info("format %s, duration %s s, bit_rate %s",
                info.format_name, info.duration, info.bit_rate)
    for s in info.streams:
        logger.info("AVStream->time_base %s", s.time_base)
        logger.info("AVStream->r_frame_rate %s", s.r_frame_rate)
        logger.info("AVStream->start_time %s", s.start_time)
        logger.info("AVStream->duration %s", s.duration)
        if s.codec_type == "video":
            logger.info("Video Codec: resolution %d x %d", s.width, s.height)
        elif s.codec_type == "audio":
            logger.info("Audio Codec: %d channels, sample rate %s", s.channels, s.sample_rate)
        logger.info("\tCodec %s (%s) bit_rate %s", s.codec_name, s.codec_type, s.bit_rate)


def picture_from_frame(frame):
    """OpenCV 的 BGR 帧 -> RawPicture；宽高都是偶数时转成 yuv420p"""
    frame = np.ascontiguousarray(frame)
    height, width = frame.shape[:2]
    if frame.ndim == 2:
        return RawPicture(width, height, "gray", [frame], [width])
    channels = frame.shape[2]
    if channels == 3 and width % 2 == 0 and height % 2 == 0:
        flat = cv2.cvtColor(frame, cv2.COLOR_BGR2YUV_I420).reshape(-1)
        cw, ch = width // 2, height // 2
        y_size, c_size = width * height, cw * ch
        planes = [flat[:y_size].reshape(height, width),
                  flat[y_size:y_size + c_size].reshape(ch, cw),
                  flat[y_size + c_size:y_size + 2 * c_size].reshape(ch, cw)]
        return RawPicture(width, height, "yuv420p", planes, [width, cw, cw])
    pix_fmt = {3: "bgr24", 4: "bgra"}.get(channels, f"unknown{channels}")
    return RawPicture(width, height, pix_fmt, [frame], [width * channels])


class VideoDecoder:
    def __init__(self, path, probe=probe_streams, capture_factory=cv2.VideoCapture):
        self.path = path
        self._probe = probe
        self._capture_factory = capture_factory
        self._capture = None
        self.media_info = None
        self.frames_decoded = 0

    def _probe_media(self):
        if self._probe is None:
            return None
        if self._probe is probe_streams and shutil.which("ffprobe") is None:
            logger.debug("找不到 ffprobe，跳过流信息")
            return None
        return self._probe(self.path)

    def open(self):
        logger.info("opening the input file (%s) and loading format (container) header", self.path)
        if not os.path.isfile(self.path):
            raise StreamDiscoveryFailure(f"ERROR could not open the file {self.path}")

        logger.info("finding stream info from format")
        self.media_info = self._probe_media()
        if self.media_info is not None:
            log_media_info(self.media_info)
            if not self.media_info.video_streams:
                raise StreamDiscoveryFailure(f"File {self.path} does not contain a video stream!")

        try:
            capture = self._capture_factory(self.path)
        except cv2.error as e:
            raise AllocationFailure(f"无法创建解码上下文: {e}") from e
        if capture is None:
            raise AllocationFailure("无法创建解码上下文")
        if not capture.isOpened():
            capture.release()
            raise StreamDiscoveryFailure(f"File {self.path} does not contain a video stream!")

        width = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if width <= 0 or height <= 0:
            capture.release()
            raise StreamDiscoveryFailure(f"File {self.path} does not contain a video stream!")
        logger.info("Video Codec: resolution %d x %d", width, height)

        self._capture = capture
        return self

    def next_picture(self):
        """返回下一帧；流结束时返回 None"""
        if self._capture is None:
            raise DecodeFailure("解码器未打开")
        try:
            ok, frame = self._capture.read()
        except cv2.error as e:
            raise DecodeFailure(f"Error while receiving a frame from the decoder: {e}") from e
        if not ok:
            return None
        if frame is None:
            raise DecodeFailure("Error while receiving a frame from the decoder: 空帧")
        self.frames_decoded += 1
        return picture_from_frame(frame)

    def close(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
