# -*- coding: utf-8 -*-
"""播放流程中的错误类型，全部是致命错误"""


class PlayerError(Exception):
    """播放器错误基类"""


class AllocationFailure(PlayerError):
    """解码上下文、帧或缓冲区无法创建"""


class StreamDiscoveryFailure(PlayerError):
    """找不到可解码的视频流，或读取流信息失败"""


class DecodeFailure(PlayerError):
    """某一帧解码失败"""


class ScalingFailure(PlayerError):
    """缩放上下文无法建立，或输入/输出帧无效"""
