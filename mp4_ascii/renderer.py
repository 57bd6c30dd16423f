# -*- coding: utf-8 -*-
"""终端输出与帧率控制"""
import curses
import logging
import sys
import time

from .errors import AllocationFailure
from .logging_setup import HeldConsole

logger = logging.getLogger(__name__)

DELIMITER = " "
PACING_MODES = ("deadline", "fixed")


def format_rows(grid, delimiter=DELIMITER):
    """每行字符之间插入分隔符，一行字符对应一行输出"""
    return [delimiter.join(row) for row in grid]


class TerminalRenderer:
    """用 curses 管理整个播放过程的终端状态，只初始化/恢复一次"""

    def __init__(self, delimiter=DELIMITER, curses_module=None):
        self.delimiter = delimiter
        self._curses = curses_module or curses
        self.stdscr = None
        self._console = None

    def open(self):
        if self.stdscr is not None:
            return self
        try:
            self.stdscr = self._curses.initscr()
        except self._curses.error as e:
            raise AllocationFailure(f"无法初始化终端: {e}") from e
        self._console = HeldConsole().start()
        try:
            self._curses.noecho()
            self._curses.cbreak()
            self._curses.curs_set(0)
        except self._curses.error:
            # 部分终端不支持隐藏光标
            logger.debug("终端不支持隐藏光标")
        return self

    def close(self):
        if self.stdscr is None:
            return
        try:
            self._curses.echo()
            self._curses.nocbreak()
            self._curses.curs_set(1)
        except self._curses.error:
            logger.debug("恢复终端设置时出错")
        finally:
            self._curses.endwin()
            self.stdscr = None
            if self._console is not None:
                self._console.stop()
                self._console = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def render(self, grid):
        if self.stdscr is None:
            raise RuntimeError("渲染前需要先调用 open()")
        lines = format_rows(grid, self.delimiter)
        max_rows, max_cols = self.stdscr.getmaxyx()
        self.stdscr.erase()
        for i, line in enumerate(lines[:max_rows]):
            try:
                self.stdscr.addstr(i, 0, line[:max_cols])
            except self._curses.error:
                # 写满最后一个字符格时 curses 也会报错，画面已经输出
                continue
        self.stdscr.refresh()
        return lines


class PlainRenderer:
    """不用 curses，直接往文本流写 ANSI 转义序列"""

    ENTER = "\033[?1049h\033[?25l\033[2J"
    LEAVE = "\033[?25h\033[?1049l"
    HOME = "\033[H"

    def __init__(self, stream=None, delimiter=DELIMITER):
        self.stream = stream or sys.stdout
        self.delimiter = delimiter
        self._active = False

    def open(self):
        if not self._active:
            self.stream.write(self.ENTER)
            self.stream.flush()
            self._active = True
        return self

    def close(self):
        if self._active:
            self.stream.write(self.LEAVE)
            self.stream.flush()
            self._active = False

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def render(self, grid):
        lines = format_rows(grid, self.delimiter)
        self.stream.write(self.HOME + "\n".join(lines) + "\n")
        self.stream.flush()
        return lines


class FrameClock:
    """限制最大刷新率

    deadline: 只睡掉距上一帧不足 1/max_fps 的剩余时间
    fixed: 每帧固定睡 1/max_fps 秒，不计解码和渲染耗时
    """

    def __init__(self, max_fps=30, mode="deadline", clock=time.perf_counter, sleep=time.sleep):
        if max_fps <= 0:
            raise ValueError(f"FPS 必须大于 0: {max_fps}")
        if mode not in PACING_MODES:
            raise ValueError(f"未知的限速方式: {mode}")
        self.max_fps = max_fps
        self.mode = mode
        self.period = 1.0 / max_fps
        self._clock = clock
        self._sleep = sleep
        self._last = None

    def reset(self):
        self._last = None

    def wait(self):
        """返回实际请求睡眠的秒数"""
        if self.mode == "fixed":
            self._sleep(self.period)
            return self.period

        now = self._clock()
        elapsed = 0.0 if self._last is None else now - self._last
        delay = self.period - elapsed
        if delay > 0:
            self._sleep(delay)
        else:
            delay = 0.0
        self._last = self._clock()
        return delay
