# -*- coding: utf-8 -*-
"""日志配置：诊断信息输出到 stderr，可选写入文件"""
import logging
import logging.handlers
import sys

LOGGER_NAME = "mp4_ascii"
LOG_FORMAT = "LOG: %(message)s"
FILE_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level=logging.INFO, log_file=None):
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


class HeldConsole:
    """curses 会话期间先缓存 stderr 日志，会话结束后再输出，避免盖住画面"""

    def __init__(self, logger_name=LOGGER_NAME, capacity=10000):
        self.logger = logging.getLogger(logger_name)
        self.capacity = capacity
        self._held = []

    def start(self):
        for handler in list(self.logger.handlers):
            if not isinstance(handler, logging.StreamHandler):
                continue
            if isinstance(handler, logging.FileHandler):
                continue
            memory = logging.handlers.MemoryHandler(
                self.capacity, flushLevel=logging.CRITICAL + 1, target=handler)
            self.logger.removeHandler(handler)
            self.logger.addHandler(memory)
            self._held.append((memory, handler))
        return self

    def stop(self):
        for memory, handler in self._held:
            self.logger.removeHandler(memory)
            self.logger.addHandler(handler)
            memory.flush()
            memory.close()
        self._held = []

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
