"""
审计日志

向固定日志文件追加单行记录；日志文件不可写时退回到标准错误输出
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

from .models import LogEntry, LogLevel, log_timestamp

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path("/var/log/custom_backup.log")


class AuditLogger:
    """备份审计日志"""

    def __init__(
        self,
        log_path: Union[str, Path] = DEFAULT_LOG_PATH,
        stream: Optional[TextIO] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        初始化审计日志

        Args:
            log_path: 日志文件路径
            stream: 退回输出流，为None时在写入时使用sys.stderr
            clock: 时钟函数
        """
        self.log_path = Path(log_path)
        self._stream = stream
        self._clock = clock

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def is_writable(self) -> bool:
        """以零长度追加的方式探测日志文件是否可写"""
        try:
            with open(self.log_path, "a", encoding="utf-8"):
                pass
        except OSError as e:
            logger.debug(f"日志文件不可写 {self.log_path}: {e}")
            return False
        return True

    def log(self, level: LogLevel, message: str) -> LogEntry:
        """
        记录一条审计日志

        任何I/O错误都不会抛出，只会改变记录的输出位置

        Args:
            level: 日志级别
            message: 消息内容

        Returns:
            写入的LogEntry
        """
        entry = LogEntry(
            timestamp=log_timestamp(self._clock()),
            level=LogLevel(level),
            message=message,
        )
        line = entry.format()

        if self.is_writable():
            try:
                with open(self.log_path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
                return entry
            except OSError as e:
                logger.debug(f"写入日志文件失败 {self.log_path}: {e}")

        self._fallback(line)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.log(LogLevel.INFO, message)

    def success(self, message: str) -> LogEntry:
        return self.log(LogLevel.SUCCESS, message)

    def error(self, message: str) -> LogEntry:
        return self.log(LogLevel.ERROR, message)

    def _fallback(self, line: str):
        stream = self.stream
        stream.write(
            f"WARNING: cannot write to log file {self.log_path}; "
            f"log entry follows\n"
        )
        stream.write(line + "\n")
        stream.flush()
