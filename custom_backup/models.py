"""
备份数据模型

单次备份调用中使用的请求、归档描述、日志条目与结果类型
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Dict, Optional


ARCHIVE_EXTENSION = ".tar.gz"
ARCHIVE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H:%M:%S"
LOG_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def archive_timestamp(moment: datetime) -> str:
    """归档文件名中使用的时间戳"""
    return moment.strftime(ARCHIVE_TIMESTAMP_FORMAT)


def log_timestamp(moment: datetime) -> str:
    """日志行中使用的时间戳"""
    return moment.strftime(LOG_TIMESTAMP_FORMAT)


class LogLevel(str, Enum):
    """审计日志级别"""
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class Outcome(IntEnum):
    """终止状态，数值即进程退出码"""
    SUCCESS = 0
    INVALID_SOURCE = 1
    INVALID_DESTINATION = 2
    DESTINATION_UNWRITABLE = 3
    ARCHIVE_CREATION_FAILED = 4
    RELOCATION_FAILED = 5

    @property
    def exit_code(self) -> int:
        return int(self)


class CollisionPolicy(str, Enum):
    """目标目录中已存在同名归档时的处理方式"""
    REJECT = "reject"
    OVERWRITE = "overwrite"
    SUFFIX = "suffix"


@dataclass(frozen=True)
class BackupRequest:
    """备份请求（原始输入字符串，不做任何展开）"""
    source_path: str
    destination_path: str


@dataclass(frozen=True)
class ArchiveDescriptor:
    """归档描述：名称、暂存路径与最终路径"""
    archive_name: str
    staging_path: Path
    final_path: Path

    @classmethod
    def build(
        cls,
        source: Path,
        destination: Path,
        timestamp: str,
        staging_dir: Path
    ) -> "ArchiveDescriptor":
        """
        根据已校验的源/目标目录与时间戳生成归档描述

        Args:
            source: 源目录（绝对路径）
            destination: 目标目录（绝对路径）
            timestamp: 归档时间戳
            staging_dir: 本进程的暂存目录

        Returns:
            ArchiveDescriptor对象
        """
        archive_name = f"{archive_basename(source)}_{timestamp}{ARCHIVE_EXTENSION}"
        return cls(
            archive_name=archive_name,
            staging_path=staging_dir / archive_name,
            final_path=destination / archive_name,
        )


def archive_basename(source: Path) -> str:
    # 根目录没有basename
    return source.name or "root"


@dataclass(frozen=True)
class LogEntry:
    """审计日志条目（只写一次，只追加）"""
    timestamp: str
    level: LogLevel
    message: str

    def format(self) -> str:
        """格式化为单行: [时间戳] [级别] - 消息"""
        message = " ".join(self.message.splitlines())
        return f"[{self.timestamp}] [{self.level.value}] - {message}"


@dataclass
class BackupResult:
    """一次备份调用的结果"""
    outcome: Outcome
    message: str
    source_path: str
    destination_path: str
    archive_path: Optional[Path] = None
    size_bytes: Optional[int] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典（用于JSON/YAML输出）"""
        return {
            "outcome": self.outcome.name.lower(),
            "exit_code": self.outcome.exit_code,
            "message": self.message,
            "source": self.source_path,
            "destination": self.destination_path,
            "archive": str(self.archive_path) if self.archive_path else None,
            "size_bytes": self.size_bytes,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }
