"""
备份异常

每种失败类型对应一个异常类，并携带对应的终止状态
"""

from .models import Outcome


class BackupError(RuntimeError):
    """备份失败的基类"""
    outcome: Outcome

    def __init__(self, message: str, path: object = None):
        super().__init__(message)
        self.message = message
        self.path = path


class InvalidSourceError(BackupError):
    """源路径不存在或不是目录"""
    outcome = Outcome.INVALID_SOURCE


class InvalidDestinationError(BackupError):
    """目标路径不存在或不是目录"""
    outcome = Outcome.INVALID_DESTINATION


class DestinationUnwritableError(BackupError):
    """目标目录写入探测失败"""
    outcome = Outcome.DESTINATION_UNWRITABLE


class ArchiveCreationError(BackupError):
    """归档创建失败"""
    outcome = Outcome.ARCHIVE_CREATION_FAILED


class RelocationError(BackupError):
    """归档移动失败"""
    outcome = Outcome.RELOCATION_FAILED
