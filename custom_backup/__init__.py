"""
custom-backup

目录备份工具：打包、移动并记录审计日志
"""

__version__ = "1.0.0"

from .audit_log import AuditLogger
from .errors import (
    ArchiveCreationError,
    BackupError,
    DestinationUnwritableError,
    InvalidDestinationError,
    InvalidSourceError,
    RelocationError,
)
from .models import (
    ArchiveDescriptor,
    BackupRequest,
    BackupResult,
    CollisionPolicy,
    LogEntry,
    LogLevel,
    Outcome,
)
from .pipeline import BackupPipeline, PipelineState

__all__ = [
    "AuditLogger",
    "BackupPipeline",
    "PipelineState",
    "BackupRequest",
    "BackupResult",
    "ArchiveDescriptor",
    "LogEntry",
    "LogLevel",
    "Outcome",
    "CollisionPolicy",
    "BackupError",
    "InvalidSourceError",
    "InvalidDestinationError",
    "DestinationUnwritableError",
    "ArchiveCreationError",
    "RelocationError",
]
