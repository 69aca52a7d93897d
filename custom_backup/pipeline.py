"""
备份流水线

按 校验 -> 归档 -> 移动 的顺序执行一次备份，并把结果映射为退出码
"""

import logging
import shutil
import tempfile
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from .archiver import create_archive
from .audit_log import AuditLogger
from .errors import ArchiveCreationError, BackupError
from .models import (
    ArchiveDescriptor,
    BackupRequest,
    BackupResult,
    CollisionPolicy,
    Outcome,
    archive_timestamp,
)
from .relocator import move_file
from .validator import validate_request

logger = logging.getLogger(__name__)

STAGING_PREFIX = "custom_backup_"

ArchiveFn = Callable[[Path, Path], int]
MoveFn = Callable[[Path, Path, CollisionPolicy], Path]


class PipelineState(str, Enum):
    """流水线状态（只能前进）"""
    INIT = "init"
    VALIDATING = "validating"
    ARCHIVING = "archiving"
    RELOCATING = "relocating"
    DONE = "done"


class BackupPipeline:
    """备份流水线"""

    def __init__(
        self,
        audit_log: AuditLogger,
        staging_root: Optional[Union[str, Path]] = None,
        collision_policy: CollisionPolicy = CollisionPolicy.REJECT,
        archiver: ArchiveFn = create_archive,
        mover: MoveFn = move_file,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        初始化流水线

        Args:
            audit_log: 审计日志
            staging_root: 暂存目录的父目录，为None时使用系统临时目录
            collision_policy: 目标目录同名冲突策略
            archiver: 归档函数 (源目录, 归档路径) -> 字节数
            mover: 移动函数 (暂存归档, 目标目录, 冲突策略) -> 最终路径
            clock: 时钟函数
        """
        self.audit_log = audit_log
        self.staging_root = Path(staging_root) if staging_root else None
        self.collision_policy = CollisionPolicy(collision_policy)
        self.archiver = archiver
        self.mover = mover
        self.clock = clock
        self.state = PipelineState.INIT
        self.history: List[PipelineState] = [PipelineState.INIT]

    def _advance(self, state: PipelineState):
        self.state = state
        self.history.append(state)
        logger.debug(f"流水线状态: {state.value}")

    def _make_staging_dir(self) -> Path:
        if self.staging_root is not None:
            self.staging_root.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(
            prefix=STAGING_PREFIX,
            dir=str(self.staging_root) if self.staging_root else None,
        ))

    def run(self, request: BackupRequest) -> BackupResult:
        """
        执行一次备份

        失败不会抛出BackupError，而是返回对应outcome的结果；
        暂存目录在任何情况下都会被删除。

        Args:
            request: 备份请求

        Returns:
            BackupResult对象
        """
        if self.state is not PipelineState.INIT:
            raise RuntimeError("BackupPipeline instances run only once")

        started_at = self.clock()
        result = BackupResult(
            outcome=Outcome.SUCCESS,
            message="",
            source_path=request.source_path,
            destination_path=request.destination_path,
            started_at=started_at,
        )
        self.audit_log.info(
            f"Backup started: source={request.source_path} "
            f"destination={request.destination_path}"
        )

        staging_dir: Optional[Path] = None
        try:
            self._advance(PipelineState.VALIDATING)
            source, destination = validate_request(request)

            self._advance(PipelineState.ARCHIVING)
            try:
                staging_dir = self._make_staging_dir()
            except OSError as e:
                raise ArchiveCreationError(f"Cannot create staging directory: {e}") from e

            descriptor = ArchiveDescriptor.build(
                source, destination, archive_timestamp(started_at), staging_dir
            )
            result.size_bytes = self.archiver(source, descriptor.staging_path)

            self._advance(PipelineState.RELOCATING)
            result.archive_path = self.mover(
                descriptor.staging_path, destination, self.collision_policy
            )
        except BackupError as e:
            result.outcome = e.outcome
            result.message = f"{self.state.value} failed: {e.message}"
            self.audit_log.error(result.message)
        else:
            result.message = f"Backup created: {result.archive_path}"
            self.audit_log.success(
                f"{result.message} (source={source}, {result.size_bytes} bytes)"
            )
        finally:
            if staging_dir is not None:
                shutil.rmtree(staging_dir, ignore_errors=True)
            self._advance(PipelineState.DONE)

        result.finished_at = self.clock()
        return result
