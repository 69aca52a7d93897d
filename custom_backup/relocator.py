"""
归档移动

将暂存区中的归档移动到目标目录，保证目标路径下不会出现写了一半的文件
"""

import errno
import logging
import os
import shutil
from pathlib import Path

from .errors import RelocationError
from .models import ARCHIVE_EXTENSION, CollisionPolicy

logger = logging.getLogger(__name__)


def _discard(path: Path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"清理文件失败 {path}: {e}")


def _split_name(name: str):
    if name.endswith(ARCHIVE_EXTENSION):
        return name[:-len(ARCHIVE_EXTENSION)], ARCHIVE_EXTENSION
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem:
        return name, ""
    return stem, dot + ext


def resolve_final_path(
    destination_dir: Path,
    name: str,
    policy: CollisionPolicy = CollisionPolicy.REJECT
) -> Path:
    """
    根据冲突策略确定归档在目标目录中的最终路径

    Raises:
        RelocationError: 策略为 reject 且目标目录已存在同名文件
    """
    final_path = destination_dir / name
    if not final_path.exists() or policy is CollisionPolicy.OVERWRITE:
        return final_path

    if policy is CollisionPolicy.REJECT:
        raise RelocationError(
            f"Archive already exists at destination: {final_path}", path=final_path
        )

    stem, ext = _split_name(name)
    counter = 1
    while final_path.exists():
        final_path = destination_dir / f"{stem}_{counter}{ext}"
        counter += 1
    return final_path


def _copy_into_place(staged_path: Path, final_path: Path):
    """跨文件系统时：先复制到目标目录内的临时名，再原子重命名"""
    partial = final_path.parent / f".{final_path.name}.partial-{os.getpid()}"
    try:
        shutil.copy2(staged_path, partial)
        with open(partial, "rb") as f:
            os.fsync(f.fileno())
        os.replace(partial, final_path)
    except BaseException:
        _discard(partial)
        raise
    _discard(staged_path)


def move_file(
    staged_path: Path,
    destination_dir: Path,
    policy: CollisionPolicy = CollisionPolicy.REJECT
) -> Path:
    """
    移动归档到目标目录

    Args:
        staged_path: 暂存区中的归档
        destination_dir: 目标目录
        policy: 同名冲突策略

    Returns:
        归档的最终路径

    Raises:
        RelocationError: 移动失败（暂存归档会被删除）
    """
    staged_path = Path(staged_path)
    destination_dir = Path(destination_dir)

    try:
        final_path = resolve_final_path(destination_dir, staged_path.name, policy)
        try:
            os.replace(staged_path, final_path)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise
            logger.debug(f"暂存区与目标目录不在同一文件系统，改为复制: {final_path}")
            _copy_into_place(staged_path, final_path)
    except RelocationError:
        _discard(staged_path)
        raise
    except OSError as e:
        _discard(staged_path)
        raise RelocationError(
            f"Failed to move archive {staged_path.name} into {destination_dir}: {e}",
            path=destination_dir,
        ) from e

    logger.debug(f"归档已移动: {staged_path} -> {final_path}")
    return final_path
