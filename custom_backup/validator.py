"""
路径校验

确认源目录与目标目录存在，并通过创建标记文件探测目标目录是否可写
"""

import logging
import os
from pathlib import Path
from typing import Tuple

from .errors import (
    DestinationUnwritableError,
    InvalidDestinationError,
    InvalidSourceError,
)
from .models import BackupRequest

logger = logging.getLogger(__name__)

MARKER_PREFIX = ".custom_backup_probe_"


def normalize_path(raw: str) -> Path:
    """展开 ~ 并转换为绝对路径（不解析符号链接）"""
    return Path(os.path.abspath(os.path.expanduser(raw)))


def _write_marker(marker: Path):
    with open(marker, "w", encoding="utf-8"):
        pass


def _remove_marker(marker: Path):
    try:
        marker.unlink()
    except OSError:
        pass


def probe_writable(directory: Path) -> bool:
    """
    在目录中创建并删除一个标记文件，判断当前进程是否可写

    权限位无法完整反映ACL、挂载选项等情况，因此直接尝试写入。
    """
    marker = directory / f"{MARKER_PREFIX}{os.getpid()}"
    try:
        _write_marker(marker)
    except OSError as e:
        logger.debug(f"写入探测失败 {directory}: {e}")
        return False
    # 只删除本进程创建的标记文件
    _remove_marker(marker)
    return True


def _check_directory(raw: str) -> Path:
    if not raw or not raw.strip():
        raise ValueError("path is empty")
    path = normalize_path(raw)
    try:
        exists = path.exists()
        is_dir = exists and path.is_dir()
    except OSError as e:
        # ENAMETOOLONG、EACCES 等
        raise ValueError(f"{path} is not accessible: {e}") from None
    if not exists:
        raise ValueError(f"{path} does not exist")
    if not is_dir:
        raise ValueError(f"{path} is not a directory")
    return path


def validate_source(raw: str) -> Path:
    try:
        return _check_directory(raw)
    except ValueError as e:
        raise InvalidSourceError(f"Invalid source directory '{raw}': {e}", path=raw) from None


def validate_destination(raw: str) -> Path:
    try:
        destination = _check_directory(raw)
    except ValueError as e:
        raise InvalidDestinationError(
            f"Invalid destination directory '{raw}': {e}", path=raw
        ) from None

    if not probe_writable(destination):
        raise DestinationUnwritableError(
            f"Destination directory is not writable: {destination}", path=destination
        )
    return destination


def validate_request(request: BackupRequest) -> Tuple[Path, Path]:
    """
    校验备份请求

    Args:
        request: 备份请求

    Returns:
        (源目录, 目标目录)，均为绝对路径

    Raises:
        InvalidSourceError: 源路径无效
        InvalidDestinationError: 目标路径无效
        DestinationUnwritableError: 目标目录不可写
    """
    source = validate_source(request.source_path)
    destination = validate_destination(request.destination_path)
    return source, destination
