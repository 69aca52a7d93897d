"""
归档创建

将源目录打包为 tar.gz，归档内只有一个以源目录名命名的顶层目录
"""

import logging
import tarfile
from pathlib import Path

from .errors import ArchiveCreationError
from .models import archive_basename

logger = logging.getLogger(__name__)


def _discard(path: Path):
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug(f"删除未完成的归档失败 {path}: {e}")


def create_archive(source_dir: Path, archive_path: Path) -> int:
    """
    创建 tar.gz 归档

    只写入 archive_path（位于暂存目录中），失败时先删除未完成的文件再抛出异常。
    不做重试。

    Args:
        source_dir: 源目录
        archive_path: 输出归档路径

    Returns:
        归档大小（字节）

    Raises:
        ArchiveCreationError: 读取源目录或写入归档失败
    """
    source_dir = Path(source_dir)
    archive_path = Path(archive_path)
    logger.debug(f"创建归档: {source_dir} -> {archive_path}")

    try:
        with tarfile.open(archive_path, "w:gz") as tar:
            tar.add(source_dir, arcname=archive_basename(source_dir))
    except (OSError, tarfile.TarError) as e:
        _discard(archive_path)
        raise ArchiveCreationError(
            f"Failed to create archive {archive_path} from {source_dir}: {e}",
            path=source_dir,
        ) from e
    except BaseException:
        # 中断时同样不保留半成品
        _discard(archive_path)
        raise

    size = archive_path.stat().st_size
    logger.debug(f"归档已创建: {archive_path} ({size / 1024:.1f} KB)")
    return size
