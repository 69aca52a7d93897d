"""
测试公共夹具
"""

import io
from datetime import datetime

import pytest

from ..audit_log import AuditLogger


FIXED_MOMENT = datetime(2024, 5, 1, 12, 30, 45)


def read_tree(root):
    """返回 {相对路径: 内容} 映射，目录的内容为None"""
    return {
        path.relative_to(root).as_posix(): (path.read_bytes() if path.is_file() else None)
        for path in sorted(root.rglob("*"))
    }


@pytest.fixture
def source_tree(tmp_path):
    """带嵌套目录与二进制文件的源目录"""
    root = tmp_path / "project"
    (root / "docs" / "notes").mkdir(parents=True)
    (root / "empty").mkdir()
    (root / "README.txt").write_text("hello backup\n", encoding="utf-8")
    (root / "docs" / "guide.md").write_text("# Guide\n", encoding="utf-8")
    (root / "docs" / "notes" / "data.bin").write_bytes(bytes(range(256)) * 4)
    return root


@pytest.fixture
def destination(tmp_path):
    path = tmp_path / "backups"
    path.mkdir()
    return path


@pytest.fixture
def staging_root(tmp_path):
    return tmp_path / "staging"


@pytest.fixture
def log_file(tmp_path):
    (tmp_path / "logs").mkdir()
    return tmp_path / "logs" / "custom_backup.log"


@pytest.fixture
def fallback_stream():
    return io.StringIO()


@pytest.fixture
def audit_log(log_file, fallback_stream):
    return AuditLogger(log_file, stream=fallback_stream, clock=lambda: FIXED_MOMENT)
