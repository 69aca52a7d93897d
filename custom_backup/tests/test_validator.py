"""
测试路径校验
"""

import os

import pytest

from .. import validator
from ..errors import (
    DestinationUnwritableError,
    InvalidDestinationError,
    InvalidSourceError,
)
from ..models import BackupRequest, Outcome
from ..validator import MARKER_PREFIX, probe_writable, validate_request


def test_valid_request(source_tree, destination):
    """测试有效的源与目标目录"""
    source, dest = validate_request(BackupRequest(str(source_tree), str(destination)))

    assert source == source_tree
    assert dest == destination
    assert list(destination.iterdir()) == []


def test_relative_paths_become_absolute(source_tree, destination, monkeypatch):
    """相对路径被转换为绝对路径"""
    monkeypatch.chdir(source_tree.parent)

    source, dest = validate_request(BackupRequest("project/", "backups"))

    assert source == source_tree
    assert source.name == "project"
    assert dest == destination


def test_user_home_is_expanded(source_tree, destination, monkeypatch):
    """测试 ~ 展开"""
    monkeypatch.setenv("HOME", str(source_tree.parent))

    source, _ = validate_request(BackupRequest("~/project", str(destination)))

    assert source == source_tree


@pytest.mark.parametrize("raw", ["", "   "])
def test_empty_source(raw, destination):
    """空的源路径无效"""
    with pytest.raises(InvalidSourceError) as exc_info:
        validate_request(BackupRequest(raw, str(destination)))

    assert exc_info.value.outcome is Outcome.INVALID_SOURCE


def test_missing_source(tmp_path, destination):
    """源目录不存在"""
    missing = tmp_path / "nope"

    with pytest.raises(InvalidSourceError) as exc_info:
        validate_request(BackupRequest(str(missing), str(destination)))

    assert str(missing) in exc_info.value.message


def test_source_is_file(source_tree, destination):
    """源路径是文件而不是目录"""
    with pytest.raises(InvalidSourceError):
        validate_request(BackupRequest(str(source_tree / "README.txt"), str(destination)))


def test_source_checked_before_destination(tmp_path):
    """源与目标都无效时先报告源"""
    with pytest.raises(InvalidSourceError):
        validate_request(BackupRequest(str(tmp_path / "a"), str(tmp_path / "b")))


def test_missing_destination(source_tree, tmp_path):
    """目标目录不存在"""
    with pytest.raises(InvalidDestinationError) as exc_info:
        validate_request(BackupRequest(str(source_tree), str(tmp_path / "nope")))

    assert exc_info.value.outcome is Outcome.INVALID_DESTINATION


def test_destination_is_file(source_tree):
    """目标路径是文件而不是目录"""
    with pytest.raises(InvalidDestinationError):
        validate_request(BackupRequest(str(source_tree), str(source_tree / "README.txt")))


def test_unwritable_destination(source_tree, destination, monkeypatch):
    """写入探测失败时报告目标不可写"""
    def deny(marker):
        raise PermissionError(13, "Permission denied", str(marker))

    monkeypatch.setattr(validator, "_write_marker", deny)

    with pytest.raises(DestinationUnwritableError) as exc_info:
        validate_request(BackupRequest(str(source_tree), str(destination)))

    assert exc_info.value.outcome is Outcome.DESTINATION_UNWRITABLE
    assert list(destination.iterdir()) == []


@pytest.mark.skipif(
    not hasattr(os, "geteuid") or os.geteuid() == 0,
    reason="root bypasses directory permissions"
)
def test_read_only_destination(source_tree, destination):
    """只读目录无法通过写入探测"""
    destination.chmod(0o555)
    try:
        with pytest.raises(DestinationUnwritableError):
            validate_request(BackupRequest(str(source_tree), str(destination)))
    finally:
        destination.chmod(0o755)

    assert list(destination.iterdir()) == []


def test_probe_removes_marker(destination):
    """探测后不留下标记文件"""
    assert probe_writable(destination) is True
    assert not any(p.name.startswith(MARKER_PREFIX) for p in destination.iterdir())


def test_marker_removal_failure_is_ignored(destination, monkeypatch):
    """标记文件删除失败不算错误"""
    removed = []

    def fail_unlink(self, *args, **kwargs):
        removed.append(self)
        raise PermissionError("cannot remove")

    monkeypatch.setattr(validator.Path, "unlink", fail_unlink)

    assert probe_writable(destination) is True
    assert len(removed) == 1


def test_overlong_source(tmp_path, destination):
    """源路径过长时报告源无效，而不是抛出OSError"""
    overlong = str(tmp_path / ("x" * 300))

    with pytest.raises(InvalidSourceError) as exc_info:
        validate_request(BackupRequest(overlong, str(destination)))

    assert "not accessible" in exc_info.value.message


def test_overlong_destination(source_tree, tmp_path):
    """目标路径过长时报告目标无效"""
    overlong = str(tmp_path / ("y" * 300))

    with pytest.raises(InvalidDestinationError) as exc_info:
        validate_request(BackupRequest(str(source_tree), overlong))

    assert exc_info.value.outcome is Outcome.INVALID_DESTINATION


def test_unsearchable_parent(source_tree, destination, monkeypatch):
    """无法访问的路径（EACCES）报告为源无效"""
    real_exists = validator.Path.exists

    def exists(self, *args, **kwargs):
        if self.name == "locked":
            raise PermissionError(13, "Permission denied", str(self))
        return real_exists(self, *args, **kwargs)

    monkeypatch.setattr(validator.Path, "exists", exists)

    with pytest.raises(InvalidSourceError):
        validate_request(BackupRequest(str(source_tree / "locked"), str(destination)))


def test_failed_probe_keeps_existing_file(destination, monkeypatch):
    """标记文件创建失败时不删除同名的已有文件"""
    existing = destination / f"{MARKER_PREFIX}{os.getpid()}"
    existing.write_text("not ours", encoding="utf-8")

    def deny(marker):
        raise PermissionError(13, "Permission denied", str(marker))

    monkeypatch.setattr(validator, "_write_marker", deny)

    assert probe_writable(destination) is False
    assert existing.read_text(encoding="utf-8") == "not ours"
