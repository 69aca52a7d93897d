"""
配置管理模块

只从环境变量读取配置（本工具不使用配置文件），命令行参数可再覆盖
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .audit_log import DEFAULT_LOG_PATH
from .models import CollisionPolicy

OUTPUT_FORMATS = ("table", "json", "yaml")


@dataclass
class OutputConfig:
    """输出配置"""
    format: str = "table"  # table, json, yaml
    color: bool = True


@dataclass
class Config:
    """全局配置"""
    log_path: Path = DEFAULT_LOG_PATH
    staging_dir: Optional[Path] = None
    collision_policy: CollisionPolicy = CollisionPolicy.REJECT
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def load(cls, environ: Optional[Dict[str, str]] = None) -> "Config":
        """
        加载配置

        Args:
            environ: 环境变量映射，为None时使用os.environ

        Returns:
            Config对象

        Raises:
            ValueError: 环境变量取值无效
        """
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("CUSTOM_BACKUP_LOG_FILE"):
            config.log_path = Path(env["CUSTOM_BACKUP_LOG_FILE"]).expanduser()
        if env.get("CUSTOM_BACKUP_STAGING_DIR"):
            config.staging_dir = Path(env["CUSTOM_BACKUP_STAGING_DIR"]).expanduser()
        if env.get("CUSTOM_BACKUP_ON_COLLISION"):
            config.collision_policy = parse_collision_policy(env["CUSTOM_BACKUP_ON_COLLISION"])
        if env.get("CUSTOM_BACKUP_OUTPUT"):
            config.output.format = parse_output_format(env["CUSTOM_BACKUP_OUTPUT"])
        if "NO_COLOR" in env:
            config.output.color = False

        return config


def parse_collision_policy(value: str) -> CollisionPolicy:
    try:
        return CollisionPolicy(value.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in CollisionPolicy)
        raise ValueError(f"invalid collision policy '{value}' (expected one of: {choices})") from None


def parse_output_format(value: str) -> str:
    fmt = value.strip().lower()
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(
            f"invalid output format '{value}' (expected one of: {', '.join(OUTPUT_FORMATS)})"
        )
    return fmt
