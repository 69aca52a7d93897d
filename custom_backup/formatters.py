"""
输出格式化器

支持多种输出格式：Table, JSON, YAML
"""

import json
from io import StringIO
from typing import Any, Dict, List, Optional, Tuple

import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .models import BackupResult

OUTCOME_STYLES = {
    True: ("✅", "green"),
    False: ("❌", "red"),
}


class OutputFormatter:
    """输出格式化器"""

    def __init__(self, format: str = "table", color: bool = True):
        """
        初始化格式化器

        Args:
            format: 输出格式 (table, json, yaml)
            color: 是否使用颜色
        """
        self.format = format.lower()
        self.color = color

    def _render(self, renderable) -> str:
        string_io = StringIO()
        temp_console = Console(
            file=string_io,
            color_system="auto" if self.color else None,
            width=120,
        )
        temp_console.print(renderable)
        return string_io.getvalue()

    def format_dict(self, data: Dict[str, Any], title: Optional[str] = None) -> str:
        """
        格式化字典数据

        Args:
            data: 字典数据
            title: 标题

        Returns:
            格式化后的字符串
        """
        if self.format == "json":
            return json.dumps(data, indent=2, ensure_ascii=False)

        elif self.format == "yaml":
            return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)

        else:  # table
            table = Table(title=title, box=box.ROUNDED, show_header=False)
            table.add_column("Key", style="cyan")
            table.add_column("Value", style="white")

            for key, value in data.items():
                table.add_row(str(key), "" if value is None else str(value))

            return self._render(table)

    def format_result(self, result: BackupResult) -> str:
        """格式化备份结果"""
        data = result.to_dict()
        if self.format != "table":
            return self.format_dict(data)

        emoji, _ = OUTCOME_STYLES[result.succeeded]
        return self.format_dict(data, title=f"{emoji} Backup {data['outcome']}")

    def format_checks(self, checks: List[Tuple[str, bool, str]]) -> str:
        """
        格式化检查结果

        Args:
            checks: (检查项, 是否通过, 说明) 列表
        """
        if self.format != "table":
            return self.format_dict({
                name: {"ok": ok, "detail": detail} for name, ok, detail in checks
            })

        table = Table(title="Pre-flight checks", box=box.ROUNDED)
        table.add_column("Check", style="cyan")
        table.add_column("Status")
        table.add_column("Detail", style="dim")

        for name, ok, detail in checks:
            emoji, style = OUTCOME_STYLES[ok]
            table.add_row(name, f"[{style}]{emoji}[/{style}]", detail)

        return self._render(table)


def create_formatter(format: str = "table", color: bool = True) -> OutputFormatter:
    """创建格式化器"""
    return OutputFormatter(format=format, color=color)
