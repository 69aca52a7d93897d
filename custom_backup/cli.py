"""
custom-backup CLI 工具

将源目录打包为带时间戳的 tar.gz，移动到目标目录，并写入审计日志
"""

import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import click
from rich.console import Console

from . import __version__
from .audit_log import AuditLogger
from .config import OUTPUT_FORMATS, Config, parse_collision_policy, parse_output_format
from .errors import BackupError
from .formatters import create_formatter
from .models import BackupRequest, CollisionPolicy, Outcome
from .pipeline import BackupPipeline
from .validator import validate_destination, validate_source

err_console = Console(stderr=True)

# 环境变量配置无效时的退出码（与流水线的0-5区分开）
EXIT_CONFIG_ERROR = 64


class ConfigError(click.ClickException):
    exit_code = EXIT_CONFIG_ERROR


def acquire_request(
    source: Optional[str],
    destination: Optional[str],
    prompt: Callable[[str], str] = click.prompt
) -> BackupRequest:
    """
    获取源/目标路径，缺失的参数通过交互提示获取

    Args:
        source: 命令行传入的源目录
        destination: 命令行传入的目标目录
        prompt: 交互提示函数

    Returns:
        BackupRequest对象
    """
    if source is None:
        source = prompt("Source directory")
    if destination is None:
        destination = prompt("Destination directory")
    return BackupRequest(source_path=source, destination_path=destination)


def load_config(
    log_file: Optional[str] = None,
    staging_dir: Optional[str] = None,
    on_collision: Optional[str] = None,
    output_format: Optional[str] = None,
    no_color: bool = False
) -> Config:
    """从环境变量加载配置，再用命令行参数覆盖"""
    try:
        config = Config.load()
        if on_collision:
            config.collision_policy = parse_collision_policy(on_collision)
        if output_format:
            config.output.format = parse_output_format(output_format)
    except ValueError as e:
        raise ConfigError(str(e)) from e

    if log_file:
        config.log_path = Path(log_file)
    if staging_dir:
        config.staging_dir = Path(staging_dir)
    if no_color:
        config.output.color = False
    return config


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


@click.group()
@click.version_option(version=__version__, prog_name="custom-backup")
def cli():
    """custom-backup - 目录备份工具"""
    pass


@cli.command("run")
@click.argument("source", required=False)
@click.argument("destination", required=False)
@click.option("--log-file", type=click.Path(dir_okay=False), help="审计日志路径")
@click.option("--staging-dir", type=click.Path(file_okay=False), help="暂存目录的父目录")
@click.option("--on-collision", type=click.Choice([p.value for p in CollisionPolicy]),
              help="目标目录已存在同名归档时的处理方式 (默认: reject)")
@click.option("--format", "output_format", type=click.Choice(OUTPUT_FORMATS), help="输出格式 (默认: table)")
@click.option("--no-color", is_flag=True, help="禁用彩色输出")
@click.option("--verbose", "-v", is_flag=True, help="显示调试日志")
def run(source, destination, log_file, staging_dir, on_collision, output_format, no_color, verbose):
    """备份 SOURCE 目录到 DESTINATION 目录"""
    setup_logging(verbose)
    config = load_config(log_file, staging_dir, on_collision, output_format, no_color)
    request = acquire_request(source, destination)

    pipeline = BackupPipeline(
        audit_log=AuditLogger(config.log_path),
        staging_root=config.staging_dir,
        collision_policy=config.collision_policy,
    )
    result = pipeline.run(request)

    formatter = create_formatter(config.output.format, config.output.color)
    click.echo(formatter.format_result(result))

    if not result.succeeded:
        err_console.print(f"[red]❌ {result.message}[/red]", highlight=False)

    sys.exit(result.outcome.exit_code)


@cli.command("check")
@click.argument("source", required=False)
@click.argument("destination", required=False)
@click.option("--log-file", type=click.Path(dir_okay=False), help="审计日志路径")
@click.option("--format", "output_format", type=click.Choice(OUTPUT_FORMATS), help="输出格式 (默认: table)")
@click.option("--no-color", is_flag=True, help="禁用彩色输出")
@click.option("--verbose", "-v", is_flag=True, help="显示调试日志")
def check(source, destination, log_file, output_format, no_color, verbose):
    """只做校验：检查目录与日志文件，不创建归档"""
    setup_logging(verbose)
    config = load_config(log_file=log_file, output_format=output_format, no_color=no_color)
    request = acquire_request(source, destination)

    checks: List[Tuple[str, bool, str]] = []
    outcome = Outcome.SUCCESS

    for name, validate, raw in (
        ("source", validate_source, request.source_path),
        ("destination", validate_destination, request.destination_path),
    ):
        try:
            checks.append((name, True, str(validate(raw))))
        except BackupError as e:
            checks.append((name, False, e.message))
            if outcome is Outcome.SUCCESS:
                outcome = e.outcome

    audit_log = AuditLogger(config.log_path)
    if audit_log.is_writable():
        checks.append(("log file", True, str(audit_log.log_path)))
    else:
        checks.append(("log file", False, f"{audit_log.log_path} (entries fall back to stderr)"))

    formatter = create_formatter(config.output.format, config.output.color)
    click.echo(formatter.format_checks(checks))
    sys.exit(outcome.exit_code)
