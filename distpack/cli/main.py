"""
distpack CLI 主入口

无子命令时直接执行打包流程；另提供 verify/validate/info/example 子命令。
"""

import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..build.archiver import ArchiverFactory
from ..build.checksum import select_convention
from ..build.targets import (
    LINUX_DEFAULT_TARGETS,
    TARGETS_ENV,
    HostFamily,
    detect_host_family,
    detect_host_target,
)
from .commands import package, validate, verify


app = typer.Typer(
    name="distpack",
    help="distpack - 多目标平台发布打包工具",
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """显示版本信息"""
    if value:
        console.print(f"distpack v{__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config", "-c",
        help="配置文件路径（默认使用当前目录下的 distpack.yaml）",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="启用详细输出",
    ),
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        help="日志输出文件",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="显示版本信息",
    ),
) -> None:
    """distpack - 多目标平台发布打包工具

    不带子命令运行时，为每个目标构建 release 产物并在 dist/ 中生成归档和校验文件。
    通过 TARGETS 环境变量（空白分隔）覆盖目标列表。
    """
    if ctx.invoked_subcommand is None:
        package.run_package(config=config, verbose=verbose, log_file=log_file)


app.command("verify", help="校验输出目录中的归档")(verify.verify_command)
app.command("validate", help="验证配置文件")(validate.validate_command)


@app.command("info")
def info_command() -> None:
    """显示宿主平台信息"""
    host_family = detect_host_family()
    archive_format = ArchiverFactory.format_for_host(host_family)
    convention = select_convention()

    table = Table(title="distpack 系统信息")
    table.add_column("项目", style="cyan")
    table.add_column("值", style="green")

    table.add_row("distpack", __version__)
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("宿主平台", host_family)
    table.add_row("归档格式", archive_format.value)
    table.add_row("校验文件", f".{convention.extension} ({convention.verify_command})")

    if host_family == HostFamily.LINUX:
        table.add_row("默认目标", " ".join(LINUX_DEFAULT_TARGETS))
    else:
        table.add_row("默认目标", detect_host_target() or "(无法检测)")
    table.add_row("覆盖方式", f"{TARGETS_ENV}=\"<target> <target> ...\"")

    console.print(table)


@app.command("example")
def example_command(
    output: str = typer.Option(
        "distpack.yaml",
        "--output", "-o",
        help="输出配置文件路径",
    ),
) -> None:
    """生成示例配置文件"""
    from ..config import ConfigError, DistpackConfig, save_config

    config = DistpackConfig.from_dict({
        "product": {"name": "Widget", "crate": "widget"},
        "targets": ["x86_64-unknown-linux-gnu"],
    })

    try:
        save_config(config, output)
    except ConfigError as e:
        console.print(f"[red]生成示例配置失败: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"✓ 示例配置文件已生成: [green]{output}[/green]")
    console.print("修改后在项目根目录运行: [cyan]distpack[/cyan]")


if __name__ == "__main__":
    app()
