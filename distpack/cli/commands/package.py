"""
打包命令实现

无参数运行 distpack 时执行的核心流程。
"""

import traceback
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...build.packager import PackageResult, ReleasePackager
from ...config import ConfigError, ConfigValidationError, config_loader, load_config
from ...utils import format_size
from ...utils.logging import OutputLevel, set_log_file, set_log_level


console = Console()
err_console = Console(stderr=True)


def _print_summary(result: PackageResult) -> None:
    """输出产物汇总表"""
    table = Table(title=f"{result.product_name} v{result.version}")
    table.add_column("目标", style="cyan")
    table.add_column("归档", style="green")
    table.add_column("大小", justify="right")
    table.add_column("SHA-256", style="dim")

    for artifact in result.artifacts:
        table.add_row(
            artifact.target,
            artifact.archive_path.name,
            format_size(artifact.size),
            artifact.digest[:16] + "...",
        )

    console.print(table)


def run_package(
    config: Optional[str] = None,
    verbose: bool = False,
    log_file: Optional[str] = None,
    work_dir: Optional[Path] = None,
) -> PackageResult:
    """加载配置并运行打包流程，失败时以退出码 1 结束

    Raises:
        typer.Exit: 配置错误或打包失败
    """
    work_dir = Path(work_dir or Path.cwd())

    set_log_level(OutputLevel.DEBUG if verbose else OutputLevel.INFO)
    if log_file:
        try:
            set_log_file(log_file)
        except OSError as e:
            err_console.print(f"[yellow]无法写入日志文件 {log_file}: {e}[/yellow]")

    try:
        if config:
            config_obj = load_config(config)
        else:
            config_obj = config_loader.load_default(work_dir)
    except ConfigValidationError as e:
        err_console.print("[red]配置验证失败:[/red]")
        err_console.print(e.format_errors(), markup=False)
        raise typer.Exit(1)
    except ConfigError as e:
        err_console.print(f"[red]配置错误[/red]: {escape(str(e))}")
        raise typer.Exit(1)

    def progress_callback(target: str, current: int, total: int, message: str = "") -> None:
        if verbose and total > 0:
            console.print(f"[blue]{target}[/blue]: {message} ({current / total * 100:.0f}%)")

    packager = ReleasePackager(config_obj, work_dir=work_dir)

    try:
        result = packager.package(progress_callback=progress_callback)
    except Exception as e:
        err_console.print(f"[red]✗ 打包过程中发生意外错误[/red]: {escape(str(e))}")
        if log_file or verbose:
            err_console.print(traceback.format_exc(), markup=False)
        raise typer.Exit(1)

    if not result.success:
        location = " ".join(
            part for part in (
                f"目标 {result.failed_target}" if result.failed_target else "",
                f"阶段 {result.failed_stage}" if result.failed_stage else "",
            ) if part
        )
        err_console.print(f"[red]✗ 打包失败[/red] ({result.error_type}) {location}".rstrip())
        err_console.print(result.error, markup=False)
        raise typer.Exit(1)

    _print_summary(result)
    console.print(f"[green]✓ 完成[/green]: 归档和校验文件位于 {result.output_dir}")
    return result
