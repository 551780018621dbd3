"""
Verify 命令实现

重新计算输出目录中归档的 SHA-256，与校验文件比对。
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ...build.checksum import verify_dist
from ...config import ConfigError, config_loader, load_config


console = Console()


def verify_command(
    output_dir: Optional[str] = typer.Argument(None, help="输出目录（默认读取配置中的 output_dir）"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="配置文件路径"),
) -> None:
    """校验输出目录中的归档

    示例:
        distpack verify
        distpack verify dist
    """
    if output_dir is None:
        try:
            config_obj = load_config(config) if config else config_loader.load_default(Path.cwd())
        except ConfigError as e:
            console.print(f"[red]配置错误[/red]: {escape(str(e))}")
            raise typer.Exit(1)
        target_dir = Path(config_obj.output_dir)
    else:
        target_dir = Path(output_dir)

    console.print(f"正在校验: [cyan]{target_dir}[/cyan]")
    result = verify_dist(target_dir)

    for message in result.errors:
        console.print(message, style="red", markup=False)
    for filename in result.missing_files:
        console.print(f"[red]缺失[/red]: {filename}")
    for filename in result.mismatches:
        console.print(f"[red]不匹配[/red]: {filename}")

    if not result.is_valid:
        raise typer.Exit(1)

    console.print(f"[green]✓ {len(result.checked)} 个归档校验通过[/green]")
