"""
Validate 命令实现

验证配置文件的命令。
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from ...config import DEFAULT_CONFIG_NAME, validate_config


console = Console()


def validate_command(
    config: str = typer.Option(DEFAULT_CONFIG_NAME, "--config", "-c", help="配置文件路径"),
    json_output: bool = typer.Option(False, "--json", help="输出 JSON 格式的错误信息"),
) -> None:
    """验证配置文件

    检查配置文件的语法和字段取值。

    示例:
        distpack validate
        distpack validate -c release.yaml --json
    """
    config_path = Path(config)

    if not config_path.exists():
        console.print(f"[red]配置文件不存在: {config_path}[/red]")
        raise typer.Exit(1)

    errors = validate_config(config_path)

    if not errors:
        if not json_output:
            console.print(f"[green]✓ 配置文件验证通过[/green]: {config_path}")
        else:
            console.print_json(json.dumps({"file": str(config_path), "errors": [], "error_count": 0}))
        return

    if json_output:
        error_data = {
            "file": str(config_path),
            "errors": [
                {
                    "loc": [str(item) for item in error.get('loc', [])],
                    "msg": error.get('msg', ''),
                    "type": error.get('type', ''),
                }
                for error in errors
            ],
            "error_count": len(errors),
        }
        console.print_json(json.dumps(error_data, ensure_ascii=False))
    else:
        console.print(f"[red]配置文件验证失败 ({len(errors)} 个错误):[/red]")

        table = Table(title="验证错误")
        table.add_column("位置", style="cyan", no_wrap=True)
        table.add_column("错误信息", style="red")
        table.add_column("输入值", style="yellow")

        for error in errors:
            location = " -> ".join(str(item) for item in error.get('loc', []))
            message = error.get('msg', '未知错误')
            input_value = str(error.get('input', ''))
            if len(input_value) > 47:
                input_value = input_value[:47] + "..."

            table.add_row(location or "根级别", message, input_value or "-")

        console.print(table)

    raise typer.Exit(1)
