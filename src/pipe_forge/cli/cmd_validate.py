"""
validate 命令：校验配置文件。
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel

from pipe_forge.cli.utils import create_console, print_error, print_success, print_warning
from pipe_forge.config.loader import load_config, validate_config_file

console = create_console()


def validate_command(path: str, strict: bool = False) -> None:
    """
    校验 YAML 配置文件的语法和语义正确性。

    除了 Schema 校验之外，还会给出以下警告：
    - 没有任何阶段的流水线
    - 没有被任何流水线使用的命令

    使用 --strict 可将警告也视为错误（CI 流程中推荐）。
    """
    if not Path(path).exists():
        print_error(f"文件不存在：{path}")

    console.print(f"[bold]校验配置文件：[/bold] {escape(path)}\n")

    errors = validate_config_file(path)
    if errors:
        console.print(Panel(
            "\n".join(f"[red]X[/red] {escape(err)}" for err in errors),
            title=f"[bold red]校验失败（{len(errors)} 个错误）[/bold red]",
            border_style="red",
        ))
        sys.exit(1)

    warnings = _collect_warnings(path)
    for warning in warnings:
        print_warning(warning)

    if warnings and strict:
        console.print("\n[bold red]严格模式下警告视为错误。[/bold red]")
        sys.exit(1)

    print_success(f"{path} 校验通过")
    if warnings:
        console.print(f"[dim]（有 {len(warnings)} 条警告，但不影响使用）[/dim]")


def _collect_warnings(path: str) -> list[str]:
    config = load_config(path=path)
    warnings = [
        f"流水线 '{name}' 没有任何阶段"
        for name, pipeline in config.pipelines.items()
        if not pipeline.stages
    ]

    used = {
        stage.command
        for pipeline in config.pipelines.values()
        for stage in pipeline.stages
    }
    warnings.extend(
        f"命令 '{name}' 没有被任何流水线使用"
        for name in sorted(config.commands)
        if name not in used
    )
    return warnings
