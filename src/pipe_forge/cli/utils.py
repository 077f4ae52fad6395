"""
CLI 工具函数：Rich 美化、配置加载、通用辅助。

提供 CLI 各子命令共用的实用函数，包括：
- Rich Console 美化输出
- 错误/成功信息统一格式
- 日志配置
- 配置与指标的表格渲染
"""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from pipe_forge.config.schema import ForgeConfig
from pipe_forge.errors import PipeForgeError
from pipe_forge.observability.metrics import MetricsCollector

# 全局 Console 实例
_console: Console | None = None
_error_console: Console | None = None


def create_console() -> Console:
    """创建或获取全局 Rich Console 实例。"""
    global _console
    if _console is None:
        _console = Console()
    return _console


def create_error_console() -> Console:
    """创建或获取写到 stderr 的 Rich Console，用于不能混入流水线输出的内容。"""
    global _error_console
    if _error_console is None:
        _error_console = Console(stderr=True)
    return _error_console


def configure_logging(verbose: bool) -> None:
    """
    配置根日志记录器。

    verbose 时输出 DEBUG 级别日志（含阶段级执行信息），否则只输出 WARNING。
    日志写到 stderr，不会混入流水线输出。
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def print_error(message: str, exit_code: int = 1) -> NoReturn:
    """
    打印错误信息并退出程序。

    参数:
        message: 错误信息
        exit_code: 退出码（默认 1）
    """
    console = create_console()
    console.print(f"[bold red]X 错误：[/bold red]{escape(message)}")
    sys.exit(exit_code)


def print_success(message: str) -> None:
    """打印成功信息。"""
    console = create_console()
    console.print(f"[bold green]OK[/bold green] {escape(message)}")


def print_warning(message: str) -> None:
    """打印警告信息。"""
    console = create_console()
    console.print(f"[bold yellow]![/bold yellow] {escape(message)}")


def handle_pipe_forge_error(error: PipeForgeError) -> NoReturn:
    """
    统一处理 PipeForgeError 异常：打印三段式错误信息并以退出码 1 结束。
    """
    console = create_console()
    console.print("\n[bold red]X 错误[/bold red]\n")
    console.print(escape(error.full_message))
    sys.exit(1)


def create_commands_table(config: ForgeConfig) -> Table:
    """创建命名命令表格。"""
    table = Table(title="命令", show_header=True, header_style="bold magenta")
    table.add_column("名称", style="cyan")
    table.add_column("程序", style="green")
    table.add_column("预置参数", style="white")
    table.add_column("说明", style="dim")

    for name, command in sorted(config.commands.items()):
        table.add_row(
            escape(name),
            escape(command.program),
            escape(" ".join(command.args)),
            escape(command.description),
        )

    return table


def create_pipelines_table(config: ForgeConfig) -> Table:
    """创建命名流水线表格。"""
    table = Table(title="流水线", show_header=True, header_style="bold cyan")
    table.add_column("名称", style="cyan")
    table.add_column("阶段", style="white")
    table.add_column("绑定输入", style="yellow")
    table.add_column("说明", style="dim")

    for name, pipeline in sorted(config.pipelines.items()):
        stages = " | ".join(
            " ".join([stage.command, *stage.args]) for stage in pipeline.stages
        )
        table.add_row(
            escape(name),
            escape(stages or "<empty>"),
            "是" if pipeline.input is not None else "",
            escape(pipeline.description),
        )

    return table


def create_timings_table(collector: MetricsCollector) -> Table:
    """创建阶段耗时表格。"""
    table = Table(title="阶段耗时", show_header=True, header_style="bold blue")
    table.add_column("阶段", style="white")
    table.add_column("耗时 (ms)", justify="right", style="blue")
    table.add_column("结果", style="green")

    for sample in collector.samples:
        table.add_row(
            escape(sample.stage),
            f"{sample.duration_ms:.1f}",
            "成功" if sample.ok else "[red]失败[/red]",
        )

    return table
