"""
list 命令：列出配置中的命名命令和命名流水线。
"""

from __future__ import annotations

from pipe_forge.cli.utils import (
    create_commands_table,
    create_console,
    create_pipelines_table,
    handle_pipe_forge_error,
)
from pipe_forge.config.loader import load_config
from pipe_forge.errors import PipeForgeError

console = create_console()


def list_command(config: str | None = None) -> None:
    """以表格形式显示命令和流水线。"""
    try:
        forge_config = load_config(path=config)
    except PipeForgeError as e:
        handle_pipe_forge_error(e)

    if not forge_config.commands and not forge_config.pipelines:
        console.print("[dim]配置中没有定义任何命令或流水线。[/dim]")
        return

    console.print(create_commands_table(forge_config))
    console.print(create_pipelines_table(forge_config))
