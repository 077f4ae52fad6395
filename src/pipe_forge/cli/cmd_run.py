"""
run / exec 命令：运行命名流水线或单个命令。

流水线的 stdout 原样写到终端标准输出，--timings 表格写到 stderr。
失败时打印捕获的 stderr 和三段式错误信息，退出码为 1。
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from pipe_forge.cli.utils import (
    configure_logging,
    create_error_console,
    create_timings_table,
    handle_pipe_forge_error,
    print_error,
)
from pipe_forge.command.template import Cmd
from pipe_forge.config.loader import load_config
from pipe_forge.errors import PipeForgeError
from pipe_forge.models.result import ExecResult
from pipe_forge.observability.metrics import MetricsCollector
from pipe_forge.pipeline.base import ExecutionContext, Executable
from pipe_forge.pipeline.factory import create_pipeline


def run_command(
    name: str,
    config: str | None = None,
    input_text: str | None = None,
    input_file: str | None = None,
    use_stdin: bool = False,
    verbose: bool = False,
    timings: bool = False,
) -> None:
    """运行配置文件中的命名流水线。"""
    configure_logging(verbose)

    try:
        forge_config = load_config(path=config)
        pipeline = create_pipeline(forge_config, name)
    except PipeForgeError as e:
        handle_pipe_forge_error(e)

    stdin = _read_input(input_text, input_file, use_stdin)
    if stdin is not None:
        # 命令行给出的输入替换流水线在配置中绑定的输入
        pipeline = pipeline.with_input(stdin)

    collector = MetricsCollector() if timings else None
    context = ExecutionContext.from_config(
        forge_config.exec,
        metrics=collector,
    )
    if verbose:
        context.debug = True

    _execute(pipeline, b"", context, collector)


def exec_command(
    program: str,
    args: list[str] | None = None,
    input_text: str | None = None,
    input_file: str | None = None,
    use_stdin: bool = False,
    verbose: bool = False,
    timings: bool = False,
) -> None:
    """运行单个命令。"""
    configure_logging(verbose)

    stdin = _read_input(input_text, input_file, use_stdin)
    collector = MetricsCollector() if timings else None
    context = ExecutionContext(debug=verbose, metrics=collector)

    _execute(Cmd(program)(*(args or [])), stdin or b"", context, collector)


def _read_input(
    input_text: str | None,
    input_file: str | None,
    use_stdin: bool,
) -> bytes | None:
    """按 --input / --input-file / --stdin 读取输入，三者互斥，都没有时返回 None。"""
    given = sum(
        [input_text is not None, input_file is not None, use_stdin]
    )
    if given > 1:
        print_error("--input、--input-file 和 --stdin 只能指定一个。")

    if input_text is not None:
        return input_text.encode("utf-8")
    if input_file is not None:
        path = Path(input_file)
        if not path.exists():
            print_error(f"输入文件不存在：{input_file}")
        return path.read_bytes()
    if use_stdin:
        return sys.stdin.buffer.read()
    return None


def _execute(
    unit: Executable,
    stdin: bytes,
    context: ExecutionContext,
    collector: MetricsCollector | None,
) -> None:
    result: ExecResult = unit.execute(stdin, context)

    if result.ok:
        typer.echo(result.stdout, nl=False)

    if collector is not None:
        create_error_console().print(create_timings_table(collector))

    if result.error is not None:
        if result.stderr:
            typer.echo(result.stderr, nl=False, err=True)
        handle_pipe_forge_error(result.error)
