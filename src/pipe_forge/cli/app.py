"""
Pipe Forge CLI：命令行工具入口。

提供 run / exec / validate / list / version 子命令。

用法::

    pipe-forge --help
    pipe-forge run shout_far --input-file crawl.txt
    pipe-forge exec --input "hello" tr a-z A-Z
    pipe-forge validate pipe_forge.yaml
    pipe-forge list
"""

from __future__ import annotations

import typer

from pipe_forge.cli.utils import create_console

app = typer.Typer(
    name="pipe-forge",
    help="Pipe Forge：像写 shell 管道一样组合外部命令",
    add_completion=False,
    no_args_is_help=True,
)

console = create_console()


# ============================================================
# 子命令注册
# ============================================================

@app.command(name="run")
def run(
    name: str = typer.Argument(
        ...,
        help="配置文件中的流水线名称",
    ),
    config: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="配置文件路径（默认自动搜索）",
    ),
    input_text: str | None = typer.Option(
        None,
        "--input",
        "-i",
        help="作为第一个阶段 stdin 的文本",
    ),
    input_file: str | None = typer.Option(
        None,
        "--input-file",
        "-f",
        help="作为第一个阶段 stdin 的文件",
    ),
    use_stdin: bool = typer.Option(
        False,
        "--stdin",
        help="从标准输入读取第一个阶段的 stdin",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="详细输出（显示阶段级调试日志）",
    ),
    timings: bool = typer.Option(
        False,
        "--timings",
        "-t",
        help="执行后显示各阶段耗时",
    ),
) -> None:
    """运行配置文件中的命名流水线。"""
    from pipe_forge.cli.cmd_run import run_command
    run_command(
        name=name,
        config=config,
        input_text=input_text,
        input_file=input_file,
        use_stdin=use_stdin,
        verbose=verbose,
        timings=timings,
    )


@app.command(
    name="exec",
    context_settings={"ignore_unknown_options": True},
)
def exec_(
    program: str = typer.Argument(
        ...,
        help="程序名",
    ),
    args: list[str] | None = typer.Argument(
        None,
        help="传给程序的参数（以 - 开头的参数请放在 -- 之后）",
    ),
    input_text: str | None = typer.Option(
        None,
        "--input",
        "-i",
        help="作为 stdin 的文本",
    ),
    input_file: str | None = typer.Option(
        None,
        "--input-file",
        "-f",
        help="作为 stdin 的文件",
    ),
    use_stdin: bool = typer.Option(
        False,
        "--stdin",
        help="从标准输入读取 stdin",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="详细输出（显示调试日志）",
    ),
    timings: bool = typer.Option(
        False,
        "--timings",
        "-t",
        help="执行后显示耗时",
    ),
) -> None:
    """运行单个命令。"""
    from pipe_forge.cli.cmd_run import exec_command
    exec_command(
        program=program,
        args=args,
        input_text=input_text,
        input_file=input_file,
        use_stdin=use_stdin,
        verbose=verbose,
        timings=timings,
    )


@app.command(name="validate")
def validate(
    path: str = typer.Argument(
        "pipe_forge.yaml",
        help="YAML 配置文件路径",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="严格模式：将警告视为错误",
    ),
) -> None:
    """校验 YAML 配置文件的语法和语义正确性。"""
    from pipe_forge.cli.cmd_validate import validate_command
    validate_command(path=path, strict=strict)


@app.command(name="list")
def list_(
    config: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="配置文件路径（默认自动搜索）",
    ),
) -> None:
    """列出配置中的命令和流水线。"""
    from pipe_forge.cli.cmd_list import list_command
    list_command(config=config)


@app.command(name="version")
def version() -> None:
    """显示版本信息。"""
    from pipe_forge import __version__
    console.print(f"Pipe Forge v{__version__}")


# ============================================================
# CLI 入口点
# ============================================================

def main() -> None:
    """CLI 入口点。"""
    app()


if __name__ == "__main__":
    main()
