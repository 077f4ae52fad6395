"""
命令工厂：可复用的命令模板与命令单元。

``Cmd()`` 返回一个命令模板：程序名加上预置参数。每次调用模板都会创建一个
全新的 Command 单元，参数列表为"预置参数 + 调用参数"，按顺序拼接，
不去重、不校验，参数语义完全交给外部程序解释::

    echo = Cmd("echo", "-n")
    echo("Hi")        # 执行时等价于 $ echo -n Hi
    echo("there")     # 与上一个单元互不影响

创建模板和单元都不会检查程序是否存在。找不到程序会在执行时表现为
ExecutionError，而不是构建期异常。
"""

from __future__ import annotations

import shlex
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from pipe_forge.errors import ExecutionError, PipelineError
from pipe_forge.models.result import ExecResult
from pipe_forge.pipeline.base import ExecutionContext, Executable
from pipe_forge.process.runner import run_process


@dataclass(frozen=True)
class Command(Executable):
    """
    一次完整确定的外部进程调用。

    属性:
        program: 程序名（按 PATH 查找）或路径
        args: 参数元组（创建后不可变）
        cwd: 工作目录（None 使用 ExecutionContext 的设置）
        env: 追加的环境变量，按键排序的 (key, value) 元组
    """

    program: str
    args: tuple[str, ...] = ()
    cwd: str | None = None
    env: tuple[tuple[str, str], ...] = ()

    @property
    def argv(self) -> tuple[str, ...]:
        """完整的参数列表：程序名 + 参数。"""
        return (self.program, *self.args)

    @property
    def name(self) -> str:
        return shlex.join(self.argv)

    def in_dir(self, path: str | Path) -> Command:
        """返回在指定工作目录执行的新单元。"""
        return replace(self, cwd=str(path))

    def with_env(self, **variables: str) -> Command:
        """返回追加了环境变量的新单元。"""
        merged = dict(self.env)
        merged.update(variables)
        return replace(self, env=tuple(sorted(merged.items())))

    def _run_stage(self, stdin: bytes, context: ExecutionContext) -> ExecResult:
        argv = self.argv

        try:
            output = run_process(
                argv,
                stdin,
                cwd=context.process_cwd(self.cwd),
                env=context.process_env(dict(self.env)),
            )
        except (OSError, ValueError) as e:
            # 参数中含 NUL 字节时 Popen 抛出 ValueError
            return context.make_result(
                error=ExecutionError(
                    what=f"无法启动命令 '{self.name}'。",
                    why=str(e),
                    how=f"确认程序 '{self.program}' 已安装、在 PATH 中且有执行权限，"
                        "并检查工作目录是否存在。",
                    stage_name=self.name,
                    argv=argv,
                )
            )

        stderr_text = output.stderr.decode(context.encoding, context.decode_errors)

        if output.io_error is not None:
            error: ExecutionError | None = ExecutionError(
                what=f"命令 '{self.name}' 的输入写入失败。",
                why=str(output.io_error),
                how="子进程的标准输入被意外关闭，请查看 stderr 中的输出。",
                stage_name=self.name,
                argv=argv,
                stderr=stderr_text,
            )
        elif output.returncode != 0:
            if output.returncode < 0:
                why = f"进程被信号 {-output.returncode} 终止。"
            else:
                why = f"进程以退出码 {output.returncode} 结束。"
            if stderr_text.strip():
                why += f" stderr：{stderr_text.strip()}"
            error = ExecutionError(
                what=f"命令 '{self.name}' 执行失败。",
                why=why,
                how="检查命令参数和输入数据，stderr 中通常有具体原因。",
                stage_name=self.name,
                argv=argv,
                stderr=stderr_text,
            )
        else:
            error = None

        return context.make_result(
            stdout=output.stdout,
            stderr=output.stderr,
            error=error,
        )


@dataclass(frozen=True)
class CommandTemplate:
    """
    命令模板：程序名加预置参数，创建后不可变。

    调用模板会创建新的 Command 单元::

        grep = Cmd("grep")
        unit = grep("-o", "Hi")   # argv == ("grep", "-o", "Hi")

    属性:
        program: 程序名
        args: 预置参数元组
    """

    program: str
    args: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return shlex.join((self.program, *self.args))

    def __call__(self, *args: str) -> Command:
        return Command(program=self.program, args=self.args + tuple(args))

    def with_args(self, *args: str) -> CommandTemplate:
        """返回追加了预置参数的新模板，原模板不变。"""
        return CommandTemplate(program=self.program, args=self.args + tuple(args))


def Cmd(name: str, *args: str) -> CommandTemplate:
    """
    创建命令模板。

    传给 Cmd 的参数会作为每个单元的前置参数，适合给常用命令预置选项::

        upper = Cmd("tr", "[:lower:]", "[:upper:]")
        print(Pipe(echo("hi"), upper()))   # HI

    参数:
        name: 程序名
        *args: 预置参数

    异常:
        PipelineError: 程序名为空
    """
    if not name:
        raise PipelineError(
            what="命令模板的程序名不能为空。",
            how="传入程序名或路径，例如 Cmd('grep')。",
        )
    return CommandTemplate(program=name, args=tuple(args))


def Runner(name: str, *args: str) -> Callable[..., str]:
    """
    创建一个直接运行命令并返回输出文本的函数。

    适合不会放进流水线、只需单独执行的一次性命令。返回的函数采用纯文本
    语义：失败时返回空字符串。

    示例::

        ls = Runner("ls", "-1")
        print(ls("/tmp"))
    """
    template = Cmd(name, *args)

    def run(*call_args: str) -> str:
        return template(*call_args).text()

    return run
