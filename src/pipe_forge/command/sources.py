"""
输入源单元：把文件或流的内容作为自己的 stdout。

两种输入源都忽略自己的 stdin，通常放在流水线的第一位::

    # 等价于 $ cat crawl.txt | grep far
    Pipe(Dump("crawl.txt"), grep("far"))

    with open("crawl.txt", "rb") as f:
        Pipe(Read(f), grep("far"))
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any

from pipe_forge.errors import ExecutionError
from pipe_forge.models.result import ExecResult
from pipe_forge.pipeline.base import ExecutionContext, Executable


@dataclass(frozen=True)
class DumpFile(Executable):
    """
    读取文件全部内容作为 stdout。

    文件在每次执行时重新读取。文件不存在或不可读时返回 ExecutionError。
    """

    path: str

    @property
    def name(self) -> str:
        return f"dump:{self.path}"

    def _run_stage(self, stdin: bytes, context: ExecutionContext) -> ExecResult:
        try:
            data = Path(self.path).read_bytes()
        except (OSError, ValueError) as e:
            return context.make_result(
                error=ExecutionError(
                    what=f"无法读取文件 '{self.path}'。",
                    why=str(e),
                    how="检查文件路径和读取权限。",
                    stage_name=self.name,
                )
            )
        return context.make_result(stdout=data)


@dataclass(frozen=True)
class ReadStream(Executable):
    """
    读取流的全部内容作为 stdout。

    流在第一次执行时被读完，再次执行时输出为空。
    str 内容按 ExecutionContext.encoding 编码。
    """

    stream: IO[Any]

    @property
    def name(self) -> str:
        return f"read:{getattr(self.stream, 'name', '<stream>')}"

    def _run_stage(self, stdin: bytes, context: ExecutionContext) -> ExecResult:
        try:
            data = context.encode(self.stream.read())
        except (OSError, ValueError) as e:
            # 已关闭的文件对象读取、str 内容无法编码时都是 ValueError
            return context.make_result(
                error=ExecutionError(
                    what=f"无法读取输入流 '{self.name}'。",
                    why=str(e),
                    how="确认流已打开且可读。",
                    stage_name=self.name,
                )
            )
        return context.make_result(stdout=data)


def Dump(filename: str | Path) -> DumpFile:
    """返回一个把文件内容作为 stdout 的单元。"""
    return DumpFile(path=str(filename))


def Read(stream: IO[Any]) -> ReadStream:
    """返回一个把流内容作为 stdout 的单元。"""
    return ReadStream(stream=stream)
