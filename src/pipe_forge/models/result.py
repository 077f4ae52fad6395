"""
ExecResult：一次执行的结果。

每次执行（单个命令或整条流水线）产出一个 ExecResult，提供两种访问方式：

- **完整访问** ``outcome()``：返回 ``(output, error)``。失败时 output 是
  捕获到的 stderr 而不是 stdout，这一点通过 ``output`` 属性显式暴露。
- **纯文本访问** ``text()``：只返回成功时的 stdout，失败时返回空字符串，
  永不抛出。适合直接拼进格式化输出，不适合需要感知错误的调用方。

stdout / stderr 以原始字节保存，只在访问时按 encoding 解码。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pipe_forge.errors import ExecutionError


@dataclass(frozen=True)
class ExecResult:
    """
    执行结果（不可变）。

    属性:
        stdout_bytes: 捕获的标准输出（原始字节）
        stderr_bytes: 捕获的标准错误（原始字节）
        error: 执行失败时的 ExecutionError，成功时为 None
        encoding: 解码使用的字符集
        decode_errors: 解码错误处理策略（同 bytes.decode 的 errors 参数）
    """

    stdout_bytes: bytes = b""
    stderr_bytes: bytes = b""
    error: ExecutionError | None = None
    encoding: str = "utf-8"
    decode_errors: str = "replace"

    @property
    def ok(self) -> bool:
        """是否执行成功。"""
        return self.error is None

    @property
    def stdout(self) -> str:
        """解码后的标准输出。"""
        return self.stdout_bytes.decode(self.encoding, self.decode_errors)

    @property
    def stderr(self) -> str:
        """解码后的标准错误。"""
        return self.stderr_bytes.decode(self.encoding, self.decode_errors)

    @property
    def output(self) -> str:
        """
        结果槽位中的文本：成功时为 stdout，失败时为 stderr。

        调用方必须先检查 ``ok`` 或 ``error``，才能知道这段文本来自哪个流。
        """
        return self.stderr if self.error is not None else self.stdout

    def outcome(self) -> tuple[str, ExecutionError | None]:
        """完整访问：返回 ``(output, error)``。"""
        return self.output, self.error

    def text(self) -> str:
        """纯文本访问：成功时返回 stdout，失败时返回空字符串。"""
        if self.error is not None:
            return ""
        return self.stdout

    def check(self) -> str:
        """
        成功时返回 stdout，失败时抛出捕获到的 ExecutionError。

        异常:
            ExecutionError: 执行失败
        """
        if self.error is not None:
            raise self.error
        return self.stdout
