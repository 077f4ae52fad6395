"""
结构化异常体系：错误信息即文档。

每条异常遵循"三段式"规范：
1. What went wrong（发生了什么）
2. Why it happened（为什么发生）
3. How to fix it（怎么修）

示例::

    ExecutionError(
        what="命令 'grep far' 执行失败。",
        why="进程以退出码 2 结束。",
        how="检查命令参数，或查看 stderr 中的错误输出。",
        stage_name="grep far",
        argv=("grep", "far"),
        stderr="grep: invalid option",
    )
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class PipeForgeError(Exception):
    """
    Pipe Forge 异常基类。

    所有 Pipe Forge 异常都继承自此类，支持三段式错误消息。

    属性:
        what: 发生了什么
        why: 为什么发生
        how: 怎么修复
        details: 额外的上下文信息（用于调试）
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.what = what
        self.why = why
        self.how = how
        self.details = details or {}

        parts = [what]
        if why:
            parts.append(f"→ 原因：{why}")
        if how:
            parts.append(f"→ 修复建议：{how}")

        self.full_message = "\n".join(parts)
        super().__init__(self.full_message)

    def __str__(self) -> str:
        return self.full_message

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式，用于 JSON 输出。"""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "what": self.what,
        }
        if self.why:
            result["why"] = self.why
        if self.how:
            result["how"] = self.how
        if self.details:
            result["details"] = self.details
        return result


# === 执行相关异常 ===


class ExecutionError(PipeForgeError):
    """
    执行失败异常：唯一的"执行失败"类别。

    以下三种情况统一报告为 ExecutionError，调用方只能通过 stderr 文本区分：

    - 启动失败：程序不存在、没有执行权限
    - 非零退出：进程运行了，但以非零状态结束
    - I/O 失败：写入 stdin 或读取输出时流被意外关闭

    ExecutionError 默认作为结果的一部分**返回**给调用方，
    只有 ``ExecResult.check()`` / ``Executable.check_output()`` 会抛出它。

    示例::

        raise ExecutionError(
            what="命令 'false' 执行失败。",
            why="进程以退出码 1 结束。",
            stage_name="false",
            argv=("false",),
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        stage_name: str = "",
        argv: Sequence[str] = (),
        stderr: str = "",
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {
            "stage_name": stage_name,
            "argv": list(argv),
        }
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.stage_name = stage_name
        self.argv = tuple(argv)
        self.stderr = stderr


# === 流水线相关异常 ===


class PipelineError(PipeForgeError):
    """
    流水线构建异常。

    当传给 Pipe() 的对象不是可执行单元，或 Cmd() 的程序名为空时抛出。
    这是编程错误，与运行期的 ExecutionError 不同，构建时立即抛出。
    """

    pass


# === 配置相关异常 ===


class ConfigValidationError(PipeForgeError):
    """
    配置校验异常。

    当 YAML 配置文件格式错误或字段不合法时抛出。

    示例::

        raise ConfigValidationError(
            what="配置文件 'pipe_forge.yaml' 校验失败。",
            why="字段 'commands → upper → program' 不能为空。",
            how="为该命令填写可执行程序名，例如 program: tr",
            config_path="pipe_forge.yaml",
            field_path="commands.upper.program",
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        config_path: str = "",
        field_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {
            "config_path": config_path,
            "field_path": field_path,
        }
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.config_path = config_path
        self.field_path = field_path


class ConfigLoadError(PipeForgeError):
    """
    配置加载异常。

    当配置文件不存在、格式错误或无法解析时抛出。
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        file_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {"file_path": file_path}
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.file_path = file_path


class CommandNotFoundError(PipeForgeError):
    """
    命名命令或命名流水线未定义。

    示例::

        raise CommandNotFoundError(
            what="未找到流水线 'shout'。",
            why="配置文件中没有名为 'shout' 的流水线。",
            how="可用流水线：upper_far, count_hi",
            name="shout",
            available=["upper_far", "count_hi"],
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        name: str = "",
        available: list[str] | None = None,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = {"name": name}
        if available:
            details["available"] = available
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.name = name
