"""
Pipeline 基础结构：可执行单元基类、执行上下文与流水线编排器。

一条流水线是一组按顺序执行的可执行单元：

    echo("Hi there!!") | grep("-o", "Hi") | wc("-w")

每个单元：
- 接收上一个单元捕获的 stdout 作为自己的 stdin
- 产出一个 ExecResult（stdout、stderr、error）
- 可以被单独执行，也可以嵌套进另一条流水线

执行规则：
1. 携带缓冲区初始为调用方给出的输入（或流水线绑定的输入，或空）
2. 依次执行每个单元，stdout 成为新的携带缓冲区，stderr 单独捕获
3. 某个单元失败时立即停止，后续单元不再执行，
   该单元的 stderr 和 error 就是整条流水线的结果
4. 全部成功时，最后的携带缓冲区就是流水线的输出

与真实 shell 不同，各阶段严格串行执行，中间结果整块缓存在内存中。
"""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Union

from pipe_forge.errors import ExecutionError, PipelineError
from pipe_forge.models.result import ExecResult

if TYPE_CHECKING:
    from pipe_forge.config.schema import ExecConfig
    from pipe_forge.observability.metrics import MetricsCollector
    from pipe_forge.observability.tracing import TracingMiddleware

logger = logging.getLogger(__name__)

InputSource = Union[str, bytes, IO[Any]]


@dataclass
class ExecutionContext:
    """
    执行上下文：一次执行期间各单元共享的设置。

    属性:
        encoding: stdout / stderr 的解码字符集，也用于编码 str 输入
        decode_errors: 解码错误处理策略
        cwd: 默认工作目录（单元自身的 cwd 优先）
        env: 追加到子进程环境中的变量
        inherit_env: 是否继承当前进程的环境变量
        debug: 是否输出阶段级调试日志
        metrics: 指标收集器（可选）
        tracing: 追踪中间件（可选）
    """

    encoding: str = "utf-8"
    decode_errors: str = "replace"
    cwd: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    inherit_env: bool = True
    debug: bool = False
    metrics: MetricsCollector | None = None
    tracing: TracingMiddleware | None = None

    @classmethod
    def from_config(cls, config: ExecConfig, **kwargs: Any) -> ExecutionContext:
        """根据配置文件的 exec 段创建上下文，kwargs 用于附加 metrics / tracing。"""
        return cls(
            encoding=config.encoding,
            decode_errors=config.decode_errors,
            cwd=config.cwd,
            env=dict(config.env),
            inherit_env=config.inherit_env,
            debug=config.debug,
            **kwargs,
        )

    def encode(self, data: str | bytes) -> bytes:
        """把 str 输入编码为字节，bytes 原样返回。"""
        if isinstance(data, str):
            return data.encode(self.encoding)
        return data

    def make_result(
        self,
        stdout: bytes = b"",
        stderr: bytes = b"",
        error: ExecutionError | None = None,
    ) -> ExecResult:
        """创建使用本上下文解码设置的 ExecResult。"""
        return ExecResult(
            stdout_bytes=stdout,
            stderr_bytes=stderr,
            error=error,
            encoding=self.encoding,
            decode_errors=self.decode_errors,
        )

    def process_env(self, overrides: Mapping[str, str] | None = None) -> dict[str, str] | None:
        """
        计算子进程的完整环境变量。

        返回 None 表示直接继承当前进程环境（没有任何覆盖时）。
        """
        merged = dict(self.env)
        if overrides:
            merged.update(overrides)

        if not self.inherit_env:
            return merged
        if not merged:
            return None
        return {**os.environ, **merged}

    def process_cwd(self, override: str | Path | None = None) -> str | Path | None:
        """计算子进程的工作目录，单元自身的设置优先。"""
        return override if override is not None else self.cwd


class Executable(ABC):
    """
    可执行单元基类。

    子类只需实现 ``name`` 和 ``_run_stage()``。基类提供：

    - ``execute()``：返回完整的 ExecResult
    - ``run()``：返回 ``(output, error)``，失败时 output 是 stderr
    - ``text()`` / ``str()``：只返回成功的 stdout，失败时返回空字符串
    - ``check_output()``：成功返回 stdout，失败抛出 ExecutionError
    - ``|`` 运算符：连接成流水线

    最小实现示例::

        @dataclass(frozen=True)
        class Upper(Executable):
            @property
            def name(self) -> str:
                return "upper"

            def _run_stage(self, stdin, context):
                return context.make_result(stdout=stdin.upper())
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """单元名称，用于日志、指标和错误信息。"""
        ...

    @abstractmethod
    def _run_stage(self, stdin: bytes, context: ExecutionContext) -> ExecResult:
        """
        执行本单元。

        参数:
            stdin: 输入字节（上一阶段的 stdout）
            context: 执行上下文

        返回:
            ExecResult。失败通过 error 字段返回，不抛出。
        """
        ...

    # --- 执行入口 ---

    def execute(
        self,
        stdin: str | bytes = b"",
        context: ExecutionContext | None = None,
    ) -> ExecResult:
        """
        以给定输入执行本单元，阻塞到完成。

        参数:
            stdin: 标准输入（str 按 context.encoding 编码）
            context: 执行上下文（None 使用默认设置）

        返回:
            ExecResult
        """
        ctx = context or ExecutionContext()
        try:
            data = ctx.encode(stdin)
        except UnicodeEncodeError as e:
            return _encoding_failure(self.name, ctx, e)
        return self._invoke(data, ctx)

    def run(
        self,
        stdin: str | bytes = b"",
        context: ExecutionContext | None = None,
    ) -> tuple[str, ExecutionError | None]:
        """
        完整访问：成功返回 ``(stdout, None)``，失败返回 ``(stderr, error)``。
        """
        return self.execute(stdin, context).outcome()

    def text(
        self,
        stdin: str | bytes = b"",
        context: ExecutionContext | None = None,
    ) -> str:
        """纯文本访问：成功返回 stdout，失败返回空字符串，永不抛出执行错误。"""
        return self.execute(stdin, context).text()

    def check_output(
        self,
        stdin: str | bytes = b"",
        context: ExecutionContext | None = None,
    ) -> str:
        """
        执行并返回 stdout。

        异常:
            ExecutionError: 执行失败
        """
        return self.execute(stdin, context).check()

    def __str__(self) -> str:
        return self.text()

    # --- 组合 ---

    def with_input(self, source: InputSource) -> Pipeline:
        """
        绑定输入源，返回新的流水线，原单元不变。

        参数:
            source: 字面文本（str / bytes）或可读流
        """
        if isinstance(source, (str, bytes)):
            return Pipeline((self,), input=source)

        from pipe_forge.command.sources import ReadStream

        return Pipeline((ReadStream(source), self))

    def __or__(self, other: object) -> Pipeline:
        if not isinstance(other, Executable):
            return NotImplemented
        return Pipeline((self, other))

    def __ror__(self, other: object) -> Pipeline:
        if isinstance(other, (str, bytes)):
            return Pipeline((self,), input=other)
        return NotImplemented

    # --- 内部方法 ---

    def _invoke(self, stdin: bytes, context: ExecutionContext) -> ExecResult:
        """执行本单元并记录日志、指标和追踪。"""
        name = self.name
        start_time = time.perf_counter()

        if context.debug:
            logger.debug("执行阶段: %s（输入 %d 字节）", name, len(stdin))

        if context.tracing is not None:
            with context.tracing.trace_stage(name, len(stdin)) as span:
                result = self._run_stage(stdin, context)
                context.tracing.record_result(span, result)
        else:
            result = self._run_stage(stdin, context)

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        if context.metrics is not None:
            context.metrics.record_stage(
                name,
                elapsed_ms,
                ok=result.ok,
                output_bytes=len(result.stdout_bytes),
            )

        if context.debug:
            if result.ok:
                logger.debug(
                    "阶段 %s 完成：%d → %d 字节（%.1fms）",
                    name,
                    len(stdin),
                    len(result.stdout_bytes),
                    elapsed_ms,
                )
            else:
                logger.debug("阶段 %s 失败（%.1fms）", name, elapsed_ms)

        return result


@dataclass(frozen=True)
class Pipeline(Executable):
    """
    流水线：按顺序连接的可执行单元，本身也是可执行单元。

    基本用法::

        echo = Cmd("echo")
        grep = Cmd("grep")
        wc = Cmd("wc")

        # 等价于 $ echo Hi there!! | grep -o Hi | wc -w
        print(Pipe(echo("Hi there!!"), grep("-o", "Hi"), wc("-w")))

    绑定输入::

        PipeWith(text, grep("far"), upper())

    属性:
        stages: 阶段元组（创建后不可变）
        input: 绑定的输入（None 表示使用 execute() 传入的 stdin）
    """

    stages: tuple[Executable, ...] = ()
    input: str | bytes | None = None

    @property
    def name(self) -> str:
        if not self.stages:
            return "<empty>"
        return " | ".join(stage.name for stage in self.stages)

    @property
    def stage_names(self) -> list[str]:
        """返回所有阶段的名称列表。"""
        return [stage.name for stage in self.stages]

    def then(self, *units: Executable) -> Pipeline:
        """返回追加了阶段的新流水线，原流水线不变。"""
        _check_units(units)
        return Pipeline(self.stages + tuple(units), input=self.input)

    def with_input(self, source: InputSource) -> Pipeline:
        """重新绑定输入，替换已绑定的输入（如有）。"""
        if isinstance(source, (str, bytes)):
            return replace(self, input=source)

        from pipe_forge.command.sources import ReadStream

        return Pipeline((ReadStream(source), *self.stages))

    def __or__(self, other: object) -> Pipeline:
        if not isinstance(other, Executable):
            return NotImplemented
        return self.then(other)

    def __ror__(self, other: object) -> Pipeline:
        if isinstance(other, (str, bytes)):
            return replace(self, input=other)
        return NotImplemented

    def __len__(self) -> int:
        return len(self.stages)

    def _run_stage(self, stdin: bytes, context: ExecutionContext) -> ExecResult:
        carried = stdin
        if self.input is not None:
            try:
                carried = context.encode(self.input)
            except UnicodeEncodeError as e:
                return _encoding_failure(self.name, context, e)

        for stage in self.stages:
            result = stage._invoke(carried, context)
            if result.error is not None:
                return result
            carried = result.stdout_bytes

        return context.make_result(stdout=carried)


def Pipe(*units: Executable) -> Pipeline:
    """
    连接一组可执行单元：每个单元的 stdout 成为下一个单元的 stdin。

    任一单元失败时不再执行后续单元，返回该单元的 stderr 和 error。

    异常:
        PipelineError: 参数中有非可执行单元
    """
    _check_units(units)
    return Pipeline(tuple(units))


def PipeWith(stdin: str | bytes, *units: Executable) -> Pipeline:
    """
    与 Pipe 相同，但以 stdin 作为第一个单元的输入。

    异常:
        PipelineError: 参数中有非可执行单元
    """
    _check_units(units)
    return Pipeline(tuple(units), input=stdin)


def _check_units(units: tuple[Any, ...]) -> None:
    for index, unit in enumerate(units):
        if not isinstance(unit, Executable):
            raise PipelineError(
                what=f"流水线第 {index + 1} 个参数不是可执行单元。",
                why=f"实际类型为 {type(unit).__name__}。",
                how="使用 Cmd('prog')(...)、Dump(path) 或 Read(stream) 创建单元。"
                    "如果传入的是命令模板，请先调用它，例如 grep('far') 而不是 grep。",
            )


def _encoding_failure(
    stage_name: str, context: ExecutionContext, error: UnicodeEncodeError
) -> ExecResult:
    return context.make_result(
        error=ExecutionError(
            what=f"'{stage_name}' 的输入无法按 {context.encoding} 编码。",
            why=str(error),
            how="改用 bytes 输入，或在 exec.encoding 中配置能表示这些字符的编码。",
            stage_name=stage_name,
        )
    )
