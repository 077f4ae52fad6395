"""
TracingMiddleware：OpenTelemetry 集成。

把一次执行记录为一个 Span，流水线中的每个阶段记录为它的子 Span：

    pipe_forge.stage  (echo Hi there!! | grep -o Hi | wc -w)
    ├── pipe_forge.stage  (echo Hi there!!)
    ├── pipe_forge.stage  (grep -o Hi)
    └── pipe_forge.stage  (wc -w)

没有提供 Tracer 时所有方法都是无操作，不产生任何 Span。
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from pipe_forge.models.result import ExecResult


class TracingMiddleware:
    """
    OpenTelemetry 追踪中间件。

    基本用法::

        from opentelemetry import trace

        tracing = TracingMiddleware(tracer=trace.get_tracer("pipe_forge"))
        context = ExecutionContext(tracing=tracing)

        Pipe(echo("hi"), grep("h")).execute(context=context)

    属性:
        tracer: OpenTelemetry Tracer 实例（可选）
        enabled: 是否启用追踪
    """

    def __init__(self, tracer: trace.Tracer | None = None) -> None:
        self.tracer = tracer
        self.enabled = tracer is not None

    @contextmanager
    def trace_stage(
        self,
        stage_name: str,
        input_bytes: int = 0,
    ) -> Iterator[Any]:
        """
        追踪一个阶段（单个命令或整条流水线）。

        参数:
            stage_name: 阶段名称
            input_bytes: 输入字节数

        Yields:
            Span 实例（如果未启用则为 None）
        """
        if not self.enabled:
            yield None
            return

        with self.tracer.start_as_current_span(
            "pipe_forge.stage",
            kind=SpanKind.INTERNAL,
        ) as span:
            span.set_attribute("stage_name", stage_name)
            span.set_attribute("input_bytes", input_bytes)
            yield span

    def record_result(self, span: Any, result: ExecResult) -> None:
        """把执行结果写入 Span；失败时把 Span 状态置为 ERROR。"""
        if not self.enabled or span is None:
            return

        span.set_attribute("output_bytes", len(result.stdout_bytes))
        span.set_attribute("stderr_bytes", len(result.stderr_bytes))
        if result.error is not None:
            span.set_status(Status(StatusCode.ERROR, result.error.what))
            span.record_exception(result.error)
