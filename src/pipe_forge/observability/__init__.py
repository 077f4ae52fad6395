"""
可观测性模块：阶段指标与分布式追踪。

1. **MetricsCollector（指标收集）**：每次执行一条样本（耗时、成败、输出字节数），
   按阶段汇总，提供 P50/P95/P99 耗时。

2. **TracingMiddleware（分布式追踪）**：OpenTelemetry 集成,
   每次执行与每个阶段各记录一个 Span。

两者都通过 ExecutionContext 接入::

    context = ExecutionContext(
        metrics=MetricsCollector(),
        tracing=TracingMiddleware(tracer=trace.get_tracer("pipe_forge")),
    )
    result = pipeline.execute(context=context)
"""

from __future__ import annotations

from pipe_forge.observability.metrics import MetricsCollector, StageSample, StageStats
from pipe_forge.observability.tracing import TracingMiddleware

__all__ = [
    "MetricsCollector",
    "StageSample",
    "StageStats",
    "TracingMiddleware",
]
