"""
MetricsCollector：阶段级执行指标。

每执行一个单元（命令、输入源或整条流水线）记录一条 StageSample：
耗时、是否成功、产出的 stdout 字节数。样本保存在定长的 deque 中，
超出容量时最早的样本被丢弃。

按阶段名汇总为 StageStats，耗时给出 P50 / P95 / P99（线性插值）。
"""

from __future__ import annotations

import math
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class StageSample:
    """
    一次单元执行的样本。

    属性:
        stage: 阶段名称（命令行、dump:路径 或 "a | b" 形式的流水线名）
        duration_ms: 耗时（含进程启动、输入写入、输出读取）
        ok: 是否成功
        output_bytes: stdout 字节数
        timestamp: 记录时间
    """

    stage: str
    duration_ms: float
    ok: bool
    output_bytes: int = 0
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class StageStats:
    """
    一组样本的汇总。

    stage 为 None 表示汇总了所有阶段。
    """

    stage: str | None
    runs: int
    failures: int
    output_bytes: int
    min_ms: float
    max_ms: float
    mean_ms: float
    p50_ms: float
    p95_ms: float
    p99_ms: float

    @property
    def failure_rate(self) -> float:
        return self.failures / self.runs if self.runs else 0.0


class MetricsCollector:
    """
    阶段指标收集器。

    基本用法::

        collector = MetricsCollector()
        context = ExecutionContext(metrics=collector)

        Pipe(echo("hi"), grep("h")).execute(context=context)

        stats = collector.stats("grep h")
        print(f"grep 耗时 P95: {stats.p95_ms:.1f}ms，失败 {stats.failures} 次")

    属性:
        samples: 样本环形缓冲区
    """

    def __init__(self, max_samples: int = 10000) -> None:
        self.samples: deque[StageSample] = deque(maxlen=max_samples)

    def __len__(self) -> int:
        return len(self.samples)

    def record_stage(
        self,
        stage_name: str,
        duration_ms: float,
        ok: bool,
        output_bytes: int = 0,
    ) -> None:
        """记录一次单元执行。"""
        self.samples.append(
            StageSample(
                stage=stage_name,
                duration_ms=duration_ms,
                ok=ok,
                output_bytes=output_bytes,
            )
        )

    def stats(self, stage: str | None = None) -> StageStats | None:
        """
        汇总指定阶段（None 为全部阶段）的样本。

        返回:
            StageStats，没有匹配的样本时返回 None
        """
        matched = [s for s in self.samples if stage is None or s.stage == stage]
        if not matched:
            return None

        durations = sorted(s.duration_ms for s in matched)
        return StageStats(
            stage=stage,
            runs=len(matched),
            failures=sum(1 for s in matched if not s.ok),
            output_bytes=sum(s.output_bytes for s in matched if s.ok),
            min_ms=durations[0],
            max_ms=durations[-1],
            mean_ms=sum(durations) / len(durations),
            p50_ms=percentile(durations, 0.50),
            p95_ms=percentile(durations, 0.95),
            p99_ms=percentile(durations, 0.99),
        )

    def stage_names(self) -> list[str]:
        """按首次出现的顺序返回所有阶段名。"""
        return list(dict.fromkeys(s.stage for s in self.samples))

    def failed(self, stage: str) -> bool:
        """该阶段是否失败过。"""
        return any(s.stage == stage and not s.ok for s in self.samples)

    def export(self) -> list[dict[str, Any]]:
        """导出全部样本（按记录顺序）。"""
        return [asdict(s) for s in self.samples]

    def reset(self) -> None:
        self.samples.clear()


def percentile(ordered: list[float], fraction: float) -> float:
    """已排序数据的百分位数，fraction 取 0.0 ~ 1.0，相邻两点线性插值。"""
    if not ordered:
        return 0.0
    position = (len(ordered) - 1) * min(max(fraction, 0.0), 1.0)
    lower = math.floor(position)
    upper = math.ceil(position)
    return ordered[lower] + (ordered[upper] - ordered[lower]) * (position - lower)
