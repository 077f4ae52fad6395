"""
流水线吞吐基准测试。

验证两项性能指标：
- 8 MB 数据穿过三个 cat 阶段的耗时 < 5 秒
- 单个短命令的启动开销 P50 < 50 ms

运行方式::

    python -m pytest benchmarks/test_bench_pipeline.py -v -s
"""

from __future__ import annotations

import statistics
import time

import pytest

from pipe_forge import Cmd, ExecutionContext, MetricsCollector, PipeWith


@pytest.mark.slow
class TestPipelineThroughput:
    """大数据量吞吐基准测试。"""

    PAYLOAD_BYTES = 8 * 1024 * 1024
    MAX_SECONDS = 5.0

    def test_large_payload_through_three_stages(self) -> None:
        cat = Cmd("cat")
        payload = b"0123456789abcdef" * (self.PAYLOAD_BYTES // 16)

        collector = MetricsCollector()
        context = ExecutionContext(metrics=collector)

        start = time.perf_counter()
        result = PipeWith(payload, cat(), cat(), cat()).execute(context=context)
        elapsed = time.perf_counter() - start

        stats = collector.stats("cat")

        print(
            f"\n{'='*60}\n"
            f"流水线吞吐基准（{self.PAYLOAD_BYTES // 1024 // 1024} MB × 3 阶段）\n"
            f"{'='*60}\n"
            f"  总耗时:       {elapsed:.2f} s\n"
            f"  单阶段 P50:   {stats.p50_ms:.1f} ms\n"
            f"  单阶段最大:   {stats.max_ms:.1f} ms\n"
            f"{'='*60}"
        )

        assert result.ok
        assert len(result.stdout_bytes) == len(payload)
        assert elapsed < self.MAX_SECONDS, (
            f"耗时 {elapsed:.2f}s 超过阈值 {self.MAX_SECONDS:.1f}s"
        )


@pytest.mark.slow
class TestSpawnOverhead:
    """进程启动开销基准测试。"""

    MAX_P50_MS = 50.0
    WARMUP_ROUNDS = 3
    BENCHMARK_ROUNDS = 30

    def test_short_command_overhead(self) -> None:
        true = Cmd("true")

        for _ in range(self.WARMUP_ROUNDS):
            true().execute()

        latencies: list[float] = []
        for _ in range(self.BENCHMARK_ROUNDS):
            start = time.perf_counter()
            true().execute()
            latencies.append((time.perf_counter() - start) * 1000)

        p50 = statistics.median(latencies)
        print(f"\n单命令启动开销 P50: {p50:.2f} ms（{self.BENCHMARK_ROUNDS} 轮）")

        assert p50 < self.MAX_P50_MS
