"""
配置驱动示例：从 YAML 加载命名流水线，并收集阶段指标。

运行方式：
    python examples/config_demo.py
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pipe_forge import (
    ExecutionContext,
    MetricsCollector,
    PipeForgeError,
    create_pipeline,
    load_config,
)

console = Console(highlight=False, emoji=False)

CONFIG_PATH = Path(__file__).parent / "pipe_forge.yaml"

TEXT = """\
Hi there!!
so far, so good
far away
so far, so good
"""


def main() -> None:
    try:
        config = load_config(CONFIG_PATH)
    except PipeForgeError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return

    collector = MetricsCollector()
    context = ExecutionContext.from_config(config.exec, metrics=collector)

    for name in config.pipelines:
        pipeline = create_pipeline(config, name)
        output, error = pipeline.run(TEXT, context)

        console.rule(f"[bold]{escape(name)}[/bold]  {escape(pipeline.name)}")
        if error is None:
            console.print(escape(output.rstrip("\n")))
        else:
            console.print(f"[red]{escape(error.what)}[/red]")

    table = Table(title="阶段耗时汇总")
    table.add_column("阶段")
    table.add_column("次数", justify="right")
    table.add_column("P50 (ms)", justify="right")

    for stage in collector.stage_names():
        stats = collector.stats(stage)
        table.add_row(escape(stage), str(stats.runs), f"{stats.p50_ms:.1f}")

    console.print(table)


if __name__ == "__main__":
    main()
