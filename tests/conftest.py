"""
测试套件共享 Fixtures 和配置。

本文件定义了所有测试中可复用的 fixtures 和辅助数据。
测试依赖常见的 POSIX 工具：echo、grep、wc、tr、cat、sh、printf。
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pipe_forge.command.template import Cmd, CommandTemplate
from pipe_forge.observability.metrics import MetricsCollector
from pipe_forge.pipeline.base import ExecutionContext

SW_CRAWL = """
A long time ago, in a galaxy far, far away....

It is a period of civil war. Rebel
spaceships, striking from a hidden
base, have won their first victory
against the evil Galactic Empire.

During the battle, Rebel spies managed
to steal secret plans to the Empire's
ultimate weapon, the Death Star, an
armored space station with enough
power to destroy an entire planet.

Pursued by the Empire's sinister agents,
Princess Leia races home aboard her
starship, custodian of the stolen plans
that can save her people and restore
freedom to the galaxy..."""

FAR_LINE = "A long time ago, in a galaxy far, far away....\n"


# === 命令模板 Fixtures ===


@pytest.fixture
def echo() -> CommandTemplate:
    return Cmd("echo")


@pytest.fixture
def grep() -> CommandTemplate:
    return Cmd("grep")


@pytest.fixture
def wc() -> CommandTemplate:
    return Cmd("wc")


@pytest.fixture
def cat() -> CommandTemplate:
    return Cmd("cat")


@pytest.fixture
def upper() -> CommandTemplate:
    """大写转换（预置了 tr 的两个参数）。"""
    return Cmd("tr", "[:lower:]", "[:upper:]")


@pytest.fixture
def sh() -> CommandTemplate:
    return Cmd("sh", "-c")


# === 数据 Fixtures ===


@pytest.fixture
def sw_crawl() -> str:
    return SW_CRAWL


@pytest.fixture
def far_line() -> str:
    """开场字幕中唯一包含 far 的一行。"""
    return FAR_LINE


@pytest.fixture
def crawl_file(tmp_path: Path) -> Path:
    """写有开场字幕的临时文件。"""
    path = tmp_path / "crawl.txt"
    path.write_text(SW_CRAWL, encoding="utf-8")
    return path


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def metrics_context(metrics: MetricsCollector) -> ExecutionContext:
    """附带指标收集器的执行上下文。"""
    return ExecutionContext(metrics=metrics)


# === 配置 Fixtures ===


SAMPLE_CONFIG = """\
version: "1.0"
name: sample
description: 测试用配置
exec:
  encoding: utf-8
commands:
  grep:
    program: grep
    description: 行过滤
  upper: [tr, "[:lower:]", "[:upper:]"]
  count_words: [wc, -w]
pipelines:
  shout_far:
    description: 过滤含 far 的行并转大写
    stages:
      - command: grep
        args: [far]
      - upper
  count_hi:
    input: "Hi there!!"
    stages:
      - command: grep
        args: [-o, Hi]
      - count_words
"""


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """合法的示例配置文件。"""
    path = tmp_path / "pipe_forge.yaml"
    path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return path
