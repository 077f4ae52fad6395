"""
Pipe Forge：在 Python 中像写 shell 管道一样组合外部命令。

定义可复用的命令模板，调用时绑定参数，再把多个命令连接起来：
上一个命令的 stdout 成为下一个命令的 stdin，收集最终输出，
并返回遇到的第一个失败。

快速上手::

    from pipe_forge import Cmd, Pipe

    echo = Cmd("echo")
    grep = Cmd("grep")
    wc = Cmd("wc")

    # 等价于 $ echo Hi there!! | grep -o Hi | wc -w
    print(Pipe(echo("Hi there!!"), grep("-o", "Hi"), wc("-w")))

需要感知错误时::

    output, error = Pipe(echo("hi"), grep("nothing")).run()
    if error is not None:
        print("失败：", output)   # 失败时 output 是 stderr

也可以用 ``|`` 连接::

    "Hi there" | grep("-o", "Hi") | wc("-w")
"""

from pipe_forge.command import (
    Cmd,
    Command,
    CommandTemplate,
    Dump,
    DumpFile,
    Read,
    ReadStream,
    Runner,
)
from pipe_forge.config import ForgeConfig, load_config
from pipe_forge.errors import (
    CommandNotFoundError,
    ConfigValidationError,
    ExecutionError,
    PipeForgeError,
    PipelineError,
    ConfigLoadError,
)
from pipe_forge.models import ExecResult
from pipe_forge.observability import MetricsCollector, TracingMiddleware
from pipe_forge.pipeline import ExecutionContext, Executable, Pipe, Pipeline, PipeWith
from pipe_forge.pipeline.factory import create_pipeline, create_templates

__version__ = "0.1.0"

__all__ = [
    # 命令工厂
    "Cmd",
    "Command",
    "CommandTemplate",
    "Runner",
    "Dump",
    "DumpFile",
    "Read",
    "ReadStream",
    # 流水线
    "Executable",
    "ExecutionContext",
    "Pipe",
    "PipeWith",
    "Pipeline",
    "create_pipeline",
    "create_templates",
    # 结果
    "ExecResult",
    # 配置
    "ForgeConfig",
    "load_config",
    # 可观测性
    "MetricsCollector",
    "TracingMiddleware",
    # 异常
    "CommandNotFoundError",
    "ConfigValidationError",
    "ExecutionError",
    "PipeForgeError",
    "PipelineError",
    "ConfigLoadError",
    # 版本
    "__version__",
]
