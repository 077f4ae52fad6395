"""
Pipe Forge 流水线模块。
"""

from pipe_forge.pipeline.base import (
    ExecutionContext,
    Executable,
    Pipe,
    Pipeline,
    PipeWith,
)

__all__ = ["ExecutionContext", "Executable", "Pipe", "PipeWith", "Pipeline"]
