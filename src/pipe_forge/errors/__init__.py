"""
Pipe Forge 结构化异常体系。

所有异常遵循"三段式"规范：What / Why / How to fix。
"""

from pipe_forge.errors.exceptions import (
    CommandNotFoundError,
    ConfigValidationError,
    ExecutionError,
    PipeForgeError,
    PipelineError,
    ConfigLoadError,
)

__all__ = [
    "CommandNotFoundError",
    "ConfigValidationError",
    "ExecutionError",
    "PipeForgeError",
    "PipelineError",
    "ConfigLoadError",
]
