"""
Pipe Forge 数据模型。
"""

from pipe_forge.models.result import ExecResult

__all__ = ["ExecResult"]
