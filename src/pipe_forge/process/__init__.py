"""
Pipe Forge 子进程执行模块。
"""

from pipe_forge.process.runner import ProcessOutput, run_process

__all__ = ["ProcessOutput", "run_process"]
