"""
Pipe Forge 命令工厂：命令模板与输入源。
"""

from pipe_forge.command.sources import Dump, DumpFile, Read, ReadStream
from pipe_forge.command.template import Cmd, Command, CommandTemplate, Runner

__all__ = [
    "Cmd",
    "Command",
    "CommandTemplate",
    "Dump",
    "DumpFile",
    "Read",
    "ReadStream",
    "Runner",
]
