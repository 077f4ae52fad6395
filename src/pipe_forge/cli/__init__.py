"""
Pipe Forge CLI：命令行工具。

- run: 运行配置文件中的命名流水线
- exec: 运行单个命令
- validate: 校验配置文件
- list: 列出命令和流水线
- version: 显示版本
"""

from pipe_forge.cli.app import app, main

__all__ = ["app", "main"]
