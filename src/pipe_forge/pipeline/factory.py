"""
从配置创建命令模板与流水线。

配置文件中的命名命令变成 CommandTemplate，命名流水线变成 Pipeline::

    config = load_config("pipe_forge.yaml")
    pipeline = create_pipeline(config, "shout_far")
    print(pipeline.text(crawl))
"""

from __future__ import annotations

import logging

from pipe_forge.command.template import Cmd, CommandTemplate
from pipe_forge.config.schema import ForgeConfig
from pipe_forge.errors import CommandNotFoundError
from pipe_forge.pipeline.base import Pipeline

logger = logging.getLogger(__name__)


def create_templates(config: ForgeConfig) -> dict[str, CommandTemplate]:
    """为配置中的每个命名命令创建命令模板。"""
    return {
        name: Cmd(command.program, *command.args)
        for name, command in config.commands.items()
    }


def create_pipeline(config: ForgeConfig, name: str) -> Pipeline:
    """
    根据配置中的命名流水线创建 Pipeline。

    参数:
        config: 已校验的配置
        name: 流水线名称

    返回:
        Pipeline 实例（配置了 input 时已绑定输入）

    异常:
        CommandNotFoundError: 流水线或其引用的命令未定义
    """
    if name not in config.pipelines:
        available = sorted(config.pipelines)
        raise CommandNotFoundError(
            what=f"未找到流水线 '{name}'。",
            why="配置中没有该名称的流水线。",
            how=f"可用流水线：{', '.join(available) or '（无）'}。"
                "使用 'pipe-forge list' 查看配置内容。",
            name=name,
            available=available,
        )

    templates = create_templates(config)
    pipeline_config = config.pipelines[name]

    stages = []
    for stage in pipeline_config.stages:
        template = templates.get(stage.command)
        if template is None:
            # 直接构造而未经校验的 ForgeConfig 可能引用未定义的命令
            raise CommandNotFoundError(
                what=f"流水线 '{name}' 引用了未定义的命令 '{stage.command}'。",
                why="配置中没有该名称的命令。",
                how=f"已定义的命令：{', '.join(sorted(templates)) or '（无）'}。",
                name=stage.command,
                available=sorted(templates),
            )
        stages.append(template(*stage.args))

    logger.debug("创建流水线 %s：%d 个阶段", name, len(stages))
    return Pipeline(tuple(stages), input=pipeline_config.input)
