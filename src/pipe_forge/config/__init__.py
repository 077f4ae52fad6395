"""
Pipe Forge 配置模块。

提供 YAML 配置加载、Schema 校验。
"""

from pipe_forge.config.loader import find_config_file, load_config, validate_config_file
from pipe_forge.config.schema import (
    CommandConfig,
    ExecConfig,
    ForgeConfig,
    PipelineConfig,
    StageConfig,
)

__all__ = [
    "CommandConfig",
    "ExecConfig",
    "ForgeConfig",
    "PipelineConfig",
    "StageConfig",
    "find_config_file",
    "load_config",
    "validate_config_file",
]
