"""
YAML 配置文件的查找、读取与校验。

查找顺序：显式路径 → 当前目录下的 ``pipe_forge.yaml`` / ``pipe_forge.yml`` /
``.pipe_forge/config.yaml`` → 全部默认值。读取到的字典先与运行时覆盖项
合并，再交给 ForgeConfig 校验，校验错误会精确到字段路径。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pipe_forge.config.schema import ForgeConfig
from pipe_forge.errors import ConfigLoadError, ConfigValidationError

logger = logging.getLogger(__name__)

CONFIG_CANDIDATES = (
    Path("pipe_forge.yaml"),
    Path("pipe_forge.yml"),
    Path(".pipe_forge") / "config.yaml",
)


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> ForgeConfig:
    """
    加载并校验配置。

    参数:
        path: YAML 文件路径，None 时在当前目录查找
        overrides: 运行时覆盖项，逐层合并到文件内容之上

    返回:
        ForgeConfig 实例

    异常:
        ConfigLoadError: 文件不存在、无法读取或不是合法的 YAML 字典
        ConfigValidationError: 内容不符合 Schema
    """
    config_path = Path(path) if path is not None else find_config_file()

    if config_path is None:
        logger.info("当前目录下没有配置文件，使用默认配置。")
        raw: dict[str, Any] = {}
        source = "<default>"
    else:
        raw = _read_yaml_mapping(config_path)
        source = str(config_path)

    if overrides:
        raw = _merge(raw, overrides)

    try:
        return ForgeConfig.model_validate(raw)
    except ValidationError as e:
        problems = _describe_errors(e)
        raise ConfigValidationError(
            what=f"配置 '{source}' 有 {len(problems)} 处不合法。",
            why="\n".join(problems),
            how="按字段路径逐项修正，修改后可运行 'pipe-forge validate' 复查。",
            config_path=source,
            field_path=_first_field_path(e),
        ) from e


def find_config_file(directory: str | Path = ".") -> Path | None:
    """返回目录下第一个存在的默认配置文件，没有时返回 None。"""
    base = Path(directory)
    for candidate in CONFIG_CANDIDATES:
        found = base / candidate
        if found.is_file():
            logger.info("使用配置文件：%s", found)
            return found
    return None


def validate_config_file(path: str | Path) -> list[str]:
    """
    校验配置文件，以列表形式返回错误信息，不抛出异常。

    空列表表示校验通过。供 ``pipe-forge validate`` 使用。
    """
    try:
        load_config(path)
    except (ConfigLoadError, ConfigValidationError) as e:
        return [e.full_message]
    return []


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigLoadError(
            what=f"找不到配置文件 '{path}'。",
            why=f"路径 '{path.resolve()}' 不存在或不是文件。",
            how="检查 --config 参数，或在当前目录创建 pipe_forge.yaml。",
            file_path=str(path),
        )

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(
            what=f"读取配置文件 '{path}' 失败。",
            why=str(e),
            how="确认文件可读且为 UTF-8 编码。",
            file_path=str(path),
        ) from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(
            what=f"配置文件 '{path}' 不是合法的 YAML。",
            why=str(e),
            how="按报错位置检查缩进、引号和冒号。",
            file_path=str(path),
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            what=f"配置文件 '{path}' 的顶层必须是键值对。",
            why=f"读到的是 {type(data).__name__}。",
            how="顶层写成 commands: / pipelines: 等字段，例如：\n"
                "  commands:\n"
                "    upper: [tr, '[:lower:]', '[:upper:]']",
            file_path=str(path),
        )
    return data


def _describe_errors(error: ValidationError) -> list[str]:
    problems = []
    for item in error.errors():
        location = " → ".join(str(part) for part in item["loc"])
        if location:
            problems.append(f"  字段 '{location}': {item['msg']}")
        else:
            problems.append(f"  {item['msg']}")
    return problems


def _first_field_path(error: ValidationError) -> str:
    for item in error.errors():
        if item["loc"]:
            return ".".join(str(part) for part in item["loc"])
    return ""


def _merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """逐层合并两个字典，override 优先，不修改参数。"""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged
