"""
配置文件的 Schema 定义与校验。

命名命令和命名流水线可以写在 YAML 文件里，按名字运行::

    version: "1.0"
    exec:
      encoding: utf-8
    commands:
      grep:
        program: grep
      upper: [tr, "[:lower:]", "[:upper:]"]
    pipelines:
      shout_far:
        stages:
          - command: grep
            args: [far]
          - upper

命令支持列表简写（第一个元素为程序名），阶段支持字符串简写（只写命令名）。
"""

from __future__ import annotations

import codecs
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

_DECODE_ERROR_HANDLERS = {
    "strict",
    "replace",
    "ignore",
    "backslashreplace",
    "surrogateescape",
}


class ExecConfig(BaseModel):
    """执行设置。"""

    encoding: str = Field(default="utf-8", description="输出解码 / 输入编码使用的字符集")
    decode_errors: str = Field(
        default="replace",
        description="解码错误处理：strict / replace / ignore / backslashreplace / surrogateescape",
    )
    cwd: str | None = Field(default=None, description="子进程默认工作目录")
    env: dict[str, str] = Field(default_factory=dict, description="追加的环境变量")
    inherit_env: bool = Field(default=True, description="是否继承当前进程的环境变量")
    debug: bool = Field(default=False, description="是否输出阶段级调试日志")

    @field_validator("encoding")
    @classmethod
    def _validate_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"未知的字符集 '{value}'。") from e
        return value

    @field_validator("decode_errors")
    @classmethod
    def _validate_decode_errors(cls, value: str) -> str:
        if value not in _DECODE_ERROR_HANDLERS:
            raise ValueError(
                f"decode_errors 必须是 {', '.join(sorted(_DECODE_ERROR_HANDLERS))} 之一，"
                f"实际为 '{value}'。"
            )
        return value


class CommandConfig(BaseModel):
    """命名命令：程序名 + 预置参数。"""

    program: str = Field(..., min_length=1, description="程序名或路径")
    args: list[str] = Field(default_factory=list, description="预置参数")
    description: str = Field(default="", description="命令说明")

    @model_validator(mode="before")
    @classmethod
    def _expand_list_shorthand(cls, data: Any) -> Any:
        if isinstance(data, list):
            if not data:
                raise ValueError("命令列表简写不能为空，第一个元素必须是程序名。")
            return {"program": data[0], "args": data[1:]}
        if isinstance(data, str):
            return {"program": data}
        return data


class StageConfig(BaseModel):
    """流水线阶段：引用一个命名命令，可追加参数。"""

    command: str = Field(..., min_length=1, description="命名命令")
    args: list[str] = Field(default_factory=list, description="追加参数")

    @model_validator(mode="before")
    @classmethod
    def _expand_name_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"command": data}
        return data


class PipelineConfig(BaseModel):
    """命名流水线。"""

    description: str = Field(default="", description="流水线说明")
    input: str | None = Field(default=None, description="绑定的输入文本")
    stages: list[StageConfig] = Field(default_factory=list, description="阶段列表")


class ForgeConfig(BaseModel):
    """
    完整配置：对应 YAML 配置文件的根结构。

    每个字段都有默认值，空文件也是合法配置。
    """

    version: str = Field(default="1.0", description="配置版本")
    name: str = Field(default="default", description="配置名称")
    description: str = Field(default="", description="配置描述")

    exec: ExecConfig = Field(default_factory=ExecConfig)
    commands: dict[str, CommandConfig] = Field(default_factory=dict)
    pipelines: dict[str, PipelineConfig] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _validate_stage_references(self) -> ForgeConfig:
        """校验流水线阶段引用的命令都已定义。"""
        missing = [
            f"{pipeline_name}[{index}] → {stage.command}"
            for pipeline_name, pipeline in self.pipelines.items()
            for index, stage in enumerate(pipeline.stages)
            if stage.command not in self.commands
        ]
        if missing:
            raise ValueError(
                f"以下阶段引用了未定义的命令：{', '.join(missing)}。"
                f"已定义的命令：{', '.join(sorted(self.commands)) or '（无）'}。"
            )
        return self
