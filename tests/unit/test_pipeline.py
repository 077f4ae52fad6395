"""
Pipeline 单元测试：组合、短路、输入绑定。

覆盖范围:
- pipeline/base.py: Pipe、PipeWith、Pipeline、Executable 的组合运算
"""

from __future__ import annotations

import dataclasses
import io
import logging

import pytest

from pipe_forge.errors import ExecutionError, PipelineError
from pipe_forge.models.result import ExecResult
from pipe_forge.pipeline.base import (
    ExecutionContext,
    Executable,
    Pipe,
    Pipeline,
    PipeWith,
)


@dataclasses.dataclass(frozen=True)
class Reverse(Executable):
    """测试用的纯 Python 单元：反转输入。"""

    @property
    def name(self) -> str:
        return "reverse"

    def _run_stage(self, stdin: bytes, context: ExecutionContext) -> ExecResult:
        return context.make_result(stdout=stdin[::-1])


class TestPipe:
    """Pipe 测试。"""

    def test_hi_there_word_count(self, echo, grep, wc) -> None:
        """$ echo Hi there!! | grep -o Hi | wc -w"""
        pipeline = Pipe(echo("Hi there!!"), grep("-o", "Hi"), wc("-w"))
        assert pipeline.text().strip() == "1"

    def test_stdout_flows_to_next_stage(self, echo, upper) -> None:
        assert Pipe(echo("quiet"), upper()).text() == "QUIET\n"

    def test_single_stage_matches_unit(self, echo) -> None:
        assert Pipe(echo("solo")).text() == echo("solo").text()

    def test_custom_unit(self, echo) -> None:
        assert Pipe(echo("-n", "abc"), Reverse()).text() == "cba"

    def test_nested_pipeline(self, echo, grep, upper) -> None:
        inner = Pipe(grep("far"), upper())
        assert Pipe(echo("so far away"), inner).text() == "SO FAR AWAY\n"

    def test_empty_pipe_passes_input_through(self) -> None:
        assert Pipe().text() == ""
        assert Pipe().text("unchanged") == "unchanged"

    def test_non_unit_argument_raises(self, grep) -> None:
        """传入未调用的模板时在构建期报错。"""
        with pytest.raises(PipelineError, match="第 1 个参数"):
            Pipe(grep)  # type: ignore[arg-type]

    def test_pipeline_name(self, echo, grep) -> None:
        pipeline = Pipe(echo("hi"), grep("-o", "hi"))

        assert pipeline.name == "echo hi | grep -o hi"
        assert pipeline.stage_names == ["echo hi", "grep -o hi"]
        assert len(pipeline) == 2
        assert Pipe().name == "<empty>"


class TestShortCircuit:
    """失败短路测试。"""

    def test_failure_stops_pipeline(self, sh, tmp_path) -> None:
        marker = tmp_path / "ran"
        pipeline = Pipe(
            sh("echo boom >&2; exit 3"),
            sh(f"touch {marker}"),
        )

        output, error = pipeline.run()

        assert output == "boom\n"
        assert isinstance(error, ExecutionError)
        assert error.stage_name == "sh -c 'echo boom >&2; exit 3'"
        assert not marker.exists()

    def test_failure_in_middle_stage(self, echo, grep, upper) -> None:
        """grep 没有匹配时退出码为 1，整条流水线失败。"""
        output, error = Pipe(echo("nothing here"), grep("far"), upper()).run()

        assert error is not None
        assert error.stage_name == "grep far"
        assert output == ""

    def test_text_is_empty_on_failure(self, echo, grep) -> None:
        assert Pipe(echo("nothing"), grep("far")).text() == ""

    def test_missing_program_in_pipeline(self, echo) -> None:
        from pipe_forge.command import Cmd

        _, error = Pipe(echo("x"), Cmd("definitely-not-a-program-xyz")()).run()
        assert isinstance(error, ExecutionError)

    def test_check_output_raises_first_error(self, sh) -> None:
        pipeline = Pipe(sh("exit 4"), sh("exit 5"))

        with pytest.raises(ExecutionError) as exc_info:
            pipeline.check_output()
        assert "退出码 4" in exc_info.value.why


class TestPipeWith:
    """PipeWith 与输入绑定测试。"""

    def test_pipe_with_text(self, grep, upper, sw_crawl, far_line) -> None:
        result = PipeWith(sw_crawl, grep("far"), upper()).text()
        assert result == far_line.upper()

    def test_pipe_with_bytes(self, cat) -> None:
        assert PipeWith(b"raw", cat()).text() == "raw"

    def test_bound_input_overrides_stdin(self, cat) -> None:
        assert PipeWith("bound", cat()).text("ignored") == "bound"

    def test_pipe_with_no_units(self) -> None:
        assert PipeWith("echoed back").text() == "echoed back"

    def test_with_input_text(self, upper) -> None:
        assert upper().with_input("abc").text() == "ABC"

    def test_with_input_stream(self, upper) -> None:
        pipeline = upper().with_input(io.BytesIO(b"abc"))

        assert pipeline.stage_names[0] == "read:<stream>"
        assert pipeline.text() == "ABC"

    def test_with_input_does_not_change_unit(self, cat) -> None:
        unit = cat()
        unit.with_input("bound")
        assert unit.text("fresh") == "fresh"

    def test_string_on_left_of_pipe(self, upper) -> None:
        assert ("abc" | upper()).text() == "ABC"

    def test_with_input_rebinds_pipeline(self, cat) -> None:
        bound = PipeWith("a\n", cat())
        rebound = bound.with_input("b\n")

        assert rebound.text() == "b\n"
        assert len(rebound) == 1
        assert bound.text() == "a\n"

    def test_with_input_stream_replaces_bound_input(self, cat) -> None:
        pipeline = PipeWith("a\n", cat()).with_input(io.BytesIO(b"b\n"))

        assert pipeline.input is None
        assert pipeline.text() == "b\n"

    def test_string_on_left_rebinds_pipeline(self, cat) -> None:
        assert ("b\n" | PipeWith("a\n", cat())).text() == "b\n"

    def test_unencodable_input_is_returned_as_error(self, cat) -> None:
        context = ExecutionContext(encoding="ascii")

        output, error = cat().run("caf\u00e9", context)

        assert output == ""
        assert isinstance(error, ExecutionError)
        assert "ascii" in error.what
        assert cat().text("caf\u00e9", context) == ""

    def test_unencodable_bound_input_is_returned_as_error(self, cat) -> None:
        pipeline = PipeWith("caf\u00e9", cat())

        result = pipeline.execute(context=ExecutionContext(encoding="ascii"))

        assert not result.ok
        assert result.error.stage_name == "cat"

    def test_execute_accepts_stdin(self, grep, upper) -> None:
        pipeline = Pipe(grep("far"), upper())
        assert pipeline.text("near\nfar\n") == "FAR\n"


class TestComposition:
    """| 运算符与 then() 测试。"""

    def test_or_operator(self, echo, grep, wc) -> None:
        pipeline = echo("Hi there!!") | grep("-o", "Hi") | wc("-w")

        assert isinstance(pipeline, Pipeline)
        assert len(pipeline) == 3
        assert pipeline.text().strip() == "1"

    def test_or_keeps_bound_input(self, grep, upper) -> None:
        pipeline = PipeWith("far\nnear\n", grep("far")) | upper()

        assert len(pipeline) == 2
        assert pipeline.text() == "FAR\n"

    def test_then_returns_new_pipeline(self, echo, upper) -> None:
        base = Pipe(echo("hi"))
        extended = base.then(upper())

        assert len(base) == 1
        assert len(extended) == 2
        assert extended.text() == "HI\n"

    def test_then_rejects_non_units(self, echo) -> None:
        with pytest.raises(PipelineError):
            Pipe(echo("hi")).then("upper")  # type: ignore[arg-type]

    def test_or_with_non_unit_is_type_error(self, echo) -> None:
        with pytest.raises(TypeError):
            echo("hi") | "upper"  # type: ignore[operator]

    def test_pipeline_is_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            Pipe().stages = ()  # type: ignore[misc]


class TestExecutionContext:
    """ExecutionContext 测试。"""

    def test_process_env_inherits_by_default(self) -> None:
        assert ExecutionContext().process_env() is None

    def test_process_env_merges_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("PF_BASE", "base")
        context = ExecutionContext(env={"PF_CTX": "ctx"})

        env = context.process_env({"PF_UNIT": "unit"})

        assert env is not None
        assert env["PF_BASE"] == "base"
        assert env["PF_CTX"] == "ctx"
        assert env["PF_UNIT"] == "unit"

    def test_process_env_without_inherit(self, monkeypatch) -> None:
        monkeypatch.setenv("PF_BASE", "base")
        context = ExecutionContext(env={"A": "1"}, inherit_env=False)

        assert context.process_env({"B": "2"}) == {"A": "1", "B": "2"}

    def test_process_cwd_prefers_unit(self) -> None:
        context = ExecutionContext(cwd="/ctx")

        assert context.process_cwd("/unit") == "/unit"
        assert context.process_cwd() == "/ctx"

    def test_context_cwd_applies_to_commands(self, tmp_path) -> None:
        from pipe_forge.command import Cmd

        (tmp_path / "here.txt").write_text("", encoding="utf-8")
        context = ExecutionContext(cwd=str(tmp_path))

        assert Cmd("ls")().text(context=context) == "here.txt\n"

    def test_encoding_applies_to_input_and_output(self, cat) -> None:
        context = ExecutionContext(encoding="latin-1")
        result = cat().execute("café", context)

        assert result.stdout_bytes == "café".encode("latin-1")
        assert result.stdout == "café"

    def test_debug_logging(self, echo, upper, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="pipe_forge")
        Pipe(echo("hi"), upper()).text(context=ExecutionContext(debug=True))

        messages = [r.getMessage() for r in caplog.records if r.name == "pipe_forge.pipeline.base"]
        assert any("执行阶段: echo hi" in m for m in messages)
        assert any("阶段 echo hi | tr" in m for m in messages)

    def test_no_stage_logs_without_debug(self, echo, caplog) -> None:
        caplog.set_level(logging.DEBUG, logger="pipe_forge")
        echo("hi").text()

        assert not [r for r in caplog.records if r.name == "pipe_forge.pipeline.base"]
