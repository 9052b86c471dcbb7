import io
import json

import pytest

from mti.exceptions import ErrorCode, MethodicRuntimeError, ParseError
from mti.interpreter import InterpreterPipeline, run_methodic
from mti.parser.core.classes import Program
from mti.runtime.builtins import make_builtins
from mti.runtime.values import Int, Str
from mti.utils import InterpreterArtifactEncoder


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "greeting.mtd"
    path.write_text('method greet(name) { print(name) }\n"hello".greet\n', encoding="utf-8")
    return path


def test_full_run_returns_statement_values():
    out = io.StringIO()
    values = run_methodic("method double(x) { x * 2 }\n21.double.print", output=out)
    assert values == [Int(value=42)]
    assert out.getvalue() == "42\n"


def test_stop_after_tokens():
    tokens = run_methodic("1 + 2", stop_after_stage="tokens")
    assert [t.type for t in tokens] == ["INT", "PLUS", "INT", "EOF"]


def test_stop_after_ast_does_not_evaluate():
    out = io.StringIO()
    program = run_methodic("print(1)", output=out, stop_after_stage="ast")
    assert isinstance(program, Program)
    assert out.getvalue() == ""


def test_errors_propagate_without_keep_going():
    with pytest.raises(MethodicRuntimeError):
        run_methodic("missing\nprint(2)", output=io.StringIO())
    with pytest.raises(ParseError):
        run_methodic("1 +", output=io.StringIO())


def test_keep_going_reports_and_continues():
    out = io.StringIO()
    pipeline = InterpreterPipeline("print(1)\nmissing\n1 / 0\nprint(3)", file_path=None, output=out, keep_going=True)

    values = pipeline.run()

    assert values == [Int(value=1), Int(value=3)]
    assert out.getvalue() == "1\n3\n"
    assert [e.code for e in pipeline.errors] == [ErrorCode.UNBOUND_NAME, ErrorCode.DIVISION_BY_ZERO]


def test_keep_going_does_not_hide_parse_errors():
    pipeline = InterpreterPipeline("print(1", file_path=None, output=io.StringIO(), keep_going=True)
    with pytest.raises(ParseError):
        pipeline.run()


def test_artifacts_are_kept_per_stage():
    pipeline = InterpreterPipeline("print(1)", file_path=None, output=io.StringIO())
    pipeline.run()
    assert set(pipeline.artifacts) == {"ast", "run"}
    assert pipeline.file_path == "<stdin>"


def test_dump_ast_artifact(script, capsys):
    out = io.StringIO()
    run_methodic(script.read_text(encoding="utf-8"), file_path=str(script), output=out, dump_stages=["ast"], stop_after_stage="ast")

    artifact = script.with_name("greeting.ast.json")
    assert artifact.exists()
    data = json.loads(artifact.read_text(encoding="utf-8"))
    assert data["method_definitions"][0]["name"]["name"] == "greet"
    assert data["statements"][0]["callee"] == "greet"
    assert "Saving artifact 'ast'" in capsys.readouterr().out


def test_dump_tokens_artifact(script):
    run_methodic(script.read_text(encoding="utf-8"), file_path=str(script), dump_stages=["tokens"], stop_after_stage="tokens")

    data = json.loads(script.with_name("greeting.tokens.json").read_text(encoding="utf-8"))
    assert data[0] == {"type": "METHOD", "value": "method", "line": 1, "column": 1, "offset": 0}
    assert data[-1]["type"] == "EOF"


def test_dump_run_artifact(script):
    out = io.StringIO()
    values = run_methodic(script.read_text(encoding="utf-8"), file_path=str(script), output=out, dump_stages=["run"])

    assert values == [Str(value="hello")]
    data = json.loads(script.with_name("greeting.run.json").read_text(encoding="utf-8"))
    assert data == [{"value": "hello"}]


def test_dump_run_artifact_with_a_very_long_integer(tmp_path):
    digits = "9" * 5000
    path = tmp_path / "big.mtd"
    path.write_text(digits, encoding="utf-8")

    run_methodic(digits, file_path=str(path), output=io.StringIO(), dump_stages=["run"])

    # Parsed as text, since json.loads would hit the same int conversion limit.
    text = path.with_name("big.run.json").read_text(encoding="utf-8")
    assert digits in text


@pytest.mark.parametrize(
    "data, expected",
    [
        pytest.param(make_builtins(io.StringIO()), [{"name": "print", "arity": 1}], id="builtin_without_callable"),
        pytest.param([Int(value=1), Str(value="a")], [{"value": 1}, {"value": "a"}], id="values"),
    ],
)
def test_artifact_encoder(data, expected):
    assert json.loads(json.dumps(data, cls=InterpreterArtifactEncoder)) == expected


def test_artifact_encoder_rejects_other_objects():
    with pytest.raises(TypeError):
        json.dumps({1, 2}, cls=InterpreterArtifactEncoder)
