import pytest

from mti.exceptions import ErrorCode, LexError, ParseError
from mti.parser.core.classes import *
from mti.parser.core.grammar import _load_grammar
from mti.parser.core.parser import LARK_PARSER, MethodicTransformer, parse_methodic
from mti.parser.utils.assertion_helper import assert_asts_equal
from mti.parser.utils.factory_helpers import *

FACTORIAL = """
# Computes n! recursively.
method calculate-factorial(n) {
    given n {
        when it < 2 => 1,
        default => n * calculate-factorial(n - 1)
    }
}

10.calculate-factorial.print
"""


def test_factorial_program():
    expected = get_program(
        method_definitions=[
            get_method_def(
                "calculate-factorial",
                ["n"],
                [
                    get_given(
                        get_identifier("n"),
                        [get_when(get_binary_op("<", get_it(), get_integer_literal(2)), get_integer_literal(1))],
                        default=get_binary_op(
                            "*",
                            get_identifier("n"),
                            get_call("calculate-factorial", [get_binary_op("-", get_identifier("n"), get_integer_literal(1))]),
                        ),
                    )
                ],
            )
        ],
        statements=[get_call("print", [get_call("calculate-factorial", [get_integer_literal(10)])])],
    )
    assert_asts_equal(parse_methodic(FACTORIAL), expected)


@pytest.mark.parametrize(
    "code, params, body_length",
    [
        pytest.param("method f() {}", [], 0, id="no_params_empty_body"),
        pytest.param("method f(a) { a }", ["a"], 1, id="single_param"),
        pytest.param("method f(a, b, c) { a; b; c }", ["a", "b", "c"], 3, id="semicolon_separated_body"),
        pytest.param("method f(a) {\n  print(a)\n  a + 1\n}", ["a"], 2, id="newline_separated_body"),
        pytest.param("method valid?(x) { x }", ["x"], 1, id="suffixed_method_name"),
    ],
)
def test_method_definitions(code, params, body_length):
    program = parse_methodic(code)
    assert program.statements == []
    method = program.method_definitions[0]
    assert [p.name for p in method.params] == params
    assert len(method.body) == body_length


def test_methods_and_statements_may_interleave():
    program = parse_methodic("a()\nmethod a() { 1 }\nb()\nmethod b() { 2 }")
    assert [m.name.name for m in program.method_definitions] == ["a", "b"]
    assert [s.callee for s in program.statements] == ["a", "b"]


@pytest.mark.parametrize(
    "code, count",
    [
        pytest.param("", 0, id="empty_source"),
        pytest.param("# only a comment", 0, id="only_comment"),
        pytest.param("1; 2; 3", 3, id="semicolons"),
        pytest.param("1\n2\n3", 3, id="newlines"),
        pytest.param("1;", 1, id="trailing_semicolon"),
        pytest.param("f(1) g(2)", 2, id="juxtaposed_calls"),
    ],
)
def test_statement_separation(code, count):
    assert len(parse_methodic(code).statements) == count


def test_leading_minus_continues_the_previous_statement():
    assert len(parse_methodic("a\n-1").statements) == 1
    assert len(parse_methodic("a;\n-1").statements) == 2


def test_program_records_file_path():
    program = parse_methodic("1", file_path="/tmp/prog.mtd")
    assert program.file_path == "/tmp/prog.mtd"


@pytest.mark.parametrize(
    "code, code_expected",
    [
        pytest.param("1 +", ErrorCode.UNEXPECTED_TOKEN, id="dangling_operator"),
        pytest.param("f(1,", ErrorCode.UNEXPECTED_TOKEN, id="unclosed_argument_list"),
        pytest.param("f(1 2)", ErrorCode.UNEXPECTED_TOKEN, id="missing_comma"),
        pytest.param("1 = 2", ErrorCode.UNEXPECTED_TOKEN, id="single_equals"),
        pytest.param("a @ b", ErrorCode.UNEXPECTED_TOKEN, id="stray_symbol"),
        pytest.param(")", ErrorCode.UNEXPECTED_TOKEN, id="stray_closing_paren"),
        pytest.param("given x { when 1 }", ErrorCode.UNEXPECTED_TOKEN, id="when_without_arrow"),
        pytest.param("given x { when it > 1 => 1 when it > 0 => 2 }", ErrorCode.UNEXPECTED_TOKEN, id="clauses_without_comma"),
        pytest.param("given x { default => 1, when it > 1 => 2 }", ErrorCode.UNEXPECTED_TOKEN, id="when_after_default"),
        pytest.param("given x { default => 1, default => 2 }", ErrorCode.DUPLICATE_DEFAULT, id="duplicate_default"),
        pytest.param("method f( { 1 }", ErrorCode.UNEXPECTED_TOKEN, id="unclosed_parameter_list"),
        pytest.param("method f(1) { 1 }", ErrorCode.UNEXPECTED_TOKEN, id="literal_parameter"),
        pytest.param("method f { 1 }", ErrorCode.MISSING_PARAMETER_LIST, id="missing_parameter_list"),
        pytest.param("method f() { 1", ErrorCode.UNTERMINATED_BLOCK, id="unterminated_method_body"),
        pytest.param("given x { when true => 1", ErrorCode.UNTERMINATED_BLOCK, id="unterminated_given_block"),
        pytest.param("method f() { 1 }\nmethod f() { 2 }", ErrorCode.DUPLICATE_METHOD, id="duplicate_method"),
        pytest.param("method f(a, a) { a }", ErrorCode.DUPLICATE_PARAMETER, id="duplicate_parameter"),
        pytest.param("method f() { method g() { 1 } }", ErrorCode.UNEXPECTED_TOKEN, id="nested_method"),
    ],
)
def test_parse_errors(code, code_expected):
    with pytest.raises(ParseError) as e:
        parse_methodic(code)
    assert e.value.code == code_expected


@pytest.mark.parametrize(
    "code, code_expected",
    [
        pytest.param('print("unterminated)', ErrorCode.UNTERMINATED_STRING, id="unterminated_string"),
        pytest.param("²", ErrorCode.INVALID_CHARACTER, id="superscript_digit"),
        pytest.param("print(1 + ²)", ErrorCode.INVALID_CHARACTER, id="superscript_digit_in_arguments"),
    ],
)
def test_lex_errors_surface_through_the_parser(code, code_expected):
    with pytest.raises(LexError) as e:
        parse_methodic(code)
    assert e.value.code == code_expected


def test_parse_error_location():
    with pytest.raises(ParseError) as e:
        parse_methodic("1 +\n  )", file_path="prog.mtd")
    assert (e.value.span.s_line, e.value.span.s_col) == (2, 3)
    assert "Error in 'prog.mtd' (Line: 2, Column: 3)" in str(e.value)


def test_error_at_end_of_input_points_at_eof():
    with pytest.raises(ParseError) as e:
        parse_methodic("1 +")
    assert (e.value.span.s_line, e.value.span.s_col) == (1, 4)
    assert "end of the file" in str(e.value)


def test_missing_parameter_list_names_the_method():
    with pytest.raises(ParseError) as e:
        parse_methodic("method greet { 1 }")
    assert e.value.details["name"] == "greet"
    assert "greet" in str(e.value)


def test_duplicate_method_points_at_second_definition():
    with pytest.raises(ParseError) as e:
        parse_methodic("method f() { 1 }\nmethod f() { 2 }")
    assert e.value.span.s_line == 2


def test_lark_parser_accepts_plain_source():
    tree = LARK_PARSER.parse("10.f + 1 # comment")
    program = MethodicTransformer(file_path="<stdin>").transform(tree)
    expected = get_binary_op("+", get_call("f", [get_integer_literal(10)]), get_integer_literal(1))
    assert_asts_equal(program.statements[0], expected)


def test_grammar_is_read_from_package_data():
    assert _load_grammar().startswith("// Grammar for the Methodic language.")
    # SYMBOL is used by no rule but has to reach the parser.
    assert "SYMBOL" in {terminal.name for terminal in LARK_PARSER.terminals}
