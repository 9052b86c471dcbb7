from typing import List, Optional, Union

from mti.parser.core.classes import *


def get_span(s_line: int = 1, s_col: int = 1, e_line: int = 1, e_col: int = 1, file_path: Optional[str] = None):
    return Span(s_line=s_line, s_col=s_col, e_line=e_line, e_col=e_col, file_path=file_path)


def get_identifier(name: str):
    return Identifier(span=get_span(), name=name)


def get_integer_literal(value: int):
    return IntegerLiteral(span=get_span(), value=value)


def get_float_literal(value: float):
    return FloatLiteral(span=get_span(), value=value)


def get_string_literal(value: str):
    return StringLiteral(span=get_span(), value=value)


def get_boolean_literal(value: bool):
    return BooleanLiteral(span=get_span(), value=value)


def get_it():
    return ImplicitSubject(span=get_span())


def get_call(callee: str, args: Optional[List[Expression]] = None):
    return Call(span=get_span(), callee=callee, args=args or [])


def get_binary_op(operator: str, left: Expression, right: Expression):
    return BinaryOp(span=get_span(), operator=operator, left=left, right=right)


def get_negation(operand: Expression):
    return Negation(span=get_span(), operand=operand)


def get_when(predicate: Expression, result: Expression):
    return WhenClause(span=get_span(), predicate=predicate, result=result)


def get_given(subject: Expression, clauses: List[WhenClause], default: Optional[Expression] = None):
    """`default` is the result expression of the default clause, if there is one."""
    default_clause = DefaultClause(span=get_span(), result=default) if default is not None else None
    return Given(span=get_span(), subject=subject, clauses=clauses, default=default_clause)


def get_method_def(name: str, params: Optional[List[str]] = None, body: Optional[List[Expression]] = None) -> MethodDef:
    return MethodDef(
        span=get_span(),
        name=get_identifier(name),
        params=[get_identifier(p) for p in params or []],
        body=body or [],
    )


def get_program(
    method_definitions: Optional[List[MethodDef]] = None,
    statements: Optional[List[Expression]] = None,
    file_path: str = "<stdin>",
):
    return Program(span=get_span(), file_path=file_path, method_definitions=method_definitions or [], statements=statements or [])


def to_literal(value: Union[int, float, str, bool]):
    """Wraps a plain Python value in the matching literal node."""
    if isinstance(value, bool):
        return get_boolean_literal(value)
    if isinstance(value, int):
        return get_integer_literal(value)
    if isinstance(value, float):
        return get_float_literal(value)
    return get_string_literal(value)
