"""
Defines the formal data structures (contracts) for the Abstract Syntax Tree (AST)
produced by the parser stage and walked by the evaluator.

Each node is a pydantic model and includes a `Span` object to track its
location in the source code, enabling precise error reporting at runtime.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, StrictBool, StrictFloat, StrictInt, StrictStr

# --- Core Data Structures ---


class Span(BaseModel):
    """Represents a location in the source code for precise error reporting."""

    s_line: int
    s_col: int
    e_line: int
    e_col: int
    offset: int = 0
    file_path: Optional[str] = None


class ASTNode(BaseModel):
    """A base class for all AST nodes, ensuring they have a span."""

    span: Span


# --- Literals and Identifiers ---


class Literal(ASTNode):
    """Base class of the typed constants."""

    pass


class IntegerLiteral(Literal):
    value: StrictInt


class FloatLiteral(Literal):
    value: StrictFloat


class StringLiteral(Literal):
    value: StrictStr


class BooleanLiteral(Literal):
    value: StrictBool


class Identifier(ASTNode):
    name: str


class ImplicitSubject(ASTNode):
    """The `it` keyword, bound only while a `when` clause is evaluated."""

    pass


# --- Expressions ---
# A generic type hint for any expression node
Expression = Union[
    IntegerLiteral,
    FloatLiteral,
    StringLiteral,
    BooleanLiteral,
    Identifier,
    ImplicitSubject,
    "Call",
    "BinaryOp",
    "Negation",
    "Given",
]


class Call(ASTNode):
    """
    A call by name. Dotted calls are desugared by the parser with the
    receiver as the first argument: `a.f(b)` is `Call(callee="f", args=[a, b])`.
    """

    callee: str
    args: List[Expression]


class BinaryOp(ASTNode):
    operator: str
    left: Expression
    right: Expression


class Negation(ASTNode):
    operand: Expression


class WhenClause(ASTNode):
    predicate: Expression
    result: Expression


class DefaultClause(ASTNode):
    result: Expression


class Given(ASTNode):
    subject: Expression
    clauses: List[WhenClause]
    default: Optional[DefaultClause] = None


# --- Top-level Structures ---


class MethodDef(ASTNode):
    name: Identifier
    params: List[Identifier]
    body: List[Expression]


class Program(ASTNode):
    """The root of the entire AST, representing a single source unit."""

    file_path: str
    method_definitions: List[MethodDef]
    statements: List[Expression]


for _model in (Call, BinaryOp, Negation, WhenClause, DefaultClause, Given, MethodDef, Program):
    _model.model_rebuild()
