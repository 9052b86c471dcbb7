import operator
import sys
from contextlib import contextmanager
from typing import List, Optional, TextIO

from mti.config.config import FRAMES_PER_CALL, IMPLICIT_SUBJECT, MAX_CALL_DEPTH
from mti.exceptions import ErrorCode, InternalInterpreterError, MethodicRuntimeError
from mti.parser.core.classes import (
    ASTNode,
    BinaryOp,
    BooleanLiteral,
    Call,
    FloatLiteral,
    Given,
    Identifier,
    ImplicitSubject,
    IntegerLiteral,
    Negation,
    Program,
    StringLiteral,
)

from .builtins import make_builtins
from .environment import Environment
from .values import NIL, Bool, Builtin, Float, Int, Method, Str, Value, from_bool

ARITHMETIC_OPERATORS = {"+": operator.add, "-": operator.sub, "*": operator.mul}
ORDERING_OPERATORS = {"<": operator.lt, ">": operator.gt, "<=": operator.le, ">=": operator.ge}
# Both operands are always evaluated; there is no short-circuiting.
BOOLEAN_OPERATORS = {"&": operator.and_, "|": operator.or_}


def _describe(value: Value) -> str:
    article = "an" if value.kind[0] in "aeiou" else "a"
    return f"{article} {value.kind}"


def _truncating_div(a: int, b: int) -> int:
    quotient = a // b
    if quotient < 0 and quotient * b != a:
        quotient += 1
    return quotient


@contextmanager
def _recursion_budget(frames: int):
    """Temporarily raises the interpreter recursion limit to at least `frames`."""
    previous = sys.getrecursionlimit()
    if frames > previous:
        sys.setrecursionlimit(frames)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


class Evaluator:
    """
    Tree-walking evaluator for a parsed Program.

    All top-level methods are bound in the global scope before any statement
    runs, so methods may call themselves or methods defined later in the file.
    Every other scope is created for a single call or `given` expression and
    released as soon as it finishes.
    """

    def __init__(
        self,
        program: Program,
        output: Optional[TextIO] = None,
        environment: Optional[Environment] = None,
        max_call_depth: int = MAX_CALL_DEPTH,
    ):
        self.program = program
        self.file_path = program.file_path
        self.output = output if output is not None else sys.stdout
        self.environment = environment if environment is not None else Environment()
        self.max_call_depth = max_call_depth
        self.depth = 0
        self._last_callee = "<statement>"

    def bind_globals(self):
        """Binds the built-ins, then every user method, in the global scope."""
        for builtin in make_builtins(self.output):
            self.environment.bind(Environment.GLOBAL, builtin.name, builtin)

        for method_def in self.program.method_definitions:
            method = Method(definition=method_def, scope=Environment.GLOBAL)
            self.environment.bind(Environment.GLOBAL, method.name, method)

    def run(self) -> List[Value]:
        """Binds the globals and evaluates every top-level statement in order."""
        self.bind_globals()
        return [self.evaluate_statement(statement) for statement in self.program.statements]

    def evaluate_statement(self, statement: ASTNode) -> Value:
        """Evaluates one top-level statement in the global scope."""
        frames = sys.getrecursionlimit() + self.max_call_depth * FRAMES_PER_CALL
        with _recursion_budget(frames):
            try:
                return self._evaluate(statement, Environment.GLOBAL)
            except RecursionError:
                # Deeply nested expressions can exhaust Python's stack before the call depth limit.
                raise MethodicRuntimeError(
                    ErrorCode.STACK_OVERFLOW, span=statement.span, file_path=self.file_path, limit=self.max_call_depth, name=self._last_callee
                ) from None

    # --- Dispatch ---

    def _evaluate(self, node: ASTNode, scope: int) -> Value:
        if isinstance(node, IntegerLiteral):
            return Int(value=node.value)
        if isinstance(node, FloatLiteral):
            return Float(value=node.value)
        if isinstance(node, StringLiteral):
            return Str(value=node.value)
        if isinstance(node, BooleanLiteral):
            return from_bool(node.value)
        if isinstance(node, Identifier):
            return self._resolve(node.name, node, scope)
        if isinstance(node, ImplicitSubject):
            return self._resolve(IMPLICIT_SUBJECT, node, scope)
        if isinstance(node, Call):
            return self._evaluate_call(node, scope)
        if isinstance(node, BinaryOp):
            return self._evaluate_binary_op(node, scope)
        if isinstance(node, Negation):
            return self._evaluate_negation(node, scope)
        if isinstance(node, Given):
            return self._evaluate_given(node, scope)

        raise InternalInterpreterError(f"Cannot evaluate node of type '{type(node).__name__}'.")

    def _error(self, code: ErrorCode, node: ASTNode, **kwargs) -> MethodicRuntimeError:
        return MethodicRuntimeError(code, span=node.span, file_path=self.file_path, **kwargs)

    # --- Names ---

    def _resolve(self, name: str, node: ASTNode, scope: int) -> Value:
        value = self.environment.lookup(scope, name)
        if value is None:
            raise self._error(ErrorCode.UNBOUND_NAME, node, name=name)
        return value

    # --- Calls ---

    def _evaluate_call(self, node: Call, scope: int) -> Value:
        callee = self._resolve(node.callee, node, scope)
        if not isinstance(callee, (Method, Builtin)):
            raise self._error(ErrorCode.NOT_CALLABLE, node, name=node.callee, kind=_describe(callee))

        if len(node.args) != callee.arity:
            raise self._error(ErrorCode.ARITY_MISMATCH, node, name=node.callee, expected=callee.arity, provided=len(node.args))

        args = [self._evaluate(arg, scope) for arg in node.args]

        if isinstance(callee, Builtin):
            return callee.function(*args)
        return self._invoke(callee, args, node)

    def _invoke(self, method: Method, args: List[Value], node: Call) -> Value:
        if self.depth >= self.max_call_depth:
            raise self._error(ErrorCode.STACK_OVERFLOW, node, limit=self.max_call_depth, name=method.name)

        call_scope = self.environment.new_scope(method.scope)
        for name, value in zip(method.params, args):
            self.environment.bind(call_scope, name, value)

        self.depth += 1
        self._last_callee = method.name
        try:
            # The value of the last statement is the return value; an empty body returns nil.
            result: Value = NIL
            for statement in method.definition.body:
                result = self._evaluate(statement, call_scope)
            return result
        finally:
            self.depth -= 1
            self.environment.drop_scope(call_scope)

    # --- Operators ---

    def _evaluate_binary_op(self, node: BinaryOp, scope: int) -> Value:
        left = self._evaluate(node.left, scope)
        right = self._evaluate(node.right, scope)
        op = node.operator

        if op == "==":
            return from_bool(left == right)
        if op == "!=":
            return from_bool(left != right)

        if op in BOOLEAN_OPERATORS:
            if not (isinstance(left, Bool) and isinstance(right, Bool)):
                raise self._error(
                    ErrorCode.TYPE_MISMATCH,
                    node,
                    details=f"the '{op}' operator needs two booleans, but got {_describe(left)} and {_describe(right)}",
                )
            return from_bool(BOOLEAN_OPERATORS[op](left.value, right.value))

        if not (isinstance(left, (Int, Float)) and type(left) is type(right)):
            raise self._error(
                ErrorCode.TYPE_MISMATCH,
                node,
                details=f"the '{op}' operator cannot be used with {_describe(left)} and {_describe(right)}",
            )

        if op in ORDERING_OPERATORS:
            return from_bool(ORDERING_OPERATORS[op](left.value, right.value))

        if op == "/":
            if right.value == 0:
                raise self._error(ErrorCode.DIVISION_BY_ZERO, node)
            if isinstance(left, Int):
                return Int(value=_truncating_div(left.value, right.value))
            return Float(value=left.value / right.value)

        if op in ARITHMETIC_OPERATORS:
            return type(left)(value=ARITHMETIC_OPERATORS[op](left.value, right.value))

        raise InternalInterpreterError(f"Unknown binary operator '{op}'.")

    def _evaluate_negation(self, node: Negation, scope: int) -> Value:
        operand = self._evaluate(node.operand, scope)
        if not isinstance(operand, (Int, Float)):
            raise self._error(ErrorCode.TYPE_MISMATCH, node, details=f"the '-' operator cannot negate {_describe(operand)}")
        return type(operand)(value=-operand.value)

    # --- Pattern matching ---

    def _evaluate_given(self, node: Given, scope: int) -> Value:
        subject = self._evaluate(node.subject, scope)

        if node.clauses:
            # `it` lives in its own scope for the predicates and results of the when clauses only.
            subject_scope = self.environment.new_scope(scope)
            self.environment.bind(subject_scope, IMPLICIT_SUBJECT, subject)
            try:
                for clause in node.clauses:
                    matched = self._evaluate(clause.predicate, subject_scope)
                    if not isinstance(matched, Bool):
                        raise self._error(
                            ErrorCode.TYPE_MISMATCH,
                            clause.predicate,
                            details=f"a 'when' predicate must evaluate to a boolean, but got {_describe(matched)}",
                        )
                    if matched.value:
                        return self._evaluate(clause.result, subject_scope)
            finally:
                self.environment.drop_scope(subject_scope)

        if node.default is not None:
            return self._evaluate(node.default.result, scope)

        raise self._error(ErrorCode.NO_MATCHING_CLAUSE, node, subject=subject.render())


def evaluate(
    program: Program,
    output: Optional[TextIO] = None,
    environment: Optional[Environment] = None,
    max_call_depth: int = MAX_CALL_DEPTH,
) -> List[Value]:
    """Evaluates a parsed program and returns the value of each top-level statement."""
    return Evaluator(program, output=output, environment=environment, max_call_depth=max_call_depth).run()
