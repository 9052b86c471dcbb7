"""
Custom exception types for the Methodic interpreter.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from mti.parser.core.classes import Span


class ErrorCode(Enum):

    # --- Lexical Errors ---
    UNTERMINATED_STRING = "Syntax Error: Unterminated string literal, {reason}."
    INVALID_CHARACTER = "Syntax Error: Invalid character '{char}' found."

    # --- Syntax Errors ---
    # The parser found a token that is valid, but not in the right place.
    # The 'details' are generated from what the grammar expected at that point.
    UNEXPECTED_TOKEN = "Syntax Error: Invalid syntax. {details}"
    UNTERMINATED_BLOCK = "Syntax Error: Reached the end of the file while a '{{' block was still open."
    MISSING_PARAMETER_LIST = "Syntax Error: Method '{name}' must declare a parameter list, e.g. 'method {name}() {{ ... }}'."
    DUPLICATE_DEFAULT = "Syntax Error: A 'given' block can only have one 'default' clause."
    DUPLICATE_METHOD = "Method '{name}' is defined more than once."
    DUPLICATE_PARAMETER = "Parameter '{name}' is declared more than once in method '{method}'."

    # --- Runtime Errors ---
    UNBOUND_NAME = "Name '{name}' is not defined."
    NOT_CALLABLE = "'{name}' is {kind}, not a method, and cannot be called."
    ARITY_MISMATCH = "Method '{name}' expects {expected} argument(s), but got {provided}."
    TYPE_MISMATCH = "Type mismatch: {details}."
    NO_MATCHING_CLAUSE = "No 'when' clause matched the subject {subject} and the 'given' block has no 'default' clause."
    STACK_OVERFLOW = "Maximum call depth of {limit} exceeded while calling '{name}'."
    DIVISION_BY_ZERO = "Division by zero."


LEX_ERROR_CODES = {ErrorCode.UNTERMINATED_STRING, ErrorCode.INVALID_CHARACTER}

PARSE_ERROR_CODES = {
    ErrorCode.UNEXPECTED_TOKEN,
    ErrorCode.UNTERMINATED_BLOCK,
    ErrorCode.MISSING_PARAMETER_LIST,
    ErrorCode.DUPLICATE_DEFAULT,
    ErrorCode.DUPLICATE_METHOD,
    ErrorCode.DUPLICATE_PARAMETER,
}

RUNTIME_ERROR_CODES = {
    ErrorCode.UNBOUND_NAME,
    ErrorCode.NOT_CALLABLE,
    ErrorCode.ARITY_MISMATCH,
    ErrorCode.TYPE_MISMATCH,
    ErrorCode.NO_MATCHING_CLAUSE,
    ErrorCode.STACK_OVERFLOW,
    ErrorCode.DIVISION_BY_ZERO,
}


class MethodicError(Exception):
    def __init__(
        self,
        code: ErrorCode,
        span: Optional["Span"] = None,
        file_path: Optional[str] = None,
        **kwargs,
    ):
        self.code = code
        self.span = span
        self.details = kwargs

        # --- 1. Generate the core error message ---
        # The format string (e.g., "Name '{name}' is not defined.") is populated
        # with any extra data it needs from kwargs.
        core_message = code.value.format(**kwargs)

        # --- 2. Determine the location prefix ---
        location_prefix = ""
        if span:
            path = span.file_path or file_path or "<stdin>"
            location_prefix = f"Error in '{path}' (Line: {span.s_line}, Column: {span.s_col}):\n"
        elif file_path:
            location_prefix = f"Error in '{file_path}': "

        self.message = location_prefix + core_message

        super().__init__(self.message)


class LexError(MethodicError):
    """Raised by the lexer when the source cannot be split into tokens."""

    def __init__(self, code: ErrorCode, span: Optional["Span"] = None, file_path: Optional[str] = None, **kwargs):
        if code not in LEX_ERROR_CODES:
            raise InternalInterpreterError(f"{code.name} is not a lexical error code.")
        super().__init__(code, span, file_path, **kwargs)


class ParseError(MethodicError):
    """Raised when a token stream does not form a valid program."""

    def __init__(self, code: ErrorCode, span: Optional["Span"] = None, file_path: Optional[str] = None, **kwargs):
        if code not in PARSE_ERROR_CODES:
            raise InternalInterpreterError(f"{code.name} is not a parse error code.")
        super().__init__(code, span, file_path, **kwargs)


class MethodicRuntimeError(MethodicError):
    """Raised at the point of failure while evaluating a program."""

    def __init__(self, code: ErrorCode, span: Optional["Span"] = None, file_path: Optional[str] = None, **kwargs):
        if code not in RUNTIME_ERROR_CODES:
            raise InternalInterpreterError(f"{code.name} is not a runtime error code.")
        super().__init__(code, span, file_path, **kwargs)


class InternalInterpreterError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
