from typing import Optional

from lark import Token
from lark.exceptions import LarkError, UnexpectedToken

from mti.exceptions import ErrorCode, ParseError
from mti.parser.core.classes import Span

# A mapping from the grammar's terminal names to friendly, human-readable names.
FRIENDLY_TOKEN_NAMES = {
    "NAME": "a method or variable name",
    "INT": "an integer",
    "FLOAT": "a float",
    "STRING": "a string literal",
    "METHOD": "the 'method' keyword",
    "GIVEN": "the 'given' keyword",
    "WHEN": "the 'when' keyword",
    "DEFAULT": "the 'default' keyword",
    "IT": "the 'it' keyword",
    "TRUE": "'true'",
    "FALSE": "'false'",
    "LT": "'<'",
    "GT": "'>'",
    "LE": "'<='",
    "GE": "'>='",
    "EQ": "'=='",
    "NE": "'!=' or '/='",
    "AND": "'&'",
    "OR": "'|'",
    "PLUS": "'+'",
    "MINUS": "'-'",
    "STAR": "'*'",
    "SLASH": "'/'",
    "_DOT": "a dot '.'",
    "_COMMA": "a comma ','",
    "_LPAR": "an opening parenthesis '('",
    "_RPAR": "a closing parenthesis ')'",
    "_LBRACE": "an opening brace '{'",
    "_RBRACE": "a closing brace '}'",
    "_SEMICOLON": "a semicolon ';'",
    "_ARROW": "an arrow '=>'",
    "$END": "the end of the file",  # Lark's token for the end of input
}


def span_from_token(token: Token, file_path: Optional[str] = None) -> Span:
    """Creates a Span object from a single Lark Token."""
    return Span(
        s_line=token.line,
        s_col=token.column,
        e_line=token.end_line if token.end_line is not None else token.line,
        e_col=token.end_column if token.end_column is not None else token.column,
        offset=token.start_pos or 0,
        file_path=file_path,
    )


def _translate_lark_error(
    err: LarkError,
    file_path: Optional[str] = None,
    open_blocks: int = 0,
    previous: Optional[Token] = None,
) -> ParseError:
    """
    Translates a LarkError into a ParseError.

    `open_blocks` is the number of braces still open when the error happened and
    `previous` the last token the parser accepted.
    """

    if isinstance(err, UnexpectedToken):
        found_token = err.token
        span = span_from_token(found_token, file_path)

        if found_token.type == "$END" and open_blocks > 0:
            return ParseError(ErrorCode.UNTERMINATED_BLOCK, span=span, file_path=file_path)

        # Only a method header leaves the parser waiting for nothing but '('.
        if err.expected == {"_LPAR"} and previous is not None and previous.type == "NAME":
            return ParseError(ErrorCode.MISSING_PARAMETER_LIST, span=span, file_path=file_path, name=previous.value)

        # Build a helpful message about what was expected.
        expected_str = ""
        if err.expected:
            friendly_expected = [FRIENDLY_TOKEN_NAMES.get(e, e) for e in sorted(err.expected)]
            if len(friendly_expected) > 1:
                expected_str = f"Expected one of: {', '.join(friendly_expected[:-1])} or {friendly_expected[-1]}"
            elif friendly_expected:
                expected_str = f"Expected {friendly_expected[0]}"

        found_str = f"but found '{found_token.value}' instead."
        if found_token.type == "$END":
            found_str = "but reached the end of the file instead."

        details = f"{expected_str}, {found_str}" if expected_str else f"Found unexpected token '{found_token.value}'."

        return ParseError(ErrorCode.UNEXPECTED_TOKEN, span=span, file_path=file_path, details=details)

    # Fallback for any other Lark error
    return ParseError(ErrorCode.UNEXPECTED_TOKEN, file_path=file_path, details=str(err))
