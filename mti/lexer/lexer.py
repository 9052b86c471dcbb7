"""
The Methodic lexer.

Turns source text into a lazy stream of `lark.Token` objects terminated by a
single EOF token. The terminals themselves live in `methodic.lark`; this module
runs lark's lexer over them and turns its failures into LexErrors.
"""

from typing import Iterator, List, Optional

from lark import Token
from lark.exceptions import UnexpectedCharacters

from mti.config.config import EOF_TOKEN, STRING_QUOTES
from mti.exceptions import ErrorCode, LexError
from mti.parser.core.classes import Span
from mti.parser.core.grammar import LARK_PARSER


def is_identifier_start(char: str) -> bool:
    return char.isalpha() or char == "_"


class Lexer:
    """
    Single-use token stream over one source unit.

    Iterating a Lexer drives it to completion; a second iteration yields
    nothing, so a fresh Lexer is needed for every source unit.
    """

    def __init__(self, source: str, file_path: Optional[str] = None):
        self.source = source
        self.file_path = file_path
        self.started = False
        self.finished = False

    def __iter__(self) -> Iterator[Token]:
        if self.started:
            return
        self.started = True

        try:
            for token in LARK_PARSER.lex(self.source):
                if token.type == "NAME":
                    self._check_name(token)
                yield token
        except UnexpectedCharacters as e:
            raise self._lex_error(e) from None

        self.finished = True
        yield self._eof_token()

    def _check_name(self, token: Token):
        # Regex word characters include digits such as '²' that str.isalpha rejects.
        offset = 0
        for segment in token.value.split("-"):
            if not is_identifier_start(segment[0]):
                raise LexError(
                    ErrorCode.INVALID_CHARACTER,
                    span=self._span_at(token.start_pos + offset, token.line, token.column + offset),
                    file_path=self.file_path,
                    char=segment[0],
                )
            offset += len(segment) + 1

    def _lex_error(self, err: UnexpectedCharacters) -> LexError:
        if err.char not in STRING_QUOTES:
            return LexError(
                ErrorCode.INVALID_CHARACTER,
                span=self._span_at(err.pos_in_stream, err.line, err.column),
                file_path=self.file_path,
                char=err.char,
            )

        # A string only fails to lex when its line or the file ends before the closing quote.
        newline = self.source.find("\n", err.pos_in_stream)
        end = newline if newline != -1 else len(self.source)
        if newline != -1:
            reason = "found a newline before the closing quote; keep strings on one line"
        else:
            reason = f"reached the end of the file before the closing {err.char}"

        span = Span(
            s_line=err.line,
            s_col=err.column,
            e_line=err.line,
            e_col=err.column + end - err.pos_in_stream,
            offset=err.pos_in_stream,
            file_path=self.file_path,
        )
        return LexError(ErrorCode.UNTERMINATED_STRING, span=span, file_path=self.file_path, reason=reason)

    def _span_at(self, offset: int, line: int, col: int) -> Span:
        return Span(s_line=line, s_col=col, e_line=line, e_col=col + 1, offset=offset, file_path=self.file_path)

    def _eof_token(self) -> Token:
        end = len(self.source)
        line = self.source.count("\n") + 1
        col = end - self.source.rfind("\n")
        return Token(EOF_TOKEN, "", start_pos=end, line=line, column=col, end_line=line, end_column=col, end_pos=end)


def tokenize(source: str, file_path: Optional[str] = None) -> List[Token]:
    """Lexes a whole source unit, EOF token included."""
    return list(Lexer(source, file_path))
