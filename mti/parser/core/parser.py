from typing import List, Optional

from lark import Token, Transformer_NonRecursive
from lark.exceptions import UnexpectedToken, VisitError

from mti.config.config import EOF_TOKEN, STRING_ESCAPES
from mti.exceptions import ErrorCode, MethodicError, ParseError
from mti.lexer.lexer import Lexer
from mti.utils import unlimited_int_digits

from ..helpers import _translate_lark_error, span_from_token
from .classes import *
from .grammar import LARK_PARSER


def _decode_string(raw: str) -> str:
    """Strips the quotes of a STRING token and resolves its backslash escapes."""
    body = raw[1:-1]
    chars = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            escaped = body[i + 1]
            chars.append(STRING_ESCAPES.get(escaped, "\\" + escaped))
            i += 2
            continue
        chars.append(char)
        i += 1
    return "".join(chars)


class MethodicTransformer(Transformer_NonRecursive):
    """
    Transforms the Lark parse tree into the pydantic AST.
    Each method declared inside this class is called whenever the Lark parser
    produced a rule, alias or terminal with the same name; the transformation
    starts from the bottom (atoms) and works upwards without recursing, so long
    operator chains do not exhaust the Python stack.
    Dotted calls are desugared here: the receiver becomes the first argument.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__()

    # --- Helper methods for creating spans ---
    def _create_span_from_token(self, token: Token) -> Span:
        return span_from_token(token, self.file_path)

    def _get_span_from_items(self, items: list) -> Span:
        """Calculates a Span that covers a list of tokens and/or ASTNodes."""
        located = [item for item in items if isinstance(item, (ASTNode, Token))]
        if not located:  # Handle empty lists
            return Span(s_line=1, s_col=1, e_line=1, e_col=1, file_path=self.file_path)

        first, last = located[0], located[-1]
        first_span = first.span if isinstance(first, ASTNode) else self._create_span_from_token(first)
        last_span = last.span if isinstance(last, ASTNode) else self._create_span_from_token(last)

        return Span(
            s_line=first_span.s_line,
            s_col=first_span.s_col,
            e_line=last_span.e_line,
            e_col=last_span.e_col,
            offset=first_span.offset,
            file_path=self.file_path,
        )

    # --- Terminal Transformations ---
    def NAME(self, n: Token):
        return Identifier(name=n.value, span=self._create_span_from_token(n))

    def INT(self, n: Token):
        with unlimited_int_digits():
            value = int(n.value.replace("_", ""))
        return IntegerLiteral(value=value, span=self._create_span_from_token(n))

    def FLOAT(self, n: Token):
        return FloatLiteral(value=float(n.value.replace("_", "")), span=self._create_span_from_token(n))

    def STRING(self, s: Token):
        return StringLiteral(value=_decode_string(s.value), span=self._create_span_from_token(s))

    def TRUE(self, t: Token):
        return BooleanLiteral(value=True, span=self._create_span_from_token(t))

    def FALSE(self, f: Token):
        return BooleanLiteral(value=False, span=self._create_span_from_token(f))

    def IT(self, t: Token):
        return ImplicitSubject(span=self._create_span_from_token(t))

    # --- Rule Transformations ---
    def binary_op(self, items):
        left, op, right = items
        # `/=` is an alternative spelling of `!=`.
        operator = "!=" if op.type == "NE" else op.value
        return BinaryOp(operator=operator, left=left, right=right, span=self._get_span_from_items(items))

    def negation(self, items):
        return Negation(operand=items[1], span=self._get_span_from_items(items))

    def arguments(self, items):
        return list(items)

    def call(self, items):
        name_ident, args = items
        return Call(callee=name_ident.name, args=args or [], span=self._get_span_from_items([name_ident] + (args or [])))

    def dotted_call(self, items):
        receiver, name_ident = items
        return Call(callee=name_ident.name, args=[receiver], span=self._get_span_from_items(items))

    def dotted_call_with_arguments(self, items):
        receiver, name_ident, args = items
        return Call(callee=name_ident.name, args=[receiver] + (args or []), span=self._get_span_from_items([receiver, name_ident] + (args or [])))

    def when_clause(self, items):
        _when_token, predicate, result = items
        return WhenClause(predicate=predicate, result=result, span=self._get_span_from_items(items))

    def default_clause(self, items):
        _default_token, result = items
        return DefaultClause(result=result, span=self._get_span_from_items(items))

    def clauses(self, items):
        return list(items)

    def given_expression(self, items):
        given_token, subject, clauses = items
        when_clauses: List[WhenClause] = []
        default: Optional[DefaultClause] = None

        for clause in clauses or []:
            if isinstance(clause, DefaultClause):
                if default is not None:
                    raise ParseError(ErrorCode.DUPLICATE_DEFAULT, span=clause.span, file_path=self.file_path)
                default = clause
            elif default is not None:
                raise ParseError(
                    ErrorCode.UNEXPECTED_TOKEN,
                    span=clause.span,
                    file_path=self.file_path,
                    details="A 'when' clause cannot follow the 'default' clause.",
                )
            else:
                when_clauses.append(clause)

        return Given(subject=subject, clauses=when_clauses, default=default, span=self._get_span_from_items([given_token, subject] + (clauses or [])))

    def statement(self, items):
        return items[0]

    def block(self, items):
        return list(items)

    def parameters(self, items):
        return list(items)

    def method_def(self, items):
        method_token, name_ident, params, body = items
        params = params or []

        seen = set()
        for param in params:
            if param.name in seen:
                raise ParseError(ErrorCode.DUPLICATE_PARAMETER, span=param.span, file_path=self.file_path, name=param.name, method=name_ident.name)
            seen.add(param.name)

        return MethodDef(name=name_ident, params=params, body=body, span=self._get_span_from_items([method_token, name_ident] + params + body))

    def start(self, children):
        span = self._get_span_from_items(children)
        method_definitions = [c for c in children if isinstance(c, MethodDef)]

        seen = set()
        for method_def in method_definitions:
            if method_def.name.name in seen:
                raise ParseError(ErrorCode.DUPLICATE_METHOD, span=method_def.name.span, file_path=self.file_path, name=method_def.name.name)
            seen.add(method_def.name.name)

        return Program(
            file_path=self.file_path,
            method_definitions=method_definitions,
            statements=[c for c in children if not isinstance(c, MethodDef)],
            span=span,
        )


def parse_methodic(source: str, file_path: str = "<stdin>") -> Program:
    """
    Parses Methodic source and transforms it into the AST.

    Tokens are pulled lazily from the lexer and fed one by one to lark's LALR
    parser, so a LexError surfaces at the point the lexer reaches it.
    """
    interactive = LARK_PARSER.parse_interactive("")
    open_blocks = 0
    previous: Optional[Token] = None

    try:
        for token in Lexer(source, file_path):
            if token.type == EOF_TOKEN:
                parse_tree = interactive.feed_eof(token)
                break

            interactive.feed_token(token)
            if token.type == "_LBRACE":
                open_blocks += 1
            elif token.type == "_RBRACE":
                open_blocks -= 1
            previous = token

        return MethodicTransformer(file_path=file_path).transform(parse_tree)
    except VisitError as e:
        # Errors raised inside the transformer come wrapped by lark.
        if isinstance(e.orig_exc, MethodicError):
            raise e.orig_exc from None
        raise
    except UnexpectedToken as e:
        raise _translate_lark_error(e, file_path=file_path, open_blocks=open_blocks, previous=previous) from e
