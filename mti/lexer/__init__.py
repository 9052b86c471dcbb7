from .lexer import Lexer, tokenize

__all__ = ["Lexer", "tokenize"]
