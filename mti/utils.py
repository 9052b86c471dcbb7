"""
Utility functions for the Methodic interpreter, including terminal coloring,
and a JSON artifact serializer.
"""

import json
import sys
from contextlib import contextmanager

from lark import Token
from pydantic import BaseModel


class TerminalColors:
    RED = "\033[91m"
    GREEN = "\033[92m"
    RESET = "\033[0m"


@contextmanager
def unlimited_int_digits():
    """Lifts the int/str conversion digit limit of Python 3.11+ for the duration of the block."""
    if not hasattr(sys, "set_int_max_str_digits"):
        yield
        return

    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(0)
    try:
        yield
    finally:
        sys.set_int_max_str_digits(previous)


def token_to_dict(token: Token) -> dict:
    # Tokens are str subclasses, so json would otherwise dump only their text.
    return {"type": token.type, "value": token.value, "line": token.line, "column": token.column, "offset": token.start_pos}


class InterpreterArtifactEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, BaseModel):
            # Built-in methods hold a Python callable, which has no JSON form.
            return o.model_dump(mode="json", exclude={"function"})
        return super().default(o)
