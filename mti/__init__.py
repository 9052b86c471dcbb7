"""
Methodic: an interpreter for a small language of methods, receiver-first call
chains and `given`/`when`/`default` guarded clauses.

Embedding hosts only need two calls:

    program = mti.parse(source)
    values = mti.evaluate(program, output=sys.stdout)
"""

from typing import List, Optional, TextIO

from .parser.core.classes import Program
from .parser.core.parser import parse_methodic
from .runtime.evaluator import evaluate as _evaluate
from .runtime.values import Value


def parse(source: str, file_path: Optional[str] = None) -> Program:
    """Parses source text into a Program, raising LexError or ParseError."""
    return parse_methodic(source, file_path=file_path or "<stdin>")


def evaluate(program: Program, output: Optional[TextIO] = None) -> List[Value]:
    """Runs a Program, writing `print` output to `output` (stdout by default)."""
    return _evaluate(program, output=output)
