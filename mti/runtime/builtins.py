"""
Built-in methods bound in the global scope before any user definition.
"""

from typing import List, TextIO

from .values import Builtin, Value


def make_print(output: TextIO) -> Builtin:
    """`print(x)` writes the rendering of `x` and a newline to `output`, then returns `x`."""

    def _print(value: Value) -> Value:
        output.write(value.render() + "\n")
        return value

    return Builtin(name="print", arity=1, function=_print)


def make_builtins(output: TextIO) -> List[Builtin]:
    return [make_print(output)]
