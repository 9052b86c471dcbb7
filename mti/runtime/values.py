"""
Runtime values produced by the evaluator.

Every value is a frozen pydantic model, so equality is structural and a value
never changes once built. `Int(value=1) == Float(value=1.0)` is False: kinds
are never coerced into each other.
"""

from typing import Callable, ClassVar

from pydantic import BaseModel, ConfigDict, StrictBool, StrictFloat, StrictInt, StrictStr

from mti.parser.core.classes import MethodDef
from mti.utils import unlimited_int_digits


class Value(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ClassVar[str] = "value"

    def render(self) -> str:
        """Textual form written by `print`."""
        raise NotImplementedError


class Int(Value):
    kind: ClassVar[str] = "integer"
    value: StrictInt

    def render(self) -> str:
        with unlimited_int_digits():
            return str(self.value)


class Float(Value):
    kind: ClassVar[str] = "float"
    value: StrictFloat

    def render(self) -> str:
        return repr(self.value)


class Bool(Value):
    kind: ClassVar[str] = "boolean"
    value: StrictBool

    def render(self) -> str:
        return "true" if self.value else "false"


class Str(Value):
    kind: ClassVar[str] = "string"
    value: StrictStr

    def render(self) -> str:
        return self.value


class Nil(Value):
    kind: ClassVar[str] = "nil"

    def render(self) -> str:
        return "nil"


class Method(Value):
    """A user-defined method closed over the scope it was defined in."""

    kind: ClassVar[str] = "method"
    definition: MethodDef
    scope: int

    @property
    def name(self) -> str:
        return self.definition.name.name

    @property
    def params(self):
        return [param.name for param in self.definition.params]

    @property
    def arity(self) -> int:
        return len(self.definition.params)

    def render(self) -> str:
        return f"<method {self.name}/{self.arity}>"


class Builtin(Value):
    """A method implemented in Python; `function` receives the evaluated arguments."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ClassVar[str] = "method"
    name: str
    arity: int
    function: Callable

    def render(self) -> str:
        return f"<builtin {self.name}/{self.arity}>"


NIL = Nil()
TRUE = Bool(value=True)
FALSE = Bool(value=False)


def from_bool(flag: bool) -> Bool:
    return TRUE if flag else FALSE
