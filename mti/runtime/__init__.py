from .environment import Environment
from .evaluator import Evaluator, evaluate
from .values import NIL, Bool, Builtin, Float, Int, Method, Nil, Str, Value

__all__ = ["Environment", "Evaluator", "evaluate", "NIL", "Bool", "Builtin", "Float", "Int", "Method", "Nil", "Str", "Value"]
