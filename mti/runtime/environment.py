"""
Scope storage for the evaluator.

Scopes live in a single arena and refer to their parent by integer handle.
A method value only stores the handle of the scope it closes over, so the
global scope can hold methods that close over the global scope without any
object referencing itself.
"""

from typing import Dict, List, Optional

from .values import Value


class Scope:
    __slots__ = ("bindings", "parent")

    def __init__(self, parent: Optional[int] = None):
        self.bindings: Dict[str, Value] = {}
        self.parent = parent


class Environment:
    """
    Arena of scopes. Handle 0 is the global scope, created with the arena and
    alive for as long as the arena is.
    """

    GLOBAL = 0

    def __init__(self):
        self._scopes: List[Optional[Scope]] = [Scope()]
        self._free: List[int] = []

    def new_scope(self, parent: int) -> int:
        """Allocates an empty child scope of `parent` and returns its handle."""
        self._get(parent)
        scope = Scope(parent)
        if self._free:
            handle = self._free.pop()
            self._scopes[handle] = scope
        else:
            handle = len(self._scopes)
            self._scopes.append(scope)
        return handle

    def drop_scope(self, handle: int):
        """Releases a scope created by `new_scope`; its handle may be reused."""
        if handle == self.GLOBAL:
            raise ValueError("The global scope cannot be released.")
        self._get(handle)
        self._scopes[handle] = None
        self._free.append(handle)

    def bind(self, handle: int, name: str, value: Value):
        """Binds `name` in the given scope only; outer scopes are never touched."""
        self._get(handle).bindings[name] = value

    def lookup(self, handle: int, name: str) -> Optional[Value]:
        """Walks from `handle` to the global scope and returns the first binding of `name`."""
        current: Optional[int] = handle
        while current is not None:
            scope = self._get(current)
            if name in scope.bindings:
                return scope.bindings[name]
            current = scope.parent
        return None

    def live_scopes(self) -> int:
        return sum(1 for scope in self._scopes if scope is not None)

    def _get(self, handle: int) -> Scope:
        scope = self._scopes[handle] if 0 <= handle < len(self._scopes) else None
        if scope is None:
            raise KeyError(f"No live scope with handle {handle}.")
        return scope
